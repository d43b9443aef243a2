"""
Mindful Moments services

ServiceManager builds every service from an AppConfig and wires them
together: completed sessions and breathing exercises feed the statistics
engine, and preference changes persist all stores.
"""

import logging
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler

from mindful.config import AppConfig
from mindful.core.achievements import AchievementManager
from mindful.core.storage import KeyValueStore, PersistenceGateway, StorageError
from .audio_service import AmbientSoundPlayer, AudioBackend, BackgroundMusicPlayer, NullAudioBackend
from .breathing_service import BreathingCompletedEvent, BreathingExerciseDriver
from .catalog_service import CatalogStore
from .notifications import NotificationScheduler, NotificationSink, PermissionProvider
from .player_service import SessionCompletedEvent, SessionPlayer
from .preferences_service import PreferenceStore
from .statistics_service import StatisticsEngine

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Owns the lifetime of all services

    Platform ports (audio output, notification permission and delivery)
    and the scheduler can be injected; the defaults are silent.
    """

    def __init__(self, config: Optional[AppConfig] = None,
                 audio_backend: Optional[AudioBackend] = None,
                 scheduler: Optional[BaseScheduler] = None,
                 permissions: Optional[PermissionProvider] = None,
                 sink: Optional[NotificationSink] = None,
                 clock: Optional[Callable] = None,
                 use_clock: bool = True):
        self.config = config or AppConfig()
        self.config.validate()

        self.audio_backend = audio_backend or NullAudioBackend()
        self.scheduler = scheduler or AsyncIOScheduler(timezone=self.config.timezone)
        self.permissions = permissions
        self.sink = sink
        self.clock = clock
        self.use_clock = use_clock

        self.gateway: Optional[PersistenceGateway] = None
        self.catalog: Optional[CatalogStore] = None
        self.statistics: Optional[StatisticsEngine] = None
        self.preferences: Optional[PreferenceStore] = None
        self.notifications: Optional[NotificationScheduler] = None
        self.ambient: Optional[AmbientSoundPlayer] = None
        self.music: Optional[BackgroundMusicPlayer] = None
        self.player: Optional[SessionPlayer] = None
        self.breathing: Optional[BreathingExerciseDriver] = None
        self.initialized = False

    async def initialize_services(self) -> bool:
        """Load the stores, reconcile the daily reminder and start the scheduler"""
        try:
            logger.info("🔧 Initializing Mindful Moments services...")
            self.config.ensure_directories()

            # 1. Storage
            logger.info("📂 Loading stores...")
            storage = self.config.storage
            self.gateway = PersistenceGateway(
                KeyValueStore(storage.data_dir, keep_corrupted=storage.keep_corrupted_blobs),
                catalog_key=storage.catalog_key,
                statistics_key=storage.statistics_key,
                preferences_key=storage.preferences_key
            )
            self.catalog = CatalogStore.load(self.gateway)
            self.statistics = StatisticsEngine.load(
                self.gateway, self.catalog, achievements=AchievementManager(), clock=self.clock,
                timezone=self.config.timezone
            )

            # 2. Audio and notifications
            self.ambient = AmbientSoundPlayer(
                self.audio_backend, self.config.audio.assets_dir, volume=self.config.audio.ambient_volume
            )
            self.music = BackgroundMusicPlayer(self.audio_backend, self.config.audio.assets_dir)
            self.notifications = NotificationScheduler(
                self.scheduler,
                config=self.config.notifications,
                permissions=self.permissions,
                sink=self.sink,
                timezone=self.config.timezone
            )

            # 3. Preferences, persisted together with the other stores
            self.preferences = PreferenceStore.load(
                self.gateway,
                notifications=self.notifications,
                music=self.music,
                persist=self.save_all
            )

            # 4. Session player and breathing driver
            self.player = SessionPlayer(
                self.preferences, self.ambient, self.music,
                tick_interval=self.config.tick_interval, use_clock=self.use_clock
            )
            self.player.add_completion_callback(self._on_session_completed)

            self.breathing = BreathingExerciseDriver(
                tick_interval=self.config.tick_interval, use_clock=self.use_clock
            )
            self.breathing.add_completion_callback(self._on_breathing_completed)

            # 5. Scheduler and launch-time reconciliation
            if not self.scheduler.running:
                self.scheduler.start()
            await self.preferences.update_preferences(self.preferences.preferences)

            self.initialized = True
            logger.info("✅ All services initialized")
            return True

        except (StorageError, OSError, ValueError) as e:
            logger.error(f"❌ Failed to initialize services: {e}")
            self.close_services()
            return False

    # ===== EVENT WIRING =====

    def _on_session_completed(self, event: SessionCompletedEvent) -> None:
        self.statistics.record_session(event.entry_id, event.actual_duration)

    def _on_breathing_completed(self, event: BreathingCompletedEvent) -> None:
        self.statistics.record_breathing_session(event.duration)

    # ===== LIFECYCLE =====

    def save_all(self) -> None:
        if self.gateway is None:
            return
        self.gateway.save_all(
            self.catalog.entries,
            self.statistics.statistics,
            self.preferences.preferences
        )

    def on_app_background(self) -> None:
        """App moved to the background: flush every store"""
        logger.info("💤 App in background, saving all stores")
        self.save_all()

    def get_services_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "initialized": self.initialized,
            "config": self.config.to_dict(),
            "services": {}
        }

        if self.catalog:
            info["services"]["catalog"] = {"status": "active", "entries": len(self.catalog)}

        if self.statistics:
            info["services"]["statistics"] = {"status": "active", **self.statistics.summary()}

        if self.notifications:
            next_fire = self.notifications.next_fire_time()
            info["services"]["notifications"] = {
                "status": "active",
                "scheduled": self.notifications.is_scheduled(),
                "next_fire_time": next_fire.isoformat() if next_fire else None
            }

        if self.player:
            info["services"]["player"] = self.player.snapshot()

        if self.gateway:
            info["services"]["storage"] = self.gateway.get_stats()

        return info

    def health_check(self) -> Dict[str, Any]:
        health: Dict[str, Any] = {"status": "healthy", "services": {}}

        if self.gateway:
            storage_stats = self.gateway.get_stats()
            health["services"]["storage"] = {
                "status": "warning" if storage_stats["error_count"] else "healthy",
                **storage_stats
            }

        health["services"]["scheduler"] = {
            "status": "healthy" if self.scheduler.running or not self.initialized else "error"
        }

        service_statuses = [s.get("status", "unknown") for s in health["services"].values()]
        if "error" in service_statuses:
            health["status"] = "error"
        elif "warning" in service_statuses:
            health["status"] = "warning"

        return health

    def close_services(self) -> None:
        logger.info("🛑 Closing services...")

        # Reverse order of initialization
        if self.breathing:
            self.breathing.stop()
            self.breathing = None

        if self.player:
            self.player.reset()
            self.player = None

        if self.music:
            self.music.stop()

        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        if self.gateway and self.catalog and self.statistics and self.preferences:
            try:
                self.save_all()
            except StorageError as e:
                logger.error(f"❌ Failed to save stores on close: {e}")

        self.initialized = False
        logger.info("✅ All services closed")


__all__ = [
    'ServiceManager',
    'CatalogStore',
    'StatisticsEngine',
    'PreferenceStore',
    'NotificationScheduler',
    'SessionPlayer',
    'BreathingExerciseDriver',
    'AmbientSoundPlayer',
    'BackgroundMusicPlayer'
]
