"""
Preference store: explicit update with persistence, notification
reconciliation and music update, in that order
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from mindful.core.models import UserPreferences
from mindful.core.storage import PersistenceGateway

if TYPE_CHECKING:
    from mindful.services.audio_service import BackgroundMusicPlayer
    from mindful.services.notifications import NotificationScheduler

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Holds the single UserPreferences value"""

    def __init__(self, gateway: PersistenceGateway, preferences: Optional[UserPreferences] = None,
                 notifications: Optional["NotificationScheduler"] = None,
                 music: Optional["BackgroundMusicPlayer"] = None,
                 persist: Optional[Callable[[], None]] = None):
        self.gateway = gateway
        self._preferences = preferences or UserPreferences()
        self.notifications = notifications
        self.music = music
        self._persist = persist or self._save_own_blob
        self._updating = False
        self._pending = False

    @classmethod
    def load(cls, gateway: PersistenceGateway, **kwargs) -> "PreferenceStore":
        return cls(gateway, gateway.load_preferences(), **kwargs)

    @property
    def preferences(self) -> UserPreferences:
        return self._preferences

    async def update_preferences(self, new: UserPreferences) -> UserPreferences:
        """
        Replace the preferences and apply the side effects:

        1. persist
        2. reconcile the daily reminder; a permission denial turns
           notifications off once, without reconciling again
        3. update the background music layer

        A call made while another update is still applying its side
        effects only stores the value; the running update applies the
        side effects again for it before returning.
        """
        self._preferences = new
        self._persist()

        if self._updating:
            self._pending = True
            return new

        self._updating = True
        try:
            self._pending = True
            while self._pending:
                self._pending = False
                await self._apply_side_effects(self._preferences)
        finally:
            self._updating = False

        return self._preferences

    async def _apply_side_effects(self, target: UserPreferences) -> None:
        if self.notifications is not None:
            corrected = await self.notifications.reconcile(target)
            if corrected.notifications_enabled != target.notifications_enabled:
                logger.info("🔕 Notifications disabled after permission denial")
                self._preferences = self._preferences.with_changes(notifications_enabled=False)
                self._persist()

        if self.music is not None:
            self.music.update_playback(self._preferences)

    async def reset_to_defaults(self) -> UserPreferences:
        return await self.update_preferences(UserPreferences())

    def _save_own_blob(self) -> None:
        self.gateway.save_preferences(self._preferences)
