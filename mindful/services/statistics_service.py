"""
Statistics engine: session log, streaks, mindful time and achievements
"""

import logging
from datetime import datetime, date, timedelta
from typing import Any, Callable, Dict, List, Optional

from mindful.core.achievements import AchievementManager
from mindful.core.models import Achievement, MeditationEntry, SessionRecord, UserStatistics
from mindful.core.storage import PersistenceGateway
from mindful.services.catalog_service import CatalogStore
from mindful.utils.datetime_utils import DEFAULT_TZ, now_in

logger = logging.getLogger(__name__)


class StatisticsEngine:
    """
    Sole writer of UserStatistics.

    The session log is the authoritative usage counter: every path that
    counts a use of an entry goes through record_session(), so
    entry_session_counts always matches the log.
    """

    def __init__(self, gateway: PersistenceGateway, catalog: CatalogStore,
                 statistics: Optional[UserStatistics] = None,
                 achievements: Optional[AchievementManager] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 timezone=None):
        self.gateway = gateway
        self.catalog = catalog
        self.statistics = statistics if statistics is not None else UserStatistics()
        self.achievements = achievements or AchievementManager()
        self.clock = clock or now_in
        self.timezone = timezone or DEFAULT_TZ

    @classmethod
    def load(cls, gateway: PersistenceGateway, catalog: CatalogStore, **kwargs) -> "StatisticsEngine":
        return cls(gateway, catalog, statistics=gateway.load_statistics(), **kwargs)

    def _now(self) -> datetime:
        """Current time in the user's zone; calendar days are taken from it"""
        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(self.timezone)
        return now

    # ===== RECORDING =====

    def record_session(self, entry_id: str, duration: float) -> SessionRecord:
        """Log a completed session and update every derived counter"""
        now = self._now()
        duration = max(0.0, float(duration))

        record = SessionRecord.create(entry_id, duration, ended_at=now)
        self.statistics.session_history.append(record)

        self.catalog.record_completion(entry_id, duration, now)

        counts = self.statistics.entry_session_counts
        counts[entry_id] = counts.get(entry_id, 0) + 1
        self.statistics.total_mindful_seconds += duration

        self._update_streak(now.date())
        self.check_achievements(persist=False)
        self.save()

        logger.info(f"🧘 Session recorded for {entry_id}: {duration:.0f}s, streak {self.statistics.current_streak}")
        return record

    def record_breathing_session(self, duration: float) -> None:
        """Breathing exercises count as mindful time only"""
        self.statistics.total_mindful_seconds += max(0.0, float(duration))
        self.check_achievements(persist=False)
        self.save()
        logger.info(f"🌬️ Breathing session logged: {duration:.0f}s")

    def increment_usage_count(self, entry: MeditationEntry) -> SessionRecord:
        """Count one full-length use of an entry"""
        return self.record_session(entry.entry_id, entry.duration)

    # ===== STREAKS =====

    def _update_streak(self, today: date) -> None:
        stats = self.statistics
        last_day = stats.last_session_day

        if last_day is None:
            stats.current_streak = 1
        elif last_day == today:
            pass
        elif last_day == today - timedelta(days=1):
            stats.current_streak += 1
        else:
            stats.current_streak = 1

        stats.last_session_date = today.isoformat()
        stats.longest_streak = max(stats.longest_streak, stats.current_streak)

    # ===== ACHIEVEMENTS =====

    def check_achievements(self, persist: bool = True) -> List[Achievement]:
        unlocked = self.achievements.check_achievements(self.statistics, self._now())
        if persist:
            self.save()
        return unlocked

    # ===== MAINTENANCE =====

    def set_daily_goal(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("daily goal must be positive")
        self.statistics.daily_goal_seconds = float(seconds)
        self.save()

    def reset_all(self) -> None:
        self.statistics = UserStatistics()
        self.save()
        logger.info("🧹 All user statistics have been reset")

    def save(self) -> None:
        self.gateway.save_statistics(self.statistics)

    def summary(self) -> Dict[str, Any]:
        """Numbers for the statistics screen"""
        stats = self.statistics
        today = self._now().date()
        return {
            "total_sessions": stats.total_sessions,
            "total_mindful_seconds": stats.total_mindful_seconds,
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
            "daily_goal_seconds": stats.daily_goal_seconds,
            "daily_goal_progress": stats.daily_goal_progress(today),
            "weekly_seconds": stats.weekly_seconds(today),
            "achievements": [a.achievement_id for a in stats.achievements],
            "achievement_progress": self.achievements.progress_report(stats, today)
        }
