#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0 - Achievement System
Configurable unlock predicates evaluated against user statistics

Version: 1.0.0
"""

from datetime import datetime, date
from typing import Dict, List, Optional, Callable, Tuple
from dataclasses import dataclass, field
from enum import Enum
from abc import ABC, abstractmethod
import logging

from mindful.core.models import Achievement, UserStatistics

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class AchievementCategory(Enum):
    """Achievement categories"""
    MILESTONES = "milestones"
    STREAKS = "streaks"
    MINDFUL_TIME = "mindful_time"
    GOALS = "goals"

# ===== DATA CLASSES =====

@dataclass
class AchievementDefinition:
    """Static description of an achievement"""
    achievement_id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    hidden: bool = False
    prerequisites: List[str] = field(default_factory=list)

    def to_achievement(self, when: Optional[datetime] = None) -> Achievement:
        """Build the unlocked achievement stored in user statistics"""
        achievement = Achievement(
            achievement_id=self.achievement_id,
            title=self.title,
            description=self.description,
            icon=self.icon
        )
        achievement.unlock(when)
        return achievement

@dataclass
class CheckContext:
    """Extra inputs a checker may need besides the statistics"""
    today: date

# ===== ACHIEVEMENT CHECKERS =====

class AchievementChecker(ABC):
    """Base class for unlock predicates"""

    @abstractmethod
    def check(self, stats: UserStatistics, context: CheckContext) -> bool:
        """Is the unlock condition satisfied"""
        pass

    @abstractmethod
    def get_progress(self, stats: UserStatistics, context: CheckContext) -> Tuple[float, float]:
        """(current, target)"""
        pass

class ThresholdChecker(AchievementChecker):
    """A statistic reaching a threshold"""

    def __init__(self, target: float, value_getter: Callable[[UserStatistics], float]):
        self.target = target
        self.value_getter = value_getter

    def check(self, stats: UserStatistics, context: CheckContext) -> bool:
        return self.value_getter(stats) >= self.target

    def get_progress(self, stats: UserStatistics, context: CheckContext) -> Tuple[float, float]:
        return min(self.target, self.value_getter(stats)), self.target

class StreakChecker(ThresholdChecker):
    """Consecutive-day streak"""

    def __init__(self, target_streak: int):
        super().__init__(target_streak, lambda stats: stats.longest_streak)

class ConditionalChecker(AchievementChecker):
    """Arbitrary condition over statistics and context"""

    def __init__(self, condition_func: Callable[[UserStatistics, CheckContext], bool],
                 progress_func: Optional[Callable[[UserStatistics, CheckContext], Tuple[float, float]]] = None):
        self.condition_func = condition_func
        self.progress_func = progress_func

    def check(self, stats: UserStatistics, context: CheckContext) -> bool:
        return self.condition_func(stats, context)

    def get_progress(self, stats: UserStatistics, context: CheckContext) -> Tuple[float, float]:
        if self.progress_func:
            return self.progress_func(stats, context)
        return (1 if self.check(stats, context) else 0, 1)

# ===== ACHIEVEMENT REGISTRY =====

class AchievementRegistry:
    """Table of every achievement and its predicate"""

    def __init__(self, load_defaults: bool = True):
        self.achievements: Dict[str, AchievementDefinition] = {}
        self.checkers: Dict[str, AchievementChecker] = {}
        if load_defaults:
            self._load_default_achievements()

    def register_achievement(self, definition: AchievementDefinition,
                             checker: AchievementChecker) -> None:
        self.achievements[definition.achievement_id] = definition
        self.checkers[definition.achievement_id] = checker
        logger.debug(f"Registered achievement: {definition.achievement_id}")

    def get_checker(self, achievement_id: str) -> Optional[AchievementChecker]:
        return self.checkers.get(achievement_id)

    def _load_default_achievements(self):
        """Default achievement table"""

        # ===== MILESTONES =====

        self.register_achievement(
            AchievementDefinition(
                achievement_id="first_session",
                title="First Steps",
                description="Complete your first meditation",
                icon="leaf.fill",
                category=AchievementCategory.MILESTONES
            ),
            ThresholdChecker(1, lambda stats: stats.total_sessions)
        )

        self.register_achievement(
            AchievementDefinition(
                achievement_id="sessions_10",
                title="Regular Practice",
                description="Complete 10 meditations",
                icon="sparkles",
                category=AchievementCategory.MILESTONES,
                prerequisites=["first_session"]
            ),
            ThresholdChecker(10, lambda stats: stats.total_sessions)
        )

        self.register_achievement(
            AchievementDefinition(
                achievement_id="sessions_50",
                title="Devoted",
                description="Complete 50 meditations",
                icon="star.circle.fill",
                category=AchievementCategory.MILESTONES,
                prerequisites=["sessions_10"]
            ),
            ThresholdChecker(50, lambda stats: stats.total_sessions)
        )

        # ===== STREAKS =====

        for days, title, icon in ((3, "Getting Started", "flame"),
                                  (7, "One Week Calm", "flame.fill"),
                                  (30, "Month of Mindfulness", "crown.fill")):
            self.register_achievement(
                AchievementDefinition(
                    achievement_id=f"streak_{days}",
                    title=title,
                    description=f"Meditate {days} days in a row",
                    icon=icon,
                    category=AchievementCategory.STREAKS
                ),
                StreakChecker(days)
            )

        # ===== MINDFUL TIME =====

        self.register_achievement(
            AchievementDefinition(
                achievement_id="mindful_hour",
                title="Mindful Hour",
                description="Spend one hour in mindfulness",
                icon="clock.fill",
                category=AchievementCategory.MINDFUL_TIME
            ),
            ThresholdChecker(3600, lambda stats: stats.total_mindful_seconds)
        )

        self.register_achievement(
            AchievementDefinition(
                achievement_id="mindful_10_hours",
                title="Inner Peace",
                description="Spend ten hours in mindfulness",
                icon="hourglass",
                category=AchievementCategory.MINDFUL_TIME,
                hidden=True,
                prerequisites=["mindful_hour"]
            ),
            ThresholdChecker(36000, lambda stats: stats.total_mindful_seconds)
        )

        # ===== GOALS =====

        self.register_achievement(
            AchievementDefinition(
                achievement_id="daily_goal",
                title="Goal Reached",
                description="Reach your daily meditation goal",
                icon="target",
                category=AchievementCategory.GOALS
            ),
            ConditionalChecker(
                lambda stats, ctx: stats.daily_goal_progress(ctx.today) >= 1.0,
                lambda stats, ctx: (stats.seconds_on(ctx.today), stats.daily_goal_seconds)
            )
        )

# ===== ACHIEVEMENT MANAGER =====

class AchievementManager:
    """Evaluates the registry and unlocks achievements"""

    def __init__(self, registry: Optional[AchievementRegistry] = None):
        self.registry = registry or AchievementRegistry()
        self.notification_callbacks: List[Callable[[Achievement], None]] = []

    def add_notification_callback(self, callback: Callable[[Achievement], None]) -> None:
        self.notification_callbacks.append(callback)

    def check_achievements(self, stats: UserStatistics, now: Optional[datetime] = None) -> List[Achievement]:
        """Unlock every newly satisfied achievement; returns the new ones"""
        now = now or datetime.now()
        context = CheckContext(today=now.date())
        unlocked: List[Achievement] = []

        # Registry order is significant: prerequisites are registered first
        for achievement_id, definition in self.registry.achievements.items():
            if stats.has_achievement(achievement_id):
                continue

            if not self._check_prerequisites(stats, definition):
                continue

            checker = self.registry.get_checker(achievement_id)
            if not checker:
                continue

            try:
                if not checker.check(stats, context):
                    continue
            except (ArithmeticError, TypeError, ValueError) as e:
                logger.error(f"Error checking achievement {achievement_id}: {e}")
                continue

            achievement = definition.to_achievement(now)
            stats.achievements.append(achievement)
            unlocked.append(achievement)
            logger.info(f"🏆 Achievement unlocked: {achievement_id}")

        for achievement in unlocked:
            self._notify(achievement)

        return unlocked

    def get_progress(self, stats: UserStatistics, achievement_id: str,
                     today: Optional[date] = None) -> Optional[float]:
        """Progress towards an achievement in percent"""
        checker = self.registry.get_checker(achievement_id)
        if checker is None:
            return None
        current, target = checker.get_progress(stats, CheckContext(today=today or date.today()))
        if target == 0:
            return 100.0
        return min(100.0, current / target * 100)

    def progress_report(self, stats: UserStatistics, today: Optional[date] = None) -> Dict[str, float]:
        """Percent progress per achievement; hidden ones appear once unlocked"""
        report: Dict[str, float] = {}
        for definition in self.registry.achievements.values():
            if definition.hidden and not stats.has_achievement(definition.achievement_id):
                continue
            report[definition.achievement_id] = self.get_progress(stats, definition.achievement_id, today)
        return report

    def _check_prerequisites(self, stats: UserStatistics, definition: AchievementDefinition) -> bool:
        return all(stats.has_achievement(prereq_id) for prereq_id in definition.prerequisites)

    def _notify(self, achievement: Achievement) -> None:
        for callback in self.notification_callbacks:
            try:
                callback(achievement)
            except Exception as e:
                logger.error(f"Achievement notification callback failed: {e}")

__all__ = [
    'AchievementCategory',
    'AchievementDefinition',
    'CheckContext',
    'AchievementChecker',
    'ThresholdChecker',
    'StreakChecker',
    'ConditionalChecker',
    'AchievementRegistry',
    'AchievementManager'
]
