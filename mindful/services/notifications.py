"""
Daily reminder scheduling
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from mindful.config import NotificationConfig
from mindful.core.models import UserPreferences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderNotification:
    """What the OS shows when the reminder fires"""
    identifier: str
    title: str
    body: str


class PermissionProvider(ABC):
    """Port for the platform notification permission"""

    @abstractmethod
    async def request(self) -> bool:
        """Ask for permission; True when granted"""
        pass

    @abstractmethod
    async def is_authorized(self) -> bool:
        """Current authorization status, without prompting"""
        pass


class GrantedPermissionProvider(PermissionProvider):
    """Platforms without a permission model"""

    async def request(self) -> bool:
        return True

    async def is_authorized(self) -> bool:
        return True


class NotificationSink(ABC):
    """Port that presents a local notification"""

    @abstractmethod
    def deliver(self, notification: ReminderNotification) -> Any:
        pass


class LoggingNotificationSink(NotificationSink):
    def deliver(self, notification: ReminderNotification) -> None:
        logger.info(f"🔔 {notification.title} {notification.body}")


class NotificationScheduler:
    """One repeating daily reminder under a fixed job id"""

    def __init__(self, scheduler: BaseScheduler, config: Optional[NotificationConfig] = None,
                 permissions: Optional[PermissionProvider] = None,
                 sink: Optional[NotificationSink] = None,
                 timezone=None):
        self.scheduler = scheduler
        self.config = config or NotificationConfig()
        self.permissions = permissions or GrantedPermissionProvider()
        self.sink = sink or LoggingNotificationSink()
        self.timezone = timezone or self.config.timezone
        self.denial_callbacks: List[Callable[[], None]] = []

    @property
    def reminder_id(self) -> str:
        return self.config.reminder_id

    def add_denial_callback(self, callback: Callable[[], None]) -> None:
        """Called once per denial, to tell the user why reminders were turned off"""
        self.denial_callbacks.append(callback)

    async def schedule(self, preferences: UserPreferences) -> bool:
        """Register (or replace) the daily reminder; needs authorization"""
        if not preferences.notifications_enabled:
            self.cancel()
            return False

        if not await self.permissions.is_authorized():
            logger.warning("⚠️ Notification permission not granted, reminder not scheduled")
            return False

        hour, minute = preferences.reminder_hour_minute()
        trigger = CronTrigger(hour=hour, minute=minute, second=0, timezone=self.timezone)

        # Remove first: a stopped scheduler keeps pending jobs in a list
        # where replace_existing is only applied on start
        self.cancel()
        self.scheduler.add_job(
            self._fire,
            trigger,
            id=self.reminder_id,
            name="daily reminder",
            replace_existing=True
        )
        logger.info(f"📅 Daily reminder scheduled for {hour:02d}:{minute:02d}")
        return True

    def cancel(self) -> bool:
        """Remove the pending reminder, if any"""
        try:
            self.scheduler.remove_job(self.reminder_id)
        except JobLookupError:
            return False
        logger.info("🔕 Daily reminder cancelled")
        return True

    async def reconcile(self, preferences: UserPreferences) -> UserPreferences:
        """
        Bring the scheduled reminder in line with the preferences.

        Returns the preferences to keep: unchanged, or with notifications
        turned off when permission was denied.
        """
        if not preferences.notifications_enabled:
            self.cancel()
            return preferences

        granted = await self.permissions.request()
        if granted:
            await self.schedule(preferences)
            return preferences

        self.cancel()
        for callback in self.denial_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"❌ Denial callback failed: {e}")
        return preferences.with_changes(notifications_enabled=False)

    def is_scheduled(self) -> bool:
        return self.scheduler.get_job(self.reminder_id) is not None

    def next_fire_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(self.reminder_id)
        if job is None:
            return None
        return getattr(job, "next_run_time", None)

    def build_notification(self) -> ReminderNotification:
        return ReminderNotification(
            identifier=self.reminder_id,
            title=self.config.title,
            body=self.config.body
        )

    async def _fire(self) -> None:
        try:
            result = self.sink.deliver(self.build_notification())
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to deliver daily reminder: {e}")
