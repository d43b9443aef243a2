"""
Tests for the daily reminder scheduler.
"""

import pytest
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from mindful.config import NotificationConfig
from mindful.core.models import UserPreferences
from mindful.services.notifications import NotificationScheduler


@pytest.fixture
async def scheduler():
    scheduler = AsyncIOScheduler(timezone=pytz.utc)
    scheduler.start()
    yield scheduler
    scheduler.shutdown(wait=False)


@pytest.fixture
def notifications(scheduler, permissions, sink):
    return NotificationScheduler(scheduler, permissions=permissions, sink=sink, timezone=pytz.utc)


class TestSchedule:
    async def test_schedules_at_reminder_time(self, notifications, scheduler):
        prefs = UserPreferences(daily_reminder_time="21:15")

        assert await notifications.schedule(prefs)

        job = scheduler.get_job("mindful_daily_reminder")
        assert job is not None
        assert (job.next_run_time.hour, job.next_run_time.minute, job.next_run_time.second) == (21, 15, 0)

    async def test_rescheduling_replaces_the_job(self, notifications, scheduler):
        await notifications.schedule(UserPreferences(daily_reminder_time="07:00"))
        await notifications.schedule(UserPreferences(daily_reminder_time="19:30"))

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        assert notifications.next_fire_time().hour == 19

    async def test_disabled_preferences_cancel(self, notifications):
        await notifications.schedule(UserPreferences())
        assert not await notifications.schedule(UserPreferences(notifications_enabled=False))
        assert not notifications.is_scheduled()

    async def test_unauthorized_does_not_schedule(self, scheduler, denied_permissions, sink):
        notifications = NotificationScheduler(scheduler, permissions=denied_permissions, sink=sink)

        assert not await notifications.schedule(UserPreferences())
        assert not notifications.is_scheduled()

    async def test_cancel(self, notifications):
        assert not notifications.cancel()
        await notifications.schedule(UserPreferences())

        assert notifications.cancel()
        assert notifications.next_fire_time() is None

    async def test_fire_delivers_configured_text(self, scheduler, permissions, sink):
        config = NotificationConfig(title="Breathe", body="Five minutes for you")
        notifications = NotificationScheduler(scheduler, config=config, permissions=permissions, sink=sink)

        await notifications._fire()

        assert len(sink.delivered) == 1
        assert sink.delivered[0].identifier == "mindful_daily_reminder"
        assert sink.delivered[0].title == "Breathe"


class TestReconcile:
    async def test_granted_schedules(self, notifications, permissions):
        prefs = UserPreferences()

        assert await notifications.reconcile(prefs) == prefs
        assert notifications.is_scheduled()
        assert permissions.request_count == 1

    async def test_disabled_skips_permission_prompt(self, notifications, permissions):
        prefs = UserPreferences(notifications_enabled=False)

        assert await notifications.reconcile(prefs) == prefs
        assert permissions.request_count == 0

    async def test_denial_turns_notifications_off(self, denied_permissions, sink):
        # Scheduler never started: jobs stay pending
        scheduler = AsyncIOScheduler(timezone=pytz.utc)
        notifications = NotificationScheduler(scheduler, permissions=denied_permissions, sink=sink)
        denials = []
        notifications.add_denial_callback(lambda: denials.append(True))

        corrected = await notifications.reconcile(UserPreferences())

        assert corrected.notifications_enabled is False
        assert denied_permissions.request_count == 1
        assert denials == [True]
        assert scheduler.get_jobs() == []
