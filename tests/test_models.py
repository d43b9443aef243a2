"""
Tests for the core data models.
"""

from datetime import date, datetime

import pytest

from mindful.core.models import (
    AmbientSound,
    MeditationEntry,
    MusicTrack,
    SessionRecord,
    UserPreferences,
    UserStatistics,
    ValidationError,
    default_catalog,
)


class TestMeditationEntry:
    def test_create_assigns_unique_ids(self):
        a = MeditationEntry.create("Calm", 300)
        b = MeditationEntry.create("Calm", 300)
        assert a.entry_id != b.entry_id

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValidationError):
            MeditationEntry.create("Broken", 0)

    def test_rejects_unknown_category(self):
        with pytest.raises(ValidationError):
            MeditationEntry.create("Odd", 60, category="cardio")

    def test_record_completion_updates_progress(self):
        entry = MeditationEntry.create("Calm", 300)
        when = datetime(2024, 3, 10, 9, 30)

        entry.record_completion(120, when)

        assert entry.completed_sessions == 1
        assert entry.total_time_spent == 120
        assert entry.last_used_at == when.isoformat()

    def test_from_dict_restores_entry(self):
        entry = MeditationEntry.create("Rainy", 180, ambient_sound="rain", is_favorite=True)
        restored = MeditationEntry.from_dict(entry.to_dict())

        assert restored == entry
        assert restored.ambient_sound_enum == AmbientSound.RAIN
        assert restored.has_ambient_sound

    def test_from_dict_missing_field(self):
        with pytest.raises(ValidationError):
            MeditationEntry.from_dict({"title": "No id", "duration": 60})


class TestUserPreferences:
    def test_defaults(self):
        prefs = UserPreferences()
        assert prefs.notifications_enabled is True
        assert prefs.reminder_hour_minute() == (8, 0)
        assert prefs.background_music_volume == 0.5
        assert prefs.selected_track == MusicTrack.PEACEFUL_PIANO.value

    @pytest.mark.parametrize("volume", [0.0, 1.0])
    def test_volume_bounds_survive_serialisation(self, volume):
        prefs = UserPreferences(background_music_volume=volume)
        restored = UserPreferences.from_dict(prefs.to_dict())
        assert restored.background_music_volume == volume
        assert restored == prefs

    def test_volume_is_clamped(self):
        assert UserPreferences(background_music_volume=1.7).background_music_volume == 1.0
        assert UserPreferences(background_music_volume=-0.2).background_music_volume == 0.0

    def test_bad_values_are_corrected(self):
        prefs = UserPreferences(daily_reminder_time="25:99", theme="neon", selected_track="kazoo")
        assert prefs.daily_reminder_time == "08:00"
        assert prefs.theme == "system"
        assert prefs.selected_track == MusicTrack.PEACEFUL_PIANO.value

    def test_with_changes_returns_new_value(self):
        prefs = UserPreferences()
        changed = prefs.with_changes(daily_reminder_time="21:15")

        assert prefs.daily_reminder_time == "08:00"
        assert changed.reminder_hour_minute() == (21, 15)

    def test_from_dict_ignores_unknown_keys(self):
        prefs = UserPreferences.from_dict({"theme": "dark", "legacy_flag": True})
        assert prefs.theme == "dark"


class TestUserStatistics:
    def test_session_record_starts_before_it_ends(self):
        ended = datetime(2024, 3, 10, 9, 5)
        record = SessionRecord.create("e1", 300, ended_at=ended)
        assert record.started_datetime == datetime(2024, 3, 10, 9, 0)
        assert record.session_date == date(2024, 3, 10)

    def test_daily_goal_progress_is_capped(self):
        stats = UserStatistics(daily_goal_seconds=600)
        stats.session_history.append(SessionRecord.create("e1", 900, ended_at=datetime(2024, 3, 10, 10, 0)))

        assert stats.seconds_on(date(2024, 3, 10)) == 900
        assert stats.daily_goal_progress(date(2024, 3, 10)) == 1.0

    def test_weekly_seconds_oldest_first(self):
        stats = UserStatistics()
        stats.session_history.append(SessionRecord.create("e1", 60, ended_at=datetime(2024, 3, 4, 10, 0)))
        stats.session_history.append(SessionRecord.create("e1", 120, ended_at=datetime(2024, 3, 10, 10, 0)))

        week = stats.weekly_seconds(date(2024, 3, 10))

        assert len(week) == 7
        assert week[0] == 60
        assert week[-1] == 120

    def test_round_trip(self):
        stats = UserStatistics(current_streak=2, longest_streak=5, last_session_date="2024-03-10")
        stats.session_history.append(SessionRecord.create("e1", 60))
        stats.entry_session_counts["e1"] = 1

        assert UserStatistics.from_dict(stats.to_dict()) == stats


def test_default_catalog_is_valid():
    entries = default_catalog()
    assert len(entries) == 28
    assert len({e.entry_id for e in entries}) == 28
    assert all(e.duration > 0 for e in entries)
