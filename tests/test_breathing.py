"""
Tests for the breathing exercise driver.
"""

import asyncio

import pytest

from mindful.core.models import UserPreferences
from mindful.services.breathing_service import (
    BreathingExerciseDriver,
    BreathingPattern,
    BreathingPhase,
)


@pytest.fixture
def driver():
    return BreathingExerciseDriver(cycles=2, use_clock=False)


@pytest.fixture
def completions(driver):
    received = []
    driver.add_completion_callback(received.append)
    return received


class TestPattern:
    def test_default_cycle_is_twelve_seconds(self):
        assert BreathingPattern().cycle_duration == 12

    @pytest.mark.parametrize("offset, phase", [
        (0, BreathingPhase.INHALE),
        (3.9, BreathingPhase.INHALE),
        (4, BreathingPhase.HOLD_AFTER_INHALE),
        (5, BreathingPhase.EXHALE),
        (10.5, BreathingPhase.EXHALE),
        (11, BreathingPhase.HOLD_AFTER_EXHALE),
    ])
    def test_phase_at(self, offset, phase):
        assert BreathingPattern().phase_at(offset) == phase

    def test_rejects_zero_inhale(self):
        with pytest.raises(ValueError):
            BreathingPattern(inhale=0)


class TestDriver:
    def test_start_enters_inhale(self, driver):
        driver.start()

        assert driver.is_active
        assert driver.instruction == "Inhale"
        assert driver.scale == 1.5

    def test_phases_follow_elapsed_time(self, driver):
        seen = []
        driver.add_phase_callback(lambda phase, instruction, scale: seen.append((phase, scale)))
        driver.start()

        for _ in range(12):
            driver.tick()

        assert seen == [
            (BreathingPhase.INHALE, 1.5),
            (BreathingPhase.HOLD_AFTER_INHALE, 1.5),
            (BreathingPhase.EXHALE, 0.75),
            (BreathingPhase.HOLD_AFTER_EXHALE, 0.75),
            (BreathingPhase.INHALE, 1.5),
        ]
        assert driver.cycles_remaining == 1

    def test_completion_reports_full_duration(self, driver, completions):
        driver.start()
        for _ in range(24):
            driver.tick()

        assert not driver.is_active
        assert driver.instruction == "Well done! Exercise complete."
        assert driver.scale == 1.0
        assert len(completions) == 1
        assert completions[0].duration == 24
        assert completions[0].cycles_completed == 2

    def test_stop_resets_display(self, driver, completions):
        driver.start()
        for _ in range(6):
            driver.tick()
        driver.stop()

        assert driver.instruction == "Inhale"
        assert driver.scale == 1.0
        assert not driver.is_active

        driver.tick()
        assert driver.phase is None
        assert completions == []

    def test_restart_after_completion_resets_cycles(self, driver):
        driver.start()
        for _ in range(24):
            driver.tick()
        driver.start()

        assert driver.is_active
        assert driver.cycles_remaining == 2

    def test_open_honours_auto_start(self):
        manual = BreathingExerciseDriver(use_clock=False)
        auto = BreathingExerciseDriver(use_clock=False)

        assert not manual.open(UserPreferences())
        assert auto.open(UserPreferences(auto_start_breathing=True))
        assert auto.is_active


async def test_clock_driven_run_ignores_stale_ticks():
    pattern = BreathingPattern(inhale=0.02, hold_after_inhale=0, exhale=0.02, hold_after_exhale=0)
    driver = BreathingExerciseDriver(pattern, cycles=1, tick_interval=0.01)
    completions = []
    driver.add_completion_callback(completions.append)

    driver.start()
    first_token = driver.clock.token
    driver.stop()
    driver.start()

    assert not driver.clock.is_current(first_token)

    for _ in range(200):
        if completions:
            break
        await asyncio.sleep(0.01)

    assert len(completions) == 1
    assert not driver.clock.is_running
