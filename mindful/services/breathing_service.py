"""
Breathing exercise driver.

A fixed inhale / hold / exhale / hold cycle repeated a set number of times.
The current phase is derived from the time elapsed in the cycle, advanced
by a single repeating tick.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from mindful.core.models import UserPreferences
from mindful.services.timer_service import TickClock

logger = logging.getLogger(__name__)

INITIAL_INSTRUCTION = "Inhale"
INITIAL_SCALE = 1.0
FINISHED_INSTRUCTION = "Well done! Exercise complete."


class BreathingPhase(Enum):
    INHALE = "inhale"
    HOLD_AFTER_INHALE = "hold_after_inhale"
    EXHALE = "exhale"
    HOLD_AFTER_EXHALE = "hold_after_exhale"

    @property
    def instruction(self) -> str:
        return {
            BreathingPhase.INHALE: "Inhale",
            BreathingPhase.HOLD_AFTER_INHALE: "Hold",
            BreathingPhase.EXHALE: "Exhale",
            BreathingPhase.HOLD_AFTER_EXHALE: "Hold",
        }[self]

    @property
    def target_scale(self) -> float:
        if self in (BreathingPhase.INHALE, BreathingPhase.HOLD_AFTER_INHALE):
            return 1.5
        return 0.75


@dataclass(frozen=True)
class BreathingPattern:
    """Phase durations in seconds"""
    inhale: float = 4.0
    hold_after_inhale: float = 1.0
    exhale: float = 6.0
    hold_after_exhale: float = 1.0

    def __post_init__(self):
        if self.inhale <= 0 or self.exhale <= 0:
            raise ValueError("inhale and exhale must be positive")
        if self.hold_after_inhale < 0 or self.hold_after_exhale < 0:
            raise ValueError("holds cannot be negative")

    @property
    def cycle_duration(self) -> float:
        return self.inhale + self.hold_after_inhale + self.exhale + self.hold_after_exhale

    def phases(self) -> List[Tuple[BreathingPhase, float]]:
        return [
            (BreathingPhase.INHALE, self.inhale),
            (BreathingPhase.HOLD_AFTER_INHALE, self.hold_after_inhale),
            (BreathingPhase.EXHALE, self.exhale),
            (BreathingPhase.HOLD_AFTER_EXHALE, self.hold_after_exhale),
        ]

    def phase_at(self, offset: float) -> BreathingPhase:
        """Phase for a time offset inside one cycle"""
        boundary = 0.0
        for phase, duration in self.phases():
            boundary += duration
            if offset < boundary:
                return phase
        return BreathingPhase.HOLD_AFTER_EXHALE


@dataclass(frozen=True)
class BreathingCompletedEvent:
    duration: float
    cycles_completed: int


class BreathingExerciseDriver:
    """Runs the breathing cycle and reports phase changes to the UI"""

    def __init__(self, pattern: Optional[BreathingPattern] = None, cycles: int = 10,
                 tick_interval: float = 1.0, use_clock: bool = True):
        if cycles <= 0:
            raise ValueError("cycles must be positive")
        self.pattern = pattern or BreathingPattern()
        self.total_cycles = cycles

        self.is_active = False
        self.cycles_remaining = cycles
        self.instruction = INITIAL_INSTRUCTION
        self.scale = INITIAL_SCALE
        self.phase: Optional[BreathingPhase] = None
        self._cycle_elapsed = 0.0

        self.phase_callbacks: List[Callable[[BreathingPhase, str, float], None]] = []
        self.completion_callbacks: List[Callable[[BreathingCompletedEvent], None]] = []
        self.clock: Optional[TickClock] = (
            TickClock(self.tick, tick_interval, name="breathing clock") if use_clock else None
        )

    @property
    def cycle_duration(self) -> float:
        return self.pattern.cycle_duration

    @property
    def cycles_completed(self) -> int:
        return self.total_cycles - self.cycles_remaining

    @property
    def is_finished(self) -> bool:
        return self.cycles_remaining == 0

    def add_phase_callback(self, callback: Callable[[BreathingPhase, str, float], None]) -> None:
        self.phase_callbacks.append(callback)

    def add_completion_callback(self, callback: Callable[[BreathingCompletedEvent], None]) -> None:
        self.completion_callbacks.append(callback)

    def open(self, preferences: UserPreferences) -> bool:
        """Breathing screen shown; starts right away when the user asked for it"""
        if preferences.auto_start_breathing and not self.is_active:
            self.start()
            return True
        return False

    def start(self) -> None:
        if self.is_active:
            return
        if self.is_finished:
            self.cycles_remaining = self.total_cycles

        self.is_active = True
        self._cycle_elapsed = 0.0
        self._enter_phase(BreathingPhase.INHALE)
        if self.clock is not None:
            self.clock.start()
        logger.info(f"🌬️ Breathing exercise started ({self.cycles_remaining} cycles)")

    def stop(self) -> None:
        """Cancel; resets instruction and scale"""
        if self.clock is not None:
            self.clock.stop()
        self.is_active = False
        self.phase = None
        self._cycle_elapsed = 0.0
        self.instruction = INITIAL_INSTRUCTION
        self.scale = INITIAL_SCALE

    def tick(self, elapsed: float = 1.0) -> None:
        """Advance the cycle by `elapsed` seconds"""
        if not self.is_active:
            return

        self._cycle_elapsed += elapsed

        while self.is_active and self._cycle_elapsed >= self.cycle_duration:
            self._cycle_elapsed -= self.cycle_duration
            self.cycles_remaining -= 1
            if self.cycles_remaining <= 0:
                self._finish()
                return

        phase = self.pattern.phase_at(self._cycle_elapsed)
        if phase != self.phase:
            self._enter_phase(phase)

    # ===== INTERNALS =====

    def _enter_phase(self, phase: BreathingPhase) -> None:
        self.phase = phase
        self.instruction = phase.instruction
        self.scale = phase.target_scale
        for callback in self.phase_callbacks:
            try:
                callback(phase, self.instruction, self.scale)
            except Exception as e:
                logger.error(f"❌ Breathing phase callback failed: {e}")

    def _finish(self) -> None:
        if self.clock is not None:
            self.clock.stop()
        self.cycles_remaining = 0
        self.is_active = False
        self.phase = None
        self._cycle_elapsed = 0.0
        self.instruction = FINISHED_INSTRUCTION
        self.scale = INITIAL_SCALE

        event = BreathingCompletedEvent(
            duration=self.cycle_duration * self.cycles_completed,
            cycles_completed=self.cycles_completed
        )
        logger.info(f"🌬️ Breathing exercise completed: {event.duration:.0f}s")
        for callback in self.completion_callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"❌ Breathing completion callback failed: {e}")
