"""
Session player.

Drives a single meditation session: countdown, pause/resume, skip and
completion, and hands the audio device between the session's ambient
sound and the background music layer.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from mindful.core.models import MeditationEntry
from mindful.services.audio_service import AmbientSoundPlayer, BackgroundMusicPlayer
from mindful.services.preferences_service import PreferenceStore
from mindful.services.timer_service import TickClock
from mindful.utils.datetime_utils import format_duration

logger = logging.getLogger(__name__)

# ===== ENUMS & EVENTS =====

class PlayerState(Enum):
    """Session player states"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

IDLE_STATES = (PlayerState.IDLE, PlayerState.COMPLETED, PlayerState.ABANDONED)

class PlayerStateError(Exception):
    """Operation not valid in the current player state"""
    pass

@dataclass(frozen=True)
class SessionCompletedEvent:
    """Emitted once per completed session"""
    entry_id: str
    actual_duration: float

# ===== PLAYER =====

class SessionPlayer:
    """
    State machine: IDLE -> RUNNING <-> PAUSED -> COMPLETED | ABANDONED.

    COMPLETED and ABANDONED are reporting states: cleanup has already
    happened and the player accepts a new start() from them.
    """

    def __init__(self, preferences: PreferenceStore, ambient: AmbientSoundPlayer,
                 music: BackgroundMusicPlayer, tick_interval: float = 1.0,
                 use_clock: bool = True):
        self.preferences = preferences
        self.ambient = ambient
        self.music = music

        self.state = PlayerState.IDLE
        self.current_entry: Optional[MeditationEntry] = None
        self.started_at: Optional[datetime] = None
        self.total_duration: float = 0.0
        self.remaining: float = 0.0
        self.progress: float = 0.0

        # Set only when *this* player paused the music layer
        self._paused_music = False

        self.completion_callbacks: List[Callable[[SessionCompletedEvent], None]] = []
        self.clock: Optional[TickClock] = (
            TickClock(lambda _elapsed: self.tick(), tick_interval, name="session clock")
            if use_clock else None
        )

    # ===== PROPERTIES =====

    @property
    def is_idle(self) -> bool:
        return self.state in IDLE_STATES

    @property
    def is_playing(self) -> bool:
        return self.state == PlayerState.RUNNING

    @property
    def elapsed(self) -> float:
        return self.total_duration - self.remaining

    def add_completion_callback(self, callback: Callable[[SessionCompletedEvent], None]) -> None:
        self.completion_callbacks.append(callback)

    # ===== TRANSITIONS =====

    def start(self, entry: MeditationEntry) -> None:
        if not self.is_idle:
            raise PlayerStateError(f"Cannot start '{entry.title}' while a session is {self.state.value}")

        prefs = self.preferences.preferences
        self.current_entry = entry
        self.started_at = datetime.now()
        self.total_duration = float(entry.duration)
        self.remaining = float(entry.duration)
        self.progress = 0.0
        self._paused_music = False

        if self.total_duration <= 0:
            logger.warning(f"⚠️ '{entry.title}' has no duration, completing immediately")
            self.remaining = 0.0
            self.state = PlayerState.COMPLETED
            return

        if entry.has_ambient_sound and prefs.ambient_sounds_enabled:
            if self.music.is_playing and prefs.background_music_enabled:
                self.music.hold()
                self._paused_music = True

        if prefs.ambient_sounds_enabled:
            self.ambient.play(entry.ambient_sound_enum)

        self.state = PlayerState.RUNNING
        self._start_clock()
        logger.info(f"▶️ Session started: {entry.title} ({self.total_duration:.0f}s)")

    def pause(self) -> None:
        if self.state != PlayerState.RUNNING:
            raise PlayerStateError(f"Cannot pause while {self.state.value}")

        self._stop_clock()
        self.ambient.pause()
        self.state = PlayerState.PAUSED
        logger.info("⏸️ Session paused")

    def resume(self) -> None:
        if self.state != PlayerState.PAUSED:
            raise PlayerStateError(f"Cannot resume while {self.state.value}")

        if self.preferences.preferences.ambient_sounds_enabled:
            self.ambient.resume()
        self.state = PlayerState.RUNNING
        self._start_clock()
        logger.info("▶️ Session resumed")

    def toggle_play_pause(self) -> None:
        if self.state == PlayerState.RUNNING:
            self.pause()
        elif self.state == PlayerState.PAUSED:
            self.resume()

    def tick(self) -> None:
        """One elapsed second; a no-op unless running"""
        if self.state != PlayerState.RUNNING:
            return

        self.remaining = max(0.0, self.remaining - 1)
        self._update_progress()

        if self.remaining <= 0:
            self.end(completed=True)

    def skip_forward(self, seconds: float) -> None:
        self.remaining = max(0.0, self.remaining - seconds)
        self._update_progress()

    def skip_backward(self, seconds: float) -> None:
        self.remaining = min(self.total_duration, self.remaining + seconds)
        self._update_progress()

    def end(self, completed: bool = True) -> None:
        """Finish the session; completed sessions are reported to listeners"""
        if self.state not in (PlayerState.RUNNING, PlayerState.PAUSED):
            return

        self._stop_clock()
        self.ambient.stop()

        entry = self.current_entry
        if completed and entry is not None:
            event = SessionCompletedEvent(entry_id=entry.entry_id, actual_duration=self.elapsed)
            self._emit(event)

        if self._paused_music:
            self.music.release(self.preferences.preferences)
        self._paused_music = False

        self.state = PlayerState.COMPLETED if completed else PlayerState.ABANDONED
        logger.info(f"⏹️ Session {self.state.value}: {entry.title if entry else '?'}")

    def reset(self) -> None:
        """Return to IDLE, abandoning any active session"""
        if not self.is_idle:
            self.end(completed=False)
        self.state = PlayerState.IDLE
        self.current_entry = None
        self.started_at = None
        self.total_duration = 0.0
        self.remaining = 0.0
        self.progress = 0.0

    def snapshot(self) -> Dict[str, Any]:
        """Now-playing information"""
        entry = self.current_entry
        return {
            "title": entry.title if entry else None,
            "state": self.state.value,
            "elapsed": self.elapsed,
            "duration": self.total_duration,
            "remaining": self.remaining,
            "remaining_display": format_duration(self.remaining),
            "progress": self.progress,
            "playback_rate": 1.0 if self.is_playing else 0.0
        }

    # ===== INTERNALS =====

    def _update_progress(self) -> None:
        if self.total_duration <= 0:
            self.progress = 0.0
        else:
            self.progress = 1 - (self.remaining / self.total_duration)

    def _start_clock(self) -> None:
        if self.clock is not None:
            self.clock.start()

    def _stop_clock(self) -> None:
        if self.clock is not None:
            self.clock.stop()

    def _emit(self, event: SessionCompletedEvent) -> None:
        for callback in self.completion_callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"❌ Session completion callback failed: {e}")
