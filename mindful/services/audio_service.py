"""
Audio layers: the session's ambient sound and the background music.

Both play through an AudioBackend port. Decoding and device output live in
the platform adapter; the default backend only logs.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from mindful.core.models import AmbientSound, MusicTrack, UserPreferences

logger = logging.getLogger(__name__)


class AudioBackendError(Exception):
    """Raised by a backend when the output device misbehaves"""
    pass


class AudioBackend(ABC):
    """Port for the platform audio output"""

    @abstractmethod
    def load(self, path: Path, loop: bool = False) -> Any:
        """Prepare a sound; returns an opaque handle"""
        pass

    @abstractmethod
    def play(self, handle: Any) -> None:
        pass

    @abstractmethod
    def pause(self, handle: Any) -> None:
        pass

    @abstractmethod
    def stop(self, handle: Any) -> None:
        pass

    @abstractmethod
    def set_volume(self, handle: Any, volume: float) -> None:
        pass


class NullAudioBackend(AudioBackend):
    """Silent backend"""

    def load(self, path: Path, loop: bool = False) -> Any:
        logger.debug(f"🔇 load {path.name} (loop={loop})")
        return path

    def play(self, handle: Any) -> None:
        logger.debug(f"🔇 play {handle}")

    def pause(self, handle: Any) -> None:
        logger.debug(f"🔇 pause {handle}")

    def stop(self, handle: Any) -> None:
        logger.debug(f"🔇 stop {handle}")

    def set_volume(self, handle: Any, volume: float) -> None:
        logger.debug(f"🔇 volume {handle} -> {volume:.2f}")


def _clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, float(volume)))


class _AudioLayer:
    """Shared handle bookkeeping for a single looping layer"""

    def __init__(self, backend: AudioBackend, assets_dir: Path, name: str):
        self.backend = backend
        self.assets_dir = Path(assets_dir)
        self.name = name
        self._handle: Any = None
        self.is_playing = False

    def _resolve(self, file_name: str) -> Optional[Path]:
        path = self.assets_dir / file_name
        if not path.exists():
            logger.warning(f"⚠️ {self.name}: audio asset not found: {path}")
            return None
        return path

    def _start(self, file_name: str, volume: float) -> bool:
        path = self._resolve(file_name)
        if path is None:
            return False

        try:
            handle = self.backend.load(path, loop=True)
            self.backend.set_volume(handle, volume)
            self.backend.play(handle)
        except AudioBackendError as e:
            logger.error(f"❌ {self.name}: could not play {file_name}: {e}")
            self._handle = None
            self.is_playing = False
            return False

        self._handle = handle
        self.is_playing = True
        return True

    def _call(self, action: str) -> None:
        if self._handle is None:
            return
        try:
            getattr(self.backend, action)(self._handle)
        except AudioBackendError as e:
            logger.error(f"❌ {self.name}: {action} failed: {e}")


class AmbientSoundPlayer(_AudioLayer):
    """Looping ambient sound for the active session"""

    def __init__(self, backend: AudioBackend, assets_dir: Path, volume: float = 0.3):
        super().__init__(backend, assets_dir, "ambient")
        self.volume = _clamp_volume(volume)
        self.current_sound: AmbientSound = AmbientSound.NONE

    def play(self, sound: AmbientSound) -> bool:
        """Start a sound from the beginning; a missing asset is skipped"""
        self.stop()
        if sound == AmbientSound.NONE or sound.file_name is None:
            return False

        started = self._start(sound.file_name, self.volume)
        if started:
            self.current_sound = sound
            logger.info(f"🌧️ Ambient sound: {sound.value}")
        return started

    def pause(self) -> None:
        self._call("pause")
        self.is_playing = False

    def resume(self) -> None:
        if self._handle is None:
            return
        self._call("play")
        self.is_playing = True

    def stop(self) -> None:
        self._call("stop")
        self._handle = None
        self.is_playing = False
        self.current_sound = AmbientSound.NONE


class BackgroundMusicPlayer(_AudioLayer):
    """Long-running background music layer"""

    def __init__(self, backend: AudioBackend, assets_dir: Path):
        super().__init__(backend, assets_dir, "music")
        self.current_track: Optional[MusicTrack] = None
        self.volume = 0.5
        # Paused on behalf of a session; preference changes wait for release()
        self.held = False

    def play_track(self, track: MusicTrack, preferences: UserPreferences) -> bool:
        if not preferences.background_music_enabled:
            logger.info("🎵 Background music is disabled in preferences")
            self.stop()
            return False

        if self._handle is not None:
            self.stop()

        self.volume = preferences.background_music_volume
        if not self._start(track.file_name, self.volume):
            self.current_track = None
            return False

        self.current_track = track
        logger.info(f"🎵 Playing {track.display_name} at volume {self.volume:.2f}")
        return True

    def set_volume(self, volume: float) -> None:
        self.volume = _clamp_volume(volume)
        if self._handle is None:
            return
        try:
            self.backend.set_volume(self._handle, self.volume)
        except AudioBackendError as e:
            logger.error(f"❌ music: volume change failed: {e}")

    def play(self) -> None:
        """Resume a paused track"""
        if self._handle is None or self.is_playing:
            logger.debug("🎵 play called, but player not set up or already playing")
            return
        self._call("play")
        self.is_playing = True

    def pause(self) -> None:
        self._call("pause")
        self.is_playing = False

    def stop(self) -> None:
        self._call("stop")
        self._handle = None
        self.is_playing = False

    def update_playback(self, preferences: UserPreferences) -> None:
        """Follow a preferences change: enable/disable, track and volume"""
        if not preferences.background_music_enabled:
            self.stop()
            return

        if self.held:
            self.set_volume(preferences.background_music_volume)
            return

        selected = MusicTrack(preferences.selected_track)
        if self.current_track != selected or self._handle is None:
            self.play_track(selected, preferences)
        else:
            # A paused layer stays paused; whoever paused it resumes it
            self.set_volume(preferences.background_music_volume)

    def hold(self) -> None:
        """Hand the audio device to a session"""
        self.held = True
        self.pause()

    def release(self, preferences: UserPreferences) -> None:
        """Take the device back, applying any track change made while held"""
        if not self.held:
            return
        self.held = False

        if not preferences.background_music_enabled:
            self.stop()
            return

        selected = MusicTrack(preferences.selected_track)
        if self.current_track != selected or self._handle is None:
            self.play_track(selected, preferences)
        else:
            self.set_volume(preferences.background_music_volume)
            self.play()
