from datetime import datetime
from pathlib import Path

import pytest
import pytz

from mindful.core.models import AmbientSound, MusicTrack
from mindful.core.storage import KeyValueStore, PersistenceGateway
from mindful.services.audio_service import AudioBackend, AmbientSoundPlayer, BackgroundMusicPlayer
from mindful.services.catalog_service import CatalogStore
from mindful.services.notifications import NotificationSink, PermissionProvider
from mindful.services.preferences_service import PreferenceStore


class RecordingAudioBackend(AudioBackend):
    """Remembers every call made to the output device"""

    def __init__(self):
        self.calls = []

    def load(self, path, loop=False):
        self.calls.append(("load", path.name))
        return path.name

    def play(self, handle):
        self.calls.append(("play", handle))

    def pause(self, handle):
        self.calls.append(("pause", handle))

    def stop(self, handle):
        self.calls.append(("stop", handle))

    def set_volume(self, handle, volume):
        self.calls.append(("set_volume", handle, volume))

    def actions(self, action):
        return [call for call in self.calls if call[0] == action]


class FakePermissions(PermissionProvider):
    def __init__(self, granted=True):
        self.granted = granted
        self.request_count = 0

    async def request(self):
        self.request_count += 1
        return self.granted

    async def is_authorized(self):
        return self.granted


class RecordingSink(NotificationSink):
    def __init__(self):
        self.delivered = []

    def deliver(self, notification):
        self.delivered.append(notification)


class FixedClock:
    """Callable clock that tests move by hand"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def set(self, year, month, day, hour=12, minute=0):
        self.now = pytz.utc.localize(datetime(year, month, day, hour, minute))


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def gateway(data_dir):
    return PersistenceGateway(KeyValueStore(data_dir))


@pytest.fixture
def assets_dir(tmp_path) -> Path:
    directory = tmp_path / "sounds"
    directory.mkdir()
    for sound in AmbientSound:
        if sound.file_name:
            (directory / sound.file_name).write_bytes(b"")
    for track in MusicTrack:
        (directory / track.file_name).write_bytes(b"")
    return directory


@pytest.fixture
def backend():
    return RecordingAudioBackend()


@pytest.fixture
def ambient(backend, assets_dir):
    return AmbientSoundPlayer(backend, assets_dir)


@pytest.fixture
def music(backend, assets_dir):
    return BackgroundMusicPlayer(backend, assets_dir)


@pytest.fixture
def catalog(gateway):
    return CatalogStore.load(gateway)


@pytest.fixture
def preference_store(gateway):
    return PreferenceStore(gateway)


@pytest.fixture
def permissions():
    return FakePermissions()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def clock():
    return FixedClock(pytz.utc.localize(datetime(2024, 3, 10, 12, 0)))


@pytest.fixture
def denied_permissions():
    return FakePermissions(granted=False)
