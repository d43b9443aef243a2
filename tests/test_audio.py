from mindful.core.models import AmbientSound, MusicTrack, UserPreferences
from mindful.services.audio_service import AmbientSoundPlayer, AudioBackendError, NullAudioBackend


class FailingBackend(NullAudioBackend):
    def play(self, handle):
        raise AudioBackendError("device busy")


def test_ambient_none_plays_nothing(ambient, backend):
    assert not ambient.play(AmbientSound.NONE)
    assert backend.calls == []


def test_ambient_uses_configured_volume(backend, assets_dir):
    player = AmbientSoundPlayer(backend, assets_dir, volume=0.3)
    player.play(AmbientSound.FOREST)

    assert ("set_volume", "forest.mp3", 0.3) in backend.calls
    assert player.is_playing


def test_backend_failure_is_contained(assets_dir):
    player = AmbientSoundPlayer(FailingBackend(), assets_dir)

    assert not player.play(AmbientSound.WAVES)
    assert not player.is_playing
    assert player.current_sound == AmbientSound.NONE


def test_music_disabled_does_not_start(music, backend):
    prefs = UserPreferences(background_music_enabled=False)

    assert not music.play_track(MusicTrack.AMBIENT_GUITAR, prefs)
    assert backend.calls == []


def test_switching_track_stops_previous(music, backend):
    prefs = UserPreferences()
    music.play_track(MusicTrack.PEACEFUL_PIANO, prefs)
    music.update_playback(prefs.with_changes(selected_track=MusicTrack.SINGING_BOWL.value))

    assert ("stop", "peaceful_piano.mp3") in backend.calls
    assert music.current_track == MusicTrack.SINGING_BOWL
