"""Tests for the audio and haptic collaborators."""

from vocab_quiz.feedback import AudioService, Haptics


def failing_player(url):
    raise OSError("no such stream")


class TestAudioService:
    def test_plays_url_when_online(self):
        played, spoken = [], []
        audio = AudioService(player=played.append, speaker=spoken.append)
        audio.play("https://a/apple.mp3", "apple")
        assert played == ["https://a/apple.mp3"]
        assert spoken == []

    def test_offline_falls_back_to_speech(self):
        played, spoken = [], []
        audio = AudioService(player=played.append, speaker=spoken.append, online=False)
        audio.play("https://a/apple.mp3", "apple")
        assert played == []
        assert spoken == ["apple"]

    def test_blank_url_falls_back_to_speech(self):
        spoken = []
        audio = AudioService(player=lambda url: None, speaker=spoken.append)
        audio.play("  ", "apple")
        assert spoken == ["apple"]

    def test_player_error_falls_back_to_speech(self):
        spoken = []
        audio = AudioService(player=failing_player, speaker=spoken.append)
        audio.play("https://a/apple.mp3", "apple")
        assert spoken == ["apple"]

    def test_blank_fallback_text_is_skipped(self):
        spoken = []
        audio = AudioService(speaker=spoken.append, online=False)
        audio.play("", None)
        audio.play("", " ")
        assert spoken == []

    def test_speech_error_is_contained(self):
        def failing_speaker(text):
            raise RuntimeError("engine not initialised")

        audio = AudioService(player=failing_player, speaker=failing_speaker)
        audio.play("https://a/apple.mp3", "apple")
        audio.speak("apple")

    def test_no_backends(self):
        AudioService().play("https://a/apple.mp3", "apple")


class TestHaptics:
    def test_pulse_lengths(self):
        pulses = []
        haptics = Haptics(pulses.append)
        haptics.feedback(True)
        haptics.feedback(False)
        assert pulses == [50, 200]

    def test_no_motor(self):
        Haptics().feedback(True)
