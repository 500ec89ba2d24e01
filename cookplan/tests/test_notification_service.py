"""
Tests for the best-effort notification chain.
"""

import pytest

from cookplan.config import settings
from cookplan.errors import ErrorCode, NotificationUnavailableError
from cookplan.services.notification_service import (
    NotificationService,
    play_audio_cue,
    pulse_haptic,
)


def failing(name):
    def attempt():
        raise RuntimeError(f"{name} broke")
    return attempt


class TestNotificationChain:

    def test_first_working_channel_wins(self):
        calls = []
        service = NotificationService(attempts=[
            ("audio", lambda: calls.append("audio")),
            ("haptic", lambda: calls.append("haptic")),
        ])

        assert service.notify() == "audio"
        assert calls == ["audio"]

    def test_falls_back_to_next_channel(self):
        calls = []
        service = NotificationService(attempts=[
            ("audio", failing("audio")),
            ("haptic", lambda: calls.append("haptic")),
        ])

        assert service.notify() == "haptic"
        assert calls == ["haptic"]

    def test_all_channels_failing_is_silent(self):
        service = NotificationService(attempts=[
            ("audio", failing("audio")),
            ("haptic", failing("haptic")),
        ])

        assert service.notify() is None

    def test_no_channels(self):
        assert NotificationService(attempts=[]).notify() is None

    def test_default_channels(self):
        assert NotificationService().channels == ["audio", "haptic"]


class TestBuiltinChannels:

    def test_audio_cue_rings_bell(self, capsys):
        play_audio_cue()

        assert capsys.readouterr().err == "\a"

    def test_audio_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "notification_audio_enabled", False)

        with pytest.raises(NotificationUnavailableError) as exc_info:
            play_audio_cue()

        assert exc_info.value.details["channel"] == "audio"

    def test_haptic_unavailable_in_terminal(self):
        with pytest.raises(NotificationUnavailableError) as exc_info:
            pulse_haptic()

        assert exc_info.value.error_code == ErrorCode.NOTIFICATION_UNAVAILABLE

    def test_default_chain_with_audio_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "notification_audio_enabled", False)

        assert NotificationService().notify() is None
