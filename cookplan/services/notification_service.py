"""
Best-effort "phase done" notifications.

Channels are tried in order (audio cue, then haptic pulse). Each failure is
logged and the next channel is tried; if none works nothing happens. A
notification is a nicety, so notify() never raises.
"""
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import click

from cookplan.config import settings
from cookplan.errors import NotificationUnavailableError

logger = logging.getLogger(__name__)

NotificationAttempt = Tuple[str, Callable[[], None]]


def play_audio_cue() -> None:
    """Ring the terminal bell."""
    if not settings.notification_audio_enabled:
        raise NotificationUnavailableError("audio", "disabled in settings")
    click.echo("\a", nl=False, err=True)


def pulse_haptic() -> None:
    """Vibrate the device. Terminals have no vibration motor."""
    raise NotificationUnavailableError("haptic")


class NotificationService:
    """Fire a notification through the first channel that works."""

    def __init__(self, attempts: Optional[Sequence[NotificationAttempt]] = None):
        """
        Initialize the service.

        Args:
            attempts: Ordered (name, callable) pairs. Defaults to audio then haptic.
        """
        if attempts is None:
            attempts = [("audio", play_audio_cue), ("haptic", pulse_haptic)]
        self._attempts: List[NotificationAttempt] = list(attempts)

    @property
    def channels(self) -> List[str]:
        return [name for name, _ in self._attempts]

    def notify(self) -> Optional[str]:
        """
        Try each channel in order.

        Returns:
            Name of the channel that fired, or None if every channel failed.
        """
        for name, attempt in self._attempts:
            try:
                attempt()
            except Exception as e:
                logger.debug(f"Notification channel '{name}' failed: {e}")
                continue
            logger.debug(f"Notification sent via '{name}'")
            return name

        logger.debug("No notification channel available")
        return None
