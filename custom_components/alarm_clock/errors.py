"""Errors raised by the Alarm Clock integration."""
from homeassistant.exceptions import HomeAssistantError


class AlarmClockError(HomeAssistantError):
    """Base error for the alarm clock."""


class AudioPlaybackError(AlarmClockError):
    """Audio could not be started on the output device."""
