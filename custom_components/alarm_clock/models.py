"""Data model for the alarm clock engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, Dict, Optional, Set

from .const import DEFAULT_TONE, DEFAULT_VOLUME, SOUNDS_URL_PATH

SOUNDS_DIR = Path(__file__).parent / "sounds"


class AlarmPhase(StrEnum):
    """Phase of the single active alarm slot."""

    IDLE = "idle"
    RINGING = "ringing"


class SourceKind(StrEnum):
    """Kind of audio source behind a playback session."""

    TONE = "tone"
    RADIO = "radio"


class ConnectionStatus(StrEnum):
    """Connection status of a playback session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


def clamp_volume(volume: Any) -> int:
    """Clamp a volume to the 0-100 range, defaulting to 50."""
    try:
        value = int(volume)
    except (TypeError, ValueError):
        return DEFAULT_VOLUME
    return max(0, min(100, value))


@dataclass
class Alarm:
    """A scheduled wake event."""

    time: str
    label: str = ""
    is_recurring: bool = False
    reminder_date: Optional[date] = None
    sound_id: str = DEFAULT_TONE
    volume: int = DEFAULT_VOLUME
    show_notification: bool = True
    enabled: bool = True
    id: str = ""

    def __post_init__(self) -> None:
        self.volume = clamp_volume(self.volume)

    @property
    def is_one_shot(self) -> bool:
        """Return True if the alarm must not fire again once handled."""
        return self.reminder_date is not None or not self.is_recurring

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation for state attributes."""
        return {
            "id": self.id,
            "time": self.time,
            "label": self.label,
            "recurring": self.is_recurring,
            "reminder_date": self.reminder_date.isoformat() if self.reminder_date else None,
            "sound": self.sound_id,
            "volume": self.volume,
            "show_notification": self.show_notification,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class RadioStation:
    """Static radio catalog entry."""

    id: str
    name: str
    stream_url: str
    genre: str


@dataclass(frozen=True)
class ToneEntry:
    """Static built-in tone entry."""

    id: str
    name: str
    file: str

    @property
    def url(self) -> str:
        return f"{SOUNDS_URL_PATH}/{self.file}"

    @property
    def path(self) -> Path:
        return SOUNDS_DIR / self.file


@dataclass(frozen=True)
class AudioSource:
    """What the audio backend is asked to play."""

    url: str
    loop: bool = True
    local_path: Optional[Path] = None


@dataclass
class PlaybackSession:
    """Ephemeral state of one playback request."""

    generation: int
    sound_id: str
    volume: int
    source_kind: SourceKind = SourceKind.TONE
    current_url: Optional[str] = None
    station_id: Optional[str] = None
    visited_station_ids: Set[str] = field(default_factory=set)
    connection_status: ConnectionStatus = ConnectionStatus.IDLE
    fallback: bool = False


@dataclass
class ActiveAlarmState:
    """The at-most-one active alarm slot.

    ``last_fired`` maps alarm id to the minute stamp it last fired in, so an
    alarm handled within its own minute is not matched again.
    """

    phase: AlarmPhase = AlarmPhase.IDLE
    alarm: Optional[Alarm] = None
    fired_at: Optional[datetime] = None
    last_fired: Dict[str, str] = field(default_factory=dict)

    @property
    def is_idle(self) -> bool:
        return self.phase == AlarmPhase.IDLE

    def ring(self, alarm: Alarm, now: datetime, stamp: str) -> None:
        """Move to ringing for ``alarm``."""
        self.phase = AlarmPhase.RINGING
        self.alarm = alarm
        self.fired_at = now
        self.last_fired[alarm.id] = stamp

    def clear(self) -> Optional[Alarm]:
        """Return to idle and hand back the alarm that was active."""
        alarm = self.alarm
        self.phase = AlarmPhase.IDLE
        self.alarm = None
        self.fired_at = None
        return alarm
