"""Resolve an alarm's sound and play it, failing over between sources.

A sound id is either a built-in tone (``"classic"``) or a radio station
(``"radio:<station id>"``). Radio playback walks the station catalog until a
stream connects; when every station fails, or a tone cannot start, the
default tone is used instead.

Every playback request gets a session with a generation number. Stopping or
starting playback bumps the generation, and any connection result that
arrives for an older generation is discarded so it cannot restart audio.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, List, Optional, Protocol

from .catalog import RADIO_STATIONS, default_tone, get_station, get_tone, parse_sound_id
from .const import (
    DEFAULT_CONNECT_TIMEOUT,
    SEVERITY_ERROR,
    SEVERITY_SUCCESS,
    SEVERITY_WARNING,
)
from .models import (
    AudioSource,
    ConnectionStatus,
    PlaybackSession,
    RadioStation,
    SourceKind,
    clamp_volume,
)

_LOGGER = logging.getLogger(__name__)

FeedbackCallback = Callable[[str, str], None]


class AudioBackend(Protocol):
    """The single audio output channel."""

    async def async_start(self, source: AudioSource, volume: float) -> None:
        """Start playing ``source``; raise once it is known to have failed."""

    async def async_stop(self) -> None:
        """Stop whatever is playing."""

    async def async_set_volume(self, volume: float) -> None:
        """Change the volume (0.0-1.0) of the current source."""


def _no_feedback(message: str, severity: str) -> None:
    return None


class AlarmSoundPlayer:
    """Plays alarm sounds on an audio backend."""

    def __init__(
        self,
        backend: AudioBackend,
        *,
        feedback: Optional[FeedbackCallback] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        shuffle: bool = False,
        stations: Optional[List[RadioStation]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._backend = backend
        self._feedback = feedback or _no_feedback
        self._connect_timeout = connect_timeout
        self._shuffle = shuffle
        self._stations = list(RADIO_STATIONS if stations is None else stations)
        self._rng = rng or random.Random()
        self._generation = 0
        self._session: Optional[PlaybackSession] = None

    @property
    def session(self) -> Optional[PlaybackSession]:
        """The current playback session, None when stopped."""
        return self._session

    async def async_play(
        self, sound_id: str, volume: int, *, shuffle: Optional[bool] = None
    ) -> PlaybackSession:
        """Resolve ``sound_id`` and start playing it.

        Never raises for audio failures; the returned session tells what
        ended up playing.
        """
        if self._session is not None:
            await self.async_stop()

        self._generation += 1
        session = PlaybackSession(
            generation=self._generation,
            sound_id=sound_id,
            volume=clamp_volume(volume),
        )
        self._session = session

        kind, key = parse_sound_id(sound_id)
        if kind is SourceKind.RADIO:
            station = get_station(key, self._stations)
            if station is None:
                _LOGGER.warning("Unknown radio station %s, using default tone", key)
                self._feedback(
                    f"Unknown radio station {key}. Playing {default_tone().name}.",
                    SEVERITY_WARNING,
                )
                session.fallback = True
                await self._async_play_tone(session, default_tone().id)
                return session

            session.source_kind = SourceKind.RADIO
            await self._async_play_radio(
                session, station, self._shuffle if shuffle is None else shuffle
            )
            return session

        await self._async_play_tone(session, key)
        return session

    async def async_stop(self) -> None:
        """Stop playback and drop the session. Safe to call repeatedly."""
        self._generation += 1
        session, self._session = self._session, None
        if session is None:
            return
        session.connection_status = ConnectionStatus.IDLE
        _LOGGER.debug("Stopping playback session %d", session.generation)
        await self._async_stop_backend()

    async def async_set_volume(self, volume: int) -> bool:
        """Apply a new volume to the live session without restarting it."""
        session = self._session
        if session is None:
            return False
        session.volume = clamp_volume(volume)
        try:
            await self._backend.async_set_volume(session.volume / 100)
        except Exception as err:
            _LOGGER.warning("Could not change volume: %s", err)
            return False
        return True

    def _is_current(self, session: PlaybackSession) -> bool:
        return self._session is session and session.generation == self._generation

    async def _async_stop_backend(self) -> None:
        try:
            await self._backend.async_stop()
        except Exception as err:
            _LOGGER.warning("Error stopping audio output: %s", err, exc_info=True)

    async def _async_attempt(
        self, session: PlaybackSession, source: AudioSource
    ) -> Optional[bool]:
        """Try one source. Returns True/False, or None if the session went stale."""
        if not self._is_current(session):
            return None

        session.current_url = source.url
        try:
            await asyncio.wait_for(
                self._backend.async_start(source, session.volume / 100),
                timeout=self._connect_timeout,
            )
        except TimeoutError:
            _LOGGER.warning(
                "Timed out after %ss connecting to %s", self._connect_timeout, source.url
            )
            started = False
        except Exception as err:
            _LOGGER.warning("Playback of %s failed: %s", source.url, err)
            started = False
        else:
            started = True

        if not self._is_current(session):
            _LOGGER.debug(
                "Discarding %s result of superseded session %d",
                "success" if started else "failure",
                session.generation,
            )
            if started and self._session is None:
                await self._async_stop_backend()
            return None
        return started

    async def _async_play_tone(self, session: PlaybackSession, tone_id: str) -> bool:
        """Play a tone, falling back once to the default tone."""
        tone = get_tone(tone_id)
        if tone is None:
            _LOGGER.warning("Unknown tone %s, using default tone", tone_id)
            tone = default_tone()
            session.fallback = True

        # A radio session that ended up here keeps its error status.
        track_status = session.source_kind is SourceKind.TONE
        candidates = [tone] if tone.id == default_tone().id else [tone, default_tone()]

        for index, candidate in enumerate(candidates):
            if index:
                self._feedback(
                    f"Could not play {tone.name}. Falling back to {candidate.name}.",
                    SEVERITY_WARNING,
                )
                session.fallback = True
            if track_status:
                session.connection_status = ConnectionStatus.CONNECTING
            result = await self._async_attempt(
                session, AudioSource(candidate.url, loop=True, local_path=candidate.path)
            )
            if result is None:
                return False
            if result:
                if track_status:
                    session.connection_status = ConnectionStatus.CONNECTED
                _LOGGER.info("Playing tone %s", candidate.id)
                return True

        session.connection_status = ConnectionStatus.ERROR
        _LOGGER.error("Unable to play any alarm tone for %s", session.sound_id)
        self._feedback("Unable to play the alarm sound.", SEVERITY_ERROR)
        return False

    async def _async_play_radio(
        self, session: PlaybackSession, station: RadioStation, shuffle: bool
    ) -> bool:
        """Connect to ``station``, failing over to other stations."""
        for _ in range(len(self._stations)):
            session.visited_station_ids.add(station.id)
            session.station_id = station.id
            session.connection_status = ConnectionStatus.CONNECTING

            result = await self._async_attempt(
                session, AudioSource(station.stream_url, loop=False)
            )
            if result is None:
                return False
            if result:
                session.connection_status = ConnectionStatus.CONNECTED
                _LOGGER.info("Streaming %s", station.name)
                self._feedback(f"Streaming {station.name} for this alarm", SEVERITY_SUCCESS)
                return True

            next_station = self._next_candidate(station, session.visited_station_ids, shuffle)
            if next_station is None:
                break
            self._feedback(
                f"Failed to connect to {station.name}, trying {next_station.name}...",
                SEVERITY_WARNING,
            )
            station = next_station

        session.connection_status = ConnectionStatus.ERROR
        _LOGGER.warning("No radio station reachable, falling back to default tone")
        self._feedback(
            f"Could not reach radio stream. Falling back to {default_tone().name}.",
            SEVERITY_ERROR,
        )
        session.fallback = True
        await self._async_play_tone(session, default_tone().id)
        return False

    def _next_candidate(
        self, station: RadioStation, visited: set, shuffle: bool
    ) -> Optional[RadioStation]:
        """Pick the next station to try, or None once all have been tried."""
        if shuffle:
            remaining = [s for s in self._stations if s.id not in visited]
            return self._rng.choice(remaining) if remaining else None

        index = next(i for i, s in enumerate(self._stations) if s.id == station.id)
        candidate = self._stations[(index + 1) % len(self._stations)]
        return None if candidate.id in visited else candidate
