"""Audio output on a Home Assistant media player."""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, Optional

from pydub import AudioSegment
from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.const import ATTR_ENTITY_ID, STATE_OFF, STATE_PLAYING, STATE_UNAVAILABLE
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.network import get_url

from .errors import AudioPlaybackError
from .models import AudioSource

_LOGGER = logging.getLogger(__name__)

MEDIA_PLAYER_DOMAIN = "media_player"
FALLBACK_TONE_SECONDS = 5.0

_FAILED_STATES = {STATE_UNAVAILABLE, STATE_OFF}


class ToneDurationDetector:
    """Detect tone file duration using pydub."""

    @staticmethod
    def get_duration(audio_path: str) -> float:
        """Return the duration of ``audio_path`` in seconds.

        Returns FALLBACK_TONE_SECONDS if the file is missing or unreadable.
        """
        try:
            if not os.path.exists(audio_path):
                _LOGGER.warning("Tone file not found: %s", audio_path)
                return FALLBACK_TONE_SECONDS

            audio = AudioSegment.from_file(audio_path)
            duration = len(audio) / 1000.0
            _LOGGER.debug("pydub detected duration: %.2f seconds for %s", duration, audio_path)
            return duration or FALLBACK_TONE_SECONDS

        except Exception as err:
            _LOGGER.error("Error detecting tone duration for %s: %s", audio_path, err)
            return FALLBACK_TONE_SECONDS


class MediaPlayerBackend:
    """Plays alarm audio on one media_player entity."""

    def __init__(self, hass: HomeAssistant, entity_id: str) -> None:
        self.hass = hass
        self.entity_id = entity_id
        self._replay_task: Optional[asyncio.Task] = None

    async def async_start(self, source: AudioSource, volume: float) -> None:
        """Start ``source`` and wait until the player reports playing."""
        self._cancel_replay()
        url = self._absolute_url(source.url)

        try:
            await self._async_call("volume_set", {"volume_level": volume})
        except AudioPlaybackError as err:
            _LOGGER.debug("Volume not set on %s: %s", self.entity_id, err)

        playing = self.hass.loop.create_future()

        @callback
        def _on_state_changed(event: Event) -> None:
            new_state = event.data.get("new_state")
            if playing.done() or new_state is None:
                return
            if new_state.state == STATE_PLAYING:
                playing.set_result(True)
            elif new_state.state in _FAILED_STATES:
                playing.set_exception(
                    AudioPlaybackError(f"{self.entity_id} became {new_state.state}")
                )

        unsub = async_track_state_change_event(self.hass, [self.entity_id], _on_state_changed)
        try:
            await self._async_call(
                "play_media",
                {"media_content_id": url, "media_content_type": "music"},
            )
            state = self.hass.states.get(self.entity_id)
            if (
                not playing.done()
                and state is not None
                and state.state == STATE_PLAYING
                and state.attributes.get("media_content_id") == url
            ):
                playing.set_result(True)
            await playing
        finally:
            unsub()
            if not playing.done():
                playing.cancel()

        _LOGGER.debug("%s is playing %s", self.entity_id, url)
        if source.loop:
            await self._async_loop(url, source)

    async def async_stop(self) -> None:
        """Stop playback on the media player."""
        self._cancel_replay()
        await self._async_call("media_stop", {})

    async def async_set_volume(self, volume: float) -> None:
        await self._async_call("volume_set", {"volume_level": volume})

    async def _async_loop(self, url: str, source: AudioSource) -> None:
        """Repeat the source, by the player itself if it can, else by replaying it."""
        try:
            await self._async_call("repeat_set", {"repeat": "one"})
            return
        except AudioPlaybackError as err:
            _LOGGER.debug("repeat_set unsupported on %s (%s), replaying manually", self.entity_id, err)

        duration = FALLBACK_TONE_SECONDS
        if source.local_path is not None:
            duration = await self.hass.async_add_executor_job(
                ToneDurationDetector.get_duration, str(source.local_path)
            )
        self._replay_task = self.hass.async_create_background_task(
            self._async_replay(url, duration), name=f"alarm_clock_replay_{self.entity_id}"
        )

    async def _async_replay(self, url: str, duration: float) -> None:
        while True:
            await asyncio.sleep(duration)
            try:
                await self._async_call(
                    "play_media",
                    {"media_content_id": url, "media_content_type": "music"},
                )
            except AudioPlaybackError as err:
                _LOGGER.warning("Error replaying tone on %s: %s", self.entity_id, err)

    def _cancel_replay(self) -> None:
        if self._replay_task is not None:
            self._replay_task.cancel()
            self._replay_task = None

    def _absolute_url(self, url: str) -> str:
        """Media players need absolute URLs for files served by Home Assistant."""
        if not url.startswith("/"):
            return url
        try:
            return f"{get_url(self.hass)}{url}"
        except HomeAssistantError as err:
            raise AudioPlaybackError(f"No Home Assistant URL available for {url}") from err

    async def _async_call(self, service: str, data: Dict[str, Any]) -> None:
        try:
            await self.hass.services.async_call(
                MEDIA_PLAYER_DOMAIN,
                service,
                {ATTR_ENTITY_ID: self.entity_id, **data},
                blocking=True,
            )
        except HomeAssistantError as err:
            raise AudioPlaybackError(
                f"{MEDIA_PLAYER_DOMAIN}.{service} failed on {self.entity_id}: {err}"
            ) from err
