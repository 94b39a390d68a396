"""Common fixtures for testing."""
import asyncio

import pytest

from custom_components.alarm_clock.errors import AudioPlaybackError
from custom_components.alarm_clock.models import RadioStation

pytest_plugins = "pytest_homeassistant_custom_component"


class FakeBackend:
    """Audio backend whose outcome per URL is scripted by the test.

    ``outcomes[url]`` is ``"ok"`` (default), ``"fail"``, ``"hang"`` (never
    connects) or a Future that decides when the connection succeeds. The
    Future is shielded, so it can still be resolved after the attempt was
    cancelled. ``stop_gate``, when set, is awaited by every stop.
    """

    def __init__(self):
        self.outcomes = {}
        self.started_urls = []
        self.playing = None
        self.volume = None
        self.volumes = []
        self.stops = 0
        self.stop_gate = None

    async def async_start(self, source, volume):
        self.started_urls.append(source.url)
        outcome = self.outcomes.get(source.url, "ok")
        if isinstance(outcome, asyncio.Future):
            await asyncio.shield(outcome)
        elif outcome == "fail":
            raise AudioPlaybackError(f"cannot play {source.url}")
        elif outcome == "hang":
            await asyncio.Event().wait()
        self.playing = source.url
        self.volume = volume

    async def async_stop(self):
        if self.stop_gate is not None:
            await self.stop_gate
        self.stops += 1
        self.playing = None

    async def async_set_volume(self, volume):
        self.volumes.append(volume)
        self.volume = volume


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def stations():
    return [
        RadioStation("a", "Station A", "http://a.example/stream", "Jazz"),
        RadioStation("b", "Station B", "http://b.example/stream", "Jazz"),
        RadioStation("c", "Station C", "http://c.example/stream", "Classical"),
    ]


@pytest.fixture
def feedback():
    """Collect (message, severity) pairs."""
    messages = []

    def _feedback(message, severity):
        messages.append((message, severity))

    _feedback.messages = messages
    return _feedback
