"""Tests for sound resolution, radio failover and the stale-session guard."""
import asyncio
import random

from custom_components.alarm_clock.catalog import default_tone, get_tone
from custom_components.alarm_clock.const import SEVERITY_ERROR, SEVERITY_SUCCESS
from custom_components.alarm_clock.models import ConnectionStatus, SourceKind
from custom_components.alarm_clock.player import AlarmSoundPlayer

CLASSIC_URL = default_tone().url


def _player(backend, stations, feedback=None, **kwargs):
    return AlarmSoundPlayer(backend, feedback=feedback, stations=stations, **kwargs)


async def _wait_for_start(backend, count=1):
    for _ in range(100):
        if len(backend.started_urls) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError("backend was never started")


async def test_plays_tone_at_volume(backend, stations):
    player = _player(backend, stations)

    session = await player.async_play("digital", 80)

    assert backend.playing == get_tone("digital").url
    assert backend.volume == 0.8
    assert session.source_kind is SourceKind.TONE
    assert session.connection_status is ConnectionStatus.CONNECTED
    assert not session.fallback


async def test_failover_in_catalog_order(backend, stations, feedback):
    backend.outcomes = {stations[0].stream_url: "fail", stations[1].stream_url: "fail"}
    player = _player(backend, stations, feedback)

    session = await player.async_play("radio:a", 50)

    assert backend.started_urls == [s.stream_url for s in stations]
    assert backend.playing == stations[2].stream_url
    assert session.connection_status is ConnectionStatus.CONNECTED
    assert session.station_id == "c"
    assert session.visited_station_ids == {"a", "b", "c"}
    assert feedback.messages[0][0] == "Failed to connect to Station A, trying Station B..."
    assert feedback.messages[-1] == ("Streaming Station C for this alarm", SEVERITY_SUCCESS)


async def test_failover_wraps_around_catalog(backend, stations):
    backend.outcomes = {stations[2].stream_url: "fail"}
    player = _player(backend, stations)

    session = await player.async_play("radio:c", 50)

    assert session.station_id == "a"
    assert backend.playing == stations[0].stream_url


async def test_all_stations_failing_falls_back_to_default_tone(backend, stations, feedback):
    backend.outcomes = {s.stream_url: "fail" for s in stations}
    player = _player(backend, stations, feedback)

    session = await player.async_play("radio:b", 30)

    assert backend.started_urls[:3] == [
        stations[1].stream_url,
        stations[2].stream_url,
        stations[0].stream_url,
    ]
    assert backend.playing == CLASSIC_URL
    assert backend.volume == 0.3
    assert session.connection_status is ConnectionStatus.ERROR
    assert session.fallback
    assert (
        "Could not reach radio stream. Falling back to Classic Bell.",
        SEVERITY_ERROR,
    ) in feedback.messages


async def test_connect_timeout_counts_as_failure(backend, stations):
    backend.outcomes = {stations[0].stream_url: "hang"}
    player = _player(backend, stations, connect_timeout=0.01)

    session = await player.async_play("radio:a", 50)

    assert session.station_id == "b"
    assert backend.playing == stations[1].stream_url


async def test_shuffle_tries_each_station_once(backend, stations):
    backend.outcomes = {s.stream_url: "fail" for s in stations}
    player = _player(backend, stations, shuffle=True, rng=random.Random(3))

    session = await player.async_play("radio:a", 50)

    radio_urls = [url for url in backend.started_urls if url != CLASSIC_URL]
    assert radio_urls[0] == stations[0].stream_url
    assert sorted(radio_urls) == sorted(s.stream_url for s in stations)
    assert session.visited_station_ids == {"a", "b", "c"}
    assert backend.playing == CLASSIC_URL


async def test_unknown_station_plays_default_tone_without_network(backend, stations, feedback):
    player = _player(backend, stations, feedback)

    session = await player.async_play("radio:nowhere", 50)

    assert backend.started_urls == [CLASSIC_URL]
    assert session.fallback
    assert feedback.messages


async def test_unknown_tone_plays_default_tone(backend, stations):
    player = _player(backend, stations)

    session = await player.async_play("kazoo", 50)

    assert backend.playing == CLASSIC_URL
    assert session.fallback


async def test_tone_failure_falls_back_once(backend, stations):
    backend.outcomes = {get_tone("rooster").url: "fail"}
    player = _player(backend, stations)

    session = await player.async_play("rooster", 50)

    assert backend.playing == CLASSIC_URL
    assert session.fallback
    assert session.connection_status is ConnectionStatus.CONNECTED


async def test_tone_failure_twice_reports_error(backend, stations, feedback):
    backend.outcomes = {get_tone("rooster").url: "fail", CLASSIC_URL: "fail"}
    player = _player(backend, stations, feedback)

    session = await player.async_play("rooster", 50)

    assert backend.started_urls == [get_tone("rooster").url, CLASSIC_URL]
    assert backend.playing is None
    assert session.connection_status is ConnectionStatus.ERROR
    assert feedback.messages[-1] == ("Unable to play the alarm sound.", SEVERITY_ERROR)


async def test_success_after_stop_does_not_resume_audio(backend, stations):
    pending = asyncio.get_running_loop().create_future()
    backend.outcomes = {stations[0].stream_url: pending}
    player = _player(backend, stations)

    task = asyncio.ensure_future(player.async_play("radio:a", 50))
    await _wait_for_start(backend)

    await player.async_stop()
    pending.set_result(None)
    session = await task

    assert player.session is None
    assert backend.playing is None
    assert backend.started_urls == [stations[0].stream_url]
    assert session.connection_status is ConnectionStatus.IDLE


async def test_failure_after_stop_does_not_fail_over(backend, stations):
    pending = asyncio.get_running_loop().create_future()
    backend.outcomes = {stations[0].stream_url: pending}
    player = _player(backend, stations)

    task = asyncio.ensure_future(player.async_play("radio:a", 50))
    await _wait_for_start(backend)

    await player.async_stop()
    pending.set_exception(OSError("stream closed"))
    await task

    assert backend.started_urls == [stations[0].stream_url]
    assert backend.playing is None


async def test_stop_is_idempotent(backend, stations):
    player = _player(backend, stations)
    await player.async_play("classic", 50)

    await player.async_stop()
    await player.async_stop()

    assert backend.stops == 1
    assert player.session is None


async def test_set_volume_applies_to_live_session(backend, stations):
    player = _player(backend, stations)

    assert not await player.async_set_volume(70)

    await player.async_play("classic", 50)
    assert await player.async_set_volume(120)

    assert backend.volumes == [1.0]
    assert player.session.volume == 100
