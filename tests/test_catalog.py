"""Tests for the tone and radio catalogs."""
from custom_components.alarm_clock.catalog import (
    RADIO_STATIONS,
    TONES,
    parse_sound_id,
    sound_options,
    stations_by_genre,
)
from custom_components.alarm_clock.models import SourceKind


def test_parse_sound_id():
    assert parse_sound_id("radio:wqxr") == (SourceKind.RADIO, "wqxr")
    assert parse_sound_id("gentle") == (SourceKind.TONE, "gentle")
    assert parse_sound_id("") == (SourceKind.TONE, "classic")


def test_station_ids_unique():
    ids = [station.id for station in RADIO_STATIONS]
    assert len(ids) == len(set(ids))


def test_stations_grouped_by_sorted_genre():
    grouped = stations_by_genre()

    assert list(grouped) == sorted(grouped)
    assert sum(len(group) for group in grouped.values()) == len(RADIO_STATIONS)


def test_sound_options_lists_tones_first():
    options = sound_options()

    assert options[: len(TONES)] == list(TONES)
    assert "radio:wqxr" in options
