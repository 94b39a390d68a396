"""Built-in tone table and radio station catalog."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .const import DEFAULT_TONE, RADIO_PREFIX
from .models import RadioStation, SourceKind, ToneEntry

TONES: Dict[str, ToneEntry] = {
    tone.id: tone
    for tone in (
        ToneEntry("classic", "Classic Bell", "classic-alarm.mp3"),
        ToneEntry("digital", "Digital Beep", "digital-beep.mp3"),
        ToneEntry("nature", "Nature Sounds", "nature-wake.mp3"),
        ToneEntry("gentle", "Gentle Chime", "gentle-chime.mp3"),
        ToneEntry("rooster", "Rooster Crow", "rooster.mp3"),
    )
}

RADIO_STATIONS: List[RadioStation] = [
    # Classical
    RadioStation("wqxr", "WQXR New York Classical", "https://stream.wqxr.org/wqxr-web", "Classical"),
    RadioStation("yourclassical", "YourClassical MPR Minnesota", "https://cms.stream.publicradio.org/cms.mp3", "Classical"),
    RadioStation("classic-fm-london", "Classic FM London", "https://stream.rcs.revma.com/ypqt40u0x1zuv", "Classical"),
    RadioStation("npo-radio4", "NPO Radio 4 Netherlands", "https://icecast.omroep.nl/radio4-bb-mp3", "Classical"),
    # Jazz
    RadioStation("smoothjazz-global", "Smooth Jazz Global", "https://smoothjazz.cdnstream1.com/2585_320.mp3", "Jazz"),
    RadioStation("jazzradio-fr", "Jazz Radio France", "https://jazzradio.ice.infomaniak.ch/jazzradio-high.mp3", "Jazz"),
    RadioStation("legacy-jazz", "Jazz Legacy Radio", "https://ais-sa2.cdnstream1.com/1988_128.mp3", "Jazz"),
    RadioStation("somafm-lounge", "SomaFM Illinois Street Lounge", "https://ice1.somafm.com/illstreet-128-mp3", "Jazz"),
    # Ambient
    RadioStation("soma-drone", "SomaFM Drone Zone", "https://ice1.somafm.com/dronezone-128-mp3", "Ambient"),
    RadioStation("soma-space", "SomaFM Space Station", "https://ice1.somafm.com/spacestation-128-mp3", "Ambient"),
    RadioStation("soma-lush", "SomaFM Lush", "https://ice1.somafm.com/lush-128-mp3", "Ambient"),
    RadioStation("soma-groove", "SomaFM Groove Salad", "https://ice1.somafm.com/groovesalad-256-mp3", "Ambient"),
    RadioStation("ambient-sleeping", "Ambient Sleeping Pill", "https://radio.stereoscenic.com/asp-h", "Ambient"),
    RadioStation("deep-space", "Deep Space One", "https://radio.stereoscenic.com/dso-h", "Ambient"),
    RadioStation("soma-deepspaceone", "SomaFM Deep Space One", "http://ice1.somafm.com/deepspaceone-128-mp3", "Ambient"),
    RadioStation("soma-digitalis", "SomaFM Digitalis", "http://ice1.somafm.com/digitalis-128-mp3", "Ambient"),
    RadioStation("soma-thetrip", "SomaFM The Trip", "http://ice1.somafm.com/thetrip-128-mp3", "Ambient"),
    RadioStation("soma-secretagent", "SomaFM Secret Agent", "http://ice1.somafm.com/secretagent-128-mp3", "Ambient"),
    # Electronic
    RadioStation("paradise-main", "Radio Paradise Main Mix", "https://stream.radioparadise.com/aac-320", "Electronic"),
    RadioStation("paradise-mellow", "Radio Paradise Mellow Mix", "https://stream.radioparadise.com/mellow-320", "Electronic"),
    RadioStation("paradise-eclectic", "Radio Paradise Eclectic Mix", "https://stream.radioparadise.com/eclectic-320", "Electronic"),
    RadioStation("paradise-rock", "Radio Paradise Rock Mix", "https://stream.radioparadise.com/rock-320", "Electronic"),
    RadioStation("paradise-uk", "Radio Paradise UK Mirror", "https://stream-uk1.radioparadise.com/aac-320", "Electronic"),
    RadioStation("nightride", "NightRide FM", "https://stream.nightride.fm/nightride.mp3", "Electronic"),
    RadioStation("soma-defcon", "SomaFM DEF CON Radio", "https://ice1.somafm.com/defcon-128-mp3", "Electronic"),
    RadioStation("paradise-world", "Radio Paradise World Mix", "https://stream.radioparadise.com/world-320", "Electronic"),
    RadioStation("soma-dubstep", "SomaFM Dub Step Beyond", "http://ice1.somafm.com/dubstep-128-mp3", "Electronic"),
    RadioStation("soma-poptron", "SomaFM PopTron", "http://ice1.somafm.com/poptron-128-mp3", "Electronic"),
    # Indie & Rock
    RadioStation("kexp-mp3", "KEXP 90.3 Seattle", "https://kexp-mp3-128.streamguys1.com/kexp128.mp3", "Indie & Rock"),
    RadioStation("the-current", "The Current 89.3 Minneapolis", "https://current.stream.publicradio.org/kcmp.mp3", "Indie & Rock"),
    RadioStation("somafm-indiepop", "SomaFM Indie Pop Rocks", "https://ice1.somafm.com/indiepop-128-mp3", "Indie & Rock"),
    RadioStation("somafm-u80s", "SomaFM Underground 80s", "https://ice1.somafm.com/u80s-128-mp3", "Indie & Rock"),
    RadioStation("somafm-seventies", "SomaFM Left Coast 70s", "https://ice1.somafm.com/seventies-128-mp3", "Indie & Rock"),
    RadioStation("somafm-bagel", "SomaFM Bagel Radio", "https://ice1.somafm.com/bagel-128-mp3", "Indie & Rock"),
    RadioStation("soma-metal", "SomaFM Metal Detector", "http://ice1.somafm.com/metal-128-mp3", "Indie & Rock"),
    RadioStation("soma-folkfwd", "SomaFM Folk Forward", "http://ice1.somafm.com/folkfwd-128-mp3", "Indie & Rock"),
    RadioStation("soma-beatblender", "SomaFM Beat Blender", "http://ice1.somafm.com/beatblender-128-mp3", "Indie & Rock"),
    RadioStation("somafm-altrock", "SomaFM Boot Liquor", "http://ice1.somafm.com/bootliquor-128-mp3", "Indie & Rock"),
]


def get_tone(tone_id: Optional[str]) -> Optional[ToneEntry]:
    """Return a built-in tone or None."""
    return TONES.get(tone_id or "")


def default_tone() -> ToneEntry:
    return TONES[DEFAULT_TONE]


def get_station(
    station_id: str, stations: Optional[List[RadioStation]] = None
) -> Optional[RadioStation]:
    """Return a station by id from ``stations`` (the built-in catalog by default)."""
    for station in RADIO_STATIONS if stations is None else stations:
        if station.id == station_id:
            return station
    return None


def stations_by_genre(
    stations: Optional[List[RadioStation]] = None,
) -> Dict[str, List[RadioStation]]:
    """Group stations by genre, genres sorted alphabetically."""
    grouped: Dict[str, List[RadioStation]] = {}
    for station in RADIO_STATIONS if stations is None else stations:
        grouped.setdefault(station.genre, []).append(station)
    return dict(sorted(grouped.items()))


def parse_sound_id(sound_id: Optional[str]) -> Tuple[SourceKind, str]:
    """Split a sound identifier into its kind and key.

    ``"radio:wqxr"`` -> (RADIO, "wqxr"); anything else is a tone id, an empty
    value meaning the default tone.
    """
    if sound_id and sound_id.startswith(RADIO_PREFIX):
        return SourceKind.RADIO, sound_id[len(RADIO_PREFIX):]
    return SourceKind.TONE, sound_id or DEFAULT_TONE


def sound_options() -> List[str]:
    """All valid sound identifiers, tones first."""
    return list(TONES) + [f"{RADIO_PREFIX}{station.id}" for station in RADIO_STATIONS]
