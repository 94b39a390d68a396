"""The Alarm Clock integration."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.typing import ConfigType

from .catalog import sound_options
from .const import (
    ATTR_ALARM_ID,
    ATTR_ENABLED,
    ATTR_LABEL,
    ATTR_MINUTES,
    ATTR_RECURRING,
    ATTR_REMINDER_DATE,
    ATTR_SHOW_NOTIFICATION,
    ATTR_SOUND,
    ATTR_TIME,
    ATTR_VOLUME,
    CONF_CONNECT_TIMEOUT,
    CONF_MEDIA_PLAYER,
    CONF_NOTIFY_SERVICE,
    CONF_SHUFFLE_FAILOVER,
    CONF_SNOOZE_MINUTES,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_SHUFFLE_FAILOVER,
    DEFAULT_SNOOZE_MINUTES,
    DEFAULT_TONE,
    DEFAULT_VOLUME,
    DOMAIN,
    PLATFORMS,
    SERVICE_ADD_ALARM,
    SERVICE_REMOVE_ALARM,
    SERVICE_SET_VOLUME,
    SERVICE_SNOOZE,
    SERVICE_STOP,
    SERVICE_UPDATE_ALARM,
    SOUNDS_URL_PATH,
)
from .coordinator import AlarmClockCoordinator
from .media_player import MediaPlayerBackend
from .models import SOUNDS_DIR, ActiveAlarmState, Alarm
from .registry import AlarmRegistry

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

# Alarms per entry, kept across reloads for the lifetime of the run
DATA_ALARMS = f"{DOMAIN}_alarms"

VOLUME = vol.All(vol.Coerce(int), vol.Range(min=0, max=100))
MINUTES = vol.All(vol.Coerce(int), vol.Range(min=1, max=120))

ADD_ALARM_SCHEMA = vol.Schema({
    vol.Required(ATTR_TIME): cv.time,
    vol.Optional(ATTR_LABEL, default=""): cv.string,
    vol.Optional(ATTR_RECURRING, default=False): cv.boolean,
    vol.Optional(ATTR_REMINDER_DATE): cv.date,
    vol.Optional(ATTR_SOUND, default=DEFAULT_TONE): vol.In(sound_options()),
    vol.Optional(ATTR_VOLUME, default=DEFAULT_VOLUME): VOLUME,
    vol.Optional(ATTR_SHOW_NOTIFICATION, default=True): cv.boolean,
})

UPDATE_ALARM_SCHEMA = vol.Schema({
    vol.Required(ATTR_ALARM_ID): cv.string,
    vol.Optional(ATTR_TIME): cv.time,
    vol.Optional(ATTR_LABEL): cv.string,
    vol.Optional(ATTR_RECURRING): cv.boolean,
    vol.Optional(ATTR_REMINDER_DATE): vol.Any(None, cv.date),
    vol.Optional(ATTR_SOUND): vol.In(sound_options()),
    vol.Optional(ATTR_VOLUME): VOLUME,
    vol.Optional(ATTR_SHOW_NOTIFICATION): cv.boolean,
    vol.Optional(ATTR_ENABLED): cv.boolean,
})

REMOVE_ALARM_SCHEMA = vol.Schema({vol.Required(ATTR_ALARM_ID): cv.string})
STOP_SCHEMA = vol.Schema({})
SNOOZE_SCHEMA = vol.Schema({vol.Optional(ATTR_MINUTES): MINUTES})
SET_VOLUME_SCHEMA = vol.Schema({vol.Required(ATTR_VOLUME): VOLUME})

# Service field -> Alarm attribute
_FIELD_MAP = {
    ATTR_TIME: "time",
    ATTR_LABEL: "label",
    ATTR_RECURRING: "is_recurring",
    ATTR_REMINDER_DATE: "reminder_date",
    ATTR_SOUND: "sound_id",
    ATTR_VOLUME: "volume",
    ATTR_SHOW_NOTIFICATION: "show_notification",
    ATTR_ENABLED: "enabled",
}


def _find_coordinator(hass: HomeAssistant) -> Optional[AlarmClockCoordinator]:
    """Return the coordinator of the first loaded config entry."""
    for entry_data in (hass.data.get(DOMAIN) or {}).values():
        if isinstance(entry_data, dict) and "coordinator" in entry_data:
            return entry_data["coordinator"]
    return None


def _alarm_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate service data into Alarm attributes."""
    fields = {
        _FIELD_MAP[key]: value for key, value in data.items() if key in _FIELD_MAP
    }
    if "time" in fields:
        fields["time"] = fields["time"].strftime("%H:%M")
    return fields


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the integration: register services and create base hass.data container."""
    hass.data.setdefault(DOMAIN, {})

    # Handlers locate the coordinator at call time.
    async def _service_add_alarm(call: ServiceCall) -> ServiceResponse:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Service %s called but no coordinator available", SERVICE_ADD_ALARM)
            return {ATTR_ALARM_ID: None}
        alarm_id = coordinator.add_alarm(Alarm(**_alarm_fields(dict(call.data))))
        _LOGGER.info("Scheduled alarm %s for %s", alarm_id, call.data[ATTR_TIME])
        return {ATTR_ALARM_ID: alarm_id}

    async def _service_remove_alarm(call: ServiceCall) -> None:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Service %s called but no coordinator available", SERVICE_REMOVE_ALARM)
            return
        coordinator.remove_alarm(call.data[ATTR_ALARM_ID])

    async def _service_update_alarm(call: ServiceCall) -> None:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Service %s called but no coordinator available", SERVICE_UPDATE_ALARM)
            return
        data = dict(call.data)
        alarm_id = data.pop(ATTR_ALARM_ID)
        if coordinator.update_alarm(alarm_id, _alarm_fields(data)) is None:
            _LOGGER.warning("Alarm %s not found", alarm_id)

    async def _service_stop(call: ServiceCall) -> None:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Stop service called but no coordinator available")
            return
        await coordinator.async_stop()

    async def _service_snooze(call: ServiceCall) -> None:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Snooze service called but no coordinator available")
            return
        await coordinator.async_snooze(call.data.get(ATTR_MINUTES))

    async def _service_set_volume(call: ServiceCall) -> None:
        coordinator = _find_coordinator(hass)
        if not coordinator:
            _LOGGER.error("Volume service called but no coordinator available")
            return
        await coordinator.async_set_volume(call.data[ATTR_VOLUME])

    hass.services.async_register(
        DOMAIN,
        SERVICE_ADD_ALARM,
        _service_add_alarm,
        schema=ADD_ALARM_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_REMOVE_ALARM, _service_remove_alarm, schema=REMOVE_ALARM_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_UPDATE_ALARM, _service_update_alarm, schema=UPDATE_ALARM_SCHEMA
    )
    hass.services.async_register(DOMAIN, SERVICE_STOP, _service_stop, schema=STOP_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_SNOOZE, _service_snooze, schema=SNOOZE_SCHEMA)
    hass.services.async_register(
        DOMAIN, SERVICE_SET_VOLUME, _service_set_volume, schema=SET_VOLUME_SCHEMA
    )

    return True


async def _async_register_sounds(hass: HomeAssistant) -> None:
    """Serve the built-in tone files, once per run."""
    key = f"{DOMAIN}_sounds_registered"
    http = getattr(hass, "http", None)
    if hass.data.get(key) or http is None:
        return
    if not await hass.async_add_executor_job(SOUNDS_DIR.is_dir):
        _LOGGER.warning("Tone directory %s missing, built-in tones unavailable", SOUNDS_DIR)
        return

    from homeassistant.components.http import StaticPathConfig

    await http.async_register_static_paths(
        [StaticPathConfig(SOUNDS_URL_PATH, str(SOUNDS_DIR), True)]
    )
    hass.data[key] = True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a config entry: create coordinator, start the tick, forward platforms."""
    hass.data.setdefault(DOMAIN, {})
    options = entry.options

    await _async_register_sounds(hass)

    alarms = hass.data.setdefault(DATA_ALARMS, {}).setdefault(
        entry.entry_id, {"registry": AlarmRegistry(), "state": ActiveAlarmState()}
    )
    coordinator = AlarmClockCoordinator(
        hass,
        MediaPlayerBackend(hass, entry.data[CONF_MEDIA_PLAYER]),
        notify_service=options.get(CONF_NOTIFY_SERVICE),
        snooze_minutes=options.get(CONF_SNOOZE_MINUTES, DEFAULT_SNOOZE_MINUTES),
        connect_timeout=options.get(CONF_CONNECT_TIMEOUT, DEFAULT_CONNECT_TIMEOUT),
        shuffle_failover=options.get(CONF_SHUFFLE_FAILOVER, DEFAULT_SHUFFLE_FAILOVER),
        registry=alarms["registry"],
        state=alarms["state"],
    )
    hass.data[DOMAIN][entry.entry_id] = {"coordinator": coordinator}
    coordinator.async_start()

    entry.async_on_unload(entry.add_update_listener(update_listener))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        entry_data = hass.data[DOMAIN].pop(entry.entry_id, {})
        coordinator: Optional[AlarmClockCoordinator] = entry_data.get("coordinator")
        if coordinator:
            await coordinator.async_shutdown()
    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Drop the alarms of a deleted entry."""
    hass.data.get(DATA_ALARMS, {}).pop(entry.entry_id, None)


async def update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload when options change."""
    await hass.config_entries.async_reload(entry.entry_id)
