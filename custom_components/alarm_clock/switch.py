"""Expose each alarm as a Switch that enables or disables it."""
from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    DEFAULT_NAME,
    DOMAIN,
    SIGNAL_ALARM_ADDED,
    SIGNAL_ALARM_REMOVED,
    SIGNAL_ALARM_UPDATED,
)
from .coordinator import AlarmClockCoordinator
from .models import Alarm

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up one switch per alarm and follow registry changes."""
    coordinator: AlarmClockCoordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]

    entities: dict[str, AlarmSwitch] = {}

    @callback
    def _on_alarm_added(alarm: Alarm) -> None:
        """Create a new switch entity for alarm."""
        if alarm.id not in entities:
            entity = AlarmSwitch(coordinator, alarm)
            entities[alarm.id] = entity
            async_add_entities([entity])
            _LOGGER.debug("Created switch entity for %s", alarm.id)

    @callback
    def _on_alarm_removed(alarm_id: str) -> None:
        entity = entities.pop(alarm_id, None)
        if entity is None:
            return
        entity_registry = er.async_get(hass)
        if entity.entity_id and entity_registry.async_get(entity.entity_id):
            entity_registry.async_remove(entity.entity_id)
        else:
            hass.async_create_task(entity.async_remove(force_remove=True))

    entry.async_on_unload(async_dispatcher_connect(hass, SIGNAL_ALARM_ADDED, _on_alarm_added))
    entry.async_on_unload(
        async_dispatcher_connect(hass, SIGNAL_ALARM_REMOVED, _on_alarm_removed)
    )

    for alarm in coordinator.registry.list():
        _on_alarm_added(alarm)

    hass.data[DOMAIN][entry.entry_id]["entities"] = entities


class AlarmSwitch(SwitchEntity):
    """Switch entity for each alarm."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(self, coordinator: AlarmClockCoordinator, alarm: Alarm) -> None:
        """Initialize the switch entity."""
        self.coordinator = coordinator
        self._alarm = alarm
        self._attr_unique_id = f"{DOMAIN}_{alarm.id}"

    @property
    def name(self) -> str:
        """Return name."""
        return self._alarm.label or f"Alarm {self._alarm.time}"

    @property
    def is_on(self) -> bool:
        """Return True if enabled."""
        return self._alarm.enabled

    @property
    def icon(self) -> str:
        return "mdi:alarm" if self._alarm.enabled else "mdi:alarm-off"

    @property
    def device_info(self) -> DeviceInfo:
        """Return device info."""
        return DeviceInfo(
            identifiers={(DOMAIN, DOMAIN)},
            name=DEFAULT_NAME,
            model=DOMAIN,
            entry_type=DeviceEntryType.SERVICE,
        )

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return extra attributes."""
        attrs = self._alarm.as_dict()
        attrs["ringing"] = self.coordinator.state.alarm is self._alarm
        return attrs

    async def async_added_to_hass(self) -> None:
        """Entity added to hass."""
        self.async_on_remove(
            async_dispatcher_connect(self.hass, SIGNAL_ALARM_UPDATED, self._on_alarm_updated)
        )

    @callback
    def _on_alarm_updated(self, alarm: Alarm) -> None:
        """Update when the alarm changes."""
        if alarm.id == self._alarm.id:
            self._alarm = alarm
            self.async_write_ha_state()

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn on (enable) the alarm."""
        if not self._alarm.enabled:
            self.coordinator.update_alarm(self._alarm.id, {"enabled": True})

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn off (disable) the alarm."""
        if self._alarm.enabled:
            self.coordinator.update_alarm(self._alarm.id, {"enabled": False})
