"""In-memory alarm registry.

Alarms live for the lifetime of the Home Assistant run only. The registry
keeps insertion order, which is the order the matcher checks alarms in.
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from .models import Alarm, clamp_volume

_LOGGER = logging.getLogger(__name__)

_PATCHABLE = {f.name for f in dataclasses.fields(Alarm)} - {"id"}


class AlarmRegistry:
    """Ordered collection of alarms keyed by id."""

    def __init__(self) -> None:
        self._alarms: Dict[str, Alarm] = {}

    def __len__(self) -> int:
        return len(self._alarms)

    def __contains__(self, alarm_id: object) -> bool:
        return alarm_id in self._alarms

    def add(self, alarm: Alarm) -> str:
        """Insert an alarm, assigning an id if it has none. Returns the id."""
        if not alarm.id or alarm.id in self._alarms:
            if alarm.id:
                _LOGGER.warning("Alarm id %s already in use, assigning a new one", alarm.id)
            alarm.id = uuid.uuid4().hex
        self._alarms[alarm.id] = alarm
        _LOGGER.debug("Added alarm %s at %s", alarm.id, alarm.time)
        return alarm.id

    def remove(self, alarm_id: str) -> Optional[Alarm]:
        """Remove an alarm; unknown ids are ignored."""
        alarm = self._alarms.pop(alarm_id, None)
        if alarm is None:
            _LOGGER.debug("Remove ignored, alarm %s not found", alarm_id)
        return alarm

    def get(self, alarm_id: str) -> Optional[Alarm]:
        return self._alarms.get(alarm_id)

    def list(self) -> List[Alarm]:
        """Return alarms in insertion order."""
        return list(self._alarms.values())

    def update(self, alarm_id: str, patch: Mapping[str, Any]) -> Optional[Alarm]:
        """Apply a partial update; returns the updated alarm or None if absent."""
        alarm = self._alarms.get(alarm_id)
        if alarm is None:
            _LOGGER.debug("Update ignored, alarm %s not found", alarm_id)
            return None

        changes = {}
        for key, value in patch.items():
            if key not in _PATCHABLE:
                _LOGGER.warning("Ignoring unknown alarm field %s", key)
                continue
            changes[key] = value
        if "volume" in changes:
            changes["volume"] = clamp_volume(changes["volume"])

        for key, value in changes.items():
            setattr(alarm, key, value)
        return alarm
