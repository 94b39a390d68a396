"""Coordinator: clock tick, alarm state machine and playback."""
from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Set

from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.util import dt as dt_util

from .const import (
    ACTION_SNOOZE,
    ACTION_STOP,
    DEFAULT_ALARM_MESSAGE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_NAME,
    DEFAULT_SNOOZE_MINUTES,
    EVENT_ALARM_FIRED,
    EVENT_FEEDBACK,
    SEVERITY_INFO,
    SIGNAL_ALARM_ADDED,
    SIGNAL_ALARM_REMOVED,
    SIGNAL_ALARM_UPDATED,
    STATUS_ENTITY_ID,
)
from .matcher import find_due_alarm, format_minute, minute_stamp, next_occurrence
from .models import ActiveAlarmState, Alarm, AlarmPhase, clamp_volume
from .player import AlarmSoundPlayer, AudioBackend
from .registry import AlarmRegistry

_LOGGER = logging.getLogger(__name__)

__all__ = ["AlarmClockCoordinator"]

TICK_INTERVAL = timedelta(seconds=1)


class AlarmClockCoordinator:
    """Owns the alarm registry and the single active alarm slot."""

    def __init__(
        self,
        hass: HomeAssistant,
        backend: AudioBackend,
        *,
        notify_service: Optional[str] = None,
        snooze_minutes: int = DEFAULT_SNOOZE_MINUTES,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        shuffle_failover: bool = False,
        registry: Optional[AlarmRegistry] = None,
        state: Optional[ActiveAlarmState] = None,
    ) -> None:
        """Initialize coordinator.

        ``registry`` and ``state`` may be handed over from a previous
        coordinator so alarms survive an entry reload.
        """
        self.hass = hass
        self.registry = registry if registry is not None else AlarmRegistry()
        self.state = state if state is not None else ActiveAlarmState()
        self.player = AlarmSoundPlayer(
            backend,
            feedback=self.async_feedback,
            connect_timeout=connect_timeout,
            shuffle=shuffle_failover,
        )
        self._notify_service = notify_service
        self._snooze_minutes = snooze_minutes
        self._playback_task: Optional[asyncio.Task] = None
        self._stopping = False
        # Alarms created by snooze that have not rung yet
        self._snooze_ids: Set[str] = set()
        self._unsubs: list[Callable[[], None]] = []

    @callback
    def async_start(self) -> None:
        """Subscribe to the once-per-second tick and notification actions."""
        self._unsubs.append(
            async_track_time_interval(
                self.hass, self._on_tick, TICK_INTERVAL, name="alarm_clock_tick"
            )
        )
        self._unsubs.append(
            self.hass.bus.async_listen(
                "mobile_app_notification_action", self._on_notification_action
            )
        )
        self._update_status()
        _LOGGER.debug("Alarm clock started")

    async def async_shutdown(self) -> None:
        """Stop ticking and silence any ringing alarm, leaving the registry as is."""
        while self._unsubs:
            self._unsubs.pop()()
        await self._async_halt_playback()
        self.state.clear()

    @callback
    def _on_tick(self, now: datetime) -> None:
        self.async_tick(dt_util.as_local(now))

    @callback
    def async_tick(self, now: datetime) -> Optional[Alarm]:
        """Run the matcher for ``now`` (local time) and fire a due alarm."""
        alarm = find_due_alarm(now, self.registry.list(), self.state)
        if alarm is None:
            return None
        self.async_fire(alarm, now)
        return alarm

    @callback
    def async_fire(self, alarm: Alarm, now: datetime) -> bool:
        """Idle -> Ringing. Ignored while another alarm is active."""
        if not self.state.is_idle:
            _LOGGER.debug(
                "Alarm %s ignored, %s is already ringing", alarm.id, self.state.alarm.id
            )
            return False

        self.state.ring(alarm, now, minute_stamp(now))
        self._snooze_ids.discard(alarm.id)
        _LOGGER.info("Alarm %s ringing (%s)", alarm.id, alarm.label or alarm.time)

        self._playback_task = self.hass.async_create_task(
            self._async_ring(alarm), name=f"alarm_clock_playback_{alarm.id}"
        )

        message = alarm.label or DEFAULT_ALARM_MESSAGE
        if alarm.show_notification:
            self.hass.async_create_task(self._async_notify(alarm, message))
        self.async_feedback(message, SEVERITY_INFO)
        self.hass.bus.async_fire(
            EVENT_ALARM_FIRED,
            {"alarm_id": alarm.id, "label": alarm.label, "time": alarm.time},
        )
        self._update_status()
        return True

    async def _async_ring(self, alarm: Alarm) -> None:
        await self.player.async_play(alarm.sound_id, alarm.volume)
        self._update_status()

    async def async_stop(self) -> bool:
        """Ringing -> Idle. One-shot alarms are removed. Safe to call when idle."""
        if self.state.is_idle or self._stopping:
            _LOGGER.debug("Stop ignored, no alarm ringing")
            return False

        await self._async_halt_playback()
        alarm = self.state.clear()
        if alarm.is_one_shot:
            self.remove_alarm(alarm.id)

        _LOGGER.info("Stopped alarm %s", alarm.id)
        self.async_feedback("Alarm stopped", SEVERITY_INFO)
        self._update_status()
        return True

    async def async_snooze(
        self, minutes: Optional[int] = None, now: Optional[datetime] = None
    ) -> Optional[str]:
        """Ringing -> Idle, scheduling a one-shot copy ``minutes`` from now.

        Returns the id of the new alarm, or None if nothing was ringing.
        """
        if self.state.is_idle or self._stopping:
            _LOGGER.debug("Snooze ignored, no alarm ringing")
            return None

        minutes = minutes or self._snooze_minutes
        now = now or dt_util.now()
        await self._async_halt_playback()
        alarm = self.state.clear()

        snooze_at = (now + timedelta(minutes=minutes)).replace(second=0, microsecond=0)
        if alarm.is_one_shot:
            self.remove_alarm(alarm.id)
        new_id = self.add_alarm(
            Alarm(
                time=format_minute(snooze_at),
                label=alarm.label,
                reminder_date=snooze_at.date(),
                sound_id=alarm.sound_id,
                volume=alarm.volume,
                show_notification=alarm.show_notification,
            )
        )
        self._snooze_ids.add(new_id)

        _LOGGER.info(
            "Snoozed %s for %d minutes. Will ring at %s",
            alarm.id,
            minutes,
            snooze_at.strftime("%H:%M"),
        )
        self.async_feedback(f"Snoozed for {minutes} minutes", SEVERITY_INFO)
        self._update_status()
        return new_id

    async def async_set_volume(self, volume: int) -> bool:
        """Change the ringing alarm's volume without restarting playback."""
        if self.state.alarm is None:
            return False
        self.state.alarm.volume = clamp_volume(volume)
        return await self.player.async_set_volume(self.state.alarm.volume)

    async def _async_halt_playback(self) -> None:
        """Silence the audio channel. The slot stays Ringing until this returns."""
        self._stopping = True
        try:
            task, self._playback_task = self._playback_task, None
            if task is not None and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
            await self.player.async_stop()
        finally:
            self._stopping = False

    #
    # Registry mutation API
    #
    @callback
    def add_alarm(self, alarm: Alarm) -> str:
        alarm_id = self.registry.add(alarm)
        async_dispatcher_send(self.hass, SIGNAL_ALARM_ADDED, alarm)
        self._update_status()
        return alarm_id

    @callback
    def remove_alarm(self, alarm_id: str) -> None:
        """Remove an alarm; unknown ids are ignored. A ringing alarm is stopped."""
        alarm = self.registry.remove(alarm_id)
        if alarm is None:
            return
        self._snooze_ids.discard(alarm_id)
        self.state.last_fired.pop(alarm_id, None)
        if self.state.alarm is not None and self.state.alarm.id == alarm_id:
            self.hass.async_create_task(self.async_stop())
        async_dispatcher_send(self.hass, SIGNAL_ALARM_REMOVED, alarm_id)
        self._update_status()

    @callback
    def update_alarm(self, alarm_id: str, patch: Mapping[str, Any]) -> Optional[Alarm]:
        """Patch an alarm; returns None when it does not exist."""
        alarm = self.registry.update(alarm_id, patch)
        if alarm is None:
            return None
        if "volume" in patch and self.state.alarm is alarm:
            self.hass.async_create_task(self.player.async_set_volume(alarm.volume))
        async_dispatcher_send(self.hass, SIGNAL_ALARM_UPDATED, alarm)
        self._update_status()
        return alarm

    #
    # Outward notifications
    #
    @callback
    def async_feedback(self, message: str, severity: str) -> None:
        """Publish a toast-style message for the UI."""
        self.hass.bus.async_fire(EVENT_FEEDBACK, {"message": message, "severity": severity})

    async def _async_notify(self, alarm: Alarm, message: str) -> None:
        """Send the fire notification; failures never affect ringing."""
        if not self._notify_service:
            _LOGGER.debug("No notify service configured")
            return

        service = self._notify_service.split(".", 1)[-1]
        payload = {
            "message": message,
            "title": DEFAULT_NAME,
            "data": {
                "tag": alarm.id,
                "actions": [
                    {"action": ACTION_STOP, "title": "Stop"},
                    {"action": ACTION_SNOOZE, "title": "Snooze"},
                ],
            },
        }
        try:
            await self.hass.services.async_call("notify", service, payload, blocking=True)
        except Exception as err:
            _LOGGER.error("Error sending notification: %s", err, exc_info=True)

    @callback
    def _on_notification_action(self, event: Event) -> None:
        action = event.data.get("action")
        if action == ACTION_STOP:
            self.hass.async_create_task(self.async_stop())
        elif action == ACTION_SNOOZE:
            self.hass.async_create_task(self.async_snooze())

    #
    # Status entity
    #
    @property
    def status(self) -> str:
        """``ringing``, ``snoozed`` or ``idle``."""
        if self.state.phase == AlarmPhase.RINGING:
            return AlarmPhase.RINGING.value
        if any(alarm_id in self.registry for alarm_id in self._snooze_ids):
            return "snoozed"
        return AlarmPhase.IDLE.value

    def next_alarm(self, now: Optional[datetime] = None) -> Optional[tuple[datetime, Alarm]]:
        """Return the soonest upcoming (datetime, alarm) pair."""
        now = now or dt_util.now()
        upcoming = [
            (when, alarm)
            for alarm in self.registry.list()
            if (when := next_occurrence(alarm, now)) is not None
        ]
        return min(upcoming, key=lambda pair: pair[0]) if upcoming else None

    @callback
    def _update_status(self) -> None:
        """Update the central status entity."""
        try:
            session = self.player.session
            upcoming = self.next_alarm()
            attrs: Dict[str, Any] = {
                "active_alarm": self.state.alarm.as_dict() if self.state.alarm else None,
                "alarms": [alarm.as_dict() for alarm in self.registry.list()],
                "alarm_count": len(self.registry),
                "next_alarm": upcoming[0].isoformat() if upcoming else None,
                "next_alarm_id": upcoming[1].id if upcoming else None,
                "connection_status": session.connection_status.value if session else "idle",
                "station": session.station_id if session else None,
                "stream_url": session.current_url if session else None,
                "last_updated": dt_util.now().isoformat(),
            }
            self.hass.states.async_set(STATUS_ENTITY_ID, self.status, attrs)

        except Exception as err:
            _LOGGER.error("Failed to update status entity: %s", err, exc_info=True)
