"""Decide which alarm, if any, fires on a tick."""
from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Iterable, Optional

from .models import ActiveAlarmState, Alarm


def format_minute(now: datetime) -> str:
    """Return ``now`` as 24-hour ``HH:MM``."""
    return now.strftime("%H:%M")


def minute_stamp(now: datetime) -> str:
    """Return a date-qualified minute key, e.g. ``2024-05-01 07:30``."""
    return now.strftime("%Y-%m-%d %H:%M")


def parse_alarm_time(value: str) -> time:
    """Parse an ``HH:MM`` alarm time."""
    hour, minute = value.split(":")[:2]
    return time(int(hour), int(minute))


def alarm_matches(alarm: Alarm, now: datetime) -> bool:
    """Return True if ``alarm`` is scheduled for the minute of ``now``.

    Date-scoped alarms also need the calendar date to match. Recurrence does
    not matter here: recurring alarms stay in the registry, one-shot alarms
    are removed by the coordinator once handled.
    """
    if not alarm.enabled or alarm.time != format_minute(now):
        return False
    if alarm.reminder_date is not None:
        return alarm.reminder_date == now.date()
    return True


def find_due_alarm(
    now: datetime, alarms: Iterable[Alarm], state: ActiveAlarmState
) -> Optional[Alarm]:
    """Return the first alarm due at ``now``, or None.

    Nothing fires while an alarm is active. When several alarms share a
    minute only the first in registry order fires; the others are lost for
    that minute.
    """
    if not state.is_idle:
        return None

    stamp = minute_stamp(now)
    for alarm in alarms:
        if state.last_fired.get(alarm.id) == stamp:
            continue
        if alarm_matches(alarm, now):
            return alarm
    return None


def next_occurrence(alarm: Alarm, now: datetime) -> Optional[datetime]:
    """Return the next datetime ``alarm`` will fire after ``now``."""
    if not alarm.enabled:
        return None

    at = parse_alarm_time(alarm.time)
    if alarm.reminder_date is not None:
        candidate = datetime.combine(alarm.reminder_date, at, tzinfo=now.tzinfo)
        return candidate if candidate >= now.replace(second=0, microsecond=0) else None

    candidate = datetime.combine(now.date(), at, tzinfo=now.tzinfo)
    if candidate < now.replace(second=0, microsecond=0):
        candidate += timedelta(days=1)
    return candidate
