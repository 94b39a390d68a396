"""Tests for alarm matching."""
from datetime import date, datetime

from custom_components.alarm_clock.matcher import (
    find_due_alarm,
    minute_stamp,
    next_occurrence,
)
from custom_components.alarm_clock.models import ActiveAlarmState, Alarm


def _alarm(**kwargs):
    kwargs.setdefault("id", kwargs.get("time"))
    return Alarm(**kwargs)


def test_fires_exactly_at_its_minute():
    alarm = _alarm(time="07:30")
    state = ActiveAlarmState()

    assert find_due_alarm(datetime(2024, 5, 1, 7, 29, 59), [alarm], state) is None
    assert find_due_alarm(datetime(2024, 5, 1, 7, 30, 0), [alarm], state) is alarm
    assert find_due_alarm(datetime(2024, 5, 1, 7, 30, 59), [alarm], state) is alarm
    assert find_due_alarm(datetime(2024, 5, 1, 7, 31, 0), [alarm], state) is None


def test_date_scoped_alarm_only_on_its_date():
    alarm = _alarm(time="07:30", reminder_date=date(2024, 5, 1))
    state = ActiveAlarmState()

    assert find_due_alarm(datetime(2024, 4, 30, 7, 30), [alarm], state) is None
    assert find_due_alarm(datetime(2024, 5, 1, 7, 30), [alarm], state) is alarm
    assert find_due_alarm(datetime(2024, 5, 2, 7, 30), [alarm], state) is None


def test_same_minute_first_in_order_wins_and_nothing_fires_while_ringing():
    recurring = _alarm(time="07:00", is_recurring=True, id="r")
    once = _alarm(time="07:00", id="o")
    state = ActiveAlarmState()
    now = datetime(2024, 5, 1, 7, 0, 0)

    due = find_due_alarm(now, [recurring, once], state)
    assert due is recurring

    state.ring(due, now, minute_stamp(now))
    assert find_due_alarm(now, [recurring, once], state) is None
    assert find_due_alarm(datetime(2024, 5, 1, 7, 0, 1), [recurring, once], state) is None


def test_handled_alarm_not_matched_again_in_same_minute():
    alarm = _alarm(time="07:00", is_recurring=True)
    state = ActiveAlarmState()
    now = datetime(2024, 5, 1, 7, 0, 5)

    state.ring(alarm, now, minute_stamp(now))
    state.clear()

    assert find_due_alarm(datetime(2024, 5, 1, 7, 0, 30), [alarm], state) is None
    assert find_due_alarm(datetime(2024, 5, 2, 7, 0, 0), [alarm], state) is alarm


def test_disabled_alarm_never_matches():
    alarm = _alarm(time="07:00", enabled=False)

    assert find_due_alarm(datetime(2024, 5, 1, 7, 0), [alarm], ActiveAlarmState()) is None


def test_next_occurrence():
    now = datetime(2024, 5, 1, 8, 0)

    assert next_occurrence(_alarm(time="09:15"), now) == datetime(2024, 5, 1, 9, 15)
    assert next_occurrence(_alarm(time="07:00"), now) == datetime(2024, 5, 2, 7, 0)
    assert next_occurrence(_alarm(time="07:00", reminder_date=date(2024, 5, 1)), now) is None
    assert next_occurrence(_alarm(time="07:00", enabled=False), now) is None
