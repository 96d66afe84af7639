from datetime import date
from types import SimpleNamespace

import pytest

from agenda.core.exceptions import InvalidBusinessHours, InvalidDuration
from agenda.domain.availability import BusinessHours, get_available_slots
from agenda.domain.timeutils import overlaps, to_minutes

MONDAY = date(2026, 2, 16)
SUNDAY = date(2026, 2, 15)

HOURS = BusinessHours.build(["Seg", "Ter", "Qua", "Qui", "Sex", "Sáb"], "09:00", "18:00")


def appt(start, end, status="confirmed", id=None):
    return SimpleNamespace(id=id, start_time=start, end_time=end, status=status)


def test_existing_appointment_blocks_overlapping_slots():
    existing = [appt("10:00", "11:00")]
    slots = get_available_slots(MONDAY, 30, HOURS, existing)

    assert "09:30" in slots
    assert "10:00" not in slots
    assert "10:30" not in slots
    assert "11:00" in slots


def test_closing_time_boundary_is_inclusive():
    slots = get_available_slots(MONDAY, 90, HOURS, [])

    assert "16:30" in slots
    assert "17:00" not in slots
    assert slots[-1] == "16:30"


def test_longer_service_blocked_by_later_appointment():
    # 60 min às 09:30 terminaria às 10:30 e bate no das 10:00
    existing = [appt("10:00", "11:00")]
    slots = get_available_slots(MONDAY, 60, HOURS, existing)

    assert "09:00" in slots
    assert "09:30" not in slots
    assert "11:00" in slots


def test_closed_day_returns_empty():
    assert get_available_slots(SUNDAY, 30, HOURS, []) == []


def test_terminal_and_reschedule_statuses_do_not_block():
    existing = [
        appt("10:00", "11:00", "completed"),
        appt("11:00", "12:00", "canceled"),
        appt("12:00", "13:00", "reschedule"),
    ]
    slots = get_available_slots(MONDAY, 60, HOURS, existing)

    for t in ("10:00", "11:00", "12:00"):
        assert t in slots


@pytest.mark.parametrize("status", ["pending", "confirmed", "in_progress"])
def test_non_terminal_statuses_block(status):
    slots = get_available_slots(MONDAY, 30, HOURS, [appt("14:00", "14:30", status)])
    assert "14:00" not in slots


def test_slots_are_ascending_and_never_overlap_busy_intervals():
    existing = [appt("09:45", "10:20"), appt("13:10", "14:50", "in_progress"), appt("17:30", "18:00", "pending")]
    for duration in (15, 30, 45, 60, 90, 120):
        slots = get_available_slots(MONDAY, duration, HOURS, existing)
        assert slots == sorted(slots)
        for s in slots:
            start = to_minutes(s)
            end = start + duration
            assert end <= HOURS.close_minute
            for a in existing:
                assert not overlaps(start, end, to_minutes(a.start_time), to_minutes(a.end_time))


def test_custom_granularity():
    slots = get_available_slots(MONDAY, 30, HOURS, [], slot_granularity_minutes=15)
    assert slots[:3] == ["09:00", "09:15", "09:30"]
    assert slots[-1] == "17:30"


def test_service_longer_than_the_day_has_no_slots():
    assert get_available_slots(MONDAY, 10 * 60, HOURS, []) == []


@pytest.mark.parametrize("duration", [0, -30])
def test_invalid_duration(duration):
    with pytest.raises(InvalidDuration):
        get_available_slots(MONDAY, duration, HOURS, [])


def test_invalid_business_hours():
    hours = BusinessHours.build(["Seg"], "18:00", "09:00")
    with pytest.raises(InvalidBusinessHours):
        get_available_slots(MONDAY, 30, hours, [])

    same = BusinessHours.build(["Seg"], "09:00", "09:00")
    with pytest.raises(InvalidBusinessHours):
        get_available_slots(MONDAY, 30, same, [])


def test_accepts_iso_date_strings():
    assert get_available_slots("2026-02-16", 30, HOURS, [])[0] == "09:00"


def test_business_closing_at_midnight():
    hours = BusinessHours.build(["Seg"], "20:00", "24:00")
    slots = get_available_slots(MONDAY, 60, hours, [appt("23:30", "24:00")])

    assert hours.close_minute == 1440
    assert slots == ["20:00", "20:30", "21:00", "21:30", "22:00", "22:30"]
