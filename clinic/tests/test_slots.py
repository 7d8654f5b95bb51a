from datetime import date, time

import pytest

from clinic.exceptions import ConfigurationError
from clinic.services.availability import SOURCE_WEEKLY, Unavailable, WorkingInterval
from clinic.services.clock import add_minutes, day_of_week, format_hhmm, from_minutes, parse_hhmm
from clinic.services.slots import SlotList, generate_slots


def _hhmm(slots):
    return [format_hhmm(s) for s in slots]


def test_monday_nine_to_five_in_half_hours():
    interval = WorkingInterval(time(9, 0), time(17, 0), SOURCE_WEEKLY)
    slots = generate_slots(interval, 30)
    assert len(slots) == 16
    assert _hhmm(slots)[0] == '09:00'
    assert _hhmm(slots)[-1] == '16:30'


def test_partial_trailing_slot_is_dropped():
    interval = WorkingInterval(time(10, 0), time(11, 30), SOURCE_WEEKLY)
    assert _hhmm(generate_slots(interval, 45)) == ['10:00', '10:45']


@pytest.mark.parametrize('start,end,duration', [
    ('09:00', '17:00', 30),
    ('08:15', '12:40', 20),
    ('13:00', '13:59', 15),
    ('00:00', '23:59', 60),
])
def test_slot_count_and_spacing(start, end, duration):
    s, e = parse_hhmm(start), parse_hhmm(end)
    slots = generate_slots(WorkingInterval(s, e, SOURCE_WEEKLY), duration)
    total = (e.hour * 60 + e.minute) - (s.hour * 60 + s.minute)
    assert len(slots) == total // duration
    assert slots[0] == s
    for a, b in zip(slots, slots[1:]):
        assert add_minutes(a, duration) == b
    # last slot still ends inside the interval
    assert add_minutes(slots[-1], duration) <= e


def test_slot_may_end_exactly_at_closing():
    slots = generate_slots(WorkingInterval(time(9, 0), time(10, 0), SOURCE_WEEKLY), 30)
    assert _hhmm(slots) == ['09:00', '09:30']


def test_interval_shorter_than_one_slot_yields_nothing():
    assert generate_slots(WorkingInterval(time(9, 0), time(9, 20), SOURCE_WEEKLY), 30) == []


@pytest.mark.parametrize('duration', [0, -15, None])
def test_non_positive_duration_is_a_configuration_error(duration):
    with pytest.raises(ConfigurationError):
        generate_slots(WorkingInterval(time(9, 0), time(17, 0), SOURCE_WEEKLY), duration)


def test_weekday_numbering_starts_on_sunday():
    assert day_of_week(date(2024, 6, 9)) == 0   # Sunday
    assert day_of_week(date(2024, 6, 10)) == 1  # Monday
    assert day_of_week(date(2024, 6, 15)) == 6  # Saturday


def test_minutes_past_midnight_are_rejected():
    with pytest.raises(ValueError):
        from_minutes(24 * 60)


def test_slot_list_payload_for_unavailable_day():
    result = SlotList(doctor_id=3, day=date(2024, 6, 10), duration_minutes=30, resolution=Unavailable('leave'))
    payload = result.as_dict()
    assert payload['available'] is False
    assert payload['reason'] == 'leave'
    assert payload['slots'] == []
    assert 'interval' not in payload


def test_slot_list_payload_for_working_day():
    interval = WorkingInterval(time(9, 0), time(10, 0), SOURCE_WEEKLY)
    result = SlotList(
        doctor_id=3, day=date(2024, 6, 10), duration_minutes=30, resolution=interval,
        slots=generate_slots(interval, 30),
    )
    payload = result.as_dict()
    assert payload['available'] is True
    assert payload['slots'] == ['09:00', '09:30']
    assert payload['interval'] == {'start': '09:00', 'end': '10:00', 'source': 'weekly'}
    assert payload['date'] == '2024-06-10'
