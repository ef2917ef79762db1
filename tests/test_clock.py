from datetime import date, time

import pytest

from app.core.errors import InvalidInputError
from app.scheduling.clock import (
    END_OF_DAY,
    MIDNIGHT,
    LocalTime,
    effective_end,
    effective_end_minutes,
    parse_date,
    sunday_weekday,
)


@pytest.mark.parametrize(
    "raw,minutes",
    [
        ("09:00", 540),
        ("9:05", 545),
        ("23:59", 1439),
        ("00:00", 0),
        ("10:30:00", 630),
        (time(14, 15), 855),
    ],
)
def test_parse_accepts_hhmm_and_time(raw, minutes):
    assert LocalTime.parse(raw).minutes == minutes


@pytest.mark.parametrize("raw", ["24:00", "12:60", "ab:cd", "", "9"])
def test_parse_rejects_malformed(raw):
    with pytest.raises(InvalidInputError):
        LocalTime.parse(raw)


def test_out_of_day_minutes_rejected():
    with pytest.raises(InvalidInputError):
        LocalTime(1441)
    with pytest.raises(InvalidInputError):
        LocalTime(-1)


def test_midnight_sentinel_reads_as_end_of_day():
    assert effective_end_minutes("00:00") == 1440
    assert effective_end(MIDNIGHT) == END_OF_DAY
    assert effective_end_minutes("12:00") == 720


def test_end_of_day_prints_as_midnight():
    assert str(END_OF_DAY) == "00:00"
    assert END_OF_DAY.to_time() == time(0, 0)
    assert str(LocalTime(9 * 60 + 5)) == "09:05"


def test_hour_alignment():
    assert LocalTime.parse("10:00").is_hour_aligned
    assert not LocalTime.parse("10:30").is_hour_aligned


def test_parse_date():
    assert parse_date("2025-06-02") == date(2025, 6, 2)
    assert parse_date(date(2025, 6, 2)) == date(2025, 6, 2)
    with pytest.raises(InvalidInputError):
        parse_date("02/06/2025")


def test_weekday_numbering_starts_on_sunday():
    assert sunday_weekday(date(2025, 6, 1)) == 0  # Sunday
    assert sunday_weekday(date(2025, 6, 2)) == 1  # Monday
    assert sunday_weekday(date(2025, 6, 7)) == 6  # Saturday
