from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest

from apps.goals.domain.exceptions import InvalidWeekId
from apps.goals.domain.services import week_calendar


@pytest.mark.parametrize("day, expected", [
    (date(2025, 1, 1), '2025-W01'),
    (date(2024, 12, 30), '2025-W01'),  # poniedziałek należy już do roku ISO 2025
    (date(2021, 1, 3), '2020-W53'),
    (date(2025, 3, 5), '2025-W10'),
    (datetime(2025, 10, 12, 23, 59), '2025-W41'),
    ('2025-10-06', '2025-W41'),
])
def test_iso_week(day, expected):
    assert week_calendar.iso_week(day) == expected


def test_aware_datetime_uses_local_date(settings):
    settings.TIME_ZONE = 'Europe/Warsaw'
    # 23:30 UTC w niedzielę to już poniedziałek 00:30 w Warszawie
    instant = datetime(2025, 3, 9, 23, 30, tzinfo=dt_timezone.utc)

    assert week_calendar.to_date(instant) == date(2025, 3, 10)
    assert week_calendar.iso_week(instant) == '2025-W11'
    assert week_calendar.iso_week('2025-03-09T23:30:00+00:00') == '2025-W11'


def test_every_day_of_year_lies_in_its_week_range():
    day = date(2025, 1, 1)
    for _ in range(365):
        week_id = week_calendar.iso_week(day)
        rng = week_calendar.week_range(week_id)
        assert rng.start <= day <= rng.end
        assert rng.start.weekday() == 0
        assert (rng.end - rng.start).days == 6
        year, week, _ = day.isocalendar()
        assert week_calendar.parse_week_id(week_id) == (year, week)
        day += timedelta(days=1)


@pytest.mark.parametrize("week_id", ['2025-W53', '2025-W00', '2025-W7', 'garbage', '', None])
def test_parse_week_id_rejects_invalid(week_id):
    with pytest.raises(InvalidWeekId):
        week_calendar.parse_week_id(week_id)


def test_parse_week_id_accepts_week_53_in_long_year():
    assert week_calendar.parse_week_id('2020-W53') == (2020, 53)


def test_week_range_crossing_year():
    rng = week_calendar.week_range('2026-W01')
    assert rng.start == date(2025, 12, 29)
    assert rng.end == date(2026, 1, 4)
    assert date(2026, 1, 1) in rng


@pytest.mark.parametrize("week_id, month_id", [
    ('2025-W10', '2025-03'),
    ('2025-W14', '2025-03'),
    ('2025-W15', '2025-04'),
    ('2026-W01', '2025-12'),
])
def test_month_id_from_week_uses_monday(week_id, month_id):
    assert week_calendar.month_id_from_week(week_id) == month_id


def test_compare_week_ids():
    assert week_calendar.compare_week_ids('2025-W09', '2025-W10') == -1
    assert week_calendar.compare_week_ids('2026-W01', '2025-W52') == 1
    assert week_calendar.compare_week_ids('2025-W10', '2025-W10') == 0


def test_weeks_between():
    assert week_calendar.weeks_between('2025-W02', '2025-W05') == 3
    assert week_calendar.weeks_between('2025-W52', '2026-W01') == 1


def test_weeks_between_counts_every_year_as_52_weeks():
    # 2020 ma 53 tygodnie, ale przybliżenie tego nie widzi
    assert week_calendar.weeks_between('2020-W52', '2021-W01') == 1
    assert week_calendar.weeks_between('2020-W53', '2021-W01') == 0


def test_next_n_weeks_crosses_year():
    assert week_calendar.next_n_weeks('2025-W51', 4) == ['2025-W51', '2025-W52', '2026-W01', '2026-W02']
    assert week_calendar.next_n_weeks('2025-W10', 0) == []


@pytest.mark.parametrize("year, count", [(2025, 52), (2020, 53), (2026, 53)])
def test_all_weeks_for_year(year, count):
    weeks = week_calendar.all_weeks_for_year(year)
    assert len(weeks) == count
    assert weeks[0] == f'{year}-W01'
    assert weeks[-1] == f'{year}-W{count}'


def test_weeks_until_date():
    assert week_calendar.weeks_until_date(date(2025, 3, 31), '2025-W10') == 4
    assert week_calendar.weeks_until_date(date(2025, 3, 4), '2025-W10') == 1
    assert week_calendar.weeks_until_date(date(2025, 3, 3), '2025-W10') == 0
    assert week_calendar.weeks_until_date(date(2025, 2, 20), '2025-W10') == -1


def test_format_week_id():
    assert week_calendar.format_week_id('2025-W41') == 'Week 41, 2025'


def test_format_week_range():
    assert week_calendar.format_week_range(date(2025, 10, 8)) == 'Oct 6-12'
    assert week_calendar.format_week_range(date(2024, 10, 30)) == 'Oct 28-Nov 3'
