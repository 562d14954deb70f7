# apps/goals/domain/services/week_calendar.py
"""
Arytmetyka tygodni ISO-8601.

Tydzień zaczyna się w poniedziałek, tydzień 1 to ten, w którym wypada
pierwszy czwartek roku. Identyfikator tygodnia ma postać 'YYYY-Www'.
Pozostałe moduły nie parsują dat samodzielnie, tylko przez ten moduł.
"""
import re
from datetime import date, datetime, time, timedelta
from typing import List, NamedTuple, Optional, Union

from dateutil.parser import isoparse
from dateutil.rrule import WEEKLY, rrule
from django.utils import timezone

from apps.goals.domain.exceptions import InvalidWeekId

WEEK_ID_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

DateLike = Union[date, datetime, str]


class WeekRef(NamedTuple):
    year: int
    week: int


class WeekRange(NamedTuple):
    start: date  # poniedziałek
    end: date    # niedziela

    def __contains__(self, day) -> bool:
        return self.start <= to_date(day) <= self.end


def to_date(value: DateLike) -> date:
    """Zamienia date/datetime/string ISO na date. Świadome datetime liczone w czasie lokalnym."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return to_date(isoparse(value))
    raise TypeError(f"Cannot convert {value!r} to date")


def iso_week(day: Optional[DateLike] = None) -> str:
    day = to_date(day) if day is not None else timezone.localdate()
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def current_week_id() -> str:
    return iso_week()


def parse_week_id(week_id: str) -> WeekRef:
    match = WEEK_ID_PATTERN.match(week_id or '')
    if not match:
        raise InvalidWeekId(f"Invalid week id: {week_id!r}")

    year, week = int(match.group(1)), int(match.group(2))
    try:
        # Odrzuca np. W53 w roku, który ma tylko 52 tygodnie
        date.fromisocalendar(year, week, 1)
    except ValueError as e:
        raise InvalidWeekId(f"Invalid week id: {week_id!r} ({e})") from e
    return WeekRef(year, week)


def week_year(week_id: str) -> int:
    return parse_week_id(week_id).year


def week_range(week_id: str) -> WeekRange:
    year, week = parse_week_id(week_id)
    start = date.fromisocalendar(year, week, 1)
    return WeekRange(start, start + timedelta(days=6))


def month_id_from_week(week_id: str) -> str:
    """Miesiąc ('YYYY-MM') poniedziałku danego tygodnia."""
    return week_range(week_id).start.strftime('%Y-%m')


def compare_week_ids(a: str, b: str) -> int:
    ref_a, ref_b = parse_week_id(a), parse_week_id(b)
    return (ref_a > ref_b) - (ref_a < ref_b)


def week_sort_key(week_id: str) -> WeekRef:
    return parse_week_id(week_id)


def weeks_between(start_week_id: str, end_week_id: str) -> int:
    start, end = parse_week_id(start_week_id), parse_week_id(end_week_id)
    if start.year == end.year:
        return end.week - start.week

    # Przybliżenie: każdy rok ma 52 tygodnie (lata z W53 liczą się o 1 za mało)
    return (end.year - start.year) * 52 + end.week - start.week


def _weekly_mondays(first_monday: date, **kwargs) -> List[date]:
    rule = rrule(WEEKLY, dtstart=datetime.combine(first_monday, time.min), **kwargs)
    return [occurrence.date() for occurrence in rule]


def next_n_weeks(start_week_id: str, n: int) -> List[str]:
    """n kolejnych tygodni, zaczynając od start_week_id (włącznie)."""
    if n <= 0:
        return []
    start = week_range(start_week_id).start
    return [iso_week(monday) for monday in _weekly_mondays(start, count=n)]


def all_weeks_for_year(year: int) -> List[str]:
    """Wszystkie tygodnie roku ISO (52 albo 53)."""
    first_monday = date.fromisocalendar(year, 1, 1)
    last_monday = date.fromisocalendar(year + 1, 1, 1) - timedelta(days=7)
    until = datetime.combine(last_monday, time.min)
    return [iso_week(monday) for monday in _weekly_mondays(first_monday, until=until)]


def weeks_until_date(target: DateLike, week_id: Optional[str] = None) -> int:
    """
    Liczba tygodni od poniedziałku tygodnia week_id do target (w górę).
    Zwraca -1, jeśli termin już minął.
    """
    start = week_range(week_id or current_week_id()).start
    days = (to_date(target) - start).days
    weeks = -(-days // 7)  # ceil
    return -1 if weeks < 0 else weeks


def format_week_id(week_id: str) -> str:
    year, week = parse_week_id(week_id)
    return f"Week {week}, {year}"


def format_week_range(day: DateLike) -> str:
    """Np. 'Oct 6-12' albo 'Oct 28-Nov 3'."""
    start, end = week_range(iso_week(day))
    start_month, end_month = MONTH_NAMES[start.month - 1], MONTH_NAMES[end.month - 1]
    if start.month == end.month:
        return f"{start_month} {start.day}-{end.day}"
    return f"{start_month} {start.day}-{end_month} {end.day}"
