"""
Weekly window and per-project totals for the dashboard.

Both helpers are pure: they take the reference instant or the loaded entries
and return new values, so the dashboard calls them explicitly after each load.
"""
from collections import namedtuple
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.conf import settings

MONDAY = 0
SUNDAY = 6


class WeekWindow(namedtuple('WeekWindow', ['start', 'end'])):
    """Inclusive [start, end] range of one reporting week."""
    __slots__ = ()

    def contains(self, instant):
        return self.start <= instant <= self.end


def week_starts_on():
    """Configured first day of the week (Python weekday numbering, Monday = 0)."""
    value = getattr(settings, 'TIME_TRACKING_WEEK_STARTS_ON', MONDAY)
    if not MONDAY <= value <= SUNDAY:
        raise ValueError(f'TIME_TRACKING_WEEK_STARTS_ON must be between 0 and 6, got {value!r}')
    return value


def week_window(now, first_weekday=None):
    """
    Return the WeekWindow containing `now`.

    start is midnight of the first day of the week, end is the last
    microsecond of the sixth day after it.
    """
    if first_weekday is None:
        first_weekday = week_starts_on()
    day = now.date() if isinstance(now, datetime) else now
    start_day = day - timedelta(days=(day.weekday() - first_weekday) % 7)
    end_day = start_day + timedelta(days=6)
    return WeekWindow(datetime.combine(start_day, time.min), datetime.combine(end_day, time.max))


def _as_decimal(hours):
    if isinstance(hours, Decimal):
        return hours
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(hours))


def project_totals(entries):
    """
    Sum hours per project name, in first-seen order.

    Entries without a project (deleted after the entry was logged) are left
    out; projects with no entries never appear.
    """
    totals = {}
    for entry in entries:
        project = entry.project
        if project is None:
            continue
        totals[project.name] = totals.get(project.name, Decimal('0')) + _as_decimal(entry.hours)
    return totals


def total_hours(totals):
    return sum(totals.values(), Decimal('0'))
