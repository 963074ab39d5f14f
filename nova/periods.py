"""Period bucketing for the report engine.

``bucket_key_for`` maps a transaction to the calendar period that contains it
under a granularity. Every granularity yields a key (stable, used for
grouping), a label (display only) and a sort time (first instant of the
period, used to order buckets chronologically).

Weeks follow ISO-8601: a week belongs to the year that holds its Thursday, so
Dec 30 2024 and Jan 2 2025 share the key ``2025-W1`` and sort on Monday
Dec 30 2024.
"""
from datetime import date, datetime
from typing import NamedTuple

from nova.domain import Granularity, Transaction

MONTH_ABBREVIATIONS: dict[str, tuple[str, ...]] = {
    "fr": ("janv.", "févr.", "mars", "avr.", "mai", "juin",
           "juil.", "août", "sept.", "oct.", "nov.", "déc."),
    "en": ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
}

# label templates per locale; {n} is the period number, {year} the full year
LABELS: dict[str, dict[Granularity, str]] = {
    "fr": {
        Granularity.WEEKLY: "Sem {n}",
        Granularity.QUARTERLY: "T{n} {year}",
        Granularity.SEMESTERLY: "S{n} {year}",
    },
    "en": {
        Granularity.WEEKLY: "Week {n}",
        Granularity.QUARTERLY: "Q{n} {year}",
        Granularity.SEMESTERLY: "H{n} {year}",
    },
}

DEFAULT_LOCALE = "fr"


class BucketKey(NamedTuple):
    key: str
    label: str
    sort_time: datetime


def iso_week(d: date) -> tuple[int, int]:
    """(ISO year, ISO week number) of a date."""
    iso_year, week, _ = d.isocalendar()
    return iso_year, week


def week_start(iso_year: int, week: int) -> datetime:
    """Monday 00:00 of an ISO week."""
    monday = date.fromisocalendar(iso_year, week, 1)
    return datetime(monday.year, monday.month, monday.day)


def month_label(d: date, locale: str = DEFAULT_LOCALE) -> str:
    months = MONTH_ABBREVIATIONS.get(locale, MONTH_ABBREVIATIONS[DEFAULT_LOCALE])
    return f"{months[d.month - 1]} {d.year % 100:02d}"


def _template(granularity: Granularity, locale: str) -> str:
    return LABELS.get(locale, LABELS[DEFAULT_LOCALE])[granularity]


def bucket_key_for(
    t: Transaction,
    granularity: Granularity,
    locale: str = DEFAULT_LOCALE,
) -> BucketKey:
    d = t.date
    year = d.year

    if granularity is Granularity.WEEKLY:
        iso_year, week = iso_week(d.date())
        return BucketKey(
            key=f"{iso_year}-W{week}",
            label=_template(granularity, locale).format(n=week, year=iso_year),
            sort_time=week_start(iso_year, week),
        )

    if granularity is Granularity.MONTHLY:
        return BucketKey(
            key=f"{year}-{d.month:02d}",
            label=month_label(d, locale),
            sort_time=datetime(year, d.month, 1),
        )

    if granularity is Granularity.QUARTERLY:
        quarter = (d.month - 1) // 3 + 1
        return BucketKey(
            key=f"{year}-Q{quarter}",
            label=_template(granularity, locale).format(n=quarter, year=year),
            sort_time=datetime(year, (quarter - 1) * 3 + 1, 1),
        )

    if granularity is Granularity.SEMESTERLY:
        semester = 1 if d.month <= 6 else 2
        return BucketKey(
            key=f"{year}-S{semester}",
            label=_template(granularity, locale).format(n=semester, year=year),
            sort_time=datetime(year, (semester - 1) * 6 + 1, 1),
        )

    return BucketKey(key=f"{year}", label=f"{year}", sort_time=datetime(year, 1, 1))
