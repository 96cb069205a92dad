"""Estimated macro release and earnings calendar."""

from __future__ import annotations

import datetime as dt
import math
from typing import NamedTuple

from macrodash.domain.models.macro import CalendarEvent

FOMC_ANCHOR = dt.date(2026, 1, 28)
FOMC_CYCLE_DAYS = 42
FRIDAY = 4


class EarningsSchedule(NamedTuple):
    ticker: str
    company: str
    months: tuple[int, ...]
    day: int


KEY_EARNINGS: tuple[EarningsSchedule, ...] = (
    EarningsSchedule("AAPL", "Apple", (1, 4, 7, 10), 30),
    EarningsSchedule("MSFT", "Microsoft", (1, 4, 7, 10), 25),
    EarningsSchedule("GOOGL", "Alphabet", (2, 4, 7, 10), 2),
    EarningsSchedule("AMZN", "Amazon", (2, 4, 7, 10), 6),
    EarningsSchedule("META", "Meta", (2, 4, 7, 10), 1),
    EarningsSchedule("NVDA", "NVIDIA", (2, 5, 8, 11), 21),
    EarningsSchedule("TSLA", "Tesla", (1, 4, 7, 10), 23),
)


def _first_of_next_month(today: dt.date) -> dt.date:
    if today.month == 12:
        return dt.date(today.year + 1, 1, 1)
    return dt.date(today.year, today.month + 1, 1)


def next_first_friday(today: dt.date) -> dt.date:
    d = _first_of_next_month(today)
    return d + dt.timedelta(days=(FRIDAY - d.weekday()) % 7)


def next_monthly_day(day_of_month: int, today: dt.date) -> dt.date:
    return _first_of_next_month(today).replace(day=day_of_month)


def next_fomc_estimate(today: dt.date) -> dt.date:
    delta_days = (today - FOMC_ANCHOR).days
    cycles = max(0, math.ceil(delta_days / FOMC_CYCLE_DAYS))
    return FOMC_ANCHOR + dt.timedelta(days=cycles * FOMC_CYCLE_DAYS)


def next_scheduled_date(months: tuple[int, ...], day: int, today: dt.date) -> dt.date:
    for year in (today.year, today.year + 1):
        for month in months:
            candidate = dt.date(year, month, day)
            if candidate >= today:
                return candidate
    return dt.date(today.year + 1, months[0], day)


def format_event_date(d: dt.date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def build_macro_events(today: dt.date) -> list[CalendarEvent]:
    releases = [
        ("cpi", "CPI Release", next_monthly_day(12, today), "Estimated calendar date"),
        ("nfp", "Nonfarm Payrolls", next_first_friday(today), "Estimated calendar date"),
        ("fomc", "FOMC Decision", next_fomc_estimate(today), "Approx. 6-week cadence"),
    ]
    return [
        CalendarEvent(
            id=event_id,
            type="macro",
            title=title,
            date_iso=when,
            date=format_event_date(when),
            note=note,
        )
        for event_id, title, when, note in releases
    ]


def build_earnings_events(today: dt.date) -> list[CalendarEvent]:
    events = []
    for item in KEY_EARNINGS:
        when = next_scheduled_date(item.months, item.day, today)
        events.append(
            CalendarEvent(
                id=f"earnings-{item.ticker.lower()}",
                type="earnings",
                title=f"{item.ticker} Earnings",
                subtitle=item.company,
                date_iso=when,
                date=format_event_date(when),
                note="Estimated earnings date",
            )
        )
    return events


def build_calendar_events(today: dt.date) -> list[CalendarEvent]:
    events = build_macro_events(today) + build_earnings_events(today)
    return sorted(events, key=lambda e: e.date_iso)
