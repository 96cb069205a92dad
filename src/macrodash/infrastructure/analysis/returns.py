"""Trailing percent returns over a daily price series."""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from macrodash.domain.models.bitcoin import BtcReturns
from macrodash.domain.models.macro import Observation


def calc_return_pct(points: Sequence[Observation], days_back: int) -> float | None:
    """Percent change from the last point at or before ``last - days_back`` to the last point.

    Falls back to the first point when the series is shorter than ``days_back``.
    """
    if not points:
        return None
    last = points[-1]
    target = last.date - dt.timedelta(days=days_back)

    base = points[0].value
    for point in reversed(points):
        if point.date <= target:
            base = point.value
            break

    if not base:
        return None
    return (last.value - base) / base * 100


def calc_ytd_return(points: Sequence[Observation]) -> float | None:
    if not points:
        return None
    last = points[-1]
    year_start = dt.date(last.date.year, 1, 1)

    start = points[0].value
    for point in points:
        if point.date >= year_start:
            start = point.value
            break

    if not start:
        return None
    return (last.value - start) / start * 100


def compute_returns(points: Sequence[Observation]) -> BtcReturns:
    return BtcReturns(
        day1=calc_return_pct(points, 1),
        day7=calc_return_pct(points, 7),
        day30=calc_return_pct(points, 30),
        ytd=calc_ytd_return(points),
    )
