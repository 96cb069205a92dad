"""As-of (forward-fill) alignment of heterogeneous date-keyed series.

Series arrive in different native frequencies: WALCL and WTREGEN are weekly,
RRPONTSYD and the yields are business-daily. Alignment assigns each target date
the most recent value known at or before it.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from macrodash.domain.exceptions import NoOverlapError
from macrodash.domain.models.macro import Observation


def forward_fill(
    source: Sequence[Observation],
    target_dates: Sequence[dt.date],
) -> list[float | None]:
    """Align ``source`` onto ``target_dates`` by carrying the last known value forward.

    ``target_dates`` must be in non-decreasing order. Dates before the first source
    observation map to None. Runs in O(len(source) + len(target_dates)) after sorting.

    Args:
        source: Observations in any order; duplicate dates resolve to the later entry
        target_dates: Ascending dates to produce values for

    Returns:
        One value (or None) per target date
    """
    points = sorted(source, key=lambda p: p.date)
    out: list[float | None] = []
    cursor = 0
    last: float | None = None
    prev_target: dt.date | None = None
    for target in target_dates:
        if prev_target is not None and target < prev_target:
            raise ValueError("target_dates must be in non-decreasing order")
        prev_target = target
        while cursor < len(points) and points[cursor].date <= target:
            last = points[cursor].value
            cursor += 1
        out.append(last)
    return out


def align_to(
    base: Sequence[Observation],
    *others: Sequence[Observation],
) -> tuple[list[Observation], ...]:
    """Align each of ``others`` to the dates of ``base``.

    Target dates where any aligned series has no value yet are dropped, so every
    returned series has the same length and the same dates as the trimmed base.

    Raises:
        NoOverlapError: If no base date has a value in every other series.
    """
    base_sorted = sorted(base, key=lambda p: p.date)
    dates = [p.date for p in base_sorted]
    filled = [forward_fill(series, dates) for series in others]

    keep = [i for i in range(len(dates)) if all(col[i] is not None for col in filled)]
    if not keep:
        raise NoOverlapError("series share no aligned dates")

    aligned: list[list[Observation]] = [[base_sorted[i] for i in keep]]
    for col in filled:
        aligned.append([Observation(date=dates[i], value=col[i]) for i in keep])  # type: ignore[arg-type]
    return tuple(aligned)
