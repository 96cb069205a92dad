"""Unit tests for as-of date alignment."""

from __future__ import annotations

import datetime as dt

import pytest

from macrodash.domain.exceptions import NoOverlapError
from macrodash.domain.models.macro import Observation
from macrodash.infrastructure.analysis.alignment import align_to, forward_fill


def _obs(day: str, value: float) -> Observation:
    return Observation(date=dt.date.fromisoformat(day), value=value)


def _d(day: str) -> dt.date:
    return dt.date.fromisoformat(day)


@pytest.mark.unit
class TestForwardFill:
    def test_carries_last_value_forward(self) -> None:
        weekly = [_obs("2025-01-01", 1.0), _obs("2025-01-08", 2.0)]
        targets = [_d("2025-01-01"), _d("2025-01-03"), _d("2025-01-08"), _d("2025-01-10")]
        assert forward_fill(weekly, targets) == [1.0, 1.0, 2.0, 2.0]

    def test_target_before_first_observation_is_none_not_zero(self) -> None:
        series = [_obs("2025-01-05", 7.0)]
        assert forward_fill(series, [_d("2025-01-01"), _d("2025-01-05")]) == [None, 7.0]

    def test_unsorted_source_is_handled(self) -> None:
        series = [_obs("2025-01-08", 2.0), _obs("2025-01-01", 1.0)]
        assert forward_fill(series, [_d("2025-01-02"), _d("2025-01-09")]) == [1.0, 2.0]

    def test_descending_targets_are_rejected(self) -> None:
        with pytest.raises(ValueError):
            forward_fill([_obs("2025-01-01", 1.0)], [_d("2025-01-05"), _d("2025-01-01")])

    def test_aligning_to_superset_reproduces_native_values(self) -> None:
        series = [_obs("2025-01-02", 3.0), _obs("2025-01-05", 4.0), _obs("2025-01-09", 5.0)]
        superset = [_d(f"2025-01-{day:02d}") for day in range(1, 12)]

        filled = dict(zip(superset, forward_fill(series, superset), strict=True))

        for point in series:
            assert filled[point.date] == point.value

    def test_empty_source(self) -> None:
        assert forward_fill([], [_d("2025-01-01")]) == [None]


@pytest.mark.unit
class TestAlignTo:
    def test_drops_base_dates_without_values_everywhere(self) -> None:
        walcl = [_obs("2025-01-01", 100.0), _obs("2025-01-08", 110.0), _obs("2025-01-15", 120.0)]
        rrp = [_obs("2025-01-06", 10.0), _obs("2025-01-14", 12.0)]
        tga = [_obs("2024-12-31", 5.0)]

        base, rrp_aligned, tga_aligned = align_to(walcl, rrp, tga)

        assert [p.date for p in base] == [_d("2025-01-08"), _d("2025-01-15")]
        assert [p.value for p in rrp_aligned] == [10.0, 12.0]
        assert [p.value for p in tga_aligned] == [5.0, 5.0]
        assert [p.date for p in rrp_aligned] == [p.date for p in base]

    def test_no_overlap_raises(self) -> None:
        early = [_obs("2024-01-01", 1.0)]
        late = [_obs("2025-01-01", 2.0)]
        with pytest.raises(NoOverlapError):
            align_to(early, late)
