"""Unit tests for the stock-to-flow model."""

from __future__ import annotations

import datetime as dt
import math

import pytest

from macrodash.infrastructure.analysis.stock_to_flow import (
    BLOCKS_PER_DAY,
    HALVING_EPOCHS,
    MODEL_INTERCEPT,
    MODEL_SLOPE,
    annual_flow,
    current_epoch,
    estimated_stock,
    model_price,
    stock_to_flow_ratio,
)


@pytest.mark.unit
class TestStockToFlow:
    def test_epoch_lookup(self) -> None:
        epoch = current_epoch(dt.date(2021, 1, 31))
        assert epoch is not None
        assert epoch.reward == 6.25
        assert current_epoch(dt.date(2008, 12, 31)) is None

    def test_stock_at_first_halving_is_first_epoch_issuance(self) -> None:
        first = HALVING_EPOCHS[0]
        expected = (first.end - first.start).days * BLOCKS_PER_DAY * 50
        assert estimated_stock(first.end) == expected

    def test_stock_sums_completed_and_partial_epochs(self) -> None:
        on = dt.date(2013, 11, 28)
        first = HALVING_EPOCHS[0]
        expected = (first.end - first.start).days * BLOCKS_PER_DAY * 50 + 365 * BLOCKS_PER_DAY * 25
        assert estimated_stock(on) == expected

    def test_annual_flow_uses_current_reward(self) -> None:
        assert annual_flow(dt.date(2025, 1, 31)) == 3.125 * BLOCKS_PER_DAY * 365

    def test_ratio_jumps_at_halving(self) -> None:
        before = stock_to_flow_ratio(dt.date(2024, 3, 31))
        after = stock_to_flow_ratio(dt.date(2024, 5, 31))
        assert before is not None and after is not None
        assert after > before * 1.9

    def test_undefined_before_genesis(self) -> None:
        assert stock_to_flow_ratio(dt.date(2008, 1, 1)) is None
        assert stock_to_flow_ratio(HALVING_EPOCHS[0].start) is None

    def test_model_price(self) -> None:
        assert model_price(1.0) == pytest.approx(math.exp(MODEL_INTERCEPT))
        assert model_price(50.0) == pytest.approx(math.exp(MODEL_INTERCEPT + MODEL_SLOPE * math.log(50.0)))
        assert model_price(None) is None
        assert model_price(0.0) is None
