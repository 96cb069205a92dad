"""Bitcoin stock-to-flow valuation model.

Supply is estimated from the halving schedule rather than read from chain data:
each epoch contributes ``days elapsed * BLOCKS_PER_DAY * reward``. The model price
follows the log-log regression ``ln(price) = a + b * ln(SF)``.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import NamedTuple

BLOCKS_PER_DAY = 144
MODEL_INTERCEPT = -1.84
MODEL_SLOPE = 3.36


class HalvingEpoch(NamedTuple):
    start: dt.date
    end: dt.date
    reward: float


HALVING_EPOCHS: tuple[HalvingEpoch, ...] = (
    HalvingEpoch(dt.date(2009, 1, 3), dt.date(2012, 11, 28), 50.0),
    HalvingEpoch(dt.date(2012, 11, 28), dt.date(2016, 7, 9), 25.0),
    HalvingEpoch(dt.date(2016, 7, 9), dt.date(2020, 5, 11), 12.5),
    HalvingEpoch(dt.date(2020, 5, 11), dt.date(2024, 4, 20), 6.25),
    HalvingEpoch(dt.date(2024, 4, 20), dt.date(2028, 4, 15), 3.125),
    HalvingEpoch(dt.date(2028, 4, 15), dt.date(2032, 4, 10), 1.5625),
)


def current_epoch(on: dt.date) -> HalvingEpoch | None:
    for epoch in HALVING_EPOCHS:
        if epoch.start <= on < epoch.end:
            return epoch
    return None


def estimated_stock(on: dt.date) -> float:
    """Coins issued up to ``on`` across completed and partial epochs."""
    total = 0.0
    for epoch in HALVING_EPOCHS:
        if on <= epoch.start:
            break
        days = (min(on, epoch.end) - epoch.start).days
        total += days * BLOCKS_PER_DAY * epoch.reward
    return total


def annual_flow(on: dt.date) -> float:
    epoch = current_epoch(on)
    if epoch is None:
        return 0.0
    return epoch.reward * BLOCKS_PER_DAY * 365


def stock_to_flow_ratio(on: dt.date) -> float | None:
    flow = annual_flow(on)
    if flow <= 0:
        return None
    ratio = estimated_stock(on) / flow
    return ratio if ratio > 0 else None


def model_price(ratio: float | None) -> float | None:
    if ratio is None or ratio <= 0:
        return None
    return math.exp(MODEL_INTERCEPT + MODEL_SLOPE * math.log(ratio))
