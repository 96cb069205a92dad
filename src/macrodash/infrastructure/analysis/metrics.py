"""Derived metrics: normalization, net liquidity, curve spread and moving averages."""

from __future__ import annotations

from collections.abc import Sequence

from macrodash.domain.models.macro import DatedValue, LiquidityPoint, Observation


def latest(points: Sequence[Observation]) -> Observation | None:
    return points[-1] if points else None


def rolling_average(values: Sequence[float], size: int) -> float | None:
    """Mean of the last ``size`` values, or None if fewer are available."""
    if size <= 0 or len(values) < size:
        return None
    window = values[-size:]
    return sum(window) / len(window)


def normalize_window(values: Sequence[float]) -> list[float]:
    """Min-max scale ``values`` onto 0-100.

    A flat window (max == min) divides by 1, so every value maps to 0.
    """
    if not values:
        return []
    lo = min(values)
    hi = max(values)
    span = (hi - lo) or 1
    return [(v - lo) / span * 100 for v in values]


def compute_liquidity_series(
    walcl: Sequence[Observation],
    rrp: Sequence[Observation],
    tga: Sequence[Observation],
) -> list[LiquidityPoint]:
    """Net liquidity index = norm(WALCL) - norm(RRP) - norm(TGA).

    The three series are cut to their common length from the most recent end and
    each is normalized independently over that window. Dates come from WALCL.
    """
    length = min(len(walcl), len(rrp), len(tga))
    if not length:
        return []

    walcl_tail = [p.value for p in walcl[-length:]]
    rrp_tail = [p.value for p in rrp[-length:]]
    tga_tail = [p.value for p in tga[-length:]]
    dates = [p.date for p in walcl[-length:]]

    walcl_norm = normalize_window(walcl_tail)
    rrp_norm = normalize_window(rrp_tail)
    tga_norm = normalize_window(tga_tail)

    return [
        LiquidityPoint(
            date=d,
            net_liquidity_index=round(walcl_norm[i] - rrp_norm[i] - tga_norm[i], 2),
            walcl=walcl_tail[i],
            rrp=rrp_tail[i],
            tga=tga_tail[i],
        )
        for i, d in enumerate(dates)
    ]


def curve_spread(
    ten_year: Sequence[Observation],
    two_year: Sequence[Observation],
) -> DatedValue:
    """Latest 10Y minus latest 2Y, dated by the 10Y observation."""
    ten = latest(ten_year)
    two = latest(two_year)
    if ten is None or two is None:
        return DatedValue(date=ten.date if ten else None, value=None)
    return DatedValue(date=ten.date, value=round(ten.value - two.value, 2))


def simple_moving_average(values: Sequence[float], window: int) -> list[float | None]:
    """Trailing SMA per point, None until ``window`` values have been seen.

    Maintained with a running sum: add the incoming value, subtract the one
    leaving the window.
    """
    if window <= 0:
        raise ValueError("window must be positive")
    out: list[float | None] = []
    running = 0.0
    for i, value in enumerate(values):
        running += value
        if i >= window:
            running -= values[i - window]
        out.append(running / window if i >= window - 1 else None)
    return out


def relative_strength_index(closes: Sequence[float], period: int = 14) -> list[float | None]:
    """Wilder RSI per point.

    The first average gain/loss is the plain mean of the first ``period`` deltas;
    later averages are smoothed as ``(prev * (period - 1) + current) / period``.
    Points before index ``period`` are None. A zero average loss yields 100.
    """
    if period <= 0:
        raise ValueError("period must be positive")
    out: list[float | None] = [None] * len(closes)
    if len(closes) <= period:
        return out

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        delta = closes[i] - closes[i - 1]
        if delta > 0:
            gains += delta
        else:
            losses -= delta
    avg_gain = gains / period
    avg_loss = losses / period
    out[period] = _rsi(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        delta = closes[i] - closes[i - 1]
        gain = delta if delta > 0 else 0.0
        loss = -delta if delta < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        out[i] = _rsi(avg_gain, avg_loss)
    return out


def _rsi(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)
