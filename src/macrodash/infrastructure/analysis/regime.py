"""Rule-based macro regime classification.

Each signal is compared with its own trailing average:

- Liquidity: net liquidity index at or above its average -> Expanding
- Rates: 10Y nominal yield at or below its average -> Easing
- Macro risk: one point each for falling liquidity, rising nominal yield,
  rising real yield and a rising dollar; 0-1 Low, 2 Medium, 3-4 High
"""

from __future__ import annotations

import math

from macrodash.domain.models.macro import MacroRisk, Regime, TrendInput

INSUFFICIENT_DATA_RATIONALE = "Not enough macro inputs yet. Configure FRED and refresh."


def _is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _signed(value: float) -> str:
    return f"{'+' if value >= 0 else ''}{value:.2f}"


def risk_level(score: int) -> MacroRisk:
    if score <= 1:
        return "Low"
    if score == 2:
        return "Medium"
    return "High"


def classify_regime(
    liquidity_index: TrendInput,
    ten_year_yield: TrendInput,
    real_yield: TrendInput,
    dxy: TrendInput,
) -> Regime:
    signals = (liquidity_index, ten_year_yield, real_yield, dxy)
    if not all(_is_finite(s.current) and _is_finite(s.average) for s in signals):
        return Regime(rationale=[INSUFFICIENT_DATA_RATIONALE])

    liq_trend = liquidity_index.current - liquidity_index.average  # type: ignore[operator]
    rates_trend = ten_year_yield.current - ten_year_yield.average  # type: ignore[operator]
    real_trend = real_yield.current - real_yield.average  # type: ignore[operator]
    dxy_trend = dxy.current - dxy.average  # type: ignore[operator]

    score = sum((liq_trend < 0, rates_trend > 0, real_trend > 0, dxy_trend > 0))

    return Regime(
        liquidity="Expanding" if liq_trend >= 0 else "Contracting",
        rates="Easing" if rates_trend <= 0 else "Tightening",
        macro_risk=risk_level(score),
        rationale=[
            f"Liquidity trend vs 30D: {_signed(liq_trend)} index pts",
            f"10Y nominal trend vs 30D: {_signed(rates_trend)}%",
            f"10Y real trend vs 30D: {_signed(real_trend)}%",
            f"DXY trend vs 30D: {_signed(dxy_trend)}",
        ],
    )
