"""Macro series aggregation: fetch, align, derive and assemble the dashboard payload."""

from __future__ import annotations

import asyncio
import datetime as dt
from collections.abc import Callable, Mapping, Sequence

import structlog

from macrodash.domain.exceptions import NoOverlapError
from macrodash.domain.models.macro import (
    DatedValue,
    LiquidityPoint,
    MacroMetrics,
    MacroPayload,
    Observation,
    Regime,
    SeriesStatus,
    TrendInput,
)
from macrodash.domain.ports.data_providers import MacroeconomicDataProvider
from macrodash.infrastructure.analysis.alignment import align_to
from macrodash.infrastructure.analysis.events import build_macro_events
from macrodash.infrastructure.analysis.metrics import (
    compute_liquidity_series,
    curve_spread,
    latest,
    rolling_average,
)
from macrodash.infrastructure.analysis.regime import classify_regime

logger = structlog.get_logger(__name__)

# Dashboard key -> FRED series id. Also the key order of the status map.
MACRO_SERIES: dict[str, str] = {
    "fed_balance_sheet": "WALCL",
    "reverse_repo": "RRPONTSYD",
    "treasury_general_account": "WTREGEN",
    "ten_year_yield": "DGS10",
    "two_year_yield": "DGS2",
    "real_ten_year_yield": "DFII10",
    "dxy_broad": "DTWEXBGS",
}


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def _years_before(day: dt.date, years: int) -> dt.date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


class MacroAggregator:
    """Fetches every macro indicator concurrently and builds the payload.

    A failing indicator never aborts the batch; it is reported in the status map
    and its series is treated as empty.
    """

    def __init__(
        self,
        macro_provider: MacroeconomicDataProvider,
        series: Mapping[str, str] | None = None,
        history_years: int = 6,
        liquidity_window: int = 260,
        trailing_window: int = 30,
        now: Callable[[], dt.datetime] = _utc_now,
    ) -> None:
        self._provider = macro_provider
        self._series = dict(series or MACRO_SERIES)
        self._history_years = history_years
        self._liquidity_window = liquidity_window
        self._trailing_window = trailing_window
        self._now = now

    @property
    def series_keys(self) -> list[str]:
        return list(self._series)

    async def build_payload(self) -> MacroPayload:
        series_map, status_map = await self.fetch_all()
        return self.assemble(series_map, status_map)

    async def fetch_all(
        self,
    ) -> tuple[dict[str, list[Observation]], dict[str, SeriesStatus]]:
        start_date = _years_before(self._now().date(), self._history_years)
        logger.info("Refreshing macro series", series_count=len(self._series), start=str(start_date))

        results = await asyncio.gather(
            *(self._fetch_one(key, series_id, start_date) for key, series_id in self._series.items())
        )

        series_map: dict[str, list[Observation]] = {}
        status_map: dict[str, SeriesStatus] = {}
        for key, points, status in results:
            series_map[key] = points
            status_map[key] = status

        ok_count = sum(1 for s in status_map.values() if s.ok)
        logger.info("Macro series refreshed", ok_series=ok_count, total_series=len(status_map))
        return series_map, status_map

    async def _fetch_one(
        self,
        key: str,
        series_id: str,
        start_date: dt.date,
    ) -> tuple[str, list[Observation], SeriesStatus]:
        try:
            points = await self._provider.get_time_series(series_id, start_date)
        except Exception as e:
            logger.warning(
                "Macro series fetch failed",
                key=key,
                series_id=series_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return key, [], SeriesStatus(ok=False, error=str(e) or "Fetch failed")
        return key, sorted(points, key=lambda p: p.date), SeriesStatus(ok=True)

    def assemble(
        self,
        series_map: Mapping[str, Sequence[Observation]],
        status_map: Mapping[str, SeriesStatus],
    ) -> MacroPayload:
        """Derive metrics, liquidity series and regime from fetched series."""

        def get(key: str) -> list[Observation]:
            return list(series_map.get(key, []))

        walcl = get("fed_balance_sheet")
        rrp = get("reverse_repo")
        tga = get("treasury_general_account")
        dgs10 = get("ten_year_yield")
        dgs2 = get("two_year_yield")
        dfii10 = get("real_ten_year_yield")
        dxy = get("dxy_broad")

        liquidity = self._liquidity_series(walcl, rrp, tga)
        liq_values = [p.net_liquidity_index for p in liquidity]
        last_liq = liquidity[-1] if liquidity else None

        def trend(points: Sequence[Observation]) -> TrendInput:
            current = latest(points)
            return TrendInput(
                current=current.value if current else None,
                average=rolling_average([p.value for p in points], self._trailing_window),
            )

        regime = classify_regime(
            liquidity_index=TrendInput(
                current=liq_values[-1] if liq_values else None,
                average=rolling_average(liq_values, self._trailing_window),
            ),
            ten_year_yield=trend(dgs10),
            real_yield=trend(dfii10),
            dxy=trend(dxy),
        )

        ok_count = sum(1 for s in status_map.values() if s.ok)
        return MacroPayload(
            metrics=MacroMetrics(
                fed_balance_sheet=latest(walcl),
                reverse_repo=latest(rrp),
                treasury_general_account=latest(tga),
                ten_year_yield=latest(dgs10),
                two_year_yield=latest(dgs2),
                real_ten_year_yield=latest(dfii10),
                dxy_broad=latest(dxy),
                curve_spread=curve_spread(dgs10, dgs2),
                net_liquidity_index=DatedValue(
                    date=last_liq.date if last_liq else None,
                    value=last_liq.net_liquidity_index if last_liq else None,
                ),
            ),
            liquidity_series=liquidity[-self._liquidity_window :],
            regime=regime,
            events=build_macro_events(self._now().date()),
            series_status=dict(status_map),
            ok_series_count=ok_count,
            total_series_count=len(status_map),
            generated_at=self._now(),
        )

    def empty_payload(self, reason: str | None = None) -> MacroPayload:
        return MacroPayload(
            regime=Regime(rationale=[reason or "Macro data unavailable"]),
            events=build_macro_events(self._now().date()),
            total_series_count=len(self._series),
            generated_at=self._now(),
        )

    @staticmethod
    def _liquidity_series(
        walcl: list[Observation],
        rrp: list[Observation],
        tga: list[Observation],
    ) -> list[LiquidityPoint]:
        # RRP is daily while WALCL/TGA are weekly: carry RRP and TGA onto WALCL dates.
        try:
            walcl_aligned, rrp_aligned, tga_aligned = align_to(walcl, rrp, tga)
        except NoOverlapError:
            if walcl or rrp or tga:
                logger.warning(
                    "Liquidity inputs do not overlap",
                    walcl_points=len(walcl),
                    rrp_points=len(rrp),
                    tga_points=len(tga),
                )
            return []
        return compute_liquidity_series(walcl_aligned, rrp_aligned, tga_aligned)
