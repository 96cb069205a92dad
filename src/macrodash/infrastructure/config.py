"""Application settings loaded from environment variables and ``.env``."""

from __future__ import annotations

import datetime as dt
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MACRODASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # FRED
    fred_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MACRODASH_FRED_API_KEY", "FRED_API_KEY"),
    )
    fred_base_url: str = "https://api.stlouisfed.org/fred"
    fred_csv_url: str = "https://fred.stlouisfed.org/graph/fredgraph.csv"
    fred_timeout_seconds: float = 12.0
    fred_history_years: int = 6

    # Macro cache
    cache_file: Path = Path("data/macro-cache.json")
    macro_cache_ttl_minutes: float = 15.0
    liquidity_window: int = 260
    trailing_average_window: int = 30

    # Bitcoin providers
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_timeout_seconds: float = 12.0
    coingecko_history_days: int | Literal["max"] = "max"
    binance_base_url: str = "https://api.binance.com/api/v3"
    binance_timeout_seconds: float = 12.0
    cryptocompare_base_url: str = "https://min-api.cryptocompare.com/data/v2"
    cryptocompare_timeout_seconds: float = 14.0
    btc_quote_timeout_seconds: float = 10.0
    fear_greed_url: str = "https://api.alternative.me/fng/"
    fear_greed_timeout_seconds: float = 9.0

    # Later providers override earlier ones for the same date.
    btc_provider_order: list[str] = ["coingecko", "binance", "cryptocompare"]
    # Every provider reaches this date on its own (Binance BTCUSDT starts 2017-08-17).
    btc_history_floor_date: dt.date = dt.date(2017, 9, 1)

    # BTC model view
    sma_window: int = 200
    rsi_period: int = 14

    # Runtime
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def fred_configured(self) -> bool:
        return bool(self.fred_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
