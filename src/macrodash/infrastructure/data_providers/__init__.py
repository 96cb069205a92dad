"""External data provider implementations."""

from macrodash.infrastructure.data_providers.bitcoin import (
    BinanceProvider,
    CoinGeckoProvider,
    CryptoCompareProvider,
    FearGreedProvider,
)
from macrodash.infrastructure.data_providers.fred import FredMacroeconomicProvider

__all__ = [
    "FredMacroeconomicProvider",
    "CoinGeckoProvider",
    "BinanceProvider",
    "CryptoCompareProvider",
    "FearGreedProvider",
]
