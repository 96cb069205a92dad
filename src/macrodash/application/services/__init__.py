"""Application services."""

from macrodash.application.services.bitcoin import BitcoinMarketService, BtcHistoryResolver
from macrodash.application.services.macro import MACRO_SERIES, MacroAggregator

__all__ = ["MACRO_SERIES", "MacroAggregator", "BtcHistoryResolver", "BitcoinMarketService"]
