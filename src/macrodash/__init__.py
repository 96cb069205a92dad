"""
macrodash - Bitcoin and macro liquidity dashboard backend.

Fetches Bitcoin price history and Federal Reserve liquidity/rates series from
public data providers, derives a net liquidity index, a qualitative macro regime
and a stock-to-flow model, and serves the result through a stale-while-revalidate
cache.
"""

__version__ = "0.1.0"
