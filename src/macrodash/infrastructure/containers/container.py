"""Main dependency injection container configuration.

Providers are built from ``Settings`` once per container. Tests swap any of them
with ``container.<provider>.override(providers.Object(stub))``.
"""

from __future__ import annotations

from datetime import timedelta

from dependency_injector import containers, providers

from macrodash.application.services import (
    BitcoinMarketService,
    BtcHistoryResolver,
    MacroAggregator,
)
from macrodash.infrastructure.cache import LocalFileSnapshotStore, MacroCacheManager
from macrodash.infrastructure.config import Settings, get_settings
from macrodash.infrastructure.data_providers import (
    BinanceProvider,
    CoinGeckoProvider,
    CryptoCompareProvider,
    FearGreedProvider,
    FredMacroeconomicProvider,
)
from macrodash.infrastructure.fetcher import HttpFetcher


def _ordered_btc_providers(order: list[str], **available: object) -> list[object]:
    unknown = [name for name in order if name not in available]
    if unknown:
        raise ValueError(f"Unknown BTC providers in btc_provider_order: {unknown}")
    return [available[name] for name in order]


class Container(containers.DeclarativeContainer):
    """Dependency injection container for macrodash.

    Usage:
        container = get_container()
        payload = await container.cache_manager().get_macro_payload()

    With custom settings (e.g. a temporary cache file in tests):
        container = Container(settings=providers.Object(Settings(cache_file=tmp)))
    """

    settings = providers.Dependency(instance_of=Settings, default=providers.Callable(get_settings))

    # Data providers (singletons sharing one HTTP client)
    http_fetcher = providers.Singleton(HttpFetcher)

    macro_data_provider = providers.Singleton(
        FredMacroeconomicProvider,
        fetcher=http_fetcher,
        api_key=settings.provided.fred_api_key,
        base_url=settings.provided.fred_base_url,
        csv_url=settings.provided.fred_csv_url,
        timeout_seconds=settings.provided.fred_timeout_seconds,
    )
    coingecko_provider = providers.Singleton(
        CoinGeckoProvider,
        fetcher=http_fetcher,
        base_url=settings.provided.coingecko_base_url,
        timeout_seconds=settings.provided.coingecko_timeout_seconds,
        history_days=settings.provided.coingecko_history_days,
    )
    binance_provider = providers.Singleton(
        BinanceProvider,
        fetcher=http_fetcher,
        base_url=settings.provided.binance_base_url,
        timeout_seconds=settings.provided.binance_timeout_seconds,
    )
    cryptocompare_provider = providers.Singleton(
        CryptoCompareProvider,
        fetcher=http_fetcher,
        base_url=settings.provided.cryptocompare_base_url,
        timeout_seconds=settings.provided.cryptocompare_timeout_seconds,
    )
    fear_greed_provider = providers.Singleton(
        FearGreedProvider,
        fetcher=http_fetcher,
        url=settings.provided.fear_greed_url,
        timeout_seconds=settings.provided.fear_greed_timeout_seconds,
    )

    # Services
    btc_history_resolver = providers.Singleton(
        BtcHistoryResolver,
        providers=providers.Callable(
            _ordered_btc_providers,
            settings.provided.btc_provider_order,
            coingecko=coingecko_provider,
            binance=binance_provider,
            cryptocompare=cryptocompare_provider,
        ),
        floor_date=settings.provided.btc_history_floor_date,
    )
    bitcoin_market_service = providers.Singleton(
        BitcoinMarketService,
        resolver=btc_history_resolver,
        quote_provider=coingecko_provider,
        fear_greed_provider=fear_greed_provider,
        quote_timeout_seconds=settings.provided.btc_quote_timeout_seconds,
        sma_window=settings.provided.sma_window,
        rsi_period=settings.provided.rsi_period,
    )
    macro_aggregator = providers.Singleton(
        MacroAggregator,
        macro_provider=macro_data_provider,
        history_years=settings.provided.fred_history_years,
        liquidity_window=settings.provided.liquidity_window,
        trailing_window=settings.provided.trailing_average_window,
    )

    # Cache
    snapshot_store = providers.Singleton(
        LocalFileSnapshotStore,
        path=settings.provided.cache_file,
    )
    cache_manager = providers.Singleton(
        MacroCacheManager,
        aggregator=macro_aggregator,
        store=snapshot_store,
        ttl=providers.Callable(
            lambda minutes: timedelta(minutes=minutes),
            settings.provided.macro_cache_ttl_minutes,
        ),
    )


# Global container instance (can be overridden for testing)
_container: Container | None = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Set a custom container (useful for testing)."""
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    _container = None
