"""macrodash command-line entry point."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from macrodash.cli.error_handler import handle_cli_error
from macrodash.cli.utils import async_command, fmt_number
from macrodash.domain.models.macro import MacroPayload
from macrodash.infrastructure.config import get_settings
from macrodash.infrastructure.containers import get_container
from macrodash.infrastructure.logging_config import configure_logging

app = typer.Typer(help="Bitcoin and macro liquidity dashboard backend")
btc_app = typer.Typer(help="Bitcoin price history and models")
app.add_typer(btc_app, name="btc")
console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override MACRODASH_LOG_LEVEL"),
) -> None:
    settings = get_settings()
    configure_logging(log_level or settings.log_level, json_output=settings.log_json)


def _print_macro(payload: MacroPayload) -> None:
    m = payload.metrics
    table = Table(title="Macro metrics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_column("As of")

    rows = [
        ("Fed Balance Sheet (M)", m.fed_balance_sheet, 0),
        ("Reverse Repo (B)", m.reverse_repo, 0),
        ("Treasury General Account (M)", m.treasury_general_account, 0),
        ("10Y Treasury (%)", m.ten_year_yield, 2),
        ("2Y Treasury (%)", m.two_year_yield, 2),
        ("10Y Real Yield (%)", m.real_ten_year_yield, 2),
        ("DXY Broad", m.dxy_broad, 2),
    ]
    for name, obs, digits in rows:
        table.add_row(
            name,
            fmt_number(obs.value if obs else None, digits),
            obs.date.isoformat() if obs else "",
        )
    for name, dv in (("2s10s Curve (%)", m.curve_spread), ("Net Liquidity Index", m.net_liquidity_index)):
        table.add_row(name, fmt_number(dv.value), dv.date.isoformat() if dv.date else "")
    console.print(table)

    regime = payload.regime
    console.print(
        f"\n[bold]Regime:[/bold] liquidity={regime.liquidity} rates={regime.rates} "
        f"risk={regime.macro_risk}"
    )
    for line in regime.rationale:
        console.print(f"  • {line}")

    age = f", {payload.cache_age_minutes}m old" if payload.cache_age_minutes is not None else ""
    console.print(
        f"\n[dim]cache={payload.cache_state}{age} · "
        f"{payload.ok_series_count}/{payload.total_series_count} series ok[/dim]"
    )
    for key, status in payload.series_status.items():
        if not status.ok:
            console.print(f"  [red]✗[/red] {key}: {status.error}")


@app.command("macro")
@async_command
async def macro(
    refresh: bool = typer.Option(False, "--refresh", help="Bypass the cache and refresh now"),
) -> None:
    """Show the macro liquidity/rates dashboard payload."""
    container = get_container()
    try:
        manager = container.cache_manager()
        with console.status("[bold blue]Loading macro series..."):
            payload = await (manager.refresh() if refresh else manager.get_macro_payload())
            if manager.pending_refresh is not None:
                await manager.pending_refresh
        _print_macro(payload)
    except Exception as e:
        handle_cli_error(e, context={"command": "macro"})
    finally:
        await container.http_fetcher().close()


@btc_app.command("history")
@async_command
async def btc_history(
    days: int = typer.Option(30, "--days", "-d", help="Calendar days to show"),
) -> None:
    """Show the merged daily BTC/USD history."""
    container = get_container()
    try:
        history = await container.bitcoin_market_service().get_history(days)
        table = Table(title=f"BTC/USD, last {days} days")
        table.add_column("Date")
        table.add_column("Close", justify="right")
        for point in history:
            table.add_row(point.date.isoformat(), fmt_number(point.value))
        console.print(table)
    except Exception as e:
        handle_cli_error(e, context={"command": "btc history", "days": days})
    finally:
        await container.http_fetcher().close()


@btc_app.command("model")
@async_command
async def btc_model(
    months: int = typer.Option(24, "--months", "-m", help="Most recent months to show"),
) -> None:
    """Show the stock-to-flow model and monthly RSI."""
    container = get_container()
    try:
        model = await container.bitcoin_market_service().get_model()
        table = Table(title=f"Stock-to-flow / RSI({model.rsi_period})")
        table.add_column("Month end")
        table.add_column("Close", justify="right")
        table.add_column("S2F", justify="right")
        table.add_column("Model price", justify="right")
        table.add_column("RSI", justify="right")
        for point in model.monthly[-months:]:
            table.add_row(
                point.date.isoformat(),
                fmt_number(point.price),
                fmt_number(point.stock_to_flow),
                fmt_number(point.model_price, 0),
                fmt_number(point.rsi),
            )
        console.print(table)
        if model.daily:
            last = model.daily[-1]
            console.print(
                f"SMA({model.sma_window}) on {last.date.isoformat()}: {fmt_number(last.sma)}"
            )
    except Exception as e:
        handle_cli_error(e, context={"command": "btc model"})
    finally:
        await container.http_fetcher().close()


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from macrodash.api import create_app

    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    console.print(f"Macro Dashboard API running on http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(), host=bind_host, port=bind_port, log_config=None)


if __name__ == "__main__":
    app()
