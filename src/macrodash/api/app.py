"""FastAPI application exposing the macro payload and Bitcoin views.

The macro endpoint always answers with a well-formed payload. Bitcoin endpoints
have no partial-data fallback and answer 500 with ``{"error": ...}`` when every
provider path failed.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from macrodash.domain.exceptions import MacroDashError
from macrodash.infrastructure.analysis.events import build_calendar_events
from macrodash.infrastructure.containers import Container, get_container

logger = structlog.get_logger(__name__)


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(container: Container | None = None) -> FastAPI:
    container = container or get_container()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await container.http_fetcher().close()

    app = FastAPI(title="macrodash API", lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(MacroDashError)
    async def _macrodash_error(request: Request, exc: MacroDashError) -> JSONResponse:
        logger.warning(
            "Request failed",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error(str(exc) or type(exc).__name__)

    @app.get("/api/health")
    async def health() -> dict:
        return {"ok": True, "fredConfigured": container.settings().fred_configured}

    @app.get("/api/macro/v1")
    async def macro_v1() -> dict:
        payload = await container.cache_manager().get_macro_payload()
        return payload.to_json_dict()

    @app.get("/api/btc/current")
    async def btc_current() -> dict:
        quote = await container.bitcoin_market_service().get_quote()
        return {"bitcoin": quote.to_json_dict()}

    @app.get("/api/btc/history")
    async def btc_history(days: int = Query(30, ge=1)) -> dict:
        history = await container.bitcoin_market_service().get_history(days)
        return {"prices": [p.to_json_dict() for p in history]}

    @app.get("/api/btc/returns")
    async def btc_returns() -> dict:
        returns = await container.bitcoin_market_service().get_returns()
        return {"returns": returns.to_json_dict()}

    @app.get("/api/btc/model")
    async def btc_model() -> dict:
        model = await container.bitcoin_market_service().get_model()
        return model.to_json_dict()

    @app.get("/api/bitcoin/fear-greed")
    async def fear_greed() -> dict:
        reading = await container.bitcoin_market_service().get_fear_greed()
        return reading.to_json_dict()

    @app.get("/api/calendar")
    async def calendar() -> dict:
        events = build_calendar_events(dt.date.today())
        return {"events": [e.to_json_dict() for e in events]}

    return app
