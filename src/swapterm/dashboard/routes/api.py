"""JSON API endpoints for pool price and candle data."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from swapterm.chain.wallet import NATIVE_DECIMALS, from_base_units
from swapterm.chart.ohlc import ChartSeries, resolve_width
from swapterm.exceptions import PriceFeedError
from swapterm.models import PoolReserves

log = structlog.get_logger(__name__)

router = APIRouter()


def _decimal_to_str(obj: Any) -> Any:
    """Recursively convert Decimal values to strings for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _decimal_to_str(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_decimal_to_str(item) for item in obj]
    return obj


@router.get("/price")
async def get_price(request: Request) -> JSONResponse:
    """Pool reserve ratio (token units per native unit)."""
    wallet = request.app.state.wallet
    client = wallet.client
    if client is None:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "No wallet connected."},
        )

    try:
        native_raw, token_raw = await client.get_reserves()
        decimals = await wallet.token_decimals()
    except Exception as e:
        log.error("reserve_fetch_failed", error=str(e), exc_info=True)
        return JSONResponse(status_code=502, content={"success": False, "error": str(e)})

    reserves = PoolReserves(
        native=from_base_units(native_raw, NATIVE_DECIMALS),
        token=from_base_units(token_raw, decimals),
    )
    ratio = reserves.ratio
    return JSONResponse(
        content=_decimal_to_str({
            "success": True,
            "native_reserve": reserves.native,
            "token_reserve": reserves.token,
            "result": ratio,
        })
    )


@router.get("/candles")
async def get_candles(request: Request, interval: str | None = None) -> JSONResponse:
    """OHLC candles for the requested interval (menu label such as "1h")."""
    interval = interval or request.app.state.default_interval
    feed = request.app.state.price_feed

    try:
        width = resolve_width(interval)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        points = await feed.fetch_points()
    except PriceFeedError as e:
        log.warning("candles_feed_unavailable", error=str(e))
        return JSONResponse(status_code=502, content={"error": str(e)})

    series = ChartSeries(points, width)

    result = [
        {
            "time": c.bucket_start,
            "open": c.open,
            "high": c.high,
            "low": c.low,
            "close": c.close,
        }
        for c in series.candles
    ]
    return JSONResponse(content=_decimal_to_str(result))
