"""FastAPI chart API application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from swapterm.chain.wallet import WalletSession
from swapterm.chart.price_feed import PriceFeed
from swapterm.dashboard.routes import api


def create_chart_app(
    wallet: WalletSession,
    price_feed: PriceFeed,
    default_interval: str = "1d",
    lifespan: Any = None,
) -> FastAPI:
    """Create and configure the chart API application.

    Args:
        wallet: Wallet session whose contract client reads pool reserves.
        price_feed: Price history source for candles.
        default_interval: Candle interval used when none is requested.
        lifespan: Optional async context manager for startup/shutdown.

    Returns:
        Configured FastAPI application with the /api routes.
    """
    app = FastAPI(title="Swap Terminal Chart API", lifespan=lifespan)

    app.state.wallet = wallet
    app.state.price_feed = price_feed
    app.state.default_interval = default_interval

    app.include_router(api.router, prefix="/api")

    return app
