"""Tests for the chart API endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from swapterm.chain.wallet import WalletSession
from swapterm.chart.price_feed import PriceFeed
from swapterm.dashboard.app import create_chart_app
from swapterm.exceptions import PriceFeedError
from swapterm.models import PricePoint

from conftest import WEI, make_client


@pytest.fixture
def wallet() -> MagicMock:
    wallet = MagicMock(spec=WalletSession)
    wallet.client = make_client()
    wallet.token_decimals = AsyncMock(return_value=18)
    return wallet


@pytest.fixture
def price_feed() -> MagicMock:
    feed = MagicMock(spec=PriceFeed)
    feed.fetch_points = AsyncMock(
        return_value=[
            PricePoint(0, Decimal("1.5")),
            PricePoint(120, Decimal("2")),
            PricePoint(400, Decimal("1.25")),
        ]
    )
    return feed


@pytest.fixture
def api(wallet, price_feed) -> TestClient:
    return TestClient(create_chart_app(wallet, price_feed, default_interval="5m"))


def test_price_returns_reserve_ratio(api: TestClient) -> None:
    response = api.get("/api/price")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "native_reserve": "50",
        "token_reserve": "1000",
        "result": "20",
    }


def test_price_empty_pool_has_no_ratio(api: TestClient, wallet) -> None:
    wallet.client.get_reserves.return_value = (0, 1000 * WEI)

    body = api.get("/api/price").json()

    assert body["success"] is True
    assert body["result"] is None


def test_price_without_wallet(api: TestClient, wallet) -> None:
    wallet.client = None

    response = api.get("/api/price")

    assert response.status_code == 503
    assert response.json() == {"success": False, "error": "No wallet connected."}


def test_price_rpc_failure(api: TestClient, wallet) -> None:
    wallet.client.get_reserves.side_effect = RuntimeError("rpc down")

    response = api.get("/api/price")

    assert response.status_code == 502
    assert response.json()["success"] is False


def test_candles_default_interval(api: TestClient) -> None:
    response = api.get("/api/candles")

    assert response.status_code == 200
    assert response.json() == [
        {"time": 0, "open": "1.5", "high": "2", "low": "1.5", "close": "2"},
        {"time": 300, "open": "1.25", "high": "1.25", "low": "1.25", "close": "1.25"},
    ]


def test_candles_requested_interval(api: TestClient) -> None:
    body = api.get("/api/candles", params={"interval": "1h"}).json()

    assert len(body) == 1
    assert body[0]["close"] == "1.25"


def test_candles_rejects_unknown_interval(api: TestClient, price_feed) -> None:
    response = api.get("/api/candles", params={"interval": "2h"})

    assert response.status_code == 400
    price_feed.fetch_points.assert_not_awaited()


def test_candles_feed_unavailable(api: TestClient, price_feed) -> None:
    price_feed.fetch_points.side_effect = PriceFeedError("down")

    response = api.get("/api/candles")

    assert response.status_code == 502
    assert response.json() == {"error": "down"}
