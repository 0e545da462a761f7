"""Price history feed client.

The feed yields a mapping of millisecond-epoch timestamps (as text) to
prices. CoinGecko's market_chart shape (``{"prices": [[ms, price], ...]}``)
is accepted too and normalised to the same mapping.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

import httpx

from swapterm.config import ChartSettings
from swapterm.exceptions import PriceFeedError
from swapterm.logging import get_logger
from swapterm.models import PricePoint

logger = get_logger(__name__)


def _parse_sample(ms_text: object, price: object) -> PricePoint | None:
    try:
        ms = Decimal(str(ms_text))
        value = Decimal(str(price))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not ms.is_finite() or not value.is_finite():
        return None
    return PricePoint(timestamp=int(ms) // 1000, value=value)


def to_price_points(raw: Mapping[str, object]) -> list[PricePoint]:
    """Convert a ``{ms-text: price}`` mapping to ascending second-resolution points.

    Entries whose key or value does not parse to a finite number are
    skipped with a warning.
    """
    points: list[PricePoint] = []
    for ms_text, price in raw.items():
        point = _parse_sample(ms_text, price)
        if point is None:
            logger.warning("invalid_price_sample", timestamp=ms_text, price=price)
            continue
        points.append(point)

    points.sort(key=lambda p: p.timestamp)
    return points


def _normalise(payload: object) -> dict[str, object]:
    if isinstance(payload, dict) and isinstance(payload.get("prices"), list):
        return {
            str(item[0]): item[1]
            for item in payload["prices"]
            if isinstance(item, (list, tuple)) and len(item) >= 2
        }
    if isinstance(payload, dict):
        return {str(k): v for k, v in payload.items()}
    raise PriceFeedError(f"Unexpected price feed payload type: {type(payload).__name__}")


class PriceFeed:
    """Async HTTP client for the price history endpoint.

    Args:
        settings: Feed URL and request timeout.
        transport: Optional httpx transport (tests inject a MockTransport).
    """

    def __init__(
        self,
        settings: ChartSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def fetch(self) -> dict[str, object]:
        """Fetch the raw ``{ms-text: price}`` mapping.

        Raises:
            PriceFeedError: On transport errors, non-2xx status, or bad JSON.
        """
        try:
            response = await self._client.get(self._settings.feed_url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise PriceFeedError(f"Price feed request failed: {e}") from e
        except ValueError as e:
            raise PriceFeedError(f"Price feed returned invalid JSON: {e}") from e

        mapping = _normalise(payload)
        logger.debug("price_feed_fetched", samples=len(mapping))
        return mapping

    async def fetch_points(self) -> list[PricePoint]:
        """Fetch and convert to sorted PricePoints."""
        return to_price_points(await self.fetch())

    async def close(self) -> None:
        await self._client.aclose()
