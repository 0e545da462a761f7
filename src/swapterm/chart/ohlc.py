"""Deterministic time-bucketed OHLC aggregation.

Buckets are fixed-width and aligned to the epoch: a sample at ``t`` belongs
to the bucket starting at ``floor(t / width) * width``. Aggregation is a
single pass over ascending samples, so re-aggregating the same input with
the same width always yields the same candles.
"""

from collections.abc import Iterable, Sequence

from swapterm.models import Candle, PricePoint

# Chart interval menu: label -> bucket width in seconds
BUCKET_WIDTHS: dict[str, int] = {
    "3m": 180,
    "5m": 300,
    "15m": 900,
    "30m": 1800,
    "1h": 3600,
    "4h": 14400,
    "1d": 86400,
    "1w": 604800,
    "1M": 2592000,
}


def bucket_start(timestamp: int, width: int) -> int:
    """Return the start of the bucket containing ``timestamp``."""
    return (timestamp // width) * width


def resolve_width(interval: str | int) -> int:
    """Map a menu label ("1h") or a seconds value to a menu bucket width.

    Raises:
        ValueError: If the interval is not on the menu.
    """
    if isinstance(interval, int):
        if interval in BUCKET_WIDTHS.values():
            return interval
    elif interval in BUCKET_WIDTHS:
        return BUCKET_WIDTHS[interval]
    elif interval.isdigit() and int(interval) in BUCKET_WIDTHS.values():
        return int(interval)
    raise ValueError(
        f"Unsupported chart interval {interval!r}; choose one of {', '.join(BUCKET_WIDTHS)}"
    )


def aggregate(points: Iterable[PricePoint], width: int) -> list[Candle]:
    """Fold ascending price samples into OHLC candles.

    One candle is open at a time, keyed by its bucket start. A sample in a
    different bucket emits the open candle and seeds a new one with
    open=high=low=close=value; otherwise the open candle's high/low/close
    are updated. The open candle is flushed at the end.

    Args:
        points: Samples sorted by ascending timestamp.
        width: Bucket width in seconds.

    Returns:
        Non-overlapping candles in ascending bucket order. Empty input
        yields an empty list.

    Raises:
        ValueError: If width is not a positive integer.
    """
    if not isinstance(width, int) or width <= 0:
        raise ValueError(f"Bucket width must be a positive integer, got {width!r}")

    candles: list[Candle] = []
    key: int | None = None
    open_ = high = low = close = None

    for point in points:
        start = bucket_start(point.timestamp, width)
        value = point.value
        if start != key:
            if key is not None:
                candles.append(Candle(key, open_, high, low, close))
            key = start
            open_ = high = low = close = value
        else:
            high = max(high, value)
            low = min(low, value)
            close = value

    if key is not None:
        candles.append(Candle(key, open_, high, low, close))

    return candles


class ChartSeries:
    """Price samples plus the selected bucket width.

    Candles are recomputed from the full sample list whenever the width or
    the samples change; there is no incremental re-bucketing.
    """

    def __init__(self, points: Sequence[PricePoint] = (), interval: str | int = "1d") -> None:
        self._points: list[PricePoint] = sorted(points, key=lambda p: p.timestamp)
        self._width = resolve_width(interval)
        self._candles = aggregate(self._points, self._width)

    @property
    def width(self) -> int:
        return self._width

    @property
    def points(self) -> list[PricePoint]:
        return list(self._points)

    @property
    def candles(self) -> list[Candle]:
        return list(self._candles)

    def set_width(self, interval: str | int) -> list[Candle]:
        self._width = resolve_width(interval)
        self._candles = aggregate(self._points, self._width)
        return self.candles

    def replace_points(self, points: Sequence[PricePoint]) -> list[Candle]:
        self._points = sorted(points, key=lambda p: p.timestamp)
        self._candles = aggregate(self._points, self._width)
        return self.candles
