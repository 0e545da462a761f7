"""Charting data -- price history feed and OHLC aggregation."""

from swapterm.chart.ohlc import BUCKET_WIDTHS, ChartSeries, aggregate, bucket_start, resolve_width

__all__ = ["BUCKET_WIDTHS", "ChartSeries", "aggregate", "bucket_start", "resolve_width"]
