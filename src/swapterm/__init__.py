"""Terminal-style wallet console with a slippage-protected swap panel."""

__version__ = "0.1.0"
