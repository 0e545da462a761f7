"""Swap quoting, transaction orchestration and the swap/transfer panels."""
