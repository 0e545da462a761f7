"""Custom exceptions for the swap terminal.

All validation and transaction exceptions live here to avoid circular
imports between the terminal, swap and chain packages.
"""


class SwapTermError(Exception):
    """Base exception for all swap terminal errors."""


class UserInputError(SwapTermError):
    """Raised for a bad or empty amount, bad recipient, or malformed command."""


class WalletStateError(SwapTermError):
    """Raised when no wallet is connected or it sits on an unsupported network."""


class BalanceError(SwapTermError):
    """Raised when an amount exceeds the balance or the single-trade pool cap."""


class TransactionError(SwapTermError):
    """Raised when a submitted transaction is rejected, reverts, or cannot be sent.

    Carries the provider's revert reason when one is available so the
    orchestrator can classify the failure without parsing messages.
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class PriceFeedError(SwapTermError):
    """Raised when the price history feed is unreachable or returns bad data."""
