"""Shared data models for the swap terminal.

CRITICAL: All monetary values use Decimal. Never use float for amounts,
balances, reserves, quotes or prices.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class CommandName(str, Enum):
    """The fixed set of terminal commands."""

    TRADE = "trade"
    TRANSFER = "transfer"
    BALANCE = "balance"
    ADDRESS = "address"
    SNAKE = "snake"
    CLEAR = "clear"
    EXIT = "exit"


class EntryType(str, Enum):
    """Kind of item in the terminal output log."""

    COMMAND = "command"
    OUTPUT = "output"


class MessageKind(str, Enum):
    """Severity of an output line or notification."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class SwapDirection(str, Enum):
    """Swap direction relative to the native coin."""

    DEPOSIT = "deposit"  # native -> token
    WITHDRAW = "withdraw"  # token -> native

    def toggled(self) -> "SwapDirection":
        if self is SwapDirection.DEPOSIT:
            return SwapDirection.WITHDRAW
        return SwapDirection.DEPOSIT


class ActivePanel(str, Enum):
    """Sub-panel currently covering the command input."""

    NONE = "none"
    TRADE = "trade"
    TRANSFER = "transfer"
    SNAKE = "snake"


class TxState(str, Enum):
    """Transaction orchestration state.

    IDLE -> VALIDATING -> {REJECTED | SUBMITTED} -> {CONFIRMED | FAILED} -> IDLE
    """

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class Message:
    """A renderable output value.

    Inline tokens are written in ``text`` as ``:name:`` shortcodes (e.g.
    ``:rose:``) and listed in ``inline_tokens``; the rendering side maps
    them to glyphs.
    """

    text: str
    kind: MessageKind = MessageKind.INFO
    inline_tokens: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class HistoryEntry:
    """One item in the terminal output log."""

    type: EntryType
    content: str | Message


@dataclass(frozen=True)
class WalletState:
    """Immutable snapshot of the connected wallet and pool.

    Balances and reserves are in whole units (already scaled by decimals).
    """

    is_connected: bool = False
    address: str | None = None
    chain_id: int | None = None
    native_balance: Decimal = Decimal("0")
    token_balance: Decimal = Decimal("0")
    native_reserve: Decimal = Decimal("0")
    token_reserve: Decimal = Decimal("0")
    token_address: str = ""


@dataclass(frozen=True)
class TxOutcome:
    """Terminal result of one orchestrated transaction attempt."""

    state: TxState
    message: Message
    tx_hash: str | None = None


@dataclass(frozen=True)
class PricePoint:
    """A single price sample. Timestamp is Unix seconds."""

    timestamp: int
    value: Decimal


@dataclass(frozen=True)
class Candle:
    """OHLC summary of the price samples inside one time bucket."""

    bucket_start: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal


@dataclass
class PoolReserves:
    """Native and token liquidity held by the swap contract."""

    native: Decimal
    token: Decimal

    @property
    def ratio(self) -> Decimal | None:
        """Token units per native unit, or None when the pool is empty."""
        if self.native == 0:
            return None
        return self.token / self.native


_SIX_PLACES = Decimal("0.000001")


def round_amount(value: Decimal, places: Decimal = _SIX_PLACES) -> Decimal:
    """Round half-up to the display precision (6 fractional digits by default)."""
    return value.quantize(places, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal, decimals: int = 6) -> str:
    """Render an amount with a fixed number of fractional digits."""
    return f"{value:.{decimals}f}"
