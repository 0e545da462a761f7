"""Transaction orchestration for swaps and token transfers.

Each attempt runs the same lifecycle:

    IDLE -> VALIDATING -> {REJECTED | SUBMITTED} -> {CONFIRMED | FAILED} -> IDLE

Validation failures (bad amount, no wallet, insufficient balance, pool cap)
raise inside the pipeline and are caught here, at the orchestration
boundary, where they become exactly one notification. Submission and
confirmation failures are classified and produce one notification plus
one permanent line in the session log. The in-flight lock is released on
every path.

The session log sink belongs to the terminal, not the panel, so the
outcome of a transaction still lands in the log if its panel was closed
while it was pending.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from decimal import Decimal

from swapterm.chain.client import ContractInterface
from swapterm.chain.wallet import NATIVE_DECIMALS, WalletSession, to_base_units
from swapterm.config import ChainSettings, SwapSettings
from swapterm.exceptions import BalanceError, UserInputError, WalletStateError
from swapterm.logging import get_logger
from swapterm.models import (
    Message,
    SwapDirection,
    TxOutcome,
    TxState,
    WalletState,
    format_amount,
    round_amount,
)
from swapterm.swap.quote_engine import min_output_base_units, parse_amount
from swapterm.terminal.messages import NotificationSurface, error, info, success

logger = get_logger(__name__)

_GENERIC_TX_ERROR = "An error occurred during the transaction."
_USER_REJECTED = "User rejected the request."

TRANSFER_USAGE = (
    "usage: transfer <amount> <recipient>\n\n"
    "    example: transfer 10 rosemoney.eth"
)


def classify_error(exc: BaseException) -> str:
    """Turn a submission/confirmation failure into user-facing text.

    Prefers the provider's revert reason, then the exception text, then a
    generic message. Anything mentioning a rejection is normalised.
    """
    text = getattr(exc, "reason", None) or str(exc) or _GENERIC_TX_ERROR
    if "rejected" in text.lower():
        return _USER_REJECTED
    return text


class TransactionOrchestrator:
    """Validates, submits and reports swap and transfer transactions.

    One orchestrator belongs to one panel; at most one transaction is in
    flight per orchestrator. A second execute while one is pending is
    refused without touching the chain.

    Args:
        wallet: Wallet session (signer-backed client and balances).
        swap_settings: Amount minimum, pool cap divisor, display precision.
        chain_settings: Asset symbols used in messages.
        notifier: Transient notification surface.
        log_sink: Appends a permanent line to the session log.
    """

    def __init__(
        self,
        wallet: WalletSession,
        swap_settings: SwapSettings,
        chain_settings: ChainSettings,
        notifier: NotificationSurface,
        log_sink: Callable[[Message], None],
    ) -> None:
        self._wallet = wallet
        self._settings = swap_settings
        self._native = chain_settings.native_symbol
        self._token = chain_settings.token_symbol
        self._notifier = notifier
        self._log_sink = log_sink
        self._state = TxState.IDLE
        self._tx_hash: str | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> TxState:
        return self._state

    @property
    def is_busy(self) -> bool:
        """True while a transaction is being validated, submitted or confirmed."""
        return self._lock.locked()

    @property
    def pending_tx_hash(self) -> str | None:
        """Hash of the submitted transaction awaiting confirmation, if any."""
        return self._tx_hash

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def execute_swap(
        self,
        direction: SwapDirection,
        amount_text: str,
        quote: Decimal | None,
        slippage: Decimal,
    ) -> TxOutcome:
        """Run one swap attempt through the full lifecycle."""
        if self._lock.locked():
            return self._refuse_reentry()
        async with self._lock:
            try:
                self._transition(TxState.VALIDATING)
                return await self._swap(direction, amount_text, quote, slippage)
            finally:
                self._tx_hash = None
                self._transition(TxState.IDLE)

    async def execute_transfer(self, amount_text: str, recipient: str) -> TxOutcome:
        """Run one token transfer attempt through the full lifecycle."""
        if self._lock.locked():
            return self._refuse_reentry()
        async with self._lock:
            try:
                self._transition(TxState.VALIDATING)
                return await self._transfer(amount_text, recipient)
            finally:
                self._tx_hash = None
                self._transition(TxState.IDLE)

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def _swap(
        self,
        direction: SwapDirection,
        amount_text: str,
        quote: Decimal | None,
        slippage: Decimal,
    ) -> TxOutcome:
        try:
            client = self._require_signer()
            amount = self._validate_amount(amount_text)
            wallet = await self._current_wallet()
            self._check_swap_balance(direction, amount, wallet)
            if quote is None:
                raise UserInputError("No quote available yet. Please wait for a quote.")
        except (UserInputError, WalletStateError, BalanceError) as e:
            return self._reject(e)

        try:
            token_decimals = await self._wallet.token_decimals()
            if direction is SwapDirection.DEPOSIT:
                value = to_base_units(amount, NATIVE_DECIMALS)
                min_out = min_output_base_units(to_base_units(quote, token_decimals), slippage)
                self._transition(TxState.SUBMITTED)
                handle = await client.deposit(min_out, value=value)
            else:
                units = to_base_units(amount, token_decimals)
                min_out = min_output_base_units(to_base_units(quote, NATIVE_DECIMALS), slippage)
                self._transition(TxState.SUBMITTED)
                handle = await client.withdraw(units, min_out)
            self._tx_hash = handle.tx_hash

            logger.info(
                "swap_submitted",
                direction=direction.value,
                amount=str(amount),
                quote=str(quote),
                slippage=str(slippage),
                min_out=min_out,
                tx_hash=handle.tx_hash,
            )
            self._notifier.show(info("Transaction sent. Waiting for confirmation..."))
            await handle.wait()
        except Exception as e:
            return self._fail(e, "Error occurred during swap. Please try again.")

        # Reports the quote shown before submission, not the amount realised
        # in the receipt.
        shown_amount = format_amount(amount, self._settings.display_decimals)
        if direction is SwapDirection.DEPOSIT:
            text = (
                f"Successfully deposited {shown_amount} {self._glyph(self._native)} "
                f"for {self._fmt(quote)} {self._glyph(self._token)}"
            )
        else:
            text = (
                f"Successfully withdrawn {shown_amount} {self._glyph(self._token)} "
                f"for {self._fmt(quote)} {self._glyph(self._native)}"
            )
        return await self._confirm(success(text), handle.tx_hash)

    async def _transfer(self, amount_text: str, recipient: str) -> TxOutcome:
        try:
            client = self._require_signer()
            amount = self._validate_amount(amount_text)
            wallet = await self._current_wallet()
            if amount > wallet.token_balance:
                raise BalanceError(
                    f"Insufficient funds. Current balance: "
                    f"{self._fmt(wallet.token_balance)} {self._glyph(self._token)}"
                )
            resolved = await self._resolve(recipient)
        except (UserInputError, WalletStateError, BalanceError) as e:
            return self._reject(e, to_log=True)

        try:
            units = to_base_units(amount, await self._wallet.token_decimals())
            self._transition(TxState.SUBMITTED)
            handle = await client.transfer(resolved, units)
            self._tx_hash = handle.tx_hash
            logger.info(
                "transfer_submitted",
                amount=str(amount),
                recipient=resolved,
                tx_hash=handle.tx_hash,
            )
            self._notifier.show(info("Transaction sent. Waiting for confirmation..."))
            await handle.wait()
        except Exception as e:
            return self._fail(e, "Error during transfer. Please try again.")

        new_balance = wallet.token_balance - amount
        text = f"New balance: {self._fmt(new_balance)} {self._glyph(self._token)}"
        return await self._confirm(success(text), handle.tx_hash)

    # ------------------------------------------------------------------
    # Validation helpers (raise; caught at the pipeline boundary)
    # ------------------------------------------------------------------

    def _require_signer(self) -> ContractInterface:
        client = self._wallet.client
        if client is None or not self._wallet.state.is_connected:
            raise WalletStateError("Please connect your wallet first.")
        return client

    def _validate_amount(self, amount_text: str) -> Decimal:
        amount = parse_amount(amount_text)
        if amount is None:
            raise UserInputError("Please enter a valid amount.")
        if round_amount(amount) < self._settings.min_amount:
            raise UserInputError(
                f"Amount too small. Minimum amount is {self._fmt(self._settings.min_amount)}."
            )
        return amount

    def _check_swap_balance(
        self, direction: SwapDirection, amount: Decimal, wallet: WalletState
    ) -> None:
        if direction is SwapDirection.DEPOSIT:
            if amount > wallet.native_balance:
                raise BalanceError(
                    f"Insufficient {self._native} balance. Current balance: "
                    f"{self._fmt(wallet.native_balance)} {self._glyph(self._native)}"
                )
            return

        if amount > wallet.token_balance:
            raise BalanceError(
                f"Insufficient {self._token} balance. Current balance: "
                f"{self._fmt(wallet.token_balance)} {self._glyph(self._token)}"
            )
        max_trade = wallet.token_reserve / self._settings.max_trade_reserve_divisor
        if amount > max_trade:
            raise BalanceError(
                f"Amount exceeds the maximum single trade of "
                f"{self._fmt(max_trade)} {self._glyph(self._token)}."
            )

    async def _resolve(self, recipient: str) -> str:
        handle = (recipient or "").strip()
        resolved = None
        if handle:
            try:
                resolved = await self._wallet.client.resolve_name(handle)
            except Exception:
                logger.warning("recipient_resolution_failed", recipient=handle, exc_info=True)
        if not resolved:
            raise UserInputError(
                "Invalid recipient address or unresolved ENS name.\n\n    " + TRANSFER_USAGE
            )
        return resolved

    async def _current_wallet(self) -> WalletState:
        """Refresh balances before guarding; fall back to the last snapshot."""
        try:
            return await self._wallet.refresh()
        except Exception:
            logger.warning("wallet_refresh_failed", exc_info=True)
            return self._wallet.state

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _refuse_reentry(self) -> TxOutcome:
        logger.warning("transaction_already_in_flight", state=self._state.value)
        return TxOutcome(
            state=TxState.REJECTED,
            message=error("A transaction is already in progress."),
        )

    def _reject(self, exc: Exception, to_log: bool = False) -> TxOutcome:
        self._transition(TxState.REJECTED)
        msg = error(str(exc))
        logger.info("transaction_rejected", error_type=type(exc).__name__, reason=str(exc))
        self._notifier.show(msg)
        if to_log:
            self._log_sink(msg)
        return TxOutcome(state=TxState.REJECTED, message=msg)

    def _fail(self, exc: Exception, log_line: str) -> TxOutcome:
        self._transition(TxState.FAILED)
        text = classify_error(exc)
        logger.error("transaction_failed", error=str(exc), classified=text, exc_info=True)
        self._notifier.show(error(text))
        self._log_sink(error(log_line))
        return TxOutcome(state=TxState.FAILED, message=error(text))

    async def _confirm(self, msg: Message, tx_hash: str) -> TxOutcome:
        self._transition(TxState.CONFIRMED)
        logger.info("transaction_confirmed", tx_hash=tx_hash)
        self._notifier.show(msg)
        self._log_sink(msg)
        try:
            await self._wallet.refresh()
        except Exception:
            logger.warning("post_confirmation_refresh_failed", exc_info=True)
        return TxOutcome(state=TxState.CONFIRMED, message=msg, tx_hash=tx_hash)

    def _transition(self, state: TxState) -> None:
        logger.debug("tx_state", previous=self._state.value, current=state.value)
        self._state = state

    def _fmt(self, value: Decimal) -> str:
        return format_amount(value, self._settings.display_decimals)

    @staticmethod
    def _glyph(symbol: str) -> str:
        return f":{symbol.lower()}:"
