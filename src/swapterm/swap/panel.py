"""Swap and transfer sub-panels.

A panel owns the editable inputs (amount, direction, slippage, recipient),
the last fetched quote, and the execute trigger. SwapPanel also owns a
background task that refreshes the quote every few seconds while an amount
is present; the task lives exactly as long as the panel is open.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from swapterm.config import SwapSettings
from swapterm.logging import get_logger
from swapterm.models import SwapDirection, TxOutcome
from swapterm.swap.orchestrator import TransactionOrchestrator
from swapterm.swap.quote_engine import SwapQuoteEngine

logger = get_logger(__name__)


@dataclass(frozen=True)
class SwapPanelState:
    """Render-ready snapshot of a swap panel."""

    direction: SwapDirection
    amount_text: str
    quote: Decimal | None
    slippage: Decimal
    pending: bool
    can_execute: bool


class SwapPanel:
    """Interactive swap form with quote polling and a guarded execute trigger.

    Use as an async context manager so the polling task is always cancelled:

        async with SwapPanel(engine, orchestrator, settings) as panel:
            await panel.set_amount("0.5")
            await panel.execute()

    Args:
        quote_engine: Source of advisory quotes.
        orchestrator: Transaction pipeline dedicated to this panel.
        settings: Slippage bounds/step and the refresh interval.
    """

    def __init__(
        self,
        quote_engine: SwapQuoteEngine,
        orchestrator: TransactionOrchestrator,
        settings: SwapSettings,
    ) -> None:
        self._engine = quote_engine
        self._orchestrator = orchestrator
        self._settings = settings
        self._direction = SwapDirection.DEPOSIT
        self._amount_text = ""
        self._quote: Decimal | None = None
        self._slippage = settings.default_slippage
        self._pending = False
        self._generation = 0
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    async def __aenter__(self) -> SwapPanel:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Start the quote refresh task."""
        if self._task is not None:
            logger.warning("swap_panel_already_open")
            return
        self._task = asyncio.create_task(self._refresh_loop())
        logger.info("swap_panel_opened", refresh_interval=self._settings.quote_refresh_interval)

    async def close(self) -> None:
        """Stop the refresh task. A submitted transaction is left to finish."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("swap_panel_closed", pending=self._pending)

    @property
    def is_open(self) -> bool:
        return self._task is not None

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._settings.quote_refresh_interval)
            if self._amount_text.strip():
                await self.refresh_quote()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def direction(self) -> SwapDirection:
        return self._direction

    @property
    def amount_text(self) -> str:
        return self._amount_text

    @property
    def quote(self) -> Decimal | None:
        return self._quote

    @property
    def slippage(self) -> Decimal:
        return self._slippage

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def can_execute(self) -> bool:
        """The execute trigger is disabled while pending or with no amount."""
        return not self._pending and bool(self._amount_text.strip())

    async def set_amount(self, amount_text: str) -> Decimal | None:
        self._amount_text = amount_text
        return await self.refresh_quote()

    async def toggle_direction(self) -> Decimal | None:
        self._direction = self._direction.toggled()
        return await self.refresh_quote()

    def set_slippage(self, value: Decimal | str) -> Decimal:
        """Set slippage, snapped to the step and clamped to the allowed range."""
        try:
            requested = Decimal(str(value))
        except InvalidOperation:
            return self._slippage
        if not requested.is_finite():
            return self._slippage
        step = self._settings.slippage_step
        snapped = (requested / step).to_integral_value(rounding=ROUND_HALF_UP) * step
        self._slippage = min(max(snapped, self._settings.min_slippage), self._settings.max_slippage)
        return self._slippage

    def adjust_slippage(self, steps: int) -> Decimal:
        return self.set_slippage(self._slippage + self._settings.slippage_step * steps)

    async def refresh_quote(self) -> Decimal | None:
        """Refetch the quote for the current inputs.

        A response for an older request than the latest one is discarded,
        so a slow fetch cannot overwrite the quote for a newer edit.
        """
        self._generation += 1
        generation = self._generation
        quote = await self._engine.get_quote(self._direction, self._amount_text)
        if generation != self._generation:
            logger.debug("stale_quote_dropped", generation=generation, latest=self._generation)
            return self._quote
        self._quote = quote
        return quote

    def snapshot(self) -> SwapPanelState:
        return SwapPanelState(
            direction=self._direction,
            amount_text=self._amount_text,
            quote=self._quote,
            slippage=self._slippage,
            pending=self._pending,
            can_execute=self.can_execute,
        )

    # ------------------------------------------------------------------
    # Trigger
    # ------------------------------------------------------------------

    async def execute(self) -> TxOutcome | None:
        """Submit the swap with the last fetched quote.

        Returns None without doing anything while the trigger is disabled.
        """
        if not self.can_execute:
            logger.debug("swap_execute_ignored", pending=self._pending)
            return None
        self._pending = True
        try:
            return await self._orchestrator.execute_swap(
                self._direction, self._amount_text, self._quote, self._slippage
            )
        finally:
            self._pending = False


class TransferPanel:
    """Token transfer form: amount, recipient and a guarded trigger."""

    def __init__(self, orchestrator: TransactionOrchestrator) -> None:
        self._orchestrator = orchestrator
        self.amount_text = ""
        self.recipient = ""
        self._pending = False

    async def __aenter__(self) -> TransferPanel:
        logger.info("transfer_panel_opened")
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        logger.info("transfer_panel_closed", pending=self._pending)

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def can_execute(self) -> bool:
        return not self._pending and bool(self.amount_text.strip())

    async def execute(self) -> TxOutcome | None:
        if not self.can_execute:
            return None
        self._pending = True
        try:
            return await self._orchestrator.execute_transfer(self.amount_text, self.recipient)
        finally:
            self._pending = False
