"""Tests for the swap and transfer panels."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from swapterm.models import Message, SwapDirection, TxOutcome, TxState
from swapterm.swap.orchestrator import TransactionOrchestrator
from swapterm.swap.panel import SwapPanel, TransferPanel
from swapterm.swap.quote_engine import SwapQuoteEngine


@pytest.fixture
def engine() -> MagicMock:
    engine = MagicMock(spec=SwapQuoteEngine)
    engine.get_quote = AsyncMock(return_value=Decimal("20"))
    return engine


@pytest.fixture
def orchestrator() -> MagicMock:
    orch = MagicMock(spec=TransactionOrchestrator)
    orch.execute_swap = AsyncMock(
        return_value=TxOutcome(state=TxState.CONFIRMED, message=Message("ok"), tx_hash="0x1")
    )
    orch.execute_transfer = AsyncMock(
        return_value=TxOutcome(state=TxState.CONFIRMED, message=Message("ok"), tx_hash="0x2")
    )
    return orch


@pytest.fixture
def panel(engine, orchestrator, swap_settings) -> SwapPanel:
    return SwapPanel(engine, orchestrator, swap_settings)


# ---------------------------------------------------------------------------
# Slippage
# ---------------------------------------------------------------------------


def test_slippage_defaults_to_three_percent(panel: SwapPanel) -> None:
    assert panel.slippage == Decimal("3.0")


@pytest.mark.parametrize(
    "requested,expected",
    [
        ("30", Decimal("25")),
        ("0", Decimal("0.1")),
        ("-4", Decimal("0.1")),
        ("3.14", Decimal("3.1")),
        ("3.15", Decimal("3.2")),
        (Decimal("12.5"), Decimal("12.5")),
    ],
)
def test_slippage_snapped_and_clamped(panel: SwapPanel, requested, expected) -> None:
    assert panel.set_slippage(requested) == expected
    assert panel.slippage == expected


@pytest.mark.parametrize("requested", ["abc", "nan", "Infinity"])
def test_invalid_slippage_leaves_value_unchanged(panel: SwapPanel, requested) -> None:
    panel.set_slippage("5")

    assert panel.set_slippage(requested) == Decimal("5")


def test_adjust_slippage_steps_and_saturates(panel: SwapPanel) -> None:
    assert panel.adjust_slippage(1) == Decimal("3.1")
    assert panel.adjust_slippage(-2) == Decimal("2.9")
    assert panel.adjust_slippage(-1000) == Decimal("0.1")
    assert panel.adjust_slippage(1000) == Decimal("25")


# ---------------------------------------------------------------------------
# Quote refresh
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_amount_edit_refetches_quote(panel: SwapPanel, engine) -> None:
    quote = await panel.set_amount("1")

    engine.get_quote.assert_awaited_once_with(SwapDirection.DEPOSIT, "1")
    assert quote == Decimal("20")
    assert panel.quote == Decimal("20")


@pytest.mark.asyncio
async def test_toggle_direction_refetches_quote(panel: SwapPanel, engine) -> None:
    await panel.set_amount("1")
    engine.get_quote.return_value = Decimal("0.05")

    await panel.toggle_direction()

    assert panel.direction is SwapDirection.WITHDRAW
    engine.get_quote.assert_awaited_with(SwapDirection.WITHDRAW, "1")
    assert panel.quote == Decimal("0.05")


@pytest.mark.asyncio
async def test_stale_quote_response_is_dropped(panel: SwapPanel, engine) -> None:
    release = asyncio.Event()

    async def get_quote(direction, amount_text):
        if amount_text == "1":
            await release.wait()
            return Decimal("20")
        return Decimal("40")

    engine.get_quote = AsyncMock(side_effect=get_quote)

    slow = asyncio.create_task(panel.set_amount("1"))
    await asyncio.sleep(0)
    await panel.set_amount("2")
    release.set()
    await slow

    assert panel.quote == Decimal("40")


@pytest.mark.asyncio
async def test_refresh_task_polls_while_amount_present(panel: SwapPanel, engine) -> None:
    async with panel:
        await panel.set_amount("1")
        baseline = engine.get_quote.await_count
        await asyncio.sleep(0.05)
        assert engine.get_quote.await_count > baseline
        assert panel.is_open

    assert not panel.is_open
    stopped_at = engine.get_quote.await_count
    await asyncio.sleep(0.03)
    assert engine.get_quote.await_count == stopped_at


@pytest.mark.asyncio
async def test_refresh_task_idle_without_amount(panel: SwapPanel, engine) -> None:
    async with panel:
        await asyncio.sleep(0.03)

    engine.get_quote.assert_not_awaited()


# ---------------------------------------------------------------------------
# Execute trigger
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_execute_disabled_without_amount(panel: SwapPanel, orchestrator) -> None:
    assert not panel.can_execute
    assert await panel.execute() is None
    orchestrator.execute_swap.assert_not_awaited()


@pytest.mark.asyncio
async def test_execute_passes_current_inputs(panel: SwapPanel, orchestrator) -> None:
    await panel.set_amount("1")
    panel.set_slippage("5")

    outcome = await panel.execute()

    orchestrator.execute_swap.assert_awaited_once_with(
        SwapDirection.DEPOSIT, "1", Decimal("20"), Decimal("5.0")
    )
    assert outcome.state is TxState.CONFIRMED
    assert not panel.pending


@pytest.mark.asyncio
async def test_execute_disabled_while_pending(panel: SwapPanel, orchestrator) -> None:
    release = asyncio.Event()

    async def slow_swap(*args):
        await release.wait()
        return TxOutcome(state=TxState.CONFIRMED, message=Message("ok"))

    orchestrator.execute_swap = AsyncMock(side_effect=slow_swap)
    await panel.set_amount("1")

    first = asyncio.create_task(panel.execute())
    await asyncio.sleep(0)

    assert panel.pending
    assert not panel.can_execute
    assert panel.snapshot().can_execute is False
    assert await panel.execute() is None

    release.set()
    await first
    assert orchestrator.execute_swap.await_count == 1
    assert panel.can_execute


@pytest.mark.asyncio
async def test_result_reaches_session_log_after_panel_closed(
    connected_wallet, client, swap_settings, chain_settings, notifier, session_log, handle_factory
) -> None:
    release = asyncio.Event()

    async def slow_wait() -> dict:
        await release.wait()
        return {"status": 1}

    handle = handle_factory()
    handle.wait = AsyncMock(side_effect=slow_wait)
    client.deposit.return_value = handle

    orch = TransactionOrchestrator(
        connected_wallet, swap_settings, chain_settings, notifier, session_log.append
    )
    panel = SwapPanel(SwapQuoteEngine(connected_wallet), orch, swap_settings)

    await panel.open()
    await panel.set_amount("1")
    pending = asyncio.create_task(panel.execute())
    while not handle.wait.await_count:
        await asyncio.sleep(0)
    await panel.close()

    release.set()
    outcome = await pending

    assert outcome.state is TxState.CONFIRMED
    assert [m.text for m in session_log] == [
        "Successfully deposited 1.000000 :eth: for 20.000000 :rose:"
    ]


# ---------------------------------------------------------------------------
# Transfer panel
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_transfer_panel_execute(orchestrator) -> None:
    async with TransferPanel(orchestrator) as panel:
        assert await panel.execute() is None

        panel.amount_text = "5"
        panel.recipient = "rosemoney.eth"
        outcome = await panel.execute()

    orchestrator.execute_transfer.assert_awaited_once_with("5", "rosemoney.eth")
    assert outcome.tx_hash == "0x2"
    assert not panel.pending
