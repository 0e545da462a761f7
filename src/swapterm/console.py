"""prompt_toolkit front end for the command interpreter.

Maps key presses to interpreter calls, prints new log entries, and drives
the trade and transfer sub-panels as nested prompts. Transactions run as
background tasks so a panel can be closed while one is pending; the
result still reaches the command log through the interpreter.
"""

from __future__ import annotations

import asyncio

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear as clear_screen
from prompt_toolkit.shortcuts import print_formatted_text

from swapterm.chain.wallet import WalletSession
from swapterm.config import AppSettings
from swapterm.logging import get_logger
from swapterm.models import ActivePanel, EntryType, HistoryEntry, Message, MessageKind, SwapDirection
from swapterm.swap.orchestrator import TransactionOrchestrator
from swapterm.swap.panel import SwapPanel, TransferPanel
from swapterm.swap.quote_engine import SwapQuoteEngine
from swapterm.terminal.interpreter import CommandInterpreter
from swapterm.terminal.messages import error, render_tokens

logger = get_logger(__name__)

PROMPT = "user@rose:~$ "

_STYLES = {
    MessageKind.INFO: "ansigreen",
    MessageKind.SUCCESS: "ansibrightgreen bold",
    MessageKind.ERROR: "ansired",
}

TRADE_HELP = (
    "trade panel: <amount> | flip | slippage <pct> | + | - | execute | close"
)
TRANSFER_HELP = "transfer panel: amount <x> | to <address or name> | send | close"


class ConsoleNotifier:
    """Notification surface that prints pop-ups inline."""

    def show(self, message: Message) -> None:
        style = _STYLES.get(message.kind, "")
        print_formatted_text(FormattedText([(style, f"[!] {render_tokens(message)}")]))


class TerminalConsole:
    """Interactive session over a CommandInterpreter.

    Args:
        settings: Application settings (symbols, swap parameters).
        wallet: Shared wallet session.
        interpreter: Command interpreter owning the output log.
    """

    def __init__(
        self,
        settings: AppSettings,
        wallet: WalletSession,
        interpreter: CommandInterpreter,
    ) -> None:
        self._settings = settings
        self._wallet = wallet
        self._interpreter = interpreter
        self._notifier = ConsoleNotifier()
        self._quote_engine = SwapQuoteEngine(wallet)
        self._printed = 0
        self._background: set[asyncio.Task] = set()  # type: ignore[type-arg]
        self._orchestrators: list[TransactionOrchestrator] = []

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _render_new(self) -> None:
        history = self._interpreter.history
        if len(history) < self._printed:
            clear_screen()
            self._printed = 0
        for entry in history[self._printed:]:
            self._render(entry)
        self._printed = len(history)

    def _render(self, entry: HistoryEntry) -> None:
        if entry.type is EntryType.COMMAND:
            print_formatted_text(FormattedText([("ansicyan", f"{PROMPT}{entry.content}")]))
            return
        content = entry.content
        kind = content.kind if isinstance(content, Message) else MessageKind.INFO
        print_formatted_text(FormattedText([(_STYLES[kind], render_tokens(content))]))

    def _log_sink(self, message: Message) -> None:
        self._interpreter.post_output(message)
        self._render_new()

    def _new_orchestrator(self) -> TransactionOrchestrator:
        orchestrator = TransactionOrchestrator(
            wallet=self._wallet,
            swap_settings=self._settings.swap,
            chain_settings=self._settings.chain,
            notifier=self._notifier,
            log_sink=self._log_sink,
        )
        self._orchestrators = [o for o in self._orchestrators if o.is_busy]
        self._orchestrators.append(orchestrator)
        return orchestrator

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        interpreter = self._interpreter

        def _recall(event, key: str) -> None:
            buffer = event.current_buffer
            interpreter.input = buffer.text
            interpreter.handle_key(key)
            buffer.text = interpreter.input
            buffer.cursor_position = len(buffer.text)

        @kb.add("up")
        def _(event) -> None:
            _recall(event, "ArrowUp")

        @kb.add("down")
        def _(event) -> None:
            _recall(event, "ArrowDown")

        @kb.add("tab")
        def _(event) -> None:
            buffer = event.current_buffer
            interpreter.set_input(buffer.text)
            interpreter.handle_key("Tab")
            options = interpreter.completions()
            if len(options) == 1:
                interpreter.select_completion(options[0])
                buffer.text = interpreter.input
                buffer.cursor_position = len(buffer.text)
            else:
                print_formatted_text(FormattedText([("ansigray", "  ".join(options))]))

        @kb.add("escape", eager=True)
        def _(event) -> None:
            interpreter.handle_key("Escape")

        return kb

    async def run(self) -> None:
        """Read and dispatch lines until ``exit`` or end of input."""
        session: PromptSession = PromptSession(key_bindings=self._key_bindings())
        panel_session: PromptSession = PromptSession()

        with patch_stdout():
            while not self._interpreter.closed:
                hint = "press tab to see options" if self._interpreter.show_tab_hint else ""
                try:
                    line = await session.prompt_async(PROMPT, rprompt=hint)
                except (EOFError, KeyboardInterrupt):
                    break

                self._interpreter.submit_line(line)
                self._render_new()

                panel = self._interpreter.active_panel
                if panel is ActivePanel.TRADE:
                    await self._run_trade_panel(panel_session)
                elif panel is ActivePanel.TRANSFER:
                    await self._run_transfer_panel(panel_session)
                elif panel is ActivePanel.SNAKE:
                    # The game itself is rendered elsewhere.
                    self._interpreter.close_panel()

            self._report_pending()
            for task in list(self._background):
                task.cancel()

    def _report_pending(self) -> int:
        """Write a log line for every transaction still unconfirmed at exit."""
        pending = [o for o in self._orchestrators if o.is_busy]
        for orchestrator in pending:
            tx_hash = orchestrator.pending_tx_hash
            logger.warning("transaction_pending_at_exit", tx_hash=tx_hash)
            if tx_hash:
                text = f"Transaction still pending at exit: {tx_hash}"
            else:
                text = "Transaction abandoned at exit before it was sent."
            self._interpreter.post_output(error(text))
        self._render_new()
        return len(pending)

    # ------------------------------------------------------------------
    # Sub-panels
    # ------------------------------------------------------------------

    def _describe(self, panel: SwapPanel) -> str:
        native = self._settings.chain.native_symbol
        token = self._settings.chain.token_symbol
        state = panel.snapshot()
        source, target = (native, token) if state.direction is SwapDirection.DEPOSIT else (token, native)
        quote = f"{state.quote}" if state.quote is not None else "Enter an amount to see quote"
        status = " (pending)" if state.pending else ""
        return (
            f"{source} -> {target} | amount: {state.amount_text or '-'} | "
            f"quote: {quote} | slippage: {state.slippage}%{status}"
        )

    async def _run_trade_panel(self, prompt: PromptSession) -> None:
        print_formatted_text(FormattedText([("ansigray", TRADE_HELP)]))
        panel = SwapPanel(self._quote_engine, self._new_orchestrator(), self._settings.swap)
        async with panel:
            while True:
                try:
                    line = (await prompt.prompt_async("trade> ")).strip()
                except (EOFError, KeyboardInterrupt):
                    break
                word, _, rest = line.partition(" ")
                word = word.lower()
                if word in ("close", "q", "quit"):
                    break
                if word == "flip":
                    await panel.toggle_direction()
                elif word == "slippage":
                    panel.set_slippage(rest.strip())
                elif word == "+":
                    panel.adjust_slippage(1)
                elif word == "-":
                    panel.adjust_slippage(-1)
                elif word in ("execute", "x"):
                    if panel.can_execute:
                        self._spawn(panel.execute())
                        await asyncio.sleep(0)
                elif line:
                    await panel.set_amount(line)
                print_formatted_text(FormattedText([("ansigreen", self._describe(panel))]))
        self._interpreter.close_panel()

    async def _run_transfer_panel(self, prompt: PromptSession) -> None:
        print_formatted_text(FormattedText([("ansigray", TRANSFER_HELP)]))
        async with TransferPanel(self._new_orchestrator()) as panel:
            while True:
                try:
                    line = (await prompt.prompt_async("transfer> ")).strip()
                except (EOFError, KeyboardInterrupt):
                    break
                word, _, rest = line.partition(" ")
                word = word.lower()
                if word in ("close", "q", "quit"):
                    break
                if word == "amount":
                    panel.amount_text = rest.strip()
                elif word == "to":
                    panel.recipient = rest.strip()
                elif word in ("send", "execute", "x"):
                    if panel.can_execute:
                        self._spawn(panel.execute())
                        await asyncio.sleep(0)
                status = " (pending)" if panel.pending else ""
                print_formatted_text(FormattedText([(
                    "ansigreen",
                    f"amount: {panel.amount_text or '-'} | to: {panel.recipient or '-'}{status}",
                )]))
        self._interpreter.close_panel()
