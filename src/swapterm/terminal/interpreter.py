"""Command interpreter: input line handling, dispatch policy and the output log.

submit_line() echoes every non-empty line into the log as a command entry,
then dispatches it. The dispatch policy is evaluated in order:

1. No wallet connected and the command is not ``exit`` -> connect prompt.
2. Wallet on a network other than the primary or secondary chain ->
   change-network prompt, for every command including ``exit``.
3. Unknown command name -> "Command not found: <name>".
4. The handler runs; any argument is rejected with its usage message.

Handlers are pure; their effects (open a panel, clear, exit) are applied
here. The output log is owned by the interpreter: it is append-only
except for the ``clear`` truncation.
"""

from swapterm.chain.wallet import WalletSession
from swapterm.config import ChainSettings
from swapterm.logging import get_logger
from swapterm.models import ActivePanel, CommandName, EntryType, HistoryEntry, Message
from swapterm.terminal.commands import CommandResult, Effect, build_command_table
from swapterm.terminal.history import CommandHistory
from swapterm.terminal.messages import error, info

logger = get_logger(__name__)

CONNECT_WALLET = "Please connect your wallet."
CHANGE_NETWORK = "Change network to the Holesky Testnet or Ethereum Mainnet"

AVAILABLE_COMMANDS: tuple[str, ...] = tuple(c.value for c in CommandName)

_PANEL_EFFECTS = {
    Effect.OPEN_TRADE: ActivePanel.TRADE,
    Effect.OPEN_TRANSFER: ActivePanel.TRANSFER,
    Effect.OPEN_SNAKE: ActivePanel.SNAKE,
}


class CommandInterpreter:
    """Terminal state machine.

    Args:
        wallet: Wallet session; read on every dispatch, never cached.
        chain_settings: Asset symbols for balance output.
        display_decimals: Fractional digits for amounts.
    """

    def __init__(
        self,
        wallet: WalletSession,
        chain_settings: ChainSettings,
        display_decimals: int = 6,
    ) -> None:
        self._wallet = wallet
        self._table = build_command_table(chain_settings, display_decimals)
        self._log: list[HistoryEntry] = []
        self._recall = CommandHistory()
        self.input = ""
        self.show_tab_hint = True
        self.completion_open = False
        self.active_panel = ActivePanel.NONE
        self.closed = False

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self._log)

    @property
    def submitted(self) -> CommandHistory:
        return self._recall

    # ------------------------------------------------------------------
    # Line submission
    # ------------------------------------------------------------------

    def submit_line(self, raw: str) -> Message | None:
        """Echo, dispatch and log one input line.

        Returns the output message appended for this line, if any.
        """
        trimmed = raw.strip()
        if not trimmed:
            return None

        self._recall.record(trimmed)
        self._log.append(HistoryEntry(EntryType.COMMAND, trimmed))
        self.input = ""
        self.show_tab_hint = True
        self.completion_open = False

        name, *args = trimmed.split()
        name = name.lower()
        result = self._dispatch(name, args)
        logger.info(
            "command_dispatched",
            command=name,
            arg_count=len(args),
            effect=result.effect.value if result.effect else None,
        )

        self._apply(result.effect)
        if result.output is not None:
            self._log.append(HistoryEntry(EntryType.OUTPUT, result.output))
        return result.output

    def _dispatch(self, name: str, args: list[str]) -> CommandResult:
        state = self._wallet.state
        if not state.is_connected and name != CommandName.EXIT.value:
            return CommandResult(info(CONNECT_WALLET))
        if not self._wallet.is_supported_network(state.chain_id):
            return CommandResult(error(CHANGE_NETWORK))
        handler = self._table.get(name)
        if handler is None:
            return CommandResult(error(f"Command not found: {name}"))
        return handler(args, state)

    def _apply(self, effect: Effect | None) -> None:
        if effect is None:
            return
        if effect in _PANEL_EFFECTS:
            self.active_panel = _PANEL_EFFECTS[effect]
        elif effect is Effect.CLEAR:
            self._log.clear()
            self.show_tab_hint = True
        elif effect is Effect.EXIT:
            self.closed = True

    def post_output(self, message: Message | str) -> None:
        """Append an asynchronous result (e.g. a confirmed swap) to the log."""
        self._log.append(HistoryEntry(EntryType.OUTPUT, message))

    def close_panel(self) -> None:
        self.active_panel = ActivePanel.NONE

    # ------------------------------------------------------------------
    # Input editing, recall and completion
    # ------------------------------------------------------------------

    def set_input(self, text: str) -> None:
        self.input = text
        self.show_tab_hint = text == ""

    def handle_key(self, key: str) -> None:
        """Apply a navigation key: ArrowUp, ArrowDown, Tab or Escape."""
        if key == "ArrowUp":
            self.input = self._recall.previous(self.input)
        elif key == "ArrowDown":
            self.input = self._recall.next(self.input)
        elif key == "Tab":
            self.completion_open = True
        elif key == "Escape":
            self.completion_open = False

    def completions(self) -> list[str]:
        """Commands matching the current input as a prefix."""
        prefix = self.input.strip().lower()
        return [c for c in AVAILABLE_COMMANDS if c.startswith(prefix)]

    def select_completion(self, command: str) -> None:
        self.input = command
        self.completion_open = False
        self.show_tab_hint = False
