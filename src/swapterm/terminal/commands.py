"""The fixed command table.

Handlers are plain functions of (args, wallet_state) returning a
CommandResult: an optional output message plus an optional effect for the
interpreter to apply (open a panel, clear the log, end the session).
Handlers never touch interpreter state themselves.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import wraps

from swapterm.config import ChainSettings
from swapterm.models import CommandName, Message, WalletState, format_amount
from swapterm.terminal.messages import info


class Effect(str, Enum):
    """Interpreter-side consequence of a command."""

    OPEN_TRADE = "open_trade"
    OPEN_TRANSFER = "open_transfer"
    OPEN_SNAKE = "open_snake"
    CLEAR = "clear"
    EXIT = "exit"


@dataclass(frozen=True)
class CommandResult:
    output: Message | None = None
    effect: Effect | None = None


Handler = Callable[[list[str], WalletState], CommandResult]

NO_WALLET = "No wallet connected."


def usage_message(name: str) -> Message:
    return info(f"{name} does not take additional arguments.\n\n    usage: {name}")


def no_arguments(name: str) -> Callable[[Handler], Handler]:
    """Reject any argument with the command's usage message before running it."""

    def decorator(handler: Handler) -> Handler:
        @wraps(handler)
        def wrapper(args: list[str], state: WalletState) -> CommandResult:
            if args:
                return CommandResult(output=usage_message(name))
            return handler(args, state)

        return wrapper

    return decorator


def build_command_table(
    chain_settings: ChainSettings, display_decimals: int = 6
) -> dict[str, Handler]:
    """Build the seven handlers, closing over asset symbols and precision."""
    native = chain_settings.native_symbol
    token = chain_settings.token_symbol

    @no_arguments(CommandName.TRADE.value)
    def trade(args: list[str], state: WalletState) -> CommandResult:
        return CommandResult(info("Opening trade interface..."), Effect.OPEN_TRADE)

    @no_arguments(CommandName.TRANSFER.value)
    def transfer(args: list[str], state: WalletState) -> CommandResult:
        return CommandResult(info("Opening transfer interface..."), Effect.OPEN_TRANSFER)

    @no_arguments(CommandName.BALANCE.value)
    def balance(args: list[str], state: WalletState) -> CommandResult:
        if not state.is_connected:
            return CommandResult(info(NO_WALLET))
        native_text = format_amount(state.native_balance, display_decimals)
        token_text = format_amount(state.token_balance, display_decimals)
        return CommandResult(
            info(
                f"Current {native} balance: {native_text}\n"
                f"Current {token} balance: {token_text} :{token.lower()}:"
            )
        )

    @no_arguments(CommandName.ADDRESS.value)
    def address(args: list[str], state: WalletState) -> CommandResult:
        if state.address:
            return CommandResult(info(f"Wallet address: {state.address}"))
        return CommandResult(info(NO_WALLET))

    @no_arguments(CommandName.CLEAR.value)
    def clear(args: list[str], state: WalletState) -> CommandResult:
        return CommandResult(effect=Effect.CLEAR)

    @no_arguments(CommandName.EXIT.value)
    def exit_(args: list[str], state: WalletState) -> CommandResult:
        return CommandResult(info("Closing terminal..."), Effect.EXIT)

    @no_arguments(CommandName.SNAKE.value)
    def snake(args: list[str], state: WalletState) -> CommandResult:
        return CommandResult(info("Starting Snake game..."), Effect.OPEN_SNAKE)

    return {
        CommandName.TRADE.value: trade,
        CommandName.TRANSFER.value: transfer,
        CommandName.BALANCE.value: balance,
        CommandName.ADDRESS.value: address,
        CommandName.SNAKE.value: snake,
        CommandName.CLEAR.value: clear,
        CommandName.EXIT.value: exit_,
    }
