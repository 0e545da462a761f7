"""Entry point for the swap terminal.

Wires settings, logging, the wallet session and the interpreter, then runs
the interactive console. When the chart API is enabled it is served by
uvicorn on the same event loop for the lifetime of the console.

Component wiring order:
1. AppSettings (configuration)
2. Logging setup
3. WalletSession (connects when a key and token address are configured)
4. CommandInterpreter
5. PriceFeed (price history for candles)
6. Chart API (optional, uvicorn)
7. TerminalConsole
"""

import asyncio

import uvicorn

from swapterm.chain.wallet import WalletSession
from swapterm.chain.web3_client import Web3ContractClient
from swapterm.chart.price_feed import PriceFeed
from swapterm.config import AppSettings
from swapterm.console import TerminalConsole
from swapterm.logging import get_logger, setup_logging
from swapterm.terminal.interpreter import CommandInterpreter


async def _connect_wallet(settings: AppSettings, wallet: WalletSession) -> None:
    """Connect when credentials are configured; otherwise stay disconnected."""
    logger = get_logger("swapterm.main")
    if not settings.chain.private_key.get_secret_value() or not settings.chain.token_address:
        logger.warning(
            "no_wallet_configured",
            note="Set CHAIN_PRIVATE_KEY and CHAIN_TOKEN_ADDRESS to connect.",
        )
        return
    try:
        await wallet.connect()
    except Exception as e:
        logger.error("wallet_connect_failed", error=str(e), exc_info=True)


async def run() -> None:
    """Run the swap terminal until the user exits."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_file, settings.log_format)
    logger = get_logger("swapterm.main")

    # 3. Wallet session
    wallet = WalletSession(settings.chain, Web3ContractClient)
    await _connect_wallet(settings, wallet)

    # 4. Interpreter
    interpreter = CommandInterpreter(wallet, settings.chain, settings.swap.display_decimals)

    # 5. Price feed
    price_feed = PriceFeed(settings.chart)

    # 6. Chart API
    server: uvicorn.Server | None = None
    server_task: asyncio.Task | None = None  # type: ignore[type-arg]
    if settings.dashboard.enabled:
        from swapterm.dashboard.app import create_chart_app

        app = create_chart_app(wallet, price_feed, settings.chart.default_interval)
        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        server_task = asyncio.create_task(server.serve())
        logger.info(
            "chart_api_started",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
        )

    # 7. Console
    console = TerminalConsole(settings, wallet, interpreter)
    try:
        await console.run()
    finally:
        if server is not None and server_task is not None:
            server.should_exit = True
            await server_task
        await price_feed.close()
        await wallet.disconnect()
        logger.info("swap_terminal_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
