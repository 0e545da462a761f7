"""Shared test fixtures for the swap terminal."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from swapterm.chain.client import ContractInterface, TransactionHandle
from swapterm.chain.wallet import WalletSession
from swapterm.config import AppSettings, ChainSettings, SwapSettings
from swapterm.terminal.messages import RecordingSurface

WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"
TOKEN_ADDRESS = "0x2222222222222222222222222222222222222222"
RECIPIENT_ADDRESS = "0x3333333333333333333333333333333333333333"

WEI = 10**18


def make_handle(tx_hash: str = "0xabc123") -> MagicMock:
    """Create a TransactionHandle mock whose wait() succeeds immediately."""
    handle = MagicMock(spec=TransactionHandle)
    handle.tx_hash = tx_hash
    handle.wait = AsyncMock(return_value={"status": 1, "blockNumber": 1})
    return handle


def make_client(
    chain_id: int = 1,
    native_balance: int = 2 * WEI,
    token_balance: int = 100 * WEI,
    reserves: tuple[int, int] = (50 * WEI, 1000 * WEI),
    decimals: int = 18,
) -> MagicMock:
    """Create a ContractInterface mock with a funded wallet and a pool.

    Defaults: 2 ETH, 100 ROSE, pool of 50 ETH / 1000 ROSE (so a single
    withdraw is capped at 50 ROSE).
    """
    client = MagicMock(spec=ContractInterface)
    client.account_address = WALLET_ADDRESS
    client.chain_id = AsyncMock(return_value=chain_id)
    client.get_native_balance = AsyncMock(return_value=native_balance)
    client.token_balance_of = AsyncMock(return_value=token_balance)
    client.token_decimals = AsyncMock(return_value=decimals)
    client.get_reserves = AsyncMock(return_value=reserves)
    client.quote_deposit = AsyncMock(return_value=20 * WEI)
    client.quote_withdraw = AsyncMock(return_value=WEI // 2)
    client.deposit = AsyncMock(return_value=make_handle())
    client.withdraw = AsyncMock(return_value=make_handle())
    client.transfer = AsyncMock(return_value=make_handle())
    client.resolve_name = AsyncMock(return_value=RECIPIENT_ADDRESS)
    client.close = AsyncMock()
    return client


@pytest.fixture
def chain_settings() -> ChainSettings:
    return ChainSettings(
        rpc_url="http://localhost:8545",
        private_key="0x" + "11" * 32,  # type: ignore[arg-type]
        token_address=TOKEN_ADDRESS,
        primary_chain_id=1,
        secondary_chain_id=17000,
    )


@pytest.fixture
def swap_settings() -> SwapSettings:
    return SwapSettings(quote_refresh_interval=0.01)


@pytest.fixture
def mock_settings(chain_settings: ChainSettings, swap_settings: SwapSettings) -> AppSettings:
    """Return AppSettings with test defaults."""
    return AppSettings(log_level="DEBUG", chain=chain_settings, swap=swap_settings)


@pytest.fixture
def client() -> MagicMock:
    return make_client()


@pytest.fixture
def wallet(chain_settings: ChainSettings, client: MagicMock) -> WalletSession:
    """Disconnected wallet session that will hand out ``client`` on connect."""
    return WalletSession(chain_settings, lambda _settings: client)


@pytest_asyncio.fixture
async def connected_wallet(wallet: WalletSession) -> WalletSession:
    await wallet.connect()
    return wallet


@pytest.fixture
def notifier() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def session_log() -> list:
    return []


@pytest.fixture
def client_factory():
    """The make_client helper, for tests that need a differently funded wallet."""
    return make_client


@pytest.fixture
def handle_factory():
    return make_handle
