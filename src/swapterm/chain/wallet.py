"""Wallet session: the process-wide connection capability.

The session is created disconnected, becomes connected through connect(),
and is torn down by disconnect(). Dependents never cache balances; they
read ``session.state`` (an immutable snapshot) at the moment they need it,
and call refresh() when they need it current.
"""

from collections.abc import Callable
from decimal import Decimal

from swapterm.chain.client import ContractInterface
from swapterm.config import ChainSettings
from swapterm.exceptions import WalletStateError
from swapterm.logging import get_logger
from swapterm.models import WalletState

logger = get_logger(__name__)

NATIVE_DECIMALS = 18


def from_base_units(value: int, decimals: int) -> Decimal:
    """Scale an integer base-unit amount to whole units."""
    return Decimal(value) / (Decimal(10) ** decimals)


def to_base_units(value: Decimal, decimals: int) -> int:
    """Scale a whole-unit amount to integer base units, truncating dust."""
    return int(value * (Decimal(10) ** decimals))


class WalletSession:
    """Owns the contract client and the latest wallet snapshot.

    Args:
        settings: Chain settings (token address, supported networks).
        client_factory: Builds a ContractInterface on connect. Injected so
            tests and alternative providers can substitute their own.
    """

    def __init__(
        self,
        settings: ChainSettings,
        client_factory: Callable[[ChainSettings], ContractInterface],
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._client: ContractInterface | None = None
        self._token_decimals: int | None = None
        self._state = WalletState(token_address=settings.token_address)

    @property
    def state(self) -> WalletState:
        return self._state

    @property
    def client(self) -> ContractInterface | None:
        """The signer-backed contract client, or None when disconnected."""
        return self._client

    @property
    def token_address(self) -> str:
        return self._settings.token_address

    @property
    def supported_chain_ids(self) -> tuple[int, int]:
        return (self._settings.primary_chain_id, self._settings.secondary_chain_id)

    def is_supported_network(self, chain_id: int | None) -> bool:
        return chain_id is None or chain_id in self.supported_chain_ids

    async def connect(self) -> WalletState:
        """Create the contract client and load the first snapshot."""
        if self._client is not None:
            logger.warning("wallet_already_connected")
            return self._state

        self._client = self._client_factory(self._settings)
        try:
            state = await self.refresh()
        except Exception:
            await self.disconnect()
            raise
        logger.info(
            "wallet_connected",
            address=state.address,
            chain_id=state.chain_id,
        )
        return state

    async def disconnect(self) -> None:
        """Tear down the client and reset to a disconnected snapshot."""
        client = self._client
        self._client = None
        self._token_decimals = None
        self._state = WalletState(token_address=self._settings.token_address)
        if client is not None:
            await client.close()
            logger.info("wallet_disconnected")

    async def token_decimals(self) -> int:
        """Token decimals, fetched once per connection."""
        client = self._require_client()
        if self._token_decimals is None:
            self._token_decimals = await client.token_decimals()
        return self._token_decimals

    async def refresh(self) -> WalletState:
        """Re-read chain id, balances and pool reserves into a new snapshot."""
        client = self._require_client()
        address = client.account_address
        decimals = await self.token_decimals()

        chain_id = await client.chain_id()
        native_wei = await client.get_native_balance(address)
        token_units = await client.token_balance_of(address)
        native_reserve, token_reserve = await client.get_reserves()

        self._state = WalletState(
            is_connected=True,
            address=address,
            chain_id=chain_id,
            native_balance=from_base_units(native_wei, NATIVE_DECIMALS),
            token_balance=from_base_units(token_units, decimals),
            native_reserve=from_base_units(native_reserve, NATIVE_DECIMALS),
            token_reserve=from_base_units(token_reserve, decimals),
            token_address=self._settings.token_address,
        )
        logger.debug(
            "wallet_refreshed",
            chain_id=chain_id,
            native_balance=str(self._state.native_balance),
            token_balance=str(self._state.token_balance),
        )
        return self._state

    def _require_client(self) -> ContractInterface:
        if self._client is None:
            raise WalletStateError("No wallet connected.")
        return self._client
