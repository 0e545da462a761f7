"""Abstract chain contract interface.

Defines the contract for all chain client implementations. Swap, transfer
and wallet code depends only on this interface, keeping web3-specific
details isolated in the concrete implementation.

All amounts crossing this interface are integers in the asset's smallest
unit (wei for the native coin, token base units for the token).
"""

from abc import ABC, abstractmethod


class TransactionHandle(ABC):
    """A submitted, not yet confirmed transaction."""

    @property
    @abstractmethod
    def tx_hash(self) -> str:
        """Hex transaction hash assigned at submission."""
        ...

    @abstractmethod
    async def wait(self) -> dict:
        """Wait for the transaction to be mined and return its receipt.

        Raises:
            TransactionError: If the transaction reverted or was dropped.
        """
        ...


class ContractInterface(ABC):
    """Abstract base class for the swap/token contract and its provider."""

    @property
    @abstractmethod
    def account_address(self) -> str:
        """Address of the signing account."""
        ...

    @abstractmethod
    async def chain_id(self) -> int:
        """Return the connected network's chain id."""
        ...

    @abstractmethod
    async def get_native_balance(self, address: str) -> int:
        """Return the native coin balance of an address in wei."""
        ...

    @abstractmethod
    async def token_balance_of(self, address: str) -> int:
        """Return the token balance of an address in base units."""
        ...

    @abstractmethod
    async def token_decimals(self) -> int:
        """Return the token's decimals."""
        ...

    @abstractmethod
    async def get_reserves(self) -> tuple[int, int]:
        """Return (native_reserve_wei, token_reserve_base_units) held by the pool."""
        ...

    @abstractmethod
    async def quote_deposit(self, amount: int) -> int:
        """Quote tokens received for depositing ``amount`` wei."""
        ...

    @abstractmethod
    async def quote_withdraw(self, amount: int) -> int:
        """Quote wei received for withdrawing ``amount`` token base units."""
        ...

    @abstractmethod
    async def deposit(self, min_out: int, value: int) -> TransactionHandle:
        """Submit a payable deposit of ``value`` wei, reverting below ``min_out`` tokens."""
        ...

    @abstractmethod
    async def withdraw(self, amount: int, min_out: int) -> TransactionHandle:
        """Submit a withdraw of ``amount`` tokens, reverting below ``min_out`` wei."""
        ...

    @abstractmethod
    async def transfer(self, to: str, amount: int) -> TransactionHandle:
        """Submit a token transfer."""
        ...

    @abstractmethod
    async def resolve_name(self, handle: str) -> str | None:
        """Resolve an address or human-readable name (ENS) to a checksum address.

        Returns None when the handle cannot be resolved.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release provider resources."""
        ...
