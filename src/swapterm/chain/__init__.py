"""Chain layer -- contract interface, web3 client and wallet session."""

from swapterm.chain.client import ContractInterface, TransactionHandle
from swapterm.chain.wallet import WalletSession, from_base_units, to_base_units

__all__ = [
    "ContractInterface",
    "TransactionHandle",
    "WalletSession",
    "from_base_units",
    "to_base_units",
]
