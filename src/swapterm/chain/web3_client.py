"""Contract client implementation via web3.py async.

Wraps AsyncWeb3 with a local eth-account signer. The swap contract is also
the ERC20 token, so one contract object serves quotes, swaps, transfers
and balance reads. Pool reserves are the contract's own native and token
balances.
"""

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from swapterm.chain.client import ContractInterface, TransactionHandle
from swapterm.config import ChainSettings
from swapterm.exceptions import TransactionError
from swapterm.logging import get_logger

logger = get_logger(__name__)


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[str], mutability: str) -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


# Minimal ABI: ERC20 reads + transfer, and the pool's quote/deposit/withdraw
TOKEN_ABI = [
    _fn("balanceOf", [("owner", "address")], ["uint256"], "view"),
    _fn("decimals", [], ["uint8"], "view"),
    _fn("transfer", [("to", "address"), ("amount", "uint256")], ["bool"], "nonpayable"),
    _fn("quoteDeposit", [("amount", "uint256")], ["uint256"], "view"),
    _fn("quoteWithdraw", [("amount", "uint256")], ["uint256"], "view"),
    _fn("deposit", [("minOut", "uint256")], [], "payable"),
    _fn("withdraw", [("amount", "uint256"), ("minOut", "uint256")], [], "nonpayable"),
]

_RECEIPT_TIMEOUT_SECONDS = 180


class Web3TransactionHandle(TransactionHandle):
    """Pending transaction tracked by hash."""

    def __init__(self, w3: AsyncWeb3, tx_hash: bytes) -> None:
        self._w3 = w3
        self._tx_hash = tx_hash

    @property
    def tx_hash(self) -> str:
        return Web3.to_hex(self._tx_hash)

    async def wait(self) -> dict:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                self._tx_hash, timeout=_RECEIPT_TIMEOUT_SECONDS
            )
        except TimeExhausted as e:
            raise TransactionError(f"Transaction {self.tx_hash} not mined: {e}") from e

        if receipt.get("status") == 0:
            raise TransactionError(
                f"Transaction {self.tx_hash} reverted", reason="execution reverted"
            )

        logger.info(
            "transaction_mined",
            tx_hash=self.tx_hash,
            block=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )
        return dict(receipt)


class Web3ContractClient(ContractInterface):
    """Concrete contract client using web3.py AsyncWeb3 and a local key."""

    def __init__(self, settings: ChainSettings) -> None:
        self._settings = settings
        self._w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.request_timeout},
            )
        )
        self._account = Account.from_key(settings.private_key.get_secret_value())
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(settings.token_address),
            abi=TOKEN_ABI,
        )

    @property
    def account_address(self) -> str:
        return self._account.address

    async def chain_id(self) -> int:
        return await self._w3.eth.chain_id

    async def get_native_balance(self, address: str) -> int:
        return await self._w3.eth.get_balance(Web3.to_checksum_address(address))

    async def token_balance_of(self, address: str) -> int:
        return await self._contract.functions.balanceOf(
            Web3.to_checksum_address(address)
        ).call()

    async def token_decimals(self) -> int:
        return await self._contract.functions.decimals().call()

    async def get_reserves(self) -> tuple[int, int]:
        pool = self._contract.address
        native = await self._w3.eth.get_balance(pool)
        token = await self._contract.functions.balanceOf(pool).call()
        return native, token

    async def quote_deposit(self, amount: int) -> int:
        return await self._contract.functions.quoteDeposit(amount).call()

    async def quote_withdraw(self, amount: int) -> int:
        return await self._contract.functions.quoteWithdraw(amount).call()

    async def deposit(self, min_out: int, value: int) -> TransactionHandle:
        return await self._send(self._contract.functions.deposit(min_out), value=value)

    async def withdraw(self, amount: int, min_out: int) -> TransactionHandle:
        return await self._send(self._contract.functions.withdraw(amount, min_out))

    async def transfer(self, to: str, amount: int) -> TransactionHandle:
        return await self._send(
            self._contract.functions.transfer(Web3.to_checksum_address(to), amount)
        )

    async def resolve_name(self, handle: str) -> str | None:
        if Web3.is_address(handle):
            return Web3.to_checksum_address(handle)
        try:
            resolved = await self._w3.ens.address(handle)
        except Exception:
            logger.warning("name_resolution_failed", handle=handle, exc_info=True)
            return None
        return resolved

    async def close(self) -> None:
        await self._w3.provider.disconnect()
        logger.info("web3_provider_closed")

    async def _send(self, call, value: int = 0) -> TransactionHandle:
        """Build, sign and broadcast a contract call from the local account.

        Gas estimation happens inside build_transaction, so contract reverts
        surface here with their reason before anything is broadcast.
        """
        sender = self._account.address
        try:
            nonce = await self._w3.eth.get_transaction_count(sender, "pending")
            tx = await call.build_transaction(
                {"from": sender, "value": value, "nonce": nonce}
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            raise TransactionError(str(e), reason=e.message) from e
        except Web3Exception as e:
            raise TransactionError(str(e)) from e

        handle = Web3TransactionHandle(self._w3, tx_hash)
        logger.info("transaction_broadcast", tx_hash=handle.tx_hash, value=value)
        return handle
