"""Advisory swap quotes and slippage-adjusted minimum outputs.

A quote is the counter-asset amount the pool would pay for a prospective
swap right now. It is never persisted and never re-validated on submit:
whatever was fetched last feeds the minimum-output computation.
"""

from decimal import Decimal, InvalidOperation

from swapterm.chain.wallet import NATIVE_DECIMALS, WalletSession, from_base_units, to_base_units
from swapterm.logging import get_logger
from swapterm.models import SwapDirection

logger = get_logger(__name__)

_HUNDRED = Decimal("100")
# Slippage is applied with 3 fractional digits of percent precision
_SLIPPAGE_SCALE = 1000


def parse_amount(amount_text: str | None) -> Decimal | None:
    """Parse user amount text to a non-negative Decimal, or None."""
    if amount_text is None:
        return None
    text = amount_text.strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def min_acceptable_output(quote: Decimal, slippage: Decimal) -> Decimal:
    """Lowest counter-asset amount accepted: quote * (100 - slippage) / 100."""
    return quote * (_HUNDRED - slippage) / _HUNDRED


def min_output_base_units(quote_base_units: int, slippage: Decimal) -> int:
    """Same as min_acceptable_output, in integer smallest units, rounded down."""
    keep = int((_HUNDRED - slippage) * _SLIPPAGE_SCALE)
    return quote_base_units * keep // (100 * _SLIPPAGE_SCALE)


class SwapQuoteEngine:
    """Fetches quotes through the wallet session's contract client.

    Args:
        wallet: Wallet session providing the signer-backed client.
    """

    def __init__(self, wallet: WalletSession) -> None:
        self._wallet = wallet

    async def decimals_for(self, direction: SwapDirection) -> tuple[int, int]:
        """Return (input_decimals, output_decimals) for a direction."""
        token_decimals = await self._wallet.token_decimals()
        if direction is SwapDirection.DEPOSIT:
            return NATIVE_DECIMALS, token_decimals
        return token_decimals, NATIVE_DECIMALS

    async def get_quote(self, direction: SwapDirection, amount_text: str | None) -> Decimal | None:
        """Quote the counter-asset amount for swapping ``amount_text``.

        Returns None (never raises) when there is no signer, no token
        reference, no usable amount, or the contract call fails.
        """
        client = self._wallet.client
        if client is None or not self._wallet.token_address:
            return None
        amount = parse_amount(amount_text)
        if amount is None or amount == 0:
            return None

        try:
            in_decimals, out_decimals = await self.decimals_for(direction)
            amount_units = to_base_units(amount, in_decimals)
            if direction is SwapDirection.DEPOSIT:
                quoted = await client.quote_deposit(amount_units)
            else:
                quoted = await client.quote_withdraw(amount_units)
        except Exception:
            logger.warning(
                "quote_fetch_failed",
                direction=direction.value,
                amount=str(amount),
                exc_info=True,
            )
            return None

        quote = from_base_units(quoted, out_decimals)
        logger.debug(
            "quote_fetched",
            direction=direction.value,
            amount=str(amount),
            quote=str(quote),
        )
        return quote
