"""Token amount conversion helpers."""

import logging
from collections.abc import Sequence
from decimal import Decimal

from web3 import AsyncWeb3

from ._exceptions import InvalidArgumentError
from .abi import ERC20_ABI
from .constants import NATIVE_TOKEN_DECIMALS, ZERO_ADDRESS
from .types import WaterfallTranche
from .validation import validate_tranche_thresholds

logger = logging.getLogger(__name__)


async def get_token_decimals(w3: AsyncWeb3 | None, token: str) -> int:
    """
    Get a token's decimals (18 for the native token, no network call).

    Raises:
        InvalidArgumentError: If an ERC20 lookup is needed but w3 is None
    """
    if token.lower() == ZERO_ADDRESS:
        return NATIVE_TOKEN_DECIMALS
    if w3 is None:
        raise InvalidArgumentError(f"Cannot look up decimals for {token} without a public client")

    contract = w3.eth.contract(address=AsyncWeb3.to_checksum_address(token), abi=ERC20_ABI)
    return await contract.functions.decimals().call()


def to_token_units(amount: Decimal | int, decimals: int) -> int:
    """
    Convert a human-readable amount to the token's smallest unit.

    Example:
        >>> to_token_units(Decimal("1.5"), 6)
        1500000
    """
    scaled = Decimal(amount) * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidArgumentError(f"Amount {amount} has more precision than {decimals} decimals")
    return int(scaled)


def get_tranche_recipients_and_thresholds(
    tranches: Sequence[WaterfallTranche],
    decimals: int,
) -> tuple[list[str], list[int]]:
    """
    Split tranches into recipients and cumulative thresholds.

    The residual tranche contributes a recipient but no threshold, so
    thresholds has one fewer entry than recipients. A size given on the
    residual tranche is checked against the running thresholds and then
    dropped, since the residual recipient receives everything above the
    previous threshold.
    """
    recipients: list[str] = []
    thresholds: list[int] = []
    running_total = 0
    for tranche in tranches:
        recipients.append(AsyncWeb3.to_checksum_address(tranche.recipient))
        if tranche.size is not None:
            running_total += to_token_units(tranche.size, decimals)
            thresholds.append(running_total)

    if tranches and tranches[-1].size is not None:
        validate_tranche_thresholds(thresholds)
        residual_cap = thresholds.pop()
        logger.debug(
            "Dropping residual tranche size: %s receives everything above %s, not capped at %s",
            recipients[-1],
            thresholds[-1] if thresholds else 0,
            residual_cap,
        )
    return recipients, thresholds
