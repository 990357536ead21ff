"""Input validation helpers, run before any network call."""

from collections.abc import Sequence

from eth_utils import is_checksum_address, is_hex, is_hex_address

from ._exceptions import InvalidArgumentError
from .types import ContractCall, WaterfallTranche


def validate_address(address: str) -> None:
    """
    Check that address is a 0x-prefixed 20-byte hex address.

    Mixed-case input must carry a valid EIP-55 checksum.

    Raises:
        InvalidArgumentError: If the address is malformed
    """
    if not isinstance(address, str) or not address.startswith("0x") or not is_hex_address(address):
        raise InvalidArgumentError(f"Invalid address: {address}")
    body = address[2:]
    if body != body.lower() and body != body.upper() and not is_checksum_address(address):
        raise InvalidArgumentError(f"Invalid address: {address}")


def validate_waterfall_tranches(tranches: Sequence[WaterfallTranche]) -> None:
    """
    Check a tranche list before it is turned into on-chain thresholds.

    Every tranche but the last needs a positive size, which keeps the
    cumulative thresholds strictly increasing. The last tranche is the
    residual tranche: its size is optional, and when given it must also be
    positive.

    Raises:
        InvalidArgumentError: If the list is empty or any tranche is invalid
    """
    if not tranches:
        raise InvalidArgumentError("At least one tranche is required")

    last_index = len(tranches) - 1
    for index, tranche in enumerate(tranches):
        validate_address(tranche.recipient)
        if tranche.size is None:
            if index != last_index:
                raise InvalidArgumentError("Size required for non-residual tranches")
        elif tranche.size <= 0:
            raise InvalidArgumentError(f"Invalid tranche size: {tranche.size}, must be positive")


def validate_tranche_thresholds(thresholds: Sequence[int]) -> None:
    """
    Check that cumulative thresholds are strictly increasing.

    An empty list is valid (single residual tranche).

    Raises:
        InvalidArgumentError: If any threshold is not above the previous one
    """
    previous = 0
    for threshold in thresholds:
        if threshold <= previous:
            raise InvalidArgumentError(
                f"Tranche thresholds must be strictly increasing, got {list(thresholds)}"
            )
        previous = threshold


def validate_calls(calls: Sequence[ContractCall]) -> None:
    for call in calls:
        validate_address(call.to)
        if call.value < 0:
            raise InvalidArgumentError(f"Invalid call value: {call.value}")
        if not is_hex(call.data):
            raise InvalidArgumentError(f"Invalid call data: {call.data}")
