"""Waterfall metadata lookups used by fund-recovery validation."""

import logging
from collections.abc import Mapping
from typing import Protocol

from web3 import AsyncWeb3

from ._exceptions import MissingPublicClientError
from .abi import WATERFALL_MODULE_ABI
from .constants import ZERO_ADDRESS
from .types import WaterfallMetadata, WaterfallTrancheMetadata

logger = logging.getLogger(__name__)


class WaterfallDataClient(Protocol):
    """Point lookups of a deployed waterfall module's configuration."""

    async def get_waterfall_metadata(
        self,
        *,
        chain_id: int,
        waterfall_module_address: str,
    ) -> WaterfallMetadata: ...


class OnChainWaterfallDataClient:
    """
    WaterfallDataClient backed by direct contract reads.

    Example:
        >>> data_client = OnChainWaterfallDataClient({1: w3})
        >>> metadata = await data_client.get_waterfall_metadata(
        ...     chain_id=1, waterfall_module_address="0xModule..."
        ... )
    """

    def __init__(self, public_clients: Mapping[int, AsyncWeb3]) -> None:
        self._public_clients = dict(public_clients)

    async def get_waterfall_metadata(
        self,
        *,
        chain_id: int,
        waterfall_module_address: str,
    ) -> WaterfallMetadata:
        w3 = self._public_clients.get(chain_id)
        if w3 is None:
            raise MissingPublicClientError(chain_id)

        address = AsyncWeb3.to_checksum_address(waterfall_module_address)
        contract = w3.eth.contract(address=address, abi=WATERFALL_MODULE_ABI)

        token = await contract.functions.token().call()
        non_waterfall_recipient = await contract.functions.nonWaterfallRecipient().call()
        recipients, thresholds = await contract.functions.getTranches().call()
        logger.debug("Loaded waterfall metadata for %s on chain %s", address, chain_id)

        tranches = []
        start_amount = 0
        for index, recipient in enumerate(recipients):
            if index < len(thresholds):
                size = thresholds[index] - start_amount
                tranches.append(
                    WaterfallTrancheMetadata(recipient=recipient, start_amount=start_amount, size=size)
                )
                start_amount = thresholds[index]
            else:
                tranches.append(WaterfallTrancheMetadata(recipient=recipient, start_amount=start_amount))

        return WaterfallMetadata(
            address=address,
            token=token,
            non_waterfall_recipient=None if non_waterfall_recipient == ZERO_ADDRESS else non_waterfall_recipient,
            tranches=tranches,
        )
