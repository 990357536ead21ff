"""Async high-level client for splits-evm SDK."""

import logging

from ._exceptions import ConfigurationError
from .config import SplitsClientConfig
from .pass_through_wallet import PassThroughWalletClient
from .waterfall import WaterfallClient

logger = logging.getLogger(__name__)


class SplitsClient:
    """
    Entry point bundling the waterfall and pass-through wallet clients.

    Example:
        >>> import asyncio
        >>> from splits_evm import CreateWaterfallConfig, SplitsClient, WaterfallTranche, ZERO_ADDRESS
        >>>
        >>> async def main():
        ...     async with SplitsClient(rpc_url="https://mainnet.base.org", private_key="0x...", chain_id=8453) as client:
        ...         result = await client.waterfall.create_waterfall_module(
        ...             CreateWaterfallConfig(
        ...                 token=ZERO_ADDRESS,
        ...                 tranches=[
        ...                     WaterfallTranche(recipient="0xAlice...", size=1),
        ...                     WaterfallTranche(recipient="0xBob..."),
        ...                 ],
        ...             )
        ...         )
        ...         print(f"Waterfall created at {result.waterfall_module_address}")
        >>>
        >>> asyncio.run(main())
    """

    def __init__(
        self,
        config: SplitsClientConfig | None = None,
        *,
        rpc_url: str | None = None,
        private_key: str | None = None,
        chain_id: int | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Full configuration; takes precedence over the other arguments
            rpc_url: RPC endpoint URL for chain_id
            private_key: Private key for signing transactions (optional)
            chain_id: Chain served by rpc_url

        Falls back to SPLITS_RPC_URL / SPLITS_CHAIN_ID / SPLITS_PRIVATE_KEY
        when neither config nor rpc_url is given.

        Raises:
            ConfigurationError: If no usable configuration can be assembled
        """
        if config is None:
            if rpc_url is not None:
                if chain_id is None:
                    raise ConfigurationError("chain_id is required together with rpc_url")
                config = SplitsClientConfig.from_rpc_urls({chain_id: rpc_url}, private_key, chain_id)
            else:
                config = SplitsClientConfig.from_env()

        self.config = config
        self.waterfall = WaterfallClient(config)
        self.pass_through_wallet = PassThroughWalletClient(config)
        logger.debug(
            "SplitsClient ready (chain=%s, chains=%s, signer=%s)",
            config.chain_id,
            list(config.public_clients),
            config.signer_address,
        )

    @property
    def address(self) -> str | None:
        """Get the signer address, if any."""
        return self.config.signer_address

    async def close(self) -> None:
        """Close the underlying HTTP sessions."""
        for w3 in self.config.public_clients.values():
            await w3.provider.disconnect()

    async def __aenter__(self) -> "SplitsClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager and close sessions."""
        await self.close()
