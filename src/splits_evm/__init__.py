# Suppress websockets deprecation warning from web3.py (ethereum/web3.py#3530)
# web3.py unconditionally imports LegacyWebSocketProvider even for HTTP-only usage.
# This will be fixed in web3.py v8. Remove this filter after upgrading.
import warnings

warnings.filterwarnings(
    "ignore",
    message="websockets.legacy is deprecated",
    category=DeprecationWarning,
    module=r"websockets\.legacy",
)

"""
splits-evm SDK

Async clients for waterfall modules and pass-through wallets on EVM chains.
Every write operation is available in three modes: submit a transaction,
estimate its gas, or encode unsigned call data.

Usage:
    import asyncio
    from splits_evm import CreateWaterfallConfig, SplitsClient, WaterfallTranche, ZERO_ADDRESS

    async def main():
        async with SplitsClient(rpc_url="https://mainnet.base.org", private_key="0x...", chain_id=8453) as client:
            args = CreateWaterfallConfig(
                token=ZERO_ADDRESS,
                tranches=[
                    WaterfallTranche(recipient="0xAlice...", size=1),
                    WaterfallTranche(recipient="0xBob..."),
                ],
            )

            gas = await client.waterfall.estimate_gas.create_waterfall_module(args)
            result = await client.waterfall.create_waterfall_module(args)

    asyncio.run(main())

Call data only (no signer, no network):
    from splits_evm import SplitsClientConfig, WaterfallCallData

    call_data = WaterfallCallData(SplitsClientConfig(chain_id=1))
    encoded = await call_data.create_waterfall_module(args)
    # encoded.to, encoded.data
"""

from ._exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    InvalidAuthError,
    MissingDataClientError,
    MissingPublicClientError,
    MissingSignerError,
    SplitsError,
    TransactionFailedError,
    UnexpectedResponseError,
    UnsupportedChainError,
)
from ._version import __version__

# ABIs (for advanced usage)
from .abi import (
    PASS_THROUGH_WALLET_ABI,
    PASS_THROUGH_WALLET_FACTORY_ABI,
    WATERFALL_FACTORY_ABI,
    WATERFALL_MODULE_ABI,
)

# Client and configuration
from .client import SplitsClient
from .config import SplitsClientConfig

# Constants
from .constants import (
    PASS_THROUGH_WALLET_CHAIN_IDS,
    WATERFALL_CHAIN_IDS,
    ZERO_ADDRESS,
    TransactionType,
    get_pass_through_wallet_factory_address,
    get_waterfall_factory_address,
)
from .data_client import OnChainWaterfallDataClient, WaterfallDataClient

# Module family clients
from .pass_through_wallet import (
    PassThroughWalletCallData,
    PassThroughWalletClient,
    PassThroughWalletGasEstimates,
)

# Types
from .types import (
    CallData,
    ContractCall,
    CreatePassThroughWalletConfig,
    CreatePassThroughWalletResult,
    CreateWaterfallConfig,
    CreateWaterfallModuleResult,
    EventResult,
    GasEstimate,
    PassThroughTokensConfig,
    PassThroughWalletExecCallsConfig,
    PassThroughWalletPauseConfig,
    RecoverNonWaterfallFundsConfig,
    SetPassThroughConfig,
    TransactionOverrides,
    TxHash,
    WaterfallFundsConfig,
    WaterfallMetadata,
    WaterfallTranche,
    WaterfallTrancheMetadata,
    WaterfallTranches,
    WithdrawWaterfallPullFundsConfig,
)
from .waterfall import WaterfallCallData, WaterfallClient, WaterfallGasEstimates

__all__ = [
    # Version
    "__version__",
    # Clients
    "SplitsClient",
    "SplitsClientConfig",
    "WaterfallClient",
    "WaterfallGasEstimates",
    "WaterfallCallData",
    "PassThroughWalletClient",
    "PassThroughWalletGasEstimates",
    "PassThroughWalletCallData",
    "WaterfallDataClient",
    "OnChainWaterfallDataClient",
    # Types
    "WaterfallTranche",
    "ContractCall",
    "TransactionOverrides",
    "TxHash",
    "GasEstimate",
    "CallData",
    "EventResult",
    "CreateWaterfallModuleResult",
    "CreatePassThroughWalletResult",
    "WaterfallTranches",
    "WaterfallTrancheMetadata",
    "WaterfallMetadata",
    "CreateWaterfallConfig",
    "WaterfallFundsConfig",
    "RecoverNonWaterfallFundsConfig",
    "WithdrawWaterfallPullFundsConfig",
    "CreatePassThroughWalletConfig",
    "PassThroughTokensConfig",
    "SetPassThroughConfig",
    "PassThroughWalletPauseConfig",
    "PassThroughWalletExecCallsConfig",
    # Constants
    "ZERO_ADDRESS",
    "TransactionType",
    "WATERFALL_CHAIN_IDS",
    "PASS_THROUGH_WALLET_CHAIN_IDS",
    "get_waterfall_factory_address",
    "get_pass_through_wallet_factory_address",
    # ABIs
    "WATERFALL_FACTORY_ABI",
    "WATERFALL_MODULE_ABI",
    "PASS_THROUGH_WALLET_FACTORY_ABI",
    "PASS_THROUGH_WALLET_ABI",
    # Exceptions
    "SplitsError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidAuthError",
    "UnsupportedChainError",
    "MissingSignerError",
    "MissingPublicClientError",
    "MissingDataClientError",
    "TransactionFailedError",
    "UnexpectedResponseError",
]
