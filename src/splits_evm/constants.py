"""Contract addresses and chain constants for splits-evm SDK."""

from enum import Enum

from ._exceptions import UnsupportedChainError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Native token (ETH, MATIC, ...) is addressed as the zero address.
NATIVE_TOKEN_DECIMALS = 18


class TransactionType(str, Enum):
    """Execution mode of a transaction builder."""

    TRANSACTION = "transaction"
    GAS_ESTIMATE = "gas_estimate"
    CALL_DATA = "call_data"


ETHEREUM_CHAIN_IDS = [1, 5, 11155111]
POLYGON_CHAIN_IDS = [137, 80001]
OPTIMISM_CHAIN_IDS = [10, 420]
ARBITRUM_CHAIN_IDS = [42161, 421613]
ZORA_CHAIN_IDS = [7777777, 999]
BASE_CHAIN_IDS = [8453, 84531]

WATERFALL_CHAIN_IDS: list[int] = [
    *ETHEREUM_CHAIN_IDS,
    *POLYGON_CHAIN_IDS,
    *OPTIMISM_CHAIN_IDS,
    *ARBITRUM_CHAIN_IDS,
    100,  # Gnosis
    250,  # Fantom
    43114,  # Avalanche
    56,  # BSC
    1313161554,  # Aurora
    *ZORA_CHAIN_IDS,
    *BASE_CHAIN_IDS,
]

PASS_THROUGH_WALLET_CHAIN_IDS: list[int] = [
    *ETHEREUM_CHAIN_IDS,
    *POLYGON_CHAIN_IDS,
    *OPTIMISM_CHAIN_IDS,
    *ARBITRUM_CHAIN_IDS,
    *ZORA_CHAIN_IDS,
    *BASE_CHAIN_IDS,
]

# Factories are deployed at the same address on every supported chain.
# Stored lowercase, checksummed on use.
WATERFALL_MODULE_FACTORY_ADDRESS = "0x4df01754ebd055498c8087b1e9a5c7a9ad19b0f6"
PASS_THROUGH_WALLET_FACTORY_ADDRESS = "0xdc6259e13ec0621e6f19026b2e49d846525548ed"

# Keys for SplitsClientConfig.factory_addresses overrides
WATERFALL_FACTORY = "waterfall"
PASS_THROUGH_WALLET_FACTORY = "pass_through_wallet"


def get_waterfall_factory_address(chain_id: int) -> str:
    """Get the WaterfallModuleFactory address for a given chain ID."""
    if chain_id not in WATERFALL_CHAIN_IDS:
        raise UnsupportedChainError(chain_id, WATERFALL_CHAIN_IDS)
    return WATERFALL_MODULE_FACTORY_ADDRESS


def get_pass_through_wallet_factory_address(chain_id: int) -> str:
    """Get the PassThroughWalletFactory address for a given chain ID."""
    if chain_id not in PASS_THROUGH_WALLET_CHAIN_IDS:
        raise UnsupportedChainError(chain_id, PASS_THROUGH_WALLET_CHAIN_IDS)
    return PASS_THROUGH_WALLET_FACTORY_ADDRESS
