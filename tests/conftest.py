"""Pytest configuration and shared mocks for splits-evm SDK tests."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import encode
from eth_utils import event_abi_to_log_topic
from hexbytes import HexBytes

from splits_evm import SplitsClientConfig

# Anvil's pre-funded test accounts (same as Hardhat/Foundry)
# Private keys are well-known - DO NOT use on mainnet
ANVIL_ACCOUNTS = [
    {
        "address": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        "private_key": "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    },
    {
        "address": "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        "private_key": "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    },
    {
        "address": "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        "private_key": "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    },
]

SIGNER_ADDRESS = ANVIL_ACCOUNTS[0]["address"]
ALICE = ANVIL_ACCOUNTS[1]["address"]
BOB = ANVIL_ACCOUNTS[2]["address"]

# Lowercase addresses skip checksum validation
MODULE_ADDRESS = "0x" + "aa" * 20
WALLET_ADDRESS = "0x" + "bb" * 20
TOKEN_ADDRESS = "0x" + "cc" * 20
OTHER_TOKEN_ADDRESS = "0x" + "dd" * 20

TX_HASH = HexBytes("0x" + "ab" * 32)
CHAIN_ID = 1


def make_account(address: str = SIGNER_ADDRESS) -> MagicMock:
    """Mock LocalAccount that signs to a fixed payload."""
    account = MagicMock()
    account.address = address
    account.sign_transaction.return_value.raw_transaction = b"\x02signed"
    return account


def make_w3(receipt: dict[str, Any] | None = None) -> tuple[MagicMock, MagicMock]:
    """
    Mock AsyncWeb3 whose eth.contract always returns the same mock contract.

    Returns:
        (mock_w3, mock_contract)
    """
    mock_w3 = MagicMock()
    mock_contract = MagicMock()
    mock_w3.eth.contract.return_value = mock_contract
    mock_w3.eth.get_transaction_count = AsyncMock(return_value=7)
    mock_w3.eth.send_raw_transaction = AsyncMock(return_value=TX_HASH)
    mock_w3.eth.wait_for_transaction_receipt = AsyncMock(
        return_value=receipt if receipt is not None else {"status": 1, "logs": []}
    )
    return mock_w3, mock_contract


def mock_contract_function(mock_contract: MagicMock, function_name: str, gas: int = 100_000) -> MagicMock:
    """Install a mock bound contract function with call/estimate_gas/build_transaction."""
    contract_call = MagicMock()
    contract_call.call = AsyncMock(return_value=None)
    contract_call.estimate_gas = AsyncMock(return_value=gas)
    contract_call.build_transaction = AsyncMock(return_value={"to": MODULE_ADDRESS, "data": "0x", "gas": gas})
    getattr(mock_contract.functions, function_name).return_value = contract_call
    return contract_call


def make_log(
    abi: list[dict[str, Any]],
    event_name: str,
    indexed: list[tuple[str, Any]] | None = None,
    data: list[tuple[str, Any]] | None = None,
    address: str = MODULE_ADDRESS,
) -> dict[str, Any]:
    """Build a raw receipt log for event_name with ABI-encoded topics and data."""
    entry = next(e for e in abi if e.get("type") == "event" and e.get("name") == event_name)
    topics = [HexBytes(event_abi_to_log_topic(entry))]
    for type_str, value in indexed or []:
        topics.append(HexBytes(encode([type_str], [value])))

    data = data or []
    return {
        "address": address,
        "blockHash": HexBytes("0x" + "11" * 32),
        "blockNumber": 100,
        "transactionHash": TX_HASH,
        "transactionIndex": 0,
        "logIndex": 0,
        "removed": False,
        "topics": topics,
        "data": HexBytes(encode([t for t, _ in data], [v for _, v in data])),
    }


@pytest.fixture
def signer() -> MagicMock:
    return make_account()


@pytest.fixture
def offline_config() -> SplitsClientConfig:
    """Config with a default chain but no endpoints and no signer."""
    return SplitsClientConfig(chain_id=CHAIN_ID)
