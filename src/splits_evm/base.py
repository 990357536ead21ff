"""Shared transaction machinery for waterfall and pass-through wallet clients."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from eth_utils import event_abi_to_log_topic
from web3 import AsyncWeb3, Web3
from web3.contract.async_contract import AsyncContract, AsyncContractFunction
from web3.types import EventData, LogReceipt

from ._exceptions import (
    ConfigurationError,
    MissingDataClientError,
    MissingPublicClientError,
    MissingSignerError,
    TransactionFailedError,
    UnexpectedResponseError,
    UnsupportedChainError,
)
from .config import SplitsClientConfig
from .constants import TransactionType
from .data_client import WaterfallDataClient
from .types import (
    CallData,
    GasEstimate,
    TransactionOverrides,
    TransactionRequest,
    TransactionResult,
    TxHash,
)

logger = logging.getLogger(__name__)

# Type alias for transaction params
TxParams = dict[str, int | str]

DEFAULT_PRIORITY_FEE = 1_000_000_000  # 1 gwei
GAS_ESTIMATE_BUFFER = 1.2

# Encoding calls and decoding logs never touch the provider.
_OFFLINE_WEB3 = Web3()


@dataclass(frozen=True)
class OperationPolicy:
    """
    Signer requirements of a single builder operation.

    signer="mode" requires a signer only when the client's mode does;
    signer="always" requires one in every mode. owner_check runs the
    on-chain owner comparison whenever a signer is required by the mode.
    """

    signer: Literal["mode", "always"] = "mode"
    owner_check: bool = False


def get_event_topic(abi: Sequence[dict[str, Any]], event_name: str) -> bytes:
    """Compute the topic signature of a named event in an ABI."""
    for entry in abi:
        if entry.get("type") == "event" and entry.get("name") == event_name:
            return event_abi_to_log_topic(entry)  # type: ignore[arg-type]
    raise KeyError(f"Event {event_name} not found in ABI")


def decode_event_log(abi: Sequence[dict[str, Any]], log: LogReceipt) -> EventData:
    """
    Decode a log against the event in abi whose topic matches it.

    Raises:
        KeyError: If no event in abi matches the log's first topic
    """
    topics = log["topics"]
    if not topics:
        raise KeyError("Log has no topics")

    contract = _OFFLINE_WEB3.eth.contract(abi=list(abi))
    for entry in abi:
        if entry.get("type") != "event":
            continue
        if event_abi_to_log_topic(entry) == topics[0]:  # type: ignore[arg-type]
            return getattr(contract.events, entry["name"])().process_log(log)
    raise KeyError(f"No event in ABI matches topic {Web3.to_hex(topics[0])}")


async def build_tx_params(
    w3: AsyncWeb3,
    sender: ChecksumAddress | str,
    chain_id: int,
    overrides: TransactionOverrides | None = None,
    contract_call: AsyncContractFunction | None = None,
) -> TxParams:
    """
    Build transaction parameters from overrides.

    Handles:
    - Explicit gas limit, or estimation (with 20% buffer) from contract_call
    - EIP-1559 type 2 transactions when max_fee_per_gas is set
    - Legacy gas price otherwise, when given

    Args:
        w3: AsyncWeb3 instance
        sender: Sender address
        chain_id: Chain ID
        overrides: Optional transaction overrides
        contract_call: Contract function call used for gas estimation

    Returns:
        Transaction parameters dict
    """
    opts = overrides or TransactionOverrides()

    if opts.nonce is not None:
        nonce = opts.nonce
    else:
        nonce = await w3.eth.get_transaction_count(sender)  # type: ignore[arg-type]

    tx_params: TxParams = {
        "from": sender,
        "nonce": nonce,
        "chainId": chain_id,
    }

    if opts.value is not None:
        tx_params["value"] = opts.value

    # Determine gas limit
    if opts.gas_limit is not None:
        tx_params["gas"] = opts.gas_limit
    elif contract_call is not None:
        estimate_params: dict[str, Any] = {"from": sender}
        if opts.value is not None:
            estimate_params["value"] = opts.value
        estimated = await contract_call.estimate_gas(estimate_params)  # type: ignore[arg-type]
        tx_params["gas"] = int(estimated * GAS_ESTIMATE_BUFFER)

    # EIP-1559 or legacy
    if opts.max_fee_per_gas is not None:
        tx_params["type"] = "0x2"
        tx_params["maxFeePerGas"] = opts.max_fee_per_gas
        tx_params["maxPriorityFeePerGas"] = (
            opts.max_priority_fee_per_gas if opts.max_priority_fee_per_gas is not None else DEFAULT_PRIORITY_FEE
        )
    elif opts.gas_price is not None:
        tx_params["gasPrice"] = opts.gas_price

    return tx_params


class BaseClient:
    """
    Capabilities shared by every builder and facade of a module family:
    chain resolution, endpoint and signer lookup, and event retrieval.
    """

    def __init__(self, config: SplitsClientConfig, supported_chain_ids: Sequence[int]) -> None:
        self.config = config
        self.supported_chain_ids = tuple(supported_chain_ids)

    @property
    def account(self) -> LocalAccount | None:
        return self.config.account

    def get_function_chain_id(self, chain_id: int | None = None) -> int:
        """
        Resolve the chain for a call: explicit argument, else the configured default.

        Raises:
            ConfigurationError: If neither is available
            UnsupportedChainError: If the chain is outside the supported set
        """
        function_chain_id = chain_id if chain_id is not None else self.config.chain_id
        if function_chain_id is None:
            raise ConfigurationError("Must specify chain_id (no default chain configured)")
        if function_chain_id not in self.supported_chain_ids:
            raise UnsupportedChainError(function_chain_id, self.supported_chain_ids)
        return function_chain_id

    def get_public_client(self, chain_id: int) -> AsyncWeb3:
        w3 = self.config.public_clients.get(chain_id)
        if w3 is None:
            raise MissingPublicClientError(chain_id)
        return w3

    def get_contract(self, address: str, abi: list[dict[str, Any]], chain_id: int) -> AsyncContract:
        """Open a read-only contract handle on the chain's public client."""
        w3 = self.get_public_client(chain_id)
        return w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    def get_factory_address(self, family: str, default: str) -> ChecksumAddress:
        return Web3.to_checksum_address(self.config.factory_addresses.get(family, default))

    def require_signer(self) -> LocalAccount:
        if self.config.account is None:
            raise MissingSignerError("A signer account is required for this action")
        return self.config.account

    def require_data_client(self) -> WaterfallDataClient:
        if self.config.data_client is None:
            raise MissingDataClientError("A data client is required for this action")
        return self.config.data_client

    def check_signer_policy(self, policy: OperationPolicy, mode_requires_signer: bool) -> bool:
        """
        Apply an operation's signer policy.

        Returns:
            Whether the owner check should run for this call
        """
        if policy.signer == "always" or mode_requires_signer:
            self.require_signer()
        return policy.owner_check and mode_requires_signer

    async def get_transaction_events(
        self,
        tx: TxHash,
        event_topics: Sequence[bytes],
    ) -> list[LogReceipt]:
        """
        Wait for a transaction receipt and return logs matching event_topics.

        Raises:
            TransactionFailedError: If the transaction did not succeed
        """
        w3 = self.get_public_client(tx.chain_id)
        receipt = await w3.eth.wait_for_transaction_receipt(tx.tx_hash)  # type: ignore[arg-type]
        if receipt["status"] != 1:
            raise TransactionFailedError(f"Transaction {tx.tx_hash} reverted", tx_hash=tx.tx_hash)

        return [log for log in receipt["logs"] if log["topics"] and log["topics"][0] in event_topics]

    async def get_transaction_event(self, tx: TxHash, event_topics: Sequence[bytes]) -> LogReceipt:
        """
        Return the first log matching event_topics.

        Raises:
            TransactionFailedError: If no matching log was emitted
        """
        events = await self.get_transaction_events(tx, event_topics)
        if not events:
            logger.warning("No matching event in receipt for tx=%s", tx.tx_hash)
            raise TransactionFailedError(f"No matching event found for transaction {tx.tx_hash}", tx_hash=tx.tx_hash)
        return events[0]


class TransactionExecutor:
    """
    Run a contract call in one fixed mode.

    - TRANSACTION: simulate, sign, submit; returns TxHash without waiting
    - GAS_ESTIMATE: estimate; returns GasEstimate
    - CALL_DATA: encode offline; returns CallData
    """

    def __init__(self, transaction_type: TransactionType, base: BaseClient) -> None:
        self.transaction_type = transaction_type
        self._base = base
        if transaction_type == TransactionType.TRANSACTION:
            self.requires_signer = True
        elif transaction_type == TransactionType.GAS_ESTIMATE:
            self.requires_signer = base.config.gas_estimate_requires_signer
        else:
            self.requires_signer = False

    async def execute_contract_function(self, request: TransactionRequest) -> TransactionResult:
        """
        Execute request according to the configured mode.

        Transport and contract errors from web3 propagate unchanged.

        Raises:
            MissingSignerError: If the mode requires a signer and none is configured
            MissingPublicClientError: If the chain has no read endpoint (not CALL_DATA)
        """
        logger.debug(
            "Executing %s.%s on chain %s (mode=%s)",
            request.contract_address,
            request.function_name,
            request.chain_id,
            self.transaction_type.value,
        )

        if self.transaction_type == TransactionType.CALL_DATA:
            return self._encode_call_data(request)

        if self.requires_signer:
            self._base.require_signer()

        w3 = self._base.get_public_client(request.chain_id)
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(request.contract_address),
            abi=request.abi,
        )
        contract_call = getattr(contract.functions, request.function_name)(*request.function_args)

        if self.transaction_type == TransactionType.GAS_ESTIMATE:
            return await self._estimate_gas(contract_call, request.transaction_overrides)
        return await self._submit(w3, contract_call, request)

    def _encode_call_data(self, request: TransactionRequest) -> CallData:
        address = Web3.to_checksum_address(request.contract_address)
        contract = _OFFLINE_WEB3.eth.contract(address=address, abi=request.abi)
        data = contract.encode_abi(request.function_name, args=list(request.function_args))
        return CallData(to=address, data=data)

    async def _estimate_gas(
        self,
        contract_call: AsyncContractFunction,
        overrides: TransactionOverrides,
    ) -> GasEstimate:
        params: dict[str, Any] = {}
        account = self._base.account
        if account is not None:
            params["from"] = account.address
        if overrides.value is not None:
            params["value"] = overrides.value

        gas = await contract_call.estimate_gas(params)  # type: ignore[arg-type]
        return GasEstimate(gas=gas)

    async def _submit(
        self,
        w3: AsyncWeb3,
        contract_call: AsyncContractFunction,
        request: TransactionRequest,
    ) -> TxHash:
        account = self._base.require_signer()
        overrides = request.transaction_overrides

        # Simulate first so reverts surface before signing
        simulate_params: dict[str, Any] = {"from": account.address}
        if overrides.value is not None:
            simulate_params["value"] = overrides.value
        await contract_call.call(simulate_params)  # type: ignore[arg-type]

        tx_params = await build_tx_params(
            w3,
            account.address,
            request.chain_id,
            overrides,
            contract_call=contract_call,
        )
        tx = await contract_call.build_transaction(tx_params)  # type: ignore[arg-type]

        signed = account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = tx_hash.to_0x_hex()
        logger.info("Transaction sent for %s hash=%s chain=%s", request.function_name, tx_hex, request.chain_id)

        return TxHash(tx_hash=tx_hex, chain_id=request.chain_id)


def expect_tx_hash(result: TransactionResult) -> TxHash:
    if not isinstance(result, TxHash):
        raise UnexpectedResponseError(f"Expected a transaction hash, got {type(result).__name__}")
    return result


def expect_gas_estimate(result: TransactionResult) -> int:
    if not isinstance(result, GasEstimate):
        raise UnexpectedResponseError(f"Expected a gas estimate, got {type(result).__name__}")
    return result.gas


def expect_call_data(result: TransactionResult) -> CallData:
    if not isinstance(result, CallData):
        raise UnexpectedResponseError(f"Expected call data, got {type(result).__name__}")
    return result
