"""Pass-through wallet clients: transactions, gas estimates, call data and reads."""

import logging
from types import MappingProxyType

from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContract

from ._exceptions import InvalidAuthError
from .abi import PASS_THROUGH_WALLET_ABI, PASS_THROUGH_WALLET_FACTORY_ABI
from .base import (
    BaseClient,
    OperationPolicy,
    TransactionExecutor,
    decode_event_log,
    expect_call_data,
    expect_gas_estimate,
    expect_tx_hash,
    get_event_topic,
)
from .config import SplitsClientConfig
from .constants import (
    PASS_THROUGH_WALLET_CHAIN_IDS,
    PASS_THROUGH_WALLET_FACTORY,
    TransactionType,
    get_pass_through_wallet_factory_address,
)
from .types import (
    CallData,
    CreatePassThroughWalletConfig,
    CreatePassThroughWalletResult,
    EventResult,
    PassThroughTokensConfig,
    PassThroughWalletExecCallsConfig,
    PassThroughWalletPauseConfig,
    SetPassThroughConfig,
    TransactionRequest,
    TransactionResult,
    TxHash,
)
from .validation import validate_address, validate_calls

logger = logging.getLogger(__name__)

PASS_THROUGH_WALLET_OPERATION_POLICIES = MappingProxyType(
    {
        "create_pass_through_wallet": OperationPolicy(signer="mode"),
        "pass_through_tokens": OperationPolicy(signer="mode"),
        "set_pass_through": OperationPolicy(signer="mode", owner_check=True),
        "set_paused": OperationPolicy(signer="mode", owner_check=True),
        "exec_calls": OperationPolicy(signer="mode", owner_check=True),
    }
)


class PassThroughWalletTransactions:
    """
    Validate pass-through wallet operations, check ownership where the
    operation is owner-gated, and hand the call to the executor.
    """

    def __init__(self, config: SplitsClientConfig, transaction_type: TransactionType) -> None:
        self._base = BaseClient(config, PASS_THROUGH_WALLET_CHAIN_IDS)
        self._executor = TransactionExecutor(transaction_type, self._base)

    @property
    def transaction_type(self) -> TransactionType:
        return self._executor.transaction_type

    async def _check_policy(
        self,
        operation: str,
        pass_through_wallet_address: str | None = None,
        chain_id: int | None = None,
    ) -> None:
        """Apply the operation's signer policy. Owner-gated operations pass the wallet and chain."""
        policy = PASS_THROUGH_WALLET_OPERATION_POLICIES[operation]
        if self._base.check_signer_policy(policy, self._executor.requires_signer):
            await self._require_owner(pass_through_wallet_address, chain_id)

    async def _create_pass_through_wallet_transaction(self, args: CreatePassThroughWalletConfig) -> TransactionResult:
        validate_address(args.owner)
        validate_address(args.pass_through)
        await self._check_policy("create_pass_through_wallet")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=self._base.get_factory_address(
                    PASS_THROUGH_WALLET_FACTORY, get_pass_through_wallet_factory_address(function_chain_id)
                ),
                abi=PASS_THROUGH_WALLET_FACTORY_ABI,
                function_name="createPassThroughWallet",
                function_args=(
                    (
                        AsyncWeb3.to_checksum_address(args.owner),
                        args.paused,
                        AsyncWeb3.to_checksum_address(args.pass_through),
                    ),
                ),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _pass_through_tokens_transaction(self, args: PassThroughTokensConfig) -> TransactionResult:
        validate_address(args.pass_through_wallet_address)
        for token in args.tokens:
            validate_address(token)
        await self._check_policy("pass_through_tokens")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.pass_through_wallet_address),
                abi=PASS_THROUGH_WALLET_ABI,
                function_name="passThroughTokens",
                function_args=([AsyncWeb3.to_checksum_address(token) for token in args.tokens],),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _set_pass_through_transaction(self, args: SetPassThroughConfig) -> TransactionResult:
        validate_address(args.pass_through_wallet_address)
        validate_address(args.pass_through)
        function_chain_id = self._base.get_function_chain_id(args.chain_id)
        await self._check_policy("set_pass_through", args.pass_through_wallet_address, function_chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.pass_through_wallet_address),
                abi=PASS_THROUGH_WALLET_ABI,
                function_name="setPassThrough",
                function_args=(AsyncWeb3.to_checksum_address(args.pass_through),),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _set_paused_transaction(self, args: PassThroughWalletPauseConfig) -> TransactionResult:
        validate_address(args.pass_through_wallet_address)
        function_chain_id = self._base.get_function_chain_id(args.chain_id)
        await self._check_policy("set_paused", args.pass_through_wallet_address, function_chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.pass_through_wallet_address),
                abi=PASS_THROUGH_WALLET_ABI,
                function_name="setPaused",
                function_args=(args.paused,),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _exec_calls_transaction(self, args: PassThroughWalletExecCallsConfig) -> TransactionResult:
        validate_address(args.pass_through_wallet_address)
        validate_calls(args.calls)
        function_chain_id = self._base.get_function_chain_id(args.chain_id)
        await self._check_policy("exec_calls", args.pass_through_wallet_address, function_chain_id)

        formatted_calls = [
            (AsyncWeb3.to_checksum_address(call.to), call.value, HexBytes(call.data)) for call in args.calls
        ]

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.pass_through_wallet_address),
                abi=PASS_THROUGH_WALLET_ABI,
                function_name="execCalls",
                function_args=(formatted_calls,),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _require_owner(self, pass_through_wallet_address: str, chain_id: int) -> None:
        """
        Raises:
            InvalidAuthError: If the signer is not the wallet's on-chain owner
        """
        account = self._base.require_signer()
        contract = self._get_pass_through_wallet_contract(pass_through_wallet_address, chain_id)
        owner = await contract.functions.owner().call()

        if owner.lower() != account.address.lower():
            raise InvalidAuthError(
                "Action only available to the pass through wallet owner. "
                f"Pass through wallet address: {pass_through_wallet_address}, owner: {owner}, "
                f"wallet address: {account.address}"
            )

    def _get_pass_through_wallet_contract(self, pass_through_wallet_address: str, chain_id: int) -> AsyncContract:
        return self._base.get_contract(pass_through_wallet_address, PASS_THROUGH_WALLET_ABI, chain_id)


class PassThroughWalletClient(PassThroughWalletTransactions):
    """
    Pass-through wallet client that submits transactions and decodes their events.

    Sibling clients for the same config are exposed as .estimate_gas and
    .call_data.
    """

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.TRANSACTION)
        self.event_topics = MappingProxyType(
            {
                "create_pass_through_wallet": [
                    get_event_topic(PASS_THROUGH_WALLET_FACTORY_ABI, "CreatePassThroughWallet")
                ],
                "pass_through_tokens": [get_event_topic(PASS_THROUGH_WALLET_ABI, "PassThrough")],
                "set_pass_through": [get_event_topic(PASS_THROUGH_WALLET_ABI, "SetPassThrough")],
                "set_paused": [get_event_topic(PASS_THROUGH_WALLET_ABI, "SetPaused")],
                "exec_calls": [get_event_topic(PASS_THROUGH_WALLET_ABI, "ExecCalls")],
            }
        )
        self.estimate_gas = PassThroughWalletGasEstimates(config)
        self.call_data = PassThroughWalletCallData(config)

    # Write actions

    async def submit_create_pass_through_wallet_transaction(self, args: CreatePassThroughWalletConfig) -> TxHash:
        return expect_tx_hash(await self._create_pass_through_wallet_transaction(args))

    async def create_pass_through_wallet(self, args: CreatePassThroughWalletConfig) -> CreatePassThroughWalletResult:
        tx = await self.submit_create_pass_through_wallet_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["create_pass_through_wallet"])
        log = decode_event_log(PASS_THROUGH_WALLET_FACTORY_ABI, event)
        pass_through_wallet_address = log["args"]["passThroughWallet"]
        logger.info("Created pass through wallet %s (tx=%s)", pass_through_wallet_address, tx.tx_hash)

        return CreatePassThroughWalletResult(pass_through_wallet_address=pass_through_wallet_address, event=dict(event))

    async def submit_pass_through_tokens_transaction(self, args: PassThroughTokensConfig) -> TxHash:
        return expect_tx_hash(await self._pass_through_tokens_transaction(args))

    async def pass_through_tokens(self, args: PassThroughTokensConfig) -> EventResult:
        tx = await self.submit_pass_through_tokens_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["pass_through_tokens"])
        return EventResult(event=dict(event))

    async def submit_set_pass_through_transaction(self, args: SetPassThroughConfig) -> TxHash:
        return expect_tx_hash(await self._set_pass_through_transaction(args))

    async def set_pass_through(self, args: SetPassThroughConfig) -> EventResult:
        tx = await self.submit_set_pass_through_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["set_pass_through"])
        return EventResult(event=dict(event))

    async def submit_set_paused_transaction(self, args: PassThroughWalletPauseConfig) -> TxHash:
        return expect_tx_hash(await self._set_paused_transaction(args))

    async def set_paused(self, args: PassThroughWalletPauseConfig) -> EventResult:
        tx = await self.submit_set_paused_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["set_paused"])
        return EventResult(event=dict(event))

    async def submit_exec_calls_transaction(self, args: PassThroughWalletExecCallsConfig) -> TxHash:
        return expect_tx_hash(await self._exec_calls_transaction(args))

    async def exec_calls(self, args: PassThroughWalletExecCallsConfig) -> EventResult:
        tx = await self.submit_exec_calls_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["exec_calls"])
        return EventResult(event=dict(event))

    # Read actions

    async def get_pass_through(self, pass_through_wallet_address: str, chain_id: int | None = None) -> str:
        """Get the address funds are forwarded to."""
        contract = self._get_read_contract(pass_through_wallet_address, chain_id)
        return await contract.functions.passThrough().call()

    async def get_owner(self, pass_through_wallet_address: str, chain_id: int | None = None) -> str:
        contract = self._get_read_contract(pass_through_wallet_address, chain_id)
        return await contract.functions.owner().call()

    async def get_paused(self, pass_through_wallet_address: str, chain_id: int | None = None) -> bool:
        contract = self._get_read_contract(pass_through_wallet_address, chain_id)
        return await contract.functions.paused().call()

    def _get_read_contract(self, pass_through_wallet_address: str, chain_id: int | None) -> AsyncContract:
        validate_address(pass_through_wallet_address)
        function_chain_id = self._base.get_function_chain_id(chain_id)
        return self._get_pass_through_wallet_contract(pass_through_wallet_address, function_chain_id)


class PassThroughWalletGasEstimates(PassThroughWalletTransactions):
    """Pass-through wallet operations returning estimated gas units."""

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.GAS_ESTIMATE)

    async def create_pass_through_wallet(self, args: CreatePassThroughWalletConfig) -> int:
        return expect_gas_estimate(await self._create_pass_through_wallet_transaction(args))

    async def pass_through_tokens(self, args: PassThroughTokensConfig) -> int:
        return expect_gas_estimate(await self._pass_through_tokens_transaction(args))

    async def set_pass_through(self, args: SetPassThroughConfig) -> int:
        return expect_gas_estimate(await self._set_pass_through_transaction(args))

    async def set_paused(self, args: PassThroughWalletPauseConfig) -> int:
        return expect_gas_estimate(await self._set_paused_transaction(args))

    async def exec_calls(self, args: PassThroughWalletExecCallsConfig) -> int:
        return expect_gas_estimate(await self._exec_calls_transaction(args))


class PassThroughWalletCallData(PassThroughWalletTransactions):
    """Pass-through wallet operations returning unsigned encoded calls."""

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.CALL_DATA)

    async def create_pass_through_wallet(self, args: CreatePassThroughWalletConfig) -> CallData:
        return expect_call_data(await self._create_pass_through_wallet_transaction(args))

    async def pass_through_tokens(self, args: PassThroughTokensConfig) -> CallData:
        return expect_call_data(await self._pass_through_tokens_transaction(args))

    async def set_pass_through(self, args: SetPassThroughConfig) -> CallData:
        return expect_call_data(await self._set_pass_through_transaction(args))

    async def set_paused(self, args: PassThroughWalletPauseConfig) -> CallData:
        return expect_call_data(await self._set_paused_transaction(args))

    async def exec_calls(self, args: PassThroughWalletExecCallsConfig) -> CallData:
        return expect_call_data(await self._exec_calls_transaction(args))
