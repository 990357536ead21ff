"""Waterfall module clients: transactions, gas estimates, call data and reads."""

import logging
from types import MappingProxyType

from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContract

from ._exceptions import InvalidArgumentError
from .abi import WATERFALL_FACTORY_ABI, WATERFALL_MODULE_ABI
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
    WATERFALL_CHAIN_IDS,
    WATERFALL_FACTORY,
    ZERO_ADDRESS,
    TransactionType,
    get_waterfall_factory_address,
)
from .types import (
    CallData,
    CreateWaterfallConfig,
    CreateWaterfallModuleResult,
    EventResult,
    RecoverNonWaterfallFundsConfig,
    TransactionRequest,
    TransactionResult,
    TxHash,
    WaterfallFundsConfig,
    WaterfallTranches,
    WithdrawWaterfallPullFundsConfig,
)
from .utils import get_tranche_recipients_and_thresholds, get_token_decimals
from .validation import validate_address, validate_tranche_thresholds, validate_waterfall_tranches

logger = logging.getLogger(__name__)

WATERFALL_OPERATION_POLICIES = MappingProxyType(
    {
        "create_waterfall_module": OperationPolicy(signer="mode"),
        "waterfall_funds": OperationPolicy(signer="mode"),
        "recover_non_waterfall_funds": OperationPolicy(signer="always"),
        "withdraw_pull_funds": OperationPolicy(signer="always"),
    }
)


class WaterfallTransactions:
    """
    Validate waterfall operations, build the contract call and hand it to
    an executor fixed to one TransactionType.
    """

    def __init__(self, config: SplitsClientConfig, transaction_type: TransactionType) -> None:
        self._base = BaseClient(config, WATERFALL_CHAIN_IDS)
        self._executor = TransactionExecutor(transaction_type, self._base)

    @property
    def transaction_type(self) -> TransactionType:
        return self._executor.transaction_type

    def _check_policy(self, operation: str) -> None:
        self._base.check_signer_policy(WATERFALL_OPERATION_POLICIES[operation], self._executor.requires_signer)

    async def _create_waterfall_module_transaction(self, args: CreateWaterfallConfig) -> TransactionResult:
        validate_address(args.token)
        validate_address(args.non_waterfall_recipient)
        validate_waterfall_tranches(args.tranches)
        self._check_policy("create_waterfall_module")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)
        formatted_token = AsyncWeb3.to_checksum_address(args.token)
        formatted_non_waterfall_recipient = AsyncWeb3.to_checksum_address(args.non_waterfall_recipient)

        # Native token needs no lookup, so call data for it stays offline
        w3 = None if formatted_token == ZERO_ADDRESS else self._base.get_public_client(function_chain_id)
        decimals = await get_token_decimals(w3, formatted_token)
        recipients, thresholds = get_tranche_recipients_and_thresholds(args.tranches, decimals)
        validate_tranche_thresholds(thresholds)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=self._base.get_factory_address(
                    WATERFALL_FACTORY, get_waterfall_factory_address(function_chain_id)
                ),
                abi=WATERFALL_FACTORY_ABI,
                function_name="createWaterfallModule",
                function_args=(formatted_token, formatted_non_waterfall_recipient, recipients, thresholds),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _waterfall_funds_transaction(self, args: WaterfallFundsConfig) -> TransactionResult:
        validate_address(args.waterfall_module_address)
        self._check_policy("waterfall_funds")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.waterfall_module_address),
                abi=WATERFALL_MODULE_ABI,
                function_name="waterfallFundsPull" if args.use_pull else "waterfallFunds",
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _recover_non_waterfall_funds_transaction(
        self, args: RecoverNonWaterfallFundsConfig
    ) -> TransactionResult:
        validate_address(args.waterfall_module_address)
        validate_address(args.token)
        validate_address(args.recipient)
        self._check_policy("recover_non_waterfall_funds")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)

        await self._validate_recover_tokens_waterfall_data(
            waterfall_module_address=args.waterfall_module_address,
            token=args.token,
            recipient=args.recipient,
            chain_id=function_chain_id,
        )

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.waterfall_module_address),
                abi=WATERFALL_MODULE_ABI,
                function_name="recoverNonWaterfallFunds",
                function_args=(
                    AsyncWeb3.to_checksum_address(args.token),
                    AsyncWeb3.to_checksum_address(args.recipient),
                ),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _withdraw_pull_funds_transaction(self, args: WithdrawWaterfallPullFundsConfig) -> TransactionResult:
        validate_address(args.waterfall_module_address)
        validate_address(args.address)
        self._check_policy("withdraw_pull_funds")

        function_chain_id = self._base.get_function_chain_id(args.chain_id)

        return await self._executor.execute_contract_function(
            TransactionRequest(
                contract_address=AsyncWeb3.to_checksum_address(args.waterfall_module_address),
                abi=WATERFALL_MODULE_ABI,
                function_name="withdraw",
                function_args=(AsyncWeb3.to_checksum_address(args.address),),
                chain_id=function_chain_id,
                transaction_overrides=args.transaction_overrides,
            )
        )

    async def _validate_recover_tokens_waterfall_data(
        self,
        *,
        waterfall_module_address: str,
        token: str,
        recipient: str,
        chain_id: int,
    ) -> None:
        """
        Check a recovery request against the module's configuration.

        The token must not be the module's primary token. When the module has
        a non-waterfall recipient the recipient must be it; otherwise the
        recipient must hold one of the tranches.
        """
        data_client = self._base.require_data_client()
        metadata = await data_client.get_waterfall_metadata(
            chain_id=chain_id,
            waterfall_module_address=waterfall_module_address,
        )

        if token.lower() == metadata.token.lower():
            raise InvalidArgumentError(
                "You must call recover tokens with a token other than the given waterfall's primary token. "
                f"Primary token: {metadata.token}, given token: {token}"
            )

        non_waterfall_recipient = metadata.non_waterfall_recipient
        if non_waterfall_recipient and non_waterfall_recipient.lower() != ZERO_ADDRESS:
            if recipient.lower() != non_waterfall_recipient.lower():
                raise InvalidArgumentError(
                    f"The passed in recipient ({recipient}) must match the non waterfall recipient "
                    f"for this module: {non_waterfall_recipient}"
                )
        elif not any(tranche.recipient.lower() == recipient.lower() for tranche in metadata.tranches):
            raise InvalidArgumentError(
                f"You must pass in a valid recipient address for the given waterfall. Address {recipient} "
                f"not found in any tranche for waterfall {waterfall_module_address}."
            )


class WaterfallClient(WaterfallTransactions):
    """
    Waterfall client that submits transactions and decodes their events.

    Sibling clients for the same config are exposed as .estimate_gas and
    .call_data.

    Example:
        >>> waterfall = WaterfallClient(SplitsClientConfig.from_rpc_urls({1: rpc_url}, private_key))
        >>> result = await waterfall.create_waterfall_module(
        ...     CreateWaterfallConfig(
        ...         token=ZERO_ADDRESS,
        ...         tranches=[
        ...             WaterfallTranche(recipient="0xAlice...", size=1),
        ...             WaterfallTranche(recipient="0xBob..."),
        ...         ],
        ...     )
        ... )
        >>> result.waterfall_module_address
    """

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.TRANSACTION)
        self.event_topics = MappingProxyType(
            {
                "create_waterfall_module": [get_event_topic(WATERFALL_FACTORY_ABI, "CreateWaterfallModule")],
                "waterfall_funds": [get_event_topic(WATERFALL_MODULE_ABI, "WaterfallFunds")],
                "recover_non_waterfall_funds": [get_event_topic(WATERFALL_MODULE_ABI, "RecoverNonWaterfallFunds")],
                "withdraw_pull_funds": [get_event_topic(WATERFALL_MODULE_ABI, "Withdrawal")],
            }
        )
        self.estimate_gas = WaterfallGasEstimates(config)
        self.call_data = WaterfallCallData(config)

    # Write actions

    async def submit_create_waterfall_module_transaction(self, args: CreateWaterfallConfig) -> TxHash:
        return expect_tx_hash(await self._create_waterfall_module_transaction(args))

    async def create_waterfall_module(self, args: CreateWaterfallConfig) -> CreateWaterfallModuleResult:
        tx = await self.submit_create_waterfall_module_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["create_waterfall_module"])
        log = decode_event_log(WATERFALL_FACTORY_ABI, event)
        waterfall_module_address = log["args"]["waterfallModule"]
        logger.info("Created waterfall module %s (tx=%s)", waterfall_module_address, tx.tx_hash)

        return CreateWaterfallModuleResult(waterfall_module_address=waterfall_module_address, event=dict(event))

    async def submit_waterfall_funds_transaction(self, args: WaterfallFundsConfig) -> TxHash:
        return expect_tx_hash(await self._waterfall_funds_transaction(args))

    async def waterfall_funds(self, args: WaterfallFundsConfig) -> EventResult:
        tx = await self.submit_waterfall_funds_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["waterfall_funds"])
        return EventResult(event=dict(event))

    async def submit_recover_non_waterfall_funds_transaction(self, args: RecoverNonWaterfallFundsConfig) -> TxHash:
        return expect_tx_hash(await self._recover_non_waterfall_funds_transaction(args))

    async def recover_non_waterfall_funds(self, args: RecoverNonWaterfallFundsConfig) -> EventResult:
        tx = await self.submit_recover_non_waterfall_funds_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["recover_non_waterfall_funds"])
        return EventResult(event=dict(event))

    async def submit_withdraw_pull_funds_transaction(self, args: WithdrawWaterfallPullFundsConfig) -> TxHash:
        return expect_tx_hash(await self._withdraw_pull_funds_transaction(args))

    async def withdraw_pull_funds(self, args: WithdrawWaterfallPullFundsConfig) -> EventResult:
        tx = await self.submit_withdraw_pull_funds_transaction(args)
        event = await self._base.get_transaction_event(tx, self.event_topics["withdraw_pull_funds"])
        return EventResult(event=dict(event))

    # Read actions

    async def get_distributed_funds(self, waterfall_module_address: str, chain_id: int | None = None) -> int:
        """Get the total amount the module has distributed."""
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        return await contract.functions.distributedFunds().call()

    async def get_funds_pending_withdrawal(self, waterfall_module_address: str, chain_id: int | None = None) -> int:
        """Get the amount held for pull-flow recipients."""
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        return await contract.functions.fundsPendingWithdrawal().call()

    async def get_tranches(self, waterfall_module_address: str, chain_id: int | None = None) -> WaterfallTranches:
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        recipients, thresholds = await contract.functions.getTranches().call()
        return WaterfallTranches(recipients=list(recipients), thresholds=list(thresholds))

    async def get_non_waterfall_recipient(self, waterfall_module_address: str, chain_id: int | None = None) -> str:
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        return await contract.functions.nonWaterfallRecipient().call()

    async def get_token(self, waterfall_module_address: str, chain_id: int | None = None) -> str:
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        return await contract.functions.token().call()

    async def get_pull_balance(
        self,
        waterfall_module_address: str,
        address: str,
        chain_id: int | None = None,
    ) -> int:
        """Get the amount a pull-flow recipient can withdraw."""
        validate_address(address)
        contract = self._get_waterfall_contract(waterfall_module_address, chain_id)
        return await contract.functions.getPullBalance(AsyncWeb3.to_checksum_address(address)).call()

    def _get_waterfall_contract(self, waterfall_module_address: str, chain_id: int | None) -> AsyncContract:
        validate_address(waterfall_module_address)
        function_chain_id = self._base.get_function_chain_id(chain_id)
        return self._base.get_contract(waterfall_module_address, WATERFALL_MODULE_ABI, function_chain_id)


class WaterfallGasEstimates(WaterfallTransactions):
    """Waterfall operations returning estimated gas units."""

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.GAS_ESTIMATE)

    async def create_waterfall_module(self, args: CreateWaterfallConfig) -> int:
        return expect_gas_estimate(await self._create_waterfall_module_transaction(args))

    async def waterfall_funds(self, args: WaterfallFundsConfig) -> int:
        return expect_gas_estimate(await self._waterfall_funds_transaction(args))

    async def recover_non_waterfall_funds(self, args: RecoverNonWaterfallFundsConfig) -> int:
        return expect_gas_estimate(await self._recover_non_waterfall_funds_transaction(args))

    async def withdraw_pull_funds(self, args: WithdrawWaterfallPullFundsConfig) -> int:
        return expect_gas_estimate(await self._withdraw_pull_funds_transaction(args))


class WaterfallCallData(WaterfallTransactions):
    """Waterfall operations returning unsigned encoded calls."""

    def __init__(self, config: SplitsClientConfig) -> None:
        super().__init__(config, TransactionType.CALL_DATA)

    async def create_waterfall_module(self, args: CreateWaterfallConfig) -> CallData:
        return expect_call_data(await self._create_waterfall_module_transaction(args))

    async def waterfall_funds(self, args: WaterfallFundsConfig) -> CallData:
        return expect_call_data(await self._waterfall_funds_transaction(args))

    async def recover_non_waterfall_funds(self, args: RecoverNonWaterfallFundsConfig) -> CallData:
        return expect_call_data(await self._recover_non_waterfall_funds_transaction(args))

    async def withdraw_pull_funds(self, args: WithdrawWaterfallPullFundsConfig) -> CallData:
        return expect_call_data(await self._withdraw_pull_funds_transaction(args))
