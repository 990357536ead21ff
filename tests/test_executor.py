"""Tests for the transaction executor and build_tx_params.

The same request runs in every mode; only the executor's TransactionType
decides whether it is submitted, estimated, or encoded.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import decode
from eth_utils import function_abi_to_4byte_selector

from splits_evm import (
    WATERFALL_MODULE_ABI,
    CallData,
    ConfigurationError,
    GasEstimate,
    MissingPublicClientError,
    MissingSignerError,
    SplitsClientConfig,
    TransactionFailedError,
    TransactionOverrides,
    TransactionType,
    TxHash,
    UnexpectedResponseError,
    UnsupportedChainError,
)
from splits_evm.base import (
    DEFAULT_PRIORITY_FEE,
    BaseClient,
    OperationPolicy,
    TransactionExecutor,
    build_tx_params,
    decode_event_log,
    expect_call_data,
    expect_gas_estimate,
    expect_tx_hash,
    get_event_topic,
)
from splits_evm.constants import WATERFALL_CHAIN_IDS
from splits_evm.types import TransactionRequest

from .conftest import (
    ALICE,
    CHAIN_ID,
    MODULE_ADDRESS,
    SIGNER_ADDRESS,
    TX_HASH,
    make_account,
    make_log,
    make_w3,
    mock_contract_function,
)


def _withdraw_request(**overrides) -> TransactionRequest:
    return TransactionRequest(
        contract_address=MODULE_ADDRESS,
        abi=WATERFALL_MODULE_ABI,
        function_name="withdraw",
        function_args=(ALICE,),
        chain_id=CHAIN_ID,
        transaction_overrides=TransactionOverrides(**overrides),
    )


def _executor(transaction_type: TransactionType, **config_kwargs) -> TransactionExecutor:
    config = SplitsClientConfig(chain_id=CHAIN_ID, **config_kwargs)
    return TransactionExecutor(transaction_type, BaseClient(config, WATERFALL_CHAIN_IDS))


class TestBuildTxParams:
    """Tests for transaction parameter assembly."""

    @pytest.mark.asyncio
    async def test_nonce_is_fetched(self) -> None:
        """Should fetch nonce from chain."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=42)

        params = await build_tx_params(mock_w3, "0xSender", 8453)

        mock_w3.eth.get_transaction_count.assert_called_once_with("0xSender")
        assert params["nonce"] == 42
        assert params["chainId"] == 8453
        assert params["from"] == "0xSender"

    @pytest.mark.asyncio
    async def test_explicit_nonce_skips_lookup(self) -> None:
        """An explicit nonce skips get_transaction_count."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=42)

        params = await build_tx_params(mock_w3, "0xSender", 1, TransactionOverrides(nonce=3))

        mock_w3.eth.get_transaction_count.assert_not_called()
        assert params["nonce"] == 3

    @pytest.mark.asyncio
    async def test_gas_limit_overrides_estimation(self) -> None:
        """gas_limit should take precedence over estimate_gas."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)
        mock_contract_call = MagicMock()
        mock_contract_call.estimate_gas = AsyncMock(return_value=100_000)

        params = await build_tx_params(
            mock_w3,
            "0xSender",
            1,
            TransactionOverrides(gas_limit=250_000),
            contract_call=mock_contract_call,
        )

        assert params["gas"] == 250_000
        mock_contract_call.estimate_gas.assert_not_called()

    @pytest.mark.asyncio
    async def test_gas_estimation_with_buffer(self) -> None:
        """Should add 20% buffer to estimated gas and round down."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)
        mock_contract_call = MagicMock()
        mock_contract_call.estimate_gas = AsyncMock(return_value=123_456)

        params = await build_tx_params(mock_w3, "0xSender", 1, contract_call=mock_contract_call)

        # 123_456 * 1.2 = 148147.2
        assert params["gas"] == 148147
        assert isinstance(params["gas"], int)
        mock_contract_call.estimate_gas.assert_called_once_with({"from": "0xSender"})

    @pytest.mark.asyncio
    async def test_value_is_forwarded(self) -> None:
        """Value is set on the params and passed to estimation."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)
        mock_contract_call = MagicMock()
        mock_contract_call.estimate_gas = AsyncMock(return_value=100_000)

        params = await build_tx_params(
            mock_w3, "0xSender", 1, TransactionOverrides(value=5), contract_call=mock_contract_call
        )

        assert params["value"] == 5
        mock_contract_call.estimate_gas.assert_called_once_with({"from": "0xSender", "value": 5})

    @pytest.mark.asyncio
    async def test_eip1559_default_priority_fee(self) -> None:
        """max_fee_per_gas alone gets the default priority fee."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)

        params = await build_tx_params(mock_w3, "0xSender", 1, TransactionOverrides(max_fee_per_gas=50_000_000_000))

        assert params["type"] == "0x2"
        assert params["maxFeePerGas"] == 50_000_000_000
        assert params["maxPriorityFeePerGas"] == DEFAULT_PRIORITY_FEE
        assert "gasPrice" not in params

    @pytest.mark.asyncio
    async def test_eip1559_ignores_gas_price(self) -> None:
        """EIP-1559 fees win over gas_price."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)

        params = await build_tx_params(
            mock_w3,
            "0xSender",
            1,
            TransactionOverrides(max_fee_per_gas=10, max_priority_fee_per_gas=2, gas_price=99),
        )

        assert params["maxPriorityFeePerGas"] == 2
        assert "gasPrice" not in params

    @pytest.mark.asyncio
    async def test_legacy_gas_price(self) -> None:
        """gas_price alone gives a legacy transaction."""
        mock_w3 = MagicMock()
        mock_w3.eth.get_transaction_count = AsyncMock(return_value=0)

        params = await build_tx_params(mock_w3, "0xSender", 1, TransactionOverrides(gas_price=20))

        assert params["gasPrice"] == 20
        assert "type" not in params


class TestExecutorModes:
    """The same request dispatched in each TransactionType."""

    @pytest.mark.asyncio
    async def test_transaction_mode_submits(self) -> None:
        """Simulates, signs and sends; returns the hash without waiting."""
        mock_w3, mock_contract = make_w3()
        contract_call = mock_contract_function(mock_contract, "withdraw")
        account = make_account()
        executor = _executor(TransactionType.TRANSACTION, public_clients={CHAIN_ID: mock_w3}, account=account)

        result = await executor.execute_contract_function(_withdraw_request())

        assert isinstance(result, TxHash)
        assert result.tx_hash == TX_HASH.to_0x_hex()
        assert result.chain_id == CHAIN_ID
        contract_call.call.assert_awaited_once_with({"from": SIGNER_ADDRESS})
        contract_call.build_transaction.assert_awaited_once()
        tx_params = contract_call.build_transaction.call_args[0][0]
        assert tx_params["nonce"] == 7
        assert tx_params["gas"] == 120_000
        account.sign_transaction.assert_called_once()
        mock_w3.eth.send_raw_transaction.assert_awaited_once_with(b"\x02signed")
        mock_w3.eth.wait_for_transaction_receipt.assert_not_called()

    @pytest.mark.asyncio
    async def test_transaction_mode_simulation_revert_propagates(self) -> None:
        """A reverting simulation stops before signing."""
        mock_w3, mock_contract = make_w3()
        contract_call = mock_contract_function(mock_contract, "withdraw")
        contract_call.call = AsyncMock(side_effect=RuntimeError("execution reverted"))
        account = make_account()
        executor = _executor(TransactionType.TRANSACTION, public_clients={CHAIN_ID: mock_w3}, account=account)

        with pytest.raises(RuntimeError, match="execution reverted"):
            await executor.execute_contract_function(_withdraw_request())

        account.sign_transaction.assert_not_called()
        mock_w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_transaction_mode_requires_signer(self) -> None:
        """Transaction mode fails without a signer and sends nothing."""
        mock_w3, mock_contract = make_w3()
        mock_contract_function(mock_contract, "withdraw")
        executor = _executor(TransactionType.TRANSACTION, public_clients={CHAIN_ID: mock_w3})

        with pytest.raises(MissingSignerError):
            await executor.execute_contract_function(_withdraw_request())

        mock_w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_gas_estimate_mode(self) -> None:
        """Returns the node's estimate without sending."""
        mock_w3, mock_contract = make_w3()
        contract_call = mock_contract_function(mock_contract, "withdraw", gas=54_321)
        executor = _executor(
            TransactionType.GAS_ESTIMATE, public_clients={CHAIN_ID: mock_w3}, account=make_account()
        )

        result = await executor.execute_contract_function(_withdraw_request(value=9))

        assert result == GasEstimate(gas=54_321)
        contract_call.estimate_gas.assert_awaited_once_with({"from": SIGNER_ADDRESS, "value": 9})
        mock_w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_gas_estimate_mode_requires_signer_by_default(self) -> None:
        """Gas estimates need a signer unless configured otherwise."""
        mock_w3, mock_contract = make_w3()
        mock_contract_function(mock_contract, "withdraw")
        executor = _executor(TransactionType.GAS_ESTIMATE, public_clients={CHAIN_ID: mock_w3})

        assert executor.requires_signer is True
        with pytest.raises(MissingSignerError):
            await executor.execute_contract_function(_withdraw_request())

    @pytest.mark.asyncio
    async def test_gas_estimate_mode_without_signer_when_configured(self) -> None:
        """Estimates without a sender when the signer is optional."""
        mock_w3, mock_contract = make_w3()
        contract_call = mock_contract_function(mock_contract, "withdraw", gas=21_000)
        executor = _executor(
            TransactionType.GAS_ESTIMATE,
            public_clients={CHAIN_ID: mock_w3},
            gas_estimate_requires_signer=False,
        )

        result = await executor.execute_contract_function(_withdraw_request())

        assert result == GasEstimate(gas=21_000)
        contract_call.estimate_gas.assert_awaited_once_with({})

    @pytest.mark.asyncio
    async def test_gas_estimate_mode_missing_public_client(self) -> None:
        """Gas estimates need a public client for the chain."""
        executor = _executor(TransactionType.GAS_ESTIMATE, account=make_account())

        with pytest.raises(MissingPublicClientError):
            await executor.execute_contract_function(_withdraw_request())

    @pytest.mark.asyncio
    async def test_call_data_mode_is_offline(self) -> None:
        """Encodes without a signer or any public client."""
        executor = _executor(TransactionType.CALL_DATA)

        result = await executor.execute_contract_function(_withdraw_request())

        assert isinstance(result, CallData)
        assert result.to.lower() == MODULE_ADDRESS
        withdraw_abi = next(e for e in WATERFALL_MODULE_ABI if e.get("name") == "withdraw")
        assert result.data[:10] == "0x" + function_abi_to_4byte_selector(withdraw_abi).hex()
        (account,) = decode(["address"], bytes.fromhex(result.data[10:]))
        assert account.lower() == ALICE.lower()

    @pytest.mark.asyncio
    async def test_same_call_in_every_mode(self) -> None:
        """Every mode targets the same contract, function and arguments."""
        request = _withdraw_request()
        targets = []
        for transaction_type in (TransactionType.TRANSACTION, TransactionType.GAS_ESTIMATE):
            mock_w3, mock_contract = make_w3()
            mock_contract_function(mock_contract, "withdraw")
            executor = _executor(transaction_type, public_clients={CHAIN_ID: mock_w3}, account=make_account())

            await executor.execute_contract_function(request)

            contract_kwargs = mock_w3.eth.contract.call_args.kwargs
            targets.append(
                (contract_kwargs["address"], "withdraw", mock_contract.functions.withdraw.call_args.args)
            )

        call_data = await _executor(TransactionType.CALL_DATA).execute_contract_function(request)
        (decoded_account,) = decode(["address"], bytes.fromhex(call_data.data[10:]))
        targets.append((call_data.to, "withdraw", (decoded_account,)))

        assert call_data.data[:10] == "0x" + function_abi_to_4byte_selector(
            next(e for e in WATERFALL_MODULE_ABI if e.get("name") == "withdraw")
        ).hex()
        assert targets[0] == targets[1]
        assert targets[2][0] == targets[0][0]
        assert targets[2][2][0].lower() == targets[0][2][0].lower()

    @pytest.mark.asyncio
    async def test_call_data_is_deterministic(self) -> None:
        """Same request, same encoded payload."""
        executor = _executor(TransactionType.CALL_DATA)

        first = await executor.execute_contract_function(_withdraw_request())
        second = await executor.execute_contract_function(_withdraw_request())

        assert first == second


class TestExpectResult:
    """Tests for result variant unwrapping."""

    def test_matching_variants(self) -> None:
        """Each helper returns its own variant."""
        tx = TxHash(tx_hash="0x01", chain_id=1)
        assert expect_tx_hash(tx) is tx
        assert expect_gas_estimate(GasEstimate(gas=5)) == 5
        call_data = CallData(to=ALICE, data="0x")
        assert expect_call_data(call_data) is call_data

    def test_mismatched_variant(self) -> None:
        """A wrong variant raises UnexpectedResponseError."""
        with pytest.raises(UnexpectedResponseError, match="Expected a transaction hash"):
            expect_tx_hash(GasEstimate(gas=5))
        with pytest.raises(UnexpectedResponseError, match="Expected a gas estimate"):
            expect_gas_estimate(CallData(to=ALICE, data="0x"))
        with pytest.raises(UnexpectedResponseError, match="Expected call data"):
            expect_call_data(TxHash(tx_hash="0x01", chain_id=1))


class TestBaseClient:
    """Tests for chain, signer and event helpers."""

    def test_explicit_chain_wins(self) -> None:
        """An explicit chain id overrides the default."""
        base = BaseClient(SplitsClientConfig(chain_id=1), WATERFALL_CHAIN_IDS)
        assert base.get_function_chain_id(137) == 137
        assert base.get_function_chain_id() == 1

    def test_missing_chain(self) -> None:
        """No explicit or default chain is a configuration error."""
        base = BaseClient(SplitsClientConfig(), WATERFALL_CHAIN_IDS)
        with pytest.raises(ConfigurationError, match="chain_id"):
            base.get_function_chain_id()

    def test_unsupported_chain(self) -> None:
        """Unsupported chains carry the offending chain id."""
        base = BaseClient(SplitsClientConfig(chain_id=1), WATERFALL_CHAIN_IDS)
        with pytest.raises(UnsupportedChainError) as exc_info:
            base.get_function_chain_id(999_999)
        assert exc_info.value.chain_id == 999_999

    def test_factory_address_override(self) -> None:
        """Overrides replace the default factory and are checksummed."""
        base = BaseClient(SplitsClientConfig(factory_addresses={"waterfall": ALICE.lower()}), WATERFALL_CHAIN_IDS)
        assert base.get_factory_address("waterfall", MODULE_ADDRESS) == ALICE
        assert base.get_factory_address("pass_through_wallet", MODULE_ADDRESS).lower() == MODULE_ADDRESS

    def test_signer_policy(self) -> None:
        """Policies combine with the mode to decide signer and owner checks."""
        base = BaseClient(SplitsClientConfig(), WATERFALL_CHAIN_IDS)

        # Mode does not need a signer, policy follows mode
        assert base.check_signer_policy(OperationPolicy(signer="mode", owner_check=True), False) is False
        # Policy always needs one
        with pytest.raises(MissingSignerError):
            base.check_signer_policy(OperationPolicy(signer="always"), False)

        signed = BaseClient(SplitsClientConfig(account=make_account()), WATERFALL_CHAIN_IDS)
        assert signed.check_signer_policy(OperationPolicy(owner_check=True), True) is True
        assert signed.check_signer_policy(OperationPolicy(), True) is False

    @pytest.mark.asyncio
    async def test_get_transaction_event_returns_first_match(self) -> None:
        """Returns the first log whose topic matches."""
        topic = get_event_topic(WATERFALL_MODULE_ABI, "Withdrawal")
        other = make_log(WATERFALL_MODULE_ABI, "ReceiveETH", data=[("uint256", 1)])
        first = make_log(WATERFALL_MODULE_ABI, "Withdrawal", data=[("address", ALICE), ("uint256", 10)])
        second = make_log(WATERFALL_MODULE_ABI, "Withdrawal", data=[("address", ALICE), ("uint256", 20)])
        mock_w3, _ = make_w3(receipt={"status": 1, "logs": [other, first, second]})
        base = BaseClient(SplitsClientConfig(public_clients={CHAIN_ID: mock_w3}), WATERFALL_CHAIN_IDS)
        tx = TxHash(tx_hash=TX_HASH.to_0x_hex(), chain_id=CHAIN_ID)

        event = await base.get_transaction_event(tx, [topic])

        assert event is first
        mock_w3.eth.wait_for_transaction_receipt.assert_awaited_once_with(TX_HASH.to_0x_hex())

    @pytest.mark.asyncio
    async def test_get_transaction_event_no_match(self) -> None:
        """A receipt without a matching log raises TransactionFailedError."""
        topic = get_event_topic(WATERFALL_MODULE_ABI, "Withdrawal")
        other = make_log(WATERFALL_MODULE_ABI, "ReceiveETH", data=[("uint256", 1)])
        mock_w3, _ = make_w3(receipt={"status": 1, "logs": [other]})
        base = BaseClient(SplitsClientConfig(public_clients={CHAIN_ID: mock_w3}), WATERFALL_CHAIN_IDS)

        with pytest.raises(TransactionFailedError) as exc_info:
            await base.get_transaction_event(TxHash(tx_hash="0x01", chain_id=CHAIN_ID), [topic])

        assert exc_info.value.tx_hash == "0x01"

    @pytest.mark.asyncio
    async def test_get_transaction_event_reverted(self) -> None:
        """A failed receipt status raises TransactionFailedError."""
        topic = get_event_topic(WATERFALL_MODULE_ABI, "Withdrawal")
        mock_w3, _ = make_w3(receipt={"status": 0, "logs": []})
        base = BaseClient(SplitsClientConfig(public_clients={CHAIN_ID: mock_w3}), WATERFALL_CHAIN_IDS)

        with pytest.raises(TransactionFailedError, match="reverted"):
            await base.get_transaction_event(TxHash(tx_hash="0x01", chain_id=CHAIN_ID), [topic])


class TestEventDecoding:
    """Tests for event topic lookup and log decoding."""

    def test_unknown_event(self) -> None:
        """Looking up an event not in the ABI raises KeyError."""
        with pytest.raises(KeyError):
            get_event_topic(WATERFALL_MODULE_ABI, "NotAnEvent")

    def test_decode_withdrawal(self) -> None:
        """Decodes event name and arguments."""
        log = make_log(WATERFALL_MODULE_ABI, "Withdrawal", data=[("address", ALICE), ("uint256", 10)])

        decoded = decode_event_log(WATERFALL_MODULE_ABI, log)

        assert decoded["event"] == "Withdrawal"
        assert decoded["args"]["account"] == ALICE
        assert decoded["args"]["amount"] == 10

    def test_decode_unmatched_log(self) -> None:
        """A log with an unknown topic cannot be decoded."""
        log = make_log(WATERFALL_MODULE_ABI, "Withdrawal", data=[("address", ALICE), ("uint256", 10)])
        log["topics"] = [b"\x00" * 32]

        with pytest.raises(KeyError):
            decode_event_log(WATERFALL_MODULE_ABI, log)
