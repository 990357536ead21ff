"""Type definitions for splits-evm SDK."""

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .constants import ZERO_ADDRESS


class WaterfallTranche(BaseModel):
    """
    A waterfall tranche: a recipient and the amount it receives before the
    next tranche starts filling.

    Sizes are given in token units (e.g. 1.5 for 1.5 ETH) and converted to
    cumulative on-chain thresholds using the token's decimals. The final
    tranche is the residual tranche: it receives everything above the
    previous threshold, so a size given on it is not stored on-chain.

    Example:
        [
            WaterfallTranche(recipient="0xAlice...", size=100),
            WaterfallTranche(recipient="0xBob..."),  # residual
        ]
    """

    recipient: str
    size: Decimal | None = None

    model_config = {"frozen": True}


class ContractCall(BaseModel):
    """A single call executed by a pass-through wallet's execCalls."""

    to: str
    value: int = 0
    data: str = "0x"

    model_config = {"frozen": True}


class TransactionOverrides(BaseModel):
    """
    Per-call transaction overrides.

    By default, gas is estimated (with a 20% buffer) and the RPC sets gas
    prices. Set max_fee_per_gas for EIP-1559 type 2 transactions or
    gas_price for legacy pricing.

    Example:
        TransactionOverrides(gas_limit=250_000)
        TransactionOverrides(max_fee_per_gas=50_000_000_000)  # 50 gwei max fee
    """

    gas_limit: int | None = None
    """Override gas limit. If None, estimated from the call."""

    max_fee_per_gas: int | None = None
    """EIP-1559 max fee per gas in wei. If set, uses type 2 transactions."""

    max_priority_fee_per_gas: int | None = None
    """EIP-1559 priority fee per gas in wei. Defaults to 1 gwei if max_fee is set."""

    gas_price: int | None = None
    """Legacy gas price in wei. Ignored when max_fee_per_gas is set."""

    nonce: int | None = None
    """Explicit nonce. If None, fetched from the chain."""

    value: int | None = None
    """Wei sent along with the call."""

    model_config = {"frozen": True}


class TransactionRequest(BaseModel):
    """A single contract function call, built fresh per operation."""

    contract_address: str
    abi: list[dict[str, Any]]
    function_name: str
    function_args: tuple[Any, ...] = ()
    chain_id: int
    transaction_overrides: TransactionOverrides = TransactionOverrides()

    model_config = {"frozen": True}


# Result variants, one per TransactionType


class TxHash(BaseModel):
    """Hash of a submitted transaction."""

    kind: Literal["tx_hash"] = "tx_hash"
    tx_hash: str
    chain_id: int

    model_config = {"frozen": True}


class GasEstimate(BaseModel):
    """Estimated gas units for a call."""

    kind: Literal["gas_estimate"] = "gas_estimate"
    gas: int = Field(ge=0)

    model_config = {"frozen": True}


class CallData(BaseModel):
    """Unsigned encoded call for external signing or relay."""

    kind: Literal["call_data"] = "call_data"
    to: str
    data: str

    model_config = {"frozen": True}


TransactionResult = Annotated[Union[TxHash, GasEstimate, CallData], Field(discriminator="kind")]


# Transaction facade results


class EventResult(BaseModel):
    """Raw log of the event emitted by a submitted transaction."""

    event: dict[str, Any]

    model_config = {"frozen": True}


class CreateWaterfallModuleResult(BaseModel):
    """Result of create_waterfall_module."""

    waterfall_module_address: str
    event: dict[str, Any]

    model_config = {"frozen": True}


class CreatePassThroughWalletResult(BaseModel):
    """Result of create_pass_through_wallet."""

    pass_through_wallet_address: str
    event: dict[str, Any]

    model_config = {"frozen": True}


# Read results and metadata


class WaterfallTranches(BaseModel):
    """On-chain tranche layout: thresholds has one fewer entry than recipients."""

    recipients: list[str]
    thresholds: list[int]

    model_config = {"frozen": True}


class WaterfallTrancheMetadata(BaseModel):
    recipient: str
    start_amount: int
    size: int | None = None

    model_config = {"frozen": True}


class WaterfallMetadata(BaseModel):
    """Configuration of a deployed waterfall module."""

    address: str
    token: str
    non_waterfall_recipient: str | None = None
    tranches: list[WaterfallTrancheMetadata]

    model_config = {"frozen": True}


# Operation parameters


class TransactionConfig(BaseModel):
    """Fields shared by every write operation."""

    chain_id: int | None = None
    transaction_overrides: TransactionOverrides = TransactionOverrides()

    model_config = {"frozen": True}


class CreateWaterfallConfig(TransactionConfig):
    """Parameters for create_waterfall_module."""

    token: str
    tranches: list[WaterfallTranche]
    non_waterfall_recipient: str = ZERO_ADDRESS


class WaterfallFundsConfig(TransactionConfig):
    """Parameters for waterfall_funds. use_pull leaves payouts for withdrawal."""

    waterfall_module_address: str
    use_pull: bool = False


class RecoverNonWaterfallFundsConfig(TransactionConfig):
    """Parameters for recover_non_waterfall_funds."""

    waterfall_module_address: str
    token: str
    recipient: str


class WithdrawWaterfallPullFundsConfig(TransactionConfig):
    """Parameters for withdraw_pull_funds."""

    waterfall_module_address: str
    address: str


class CreatePassThroughWalletConfig(TransactionConfig):
    """Parameters for create_pass_through_wallet."""

    owner: str
    pass_through: str
    paused: bool = False


class PassThroughTokensConfig(TransactionConfig):
    pass_through_wallet_address: str
    tokens: list[str]


class SetPassThroughConfig(TransactionConfig):
    pass_through_wallet_address: str
    pass_through: str


class PassThroughWalletPauseConfig(TransactionConfig):
    pass_through_wallet_address: str
    paused: bool


class PassThroughWalletExecCallsConfig(TransactionConfig):
    pass_through_wallet_address: str
    calls: list[ContractCall]
