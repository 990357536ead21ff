"""Configuration container for splits-evm clients."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3

from ._exceptions import ConfigurationError
from .data_client import OnChainWaterfallDataClient, WaterfallDataClient

RPC_URL_ENV = "SPLITS_RPC_URL"
CHAIN_ID_ENV = "SPLITS_CHAIN_ID"
PRIVATE_KEY_ENV = "SPLITS_PRIVATE_KEY"


@dataclass(frozen=True)
class SplitsClientConfig:
    """
    Chain context shared by every client built from it.

    Attributes:
        chain_id: Default chain for calls that do not pass one
        public_clients: Read endpoints keyed by chain id
        account: Signer for transactions (None for read-only/call-data use)
        data_client: Metadata lookups used by fund recovery
        gas_estimate_requires_signer: Whether gas estimates need a signer
        factory_addresses: Factory address overrides keyed by module family
    """

    chain_id: int | None = None
    public_clients: Mapping[int, AsyncWeb3] = field(default_factory=dict)
    account: LocalAccount | None = None
    data_client: WaterfallDataClient | None = None
    gas_estimate_requires_signer: bool = True
    factory_addresses: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "public_clients", MappingProxyType(dict(self.public_clients)))
        object.__setattr__(self, "factory_addresses", MappingProxyType(dict(self.factory_addresses)))

    @classmethod
    def from_rpc_urls(
        cls,
        rpc_urls: Mapping[int, str],
        private_key: str | None = None,
        chain_id: int | None = None,
        gas_estimate_requires_signer: bool = True,
        factory_addresses: Mapping[str, str] | None = None,
    ) -> SplitsClientConfig:
        """
        Build a config with one AsyncHTTPProvider per chain.

        The on-chain data client is wired in for fund recovery. chain_id
        defaults to the only configured chain when exactly one is given.
        """
        if not rpc_urls:
            raise ConfigurationError("At least one RPC URL is required")

        public_clients = {cid: AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url)) for cid, url in rpc_urls.items()}
        account: LocalAccount | None = Account.from_key(private_key) if private_key else None

        if chain_id is None and len(public_clients) == 1:
            chain_id = next(iter(public_clients))

        return cls(
            chain_id=chain_id,
            public_clients=public_clients,
            account=account,
            data_client=OnChainWaterfallDataClient(public_clients),
            gas_estimate_requires_signer=gas_estimate_requires_signer,
            factory_addresses=factory_addresses or {},
        )

    @classmethod
    def from_env(cls) -> SplitsClientConfig:
        """
        Build a config from SPLITS_RPC_URL, SPLITS_CHAIN_ID and optional
        SPLITS_PRIVATE_KEY.

        Raises:
            ConfigurationError: If the RPC URL or chain id is missing or invalid
        """
        rpc_url = os.environ.get(RPC_URL_ENV)
        if not rpc_url:
            raise ConfigurationError(f"rpc_url required (or set {RPC_URL_ENV})")

        raw_chain_id = os.environ.get(CHAIN_ID_ENV)
        if not raw_chain_id:
            raise ConfigurationError(f"chain_id required (or set {CHAIN_ID_ENV})")
        try:
            chain_id = int(raw_chain_id)
        except ValueError as e:
            raise ConfigurationError(f"{CHAIN_ID_ENV} must be an integer, got {raw_chain_id!r}") from e

        return cls.from_rpc_urls(
            {chain_id: rpc_url},
            private_key=os.environ.get(PRIVATE_KEY_ENV) or None,
            chain_id=chain_id,
        )

    @property
    def signer_address(self) -> str | None:
        return self.account.address if self.account is not None else None
