"""Custom exceptions for splits-evm SDK."""

from collections.abc import Sequence


class SplitsError(Exception):
    """Base exception for splits-evm."""


class ConfigurationError(SplitsError):
    """Invalid configuration (missing RPC URL, chain id, etc.)."""


class InvalidArgumentError(SplitsError):
    """Malformed or semantically invalid input, detected before any network call."""


class InvalidAuthError(SplitsError):
    """Signer is not the owner required for the requested action."""


class UnsupportedChainError(SplitsError):
    """Chain ID outside the module family's supported set."""

    def __init__(self, chain_id: int, supported_chain_ids: Sequence[int] = ()) -> None:
        message = f"Chain {chain_id} is not supported"
        if supported_chain_ids:
            message += f" (supported: {', '.join(str(c) for c in supported_chain_ids)})"
        super().__init__(message)
        self.chain_id = chain_id
        self.supported_chain_ids = tuple(supported_chain_ids)


class MissingSignerError(SplitsError):
    """A signing account is required for this action but none is configured."""


class MissingPublicClientError(SplitsError):
    """No read endpoint is configured for the chain."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"No public client configured for chain {chain_id}")
        self.chain_id = chain_id


class MissingDataClientError(SplitsError):
    """A metadata client is required for this action but none is configured."""


class TransactionFailedError(SplitsError):
    """Transaction was submitted but did not produce the expected event."""

    def __init__(self, message: str = "Transaction failed", tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class UnexpectedResponseError(SplitsError):
    """Executor returned a result variant that does not match its mode."""
