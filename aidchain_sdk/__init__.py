"""
AidChain SDK - gas-sponsored transactions for the AidChain aid-distribution contracts on Sui.
"""
from .client import AidChainClient
from .config import AidChainConfig, NetworkConfig, RelaySettings
from .exceptions import (
    AidChainError, AmbiguousStatus, ConfigurationError, DecodeError, ExecutionFailure,
    GrantReuseError, LedgerError, MissingFieldsError, ProtocolViolation, RelayRequestError,
    SignatureRejection, SponsorshipError, StorageError, TransportError, UpstreamError,
    ValidationError, WildcardNotPermittedError
)
from .flow import DirectFlowCoordinator, SponsoredFlowCoordinator
from .intent import IntentBuilder, TransactionIntent, to_base_units
from .models import (
    ExecutionOutcome, FailureCategory, OutcomeStatus, SignedSponsorship, SponsorshipGrant,
    SponsorshipRequest
)
from .outcome import classify
from .signer import LocalSigner, PromptingSigner, Signer
from .signing import SignatureCoordinator
from .version import __version__

__all__ = [
    "AidChainClient",
    "AidChainConfig",
    "NetworkConfig",
    "RelaySettings",
    "IntentBuilder",
    "TransactionIntent",
    "to_base_units",
    "SponsoredFlowCoordinator",
    "DirectFlowCoordinator",
    "SignatureCoordinator",
    "Signer",
    "LocalSigner",
    "PromptingSigner",
    "SponsorshipRequest",
    "SponsorshipGrant",
    "SignedSponsorship",
    "ExecutionOutcome",
    "OutcomeStatus",
    "FailureCategory",
    "classify",
    "AidChainError",
    "ValidationError",
    "ConfigurationError",
    "RelayRequestError",
    "MissingFieldsError",
    "WildcardNotPermittedError",
    "TransportError",
    "UpstreamError",
    "SponsorshipError",
    "ExecutionFailure",
    "AmbiguousStatus",
    "SignatureRejection",
    "GrantReuseError",
    "ProtocolViolation",
    "DecodeError",
    "LedgerError",
    "StorageError",
    "__version__",
]
