"""
Exceptions for the AidChain SDK.
"""
from typing import Any, List, Optional


class AidChainError(Exception):
    """Base exception for all AidChain SDK errors."""
    pass


class ValidationError(AidChainError):
    """Raised when caller input is rejected before any network call is made."""
    pass


class ConfigurationError(AidChainError):
    """Raised when required configuration is missing or malformed."""
    pass


class RelayRequestError(AidChainError):
    """Raised by the relay for malformed client requests (HTTP 400)."""
    pass


class MissingFieldsError(RelayRequestError):
    """Raised when a relay request lacks one or more required fields."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message)


class WildcardNotPermittedError(RelayRequestError):
    """Raised when a permit-all allow-list reaches a relay that forbids it."""
    pass


class TransportError(AidChainError):
    """Raised when the relay or a node cannot be reached before a digest exists."""
    pass


class UpstreamError(AidChainError):
    """
    Raised when an upstream service rejects a request.

    Attributes:
        details: Structured error entries reported by the upstream, if any
    """

    def __init__(self, message: str, details: Optional[List[Any]] = None):
        self.details = list(details or [])
        super().__init__(message)


class SponsorshipError(UpstreamError):
    """Raised when the sponsor provider refuses to fund a transaction."""
    pass


class ExecutionFailure(UpstreamError):
    """
    Raised when a signed transaction fails to execute.

    Attributes:
        category: Failure category assigned by the outcome classifier
        digest: Digest of the failed transaction, when known
    """

    def __init__(
        self,
        message: str,
        details: Optional[List[Any]] = None,
        category: Optional[str] = None,
        digest: Optional[str] = None
    ):
        self.category = category
        self.digest = digest
        super().__init__(message, details)


class AmbiguousStatus(AidChainError):
    """Raised when a transaction was submitted but its result is not yet known."""

    def __init__(self, message: str, digest: str):
        self.digest = digest
        super().__init__(message)


class SignatureRejection(AidChainError):
    """Raised when the signing agent (or its user) declines to sign."""
    pass


class GrantReuseError(AidChainError):
    """Raised when the same sponsorship grant is presented for signing twice."""
    pass


class ProtocolViolation(AidChainError):
    """
    Raised when relay digests disagree with the signed payload.

    This indicates a bug in one of the parties and is never retried.
    """
    pass


class DecodeError(AidChainError):
    """Raised when a ledger object does not have the expected shape."""
    pass


class LedgerError(AidChainError):
    """
    Raised when a node answers a JSON-RPC call with an error object.

    Attributes:
        code: JSON-RPC error code, if present
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)


class StorageError(AidChainError):
    """Raised when uploading evidence to blob storage fails."""
    pass
