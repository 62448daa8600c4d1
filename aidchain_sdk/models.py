"""
Data models for the AidChain SDK.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .config import WILDCARD_TARGET
from .exceptions import AmbiguousStatus, ExecutionFailure
from .utils import from_b64


class SponsorshipRequest(BaseModel):
    """Body of ``POST /api/sponsor``"""
    network: Optional[str] = "testnet"
    transaction_kind_bytes: Optional[str] = Field(None, alias="transactionKindBytes")
    sender: Optional[str] = None
    allowed_move_call_targets: Optional[List[str]] = Field(None, alias="allowedMoveCallTargets")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def uses_wildcard(self) -> bool:
        return WILDCARD_TARGET in (self.allowed_move_call_targets or [])

    def to_wire(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True)


class SponsorshipGrant(BaseModel):
    """Provider-issued, gas-funded transaction valid for one signing"""
    tx_bytes: str = Field(..., alias="bytes")
    digest: str

    class Config:
        populate_by_name = True
        frozen = True

    def raw_bytes(self) -> bytes:
        return from_b64(self.tx_bytes)


class SignedSponsorship(BaseModel):
    """Body of ``POST /api/execute``"""
    digest: str
    signature: str

    class Config:
        frozen = True


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    AMBIGUOUS = "ambiguous"


class FailureCategory(str, Enum):
    """Why a flow failed"""
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    UNAUTHORIZED = "Unauthorized"
    USER_REJECTED = "UserRejected"
    GAS_ERROR = "GasError"
    UNKNOWN = "Unknown"
    TRANSPORT_ERROR = "TransportError"
    SPONSORSHIP_ERROR = "SponsorshipError"
    SIGNATURE_REJECTION = "SignatureRejection"


# One user-facing message per outcome category
OUTCOME_MESSAGES: Dict[str, str] = {
    OutcomeStatus.SUCCESS.value: "Transaction recorded on chain.",
    OutcomeStatus.AMBIGUOUS.value: "Transaction submitted but its result is not confirmed yet. Check again later.",
    FailureCategory.INSUFFICIENT_BALANCE.value: "Insufficient balance: the wallet does not hold enough SUI.",
    FailureCategory.UNAUTHORIZED.value: "You are not authorized to perform this operation.",
    FailureCategory.USER_REJECTED.value: "The transaction was cancelled by the user.",
    FailureCategory.GAS_ERROR.value: "Insufficient balance to pay the gas fee.",
    FailureCategory.UNKNOWN.value: "The transaction failed.",
    FailureCategory.TRANSPORT_ERROR.value: (
        "Could not reach the sponsor relay or the network. Is the relay running?"
    ),
    FailureCategory.SPONSORSHIP_ERROR.value: (
        "The sponsor refused to pay for this transaction. Check the relay configuration and try again."
    ),
    FailureCategory.SIGNATURE_REJECTION.value: "Signing was declined in the wallet.",
}


class ExecutionOutcome(BaseModel):
    """Terminal result of a sponsored or direct flow"""
    status: OutcomeStatus
    digest: Optional[str] = None
    category: Optional[FailureCategory] = None
    detail: Optional[str] = None

    class Config:
        frozen = True

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def message(self) -> str:
        """The user-facing message for this outcome."""
        if self.status == OutcomeStatus.FAILURE:
            return OUTCOME_MESSAGES[(self.category or FailureCategory.UNKNOWN).value]
        return OUTCOME_MESSAGES[self.status.value]

    @property
    def retryable(self) -> bool:
        """True when re-running the whole flow may succeed."""
        return self.category in (FailureCategory.TRANSPORT_ERROR, FailureCategory.SPONSORSHIP_ERROR)

    def raise_for_status(self) -> "ExecutionOutcome":
        """
        Raise unless the outcome is a success.

        Raises:
            AmbiguousStatus: If the result is not confirmed
            ExecutionFailure: If the flow failed
        """
        if self.status == OutcomeStatus.AMBIGUOUS:
            raise AmbiguousStatus(self.message, digest=self.digest or "")
        if self.status == OutcomeStatus.FAILURE:
            category = (self.category or FailureCategory.UNKNOWN).value
            raise ExecutionFailure(self.detail or self.message, category=category, digest=self.digest)
        return self
