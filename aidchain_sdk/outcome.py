"""
Outcome classification.

This module is the only place where error text and execution status are
interpreted. Every flow, sponsored or direct, ends by calling one of the
functions below; callers consume the resulting ExecutionOutcome and never
inspect raw error strings themselves.
"""
import logging
from typing import Optional, Tuple

from .models import ExecutionOutcome, FailureCategory, OutcomeStatus

logger = logging.getLogger(__name__)

EFFECTS_SUCCESS = "success"
EFFECTS_FAILURE = "failure"

# Checked in order; the first matching rule wins.
_CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], FailureCategory], ...] = (
    (("insufficient", "balance"), FailureCategory.INSUFFICIENT_BALANCE),
    (("unauthorized", "permission"), FailureCategory.UNAUTHORIZED),
    (("rejected", "cancelled"), FailureCategory.USER_REJECTED),
    (("gas",), FailureCategory.GAS_ERROR),
)


def failure_category(error_text: Optional[str]) -> FailureCategory:
    """Map failure text to a category by case-insensitive substring match."""
    text = (error_text or "").lower()
    for needles, category in _CATEGORY_RULES:
        if any(needle in text for needle in needles):
            return category
    return FailureCategory.UNKNOWN


def classify(
    error_text: Optional[str] = None,
    effects_status: Optional[str] = None,
    digest: Optional[str] = None
) -> ExecutionOutcome:
    """
    Classify the end of a flow.

    Args:
        error_text: Error message reported by the network or relay, if any
        effects_status: ``"success"``, ``"failure"`` or None when unknown
        digest: Transaction digest, if the submission produced one

    Returns:
        Success when effects report success; Failure with a text-derived
        category when effects report failure; Ambiguous when no effects are
        known but a digest exists; Failure(TransportError) otherwise
    """
    if effects_status == EFFECTS_SUCCESS:
        return ExecutionOutcome(status=OutcomeStatus.SUCCESS, digest=digest)

    if effects_status == EFFECTS_FAILURE:
        category = failure_category(error_text)
        logger.info(f"Transaction failed ({category.value}): {error_text}")
        return ExecutionOutcome(
            status=OutcomeStatus.FAILURE,
            digest=digest,
            category=category,
            detail=error_text,
        )

    if effects_status is not None:
        logger.warning(f"Unrecognized effects status '{effects_status}', treating as unknown")

    if digest:
        return ExecutionOutcome(status=OutcomeStatus.AMBIGUOUS, digest=digest, detail=error_text)

    return ExecutionOutcome(
        status=OutcomeStatus.FAILURE,
        category=FailureCategory.TRANSPORT_ERROR,
        detail=error_text,
    )


def sponsorship_failed(error: Exception) -> ExecutionOutcome:
    """Outcome for a flow stopped because the sponsor refused the request."""
    return ExecutionOutcome(
        status=OutcomeStatus.FAILURE,
        category=FailureCategory.SPONSORSHIP_ERROR,
        detail=str(error),
    )


def signature_rejected(error: Exception, digest: Optional[str] = None) -> ExecutionOutcome:
    """Outcome for a flow cancelled at the signing step."""
    return ExecutionOutcome(
        status=OutcomeStatus.FAILURE,
        digest=digest,
        category=FailureCategory.SIGNATURE_REJECTION,
        detail=str(error),
    )
