"""
Tests for the outcome classifier and ExecutionOutcome.
"""
import pytest

from aidchain_sdk.exceptions import AmbiguousStatus, ExecutionFailure, SignatureRejection
from aidchain_sdk.models import ExecutionOutcome, FailureCategory, OUTCOME_MESSAGES, OutcomeStatus
from aidchain_sdk.outcome import classify, failure_category, signature_rejected, sponsorship_failed

DIGEST = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"


def test_success():
    outcome = classify(None, "success", DIGEST)
    assert outcome.status == OutcomeStatus.SUCCESS
    assert outcome.digest == DIGEST
    assert outcome.succeeded


@pytest.mark.parametrize("error_text, category", [
    ("InsufficientCoinBalance", FailureCategory.INSUFFICIENT_BALANCE),
    ("insufficient balance", FailureCategory.INSUFFICIENT_BALANCE),
    ("INSUFFICIENT BALANCE", FailureCategory.INSUFFICIENT_BALANCE),
    ("Balance too low", FailureCategory.INSUFFICIENT_BALANCE),
    ("Unauthorized sender", FailureCategory.UNAUTHORIZED),
    ("no PERMISSION for this call", FailureCategory.UNAUTHORIZED),
    ("User rejected the request", FailureCategory.USER_REJECTED),
    ("Cancelled by user", FailureCategory.USER_REJECTED),
    ("GasBudgetTooLow", FailureCategory.GAS_ERROR),
    ("MoveAbort in 1st command", FailureCategory.UNKNOWN),
    ("", FailureCategory.UNKNOWN),
    (None, FailureCategory.UNKNOWN),
])
def test_failure_categories(error_text, category):
    outcome = classify(error_text, "failure", DIGEST)
    assert outcome.status == OutcomeStatus.FAILURE
    assert outcome.category == category
    assert outcome.digest == DIGEST


def test_category_priority():
    """Earlier rules win when several keywords appear"""
    assert failure_category("Insufficient gas") == FailureCategory.INSUFFICIENT_BALANCE
    assert failure_category("permission rejected") == FailureCategory.UNAUTHORIZED
    assert failure_category("gas payment cancelled") == FailureCategory.USER_REJECTED


def test_digest_without_status_is_ambiguous():
    outcome = classify(None, None, DIGEST)
    assert outcome.status == OutcomeStatus.AMBIGUOUS
    assert outcome.digest == DIGEST


def test_error_without_digest_is_transport_error():
    outcome = classify("Connection refused", None)
    assert outcome.status == OutcomeStatus.FAILURE
    assert outcome.category == FailureCategory.TRANSPORT_ERROR


def test_unrecognized_status_is_treated_as_unknown():
    assert classify(None, "pending", DIGEST).status == OutcomeStatus.AMBIGUOUS
    assert classify(None, "pending").category == FailureCategory.TRANSPORT_ERROR


@pytest.mark.parametrize("error_text", [None, "", "insufficient balance", "boom"])
@pytest.mark.parametrize("effects_status", [None, "success", "failure", "weird"])
@pytest.mark.parametrize("digest", [None, DIGEST])
def test_classify_is_total(error_text, effects_status, digest):
    outcome = classify(error_text, effects_status, digest)
    assert outcome.status in (OutcomeStatus.SUCCESS, OutcomeStatus.FAILURE, OutcomeStatus.AMBIGUOUS)
    if outcome.status == OutcomeStatus.FAILURE:
        assert outcome.category is not None
    # Same inputs, same answer
    assert classify(error_text, effects_status, digest) == outcome


def test_sponsorship_failed():
    outcome = sponsorship_failed(Exception("target not allowed"))
    assert outcome.category == FailureCategory.SPONSORSHIP_ERROR
    assert outcome.detail == "target not allowed"
    assert outcome.retryable


def test_signature_rejected():
    outcome = signature_rejected(SignatureRejection("declined"), DIGEST)
    assert outcome.category == FailureCategory.SIGNATURE_REJECTION
    assert outcome.digest == DIGEST
    assert not outcome.retryable


class TestExecutionOutcome:

    def test_messages_cover_every_category(self):
        for category in FailureCategory:
            assert category.value in OUTCOME_MESSAGES
        assert OutcomeStatus.SUCCESS.value in OUTCOME_MESSAGES
        assert OutcomeStatus.AMBIGUOUS.value in OUTCOME_MESSAGES

    def test_failure_message(self):
        outcome = classify("InsufficientCoinBalance", "failure", DIGEST)
        assert outcome.message == OUTCOME_MESSAGES["InsufficientBalance"]

    def test_transport_error_is_retryable(self):
        assert classify("timeout").retryable

    def test_raise_for_status_success(self):
        outcome = classify(None, "success", DIGEST)
        assert outcome.raise_for_status() is outcome

    def test_raise_for_status_ambiguous(self):
        with pytest.raises(AmbiguousStatus) as exc_info:
            classify(None, None, DIGEST).raise_for_status()
        assert exc_info.value.digest == DIGEST

    def test_raise_for_status_failure(self):
        with pytest.raises(ExecutionFailure) as exc_info:
            classify("Unauthorized", "failure", DIGEST).raise_for_status()
        assert exc_info.value.category == "Unauthorized"
        assert exc_info.value.digest == DIGEST

    def test_outcome_is_immutable(self):
        outcome = ExecutionOutcome(status=OutcomeStatus.SUCCESS)
        with pytest.raises(Exception):
            outcome.digest = "x"
