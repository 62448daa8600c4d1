"""
Flow coordinators.

SponsoredFlowCoordinator runs grant -> sign -> execute through the sponsor
relay. DirectFlowCoordinator signs and submits the same intent with the
sender paying gas. Both end in the outcome classifier and return an
ExecutionOutcome; neither retries any step.
"""
import logging
from typing import Iterable, List, Optional

from .config import AidChainConfig, WILDCARD_TARGET
from .exceptions import (
    AmbiguousStatus, DecodeError, ExecutionFailure, LedgerError, ProtocolViolation,
    RelayRequestError, SignatureRejection, SponsorshipError, TransportError,
    ValidationError
)
from .intent import SplitCoinArg, TransactionIntent
from .ledger import SuiLedgerClient
from .models import ExecutionOutcome, SponsorshipRequest
from .outcome import EFFECTS_FAILURE, classify, signature_rejected, sponsorship_failed
from .relay_client import RelayClient
from .signing import SignatureCoordinator
from .transaction import (
    GasPayment, build_transaction_data, build_transaction_kind, select_gas_coins, transaction_digest
)
from .utils import to_b64

logger = logging.getLogger(__name__)

# 0.01 SUI
DEFAULT_GAS_BUDGET = 10_000_000


def _check_sender(intent: TransactionIntent, signatures: SignatureCoordinator) -> None:
    if intent.sender.lower() != signatures.address.lower():
        raise ValidationError(
            f"Intent sender {intent.sender} does not match signing agent {signatures.address}"
        )


class SponsoredFlowCoordinator:
    """
    Runs an intent through the sponsor relay.

    Steps, in order, each a suspension point:
        1. create_grant - on failure the flow stops, nothing is signed
        2. sign - a rejection stops the flow, nothing is executed
        3. execute - the result (and confirmed effects) is classified

    A grant that fails to execute is never retried; a new flow requests a
    fresh grant, which also covers grants that expired at the provider.
    """

    def __init__(
        self,
        config: AidChainConfig,
        relay: RelayClient,
        signatures: SignatureCoordinator,
        ledger: Optional[SuiLedgerClient] = None,
        effects_timeout: float = 60,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.relay = relay
        self.signatures = signatures
        self.ledger = ledger
        self.effects_timeout = effects_timeout
        self.logger = logger or logging.getLogger(__name__)

    def run(self, intent: TransactionIntent, allow_list: Optional[Iterable[str]] = None) -> ExecutionOutcome:
        """
        Execute an intent with sponsored gas.

        Args:
            intent: Intent built by IntentBuilder
            allow_list: Targets the sponsor may fund; the configured default
                list when omitted

        Returns:
            The classified outcome

        Raises:
            ValidationError: If the intent cannot be sponsored under this
                allow-list (a caller error, raised before any I/O)
            ProtocolViolation: If digests disagree between grant, signature
                and execution
            GrantReuseError: If the relay hands out a grant already signed
        """
        targets = list(allow_list) if allow_list is not None else self.config.default_allow_list()
        self._check_intent(intent, targets)

        request = SponsorshipRequest(
            network=self.config.network,
            transactionKindBytes=to_b64(build_transaction_kind(intent)),
            sender=intent.sender,
            allowedMoveCallTargets=targets,
        )

        try:
            grant = self.relay.create_grant(request)
        except TransportError as e:
            return classify(str(e))
        except (RelayRequestError, SponsorshipError) as e:
            self.logger.warning(f"Sponsorship refused for {intent.target}: {e}")
            return sponsorship_failed(e)

        try:
            signed = self.signatures.sign(grant)
        except SignatureRejection as e:
            self.logger.info(f"Signing rejected for {grant.digest}")
            return signature_rejected(e, grant.digest)

        try:
            final_digest = self.relay.execute(signed)
        except TransportError as e:
            return classify(str(e))
        except AmbiguousStatus as e:
            return classify(str(e), digest=e.digest)
        except (ExecutionFailure, RelayRequestError) as e:
            return classify(str(e), EFFECTS_FAILURE, digest=grant.digest)

        if final_digest != grant.digest:
            raise ProtocolViolation(f"Relay executed {final_digest} but {grant.digest} was signed")

        return self._confirm(final_digest)

    def _check_intent(self, intent: TransactionIntent, targets: List[str]) -> None:
        _check_sender(intent, self.signatures)
        if intent.spends_gas_coin:
            raise ValidationError(
                "Sponsored transactions cannot split value from the gas coin; pass a funding coin"
            )
        if WILDCARD_TARGET in targets:
            if not self.config.allow_wildcard:
                raise ValidationError("Wildcard allow-list is disabled for this deployment")
            self.logger.warning("Using a wildcard allow-list: any Move call may be sponsored")
        elif intent.target not in targets:
            raise ValidationError(f"Target {intent.target} is not in the sponsorship allow-list")

    def _confirm(self, digest: str) -> ExecutionOutcome:
        if self.ledger is None:
            return classify(digest=digest)
        try:
            result = self.ledger.wait_for_transaction(digest, timeout=self.effects_timeout)
        except (TransportError, LedgerError, DecodeError) as e:
            self.logger.warning(f"Could not confirm effects of {digest}: {e}")
            return classify(str(e), digest=digest)
        if result is None:
            return classify(digest=digest)
        return classify(result.error, result.effects_status, digest=result.digest)


class DirectFlowCoordinator:
    """
    Signs and submits an intent with the sender paying gas.

    Used when sponsorship is disabled, unavailable or declined by the
    caller. Outcomes are classified exactly as in the sponsored flow.
    """

    def __init__(
        self,
        ledger: SuiLedgerClient,
        signatures: SignatureCoordinator,
        gas_budget: int = DEFAULT_GAS_BUDGET,
        logger: Optional[logging.Logger] = None
    ):
        self.ledger = ledger
        self.signatures = signatures
        self.gas_budget = gas_budget
        self.logger = logger or logging.getLogger(__name__)

    def run(self, intent: TransactionIntent) -> ExecutionOutcome:
        """
        Execute an intent, paying gas from the sender's coins.

        Raises:
            ValidationError: If the intent sender is not the signing agent
        """
        _check_sender(intent, self.signatures)

        try:
            gas_price = self.ledger.get_reference_gas_price()
            coins = self.ledger.get_coins(intent.sender)
        except TransportError as e:
            return classify(str(e))
        except LedgerError as e:
            return classify(str(e), EFFECTS_FAILURE)

        # Value split from the gas coin must be covered on top of the budget
        spent = sum(
            arg.amount for arg in intent.arguments
            if isinstance(arg, SplitCoinArg) and arg.source is None
        )
        try:
            payment = select_gas_coins(coins, self.gas_budget + spent)
        except ValueError as e:
            return classify(str(e), EFFECTS_FAILURE)

        tx_bytes = build_transaction_data(
            intent,
            GasPayment(coins=payment, owner=intent.sender, price=gas_price, budget=self.gas_budget),
        )

        try:
            signature = self.signatures.sign_direct(tx_bytes)
        except SignatureRejection as e:
            return signature_rejected(e)

        try:
            result = self.ledger.execute_transaction_block(to_b64(tx_bytes), [signature])
        except TransportError as e:
            return classify(str(e))
        except LedgerError as e:
            return classify(str(e), EFFECTS_FAILURE)
        except DecodeError as e:
            # Submitted, but the node's answer is unusable; report the locally computed digest
            digest = transaction_digest(tx_bytes)
            self.logger.warning(f"Unreadable response after submitting {digest}: {e}")
            return classify(str(e), digest=digest)

        self.logger.info(f"Transaction submitted: {result.digest} ({result.effects_status})")
        return classify(result.error, result.effects_status, digest=result.digest)
