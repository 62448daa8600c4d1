"""
Transaction intents and the IntentBuilder.

An intent describes a single Move call (target plus typed arguments) and
its sender before any gas funding or signature is attached. Building an
intent is pure: no network access and no side effects.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .bcs import U64_MAX
from .config import AidChainConfig
from .exceptions import ValidationError
from .utils import normalize_sui_address, sha256_hex

logger = logging.getLogger(__name__)

# 1 SUI = 10^9 MIST
MIST_PER_SUI = 10 ** 9


class ArgKind(str, Enum):
    """Argument kinds accepted by on-chain operations."""
    ADDRESS = "address"
    STRING = "string"
    U64 = "u64"
    OBJECT = "object"
    COIN = "coin"


@dataclass(frozen=True)
class AddressArg:
    value: str


@dataclass(frozen=True)
class StringArg:
    value: str


@dataclass(frozen=True)
class U64Arg:
    value: int


@dataclass(frozen=True)
class SharedObjectArg:
    """Reference to a shared object by id and initial shared version."""
    object_id: str
    initial_shared_version: int
    mutable: bool = True


@dataclass(frozen=True)
class OwnedObjectArg:
    """Reference to an owned or immutable object at an exact version."""
    object_id: str
    version: int
    digest: str


@dataclass(frozen=True)
class SplitCoinArg:
    """
    A coin of ``amount`` base units split from a funding source.

    When ``source`` is None the split is taken from the gas coin, which is
    only valid when the sender pays its own gas.
    """
    amount: int
    source: Optional[OwnedObjectArg] = None


ObjectArg = Union[SharedObjectArg, OwnedObjectArg]
IntentArgument = Union[AddressArg, StringArg, U64Arg, SharedObjectArg, OwnedObjectArg, SplitCoinArg]

_KIND_TYPES: Dict[ArgKind, tuple] = {
    ArgKind.ADDRESS: (AddressArg,),
    ArgKind.STRING: (StringArg,),
    ArgKind.U64: (U64Arg,),
    ArgKind.OBJECT: (SharedObjectArg, OwnedObjectArg),
    ArgKind.COIN: (SplitCoinArg,),
}

# Declared signatures of the aidchain Move module, in argument order.
OPERATION_CATALOGUE: Dict[str, Tuple[ArgKind, ...]] = {
    "donate": (
        ArgKind.OBJECT,   # &mut AidRegistry
        ArgKind.STRING,   # description
        ArgKind.STRING,   # location
        ArgKind.ADDRESS,  # coordinator
        ArgKind.COIN,     # Coin<SUI>
    ),
    "register_recipient": (
        ArgKind.OBJECT,   # &mut AidRegistry
        ArgKind.STRING,   # name
        ArgKind.STRING,   # location
        ArgKind.STRING,   # need category
        ArgKind.STRING,   # national id hash
        ArgKind.STRING,   # phone
        ArgKind.STRING,   # evidence blob id
        ArgKind.U64,      # family size
        ArgKind.STRING,   # description
    ),
    "verify_recipient": (
        ArgKind.OBJECT,   # &mut AidRegistry
        ArgKind.OBJECT,   # RecipientProfile
    ),
    "mark_delivered": (
        ArgKind.OBJECT,   # &mut AidPackage
        ArgKind.STRING,   # proof url
    ),
}


@dataclass(frozen=True)
class TransactionIntent:
    """
    A single Move call ready to be serialized.

    Attributes:
        target: Fully qualified ``package::module::function`` path
        arguments: Typed arguments in declared order
        sender: Sender address
    """
    target: str
    arguments: Tuple[IntentArgument, ...]
    sender: str

    @property
    def package(self) -> str:
        return self.target.split("::")[0]

    @property
    def module(self) -> str:
        return self.target.split("::")[1]

    @property
    def function(self) -> str:
        return self.target.split("::")[2]

    @property
    def spends_gas_coin(self) -> bool:
        """True when any argument is split from the gas coin."""
        return any(isinstance(arg, SplitCoinArg) and arg.source is None for arg in self.arguments)


def to_base_units(amount: Union[str, int, float, Decimal]) -> int:
    """
    Convert a display amount (e.g. ``"0.1"`` SUI) to base units (MIST).

    The product with 10^9 is floored, never rounded up, so representation
    error can never overspend the sender's funds.

    Args:
        amount: Display amount as string, int, float or Decimal

    Returns:
        Amount in base units

    Raises:
        ValidationError: If the amount is non-numeric, not positive, floors
            to zero or does not fit in a u64
    """
    if isinstance(amount, bool):
        raise ValidationError("Amount must be a number")
    try:
        # str() keeps floats at their shortest repr: 0.1 -> "0.1"
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Amount is not numeric: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"Amount is not numeric: {amount!r}")
    if value <= 0:
        raise ValidationError("Amount must be greater than zero")

    base_units = int((value * MIST_PER_SUI).to_integral_value(rounding=ROUND_FLOOR))
    if base_units == 0:
        raise ValidationError(f"Amount {amount} is smaller than one base unit")
    if base_units > U64_MAX:
        raise ValidationError(f"Amount {amount} exceeds the maximum transferable value")
    return base_units


def require_text(field: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def _require_address(field: str, value: Optional[str]) -> str:
    try:
        return normalize_sui_address(value)
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {e}")


class IntentBuilder:
    """
    Builds TransactionIntents for the aidchain Move module.

    The builder is bound to one AidChainConfig, which supplies the package
    id, the shared registry reference and the default coordinator.
    """

    def __init__(self, config: AidChainConfig):
        self.config = config

    def registry_ref(self) -> SharedObjectArg:
        return SharedObjectArg(
            object_id=normalize_sui_address(self.config.registry_id),
            initial_shared_version=self.config.registry_initial_shared_version,
            mutable=True,
        )

    def build(self, action: str, sender: str, **params) -> TransactionIntent:
        """
        Build an intent for a named action.

        Args:
            action: One of the operations in OPERATION_CATALOGUE
            sender: Sender address
            **params: Keyword arguments of the matching builder method

        Raises:
            ValidationError: If the action is unknown or parameters are invalid
        """
        if action not in OPERATION_CATALOGUE:
            raise ValidationError(
                f"Unknown action '{action}'. Available actions: {', '.join(sorted(OPERATION_CATALOGUE))}"
            )
        return getattr(self, action)(sender=sender, **params)

    def donate(
        self,
        sender: str,
        description: str,
        location: str,
        amount: Union[str, int, float, Decimal],
        coordinator: Optional[str] = None,
        funding_coin: Optional[OwnedObjectArg] = None
    ) -> TransactionIntent:
        """
        Donate ``amount`` SUI for an aid package.

        Args:
            sender: Donor address
            description: What the package contains
            location: Where it must be delivered
            amount: Display amount in SUI
            coordinator: Coordinator address (defaults to the configured one)
            funding_coin: Coin to split the donation from; the gas coin when omitted
        """
        description = require_text("Description", description)
        location = require_text("Location", location)
        base_units = to_base_units(amount)
        coordinator = _require_address("coordinator", coordinator or self.config.coordinator_address)
        return self._assemble("donate", sender, (
            self.registry_ref(),
            StringArg(description),
            StringArg(location),
            AddressArg(coordinator),
            SplitCoinArg(base_units, funding_coin),
        ))

    def register_recipient(
        self,
        sender: str,
        name: str,
        location: str,
        need_category: str,
        national_id: str,
        phone: str,
        evidence_blob_id: str = "",
        family_size: Union[str, int] = 1,
        description: str = ""
    ) -> TransactionIntent:
        """
        Register the sender as an aid recipient awaiting verification.

        The national id never leaves the client: only its SHA-256 hex digest
        is placed in the transaction.
        """
        name = require_text("Name", name)
        location = require_text("Location", location)
        need_category = require_text("Need category", need_category)
        national_id = require_text("National id", national_id)
        phone = require_text("Phone", phone)
        if len(national_id) != 11 or not national_id.isdigit():
            raise ValidationError("National id must be exactly 11 digits")
        if len(phone) < 10:
            raise ValidationError("Phone number must have at least 10 characters")
        try:
            size = int(family_size)
        except (TypeError, ValueError):
            size = 1
        if size <= 0:
            size = 1

        return self._assemble("register_recipient", sender, (
            self.registry_ref(),
            StringArg(name),
            StringArg(location),
            StringArg(need_category),
            StringArg(sha256_hex(national_id)),
            StringArg(phone),
            StringArg(evidence_blob_id or ""),
            U64Arg(size),
            StringArg(description or ""),
        ))

    def verify_recipient(self, sender: str, profile: ObjectArg) -> TransactionIntent:
        return self._assemble("verify_recipient", sender, (self.registry_ref(), profile))

    def mark_delivered(self, sender: str, package: ObjectArg, proof_url: str) -> TransactionIntent:
        proof_url = require_text("Proof URL", proof_url)
        return self._assemble("mark_delivered", sender, (package, StringArg(proof_url)))

    def _assemble(
        self,
        function: str,
        sender: str,
        arguments: Tuple[IntentArgument, ...]
    ) -> TransactionIntent:
        sender = _require_address("sender", sender)
        signature = OPERATION_CATALOGUE[function]
        # Mismatches here are bugs in this module, not user errors.
        assert len(arguments) == len(signature), (
            f"{function} expects {len(signature)} arguments, got {len(arguments)}"
        )
        for position, (arg, kind) in enumerate(zip(arguments, signature)):
            assert isinstance(arg, _KIND_TYPES[kind]), (
                f"{function} argument {position} must be {kind.value}, got {type(arg).__name__}"
            )

        intent = TransactionIntent(
            target=self.config.target(function),
            arguments=tuple(arguments),
            sender=sender,
        )
        logger.debug(f"Built intent {intent.target} for {sender[:10]}...")
        return intent
