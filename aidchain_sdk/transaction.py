"""
BCS serialization of transaction intents.

Two encodings are produced from a TransactionIntent:

* ``TransactionKind`` bytes (a programmable transaction without gas data),
  which is what a sponsor provider funds;
* full ``TransactionData`` bytes, used when the sender pays its own gas.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import base58

from . import bcs
from .intent import (
    AddressArg, IntentArgument, OwnedObjectArg, SharedObjectArg, SplitCoinArg,
    StringArg, TransactionIntent, U64Arg
)
from .utils import blake2b256

# Enum variant indexes of the on-chain types
_CALL_ARG_PURE = 0
_CALL_ARG_OBJECT = 1
_OBJECT_ARG_OWNED = 0
_OBJECT_ARG_SHARED = 1
_ARGUMENT_GAS_COIN = 0
_ARGUMENT_INPUT = 1
_ARGUMENT_NESTED_RESULT = 3
_COMMAND_MOVE_CALL = 0
_COMMAND_SPLIT_COINS = 2
_KIND_PROGRAMMABLE = 0
_TRANSACTION_DATA_V1 = 0
_EXPIRATION_NONE = 0

# Intent prefix for TransactionData: scope, version, app id
TRANSACTION_INTENT_PREFIX = bytes([0, 0, 0])
TRANSACTION_DIGEST_SALT = b"TransactionData::"


@dataclass(frozen=True)
class GasPayment:
    """Gas data for a self-funded transaction."""
    coins: Tuple[OwnedObjectArg, ...]
    owner: str
    price: int
    budget: int


def _object_ref(ref: OwnedObjectArg) -> bytes:
    return (
        bcs.address(ref.object_id)
        + bcs.u64(ref.version)
        + bcs.byte_vector(base58.b58decode(ref.digest))
    )


def _object_input(arg) -> bytes:
    if isinstance(arg, SharedObjectArg):
        return (
            bcs.enum_tag(_CALL_ARG_OBJECT)
            + bcs.enum_tag(_OBJECT_ARG_SHARED)
            + bcs.address(arg.object_id)
            + bcs.u64(arg.initial_shared_version)
            + bcs.boolean(arg.mutable)
        )
    return bcs.enum_tag(_CALL_ARG_OBJECT) + bcs.enum_tag(_OBJECT_ARG_OWNED) + _object_ref(arg)


def _pure_input(value: bytes) -> bytes:
    return bcs.enum_tag(_CALL_ARG_PURE) + bcs.byte_vector(value)


def _input_ref(index: int) -> bytes:
    return bcs.enum_tag(_ARGUMENT_INPUT) + bcs.u16(index)


class _ProgrammableTransactionWriter:
    """Accumulates inputs and commands for a single-call programmable transaction."""

    def __init__(self):
        self.inputs: List[bytes] = []
        self.commands: List[bytes] = []

    def add_input(self, encoded: bytes) -> bytes:
        self.inputs.append(encoded)
        return _input_ref(len(self.inputs) - 1)

    def argument(self, arg: IntentArgument) -> bytes:
        if isinstance(arg, AddressArg):
            return self.add_input(_pure_input(bcs.address(arg.value)))
        if isinstance(arg, StringArg):
            return self.add_input(_pure_input(bcs.string(arg.value)))
        if isinstance(arg, U64Arg):
            return self.add_input(_pure_input(bcs.u64(arg.value)))
        if isinstance(arg, (SharedObjectArg, OwnedObjectArg)):
            return self.add_input(_object_input(arg))
        if isinstance(arg, SplitCoinArg):
            if arg.source is None:
                coin = bcs.enum_tag(_ARGUMENT_GAS_COIN)
            else:
                coin = self.add_input(_object_input(arg.source))
            amount = self.add_input(_pure_input(bcs.u64(arg.amount)))
            self.commands.append(
                bcs.enum_tag(_COMMAND_SPLIT_COINS) + coin + bcs.uleb128(1) + amount
            )
            # First (only) coin produced by that SplitCoins command
            return bcs.enum_tag(_ARGUMENT_NESTED_RESULT) + bcs.u16(len(self.commands) - 1) + bcs.u16(0)
        raise TypeError(f"Unsupported intent argument: {type(arg).__name__}")

    def move_call(self, intent: TransactionIntent) -> None:
        arguments = [self.argument(arg) for arg in intent.arguments]
        self.commands.append(
            bcs.enum_tag(_COMMAND_MOVE_CALL)
            + bcs.address(intent.package)
            + bcs.string(intent.module)
            + bcs.string(intent.function)
            + bcs.uleb128(0)  # no type arguments
            + bcs.uleb128(len(arguments))
            + b"".join(arguments)
        )

    def to_bytes(self) -> bytes:
        return (
            bcs.uleb128(len(self.inputs)) + b"".join(self.inputs)
            + bcs.uleb128(len(self.commands)) + b"".join(self.commands)
        )


def build_transaction_kind(intent: TransactionIntent) -> bytes:
    """
    Serialize an intent as BCS ``TransactionKind::ProgrammableTransaction``.

    Args:
        intent: The intent to serialize

    Returns:
        Transaction kind bytes (no sender, no gas data)
    """
    writer = _ProgrammableTransactionWriter()
    writer.move_call(intent)
    return bcs.enum_tag(_KIND_PROGRAMMABLE) + writer.to_bytes()


def build_transaction_data(
    intent: TransactionIntent,
    gas: GasPayment,
    expiration_epoch: Optional[int] = None
) -> bytes:
    """
    Serialize an intent as BCS ``TransactionData::V1`` paid by ``gas``.

    Args:
        intent: The intent to serialize
        gas: Gas coins, owner, price and budget
        expiration_epoch: Optional epoch after which the transaction is invalid

    Returns:
        Full transaction data bytes, ready to be signed
    """
    if not gas.coins:
        raise ValueError("At least one gas coin is required")
    expiration = (
        bcs.enum_tag(_EXPIRATION_NONE)
        if expiration_epoch is None
        else bcs.enum_tag(1) + bcs.u64(expiration_epoch)
    )
    return (
        bcs.enum_tag(_TRANSACTION_DATA_V1)
        + build_transaction_kind(intent)
        + bcs.address(intent.sender)
        + bcs.sequence(gas.coins, _object_ref)
        + bcs.address(gas.owner)
        + bcs.u64(gas.price)
        + bcs.u64(gas.budget)
        + expiration
    )


def transaction_digest(tx_bytes: bytes) -> str:
    """Return the base58 digest identifying serialized TransactionData."""
    return base58.b58encode(blake2b256(TRANSACTION_DIGEST_SALT + tx_bytes)).decode("ascii")


def signing_message(tx_bytes: bytes) -> bytes:
    """Return the 32-byte message a signer must sign for ``tx_bytes``."""
    return blake2b256(TRANSACTION_INTENT_PREFIX + tx_bytes)


def select_gas_coins(coins: Sequence[Tuple[OwnedObjectArg, int]], budget: int) -> Tuple[OwnedObjectArg, ...]:
    """
    Pick coins whose combined balance covers ``budget``.

    Args:
        coins: (reference, balance) pairs, in the order returned by the node
        budget: Gas budget to cover

    Returns:
        Selected coin references

    Raises:
        ValueError: If the total balance is insufficient
    """
    selected = []
    total = 0
    for ref, balance in sorted(coins, key=lambda item: item[1], reverse=True):
        selected.append(ref)
        total += balance
        if total >= budget:
            return tuple(selected)
    raise ValueError(f"Insufficient balance for gas budget {budget}: available {total}")
