"""
Tests for BCS primitives and transaction serialization.
"""
import hashlib

import base58
import pytest

from aidchain_sdk import bcs
from aidchain_sdk.transaction import (
    GasPayment, build_transaction_data, build_transaction_kind, select_gas_coins,
    signing_message, transaction_digest
)

from tests.test_helpers import FUNDING_COIN, OTHER_COIN, TEST_OBJECT_DIGEST

SENDER = "0x" + "42" * 32


class TestBcs:

    @pytest.mark.parametrize("value, encoded", [
        (0, b"\x00"),
        (1, b"\x01"),
        (127, b"\x7f"),
        (128, b"\x80\x01"),
        (300, b"\xac\x02"),
        (16384, b"\x80\x80\x01"),
    ])
    def test_uleb128(self, value, encoded):
        assert bcs.uleb128(value) == encoded

    def test_integers_are_little_endian(self):
        assert bcs.u16(1) == b"\x01\x00"
        assert bcs.u64(1) == b"\x01" + b"\x00" * 7
        assert bcs.u64(bcs.U64_MAX) == b"\xff" * 8

    @pytest.mark.parametrize("value", [-1, 2 ** 64])
    def test_u64_range(self, value):
        with pytest.raises(ValueError, match="out of range"):
            bcs.u64(value)

    def test_u64_rejects_bool(self):
        with pytest.raises(TypeError):
            bcs.u64(True)

    def test_string_is_length_prefixed_utf8(self):
        assert bcs.string("hi") == b"\x02hi"
        assert bcs.string("ş") == b"\x02\xc5\x9f"

    def test_option_and_sequence(self):
        assert bcs.option(None, bcs.u8) == b"\x00"
        assert bcs.option(5, bcs.u8) == b"\x01\x05"
        assert bcs.sequence([1, 2], bcs.u8) == b"\x02\x01\x02"

    def test_address_is_padded(self):
        assert bcs.address("0x2") == b"\x00" * 31 + b"\x02"


class TestTransactionKind:

    def test_single_move_call_layout(self, builder):
        intent = builder.mark_delivered(SENDER, FUNDING_COIN, "https://p")
        expected = (
            b"\x00"                                   # ProgrammableTransaction
            + b"\x02"                                 # two inputs
            + b"\x01\x00"                             # Object(ImmOrOwned)
            + bytes.fromhex("11" * 32)
            + (5).to_bytes(8, "little")
            + b"\x20" + base58.b58decode(TEST_OBJECT_DIGEST)
            + b"\x00" + b"\x0a" + b"\x09https://p"   # Pure(string)
            + b"\x01"                                 # one command
            + b"\x00"                                 # MoveCall
            + bytes.fromhex("ab" * 32)
            + b"\x08aidchain"
            + b"\x0emark_delivered"
            + b"\x00"                                 # no type arguments
            + b"\x02" + b"\x01\x00\x00" + b"\x01\x01\x00"
        )
        assert build_transaction_kind(intent) == expected

    def test_split_from_gas_coin(self, builder):
        intent = builder.donate(SENDER, "Blankets", "Hatay", "0.1")
        kind = build_transaction_kind(intent)

        # SplitCoins(GasCoin, [Input(4)]) precedes the MoveCall
        assert b"\x02\x00\x01\x01\x04\x00" in kind
        # donate receives NestedResult(0, 0)
        assert kind.endswith(b"\x03\x00\x00\x00\x00")
        assert bcs.u64(100_000_000) in kind

    def test_split_from_funding_coin(self, builder):
        intent = builder.donate(SENDER, "Blankets", "Hatay", "0.1", funding_coin=FUNDING_COIN)
        kind = build_transaction_kind(intent)

        # Funding coin is input 4, amount input 5
        assert b"\x02\x01\x04\x00\x01\x01\x05\x00" in kind
        assert bytes.fromhex("11" * 32) in kind

    def test_kind_is_deterministic(self, builder):
        first = builder.donate(SENDER, "Blankets", "Hatay", "0.1")
        second = builder.donate(SENDER, "Blankets", "Hatay", "0.1")
        assert build_transaction_kind(first) == build_transaction_kind(second)


class TestTransactionData:

    def _gas(self):
        return GasPayment(coins=(OTHER_COIN,), owner=SENDER, price=1000, budget=10_000_000)

    def test_wraps_kind_with_sender_and_gas(self, builder):
        intent = builder.mark_delivered(SENDER, FUNDING_COIN, "https://p")
        data = build_transaction_data(intent, self._gas())
        kind = build_transaction_kind(intent)

        assert data.startswith(b"\x00" + kind + bytes.fromhex("42" * 32))
        assert data.endswith(bcs.u64(1000) + bcs.u64(10_000_000) + b"\x00")

    def test_expiration_epoch(self, builder):
        intent = builder.mark_delivered(SENDER, FUNDING_COIN, "https://p")
        data = build_transaction_data(intent, self._gas(), expiration_epoch=12)
        assert data.endswith(b"\x01" + bcs.u64(12))

    def test_requires_gas_coin(self, builder):
        intent = builder.mark_delivered(SENDER, FUNDING_COIN, "https://p")
        gas = GasPayment(coins=(), owner=SENDER, price=1000, budget=10)
        with pytest.raises(ValueError, match="gas coin"):
            build_transaction_data(intent, gas)


def test_transaction_digest():
    tx_bytes = b"\x00\x01\x02"
    expected = base58.b58encode(
        hashlib.blake2b(b"TransactionData::" + tx_bytes, digest_size=32).digest()
    ).decode("ascii")
    assert transaction_digest(tx_bytes) == expected


def test_signing_message_uses_intent_prefix():
    tx_bytes = b"\x05\x06"
    assert signing_message(tx_bytes) == hashlib.blake2b(b"\x00\x00\x00" + tx_bytes, digest_size=32).digest()


class TestSelectGasCoins:

    def test_prefers_largest_coins(self):
        coins = [(FUNDING_COIN, 10), (OTHER_COIN, 500)]
        assert select_gas_coins(coins, 100) == (OTHER_COIN,)

    def test_combines_coins(self):
        coins = [(FUNDING_COIN, 60), (OTHER_COIN, 50)]
        assert select_gas_coins(coins, 100) == (FUNDING_COIN, OTHER_COIN)

    def test_insufficient_balance(self):
        with pytest.raises(ValueError, match="Insufficient balance"):
            select_gas_coins([(FUNDING_COIN, 10)], 100)

    def test_no_coins(self):
        with pytest.raises(ValueError, match="Insufficient balance"):
            select_gas_coins([], 1)
