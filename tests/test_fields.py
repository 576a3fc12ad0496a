from types import MappingProxyType
from typing import Any, Dict

import pytest
from ethereum_rlp import rlp
from ethereum_types.numeric import U256, Uint

from ethereum_tx import Transaction
from ethereum_tx.exceptions import (
    FieldCountError,
    FieldLengthError,
    InvalidFieldError,
)
from ethereum_tx.fields import (
    DATA,
    FIELDS,
    canonicalize_value,
    to_bytes,
)


def test_default_fields() -> None:
    tx = Transaction()
    assert tx.raw == [b""] * 6 + [b"\x1c", b"", b""]


@pytest.mark.parametrize(
    "chain, expected_v",
    [
        ("mainnet", b"\x01"),
        ("ropsten", b"\x03"),
        (42, b"\x2a"),
    ],
)
def test_default_v_uses_chain_id(chain: Any, expected_v: bytes) -> None:
    tx = Transaction(chain=chain)
    assert tx.v == expected_v


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, b""),
        (0, b""),
        (1, b"\x01"),
        (0x0100, b"\x01\x00"),
        ("0x", b""),
        ("0x1", b"\x01"),
        ("0x0001", b"\x00\x01"),
        (b"\x00\x02", b"\x00\x02"),
        (bytearray(b"\x03"), b"\x03"),
        (Uint(256), b"\x01\x00"),
        (U256(0), b""),
    ],
)
def test_to_bytes(value: Any, expected: bytes) -> None:
    assert to_bytes(value) == expected


@pytest.mark.parametrize(
    "value",
    ["1234", "0xzz", -1, True, 1.5, object()],
)
def test_to_bytes_rejects(value: Any) -> None:
    with pytest.raises(InvalidFieldError):
        to_bytes(value)


def test_numeric_fields_are_stripped() -> None:
    tx = Transaction(
        {
            "nonce": "0x0001",
            "gasPrice": b"\x00\x00\x05",
            "gasLimit": "0x00",
            "value": 0,
        }
    )
    assert tx.nonce == b"\x01"
    assert tx.gas_price == b"\x05"
    assert tx.gas_limit == b""
    assert tx.value == b""


def test_single_zero_byte_kept_for_allow_zero_fields() -> None:
    tx = Transaction({"data": "0x00", "v": "0x00"})
    assert tx.data == b"\x00"
    assert tx.v == b"\x00"


def test_integer_zero_for_allow_zero_fields() -> None:
    tx = Transaction({"nonce": 0, "data": 0, "v": 0})
    assert tx.nonce == b""
    assert tx.data == b"\x00"
    assert tx.v == b"\x00"

    tx = Transaction([0, 0, 0, b"", 0, 0, 0])
    assert tx.raw[:7] == [b""] * 5 + [b"\x00", b"\x00"]


def test_read_only_mapping(eip155_tx_data: Dict[str, Any]) -> None:
    tx = Transaction(MappingProxyType(eip155_tx_data), chain="mainnet")
    assert tx.raw == Transaction(eip155_tx_data, chain="mainnet").raw
    assert tx.nonce == b"\x09"


def test_numeric_field_limit() -> None:
    Transaction({"nonce": b"\x00" + b"\x01" * 32})

    with pytest.raises(FieldLengthError, match="nonce"):
        Transaction({"nonce": b"\x01" * 33})


@pytest.mark.parametrize("name", ["to", "r", "s"])
def test_fixed_length_field(name: str) -> None:
    length = 20 if name == "to" else 32

    Transaction({name: b""})
    Transaction({name: b"\x00" * length})

    with pytest.raises(FieldLengthError, match=f"byte length of {length}"):
        Transaction({name: b"\x01" * (length - 1)})
    with pytest.raises(FieldLengthError):
        Transaction({name: b"\x01" * (length + 1)})


def test_to_is_not_stripped() -> None:
    tx = Transaction({"to": "0x" + "00" * 20})
    assert tx.to == b"\x00" * 20
    assert not tx.to_creation_address()


def test_aliases() -> None:
    tx = Transaction({"gas": 21000, "input": "0xabcd"})
    assert tx.gas_limit == b"\x52\x08"
    assert tx.data == b"\xab\xcd"


def test_canonical_name_wins_over_alias() -> None:
    tx = Transaction(
        {"gas_limit": 1, "gas": 2, "data": "0x01", "input": "0x02"}
    )
    assert tx.gas_limit == b"\x01"
    assert tx.data == b"\x01"


def test_snake_and_camel_case_names() -> None:
    camel = Transaction({"gasPrice": 7, "gasLimit": 8})
    snake = Transaction({"gas_price": 7, "gas_limit": 8})
    assert camel.raw == snake.raw


def test_list_input(legacy_tx_data: Dict[str, Any]) -> None:
    values = [legacy_tx_data[field.wire_name] for field in FIELDS]
    from_list = Transaction(values)
    from_dict = Transaction(legacy_tx_data)
    assert from_list.raw == from_dict.raw


def test_short_list_uses_defaults() -> None:
    tx = Transaction([1, 2, 3])
    assert tx.raw[:3] == [b"\x01", b"\x02", b"\x03"]
    assert tx.raw[3:] == [b"", b"", b"", b"\x1c", b"", b""]


def test_too_many_fields() -> None:
    with pytest.raises(FieldCountError):
        Transaction([b""] * 10)


def test_rlp_round_trip(legacy_tx_data: Dict[str, Any]) -> None:
    tx = Transaction(legacy_tx_data)
    encoded = tx.serialize()

    assert rlp.decode(encoded) == tx.raw
    assert Transaction(encoded).raw == tx.raw
    assert Transaction("0x" + encoded.hex()).raw == tx.raw
    assert Transaction(bytearray(encoded)) == tx


@pytest.mark.parametrize(
    "encoded",
    [
        b"",
        rlp.encode(b"not a list"),
        rlp.encode([b"\x01", [b"\x02"]]),
        rlp.encode([b""] * 10),
    ],
)
def test_invalid_rlp(encoded: bytes) -> None:
    with pytest.raises(InvalidFieldError):
        Transaction(encoded)


def test_rlp_fields_are_validated() -> None:
    encoded = rlp.encode([b"", b"", b"", b"\x01" * 19])
    with pytest.raises(FieldLengthError):
        Transaction(encoded)


def test_unsupported_input() -> None:
    with pytest.raises(InvalidFieldError):
        Transaction(12)  # type: ignore


def test_canonicalize_value_without_length() -> None:
    data_field = FIELDS[DATA]
    assert canonicalize_value(data_field, b"\x00" * 100) == b"\x00" * 100
