"""
Transaction Fields
^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

A legacy transaction is, on the wire, a list of nine byte strings. This
module describes those fields and turns the supported input shapes (an RLP
encoding, an ordered list of values, or a mapping of named values) into
their canonical byte representation.

Integer-like fields are stored in minimal big endian form: leading zero
bytes are stripped and zero is the empty string. `to`, `r` and `s` keep a
fixed width, except that they may be empty.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from functools import singledispatch
from typing import (
    Any,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from ethereum_rlp import rlp
from ethereum_rlp.exceptions import DecodingError
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import FixedUnsigned, Uint

from .exceptions import FieldCountError, FieldLengthError, InvalidFieldError
from .utils.byte import int_to_bytes, strip_leading_zero_bytes
from .utils.hexadecimal import has_hex_prefix, hex_to_bytes

FieldValue = Union[Bytes, bytearray, str, int, Uint, FixedUnsigned, None]


@dataclass(frozen=True)
class Field:
    """
    Declaration of a single transaction field.
    """

    name: str
    """
    Python attribute name.
    """

    wire_name: str
    """
    Name used in JSON representations.
    """

    length: Optional[int] = None
    """
    Maximum (with `allow_less`) or exact byte length. `None` means any.
    """

    allow_less: bool = False
    """
    Shorter values are accepted and stored without leading zeros.
    """

    allow_zero: bool = False
    """
    An empty or single zero byte value is meaningful and kept as is.
    """

    alias: Optional[str] = None


FIELDS: Tuple[Field, ...] = (
    Field("nonce", "nonce", length=32, allow_less=True),
    Field("gas_price", "gasPrice", length=32, allow_less=True),
    Field("gas_limit", "gasLimit", length=32, allow_less=True, alias="gas"),
    Field("to", "to", length=20, allow_zero=True),
    Field("value", "value", length=32, allow_less=True),
    Field("data", "data", allow_zero=True, alias="input"),
    Field("v", "v", allow_zero=True),
    Field("r", "r", length=32, allow_zero=True),
    Field("s", "s", length=32, allow_zero=True),
)

NONCE, GAS_PRICE, GAS_LIMIT, TO, VALUE, DATA, V, R, S = range(len(FIELDS))

LEGACY_DEFAULT_V = b"\x1c"
"""
`v` used when neither a `v` value nor a chain configuration is supplied.
"""


class CanonicalFields(NamedTuple):
    """
    Result of canonicalizing a transaction input.
    """

    raw: List[Bytes]
    chain_id: Optional[int]
    """
    The `chainId` carried by a mapping input, if any.
    """


def to_bytes(value: FieldValue) -> Bytes:
    """
    Convert a single field value to bytes.

    Accepts bytes, `0x` prefixed hex strings, non-negative integers and
    `None` (which becomes the empty string).
    """
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if not has_hex_prefix(value):
            raise InvalidFieldError(
                f"cannot convert string {value!r} to bytes, "
                "it is missing the 0x prefix"
            )
        try:
            return hex_to_bytes(value)
        except ValueError as e:
            raise InvalidFieldError(f"invalid hex string {value!r}") from e
    if isinstance(value, bool):
        raise InvalidFieldError("cannot convert a bool to bytes")
    if isinstance(value, (Uint, FixedUnsigned)):
        return value.to_be_bytes()
    if isinstance(value, int):
        if value < 0:
            raise InvalidFieldError("cannot convert negative integer to bytes")
        return int_to_bytes(value)
    raise InvalidFieldError(
        f"cannot convert value of type {type(value).__name__} to bytes"
    )


def canonicalize_value(field: Field, value: FieldValue) -> Bytes:
    """
    Convert `value` to the canonical bytes of `field`, checking its length.

    Raises
    ------
    FieldLengthError
        If the value does not fit the field.
    """
    result = to_bytes(value)

    # Numeric zero is a single zero byte, kept only where zero is allowed.
    if (
        isinstance(value, (int, Uint, FixedUnsigned))
        and not isinstance(value, bool)
        and value == 0
    ):
        result = b"\x00"

    if result == b"\x00" and not field.allow_zero:
        result = b""

    if field.length is None:
        return result

    if field.allow_less:
        result = strip_leading_zero_bytes(result)
        if len(result) > field.length:
            raise FieldLengthError(
                f"The field {field.name} must not have more than "
                f"{field.length} bytes"
            )
    elif not (field.allow_zero and len(result) == 0):
        if len(result) != field.length:
            raise FieldLengthError(
                f"The field {field.name} must have byte length of "
                f"{field.length}"
            )

    return result


def default_raw(v_default: Bytes) -> List[Bytes]:
    """
    Field values of a transaction built from no input.
    """
    raw = [b""] * len(FIELDS)
    raw[V] = v_default
    return raw


@singledispatch
def canonicalize(data: Any, v_default: Bytes) -> CanonicalFields:
    """
    Turn a transaction input into its nine canonical fields.

    `data` is one of: the RLP encoding of the transaction (as bytes or a
    `0x` hex string), an ordered list of up to nine field values, or a
    mapping of field names to values. `v_default` is used when the input
    does not set `v`.
    """
    raise InvalidFieldError(
        f"cannot build a transaction from {type(data).__name__}"
    )


@canonicalize.register(type(None))
def _canonicalize_none(data: None, v_default: Bytes) -> CanonicalFields:
    return CanonicalFields(default_raw(v_default), None)


@canonicalize.register(bytes)
@canonicalize.register(bytearray)
def _canonicalize_rlp(data: Bytes, v_default: Bytes) -> CanonicalFields:
    try:
        decoded = rlp.decode(bytes(data))
    except DecodingError as e:
        raise InvalidFieldError("invalid RLP encoding of transaction") from e

    if isinstance(decoded, bytes):
        raise InvalidFieldError("transaction RLP must encode a list")
    for item in decoded:
        if not isinstance(item, bytes):
            raise InvalidFieldError("transaction fields must be byte strings")

    return _canonicalize_sequence(list(decoded), v_default)


@canonicalize.register(str)
def _canonicalize_hex(data: str, v_default: Bytes) -> CanonicalFields:
    return _canonicalize_rlp(to_bytes(data), v_default)


@canonicalize.register(list)
@canonicalize.register(tuple)
def _canonicalize_sequence(
    data: Sequence[FieldValue], v_default: Bytes
) -> CanonicalFields:
    if len(data) > len(FIELDS):
        raise FieldCountError(
            f"wrong number of fields in data: expected at most "
            f"{len(FIELDS)}, got {len(data)}"
        )

    raw = default_raw(v_default)
    for index, value in enumerate(data):
        raw[index] = canonicalize_value(FIELDS[index], value)
    return CanonicalFields(raw, None)


@canonicalize.register(Mapping)
def _canonicalize_mapping(
    data: Mapping[str, Any], v_default: Bytes
) -> CanonicalFields:
    raw = default_raw(v_default)
    for index, field in enumerate(FIELDS):
        for key in (field.name, field.wire_name, field.alias):
            if key is not None and data.get(key) is not None:
                raw[index] = canonicalize_value(field, data[key])
                break

    chain_id = data.get("chainId", data.get("chain_id"))
    if chain_id is not None:
        chain_id = int.from_bytes(to_bytes(chain_id), "big")

    return CanonicalFields(raw, chain_id)
