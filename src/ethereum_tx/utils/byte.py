"""
Utility Functions For Byte Strings
^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Byte specific utility functions used by transactions.
"""
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint


def strip_leading_zero_bytes(value: Bytes) -> Bytes:
    """
    Remove the zero bytes at the start of `value`.

    Parameters
    ----------
    value :
        The byte string to strip.

    Returns
    -------
    stripped_value: `ethereum_types.bytes.Bytes`
        `value` without leading zero bytes; all zero input gives `b""`.
    """
    return bytes(value).lstrip(b"\x00")


def int_to_bytes(value: int) -> Bytes:
    """
    Minimal big endian encoding of a non-negative integer; `0` encodes to
    `b""`.
    """
    return Uint(value).to_be_bytes()
