from typing import Any, Dict

import pytest

from ethereum_tx.utils.hexadecimal import hex_to_bytes

# Example from EIP-155.
EIP155_PRIVATE_KEY = hex_to_bytes(
    "0x4646464646464646464646464646464646464646464646464646464646464646"
)
EIP155_SENDER = hex_to_bytes("0x9d8a62f656a8d1615c1294fd71e9cfb3e4855a4f")
EIP155_SIGNING_DATA = hex_to_bytes(
    "0xec098504a817c800825208943535353535353535353535353535353535353535"
    "880de0b6b3a764000080018080"
)
EIP155_SIGNING_HASH = hex_to_bytes(
    "0xdaf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
)
EIP155_SIGNED_TX = hex_to_bytes(
    "0xf86c098504a817c800825208943535353535353535353535353535353535353535"
    "880de0b6b3a76400008025a028ef61340bd939bc2195fe537567866003e1a15d3c71"
    "ff63e1590620aa636276a067cbe9d8997f761aecb703304b3800ccf555c9f3dc6421"
    "4b297fb1966a3b6d83"
)


@pytest.fixture
def eip155_private_key() -> bytes:
    return EIP155_PRIVATE_KEY


@pytest.fixture
def eip155_sender() -> bytes:
    return EIP155_SENDER


@pytest.fixture
def eip155_tx_data() -> Dict[str, Any]:
    return {
        "nonce": 9,
        "gasPrice": 20 * 10**9,
        "gasLimit": 21000,
        "to": "0x3535353535353535353535353535353535353535",
        "value": 10**18,
        "data": b"",
    }


@pytest.fixture
def legacy_tx_data() -> Dict[str, Any]:
    return {
        "nonce": "0x00",
        "gasPrice": "0x09184e72a000",
        "gasLimit": "0x2710",
        "to": "0x0000000000000000000000000000000000000000",
        "value": "0x00",
        "data": "0x7f74657374320000000000000000000000000000000000000000"
        "00000000000000600057",
        "v": "0x1c",
        "r": "0x5e1d3a76fbf824220eafc8c79ad578ad2b67d01b0c2425eb1f1347e8f508"
        "82ab",
        "s": "0x5bd428537f05f9830e93792f90ea6a3e2d1ee84952dd96edbae9f658f831"
        "ab13",
    }


@pytest.fixture
def eip155_signing_data() -> bytes:
    return EIP155_SIGNING_DATA


@pytest.fixture
def eip155_signing_hash() -> bytes:
    return EIP155_SIGNING_HASH


@pytest.fixture
def eip155_signed_tx() -> bytes:
    return EIP155_SIGNED_TX
