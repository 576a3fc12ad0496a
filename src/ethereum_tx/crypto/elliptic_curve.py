"""
Elliptic Curves
^^^^^^^^^^^^^^^

ECDSA over secp256k1: signing, public key recovery and address derivation.
"""

from typing import Optional, Tuple

import coincurve
from ethereum_types.bytes import Bytes, Bytes20, Bytes32
from ethereum_types.numeric import U256

from ethereum_tx.exceptions import InvalidSignatureError

from .hash import Hash32, keccak256

SECP256K1B = U256(7)
SECP256K1P = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
)
SECP256K1N = U256(
    0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
)
SECP256K1N_DIV_2 = SECP256K1N // U256(2)
"""
Largest `s` value a canonical (low-s) signature may carry.
"""

LEGACY_V_OFFSET = 27
"""
Offset added to the recovery id in pre EIP-155 signatures.
"""

EIP155_V_OFFSET = 35
"""
Offset added to `chain_id * 2 + recovery_id` in EIP-155 signatures.
"""

Address = Bytes20


def secp256k1_sign(
    msg_hash: Hash32, private_key: Bytes
) -> Tuple[U256, Bytes32, Bytes32]:
    """
    Signs a message hash with the given secret key.

    Parameters
    ----------
    msg_hash :
        Hash of the message being signed.
    private_key :
        The 32 byte secret key.

    Returns
    -------
    signature : `Tuple[U256, Bytes32, Bytes32]`
        The `(v, r, s)` triple, with `v` in the legacy `{27, 28}` form.
    """
    if len(private_key) != 32:
        raise ValueError("private key must be 32 bytes long")

    key = coincurve.PrivateKey(bytes(private_key))
    signature = key.sign_recoverable(msg_hash, hasher=None)

    return (
        U256(signature[64] + LEGACY_V_OFFSET),
        Bytes32(signature[0:32]),
        Bytes32(signature[32:64]),
    )


def secp256k1_recover(r: U256, s: U256, v: U256, msg_hash: Hash32) -> Bytes:
    """
    Recovers the public key from a given signature.

    Parameters
    ----------
    r :
        The `r` component of the signature.
    s :
        The `s` component of the signature.
    v :
        The recovery id, either `0` or `1`.
    msg_hash :
        Hash of the message being recovered.

    Returns
    -------
    public_key : `ethereum_types.bytes.Bytes`
        Recovered public key, 64 bytes without the `0x04` prefix.
    """
    p = int(SECP256K1P)
    is_square = pow(pow(int(r), 3, p) + int(SECP256K1B), (p - 1) // 2, p)

    if is_square != 1:
        raise InvalidSignatureError(
            "r is not the x-coordinate of a point on the secp256k1 curve"
        )

    r_bytes = r.to_be_bytes32()
    s_bytes = s.to_be_bytes32()

    signature = bytearray([0] * 65)
    signature[32 - len(r_bytes) : 32] = r_bytes
    signature[64 - len(s_bytes) : 64] = s_bytes
    signature[64] = int(v)

    # If the recovery algorithm returns the point at infinity,
    # the signature is considered invalid
    # the below function will raise a ValueError.
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            bytes(signature), msg_hash, hasher=None
        )
    except ValueError as e:
        raise InvalidSignatureError from e

    public_key = public_key.format(compressed=False)[1:]
    return public_key


def ecrecover(
    msg_hash: Hash32,
    v: int,
    r: Bytes,
    s: Bytes,
    chain_id: Optional[int] = None,
) -> Bytes:
    """
    Recovers the public key of the signer of `msg_hash`.

    When `chain_id` is given (and non-zero), `v` is read as an EIP-155
    value `chain_id * 2 + 35 + recovery_id`, otherwise as the legacy
    `27 + recovery_id`.

    Parameters
    ----------
    msg_hash :
        Hash that was signed.
    v :
        The `v` component of the signature.
    r :
        The `r` component, at most 32 bytes.
    s :
        The `s` component, at most 32 bytes.
    chain_id :
        Chain id the signature is bound to, if any.

    Returns
    -------
    public_key : `ethereum_types.bytes.Bytes`
        Recovered public key, 64 bytes without the `0x04` prefix.

    Raises
    ------
    InvalidSignatureError
        If the signature values cannot produce a public key.
    """
    if chain_id:
        recovery_id = v - (chain_id * 2 + EIP155_V_OFFSET)
    else:
        recovery_id = v - LEGACY_V_OFFSET

    if recovery_id not in (0, 1):
        raise InvalidSignatureError("Invalid signature v value")
    if len(r) > 32 or len(s) > 32:
        raise InvalidSignatureError("r and s must be at most 32 bytes")

    return secp256k1_recover(
        U256.from_be_bytes(r),
        U256.from_be_bytes(s),
        U256(recovery_id),
        msg_hash,
    )


def private_key_to_public_key(private_key: Bytes) -> Bytes:
    """
    Derives the uncompressed public key (without the `0x04` prefix) of a
    secret key.
    """
    if len(private_key) != 32:
        raise ValueError("private key must be 32 bytes long")
    key = coincurve.PrivateKey(bytes(private_key))
    return key.public_key.format(compressed=False)[1:]


def public_key_to_address(public_key: Bytes) -> Address:
    """
    Computes the address belonging to a 64 byte public key.

    Parameters
    ----------
    public_key :
        Uncompressed public key without the `0x04` prefix.

    Returns
    -------
    address : `Address`
        The last 20 bytes of the keccak256 hash of the public key.
    """
    if len(public_key) != 64:
        raise ValueError("public key must be 64 bytes long")
    return Address(keccak256(public_key)[12:32])
