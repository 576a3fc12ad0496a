"""
Transactions are atomic units of work created externally to Ethereum and
submitted to be executed. If Ethereum is viewed as a state machine,
transactions are the events that move between states.

This module models a single legacy transaction: its canonical fields, the
hash it is signed over (with or without [EIP-155] replay protection), the
signature over that hash, and the fee checks that decide whether the
transaction carries enough gas to be included at all.

A `Transaction` instance is not thread safe. Hashing for a signature may
briefly rewrite the signature fields, so concurrent calls on the same
instance must be serialized by the caller.

[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from ethereum_rlp import rlp
from ethereum_types.bytes import Bytes
from ethereum_types.numeric import Uint

from .chains import GAS_PRICES, ChainContext, default_chain_context
from .crypto.elliptic_curve import (
    EIP155_V_OFFSET,
    SECP256K1N_DIV_2,
    Address,
    ecrecover,
    public_key_to_address,
    secp256k1_sign,
)
from .crypto.hash import Hash32, rlp_hash
from .exceptions import (
    ChainIdMismatchError,
    ConfigurationConflictError,
    InvalidSignatureError,
)
from .fields import (
    DATA,
    FIELDS,
    GAS_LIMIT,
    GAS_PRICE,
    LEGACY_DEFAULT_V,
    NONCE,
    R,
    S,
    TO,
    V,
    VALUE,
    canonicalize,
    canonicalize_value,
)
from .utils.byte import int_to_bytes
from .utils.hexadecimal import bytes_to_hex

logger = logging.getLogger(__name__)

REPLAY_PROTECTION_HARDFORK = "spurious_dragon"
"""
First hardfork accepting [EIP-155] signatures.

[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

LOW_S_HARDFORK = "homestead"
"""
First hardfork rejecting signatures whose `s` is above half the curve
order, and charging for contract creation.
"""

EIP155_SIGN_OFFSET = 8
"""
Added to a `{27, 28}` recovery value, together with `chain_id * 2`, to give
the EIP-155 `v`.
"""

TransactionInput = Union[Bytes, bytearray, str, List[Any], Dict[str, Any]]


class Transaction:
    """
    An Ethereum legacy transaction.

    Parameters
    ----------
    data :
        The RLP encoding of the transaction (bytes or `0x` hex string), a
        list of its field values in order, or a mapping of field names to
        values. A mapping may also carry a `chainId`.
    chain :
        Name or id of a built-in chain the transaction belongs to.
    hardfork :
        Hardfork to apply the rules of, used together with `chain`.
    common :
        A ready made `ChainContext`. Cannot be combined with `chain`.
    """

    _raw: List[Bytes]
    _common: ChainContext
    _chain_id: int
    _sender_public_key: Optional[Bytes]
    _sender_address: Optional[Address]

    def __init__(
        self,
        data: Optional[TransactionInput] = None,
        chain: Optional[Union[str, int]] = None,
        hardfork: Optional[str] = None,
        common: Optional[ChainContext] = None,
    ) -> None:
        configured = chain is not None or common is not None

        if common is not None:
            if chain is not None:
                raise ConfigurationConflictError(
                    "Instantiation with both common and chain parameter "
                    "not allowed!"
                )
            self._common = common
        elif chain is not None or hardfork is not None:
            self._common = ChainContext(
                chain if chain is not None else "mainnet", hardfork
            )
        else:
            self._common = default_chain_context()

        if configured:
            v_default = int_to_bytes(self._common.chain_id())
        else:
            v_default = LEGACY_DEFAULT_V

        fields = canonicalize(data, v_default)
        self._raw = fields.raw
        self._sender_public_key = None
        self._sender_address = None

        if configured:
            self._chain_id = self._common.chain_id()
        else:
            derived = (self._v_int() - EIP155_V_OFFSET) // 2
            if derived < 0:
                derived = 0
            self._chain_id = derived or fields.chain_id or 0

        logger.debug("transaction bound to chain id %d", self._chain_id)

    #
    # Fields
    #

    @property
    def raw(self) -> List[Bytes]:
        """
        The nine canonical fields, in wire order.
        """
        return list(self._raw)

    @property
    def nonce(self) -> Bytes:
        """
        Number of transactions sent before this one by the sender.
        """
        return self._raw[NONCE]

    @property
    def gas_price(self) -> Bytes:
        """
        Price paid per unit of gas.
        """
        return self._raw[GAS_PRICE]

    @property
    def gas_limit(self) -> Bytes:
        """
        Maximum amount of gas the transaction may use.
        """
        return self._raw[GAS_LIMIT]

    @property
    def to(self) -> Bytes:
        """
        Recipient address; empty for contract creation.
        """
        return self._raw[TO]

    @property
    def value(self) -> Bytes:
        """
        Amount of wei transferred.
        """
        return self._raw[VALUE]

    @property
    def data(self) -> Bytes:
        """
        Call data, or init code for contract creation.
        """
        return self._raw[DATA]

    @property
    def v(self) -> Bytes:
        return self._raw[V]

    @property
    def r(self) -> Bytes:
        return self._raw[R]

    @property
    def s(self) -> Bytes:
        return self._raw[S]

    @property
    def common(self) -> ChainContext:
        """
        The chain context this transaction was created with.
        """
        return self._common

    def _v_int(self) -> int:
        return int.from_bytes(self._raw[V], "big")

    def get_chain_id(self) -> int:
        """
        Chain id resolved when the transaction was created.
        """
        return self._chain_id

    def to_creation_address(self) -> bool:
        """
        Whether the transaction creates a contract (its `to` is empty).
        """
        return len(self._raw[TO]) == 0

    #
    # Hashing and signatures
    #

    def _is_unsigned(self) -> bool:
        return len(self._raw[R]) == 0 and len(self._raw[S]) == 0

    def _uses_eip155_signing_hash(self) -> bool:
        if self._is_unsigned():
            return self._chain_id > 0

        v = self._v_int()
        chain_id_x2 = self._chain_id * 2
        return self._common.gte_hardfork(REPLAY_PROTECTION_HARDFORK) and (
            v == chain_id_x2 + EIP155_V_OFFSET
            or v == chain_id_x2 + EIP155_V_OFFSET + 1
        )

    @contextmanager
    def _eip155_signing_fields(self) -> Iterator[List[Bytes]]:
        """
        Temporarily replace `v` with the chain id and empty `r` and `s`.

        The original values are put back when the block exits, whether or
        not it raised.
        """
        saved = (self._raw[V], self._raw[R], self._raw[S])
        self._raw[V] = int_to_bytes(self._chain_id)
        self._raw[R] = b""
        self._raw[S] = b""
        try:
            yield self._raw
        finally:
            self._raw[V], self._raw[R], self._raw[S] = saved

    def hash(self, include_signature: bool = True) -> Hash32:
        """
        Compute the keccak256 hash of the RLP encoded transaction.

        With `include_signature` the hash covers all nine fields and
        identifies the signed transaction. Without it, the result is the
        hash that is signed: the six unsigned fields for legacy
        transactions or, following EIP-155, all nine fields with `v`
        replaced by the chain id and `r` and `s` emptied.

        Parameters
        ----------
        include_signature :
            Whether or not to include the signature.

        Returns
        -------
        hash : `ethereum_tx.crypto.hash.Hash32`
            Hash of the transaction.
        """
        if include_signature:
            return rlp_hash(self._raw)

        if self._uses_eip155_signing_hash():
            with self._eip155_signing_fields() as items:
                return rlp_hash(items)

        return rlp_hash(self._raw[:6])

    def sign(self, private_key: Bytes, chain_id: Optional[int] = None) -> None:
        """
        Sign the transaction with a 32 byte private key, overwriting `v`,
        `r` and `s`.

        The chain a transaction signs for is fixed at creation. Passing a
        `chain_id` that differs from it raises `ChainIdMismatchError`.
        """
        if chain_id is not None and chain_id != self._chain_id:
            raise ChainIdMismatchError(
                f"transaction is bound to chain id {self._chain_id}, "
                f"cannot sign for chain id {chain_id}"
            )

        msg_hash = self.hash(False)
        v, r, s = secp256k1_sign(msg_hash, private_key)

        v_int = int(v)
        if self._chain_id > 0:
            v_int += self._chain_id * 2 + EIP155_SIGN_OFFSET

        self._raw[V] = canonicalize_value(FIELDS[V], v_int)
        self._raw[R] = canonicalize_value(FIELDS[R], r)
        self._raw[S] = canonicalize_value(FIELDS[S], s)
        self._sender_public_key = None
        self._sender_address = None

    def verify_signature(self) -> bool:
        """
        Determine whether the signature is valid, remembering the recovered
        public key when it is.

        Never raises for a bad signature: a malformed or non canonical
        signature simply yields `False`.
        """
        msg_hash = self.hash(False)

        # All transaction signatures whose s-value is greater than
        # secp256k1n/2 are considered invalid.
        s = int.from_bytes(self._raw[S], "big")
        if self._common.gte_hardfork(LOW_S_HARDFORK) and s > int(
            SECP256K1N_DIV_2
        ):
            return False

        v = self._v_int()
        use_chain_id = v >= self._chain_id * 2 + EIP155_V_OFFSET and (
            self._common.gte_hardfork(REPLAY_PROTECTION_HARDFORK)
        )
        try:
            public_key = ecrecover(
                msg_hash,
                v,
                self._raw[R],
                self._raw[S],
                self._chain_id if use_chain_id else None,
            )
        except (InvalidSignatureError, ValueError) as e:
            logger.debug("signature recovery failed: %s", e)
            return False

        self._sender_public_key = public_key
        return True

    def get_sender_public_key(self) -> Bytes:
        """
        Public key of the signer.

        Raises
        ------
        InvalidSignatureError
            If the signature does not verify.
        """
        if not self.verify_signature():
            raise InvalidSignatureError("Invalid Signature")

        assert self._sender_public_key is not None
        return self._sender_public_key

    def get_sender_address(self) -> Address:
        """
        Address of the signer, derived once and then remembered until the
        transaction is signed again.

        Raises
        ------
        InvalidSignatureError
            If the signature does not verify.
        """
        if self._sender_address is not None:
            return self._sender_address

        public_key = self.get_sender_public_key()
        self._sender_address = public_key_to_address(public_key)
        return self._sender_address

    #
    # Fees and validation
    #

    def get_data_fee(self) -> Uint:
        """
        The amount of gas paid for the data in this transaction.
        """
        zero_cost = Uint(self._common.param(GAS_PRICES, "tx_data_zero"))
        non_zero_cost = Uint(
            self._common.param(GAS_PRICES, "tx_data_non_zero")
        )

        cost = Uint(0)
        for byte in self._raw[DATA]:
            if byte == 0:
                cost += zero_cost
            else:
                cost += non_zero_cost
        return cost

    def get_base_fee(self) -> Uint:
        """
        The minimum amount of gas the transaction must have: the data fee,
        the flat transaction fee and, for contract creation, the creation
        fee.
        """
        fee = self.get_data_fee() + Uint(self._common.param(GAS_PRICES, "tx"))
        if self._common.gte_hardfork(LOW_S_HARDFORK) and (
            self.to_creation_address()
        ):
            fee += Uint(self._common.param(GAS_PRICES, "tx_creation"))
        return fee

    def get_upfront_cost(self) -> Uint:
        """
        The amount of wei an account must hold for this transaction to be
        valid: `gas_limit * gas_price + value`.
        """
        gas_limit = Uint.from_be_bytes(self._raw[GAS_LIMIT])
        gas_price = Uint.from_be_bytes(self._raw[GAS_PRICE])
        value = Uint.from_be_bytes(self._raw[VALUE])
        return gas_limit * gas_price + value

    def validate(self, string_error: bool = False) -> Union[bool, str]:
        """
        Check the signature and that the gas limit covers the base fee.

        Parameters
        ----------
        string_error :
            Return the error messages instead of a boolean.

        Returns
        -------
        result : `Union[bool, str]`
            `True` if valid (or `False`), or with `string_error` the error
            messages joined by spaces (empty when valid).
        """
        errors = []
        if not self.verify_signature():
            errors.append("Invalid Signature")

        base_fee = self.get_base_fee()
        if base_fee > Uint.from_be_bytes(self._raw[GAS_LIMIT]):
            errors.append(f"gas limit is too low. Need at least {base_fee}")

        if not string_error:
            return len(errors) == 0
        return " ".join(errors)

    #
    # Presentation
    #

    def serialize(self) -> Bytes:
        """
        The RLP encoding of the transaction.
        """
        return rlp.encode(self._raw)

    def to_json(
        self, labels: bool = False
    ) -> Union[List[str], Dict[str, str]]:
        """
        The fields as `0x` prefixed hex strings, either as a list in wire
        order or, with `labels`, keyed by their JSON names.
        """
        if labels:
            return {
                field.wire_name: bytes_to_hex(value)
                for field, value in zip(FIELDS, self._raw)
            }
        return [bytes_to_hex(value) for value in self._raw]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self._raw == other._raw

    def __repr__(self) -> str:
        return f"Transaction({bytes_to_hex(self.serialize())})"
