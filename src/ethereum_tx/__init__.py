"""
Ethereum Transactions
^^^^^^^^^^^^^^^^^^^^^

A model of a single Ethereum legacy transaction: its canonical fields, the
hash it is signed over, [EIP-155] replay protection, signature recovery and
the fee checks that depend on the chain and hardfork it is sent on.

[EIP-155]: https://eips.ethereum.org/EIPS/eip-155
"""

from .chains import ChainContext, default_chain_context
from .transactions import Transaction

__version__ = "0.1.0"

__all__ = (
    "ChainContext",
    "Transaction",
    "default_chain_context",
)
