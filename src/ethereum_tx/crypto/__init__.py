"""
Cryptographic primitives used by transactions.
"""

from .hash import Hash32, keccak256

__all__ = ("Hash32", "keccak256")
