"""
Error types raised while building, signing and checking transactions.
"""


class EthereumException(Exception):
    """
    Base class for all exceptions _expected_ to be thrown during normal
    operation.
    """


class ConfigurationError(EthereumException):
    """
    Thrown when the chain or hardfork configuration cannot be resolved.
    """


class ConfigurationConflictError(ConfigurationError):
    """
    Thrown when both a chain name and a chain context are supplied to a
    transaction.
    """


class UnknownChainError(ConfigurationError):
    """
    Thrown when a chain is requested by a name or id that is not known.
    """


class UnknownHardforkError(ConfigurationError):
    """
    Thrown when a hardfork name is not part of the hardfork ordering.
    """


class InvalidTransaction(EthereumException):
    """
    Thrown when a transaction being processed is found to be invalid.
    """


class InvalidFieldError(InvalidTransaction):
    """
    Thrown when a transaction field value cannot be converted to bytes, or
    when the input does not have the shape of a transaction.
    """


class FieldLengthError(InvalidFieldError):
    """
    Thrown when a field value is longer (or, for fixed size fields, of a
    different length) than the field allows.
    """


class FieldCountError(InvalidFieldError):
    """
    Thrown when an ordered field list holds more values than a transaction
    has fields.
    """


class InvalidSignatureError(InvalidTransaction):
    """
    Thrown when a transaction has an invalid signature.
    """


class ChainIdMismatchError(InvalidTransaction):
    """
    Thrown when a transaction is asked to sign for a chain other than the
    one it was bound to at construction.
    """
