"""
Exceptions and messages raised by the integer Paillier cryptosystem.
"""

from __future__ import annotations

from enum import Enum
from typing import SupportsInt

ERR_LOW_BIT_SIZE = "Modulus bit size must be at least {minimum}, got {value}."
ERR_HIGH_BIT_SIZE = "Modulus bit size must be at most {maximum}, got {value}."
ERR_ODD_BIT_SIZE = "Modulus bit size should be even, got {value}."
ERR_INVALID_BIT_SIZE_TYPE = "Modulus bit size should be an integer, got {value!r}."
ERR_INVALID_MODULUS = "Modulus n should be a positive integer, got {value}."
ERR_INCONSISTENT_DERIVED_FIELD = (
    "Key field {field} should equal {expected} for modulus n, got {value}."
)
ERR_INVALID_PRIVATE_FIELD = (
    "Private key field {field} should be a positive integer, got {value}."
)

PLAINTEXT_NOT_IN_ZN = "Plaintext is not in Z_n"
MULTIPLICAND_NOT_IN_ZN = "Plaintext multiplicand is not in Z_n"
CIPHERTEXT_NOT_IN_ZSTAR = "Ciphertext is not in Z*_{n^2}"
CANNOT_DECRYPT = (
    "This instance of the cryptosystem cannot decrypt as it does not have a private key."
)

WARN_BIT_SIZE_MISMATCH = (
    "The given bit size {bit_size} differs from the bit length {bit_length} of modulus n."
)


class ResidueClass(Enum):
    """
    Residue classes that arguments of the cryptosystem are required to belong to.
    """

    ZN = "Z_n"
    ZSTAR_N = "Z*_n"
    ZSTAR_N_SQUARED = "Z*_{n^2}"


class PaillierError(Exception):
    """
    Base class of all errors raised by the integer Paillier cryptosystem.
    """


class ConfigurationError(PaillierError, ValueError):
    """
    Raised when key parameters are invalid, e.g. an unsupported modulus bit size.
    """

    def __init__(self, message: str, value: object = None) -> None:
        """
        :param message: Description of the configuration problem.
        :param value: The offending value.
        """
        super().__init__(message)
        self.value = value


class DomainError(PaillierError, ValueError):
    """
    Raised when an argument is not a member of the residue class an operation requires. No
    arithmetic is performed before this error is raised.
    """

    def __init__(
        self, reason: str, value: SupportsInt, residue_class: ResidueClass
    ) -> None:
        """
        :param reason: Short description of the failed check, e.g. `PLAINTEXT_NOT_IN_ZN`.
        :param value: The offending value.
        :param residue_class: Residue class the value was expected to belong to.
        """
        super().__init__(f"{reason}: {value}")
        self.reason = reason
        self.value = value
        self.residue_class = residue_class


class StateError(PaillierError, RuntimeError):
    """
    Raised when an operation requires key material that the cryptosystem does not hold.
    """

    def __init__(self, message: str = CANNOT_DECRYPT) -> None:
        super().__init__(message)
