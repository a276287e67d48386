"""
Membership tests for the residue classes used by the Paillier cryptosystem.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from math import gcd
from typing import TYPE_CHECKING

from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    DomainError,
    ResidueClass,
)

if TYPE_CHECKING:
    from tno.mpc.encryption_schemes.paillier_integer.keys import PaillierPublicKey


@dataclass(frozen=True)
class ResidueValidator:
    r"""
    Pure predicates deciding membership of $\mathbb{Z}_n$ (signed), $\mathbb{Z}^*_n$ and
    $\mathbb{Z}^*_{n^2}$ for a fixed modulus $n$.

    :param n: Modulus $n$ of the plaintext space.
    :param n_squared: Modulus $n^2$ of the ciphertext space.
    :param half_n: Bound $\lfloor n/2 \rfloor$ of the signed plaintext space.
    """

    n: int
    n_squared: int
    half_n: int

    @classmethod
    def from_public_key(cls, public_key: PaillierPublicKey) -> ResidueValidator:
        """
        Construct a validator for the modulus of the given public key.

        :param public_key: Public key providing $n$, $n^2$ and $n/2$.
        :return: ResidueValidator for that key.
        """
        return cls(
            n=public_key.n, n_squared=public_key.n_squared, half_n=public_key.half_n
        )

    def in_zn(self, value: int) -> bool:
        r"""
        Signed plaintext range check, $|x| < n/2$.

        :param value: Value $x$ to test.
        :return: True if the value is a valid signed plaintext.
        """
        return abs(value) < self.half_n

    def in_zstar_n(self, value: int) -> bool:
        r"""
        Test $0 < x < n$ and $\gcd(x, n) = 1$.

        :param value: Value $x$ to test.
        :return: True if the value is a unit modulo $n$.
        """
        return 0 < value < self.n and gcd(value, self.n) == 1

    def in_zstar_n_squared(self, value: int) -> bool:
        r"""
        Test $0 < x < n^2$ and $\gcd(x, n^2) = 1$.

        :param value: Value $x$ to test.
        :return: True if the value is a unit modulo $n^2$, i.e. a valid ciphertext.
        """
        return 0 < value < self.n_squared and gcd(value, self.n_squared) == 1

    def check_zn(self, value: int, reason: str) -> None:
        """
        Ensure that the value is an integer in the signed plaintext range.

        :param value: Value to check.
        :param reason: Reason reported when the check fails.
        :raise TypeError: When the value is not an integer.
        :raise DomainError: When the value is out of range.
        """
        _check_integral(value)
        if not self.in_zn(value):
            raise DomainError(reason, value, ResidueClass.ZN)

    def check_zstar_n_squared(self, value: int, reason: str) -> None:
        """
        Ensure that the value is a unit modulo $n^2$.

        :param value: Value to check.
        :param reason: Reason reported when the check fails.
        :raise TypeError: When the value is not an integer.
        :raise DomainError: When the value is not a unit modulo $n^2$.
        """
        _check_integral(value)
        if not self.in_zstar_n_squared(value):
            raise DomainError(reason, value, ResidueClass.ZSTAR_N_SQUARED)


def _check_integral(value: object) -> None:
    # gmpy2.mpz is registered as a virtual subclass of numbers.Integral
    if not isinstance(value, numbers.Integral) or isinstance(value, bool):
        raise TypeError(f"Expected an integer, not {type(value)}.")
