"""
Key material of the integer Paillier cryptosystem and its generation.
"""

from __future__ import annotations

import hashlib
import numbers
import typing
import warnings
from dataclasses import asdict, dataclass
from functools import lru_cache
from math import gcd, lcm
from typing import Any

from tno.mpc.encryption_schemes.templates import (
    EncryptionSchemeWarning,
    PublicKey,
    SecretKey,
    SerializationError,
)
from tno.mpc.encryption_schemes.utils import mod_inv, randprime

from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    ERR_HIGH_BIT_SIZE,
    ERR_INCONSISTENT_DERIVED_FIELD,
    ERR_INVALID_BIT_SIZE_TYPE,
    ERR_INVALID_MODULUS,
    ERR_INVALID_PRIVATE_FIELD,
    ERR_LOW_BIT_SIZE,
    ERR_ODD_BIT_SIZE,
    WARN_BIT_SIZE_MISMATCH,
    ConfigurationError,
)

# Check to see if the communication module is available
try:
    from tno.mpc.communication import RepetitionError, Serializer
    from tno.mpc.communication.packers import DeserializerOpts, SerializerOpts

    COMMUNICATION_INSTALLED = True
except ModuleNotFoundError:
    COMMUNICATION_INSTALLED = False
except ImportError as exc:
    raise ImportError(
        "Detected an incompatible version of 'tno.mpc.communication'. Please install this package with the extra 'communication', e.g. 'tno.mpc.encryption_schemes.paillier_integer[communication]'."
    ) from exc

MIN_BIT_SIZE = 8
"""Minimum bit length of the modulus $n$."""
MAX_BIT_SIZE = 8192
"""Maximum bit length of the modulus $n$, bounded for performance reasons."""


def check_bit_size(bit_size: int) -> None:
    """
    Validate a requested modulus bit size.

    :param bit_size: Requested bit length of the modulus $n$.
    :raise ConfigurationError: When the bit size is not an even integer in
        [MIN_BIT_SIZE, MAX_BIT_SIZE].
    """
    if not isinstance(bit_size, numbers.Integral) or isinstance(bit_size, bool):
        raise ConfigurationError(
            ERR_INVALID_BIT_SIZE_TYPE.format(value=bit_size), bit_size
        )
    if bit_size < MIN_BIT_SIZE:
        raise ConfigurationError(
            ERR_LOW_BIT_SIZE.format(minimum=MIN_BIT_SIZE, value=bit_size), bit_size
        )
    if bit_size > MAX_BIT_SIZE:
        raise ConfigurationError(
            ERR_HIGH_BIT_SIZE.format(maximum=MAX_BIT_SIZE, value=bit_size), bit_size
        )
    if bit_size % 2 != 0:
        raise ConfigurationError(ERR_ODD_BIT_SIZE.format(value=bit_size), bit_size)


def func_l(input_x: int, n: int) -> int:
    r"""
    Paillier specific $L(\cdot)$ function: $L(x) = (x-1)/n$.

    :param input_x: input $x$
    :param n: input $n$ (public key modulus)
    :return: value of $L(x) = (x-1)/n$.
    """
    return (input_x - 1) // n


@dataclass(frozen=True, eq=True)
class PaillierPublicKey(PublicKey):
    r"""
    PublicKey for the Paillier encryption scheme with $g = n + 1$.

    Holds the modulus $n = pq$ together with the derived constants that every operation needs.
    Use `from_fields` to reconstruct a key from externally supplied values, it recomputes the
    derived constants that are missing.

    :param n: Modulus $n$ of the plaintext space.
    :param bit_size: Bit size the key was generated for.
    :param half_n: Bound $\lfloor n/2 \rfloor$ of the signed plaintext space.
    :param n_squared: Modulus $n^2$ of the ciphertext space.
    :raise ConfigurationError: When the fields are inconsistent.
    """

    n: int
    bit_size: int
    half_n: int
    n_squared: int

    def __post_init__(self) -> None:
        if not isinstance(self.n, numbers.Integral) or self.n <= 0:
            raise ConfigurationError(ERR_INVALID_MODULUS.format(value=self.n), self.n)
        check_bit_size(self.bit_size)
        for field, expected, value in (
            ("half_n", self.n // 2, self.half_n),
            ("n_squared", self.n * self.n, self.n_squared),
        ):
            if value != expected:
                raise ConfigurationError(
                    ERR_INCONSISTENT_DERIVED_FIELD.format(
                        field=field, expected=expected, value=value
                    ),
                    value,
                )

    @classmethod
    def from_fields(
        cls,
        n: int,
        bit_size: int,
        half_n: int | None = None,
        n_squared: int | None = None,
    ) -> PaillierPublicKey:
        """
        Reconstruct a public key from its fields, recomputing the derived fields that are not
        given.

        :param n: Modulus $n$.
        :param bit_size: Bit size of the key.
        :param half_n: Optional precomputed $n/2$.
        :param n_squared: Optional precomputed $n^2$.
        :raise ConfigurationError: When the fields are inconsistent.
        :return: The reconstructed PaillierPublicKey.
        """
        if (
            isinstance(n, numbers.Integral)
            and isinstance(bit_size, numbers.Integral)
            and n.bit_length() != bit_size
        ):
            warnings.warn(
                EncryptionSchemeWarning(
                    WARN_BIT_SIZE_MISMATCH.format(
                        bit_size=bit_size, bit_length=n.bit_length()
                    )
                ),
                stacklevel=2,
            )
        return cls(
            n=n,
            bit_size=bit_size,
            half_n=n // 2 if half_n is None else half_n,
            n_squared=n * n if n_squared is None else n_squared,
        )

    @lru_cache
    def id(self) -> int:
        """
        Identifier of this specific key that is consistent over system architectures.

        :return: Representation of SHA-256 hash of object-defining attribute values.
        """
        # We use hashlib to ensure consistent hashes over different system architectures.
        h = hashlib.sha256()
        h.update(_to_bytes(self.n))
        h.update(_to_bytes(self.bit_size))
        return int.from_bytes(h.digest(), "big")

    # region Serialization logic

    def serialize(self, _opts: SerializerOpts) -> dict[str, Any]:
        r"""
        Serialization function for public keys, which will be passed to the communication module.

        :raise SerializationError: When communication library is not installed.
        :return: Serialized version of this PaillierPublicKey.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        return asdict(self)

    @staticmethod
    def deserialize(obj: dict[str, Any], _opts: DeserializerOpts) -> PaillierPublicKey:
        r"""
        Deserialization function for public keys, which will be passed to the communication module.

        :param obj: Serialized version of a PaillierPublicKey.
        :raise SerializationError: When communication library is not installed.
        :return: Deserialized PaillierPublicKey from the given dict.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        return PaillierPublicKey(**obj)

    # endregion


@dataclass(frozen=True, eq=True)
class PaillierPrivateKey(SecretKey):
    r"""
    Private key for the Paillier encryption scheme.

    Embeds the PaillierPublicKey it belongs to, together with $\lambda = \text{lcm}(p-1, q-1)$
    and $\mu = L(1 + n\lambda \mod n^2)^{-1} \mod n$, where $L(x) = (x-1)/n$.

    :param public_key: Public key that belongs to this private key.
    :param lambda_: Decryption exponent $\lambda$ of the ciphertext.
    :param mu: Decryption normalization constant $\mu$.
    :raise ConfigurationError: When $\lambda$ or $\mu$ is not a positive integer.
    """

    public_key: PaillierPublicKey
    lambda_: int
    mu: int

    def __post_init__(self) -> None:
        for field, value in (("lambda_", self.lambda_), ("mu", self.mu)):
            if not isinstance(value, numbers.Integral) or value <= 0:
                raise ConfigurationError(
                    ERR_INVALID_PRIVATE_FIELD.format(field=field, value=value), value
                )

    @property
    def n(self) -> int:
        """
        Modulus of the plaintext space.
        """
        return self.public_key.n

    @property
    def half_n(self) -> int:
        """
        Bound of the signed plaintext space.
        """
        return self.public_key.half_n

    @property
    def n_squared(self) -> int:
        """
        Modulus of the ciphertext space.
        """
        return self.public_key.n_squared

    @property
    def bit_size(self) -> int:
        """
        Bit size of the key.
        """
        return self.public_key.bit_size

    # region Serialization logic

    def serialize(self, _opts: SerializerOpts) -> dict[str, Any]:
        r"""
        Serialization function for private keys, which will be passed to the communication module.

        :raise SerializationError: When communication library is not installed.
        :return: Serialized version of this PaillierPrivateKey.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        return {
            "public_key": self.public_key,
            "lambda_": self.lambda_,
            "mu": self.mu,
        }

    @staticmethod
    def deserialize(obj: dict[str, Any], _opts: DeserializerOpts) -> PaillierPrivateKey:
        r"""
        Deserialization function for private keys, which will be passed to the communication
        module.

        :param obj: Serialized version of a PaillierPrivateKey.
        :raise SerializationError: When communication library is not installed.
        :return: Deserialized PaillierPrivateKey from the given dict.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        return PaillierPrivateKey(**obj)

    # endregion


def generate_key_material(
    bit_size: int,
) -> tuple[PaillierPublicKey, PaillierPrivateKey]:
    r"""
    Method to generate key material (PaillierPublicKey and PaillierPrivateKey).

    Primes $p$ and $q$ of bit_size/2 bits are sampled until they are distinct, satisfy
    $\gcd(pq, (p-1)(q-1)) = 1$ and their product has exactly bit_size bits. The sampling loops
    have no iteration cap. Every attempt succeeds with a probability that is bounded away from
    zero, so the chance of not terminating vanishes exponentially in the number of attempts.

    :param bit_size: Bit length of the public key $n$.
    :raise ConfigurationError: When the bit size is not an even integer in
        [MIN_BIT_SIZE, MAX_BIT_SIZE].
    :raise ZeroDivisionError: When $L(1 + n\lambda)$ has no inverse modulo $n$, which does not
        happen for properly generated primes.
    :return: Tuple with first the Public Key and then the Private Key.
    """
    check_bit_size(bit_size)
    lower = 2 ** (bit_size // 2 - 1)
    upper = 2 ** (bit_size // 2)

    n = 0
    while n.bit_length() != bit_size:
        p = randprime(lower, upper)
        q = randprime(lower, upper)
        while q == p or gcd(p * q, (p - 1) * (q - 1)) != 1:
            q = randprime(lower, upper)
        n = p * q

    n_squared = n * n
    lambda_ = lcm(p - 1, q - 1)
    l_value = func_l((1 + n * lambda_) % n_squared, n)
    # the pure-python inverse may be negative
    mu = mod_inv(l_value, n) % n

    public_key = PaillierPublicKey(
        n=n, bit_size=bit_size, half_n=n // 2, n_squared=n_squared
    )
    return public_key, PaillierPrivateKey(public_key=public_key, lambda_=lambda_, mu=mu)


def _to_bytes(n: typing.SupportsInt) -> bytes:
    """
    Unidirectional conversion from numbers.Integral to bytes.

    :param n: Integer to convert.
    :return: Byte representation of provided input.
    """
    from tno.mpc.encryption_schemes.utils import USE_GMPY2

    if USE_GMPY2:
        import gmpy2

        if isinstance(n, gmpy2.mpz):
            return gmpy2.to_binary(n)
    n_int = int(n)
    return n_int.to_bytes(n_int.bit_length() // 8 + 1, "little")


if COMMUNICATION_INSTALLED:
    try:
        Serializer.register_class(PaillierPublicKey)
        Serializer.register_class(PaillierPrivateKey)
    except RepetitionError:
        pass
