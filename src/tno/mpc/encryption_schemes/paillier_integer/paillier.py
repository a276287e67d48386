"""
Implementation of the optimized ($g = n + 1$) Paillier cryptosystem on plain integers.
"""

from __future__ import annotations

import sys
from secrets import SystemRandom
from typing import Protocol, TypedDict

from tno.mpc.encryption_schemes.templates import SerializationError
from tno.mpc.encryption_schemes.utils import pow_mod

from tno.mpc.encryption_schemes.paillier_integer.exceptions import (
    CIPHERTEXT_NOT_IN_ZSTAR,
    MULTIPLICAND_NOT_IN_ZN,
    PLAINTEXT_NOT_IN_ZN,
    ConfigurationError,
    StateError,
)
from tno.mpc.encryption_schemes.paillier_integer.keys import (
    COMMUNICATION_INSTALLED,
    PaillierPrivateKey,
    PaillierPublicKey,
    func_l,
    generate_key_material,
)
from tno.mpc.encryption_schemes.paillier_integer.residues import ResidueValidator

if sys.version_info < (3, 11):
    from typing_extensions import NotRequired
else:
    from typing import NotRequired

if COMMUNICATION_INSTALLED:
    from tno.mpc.communication import RepetitionError, Serializer
    from tno.mpc.communication.packers import DeserializerOpts, SerializerOpts


class RandomSource(Protocol):
    """
    Source of uniformly random bits, e.g. `secrets.SystemRandom` or, for testing,
    `random.Random`.
    """

    def getrandbits(self, k: int, /) -> int:
        """
        Return a non-negative integer with k random bits.

        :param k: Number of random bits.
        :return: Random integer in [0, 2^k).
        """


class PaillierCryptosystem:
    r"""
    Paillier cryptosystem with generator $g = n + 1$ that operates on plain integers.

    An instance always holds a public key and can therefore encrypt, add ciphertexts and
    multiply a ciphertext with a plaintext scalar. Only an instance that also holds a private
    key can decrypt. Which of the two applies is fixed at construction.

    Plaintexts are signed integers $x$ with $|x| < n/2$. Ciphertexts are integers in
    $\mathbb{Z}^*_{n^2}$. Every argument is validated before any arithmetic is performed.
    """

    def __init__(
        self,
        public_key: PaillierPublicKey,
        private_key: PaillierPrivateKey | None = None,
        random_source: RandomSource | None = None,
        share_private_key: bool = False,
    ):
        """
        Construct a new Paillier cryptosystem with the given key material.

        :param public_key: Public key for this cryptosystem.
        :param private_key: Private key for this cryptosystem, None for an encrypt-only
            instance.
        :param random_source: Source of randomness for the blinding factors. Defaults to a
            cryptographically secure source. Must be safe for concurrent use if the
            cryptosystem is shared between threads.
        :param share_private_key: Boolean value stating whether or not the private key should be
            included in serialization. This should only be set to True if one is really sure of it.
        :raise ConfigurationError: When the private key does not belong to the public key.
        """
        if private_key is not None and private_key.public_key != public_key:
            raise ConfigurationError(
                "The private key does not belong to the given public key.", private_key
            )
        self._public_key = public_key
        self._private_key = private_key
        self._random_source: RandomSource = (
            SystemRandom() if random_source is None else random_source
        )
        self._validator = ResidueValidator.from_public_key(public_key)
        self.share_private_key = share_private_key

    @classmethod
    def generate(
        cls, bit_size: int, random_source: RandomSource | None = None
    ) -> PaillierCryptosystem:
        """
        Generate fresh key material and construct a cryptosystem that can decrypt.

        The random source only drives the blinding factors of later encryptions. The primes are
        sampled by the randprime routine of the big-integer backend with its own randomness, so
        a seeded source does not give reproducible keys.

        :param bit_size: Bit length of the modulus $n$, an even integer in [8, 8192].
        :param random_source: Source of randomness for the blinding factors.
        :raise ConfigurationError: When the bit size is not supported.
        :return: A new PaillierCryptosystem holding both keys.
        """
        public_key, private_key = generate_key_material(bit_size)
        return cls(public_key, private_key, random_source=random_source)

    @classmethod
    def from_public_key(
        cls,
        n: int,
        bit_size: int,
        half_n: int | None = None,
        n_squared: int | None = None,
        random_source: RandomSource | None = None,
    ) -> PaillierCryptosystem:
        """
        Reconstruct an encrypt-only cryptosystem from public key fields. Missing derived fields
        are recomputed.

        :param n: Modulus $n$.
        :param bit_size: Bit size of the key.
        :param half_n: Optional precomputed $n/2$.
        :param n_squared: Optional precomputed $n^2$.
        :param random_source: Source of randomness for the blinding factors.
        :raise ConfigurationError: When the fields are inconsistent.
        :return: A PaillierCryptosystem that cannot decrypt.
        """
        public_key = PaillierPublicKey.from_fields(n, bit_size, half_n, n_squared)
        return cls(public_key, random_source=random_source)

    @classmethod
    def from_private_key(
        cls,
        n: int,
        lambda_: int,
        mu: int,
        bit_size: int,
        half_n: int | None = None,
        n_squared: int | None = None,
        random_source: RandomSource | None = None,
    ) -> PaillierCryptosystem:
        r"""
        Reconstruct a cryptosystem that can decrypt from private key fields. Missing derived
        fields are recomputed.

        :param n: Modulus $n$.
        :param lambda_: Decryption exponent $\lambda$.
        :param mu: Decryption normalization constant $\mu$.
        :param bit_size: Bit size of the key.
        :param half_n: Optional precomputed $n/2$.
        :param n_squared: Optional precomputed $n^2$.
        :param random_source: Source of randomness for the blinding factors.
        :raise ConfigurationError: When the fields are inconsistent.
        :return: A PaillierCryptosystem holding both keys.
        """
        public_key = PaillierPublicKey.from_fields(n, bit_size, half_n, n_squared)
        private_key = PaillierPrivateKey(public_key=public_key, lambda_=lambda_, mu=mu)
        return cls(public_key, private_key, random_source=random_source)

    @property
    def public_key(self) -> PaillierPublicKey:
        """
        Public key of this cryptosystem.
        """
        return self._public_key

    @property
    def private_key(self) -> PaillierPrivateKey | None:
        """
        Private key of this cryptosystem, None if this instance cannot decrypt.
        """
        return self._private_key

    @property
    def can_decrypt(self) -> bool:
        """
        Whether this cryptosystem holds private key material.
        """
        return self._private_key is not None

    has_private_material = can_decrypt

    @property
    def validator(self) -> ResidueValidator:
        """
        Residue class validator for the modulus of this cryptosystem.
        """
        return self._validator

    def encode(self, plaintext: int) -> int:
        r"""
        Map a signed plaintext in $(-n/2, n/2)$ to its representative in $[0, n)$.

        :param plaintext: Signed plaintext value.
        :return: Unsigned representative of the plaintext.
        """
        if plaintext < 0 and abs(plaintext) < self._public_key.half_n:
            return self._public_key.n + plaintext
        return plaintext

    def decode(self, value: int) -> int:
        r"""
        Map a residue in $[0, n)$ back to the signed plaintext range.

        :param value: Unsigned residue.
        :return: Signed plaintext value.
        """
        if value >= self._public_key.half_n:
            return value - self._public_key.n
        return value

    def encrypt(self, plaintext: int) -> int:
        r"""
        Encrypt a signed plaintext $m$ as $c = (1 + nm) \cdot r^n \mod n^2$, with a fresh
        blinding factor $r \in_R \mathbb{Z}^*_n$.

        :param plaintext: Signed plaintext with $|m| < n/2$.
        :raise TypeError: When the plaintext is not an integer.
        :raise DomainError: When the plaintext is out of range.
        :return: Ciphertext in $\mathbb{Z}^*_{n^2}$.
        """
        self._validator.check_zn(plaintext, PLAINTEXT_NOT_IN_ZN)
        n_squared = self._public_key.n_squared
        raw = 1 + self._public_key.n * self.encode(plaintext)  # use g = n + 1
        return raw * self._randomness() % n_squared

    def decrypt(self, ciphertext: int) -> int:
        r"""
        Decrypt a ciphertext $c$ as $m = L(c^\lambda \mod n^2) \cdot \mu \mod n$ and map the
        result to the signed plaintext range.

        :param ciphertext: Ciphertext in $\mathbb{Z}^*_{n^2}$.
        :raise StateError: When this cryptosystem has no private key.
        :raise TypeError: When the ciphertext is not an integer.
        :raise DomainError: When the ciphertext is not in $\mathbb{Z}^*_{n^2}$.
        :return: Signed plaintext.
        """
        if self._private_key is None:
            raise StateError()
        self._validator.check_zstar_n_squared(ciphertext, CIPHERTEXT_NOT_IN_ZSTAR)
        n = self._public_key.n
        c_lambda = pow_mod(ciphertext, self._private_key.lambda_, self._public_key.n_squared)
        m = func_l(c_lambda, n)
        m *= self._private_key.mu
        m %= n
        return self.decode(m)

    def homomorphic_add(self, ciphertext_1: int, ciphertext_2: int) -> int:
        r"""
        Secure addition, $c' = c_1 \cdot c_2 \mod n^2$.

        The result decrypts to the sum of both plaintexts, reduced into the signed range.

        :param ciphertext_1: First ciphertext $c_1$.
        :param ciphertext_2: Second ciphertext $c_2$.
        :raise TypeError: When a ciphertext is not an integer.
        :raise DomainError: When a ciphertext is not in $\mathbb{Z}^*_{n^2}$.
        :return: Ciphertext of the sum.
        """
        self._validator.check_zstar_n_squared(ciphertext_1, CIPHERTEXT_NOT_IN_ZSTAR)
        self._validator.check_zstar_n_squared(ciphertext_2, CIPHERTEXT_NOT_IN_ZSTAR)
        return ciphertext_1 * ciphertext_2 % self._public_key.n_squared

    def homomorphic_multiply(self, ciphertext: int, multiplicand: int) -> int:
        r"""
        Multiply the underlying plaintext of ciphertext $c$ with the scalar $s$ by computing
        $c' = c^s \mod n^2$. Negative scalars are encoded as $n + s$.

        :param ciphertext: Ciphertext $c$.
        :param multiplicand: Signed scalar $s$ with $|s| < n/2$.
        :raise TypeError: When an argument is not an integer.
        :raise DomainError: When the ciphertext is not in $\mathbb{Z}^*_{n^2}$ or the
            multiplicand is out of range.
        :return: Ciphertext of the product.
        """
        self._validator.check_zstar_n_squared(ciphertext, CIPHERTEXT_NOT_IN_ZSTAR)
        self._validator.check_zn(multiplicand, MULTIPLICAND_NOT_IN_ZN)
        return pow_mod(
            ciphertext, self.encode(multiplicand), self._public_key.n_squared
        )

    def rerandomize(self, ciphertext: int) -> int:
        r"""
        Multiply a ciphertext with fresh randomness $r^n \mod n^2$. The underlying plaintext is
        unchanged.

        :param ciphertext: Ciphertext $c$.
        :raise TypeError: When the ciphertext is not an integer.
        :raise DomainError: When the ciphertext is not in $\mathbb{Z}^*_{n^2}$.
        :return: Rerandomized ciphertext.
        """
        self._validator.check_zstar_n_squared(ciphertext, CIPHERTEXT_NOT_IN_ZSTAR)
        return ciphertext * self._randomness() % self._public_key.n_squared

    def _random_in_zstar_n(self) -> int:
        r"""
        Sample a uniformly random blinding factor $r \in \mathbb{Z}^*_n$ by rejection sampling.

        A draw is rejected with probability of at most about one half, so the loop terminates
        after a few draws with overwhelming probability.

        :return: A random unit modulo $n$.
        """
        bits = self._public_key.n.bit_length()
        while True:
            r = self._random_source.getrandbits(bits)
            if self._validator.in_zstar_n(r):
                return r

    def _randomness(self) -> int:
        r"""
        Generate the randomization value $r^n \mod n^2$.

        :return: A random number.
        """
        return pow_mod(
            self._random_in_zstar_n(), self._public_key.n, self._public_key.n_squared
        )

    def describe(self) -> str:
        """
        Diagnostic description of the key material, including the private fields when present.
        This is not a serialization format.

        :return: String of the form `Paillier-<bits> CS {n=..; lambda=..; mu=..}`.
        """
        lambda_ = mu = None
        if self._private_key is not None:
            lambda_ = self._private_key.lambda_
            mu = self._private_key.mu
        return (
            f"Paillier-{self._public_key.bit_size} CS "
            f"{{n={self._public_key.n}; lambda={lambda_}; mu={mu}}}"
        )

    def __str__(self) -> str:
        return f"Paillier-{self._public_key.bit_size} cryptosystem"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(bit_size={self._public_key.bit_size}, "
            f"can_decrypt={self.can_decrypt})"
        )

    def __eq__(self, other: object) -> bool:
        """
        Compare this cryptosystem with another to determine (in)equality. Does not take the
        private key into account as it might not be known and the public key should be
        sufficient to determine equality.

        :param other: Object to compare this cryptosystem with.
        :return: Boolean value representing (in)equality of both objects.
        """
        if not isinstance(other, PaillierCryptosystem):
            return NotImplemented
        return self._public_key.id() == other._public_key.id()

    def __hash__(self) -> int:
        """
        Hash this cryptosystem.

        :return: Hash of this cryptosystem.
        """
        return hash(self._public_key)

    # region Serialization logic

    class SerializedPaillierCryptosystem(TypedDict):
        pubkey: PaillierPublicKey
        privkey: NotRequired[PaillierPrivateKey]

    def serialize(
        self, _opts: SerializerOpts
    ) -> PaillierCryptosystem.SerializedPaillierCryptosystem:
        r"""
        Serialization function for Paillier cryptosystems, which will be passed to the
        communication module. The sharing of the private key depends on the attribute
        share_private_key.

        :raise SerializationError: When communication library is not installed.
        :return: Serialized version of this cryptosystem.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        if self.share_private_key and self._private_key is not None:
            return {"pubkey": self._public_key, "privkey": self._private_key}
        return {"pubkey": self._public_key}

    @staticmethod
    def deserialize(
        obj: PaillierCryptosystem.SerializedPaillierCryptosystem,
        _opts: DeserializerOpts,
    ) -> PaillierCryptosystem:
        r"""
        Deserialization function for Paillier cryptosystems, which will be passed to the
        communication module.

        :param obj: Serialized version of a Paillier cryptosystem.
        :raise SerializationError: When communication library is not installed.
        :return: Deserialized cryptosystem from the given dict. Cannot decrypt when the private
            key was not included in the received serialization.
        """
        if not COMMUNICATION_INSTALLED:
            raise SerializationError()
        return PaillierCryptosystem(
            public_key=obj["pubkey"],
            private_key=obj.get("privkey"),
        )

    # endregion


if COMMUNICATION_INSTALLED:
    try:
        Serializer.register_class(PaillierCryptosystem)
    except RepetitionError:
        pass
