"""
Fixtures for integer Paillier tests
"""

import random

import pytest

from tno.mpc.encryption_schemes.paillier_integer import PaillierCryptosystem


@pytest.fixture(name="cryptosystem", scope="module")
def fixture_cryptosystem() -> PaillierCryptosystem:
    """
    Constructs a Paillier cryptosystem that can decrypt.

    :return: Initialized Paillier cryptosystem with a 64-bit modulus.
    """
    return PaillierCryptosystem.generate(64)


@pytest.fixture(name="public_cryptosystem", scope="module")
def fixture_public_cryptosystem(
    cryptosystem: PaillierCryptosystem,
) -> PaillierCryptosystem:
    """
    Constructs an encrypt-only Paillier cryptosystem for the same key as the cryptosystem
    fixture.

    :param cryptosystem: Paillier cryptosystem that can decrypt.
    :return: Paillier cryptosystem without private key.
    """
    return PaillierCryptosystem.from_public_key(
        n=cryptosystem.public_key.n, bit_size=cryptosystem.public_key.bit_size
    )


@pytest.fixture(name="seeded_cryptosystem")
def fixture_seeded_cryptosystem(
    cryptosystem: PaillierCryptosystem,
) -> PaillierCryptosystem:
    """
    Constructs a Paillier cryptosystem with the same keys as the cryptosystem fixture and a
    seeded, non-secure random source.

    :param cryptosystem: Paillier cryptosystem that can decrypt.
    :return: Paillier cryptosystem with deterministic blinding factors.
    """
    return PaillierCryptosystem(
        cryptosystem.public_key,
        cryptosystem.private_key,
        random_source=random.Random(2024),
    )
