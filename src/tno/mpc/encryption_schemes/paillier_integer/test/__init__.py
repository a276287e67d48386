"""
Testing module of the tno.mpc.encryption_schemes.paillier_integer package.
"""

from __future__ import annotations

from collections.abc import Iterable


class FixedRandomSource:
    """
    Random source that replays a fixed sequence of values, used to control the blinding factors
    drawn by the cryptosystem.
    """

    def __init__(self, values: Iterable[int]) -> None:
        """
        :param values: Values returned by consecutive calls to getrandbits.
        """
        self._values = iter(values)
        self.calls = 0

    def getrandbits(self, k: int) -> int:
        """
        Return the next value of the sequence.

        :param k: Number of requested bits, the next value should fit in it.
        :return: Next value of the sequence.
        """
        self.calls += 1
        value = next(self._values)
        assert value < 2**k, f"Value {value} does not fit in {k} bits."
        return value


def factorize(n: int) -> tuple[int, int]:
    """
    Factorize a small modulus $n = pq$ by trial division.

    :param n: Product of two primes.
    :return: The two factors, smallest first.
    """
    divisor = 2
    while n % divisor != 0:
        divisor += 1
    return divisor, n // divisor
