"""
Complete prime factorization of unsigned 64-bit integers.

ALGORITHMS:
1. Modular arithmetic: native wide products, plus the portable doubling
   multiplication used where no wider type exists
2. Deterministic Miller-Rabin: exact for every n < 2^64, with the number of
   witnesses chosen from a published threshold table
3. Newton integer square root and perfect-square stripping
   - Shrinks the trial-division bound, capped at 2^16
4. Trial division over odd candidates (NumPy vectorized sweep)
5. Pollard's Rho with power-of-two checkpoints and restart-on-timeout
   - Only runs once every factor below 2^16 is gone, so at most 3 prime
     factors remain

The random walks draw from an explicit XorShift64 generator. factor() builds
a fresh one per call unless the caller passes one in, so results are
reproducible and calls from different threads do not share state.

DEPENDENCIES:
- NumPy: vectorized trial division and the fixed-capacity record buffer
"""
import logging
import math
import operator
from enum import Enum
from functools import lru_cache
from typing import NamedTuple

import numpy as np
from simd_operations import _trial_division_simd

__log__ = logging.getLogger(__name__)

MASK64 = (1 << 64) - 1

# Default xorshift state, a generator per factor() call starts here
DEFAULT_SEED = 88172645463325252

# A single Rho walk gives up after 2^RHO_TIMEOUT_BITS steps
RHO_TIMEOUT_BITS = 18

# Restarts of find_divisor() for one n before a warning is logged
RHO_RESTART_WARNING = 32

# Every factor below this bound is removed by trial division
TRIAL_DIVISION_CAP = 1 << 16

# 15 distinct primes plus the sentinel; the product of the 16 smallest
# primes already exceeds 2^64
MAX_RECORDS = 16

FACTOR_RECORD_DTYPE = np.dtype([("prime", np.uint64), ("power", np.uint32)])

_WITNESSES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

# (upper bound, witnesses needed): n below the bound is decided exactly by
# that many leading witnesses
_WITNESS_THRESHOLDS = (
    (2047, 1),
    (1373653, 2),
    (25326001, 3),
    (3215031751, 4),
    (2152302898747, 5),
    (3474749660383, 6),
    (341550071728321, 7),
    (3825123056546413051, 9),
)


class CapacityError(ValueError):
    """Raised when an output buffer cannot hold every record and the sentinel."""

    def __init__(self, required: int, capacity: int):
        super().__init__(
            f"buffer holds {capacity} records but {required} are needed "
            f"(including the sentinel)"
        )
        self.required = required
        self.capacity = capacity


class FactorRecord(NamedTuple):
    prime: int
    power: int


class SplitKind(Enum):
    """What a divisor found by Pollard's Rho turned out to be."""
    SQUARE = "square"
    PRIME = "prime"
    COMPOSITE = "composite"


def _check_u64(n) -> int:
    if isinstance(n, (bool, np.bool_)):
        raise TypeError(f"expected an integer, got {type(n).__name__}")
    n = operator.index(n)
    if n < 0 or n > MASK64:
        raise ValueError(f"{n} is outside the unsigned 64-bit range")
    return n


def clear_caches():
    """Clear all memoization caches."""
    is_prime.cache_clear()


# Modular arithmetic

def mul_mod(a: int, b: int, mod: int) -> int:
    """Return (a * b) % mod using Python's unbounded product."""
    return (a % mod) * (b % mod) % mod


def mul_mod_doubling(a: int, b: int, mod: int) -> int:
    """
    Portable (a * b) % mod that never holds a value of 2^64 or more.

    Walks the bits of a from the lowest one, adding the current b into the
    accumulator and doubling b, both reduced before they can overflow. Gives
    the same results as mul_mod() for all 64-bit operands.

    factor() itself uses mul_mod(); this is the reference for targets without
    a wider-than-64-bit product, checked against mul_mod() by the tests.
    """
    res = 0
    b %= mod
    while a:
        if a & 1:
            if b >= mod - res:
                res = res - mod + b
            else:
                res += b
        a >>= 1
        if b >= mod - b:
            b = b - mod + b
        else:
            b += b
    return res % mod


def pow_mod(n: int, exp: int, mod: int) -> int:
    """Return (n ** exp) % mod by square-and-multiply over mul_mod()."""
    result = 1 % mod
    n %= mod
    while exp:
        if exp & 1:
            result = mul_mod(result, n, mod)
        n = mul_mod(n, n, mod)
        exp >>= 1
    return result


# Deterministic Miller-Rabin primality test (memoized)

def _witness_count(n: int) -> int:
    for bound, count in _WITNESS_THRESHOLDS:
        if n < bound:
            return count
    return len(_WITNESSES)


@lru_cache(maxsize=128)
def is_prime(n: int) -> bool:
    """
    Deterministic primality test for 0 <= n < 2^64.

    Args:
        n: Integer to test (anything below 2 is not prime)

    Returns:
        True if n is prime
    """
    if n < 2:
        return False
    for p in _WITNESSES:
        if n % p == 0:
            return n == p
    # every composite below 37^2 has a factor in _WITNESSES
    if n < _WITNESSES[-1] * _WITNESSES[-1]:
        return True

    # write n-1 as d * 2^s
    d: int = n - 1
    s: int = 0
    while (d & 1) == 0:
        d >>= 1
        s += 1

    for a in _WITNESSES[:_witness_count(n)]:
        x = pow_mod(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = mul_mod(x, x, n)
            if x == n - 1:
                break
        else:
            return False
    return True


# Integer square root

def isqrt(n: int) -> int:
    """Floor of the square root of n by Newton's iteration."""
    if n < 0:
        raise ValueError("isqrt() argument must be nonnegative")
    if n <= 3:
        return 1 if n else 0
    a = n >> 1
    b = (a + n // a) >> 1
    while b < a:
        a = b
        b = (a + n // a) >> 1
    return a


def strip_perfect_powers(n: int, power: int) -> tuple[int, int, int]:
    """
    Replace n by its square root while it is a perfect square.

    Each step doubles power, so n ** power keeps describing the same value.

    Args:
        n: Remaining cofactor
        power: Exponent multiplier accumulated so far

    Returns:
        (n, power, limit), where trial division by every candidate below
        limit is enough to leave n prime or 1 (limit is at most
        TRIAL_DIVISION_CAP)
    """
    root = isqrt(n)
    while n > 3 and root * root == n:
        n = root
        power <<= 1
        root = isqrt(n)
    limit = root + 1
    if limit > TRIAL_DIVISION_CAP:
        limit = TRIAL_DIVISION_CAP
    return n, power, limit


# Pollard's Rho

class XorShift64:
    """Marsaglia xorshift generator on a 64-bit state (shifts 13, 7, 17)."""

    def __init__(self, seed: int = DEFAULT_SEED):
        seed &= MASK64
        if seed == 0:
            raise ValueError("xorshift seed must be nonzero")
        self.state = seed

    def next_u64(self) -> int:
        r = self.state
        r ^= (r << 13) & MASK64
        r ^= r >> 7
        r ^= (r << 17) & MASK64
        self.state = r
        return r


def pollard_rho(n: int, rng: XorShift64, timeout_bits: int = RHO_TIMEOUT_BITS) -> int:
    """
    One random walk of Pollard's Rho on n, iterating y -> y^2 + 1.

    The walk starts from a point drawn from rng. x is reset to the current y
    at every power-of-two step count and each step takes gcd(|y - x|, n).

    Args:
        n: Odd composite, greater than 8
        rng: Generator supplying the starting point
        timeout_bits: The walk stops after 2^timeout_bits steps

    Returns:
        A divisor of n: 1 on timeout, n on a full collision, otherwise a
        nontrivial divisor
    """
    y = 1 + rng.next_u64() % (n - 1)
    x = 1
    i = 0
    j = 1
    g = 1
    while g == 1:
        if i == j:
            if j >> timeout_bits:
                break
            j <<= 1
            x = y
        y = (mul_mod(y, y, n) + 1) % n
        g = math.gcd(y - x if y > x else x - y, n)
        i += 1
    return g


def find_divisor(n: int, rng: XorShift64, timeout_bits: int = RHO_TIMEOUT_BITS) -> int:
    """
    Restart pollard_rho() from fresh random points until 1 < d < n.

    Termination is probabilistic: every walk on a composite succeeds with
    high probability, but no bound on the number of restarts exists.
    """
    if n <= 8 or (n & 1) == 0 or is_prime(n):
        raise ValueError(f"find_divisor() needs an odd composite above 8, got {n}")
    restarts = 0
    while True:
        d = pollard_rho(n, rng, timeout_bits)
        if 1 < d < n:
            return d
        restarts += 1
        __log__.debug("Rho walk on %d %s, restarting (%d)",
                      n, "timed out" if d == 1 else "collided", restarts)
        if restarts == RHO_RESTART_WARNING:
            __log__.warning("Pollard's Rho restarted %d times on %d", restarts, n)


def classify_split(x: int) -> tuple[SplitKind, int]:
    """Tell whether x is a perfect square (with its root), a prime or composite."""
    root = isqrt(x)
    if root * root == x:
        return SplitKind.SQUARE, root
    if is_prime(x):
        return SplitKind.PRIME, x
    return SplitKind.COMPOSITE, x


# Factorization

def _emit(records: list[FactorRecord], prime: int, power: int):
    for i, record in enumerate(records):
        if record.prime == prime:
            records[i] = FactorRecord(prime, record.power + power)
            return
    records.append(FactorRecord(prime, power))


def factor(n: int, rng: XorShift64 | None = None,
           timeout_bits: int = RHO_TIMEOUT_BITS) -> list[FactorRecord]:
    """
    Factorize n into (prime, power) records.

    Records found by trial division come first, in ascending order. Those
    found by Pollard's Rho follow in discovery order, so the list as a
    whole is not necessarily sorted.

    Args:
        n: Integer with 1 <= n < 2^64
        rng: Generator for the random walks, a fresh XorShift64 by default
        timeout_bits: Step limit of each Rho walk, as in pollard_rho()

    Returns:
        List of FactorRecord, each prime occurring once (empty for 1)

    Raises:
        TypeError: n is not an integer
        ValueError: n is 0 or outside the unsigned 64-bit range
    """
    n = _check_u64(n)
    if n == 0:
        raise ValueError("0 has no prime factorization")

    records: list[FactorRecord] = []
    if n <= 3:
        if n > 1:
            records.append(FactorRecord(n, 1))
        return records

    # Powers of two (using bit operations)
    twos = (n & -n).bit_length() - 1
    if twos:
        records.append(FactorRecord(2, twos))
        n >>= twos

    power = 1
    if n > 8:
        if rng is None:
            rng = XorShift64()

        n, power, limit = strip_perfect_powers(n, power)
        prime = 3
        while True:
            prime = _trial_division_simd(n, prime, limit)
            if not prime:
                break
            count = 0
            while n % prime == 0:
                n //= prime
                count += 1
            _emit(records, prime, count * power)
            # the cofactor may have become a perfect square
            n, power, limit = strip_perfect_powers(n, power)
            prime += 2

        # Any factor left is above 2^16, so at most 3 prime factors remain
        while n >> 32 and not is_prime(n):
            __log__.debug("Splitting %d with Pollard's Rho", n)
            x = find_divisor(n, rng, timeout_bits)
            n //= x
            if x >> 32:
                kind, value = classify_split(x)
                if kind is SplitKind.SQUARE:
                    _emit(records, value, power << 1)
                elif kind is SplitKind.PRIME:
                    _emit(records, value, power)
                else:
                    y = find_divisor(value, rng, timeout_bits)
                    _emit(records, value // y, power)
                    _emit(records, y, power)
            elif n % x:
                _emit(records, x, power)
            else:
                # x divides n a second time
                n //= x
                _emit(records, x, power + 1)

    if n != 1:
        _emit(records, n, power)
    return records


def factor_into(n: int, out: np.ndarray, rng: XorShift64 | None = None) -> int:
    """
    Write the factorization of n into a preallocated record buffer.

    Args:
        n: Integer with 1 <= n < 2^64
        out: 1-D array of FACTOR_RECORD_DTYPE, MAX_RECORDS long is always enough
        rng: Generator for the random walks

    Returns:
        Number of records written; a sentinel with power 0 follows them

    Raises:
        CapacityError: out is too short, nothing is written in that case
    """
    if out.dtype != FACTOR_RECORD_DTYPE:
        raise TypeError(f"record buffer must have dtype {FACTOR_RECORD_DTYPE}, got {out.dtype}")
    records = factor(n, rng)
    count = len(records)
    if len(out) < count + 1:
        raise CapacityError(count + 1, len(out))
    out["prime"][:count] = np.array([r.prime for r in records], dtype=np.uint64)
    out["power"][:count] = np.array([r.power for r in records], dtype=np.uint32)
    out[count] = (0, 0)
    return count


def prime_factors(n: int) -> list[int]:
    """Ascending list of the prime factors of n, repeated by multiplicity."""
    return sorted(p for p, e in factor(n) for _ in range(e))


def format_record(record: FactorRecord) -> str:
    if record.power < 2:
        return str(record.prime)
    return f"{record.prime}^{record.power}"


# Example usage
if __name__ == "__main__":
    import sys
    logging.basicConfig(level=logging.INFO)
    numbers = [int(arg) for arg in sys.argv[1:]] or [281496452005891]
    for n in numbers:
        print("Factors of", n, ":")
        for record in factor(n):
            print(format_record(record))
