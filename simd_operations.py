"""
SIMD optimizations for the 64-bit factorization engine.

This module contains NumPy-vectorized kernels working on native uint64
lanes, where arithmetic wraps modulo 2^64 exactly like fixed-width machine
integers.

OPTIMIZATION TARGETS:
1. Trial Division: one vectorized remainder over all odd candidates instead
   of a Python loop per candidate
2. Modular Multiplication: the overflow-free doubling algorithm run lane-wise,
   for many (a, b) pairs at once
"""

import numpy as np
from typing import Sequence

# Odd trial divisors below 2^16, in contiguous memory
_CANDIDATE_LIMIT = 1 << 16
_ODD_CANDIDATES: np.ndarray = np.arange(3, _CANDIDATE_LIMIT, 2, dtype=np.uint64)

_ONE = np.uint64(1)


# ============================================================================
# PART 1: TRIAL DIVISION SIMD
# ============================================================================

def _trial_division_simd(n: int, start: int, limit: int) -> int:
    """
    Smallest odd divisor d of n with start <= d < limit.

    d is prime only when n has no odd factor below start, which holds while
    factor() divides out each divisor as it is found.

    Args:
        n: Number to test, 0 <= n < 2^64
        start: First candidate, odd and at least 3
        limit: Exclusive upper bound, candidates stop at 2^16 regardless

    Returns:
        The divisor, or 0 if no candidate in range divides n
    """
    lo = (start - 3) // 2
    hi = (limit - 2) // 2
    if hi <= lo:
        return 0
    window = _ODD_CANDIDATES[lo:hi]
    hits = np.flatnonzero(np.uint64(n) % window == 0)
    if hits.size == 0:
        return 0
    return int(window[hits[0]])


# ============================================================================
# PART 2: MODULAR MULTIPLICATION SIMD
# ============================================================================

def mul_mod_simd(a: Sequence[int] | np.ndarray, b: Sequence[int] | np.ndarray, mod: int) -> np.ndarray:
    """
    Element-wise (a * b) % mod over uint64 lanes without a wider type.

    Each lane runs the doubling algorithm: for every set bit of a the current
    b is added into the accumulator, and b is doubled each round. A sum that
    would reach 2^64 subtracts mod first, and the uint64 wraparound of the
    intermediate cancels out, so no lane ever overflows.

    The engine multiplies with factor64.mul_mod(); this kernel is the
    fixed-width rendition of the same doubling algorithm, for callers working
    on uint64 arrays.

    Args:
        a: First operands (broadcast against b)
        b: Second operands
        mod: Modulus, 1 <= mod < 2^64

    Returns:
        uint64 array of products modulo mod
    """
    if mod == 0:
        raise ZeroDivisionError("mul_mod_simd() modulus is zero")
    m = np.uint64(mod)
    a_arr, b_arr = np.broadcast_arrays(
        np.atleast_1d(np.asarray(a, dtype=np.uint64)),
        np.atleast_1d(np.asarray(b, dtype=np.uint64)),
    )
    b_arr = b_arr % m
    res = np.zeros(a_arr.shape, dtype=np.uint64)

    while a_arr.any():
        bit = (a_arr & _ONE).astype(bool)
        # b - m wraps, and res + (b - m) wraps back to res + b - m
        addend = np.where(b_arr >= m - res, b_arr - m, b_arr)
        res = np.where(bit, res + addend, res)
        a_arr = a_arr >> _ONE
        b_arr = b_arr + np.where(b_arr >= m - b_arr, b_arr - m, b_arr)

    return res % m
