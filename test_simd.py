"""
Tests for the NumPy-vectorized kernels.

Tests verify:
1. Correctness: vectorized results match plain Python integer arithmetic
2. Edge cases: range boundaries, extreme 64-bit operands, empty windows
3. Integration: the kernels agree with the scalar engine in factor64
"""

import pytest
import numpy as np
import random
import time

from factor64 import factor, mul_mod, mul_mod_doubling
from simd_operations import _trial_division_simd, mul_mod_simd

U64_MAX = (1 << 64) - 1


def _random_u64(rng: random.Random, count: int) -> list[int]:
    return [rng.getrandbits(64) for _ in range(count)]


# ============================================================================
# PART 1: TRIAL DIVISION SIMD TESTS
# ============================================================================

class TestTrialDivisionSIMD:
    """Test the vectorized trial-division sweep."""

    def test_finds_smallest_divisor(self):
        # 1155 = 3 * 5 * 7 * 11
        assert _trial_division_simd(1155, 3, 100) == 3
        assert _trial_division_simd(1155, 5, 100) == 5
        assert _trial_division_simd(1155, 9, 100) == 11

    def test_no_divisor_in_range(self):
        assert _trial_division_simd(23, 3, 5) == 0
        assert _trial_division_simd(1009 * 1013, 3, 1000) == 0

    def test_limit_is_exclusive(self):
        # 35 = 5 * 7
        assert _trial_division_simd(35, 7, 7) == 0
        assert _trial_division_simd(35, 7, 8) == 7

    def test_empty_window(self):
        assert _trial_division_simd(15, 3, 3) == 0
        assert _trial_division_simd(15, 11, 5) == 0
        assert _trial_division_simd(15, 3, 0) == 0

    def test_candidates_stop_below_two_to_sixteen(self):
        assert _trial_division_simd(65521 * 4294967291, 3, 1 << 20) == 65521
        assert _trial_division_simd(65537 * 65537, 3, 1 << 20) == 0

    def test_full_64_bit_input(self):
        # 2^64 - 1 = 3 * 5 * 17 * 257 * 641 * 65537 * 6700417
        assert _trial_division_simd(U64_MAX, 3, 1 << 16) == 3
        # cofactors left once the smaller primes are divided out
        assert _trial_division_simd(U64_MAX // (3 * 5 * 17), 19, 1 << 16) == 257
        assert _trial_division_simd(U64_MAX // (3 * 5 * 17 * 257 * 641), 643, 1 << 16) == 0

    def test_returns_composite_divisors(self):
        """Candidates are odd numbers, not primes"""
        # 51 = 3 * 17, 771 = 3 * 257
        assert _trial_division_simd(U64_MAX, 19, 1 << 16) == 51
        assert _trial_division_simd(U64_MAX, 643, 1 << 16) == 771

    def test_matches_scalar_sweep(self):
        rng = random.Random(11)
        for _ in range(50):
            n = rng.getrandbits(48) | 1
            expected = next((d for d in range(3, 1000, 2) if n % d == 0), 0)
            assert _trial_division_simd(n, 3, 1000) == expected


# ============================================================================
# PART 2: MODULAR MULTIPLICATION SIMD TESTS
# ============================================================================

class TestMulModSIMD:
    """Test lane-wise doubling multiplication."""

    def test_matches_python_integers(self):
        rng = random.Random(42)
        for _ in range(20):
            a = _random_u64(rng, 64)
            b = _random_u64(rng, 64)
            mod = rng.getrandbits(64) or 1
            result = mul_mod_simd(a, b, mod)
            assert result.dtype == np.uint64
            assert result.tolist() == [x * y % mod for x, y in zip(a, b)]

    def test_extreme_operands(self):
        a = [U64_MAX, U64_MAX - 1, 1 << 63, U64_MAX, 0]
        b = [U64_MAX, U64_MAX - 1, 1 << 63, 2, U64_MAX]
        for mod in (U64_MAX, U64_MAX - 1, 1 << 63, 18446744073709551557, 3, 1):
            assert mul_mod_simd(a, b, mod).tolist() == [x * y % mod for x, y in zip(a, b)]

    def test_small_modulus(self):
        a = list(range(100))
        b = list(range(100, 200))
        assert mul_mod_simd(a, b, 97).tolist() == [x * y % 97 for x, y in zip(a, b)]

    def test_broadcast_scalar(self):
        a = [1, 2, 3, U64_MAX]
        result = mul_mod_simd(a, U64_MAX - 1, U64_MAX)
        assert result.tolist() == [x * (U64_MAX - 1) % U64_MAX for x in a]

    def test_scalar_inputs(self):
        assert mul_mod_simd(U64_MAX, U64_MAX, 1000000007).tolist() == [U64_MAX * U64_MAX % 1000000007]

    def test_numpy_input(self):
        a = np.array([10, 20, 30], dtype=np.uint64)
        b = np.array([7, 7, 7], dtype=np.uint64)
        assert mul_mod_simd(a, b, 11).tolist() == [4, 8, 1]
        # inputs are left untouched
        assert a.tolist() == [10, 20, 30]

    def test_empty_input(self):
        assert mul_mod_simd([], [], 17).tolist() == []

    def test_zero_modulus(self):
        with pytest.raises(ZeroDivisionError):
            mul_mod_simd([1], [2], 0)


# ============================================================================
# PART 3: INTEGRATION TESTS
# ============================================================================

class TestSIMDIntegration:
    """The vectorized and scalar paths give the same answers."""

    def test_simd_matches_scalar_mul_mod(self):
        rng = random.Random(5)
        a = _random_u64(rng, 200)
        b = _random_u64(rng, 200)
        mod = 18446744073709551557
        simd = mul_mod_simd(a, b, mod).tolist()
        assert simd == [mul_mod(x, y, mod) for x, y in zip(a, b)]
        assert simd == [mul_mod_doubling(x, y, mod) for x, y in zip(a, b)]

    def test_factor_uses_sweep(self):
        # Every factor is below 2^16, so the sweep alone finishes the job
        n = 3 ** 3 * 5 * 7 ** 2 * 251 * 65521
        assert factor(n) == [(3, 3), (5, 1), (7, 2), (251, 1), (65521, 1)]


# ============================================================================
# PART 4: PERFORMANCE TESTS
# ============================================================================

class TestSIMDPerformance:

    @pytest.mark.benchmark
    def test_trial_division_simd_performance(self):
        """Time a full sweep over every odd candidate."""
        n = 18446744073709551557  # prime, so nothing is found
        _trial_division_simd(n, 3, 1 << 16)

        start = time.time()
        for _ in range(10):
            assert _trial_division_simd(n, 3, 1 << 16) == 0
        elapsed = time.time() - start

        print(f"SIMD trial division sweep: {elapsed/10*1000:.3f} ms")

    @pytest.mark.benchmark
    def test_mul_mod_simd_performance(self):
        """Time lane-wise multiplication against the scalar doubling loop."""
        rng = random.Random(9)
        a = _random_u64(rng, 10000)
        b = _random_u64(rng, 10000)
        mod = U64_MAX

        start = time.time()
        mul_mod_simd(a, b, mod)
        simd_time = time.time() - start

        start = time.time()
        for x, y in zip(a, b):
            mul_mod_doubling(x, y, mod)
        scalar_time = time.time() - start

        print(f"SIMD mul_mod: {simd_time*1000:.3f} ms, scalar: {scalar_time*1000:.3f} ms")
