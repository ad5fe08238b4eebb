"""
Benchmark suite for the 64-bit factorization engine.

Benchmarks:
1. Modular Arithmetic: native product, portable doubling, SIMD doubling
2. Primality Testing: Miller-Rabin across the witness-count thresholds
3. Trial Division: vectorized sweep over odd candidates
4. Pollard Rho: divisor search on semiprimes of growing size
5. Complete Factorization: factor() on representative inputs
6. Stress Test: random 64-bit inputs
"""

import time
import random
import statistics
from typing import List, Callable

from factor64 import (
    XorShift64, clear_caches, factor, find_divisor, is_prime,
    mul_mod, mul_mod_doubling,
)
from simd_operations import _trial_division_simd, mul_mod_simd


# ============================================================================
# BENCHMARK UTILITIES
# ============================================================================

class BenchmarkResult:
    """Store benchmark results with statistics."""

    def __init__(self, name: str, times: List[float]):
        self.name = name
        self.times = sorted(times)

        self.min = min(times)
        self.max = max(times)
        self.mean = statistics.mean(times)
        self.median = statistics.median(times)
        self.stdev = statistics.stdev(times) if len(times) > 1 else 0

    def __str__(self):
        return (f"{self.name:40} | "
                f"Mean: {self.mean*1000:8.3f}ms | "
                f"Median: {self.median*1000:8.3f}ms | "
                f"StdDev: {self.stdev*1000:8.3f}ms | "
                f"Min: {self.min*1000:8.3f}ms | "
                f"Max: {self.max*1000:8.3f}ms")


def benchmark(func: Callable, *args, iterations: int = 5, **kwargs) -> BenchmarkResult:
    """
    Benchmark a function and return statistics.

    Args:
        func: Function to benchmark
        *args: Positional arguments to function
        iterations: Number of iterations to run
        **kwargs: Keyword arguments to function

    Returns:
        BenchmarkResult with timing statistics
    """
    times = []

    # Warm up
    func(*args, **kwargs)

    for _ in range(iterations):
        start = time.perf_counter()
        func(*args, **kwargs)
        times.append(time.perf_counter() - start)

    return BenchmarkResult(func.__name__, times)


def _header(title: str):
    print("\n" + "="*100)
    print(title)
    print("="*100)


# ============================================================================
# 1. MODULAR ARITHMETIC BENCHMARKS
# ============================================================================

def benchmark_mul_mod():
    """Compare the three modular multiplication paths."""
    _header("MODULAR MULTIPLICATION BENCHMARKS")

    rng = random.Random(1)
    a = [rng.getrandbits(64) for _ in range(10000)]
    b = [rng.getrandbits(64) for _ in range(10000)]
    mod = 18446744073709551557

    def native():
        for x, y in zip(a, b):
            mul_mod(x, y, mod)

    def doubling():
        for x, y in zip(a, b):
            mul_mod_doubling(x, y, mod)

    def simd():
        mul_mod_simd(a, b, mod)

    results = []
    for func, label in [(native, "Native product (10k pairs)"),
                        (doubling, "Portable doubling (10k pairs)"),
                        (simd, "SIMD doubling (10k lanes)")]:
        result = benchmark(func, iterations=5)
        result.name = label
        print(result)
        results.append(result)

    print(f"  → SIMD speedup over scalar doubling: {results[1].mean / results[2].mean:.1f}x\n")


# ============================================================================
# 2. PRIMALITY TESTING BENCHMARKS
# ============================================================================

def benchmark_primality():
    """Benchmark Miller-Rabin at every witness count."""
    _header("PRIMALITY TESTING BENCHMARKS")

    test_values = [
        (2039, "1 witness"),
        (1373651 + 2, "2 witnesses"),
        (25325981, "3 witnesses"),
        (3215031751 - 2, "4 witnesses"),
        (2152302898747 - 2, "5 witnesses"),
        (1000000000000000003, "9 witnesses"),
        (18446744073709551557, "12 witnesses (2^64 - 59)"),
    ]

    for n, description in test_values:
        times = []
        for _ in range(10):
            clear_caches()
            start = time.perf_counter()
            is_prime(n)
            times.append(time.perf_counter() - start)
        print(BenchmarkResult(f"{description:30} (no cache)", times))


# ============================================================================
# 3. TRIAL DIVISION BENCHMARKS
# ============================================================================

def benchmark_trial_division():
    """Benchmark the vectorized sweep."""
    _header("TRIAL DIVISION BENCHMARKS")

    test_cases = [
        (1155, 100, "Small composite (3*5*7*11)"),
        (65521 * 65519, 65520, "Two primes just below 2^16"),
        (18446744073709551557, 1 << 16, "Full sweep (64-bit prime)"),
    ]

    for n, limit, description in test_cases:
        result = benchmark(_trial_division_simd, n, 3, limit, iterations=20)
        result.name = description
        print(result)


# ============================================================================
# 4. POLLARD RHO BENCHMARKS
# ============================================================================

def benchmark_pollard_rho():
    """Benchmark divisor search on semiprimes."""
    _header("POLLARD RHO BENCHMARKS")

    test_cases = [
        (65537 * 6700417, "2^32 + 1 sized"),
        (1000003 * 1000033, "Two 20-bit primes"),
        (1000000007 * 1000000009, "Two 30-bit primes"),
        (4294967291 * 4294967279, "Two 32-bit primes"),
    ]

    for n, description in test_cases:
        times = []
        for seed in range(1, 6):
            start = time.perf_counter()
            find_divisor(n, XorShift64(seed))
            times.append(time.perf_counter() - start)
        print(BenchmarkResult(description, times))


# ============================================================================
# 5. COMPLETE FACTORIZATION BENCHMARKS
# ============================================================================

def benchmark_complete_factorization():
    """Benchmark factor() end to end."""
    _header("COMPLETE FACTORIZATION BENCHMARKS")

    test_cases = [
        (360, "Small composite"),
        (614889782588491410, "Product of the first 15 primes"),
        (281496452005891, "Demonstration number"),
        (65537 ** 3, "Cube of a prime above 2^16"),
        ((1 << 64) - 1, "2^64 - 1"),
        (4294967291 * 4294967279, "64-bit semiprime"),
    ]

    for n, description in test_cases:
        clear_caches()
        result = benchmark(factor, n, iterations=3)
        result.name = description
        print(result)


# ============================================================================
# 6. STRESS TEST
# ============================================================================

def benchmark_stress_test():
    """Stress test with diverse inputs."""
    _header("STRESS TEST (100 Random 64-bit Numbers)")

    rng = random.Random(42)
    numbers = [rng.getrandbits(64) | 1 for _ in range(100)]

    start = time.perf_counter()
    failures = 0
    for n in numbers:
        product = 1
        for prime, power in factor(n):
            product *= prime ** power
        if product != n:
            failures += 1
    elapsed = time.perf_counter() - start

    print(f"Factored {len(numbers)} numbers in {elapsed:.3f}s "
          f"({elapsed / len(numbers) * 1000:.3f}ms each), {failures} failures")


def run_all_benchmarks():
    """Run all benchmarks."""
    benchmark_mul_mod()
    benchmark_primality()
    benchmark_trial_division()
    benchmark_pollard_rho()
    benchmark_complete_factorization()
    benchmark_stress_test()


if __name__ == "__main__":
    run_all_benchmarks()
