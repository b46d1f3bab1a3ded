"""
Length checks and index permutations for power-of-two transforms.
"""

import numpy as np
from sympy import factorint


class InvalidLength(ValueError):
    """Transform or multiplication length is not a positive power of two."""


def is_power_of_two(n: int) -> bool:
    return not isinstance(n, bool) and isinstance(n, (int, np.integer)) and n > 0 and (n & (n - 1)) == 0


def validate_transform_size(n: int) -> int:
    """Raise InvalidLength unless n = 2^k with k >= 0. Returns k."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n <= 0:
        raise InvalidLength(f"transform length must be a positive integer, got {n!r}")
    factors = factorint(int(n))
    if not set(factors).issubset({2}):
        raise InvalidLength(f"transform length n={n} is not a power of two")
    return factors.get(2, 0)


def log2_size(n: int) -> int:
    return validate_transform_size(n)


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n."""
    if n <= 0:
        raise InvalidLength(f"length must be positive, got {n}")
    N = 1
    while N < n:
        N <<= 1
    return N


def bit_reverse(i: int, bits: int) -> int:
    """
    Reverse the low `bits` bits of i.

    e.g. bits = 3: 1 (001b) -> 4 (100b), 6 (110b) -> 3 (011b)
    """
    result = 0
    for _ in range(bits):
        result = (result << 1) | (i & 1)
        i >>= 1
    return result


def bit_reversal_indices(n: int) -> np.ndarray:
    bits = validate_transform_size(n)
    return np.array([bit_reverse(i, bits) for i in range(n)], dtype=np.int64)


def bit_reverse_copy(a) -> np.ndarray:
    """Copy a into a new array with a[i] placed at slot rev(i)."""
    a = np.asarray(a)
    index = bit_reversal_indices(len(a))
    out = np.empty_like(a)
    out[index] = a
    return out
