"""
In-place iterative radix-2 FFT: bit-reversal permutation followed by
log2(n) butterfly passes.
"""

import numpy as np

from polyfft.complex_number import add, as_coefficient_vector, mul, sub
from polyfft.roots import FORWARD, TransformDirection, twiddle_factors
from polyfft.transform_size import bit_reversal_indices, validate_transform_size


def bit_reverse_permute_inplace(b: np.ndarray) -> None:
    """Swap b[i] and b[rev(i)] for every i < rev(i)."""
    index = bit_reversal_indices(len(b))
    for i, j in enumerate(index):
        if i < j:
            b[i], b[j] = b[j], b[i]


def iterative_fft_inplace(b: np.ndarray, direction: TransformDirection = FORWARD, verbose: bool = False) -> np.ndarray:
    """
    Transform the complex128 buffer b in place and return it.
    """
    if not isinstance(b, np.ndarray) or b.dtype.kind != "c":
        raise TypeError(f"in-place transform needs a complex ndarray buffer, got {getattr(b, 'dtype', type(b))}")
    n = len(b)
    levels = validate_transform_size(n)

    bit_reverse_permute_inplace(b)
    if verbose:
        print(f" -> After bit-reversal permutation: {b}")

    # stage sizes s = 2, 4, ..., n
    for stage in range(1, levels + 1):
        s = 1 << stage
        half = s >> 1
        w = twiddle_factors(s, direction)
        for start in range(0, n, s):
            for j in range(half):
                t = mul(w[j], b[start + j + half])
                u = b[start + j]
                b[start + j] = add(u, t)
                b[start + j + half] = sub(u, t)
        if verbose:
            print(f"    After butterfly pass {stage} (s={s}): {np.round(b, 4)}")

    return b


def iterative_fft(a, direction: TransformDirection = FORWARD, verbose: bool = False) -> np.ndarray:
    """Same contract as recursive_fft; works on a private copy of a."""
    b = as_coefficient_vector(a)
    if verbose:
        print(f" -> Iterative FFT-{len(b)} ({direction.name}), input: {b}")
    return iterative_fft_inplace(b, direction, verbose)
