"""
Recursive radix-2 Cooley-Tukey FFT (decimation in time).
"""

import numpy as np

from polyfft.complex_number import add, as_coefficient_vector, mul, sub
from polyfft.roots import FORWARD, TransformDirection, twiddle_factors
from polyfft.transform_size import validate_transform_size


def _recursive_fft(a: np.ndarray, direction: TransformDirection, verbose: bool, depth: int) -> np.ndarray:
    n = len(a)
    if n == 1:
        return a.copy()

    half = n // 2
    y_even = _recursive_fft(a[0::2], direction, verbose, depth + 1)
    y_odd = _recursive_fft(a[1::2], direction, verbose, depth + 1)

    w = twiddle_factors(n, direction)
    y = np.empty(n, dtype=np.complex128)
    for k in range(half):
        twiddle = mul(w[k], y_odd[k])
        y[k] = add(y_even[k], twiddle)
        y[k + half] = sub(y_even[k], twiddle)

    if verbose:
        print(f"{'  ' * depth}combine n={n}: {np.round(y, 4)}")
    return y


def recursive_fft(a, direction: TransformDirection = FORWARD, verbose: bool = False) -> np.ndarray:
    """
    Evaluate the coefficient vector a at the n-th roots of unity.

    Args:
        a: Coefficients (length must be a power of 2). Not modified.
        direction: FORWARD uses w_n = exp(-2*pi*i/n), INVERSE exp(+2*pi*i/n).
            The inverse result is NOT divided by n.
        verbose: Print each combine step.

    Returns:
        New complex128 array of length n.
    """
    b = as_coefficient_vector(a)
    validate_transform_size(len(b))
    if verbose:
        print(f" -> Recursive FFT-{len(b)} ({direction.name}), input: {b}")
    return _recursive_fft(b, direction, verbose, 0)
