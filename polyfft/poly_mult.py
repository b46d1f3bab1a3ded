"""
Polynomial multiplication through the FFT: pad, forward transform both
operands, multiply point-wise, inverse transform, divide by n.
"""

import numpy as np

from polyfft.complex_number import as_coefficient_vector, mul
from polyfft.iterative_fft import iterative_fft
from polyfft.recursive_fft import recursive_fft
from polyfft.roots import FORWARD, INVERSE, TransformDirection
from polyfft.staged_fft import staged_convolution, staged_fft
from polyfft.transform_size import InvalidLength, next_power_of_two

DEFAULT_METHOD = "recursive"

TRANSFORMS = {
    "recursive": recursive_fft,
    "iterative": iterative_fft,
    "staged": staged_fft,
}


def get_transform(method: str):
    try:
        return TRANSFORMS[method]
    except KeyError:
        raise ValueError(f"unknown transform method {method!r}, expected one of {sorted(TRANSFORMS)}") from None


def inverse_fft(values, method: str = DEFAULT_METHOD, **kwargs) -> np.ndarray:
    """Inverse transform including the 1/n scaling."""
    y = get_transform(method)(values, INVERSE, **kwargs)
    return y / len(y)


def naive_poly_mult(p1, p2) -> np.ndarray:
    """O(d1*d2) schoolbook multiplication, used as ground truth."""
    a = as_coefficient_vector(p1)
    b = as_coefficient_vector(p2)
    if len(a) == 0 or len(b) == 0:
        raise InvalidLength("polynomials must have at least one coefficient")
    result = np.zeros(len(a) + len(b) - 1, dtype=complex)
    for i in range(len(a)):
        for j in range(len(b)):
            result[i + j] += a[i] * b[j]
    return result


def round_coefficients(values) -> np.ndarray:
    return np.rint(np.real(values)).astype(np.int64)


class PolynomialMultiplier:
    """
    Multiplies coefficient vectors (x^0 coefficient first) with one of the
    transforms in TRANSFORMS.

    Args:
        method: "recursive", "iterative" or "staged".
        backend: Stage backend for the staged method (see staged_fft.BACKENDS).
        verbose: Print the intermediate vectors.
    """

    def __init__(self, method: str = DEFAULT_METHOD, backend=None, verbose: bool = False):
        self.method = method
        self.transform = get_transform(method)
        self.backend = backend
        self.verbose = verbose

    @staticmethod
    def transform_size(p1, p2) -> int:
        n1, n2 = len(p1), len(p2)
        if n1 <= 0 or n2 <= 0:
            raise InvalidLength(f"polynomials must have at least one coefficient, got lengths {n1} and {n2}")
        return next_power_of_two(n1 + n2 - 1)

    def _fft(self, values, direction: TransformDirection) -> np.ndarray:
        if self.method == "staged":
            return staged_fft(values, direction, backend=self.backend, verbose=self.verbose)
        return self.transform(values, direction, verbose=self.verbose)

    def multiply_complex(self, p1, p2) -> np.ndarray:
        """
        Returns the scaled complex product of length len(p1) + len(p2) - 1.
        The imaginary parts are floating-point residue for real inputs.
        """
        a = as_coefficient_vector(p1)
        b = as_coefficient_vector(p2)
        N = self.transform_size(a, b)
        size = len(a) + len(b) - 1

        # Pad both operands to N
        a = np.concatenate([a, np.zeros(N - len(a), dtype=complex)])
        b = np.concatenate([b, np.zeros(N - len(b), dtype=complex)])

        if self.verbose:
            print(f"Multiplying with {self.method} FFT, N={N}")
            print(f"  A = {a}")
            print(f"  B = {b}")

        if self.method == "staged":
            product = staged_convolution(a, b, backend=self.backend, verbose=self.verbose)
        else:
            A = self._fft(a, FORWARD)
            B = self._fft(b, FORWARD)
            product = self._fft(mul(A, B), INVERSE)

        result = product / N
        if self.verbose:
            print(f"  Product = {np.round(result[:size], 4)}")
        return result[:size]

    def multiply(self, p1, p2) -> np.ndarray:
        """Real coefficients of p1 * p2 (imaginary residue discarded)."""
        return np.real(self.multiply_complex(p1, p2)).copy()


def poly_mult(p1, p2, method: str = DEFAULT_METHOD, backend=None, verbose: bool = False) -> np.ndarray:
    return PolynomialMultiplier(method, backend=backend, verbose=verbose).multiply(p1, p2)
