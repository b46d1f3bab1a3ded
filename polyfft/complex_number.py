"""
Complex arithmetic primitives shared by every transform.

add, sub and mul are written component-wise on ``.real``/``.imag`` so the same
three functions combine ComplexNumber values, Python/NumPy complex scalars and
whole NumPy complex arrays (one lane per element).
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ComplexNumber:
    """A (real, imag) pair of doubles."""

    real: float = 0.0
    imag: float = 0.0

    @classmethod
    def from_complex(cls, value) -> "ComplexNumber":
        value = complex(value)
        return cls(value.real, value.imag)

    def __complex__(self):
        return complex(self.real, self.imag)

    def __add__(self, other):
        return add(self, other)

    def __sub__(self, other):
        return sub(self, other)

    def __mul__(self, other):
        return mul(self, other)

    def __str__(self):
        sign = "-" if self.imag < 0.0 else "+"
        return f"{self.real:.4f} {sign} {abs(self.imag):.4f}i"


def _pack(a, b, real, imag):
    if isinstance(a, ComplexNumber) or isinstance(b, ComplexNumber):
        return ComplexNumber(float(real), float(imag))
    return real + 1j * imag


def add(a, b):
    return _pack(a, b, a.real + b.real, a.imag + b.imag)


def sub(a, b):
    return _pack(a, b, a.real - b.real, a.imag - b.imag)


def mul(a, b):
    """(ar + i*ai) * (br + i*bi) = (ar*br - ai*bi) + i(ar*bi + ai*br)"""
    return _pack(a, b,
                 a.real * b.real - a.imag * b.imag,
                 a.real * b.imag + a.imag * b.real)


def as_coefficient_vector(values) -> np.ndarray:
    """Copy any sequence of numbers / ComplexNumber into a complex128 array."""
    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise ValueError(f"coefficient vector must be one-dimensional, got shape {values.shape}")
        if values.dtype.kind in "biufc":
            return np.array(values, dtype=np.complex128)
    return np.array([complex(v) for v in values], dtype=np.complex128)


def to_complex_numbers(vector) -> list:
    return [ComplexNumber.from_complex(v) for v in vector]
