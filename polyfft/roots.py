"""
Transform direction and the roots of unity used as twiddle factors.
"""

import enum
import math

import numpy as np

from polyfft.transform_size import validate_transform_size


class TransformDirection(enum.Enum):
    # value is the sign of the root angle
    FORWARD = -1
    INVERSE = 1


FORWARD = TransformDirection.FORWARD
INVERSE = TransformDirection.INVERSE


def root_angle(n: int, direction: TransformDirection) -> float:
    return direction.value * 2 * math.pi / n


def twiddle_factors(n: int, direction: TransformDirection) -> np.ndarray:
    """w_n^k for k in [0, n/2), w_n = exp(i * root_angle(n))."""
    theta = root_angle(n, direction) * np.arange(n // 2)
    return np.cos(theta) + 1j * np.sin(theta)


def generate_roots_of_unity(n: int, direction: TransformDirection = FORWARD) -> np.ndarray:
    """All n evaluation points w_n^k, k in [0, n), of a transform of length n."""
    validate_transform_size(n)
    theta = root_angle(n, direction) * np.arange(n)
    return np.cos(theta) + 1j * np.sin(theta)
