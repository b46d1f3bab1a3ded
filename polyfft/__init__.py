from polyfft.complex_number import ComplexNumber, add, as_coefficient_vector, mul, sub
from polyfft.iterative_fft import iterative_fft, iterative_fft_inplace
from polyfft.poly_mult import PolynomialMultiplier, inverse_fft, naive_poly_mult, poly_mult
from polyfft.recursive_fft import recursive_fft
from polyfft.roots import FORWARD, INVERSE, TransformDirection
from polyfft.staged_fft import StagedPipeline, staged_convolution, staged_fft
from polyfft.transform_size import InvalidLength, bit_reverse_copy, next_power_of_two

__all__ = [
    "ComplexNumber", "add", "sub", "mul", "as_coefficient_vector",
    "TransformDirection", "FORWARD", "INVERSE", "InvalidLength",
    "recursive_fft", "iterative_fft", "iterative_fft_inplace",
    "staged_fft", "staged_convolution", "StagedPipeline",
    "PolynomialMultiplier", "poly_mult", "inverse_fft", "naive_poly_mult",
    "bit_reverse_copy", "next_power_of_two",
]
