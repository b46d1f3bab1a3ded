#!/usr/bin/env python3
"""
Command-line driver for FFT polynomial multiplication.

Examples:
  echo "3  1 2 3  4 5 6" | polyfft multiply       # (1+2x+3x^2)(4+5x+6x^2)
  echo "4  4 3 2 1" | polyfft transform --method iterative
  polyfft benchmark --max-log-n 12 --method staged --backend threads
  polyfft selftest 64 --num-tests 10 -v
"""

import argparse
import random
import sys
import time

import numpy as np

from polyfft.poly_mult import (DEFAULT_METHOD, TRANSFORMS, PolynomialMultiplier, get_transform,
                               inverse_fft, naive_poly_mult, round_coefficients)
from polyfft.roots import FORWARD
from polyfft.staged_fft import BACKENDS, get_backend
from polyfft.transform_size import InvalidLength, next_power_of_two, validate_transform_size

MAX_COEFF = 10
DEFAULT_MAX_LOG_N = 10
DEFAULT_LIMIT = 101


def parse_number(token: str):
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return complex(token)


def read_polynomials(stream, count: int):
    """Read `n` followed by `count` groups of n coefficients."""
    tokens = stream.read().split()
    if not tokens:
        raise ValueError("expected the polynomial size on input")
    n = int(tokens[0])
    if n <= 0:
        raise InvalidLength(f"polynomial size must be positive, got {n}")
    values = [parse_number(t) for t in tokens[1:]]
    if len(values) < n * count:
        raise ValueError(f"expected {n * count} coefficients, got {len(values)}")
    return [values[i * n:(i + 1) * n] for i in range(count)]


def format_point(k: int, value) -> str:
    sign = "-" if value.imag < 0.0 else "+"
    return f"[{k}] = {value.real:.4f} {sign} {abs(value.imag):.4f}i"


def run_multiply(args, backend) -> int:
    p1, p2 = read_polynomials(sys.stdin, 2)
    multiplier = PolynomialMultiplier(args.method, backend=backend, verbose=args.verbose)

    print("\nPrinting coefficients for x^k:")
    if any(isinstance(c, complex) for c in p1 + p2):
        for k, c in enumerate(multiplier.multiply_complex(p1, p2)[:args.limit]):
            print(format_point(k, c))
        return 0

    result = multiplier.multiply(p1, p2)
    integral = all(isinstance(c, int) for c in p1 + p2)
    for k, c in enumerate(result[:args.limit]):
        if integral:
            print(f"[{k}] = {round_coefficients(c)}")
        else:
            print(f"[{k}] = {c:.4f}")
    return 0


def run_transform(args, backend) -> int:
    (coeffs,) = read_polynomials(sys.stdin, 1)
    N = next_power_of_two(len(coeffs))
    padded = list(coeffs) + [0] * (N - len(coeffs))

    if args.method == "staged":
        y = get_transform(args.method)(padded, FORWARD, backend=backend, verbose=args.verbose)
    else:
        y = get_transform(args.method)(padded, FORWARD, verbose=args.verbose)

    print("\nPrinting coefficient evaluations at w_n^k = e^(-2*pi*i*k/n):")
    for k, value in enumerate(y[:args.limit]):
        print(format_point(k, value))
    return 0


def run_benchmark(args, backend) -> int:
    rng = random.Random(args.seed)
    multiplier = PolynomialMultiplier(args.method, backend=backend)
    print(f"Benchmarking {args.method} FFT multiplication, {args.num_runs} runs per size")
    print("=" * 60)
    for shift in range(1, args.max_log_n + 1):
        n = 1 << shift
        start_time = time.time()
        for _ in range(args.num_runs):
            p1 = [rng.randrange(MAX_COEFF) for _ in range(n)]
            p2 = [rng.randrange(MAX_COEFF) for _ in range(n)]
            multiplier.multiply(p1, p2)
        elapsed = time.time() - start_time
        print(f"[N = 2^{shift:<2d} = {n:<7d}] Time elapsed: {elapsed:.9f} sec")
    return 0


def generate_random_vector(N, rng, mode='complex'):
    """Generate a random test vector of size N."""
    if mode == 'complex':
        return [complex(rng.randint(-10, 10), rng.randint(-5, 5)) for _ in range(N)]
    return [rng.randint(-20, 20) for _ in range(N)]


def run_selftest(args, backend) -> int:
    if args.N is None:
        print("Error: selftest needs a transform size N")
        return 1
    validate_transform_size(args.N)
    rng = random.Random(args.seed)
    kwargs = {"backend": backend} if args.method == "staged" else {}
    transform = get_transform(args.method)
    multiplier = PolynomialMultiplier(args.method, backend=backend)

    print(f"Testing {args.method} FFT with {args.num_tests} random vectors (N={args.N})")
    print("=" * 60)

    all_passed = True
    max_error = 0.0
    for i in range(args.num_tests):
        vec = np.array(generate_random_vector(args.N, rng), dtype=complex)
        recovered = inverse_fft(transform(vec, FORWARD, **kwargs), args.method, **kwargs)
        error = float(np.max(np.abs(vec - recovered)))

        p1 = generate_random_vector(args.N, rng, mode='integer')
        p2 = generate_random_vector(rng.randint(1, args.N), rng, mode='integer')
        expected = np.real(naive_poly_mult(p1, p2))
        error = max(error, float(np.max(np.abs(multiplier.multiply(p1, p2) - expected))))
        max_error = max(max_error, error)

        if error < 1e-6:
            status = "✓ PASS"
        else:
            status = "✗ FAIL"
            all_passed = False
        print(f"Test {i+1}: {status}")
        if args.verbose or status != "✓ PASS":
            print(f"  Roundtrip/convolution error: {error:.2e}")

    print(f"\nSummary: {args.num_tests} tests, max error: {max_error:.2e}")
    return 0 if all_passed else 1


COMMANDS = {
    'multiply': run_multiply,
    'transform': run_transform,
    'benchmark': run_benchmark,
    'selftest': run_selftest,
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog='polyfft',
        description='Polynomial multiplication with recursive, iterative and staged FFTs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input format (multiply / transform): the size n, then n coefficients per
polynomial, x^0 coefficient first, whitespace separated, on stdin.

Examples:
  %(prog)s multiply < input.txt
  %(prog)s transform --method iterative < input.txt
  %(prog)s benchmark --max-log-n 12 --num-runs 5
  %(prog)s selftest 256 --method staged --backend threads --workers 4
        """)
    parser.add_argument('mode', choices=list(COMMANDS),
                        help='multiply two polynomials, print a forward transform, time multiplication, or run random self-checks')
    parser.add_argument('N', type=int, nargs='?',
                        help='Transform size for selftest (must be a power of 2)')
    parser.add_argument('--method', choices=sorted(TRANSFORMS), default=DEFAULT_METHOD,
                        help=f'FFT formulation (default: {DEFAULT_METHOD})')
    parser.add_argument('--backend', choices=sorted(BACKENDS), default='vectorized',
                        help='Stage backend for --method staged (default: vectorized)')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker threads for --backend threads')
    parser.add_argument('--limit', type=int, default=DEFAULT_LIMIT,
                        help=f'Maximum number of output lines (default: {DEFAULT_LIMIT})')
    parser.add_argument('--max-log-n', type=int, default=DEFAULT_MAX_LOG_N,
                        help=f'Benchmark sizes 2^1 .. 2^max-log-n (default: {DEFAULT_MAX_LOG_N})')
    parser.add_argument('--num-runs', type=int, default=10,
                        help='Multiplications per size in benchmark mode (default: 10)')
    parser.add_argument('--num-tests', type=int, default=3,
                        help='Number of random test cases in selftest mode (default: 3)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for benchmark and selftest')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print intermediate vectors')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    backend = get_backend(args.backend, args.workers)
    try:
        return COMMANDS[args.mode](args, backend)
    except ValueError as e:
        # InvalidLength is a ValueError
        print(f"Error: {e}")
        return 1
    finally:
        if hasattr(backend, 'close'):
            backend.close()


if __name__ == "__main__":
    sys.exit(main())
