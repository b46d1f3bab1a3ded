"""
FFT as an explicit pipeline of data-parallel stages.

Stage 0 is the bit-reversal permutation (n unit tasks), stages 1..log2(n) are
butterfly stages of span 2^t (n/2 unit tasks each). Tasks inside a stage
write disjoint slots, so a backend may run them in any order or all at once;
a stage must complete before the next starts. Stages read one buffer and write
the other, and the two buffers swap roles after every stage.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional

import numpy as np

from polyfft.complex_number import add, as_coefficient_vector, mul, sub
from polyfft.roots import FORWARD, INVERSE, TransformDirection, twiddle_factors
from polyfft.transform_size import InvalidLength, bit_reversal_indices, validate_transform_size


class PermutationStage:
    """dst[rev(i)] = src[i]"""

    index = 0

    def __init__(self, n: int):
        self.rev = bit_reversal_indices(n)

    def num_tasks(self, n: int) -> int:
        return n

    def run_lanes(self, tasks, src: np.ndarray, dst: np.ndarray) -> None:
        dst[self.rev[tasks]] = src[tasks]

    def run_task(self, task: int, src: np.ndarray, dst: np.ndarray) -> None:
        self.run_lanes(task, src, dst)

    def __repr__(self):
        return "PermutationStage()"


class ButterflyStage:
    """
    Butterfly stage t with span s = 2^t.

    Task k belongs to block k // (s/2) and pairs top = block*s + j with
    bottom = top + s/2, where j = k % (s/2).
    """

    def __init__(self, stage: int, direction: TransformDirection):
        if stage < 1:
            raise ValueError(f"butterfly stages start at 1, got {stage}")
        self.index = stage
        self.span = 1 << stage
        self.half = self.span >> 1
        self.w = twiddle_factors(self.span, direction)

    def num_tasks(self, n: int) -> int:
        return n // 2

    def pairs(self, tasks):
        block, j = divmod(tasks, self.half)
        top = block * self.span + j
        return top, top + self.half, j

    def run_lanes(self, tasks, src: np.ndarray, dst: np.ndarray) -> None:
        top, bottom, j = self.pairs(tasks)
        t = mul(self.w[j], src[bottom])
        u = src[top]
        dst[top] = add(u, t)
        dst[bottom] = sub(u, t)

    def run_task(self, task: int, src: np.ndarray, dst: np.ndarray) -> None:
        self.run_lanes(task, src, dst)

    def __repr__(self):
        return f"ButterflyStage(stage={self.index}, span={self.span})"


class PointwiseMultiplyStage:
    """dst[i] = src[i] * operand[i]; joins two forward transforms."""

    index = None

    def __init__(self, operand: np.ndarray):
        self.operand = operand

    def num_tasks(self, n: int) -> int:
        return n

    def run_lanes(self, tasks, src: np.ndarray, dst: np.ndarray) -> None:
        dst[tasks] = mul(src[tasks], self.operand[tasks])

    def run_task(self, task: int, src: np.ndarray, dst: np.ndarray) -> None:
        self.run_lanes(task, src, dst)

    def __repr__(self):
        return "PointwiseMultiplyStage()"


def build_stages(n: int, direction: TransformDirection = FORWARD) -> list:
    """[PermutationStage] + log2(n) butterfly stages."""
    levels = validate_transform_size(n)
    return [PermutationStage(n)] + [ButterflyStage(t, direction) for t in range(1, levels + 1)]


class SerialBackend:
    """One lane: tasks run one after another."""

    name = "serial"

    def run_stage(self, stage, n: int, src: np.ndarray, dst: np.ndarray) -> None:
        for task in range(stage.num_tasks(n)):
            stage.run_task(task, src, dst)


class VectorizedBackend:
    """Every task of a stage as one NumPy operation over index vectors."""

    name = "vectorized"

    def run_stage(self, stage, n: int, src: np.ndarray, dst: np.ndarray) -> None:
        stage.run_lanes(np.arange(stage.num_tasks(n)), src, dst)


class ThreadPoolBackend:
    """
    Splits each stage into chunks of tasks run on a thread pool. The stage
    barrier is waiting for every chunk future before returning.
    """

    name = "threads"

    def __init__(self, max_workers: Optional[int] = None, chunk_size: int = 256):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.max_workers = max_workers
        self.chunk_size = chunk_size
        self._executor = None
        self._lock = threading.Lock()

    @property
    def executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.max_workers)
            return self._executor

    def run_stage(self, stage, n: int, src: np.ndarray, dst: np.ndarray) -> None:
        num_tasks = stage.num_tasks(n)
        executor = self.executor
        futures = [
            executor.submit(stage.run_lanes, np.arange(start, min(start + self.chunk_size, num_tasks)), src, dst)
            for start in range(0, num_tasks, self.chunk_size)
        ]
        wait(futures)
        for future in futures:
            future.result()

    def close(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


BACKENDS = {
    "serial": SerialBackend,
    "vectorized": VectorizedBackend,
    "threads": ThreadPoolBackend,
}


def get_backend(name: str, workers: Optional[int] = None):
    if name not in BACKENDS:
        raise ValueError(f"unknown backend {name!r}, expected one of {sorted(BACKENDS)}")
    if name == "threads":
        return ThreadPoolBackend(max_workers=workers)
    return BACKENDS[name]()


def run_stages(stages: list, src: np.ndarray, backend=None, verbose: bool = False) -> np.ndarray:
    """
    Run stages over a pair of ping-pong buffers. src is consumed as the first
    buffer; the returned array is whichever buffer the last stage wrote.
    """
    backend = backend or VectorizedBackend()
    n = len(src)
    dst = np.empty_like(src)
    for stage in stages:
        backend.run_stage(stage, n, src, dst)
        src, dst = dst, src
        if verbose:
            print(f"    After {stage!r}: {np.round(src, 4)}")
    return src


class StagedPipeline:
    """The stage list of one transform of length n in one direction."""

    def __init__(self, n: int, direction: TransformDirection = FORWARD, backend=None):
        self.n = n
        self.direction = direction
        self.stages = build_stages(n, direction)
        self.backend = backend

    def __len__(self):
        return len(self.stages)

    def run(self, a, verbose: bool = False) -> np.ndarray:
        b = as_coefficient_vector(a)
        if len(b) != self.n:
            raise InvalidLength(f"pipeline built for n={self.n}, got input of length {len(b)}")
        if verbose:
            print(f" -> Staged FFT-{self.n} ({self.direction.name}), {len(self.stages)} stages")
        return run_stages(self.stages, b, self.backend, verbose)


def staged_fft(a, direction: TransformDirection = FORWARD, backend=None, verbose: bool = False) -> np.ndarray:
    """Same contract as recursive_fft, computed by StagedPipeline."""
    b = as_coefficient_vector(a)
    return StagedPipeline(len(b), direction, backend).run(b, verbose)


def staged_convolution(a, b, backend=None, verbose: bool = False) -> np.ndarray:
    """
    Forward stages on a and b, a point-wise multiply stage, then the inverse
    stages. The result is the unscaled inverse transform (n times the cyclic
    convolution of a and b).
    """
    fa = as_coefficient_vector(a)
    fb = as_coefficient_vector(b)
    n = len(fa)
    if len(fb) != n:
        raise InvalidLength(f"operands must have the same length, got {n} and {len(fb)}")

    fb = StagedPipeline(n, FORWARD, backend).run(fb, verbose)
    stages: List = build_stages(n, FORWARD) + [PointwiseMultiplyStage(fb)] + build_stages(n, INVERSE)
    if verbose:
        print(f" -> Staged convolution n={n}, {len(stages)} stages")
    return run_stages(stages, fa, backend, verbose)
