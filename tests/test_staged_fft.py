# tests/test_staged_fft.py
import threading

import numpy as np
import pytest
from polyfft.roots import FORWARD, INVERSE
from polyfft.staged_fft import (BACKENDS, ButterflyStage, PermutationStage, PointwiseMultiplyStage, SerialBackend,
                                StagedPipeline, ThreadPoolBackend, VectorizedBackend, build_stages, get_backend,
                                run_stages, staged_convolution, staged_fft)
from polyfft.transform_size import InvalidLength


def random_vector(n, seed=0):
    rng = np.random.default_rng(seed)
    return rng.normal(size=n) + 1j * rng.normal(size=n)


@pytest.mark.parametrize("n", [1, 2, 16, 1024])
def test_stage_layout(n):
    stages = build_stages(n)
    assert len(stages) == int(np.log2(n)) + 1
    assert isinstance(stages[0], PermutationStage)
    assert stages[0].num_tasks(n) == n
    for t, stage in enumerate(stages[1:], start=1):
        assert stage.index == t
        assert stage.span == 2 ** t
        assert stage.num_tasks(n) == n // 2


def test_butterfly_tasks_write_disjoint_slots():
    n = 32
    for stage in build_stages(n)[1:]:
        top, bottom, _ = stage.pairs(np.arange(stage.num_tasks(n)))
        slots = np.concatenate([top, bottom])
        assert sorted(slots) == list(range(n))


def test_butterfly_stage_starts_at_one():
    with pytest.raises(ValueError):
        ButterflyStage(0, FORWARD)


@pytest.mark.parametrize("backend", [SerialBackend(), VectorizedBackend()])
@pytest.mark.parametrize("n", [1, 2, 8, 128])
def test_backends_match_numpy(backend, n):
    v = random_vector(n, seed=n)
    np.testing.assert_allclose(staged_fft(v, FORWARD, backend=backend), np.fft.fft(v), atol=1e-9 * n)


@pytest.mark.parametrize("n", [1, 2, 8, 128])
def test_thread_pool_matches_numpy(n):
    v = random_vector(n, seed=n)
    with ThreadPoolBackend(max_workers=4, chunk_size=8) as backend:
        y = staged_fft(v, FORWARD, backend=backend)
    np.testing.assert_allclose(y, np.fft.fft(v), atol=1e-9 * n)


def test_thread_pool_creates_one_executor_across_threads():
    with ThreadPoolBackend(max_workers=2) as backend:
        seen = []
        threads = [threading.Thread(target=lambda: seen.append(backend.executor)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(seen) == 8
        assert all(e is seen[0] for e in seen)
    assert backend._executor is None


def test_run_task_and_run_lanes_agree():
    n = 16
    v = random_vector(n, seed=4)
    for stage in build_stages(n, INVERSE):
        lanes = np.empty_like(v)
        single = np.empty_like(v)
        stage.run_lanes(np.arange(stage.num_tasks(n)), v, lanes)
        for task in range(stage.num_tasks(n)):
            stage.run_task(task, v, single)
        np.testing.assert_array_equal(lanes, single)


def test_pipeline_ping_pong_leaves_input_alone():
    v = random_vector(8, seed=9)
    before = v.copy()
    pipeline = StagedPipeline(8, FORWARD)
    assert len(pipeline) == 4
    out = pipeline.run(v)
    assert out is not v
    np.testing.assert_array_equal(v, before)


def test_pipeline_rejects_wrong_length():
    with pytest.raises(InvalidLength):
        StagedPipeline(8).run(np.ones(4))
    with pytest.raises(InvalidLength):
        staged_fft(np.ones(12))


def test_stage_barrier_orders_stages():
    """No task of stage t+1 may start while stage t still has tasks running."""

    class RecordingBackend(ThreadPoolBackend):
        def __init__(self):
            super().__init__(max_workers=4, chunk_size=2)
            self.lock = threading.Lock()
            self.events = []

        def run_stage(self, stage, n, src, dst):
            backend = self

            class Recorder:
                def num_tasks(self, n):
                    return stage.num_tasks(n)

                def run_lanes(self, tasks, src, dst):
                    with backend.lock:
                        backend.events.append(("start", stage.index))
                    stage.run_lanes(tasks, src, dst)
                    with backend.lock:
                        backend.events.append(("end", stage.index))

            super().run_stage(Recorder(), n, src, dst)

    backend = RecordingBackend()
    with backend:
        y = staged_fft(random_vector(32, seed=1), backend=backend)
    np.testing.assert_allclose(y, np.fft.fft(random_vector(32, seed=1)), atol=1e-9)

    seen = [index for _, index in backend.events]
    assert seen == sorted(seen)


def test_thread_pool_propagates_task_errors():
    class Broken:
        def num_tasks(self, n):
            return n

        def run_lanes(self, tasks, src, dst):
            raise RuntimeError("lane failed")

    with ThreadPoolBackend(max_workers=2) as backend:
        with pytest.raises(RuntimeError, match="lane failed"):
            run_stages([Broken()], np.zeros(4, dtype=complex), backend)


def test_pointwise_stage():
    a = np.array([1 + 1j, 2, 3j, -1])
    b = np.array([2, 1j, 1, 1 - 1j])
    dst = np.empty(4, dtype=complex)
    VectorizedBackend().run_stage(PointwiseMultiplyStage(b), 4, a, dst)
    np.testing.assert_allclose(dst, a * b)


@pytest.mark.parametrize("name", ["vectorized", "serial", "threads"])
def test_staged_convolution_is_unscaled_cyclic_convolution(name):
    a = np.array([1, 2, 3, 0, 0, 0, 0, 0], dtype=complex)
    b = np.array([4, 5, 0, 0, 0, 0, 0, 0], dtype=complex)
    backend = get_backend(name, workers=2)
    try:
        out = staged_convolution(a, b, backend=backend)
    finally:
        if hasattr(backend, "close"):
            backend.close()
    np.testing.assert_allclose(out / 8, [4, 13, 22, 15, 0, 0, 0, 0], atol=1e-12)


def test_staged_convolution_rejects_mismatched_operands():
    with pytest.raises(InvalidLength):
        staged_convolution(np.ones(8), np.ones(4))


def test_get_backend():
    assert isinstance(get_backend("serial"), SerialBackend)
    threads = get_backend("threads", workers=3)
    assert threads.max_workers == 3
    assert set(BACKENDS) == {"serial", "vectorized", "threads"}
    with pytest.raises(ValueError):
        get_backend("opencl")
