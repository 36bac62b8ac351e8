"""Timing comparison of the heap allocator against plain Python buffers."""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass
from typing import TextIO

from halloc.heap import Heap

ITERATIONS = 50000
MIXED_SIZES = (8, 16, 32, 64, 128, 256, 512, 1024)
SMALL_SIZE = 64


@dataclass(frozen=True)
class BenchResult:
    """The time taken by a named run of *iterations* operations."""

    name: str
    elapsed: float
    iterations: int

    @property
    def ops_per_sec(self) -> float:
        if self.elapsed <= 0:
            return float("inf")
        return self.iterations / self.elapsed

    @property
    def ns_per_op(self) -> float:
        return self.elapsed / self.iterations * 1e9


def format_result(result: BenchResult) -> str:
    """Render one result as a line of the benchmark report."""
    return (
        f"  {result.name:<35s} {result.ops_per_sec:10.0f} ops/sec"
        f"  {result.ns_per_op:6.1f} ns/op"
    )


def _check(iterations: int) -> None:
    if iterations < 1:
        raise ValueError("iterations must be at least 1")


def bench_small_alloc_free(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time a run of 64-byte allocations followed by freeing them all."""
    _check(iterations)
    heap = Heap()
    start = time.perf_counter()
    ptrs = [heap.alloc(SMALL_SIZE) for _ in range(iterations)]
    mid = time.perf_counter()
    for ptr in ptrs:
        heap.free(ptr)
    end = time.perf_counter()
    return [
        BenchResult("halloc(64)", mid - start, iterations),
        BenchResult("hfree(64)", end - mid, iterations),
    ]


def bench_system_small_alloc_free(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time the same pattern using Python bytearrays."""
    _check(iterations)
    start = time.perf_counter()
    buffers = [bytearray(SMALL_SIZE) for _ in range(iterations)]
    mid = time.perf_counter()
    while buffers:
        buffers.pop()
    end = time.perf_counter()
    return [
        BenchResult("bytearray(64)", mid - start, iterations),
        BenchResult("release(64)", end - mid, iterations),
    ]


def bench_mixed_sizes(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time allocating cycling sizes from 8 to 1024 bytes, then freeing them."""
    _check(iterations)
    heap = Heap()
    start = time.perf_counter()
    ptrs = [heap.alloc(MIXED_SIZES[i % len(MIXED_SIZES)]) for i in range(iterations)]
    for ptr in ptrs:
        heap.free(ptr)
    end = time.perf_counter()
    return [BenchResult("halloc+hfree mixed sizes", end - start, iterations * 2)]


def bench_system_mixed_sizes(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time the mixed-size pattern using Python bytearrays."""
    _check(iterations)
    start = time.perf_counter()
    buffers = [bytearray(MIXED_SIZES[i % len(MIXED_SIZES)]) for i in range(iterations)]
    while buffers:
        buffers.pop()
    end = time.perf_counter()
    return [BenchResult("bytearray+release mixed sizes", end - start, iterations * 2)]


def bench_interleaved(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time allocations where every second step frees the previous block."""
    _check(iterations)
    heap = Heap()
    ptrs: list[int | None] = []
    start = time.perf_counter()
    for i in range(iterations):
        ptrs.append(heap.alloc(SMALL_SIZE))
        if i > 0 and i % 2 == 0:
            heap.free(ptrs[i - 1])
            ptrs[i - 1] = None
    for ptr in ptrs:
        if ptr is not None:
            heap.free(ptr)
    end = time.perf_counter()
    return [BenchResult("halloc+hfree interleaved", end - start, iterations)]


def bench_system_interleaved(iterations: int = ITERATIONS) -> list[BenchResult]:
    """Time the interleaved pattern using Python bytearrays."""
    _check(iterations)
    buffers: list[bytearray | None] = []
    start = time.perf_counter()
    for i in range(iterations):
        buffers.append(bytearray(SMALL_SIZE))
        if i > 0 and i % 2 == 0:
            buffers[i - 1] = None
    buffers.clear()
    end = time.perf_counter()
    return [BenchResult("bytearray+release interleaved", end - start, iterations)]


_SECTIONS = (
    ("[ Small allocations (64 bytes) ]", (bench_small_alloc_free, bench_system_small_alloc_free)),
    ("[ Mixed sizes (8 - 1024 bytes) ]", (bench_mixed_sizes, bench_system_mixed_sizes)),
    ("[ Interleaved alloc/free ]", (bench_interleaved, bench_system_interleaved)),
)


def run_benchmarks(
    iterations: int = ITERATIONS, file: TextIO | None = None
) -> list[BenchResult]:
    """Run every benchmark, print the report and return all results."""
    _check(iterations)
    out = sys.stdout if file is None else file
    print(f"halloc benchmark — {iterations} iterations per test", file=out)
    results: list[BenchResult] = []
    for title, benches in _SECTIONS:
        print(f"\n{title}", file=out)
        for bench in benches:
            for result in bench(iterations):
                print(format_result(result), file=out)
                results.append(result)
    print("\nDone.", file=out)
    return results


def _positive(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point for the benchmark."""
    parser = argparse.ArgumentParser(
        prog="halloc-bench", description="Benchmark the halloc heap allocator."
    )
    parser.add_argument(
        "-n", "--iterations", type=_positive, default=ITERATIONS,
        help=f"operations per test (default {ITERATIONS})",
    )
    args = parser.parse_args(argv)
    run_benchmarks(args.iterations)
    return 0


if __name__ == "__main__":
    sys.exit(main())