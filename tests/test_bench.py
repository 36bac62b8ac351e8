import io

import pytest

from halloc.bench import (
    BenchResult,
    bench_interleaved,
    bench_mixed_sizes,
    bench_small_alloc_free,
    bench_system_interleaved,
    bench_system_mixed_sizes,
    bench_system_small_alloc_free,
    format_result,
    main,
    run_benchmarks,
)


def test_result_rates_are_reciprocal():
    result = BenchResult("halloc(64)", 0.25, 1000)
    assert result.ops_per_sec * result.ns_per_op == pytest.approx(1e9)


def test_result_zero_elapsed_is_infinite_rate():
    result = BenchResult("halloc(64)", 0.0, 10)
    assert result.ops_per_sec == float("inf")


def test_format_result_layout():
    line = format_result(BenchResult("halloc(64)", 0.5, 100))
    assert line.startswith("  halloc(64)")
    assert line.endswith(" ns/op")
    assert " ops/sec  " in line
    assert line.index("ops/sec") > 35


def test_small_alloc_free_names_and_counts():
    results = bench_small_alloc_free(200)
    assert [r.name for r in results] == ["halloc(64)", "hfree(64)"]
    assert all(r.iterations == 200 for r in results)
    assert all(r.elapsed >= 0 for r in results)


def test_system_small_alloc_free_counts():
    results = bench_system_small_alloc_free(50)
    assert len(results) == 2
    assert all(r.iterations == 50 for r in results)


def test_mixed_sizes_counts_both_operations():
    (result,) = bench_mixed_sizes(64)
    assert result.name == "halloc+hfree mixed sizes"
    assert result.iterations == 128


def test_system_mixed_sizes_counts_both_operations():
    (result,) = bench_system_mixed_sizes(30)
    assert result.iterations == 60


def test_interleaved_counts():
    (result,) = bench_interleaved(101)
    assert result.name == "halloc+hfree interleaved"
    assert result.iterations == 101


def test_system_interleaved_counts():
    (result,) = bench_system_interleaved(7)
    assert result.iterations == 7


@pytest.mark.parametrize(
    "bench",
    [
        bench_small_alloc_free,
        bench_system_small_alloc_free,
        bench_mixed_sizes,
        bench_system_mixed_sizes,
        bench_interleaved,
        bench_system_interleaved,
    ],
)
def test_benchmarks_reject_non_positive_iterations(bench):
    with pytest.raises(ValueError):
        bench(0)


def test_run_benchmarks_report():
    out = io.StringIO()
    results = run_benchmarks(20, out)
    text = out.getvalue()
    assert text.startswith("halloc benchmark — 20 iterations per test\n")
    assert "[ Small allocations (64 bytes) ]" in text
    assert "[ Mixed sizes (8 - 1024 bytes) ]" in text
    assert "[ Interleaved alloc/free ]" in text
    assert text.rstrip().endswith("Done.")
    assert len(results) == 8
    for result in results:
        assert format_result(result) in text


def test_main_runs_with_small_count(capsys):
    assert main(["--iterations", "5"]) == 0
    captured = capsys.readouterr()
    assert "halloc benchmark — 5 iterations per test" in captured.out


def test_main_rejects_zero_iterations():
    with pytest.raises(SystemExit) as info:
        main(["-n", "0"])
    assert info.value.code == 2