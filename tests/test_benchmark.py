from __future__ import annotations

import numpy as np
import pytest

from dimreduction.benchmark_common import (
    ComparisonRunner,
    LSHBenchmark,
    ResultsVisualizer,
    SVDBenchmark,
    pivot_table,
    reconstruction_error,
    results_frame,
    summary_table,
)
from dimreduction.matrix_generators import MatrixGenerator


def test_svd_benchmark_full_rank_reconstructs_exactly():
    A = MatrixGenerator.random_matrix(12, 8, seed=0)
    result = SVDBenchmark("Full SVD").run(A, 8)

    assert result.success
    assert result.kind == "svd"
    assert result.error < 1e-10


def test_svd_benchmark_records_failures():
    result = SVDBenchmark("Full SVD").run(np.zeros((6, 4)), 2)

    assert not result.success
    assert result.error == np.inf
    assert "rank" in result.error_message


def test_lsh_benchmark_error_is_small_for_many_bits():
    A = MatrixGenerator.random_matrix(50, 100, seed=1)
    result = LSHBenchmark("SRP dense", seed=2).run(A, 1024)

    assert result.success
    assert result.kind == "lsh"
    assert result.error < 0.05


def test_reconstruction_error_of_truncation():
    A = np.diag([3.0, 4.0])
    approx = np.diag([0.0, 4.0])
    assert reconstruction_error(A, approx) == pytest.approx(3.0 / 5.0)


@pytest.fixture(scope="module")
def results():
    runner = ComparisonRunner(
        matrix_generator=lambda: MatrixGenerator.term_document_matrix(60, 30, density=0.2, seed=3),
        ranks=[1, 3, 5],
        bits=[32, 128],
        seed=4,
        skip_power_svd=True,
    )
    runner.setup()
    return runner.run_all()


def test_runner_covers_every_method_and_parameter(results):
    df = results_frame(results)

    assert len(df) == 3 * 2 + 2 * 3
    assert df["success"].all()
    assert set(df.loc[df["kind"] == "svd", "parameter"]) == {1, 3, 5}
    assert set(df.loc[df["kind"] == "lsh", "parameter"]) == {32, 128}


def test_svd_error_decreases_with_rank(results):
    table = pivot_table(results, "svd")
    assert list(table.index) == [1, 3, 5]
    assert np.all(np.diff(table["Full SVD"].to_numpy()) < 0)


def test_summary_table(results):
    summary = summary_table(results)
    assert ("svd", "Full SVD") in summary.index
    assert ("lsh", "SRP 1/3") in summary.index
    assert list(summary.columns) == ["time_sec", "error", "memory_kb"]


def test_visualizer_writes_plots(results, tmp_path):
    saved = ResultsVisualizer(results, matrix_type_label="tdm").plot_all(save_dir=str(tmp_path))

    names = sorted(p.name for p in saved)
    assert names == ["error_vs_bits.png", "error_vs_rank.png", "time_vs_bits.png", "time_vs_rank.png"]
    assert all(p.exists() for p in saved)


def test_runner_validation():
    with pytest.raises(ValueError):
        ComparisonRunner(ranks=[1])

    runner = ComparisonRunner(matrix=np.ones((4, 3)), ranks=[5])
    with pytest.raises(ValueError):
        runner.setup()

    with pytest.raises(RuntimeError):
        ComparisonRunner(matrix=np.ones((4, 3)), ranks=[1]).run_all()
