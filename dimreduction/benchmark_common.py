"""Shared benchmarking infrastructure for the dimensionality-reduction transforms.

This module runs truncated SVD solvers across ranks and sign random
projection across bit counts, measuring execution time, memory usage and
how well each reduced representation preserves the original data.
"""

import time
import tracemalloc
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import scipy.sparse as sp

from .measures import angular_similarities, hamming_similarities
from .sign_random_projection import SignRandomProjection
from .truncated_svd import TruncatedSVD


@dataclass
class BenchmarkResult:
    """Store results for a single method at a single rank or bit count."""

    method_name: str
    kind: str
    parameter: int
    time_sec: float
    error: float
    memory_bytes: int
    success: bool = True
    error_message: str = ""


class AlgorithmBenchmark:
    """Benchmark a single transform configuration.

    Subclasses build the transform and score its output in `_evaluate`.
    """

    kind = ""

    def __init__(self, name: str):
        self.name = name

    def run(self, A, parameter: int) -> BenchmarkResult:
        """
        Run benchmark for given matrix and rank / bit count.

        Args:
            A: input matrix (features x samples)
            parameter: rank for SVD, number of bits for LSH

        Returns:
            BenchmarkResult with all metrics
        """
        try:
            tracemalloc.start()

            start_time = time.perf_counter()
            output = self._fit_transform(A, parameter)
            time_sec = time.perf_counter() - start_time

            _, peak = tracemalloc.get_traced_memory()
            tracemalloc.stop()

            return BenchmarkResult(
                method_name=self.name,
                kind=self.kind,
                parameter=parameter,
                time_sec=time_sec,
                error=self._evaluate(A, output),
                memory_bytes=peak,
                success=True,
            )

        except Exception as e:
            if tracemalloc.is_tracing():
                tracemalloc.stop()
            # A failing configuration is recorded and the sweep continues
            return BenchmarkResult(
                method_name=self.name,
                kind=self.kind,
                parameter=parameter,
                time_sec=0.0,
                error=np.inf,
                memory_bytes=0,
                success=False,
                error_message=str(e),
            )

    def _fit_transform(self, A, parameter):
        raise NotImplementedError

    def _evaluate(self, A, output) -> float:
        raise NotImplementedError


class SVDBenchmark(AlgorithmBenchmark):
    """Truncated SVD scored by relative Frobenius reconstruction error."""

    kind = "svd"

    def __init__(self, name: str, algorithm: str = "full", seed: int = 42):
        super().__init__(name)
        self.algorithm = algorithm
        self.seed = seed

    def _fit_transform(self, A, rank):
        svd = TruncatedSVD(rank, algorithm=self.algorithm, seed=self.seed)
        return svd, svd.fit_transform(A)

    def _evaluate(self, A, output) -> float:
        svd, latent = output
        return reconstruction_error(A, svd.components.T @ latent)


class LSHBenchmark(AlgorithmBenchmark):
    """Sign random projection scored by angular-vs-Hamming similarity error."""

    kind = "lsh"

    def __init__(self, name: str, density: float = 1.0, seed: int = 42, query_col: int = 0):
        super().__init__(name)
        self.density = density
        self.seed = seed
        self.query_col = query_col

    def _fit_transform(self, A, bits):
        return SignRandomProjection(bits, density=self.density, seed=self.seed).fit_transform(A)

    def _evaluate(self, A, hashed) -> float:
        return similarity_error(A, hashed, self.query_col)


def reconstruction_error(A, A_approx: np.ndarray) -> float:
    """||A - A_approx||_F / ||A||_F."""
    A = A.toarray() if sp.issparse(A) else np.asarray(A)
    return float(np.linalg.norm(A - A_approx, ord="fro") / np.linalg.norm(A, ord="fro"))


def similarity_error(A, hashed, query_col: int = 0) -> float:
    """
    Mean absolute relative difference between angular and Hamming similarity.

    Column `query_col` is compared against every column, in the original space
    by angular similarity and in the hashed space by Hamming similarity.

    Args:
        A: (m x n) input matrix
        hashed: (bits x n) BinaryMatrix from a sign random projection of A
        query_col: index of the query column

    Returns:
        mean over columns of |hamming - angular| / angular
    """
    A = A.toarray() if sp.issparse(A) else np.asarray(A, dtype=np.float64)
    ang = angular_similarities(A[:, query_col], A)
    ham = hamming_similarities(hashed.col(query_col), hashed)
    return float(np.mean(np.abs(ham - ang) / ang))


class ComparisonRunner:
    """Run comparison across multiple transforms, ranks and bit counts."""

    def __init__(
        self,
        matrix=None,
        matrix_generator: Optional[Callable] = None,
        ranks: Sequence[int] = (),
        bits: Sequence[int] = (),
        seed: int = 42,
        skip_power_svd: bool = False,
        matrix_description: str = "test matrix",
    ):
        """
        Initialize comparison runner.

        Args:
            matrix: Pre-generated or loaded matrix (optional)
            matrix_generator: Function that returns a matrix (optional)
            ranks: SVD ranks to test
            bits: LSH bit counts to test
            seed: random seed for the randomized methods
            skip_power_svd: if True, skip the power-iteration solver
            matrix_description: description for progress output
        """
        if (matrix is None) == (matrix_generator is None):
            raise ValueError("Must provide exactly one of: matrix or matrix_generator")

        self.matrix = matrix
        self.matrix_generator = matrix_generator
        self.ranks = sorted(set(ranks))
        self.bits = sorted(set(bits))
        self.seed = seed
        self.matrix_description = matrix_description
        self.A = None
        self.results: List[BenchmarkResult] = []

        self.svd_methods = [
            SVDBenchmark("Full SVD", "full", seed=seed),
            SVDBenchmark("Randomized SVD", "randomized", seed=seed),
        ]
        if not skip_power_svd:
            self.svd_methods.append(SVDBenchmark("Power SVD", "power", seed=seed))

        self.lsh_methods = [
            LSHBenchmark("SRP dense", density=1.0, seed=seed),
            LSHBenchmark("SRP 2/3", density=2.0 / 3.0, seed=seed),
            LSHBenchmark("SRP 1/3", density=1.0 / 3.0, seed=seed),
        ]

    def setup(self):
        """Generate/validate test matrix and validate inputs."""
        if self.matrix is not None:
            self.A = self.matrix
            print(f"Using provided {self.matrix_description}...")
        else:
            print(f"Generating {self.matrix_description} (seed={self.seed})...")
            self.A = self.matrix_generator()

        self._validate_inputs()

    def run_all(self) -> List[BenchmarkResult]:
        """Run every SVD method at every rank and every LSH method at every bit count."""
        if self.A is None:
            raise RuntimeError("Must call setup() before run_all()")

        sweeps = [
            ("Rank", self.ranks, self.svd_methods),
            ("Bits", self.bits, self.lsh_methods),
        ]
        for label, parameters, methods in sweeps:
            if not parameters:
                continue
            print(f"Testing {label.lower()}: {parameters}\n")

            for idx, parameter in enumerate(parameters, 1):
                print(f"{label} {parameter} ({idx}/{len(parameters)}):")

                for method in methods:
                    result = method.run(self.A, parameter)
                    self.results.append(result)

                    if result.success:
                        print(
                            f"  {method.name:15s}: {result.time_sec:.4f}s, "
                            f"error={result.error:.4f}, "
                            f"mem={result.memory_bytes // 1024}KB"
                        )
                    else:
                        print(f"  {method.name:15s}: FAILED - {result.error_message}")

                print()

        return self.results

    def _validate_inputs(self):
        """Validate matrix dimensions, ranks and bit counts."""
        if self.A is None:
            raise RuntimeError("Matrix not initialized")

        m, n = self.A.shape

        if m < 2 or n < 2:
            raise ValueError(f"Matrix dimensions must be at least 2×2, got {m}×{n}")

        if not self.ranks and not self.bits:
            raise ValueError("Nothing to run: provide ranks and/or bits")

        if self.ranks and (self.ranks[0] < 1 or self.ranks[-1] > min(m, n)):
            raise ValueError(
                f"Ranks must lie in [1, {min(m, n)}], got {self.ranks}"
            )

        if self.bits and self.bits[0] < 1:
            raise ValueError(f"Bit counts must be at least 1, got {self.bits}")


def results_frame(results: List[BenchmarkResult]) -> pd.DataFrame:
    """One row per benchmark result."""
    columns = [f for f in BenchmarkResult.__dataclass_fields__]
    return pd.DataFrame([asdict(r) for r in results], columns=columns)


def summary_table(results: List[BenchmarkResult]) -> pd.DataFrame:
    """Average time, error and memory per method over its successful runs."""
    df = results_frame(results)
    df = df[df["success"]].assign(memory_kb=lambda d: d["memory_bytes"] / 1024)
    return (
        df.groupby(["kind", "method_name"])[["time_sec", "error", "memory_kb"]]
        .mean()
        .sort_index()
    )


def pivot_table(results: List[BenchmarkResult], kind: str, value: str = "error") -> pd.DataFrame:
    """`value` indexed by rank / bit count with one column per method."""
    df = results_frame(results)
    df = df[(df["kind"] == kind) & df["success"]]
    return df.pivot(index="parameter", columns="method_name", values=value)


class ResultsVisualizer:
    """Create visualization plots from benchmark results."""

    def __init__(self, results: List[BenchmarkResult], matrix_type_label: str = ""):
        """
        Initialize visualizer.

        Args:
            results: List of benchmark results
            matrix_type_label: Label for the plot subfolder (e.g., "tdm_2000x500")
        """
        self.results = results
        self.matrix_type_label = matrix_type_label or "experiment"
        self.methods = sorted(set(r.method_name for r in results if r.success))

        self.colors = {
            "Full SVD": "#8c564b",
            "Randomized SVD": "#1f77b4",
            "Power SVD": "#d62728",
            "SRP dense": "#ff7f0e",
            "SRP 2/3": "#2ca02c",
            "SRP 1/3": "#9467bd",
        }
        self.markers = {
            "Full SVD": "P",
            "Randomized SVD": "o",
            "Power SVD": "X",
            "SRP dense": "s",
            "SRP 2/3": "^",
            "SRP 1/3": "D",
        }

    def plot_all(self, save_dir: str = ".") -> List[Path]:
        """Generate time and error plots for each sweep that has results."""
        experiment_dir = Path(save_dir) / self.matrix_type_label
        experiment_dir.mkdir(parents=True, exist_ok=True)

        saved = []
        for kind, xlabel, slug in (("svd", "Rank", "rank"), ("lsh", "Bits", "bits")):
            if not any(r.kind == kind and r.success for r in self.results):
                continue
            time_path = experiment_dir / f"time_vs_{slug}.png"
            error_path = experiment_dir / f"error_vs_{slug}.png"
            self.plot_metric(kind, "time_sec", time_path,
                             title=f"Execution Time vs {xlabel}", xlabel=xlabel,
                             ylabel="Time (seconds)", use_log_scale=True)
            self.plot_metric(kind, "error", error_path,
                             title=self._error_title(kind, xlabel), xlabel=xlabel,
                             ylabel="Error", use_log_scale=kind == "svd")
            saved.extend([time_path, error_path])

        print(f"\nPlots saved to {experiment_dir}:")
        for path in saved:
            print(f"  - {path.name}")
        return saved

    @staticmethod
    def _error_title(kind: str, xlabel: str) -> str:
        if kind == "svd":
            return f"Relative Reconstruction Error vs {xlabel}"
        return f"Angular vs Hamming Similarity Error vs {xlabel}"

    def plot_metric(self, kind: str, metric: str, save_path: Path, title: str,
                    xlabel: str, ylabel: str, use_log_scale: bool = False):
        """Plot one metric against rank / bit count for every method of a kind."""
        fig, ax = plt.subplots(figsize=(10, 6))

        for method in self.methods:
            data = [
                (r.parameter, getattr(r, metric))
                for r in self.results
                if r.method_name == method and r.kind == kind and r.success
            ]
            if data:
                xs, ys = zip(*data)
                ax.plot(
                    xs,
                    ys,
                    marker=self.markers.get(method, "o"),
                    color=self.colors.get(method, "gray"),
                    linewidth=2,
                    markersize=6,
                    label=method,
                )

        self._format_plot(ax, title=title, xlabel=xlabel, ylabel=ylabel,
                          use_log_scale=use_log_scale)
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close(fig)

    def _format_plot(
        self, ax, title: str, xlabel: str, ylabel: str, use_log_scale: bool = False
    ):
        """Helper to format plot with consistent style."""
        ax.set_title(title, fontsize=14, fontweight="bold")
        ax.set_xlabel(xlabel, fontsize=12)
        ax.set_ylabel(ylabel, fontsize=12)
        ax.grid(True, alpha=0.3, linestyle="--")
        ax.legend(fontsize=10, loc="best")

        if use_log_scale:
            ax.set_yscale("log")
