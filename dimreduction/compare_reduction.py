"""Dimensionality-Reduction Comparison Framework.

Benchmarks truncated SVD solvers across ranks and sign random projection
across bit counts, measuring execution time, approximation quality and
memory usage.
"""

import argparse

import numpy as np

from .benchmark_common import ComparisonRunner, ResultsVisualizer, pivot_table, summary_table
from .matrix_generators import MatrixGenerator


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Compare truncated SVD and sign random projection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sparse 2000-term × 500-document matrix, ranks 1-100 (10 of them), default bits
  python -m dimreduction.compare_reduction --terms 2000 --docs 500 -r 100 --num-ranks 10

  # Only the LSH sweep on a matrix file
  python -m dimreduction.compare_reduction --input tdm.npz --bits 64 256 1024 -r 0

  # Skip the slow power-iteration solver
  python -m dimreduction.compare_reduction -r 50 --no-power-svd
        """,
    )

    parser.add_argument("--input", "-i", type=str, default=None,
                        help="Matrix file to benchmark on (default: generate one)")
    parser.add_argument("--terms", type=int, default=1000,
                        help="Rows of the generated term-document matrix (default: 1000)")
    parser.add_argument("--docs", type=int, default=300,
                        help="Columns of the generated term-document matrix (default: 300)")
    parser.add_argument("--density", type=float, default=0.05,
                        help="Non-zero fraction of the generated matrix (default: 0.05)")
    parser.add_argument("--max-rank", "-r", type=int, default=50,
                        help="Maximum SVD rank to test; 0 skips the SVD sweep (default: 50)")
    parser.add_argument("--num-ranks", "-k", type=int, default=10,
                        help="Number of evenly spaced ranks from 1 to max-rank (default: 10)")
    parser.add_argument("--bits", type=int, nargs="*", default=[64, 128, 256, 512, 1024],
                        help="LSH bit counts to test (default: 64 128 256 512 1024)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed for reproducibility (default: 42)")
    parser.add_argument("--output-dir", "-o", type=str, default="results",
                        help="Directory to save plots (default: results)")
    parser.add_argument("--no-power-svd", action="store_true",
                        help="Skip the power-iteration SVD (slow for large ranks)")

    args = parser.parse_args(argv)

    ranks = []
    if args.max_rank > 0:
        ranks = sorted(set(np.linspace(1, args.max_rank, args.num_ranks, dtype=int)))

    if args.input is not None:
        matrix = MatrixGenerator.from_file(args.input)
        runner = ComparisonRunner(matrix=matrix, ranks=ranks, bits=args.bits,
                                  seed=args.seed, skip_power_svd=args.no_power_svd,
                                  matrix_description=f"matrix from {args.input}")
        label = f"file_{matrix.shape[0]}x{matrix.shape[1]}"
    else:
        runner = ComparisonRunner(
            matrix_generator=lambda: MatrixGenerator.term_document_matrix(
                args.terms, args.docs, density=args.density, seed=args.seed
            ),
            ranks=ranks,
            bits=args.bits,
            seed=args.seed,
            skip_power_svd=args.no_power_svd,
            matrix_description=f"{args.terms}×{args.docs} term-document matrix",
        )
        label = f"tdm_{args.terms}x{args.docs}_d{args.density}"

    runner.setup()
    results = runner.run_all()

    print("Generating plots...")
    ResultsVisualizer(results, matrix_type_label=label).plot_all(save_dir=args.output_dir)

    print("\n" + "=" * 60)
    print("SUMMARY STATISTICS")
    print("=" * 60)
    if any(r.success for r in results):
        print(summary_table(results).to_string(float_format=lambda x: f"{x:.4f}"))
        for kind, title in (("svd", "Relative reconstruction error"),
                            ("lsh", "Mean relative similarity error")):
            table = pivot_table(results, kind)
            if not table.empty:
                print(f"\n-- {title} --")
                print(table.to_string(float_format=lambda x: f"{x:.4f}"))

    failed_results = [r for r in results if not r.success]
    if failed_results:
        print(f"\n{len(failed_results)} runs failed:")
        for r in failed_results:
            print(f"  {r.method_name} at {r.parameter}: {r.error_message}")

    print("\nComparison complete!")


if __name__ == "__main__":
    main()
