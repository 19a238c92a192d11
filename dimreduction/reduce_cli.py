"""Fit or apply a dimensionality-reduction transform to a matrix file.

Reads a features x samples matrix, fits a truncated SVD or a sign random
projection to it (or loads a previously saved model), and writes the reduced
matrix as a .npy file.
"""

import argparse
from pathlib import Path

import numpy as np

from .errors import DimReductionError
from .matrix_generators import MatrixGenerator
from .sign_random_projection import SignRandomProjection
from .truncated_svd import ALGORITHMS, TruncatedSVD


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reduce a features x samples matrix with truncated SVD or sign random projection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Project a term-document matrix onto its top 100 latent directions
  python -m dimreduction.reduce_cli svd tdm.npz -k 100 -o latent.npy --model-out lsa.tsvd

  # Apply the saved projection to new documents
  python -m dimreduction.reduce_cli svd new_docs.npz --model-in lsa.tsvd -o new_latent.npy

  # Hash documents to 256-bit fingerprints (0/1 matrix of shape 256 x n)
  python -m dimreduction.reduce_cli lsh tdm.npz --bits 256 --seed 7 -o hashes.npy
        """,
    )
    subparsers = parser.add_subparsers(dest="method", required=True)

    svd = subparsers.add_parser("svd", help="Truncated SVD")
    svd.add_argument("-k", "--rank", type=int, default=None,
                     help="Target rank (required unless --model-in is given)")
    svd.add_argument("--algorithm", choices=ALGORITHMS, default="full",
                     help="SVD solver (default: full)")

    lsh = subparsers.add_parser("lsh", help="Sign random projection")
    lsh.add_argument("--bits", type=int, default=None,
                     help="Number of output bits (required unless --model-in is given)")
    lsh.add_argument("--density", type=float, default=1.0,
                     help="Probability of a non-zero hyperplane entry (default: 1.0)")

    for sub in (svd, lsh):
        sub.add_argument("input", type=str,
                         help="Matrix file (.npy, .npz sparse, .csv or .txt)")
        sub.add_argument("--output", "-o", type=str, required=True,
                         help="Where to write the reduced matrix (.npy)")
        sub.add_argument("--model-in", type=str, default=None,
                         help="Load a saved model instead of fitting")
        sub.add_argument("--model-out", type=str, default=None,
                         help="Save the fitted model to this file")
        sub.add_argument("--seed", type=int, default=42,
                         help="Random seed (default: 42)")

    return parser


def build_transformer(args):
    """Construct, or load from --model-in, the transformer selected by args."""
    if args.method == "svd":
        if args.model_in is None and args.rank is None:
            raise ValueError("svd requires --rank unless --model-in is given")
        rank = args.rank if args.model_in is None else 1
        transformer = TruncatedSVD(rank, algorithm=args.algorithm, seed=args.seed)
    else:
        if args.model_in is None and args.bits is None:
            raise ValueError("lsh requires --bits unless --model-in is given")
        bits = args.bits if args.model_in is None else 1
        transformer = SignRandomProjection(bits, density=args.density, seed=args.seed)

    if args.model_in is not None:
        with open(args.model_in, "rb") as f:
            transformer.load(f)
    return transformer


def run(args) -> np.ndarray:
    """Execute one CLI invocation and return the array written to --output."""
    A = MatrixGenerator.from_file(args.input)
    info = MatrixGenerator.get_matrix_info(A)
    print(f"Loaded {args.input}: {info['shape'][0]} × {info['shape'][1]}, "
          f"density {info['density']:.4f}")

    transformer = build_transformer(args)
    if args.model_in is None:
        reduced = transformer.fit_transform(A)
    else:
        reduced = transformer.transform(A)

    if args.method == "lsh":
        reduced = reduced.to_dense()

    np.save(args.output, reduced)
    print(f"Wrote {reduced.shape[0]} × {reduced.shape[1]} result to {args.output}")

    if args.model_out is not None:
        Path(args.model_out).parent.mkdir(parents=True, exist_ok=True)
        with open(args.model_out, "wb") as f:
            transformer.save(f)
        print(f"Saved model to {args.model_out}")

    return reduced


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        run(args)
    except (DimReductionError, ValueError, FileNotFoundError) as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":
    main()
