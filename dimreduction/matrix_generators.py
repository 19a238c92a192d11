"""Matrix generators for testing and benchmarking the transforms.

This module provides random dense corpora, low-rank matrices with noise,
sparse term-document count matrices, and loading matrices from disk.
All matrices are features x samples.
"""

from pathlib import Path
from typing import Dict

import numpy as np
import scipy.sparse as sp


class MatrixGenerator:
    """Generate test matrices with controlled properties."""

    @staticmethod
    def random_matrix(m: int, n: int, seed: int = 42) -> np.ndarray:
        """
        Generate a random non-negative matrix.

        Entries are uniform on [0, 1), which gives a corpus of positively
        correlated samples for checking angular-similarity preservation.

        Args:
            m: number of rows (features)
            n: number of columns (samples)
            seed: random seed for reproducibility

        Returns:
            A: (m x n) matrix with entries from U[0, 1)
        """
        rng = np.random.default_rng(seed)
        return rng.random((m, n))

    @staticmethod
    def lowrank_with_noise(
        m: int,
        n: int,
        true_rank: int,
        noise_level: float,
        seed: int = 42
    ) -> np.ndarray:
        """
        Generate low-rank matrix with additive Gaussian noise.

        Creates matrix: A = U @ V + noise
        where U is (m x true_rank), V is (true_rank x n).
        U and V are scaled by 1/sqrt(true_rank) so that E[||UV||_F^2] ≈ mn.

        Args:
            m: number of rows
            n: number of columns
            true_rank: true rank of underlying signal
            noise_level: standard deviation of additive noise
                        (0.0 = exactly rank true_rank)
            seed: random seed for reproducibility

        Returns:
            A: (m x n) matrix = low-rank + noise

        Raises:
            ValueError: if true_rank is not in [1, min(m, n)]
            ValueError: if noise_level < 0
        """
        if true_rank < 1:
            raise ValueError(f"true_rank must be at least 1, got {true_rank}")
        if true_rank > min(m, n):
            raise ValueError(
                f"true_rank ({true_rank}) must be at most min(m, n) = {min(m, n)}"
            )
        if noise_level < 0:
            raise ValueError(f"noise_level must be non-negative, got {noise_level}")

        rng = np.random.default_rng(seed)

        scale = 1.0 / np.sqrt(true_rank)
        U = rng.standard_normal((m, true_rank)) * scale
        V = rng.standard_normal((true_rank, n)) * scale
        A = U @ V

        if noise_level > 0:
            A = A + rng.standard_normal((m, n)) * noise_level

        return A

    @staticmethod
    def term_document_matrix(
        n_terms: int,
        n_docs: int,
        density: float = 0.05,
        mean_count: float = 2.0,
        seed: int = 42,
    ) -> sp.csr_matrix:
        """
        Generate a sparse term-document count matrix.

        A `density` fraction of the entries, chosen uniformly without
        replacement, are non-zero; each holds 1 + Poisson(mean_count - 1) counts.

        Args:
            n_terms: number of rows (vocabulary size)
            n_docs: number of columns (documents)
            density: fraction of non-zero entries, in (0, 1]
            mean_count: mean count of a non-zero entry, at least 1
            seed: random seed for reproducibility

        Returns:
            A: (n_terms x n_docs) CSR matrix of float64 counts
        """
        if not 0.0 < density <= 1.0:
            raise ValueError(f"density must be in (0, 1], got {density}")
        if mean_count < 1:
            raise ValueError(f"mean_count must be at least 1, got {mean_count}")

        rng = np.random.default_rng(seed)
        nnz = int(round(density * n_terms * n_docs))
        flat = rng.choice(n_terms * n_docs, size=nnz, replace=False)
        counts = 1.0 + rng.poisson(mean_count - 1.0, size=nnz)
        rows, cols = np.divmod(flat, n_docs)
        return sp.csr_matrix((counts, (rows, cols)), shape=(n_terms, n_docs), dtype=np.float64)

    @staticmethod
    def from_file(filepath: str):
        """
        Load a matrix from disk.

        Supported formats:
            .npy        dense numpy array
            .npz        scipy sparse matrix (scipy.sparse.save_npz)
            .csv/.txt   dense, comma or whitespace separated

        Raises:
            FileNotFoundError: if the file doesn't exist
            ValueError: if the format is unsupported or the data isn't 2-D
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Matrix file not found: {filepath}")

        suffix = filepath.suffix.lower()
        if suffix == ".npy":
            A = np.load(filepath, allow_pickle=False)
        elif suffix == ".npz":
            A = sp.load_npz(filepath).tocsr()
        elif suffix == ".csv":
            A = np.loadtxt(filepath, delimiter=",", ndmin=2)
        elif suffix == ".txt":
            A = np.loadtxt(filepath, ndmin=2)
        else:
            raise ValueError(f"Unsupported matrix file format: {suffix!r}")

        if A.ndim != 2:
            raise ValueError(f"Expected a 2-D matrix in {filepath}, got shape {A.shape}")
        return A

    @staticmethod
    def get_matrix_info(A) -> Dict:
        """
        Get information about a matrix for logging.

        Args:
            A: dense or sparse input matrix

        Returns:
            Dictionary with matrix properties:
                - shape, dtype, min, max, mean
                - nnz: number of stored non-zero entries
                - density: nnz / (m * n)
                - estimated_rank: numerical rank (dense inputs only, else None)
        """
        m, n = A.shape
        if sp.issparse(A):
            nnz = A.count_nonzero()
            estimated_rank = None
        else:
            nnz = int(np.count_nonzero(A))
            estimated_rank = int(np.linalg.matrix_rank(A)) if m * n else 0

        return {
            'shape': A.shape,
            'dtype': A.dtype,
            'min': float(A.min()) if m * n else 0.0,
            'max': float(A.max()) if m * n else 0.0,
            'mean': float(A.mean()) if m * n else 0.0,
            'nnz': nnz,
            'density': nnz / (m * n) if m * n else 0.0,
            'estimated_rank': estimated_rank,
        }
