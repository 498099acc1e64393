"""Dense linear system solver used by the equilibrium calculations.

Gaussian elimination with partial pivoting. Systems whose pivot falls below
SINGULARITY_TOLERANCE are reported as having no unique solution instead of
raising, so callers can mark an equilibrium as not calculable.
"""

from typing import Optional, Sequence

import numpy as np

SINGULARITY_TOLERANCE = 1e-10


def solve_linear_system(
    matrix: Sequence[Sequence[float]], rhs: Sequence[float]
) -> Optional[np.ndarray]:
    """Solve A x = b by Gaussian elimination with partial pivoting.

    Args:
        matrix: Square coefficient matrix A (n x n)
        rhs: Right-hand side vector b (length n)

    Returns:
        Solution vector x, or None if the system has no unique solution

    Raises:
        ValueError: If the matrix is not square or rhs has the wrong length
    """
    a = np.array(matrix, dtype=float)
    b = np.array(rhs, dtype=float)

    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {a.shape}")
    n = a.shape[0]
    if b.shape != (n,):
        raise ValueError(f"Right-hand side must have length {n}, got shape {b.shape}")

    # Forward elimination on the augmented matrix [A | b]
    augmented = np.column_stack([a, b])
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col]
        if abs(pivot) < SINGULARITY_TOLERANCE:
            return None

        for row in range(col + 1, n):
            factor = augmented[row, col] / pivot
            augmented[row, col:] -= factor * augmented[col, col:]

    # Back substitution
    x = np.zeros(n)
    for row in range(n - 1, -1, -1):
        residual = augmented[row, n] - np.dot(augmented[row, row + 1 : n], x[row + 1 :])
        x[row] = residual / augmented[row, row]

    return x


def invert_matrix(matrix: Sequence[Sequence[float]]) -> Optional[np.ndarray]:
    """Invert a square matrix by solving M x = e_k for every unit column.

    Returns:
        The inverse matrix, or None if any column cannot be solved
    """
    n = len(matrix)
    inverse = np.zeros((n, n))
    for col in range(n):
        unit = np.zeros(n)
        unit[col] = 1.0
        column = solve_linear_system(matrix, unit)
        if column is None:
            return None
        inverse[:, col] = column
    return inverse
