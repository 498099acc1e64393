"""Tests for the Gaussian elimination solver."""

import numpy as np
import pytest

from src.iolab.economics.linear_system import invert_matrix, solve_linear_system


class TestSolveLinearSystem:
    """Test solve_linear_system."""

    def test_solves_two_by_two(self) -> None:
        """Test the Cournot duopoly system 2q1 + q2 = 90, q1 + 2q2 = 90."""
        x = solve_linear_system([[2.0, 1.0], [1.0, 2.0]], [90.0, 90.0])

        assert x is not None
        assert x[0] == pytest.approx(30.0)
        assert x[1] == pytest.approx(30.0)

    def test_singular_system_returns_none(self) -> None:
        """Test that a singular matrix has no unique solution."""
        assert solve_linear_system([[1.0, 1.0], [1.0, 1.0]], [1.0, 2.0]) is None

    def test_requires_pivoting(self) -> None:
        """Test a system whose first pivot is zero."""
        x = solve_linear_system([[0.0, 1.0], [1.0, 0.0]], [3.0, 4.0])

        assert x is not None
        assert list(x) == pytest.approx([4.0, 3.0])

    def test_matches_numpy_on_larger_system(self) -> None:
        """Test agreement with numpy on a well-conditioned 4x4 system."""
        matrix = [
            [4.0, 1.0, 0.5, 0.2],
            [1.0, 5.0, 1.0, 0.3],
            [0.5, 1.0, 6.0, 1.0],
            [0.2, 0.3, 1.0, 3.0],
        ]
        rhs = [1.0, 2.0, 3.0, 4.0]

        x = solve_linear_system(matrix, rhs)

        assert x is not None
        assert list(x) == pytest.approx(list(np.linalg.solve(matrix, rhs)))

    def test_inputs_are_not_mutated(self) -> None:
        """Test that the caller's arrays are left untouched."""
        matrix = np.array([[0.0, 2.0], [3.0, 1.0]])
        rhs = np.array([4.0, 5.0])
        matrix_copy = matrix.copy()
        rhs_copy = rhs.copy()

        solve_linear_system(matrix, rhs)

        assert np.array_equal(matrix, matrix_copy)
        assert np.array_equal(rhs, rhs_copy)

    def test_tiny_pivot_treated_as_singular(self) -> None:
        """Test that pivots below the tolerance are rejected."""
        assert solve_linear_system([[1e-12, 0.0], [0.0, 1.0]], [1.0, 1.0]) is None

    def test_non_square_matrix_raises(self) -> None:
        """Test that a non-square matrix is rejected."""
        with pytest.raises(ValueError, match="square"):
            solve_linear_system([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], [1.0, 2.0])

    def test_mismatched_rhs_raises(self) -> None:
        """Test that a right-hand side of the wrong length is rejected."""
        with pytest.raises(ValueError, match="length"):
            solve_linear_system([[1.0, 0.0], [0.0, 1.0]], [1.0, 2.0, 3.0])


class TestInvertMatrix:
    """Test invert_matrix."""

    def test_inverse_times_matrix_is_identity(self) -> None:
        """Test M * M^-1 = I."""
        matrix = np.array([[1.0, 0.5, 0.5], [0.5, 1.0, 0.5], [0.5, 0.5, 1.0]])

        inverse = invert_matrix(matrix)

        assert inverse is not None
        assert np.allclose(matrix @ inverse, np.eye(3))

    def test_singular_matrix_returns_none(self) -> None:
        """Test that a singular matrix cannot be inverted."""
        assert invert_matrix([[2.0, 4.0], [1.0, 2.0]]) is None
