"""
Input Validation
================

Shape and invariant checks shared by the ``SpectralTriple`` constructors.

Tolerances are tight (1e-9) because symmetrization divides by
sqrt(stationary): any row-sum drift or near-zero stationary entry is
amplified by the eigendecomposition and the distance optimizer.
"""

import numpy as np

from .errors import (
    NotSquare,
    RowSumsNotZero,
    RowSumsNotOne,
    StationaryNonPositive,
    StationaryNotNormalized,
    NonPositiveEpsilon,
)

ROW_SUM_TOL = 1e-9
NORMALIZATION_TOL = 1e-9


def as_matrix(M):
    """Copy ``M`` into a float64 array and check it is a square matrix."""
    A = np.array(M, dtype=np.float64)
    if A.ndim != 2:
        # vectors read as a single column, higher ranks flattened past axis 0
        rows = A.shape[0] if A.ndim else 0
        cols = A.size // rows if rows else 0
        raise NotSquare(rows, cols)
    validate_square(A)
    return A


def validate_square(M):
    rows, cols = M.shape
    if rows != cols:
        raise NotSquare(rows, cols)


def validate_generator(L):
    """
    Check that ``L`` is a continuous-time generator.

    Parameters
    ----------
    L : ndarray
        Candidate generator, rows expected to sum to 0

    Raises
    ------
    NotSquare
        If ``L`` is not square
    RowSumsNotZero
        If max |row sum| exceeds ``ROW_SUM_TOL``
    """
    validate_square(L)
    if L.shape[0] == 0:
        return
    max_abs = float(np.max(np.abs(L.sum(axis=1))))
    # NaN compares false, so test the negation
    if not max_abs <= ROW_SUM_TOL:
        raise RowSumsNotZero(max_abs)


def validate_transition(P):
    """
    Check that ``P`` is a row-stochastic transition matrix.

    Only row sums are checked; entries are not required to be non-negative.
    """
    validate_square(P)
    if P.shape[0] == 0:
        return
    max_abs = float(np.max(np.abs(P.sum(axis=1) - 1.0)))
    if not max_abs <= ROW_SUM_TOL:
        raise RowSumsNotOne(max_abs)


def validate_stationary(pi):
    """Require strictly positive entries summing to 1 within tolerance."""
    if np.any(~(pi > 0.0)):
        raise StationaryNonPositive()
    total = float(np.sum(pi))
    if abs(total - 1.0) > NORMALIZATION_TOL:
        raise StationaryNotNormalized(total)


def validate_epsilon(epsilon):
    epsilon = float(epsilon)
    if not epsilon > 0.0:
        raise NonPositiveEpsilon(epsilon)
    return epsilon
