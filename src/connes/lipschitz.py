"""
Lipschitz Seminorm and Distance Optimizer
=========================================

The Connes distance between states i and j is

    d(i, j) = sup { |f(i) - f(j)| : ||[D, diag(f)]|| <= 1 }

where ||.|| is the operator (spectral) norm. The constraint is non-smooth
(the top singular value is only subdifferentiable where it is repeated), so
the supremum is estimated by projected subgradient ascent on the ratio

    r(f) = <c, f> / ||[D, diag(f)]||,     c = e_i - e_j,

with random restarts. The returned value is a lower bound on the true
supremum, not a certified maximum.
"""

from concurrent.futures import ProcessPoolExecutor
from typing import Optional, Tuple

import numpy as np
from scipy.linalg import svd


DEFAULT_RESTARTS = 8
DEFAULT_ITERATIONS = 600
DEFAULT_LEARNING_RATE = 0.5
DEFAULT_SEED = 42

# Below this the commutator is treated as vanishing
BASELINE_NORM_TOL = 1e-15
DEGENERATE_START_TOL = 1e-12
RAMP_STEP = 1e-3


# =============================================================================
# Commutator Algebra
# =============================================================================

def commutator(D: np.ndarray, f: np.ndarray) -> np.ndarray:
    """
    Commutator [D, diag(f)] = D diag(f) - diag(f) D.

    Entry (k, l) equals D[k, l] * (f[l] - f[k]).
    """
    return D * f[np.newaxis, :] - f[:, np.newaxis] * D


def operator_norm(M: np.ndarray) -> float:
    """Largest singular value of ``M`` (0 for an empty matrix)."""
    if M.size == 0:
        return 0.0
    s = svd(M, compute_uv=False)
    return float(np.max(s))


def lipschitz_constant(D: np.ndarray, f: np.ndarray) -> Tuple[float, np.ndarray]:
    """
    Lipschitz seminorm of ``f`` with respect to the Dirac operator.

    Returns
    -------
    norm : float
        ||[D, diag(f)]||
    M : np.ndarray
        The commutator itself, reused for the subgradient
    """
    M = commutator(D, f)
    return operator_norm(M), M


def lipschitz_subgradient(D: np.ndarray, M: np.ndarray) -> np.ndarray:
    """
    Subgradient of ||[D, diag(f)]|| with respect to f.

    With (u, v) the leading left/right singular vectors of M,

        g_k = (u^T D)_k v_k - u_k (D v)_k

    Parameters
    ----------
    D : np.ndarray
        Dirac operator (n x n)
    M : np.ndarray
        Commutator [D, diag(f)] at the current point

    Returns
    -------
    np.ndarray
        Subgradient vector of length n
    """
    n = D.shape[0]
    if n == 0:
        return np.zeros(0)
    U, _, Vh = svd(M)
    u = U[:, 0]
    v = Vh[0, :]
    return (u @ D) * v - u * (D @ v)


# =============================================================================
# Distance Optimizer
# =============================================================================

def _ascend(D, c, f, iterations, learning_rate):
    """Run one restart of projected subgradient ascent from ``f``."""
    n = D.shape[0]
    f = np.array(f, dtype=np.float64)

    lf, M = lipschitz_constant(D, f)
    if lf < DEGENERATE_START_TOL:
        f = f + RAMP_STEP * np.arange(1, n + 1)
        lf, M = lipschitz_constant(D, f)

    for _ in range(iterations):
        if lf <= BASELINE_NORM_TOL:
            break
        g = lipschitz_subgradient(D, M)
        num = c @ f
        # Quotient rule for r(f) = <c, f> / lf
        grad = (c * lf - g * num) / (lf * lf)
        f = f + learning_rate * grad

        lf, M = lipschitz_constant(D, f)
        if lf > 1.0:
            # inexact projection; lf and M still describe f before rescaling
            f = f / lf

    lf_final, _ = lipschitz_constant(D, f)
    return abs((c @ f) / max(lf_final, 1.0))


def _ascend_task(args):
    return _ascend(*args)


class DistanceOptimizer:
    """
    Subgradient ascent with random restarts for the Connes distance.

    A fresh generator seeded with ``seed`` is created per query, so the
    estimate for a given (D, i, j) is reproducible and independent of
    call order or concurrent execution.
    """

    def __init__(self, restarts=DEFAULT_RESTARTS, iterations=DEFAULT_ITERATIONS,
                 learning_rate=DEFAULT_LEARNING_RATE, seed=DEFAULT_SEED):
        """
        Parameters
        ----------
        restarts : int
            Number of independent random starting points
        iterations : int
            Ascent steps per restart
        learning_rate : float
            Step size applied to the ratio gradient
        seed : int
            Seed for the per-query random generator
        """
        if restarts < 0 or iterations < 0:
            raise ValueError("restarts and iterations must be non-negative")
        self.restarts = int(restarts)
        self.iterations = int(iterations)
        self.learning_rate = float(learning_rate)
        self.seed = seed

    def __repr__(self):
        return (f"DistanceOptimizer(restarts={self.restarts}, "
                f"iterations={self.iterations}, "
                f"learning_rate={self.learning_rate}, seed={self.seed})")

    def baseline(self, D: np.ndarray, c: np.ndarray) -> float:
        """Closed-form lower bound |<c, c>| / ||[D, diag(c)]||."""
        lc, _ = lipschitz_constant(D, c)
        if lc > BASELINE_NORM_TOL:
            return abs((c @ c) / lc)
        return 0.0

    def starting_points(self, n: int) -> np.ndarray:
        """Restart initialisations, i.i.d. uniform on [-1, 1]."""
        rng = np.random.default_rng(self.seed)
        return rng.uniform(-1.0, 1.0, size=(self.restarts, n))

    def maximize(self, D: np.ndarray, i: int, j: int,
                 max_workers: Optional[int] = None) -> float:
        """
        Estimate sup |f(i) - f(j)| subject to ||[D, diag(f)]|| <= 1.

        Indices are assumed valid and distinct; range checking is the
        caller's job.

        Parameters
        ----------
        D : np.ndarray
            Symmetric Dirac operator
        i, j : int
            State indices
        max_workers : int, optional
            Evaluate restarts in a process pool when greater than 1

        Returns
        -------
        float
            Best ratio over the baseline and all restarts (a lower bound)
        """
        D = np.asarray(D, dtype=np.float64)
        n = D.shape[0]
        c = np.zeros(n)
        c[i] = 1.0
        c[j] = -1.0

        best = self.baseline(D, c)

        tasks = [(D, c, f0, self.iterations, self.learning_rate)
                 for f0 in self.starting_points(n)]

        if max_workers is not None and max_workers > 1 and len(tasks) > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as pool:
                values = list(pool.map(_ascend_task, tasks))
        else:
            values = [_ascend_task(t) for t in tasks]

        for val in values:
            if val > best:
                best = val
        return float(best)
