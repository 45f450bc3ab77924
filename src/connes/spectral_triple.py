"""
Spectral Triple Module
======================

This module implements the spectral triple (L, π, ε) of a finite Markov
chain and the Connes distance between its states.

    L      generator, rows sum to 0
    π      stationary distribution, strictly positive, sums to 1
    ε      regularization of the resolvent near the stationary mode

Under detailed balance the generator is symmetrized as

    L_sym = ½ (Π^½ L Π^-½ + Π^-½ Lᵀ Π^½)

and the Dirac operator is the regularized resolvent

    D = V diag(1 / (ε + λᵢ)) Vᵀ

built from the eigendecomposition -L_sym = V diag(λ) Vᵀ.
"""

import numpy as np
from scipy.linalg import eigh, svd

from .conditioning import conditioning_from_spectrum
from .errors import NotSquare, StateOutOfRange, StationaryNotNormalized
from .lipschitz import DistanceOptimizer
from .validation import (
    as_matrix,
    validate_generator,
    validate_transition,
    validate_stationary,
    validate_epsilon,
)

STATIONARY_FLOOR = 1e-15


def stationary_from_null_space(A):
    """
    Probability vector spanning the (numerical) null space of ``A``.

    Takes the right singular vector of the smallest singular value, orients
    it to have positive mass, floors entries at ``STATIONARY_FLOOR`` and
    renormalizes.

    The orientation step happens before flooring. Flooring an unoriented
    vector turns an all-negative null vector into the uniform
    distribution; here its sign is flipped first, so such a vector gives
    the true stationary distribution. Results can therefore differ from
    implementations that only floor and renormalize.

    Parameters
    ----------
    A : ndarray
        Square matrix, Lᵀ for a generator or Pᵀ - I for a transition matrix

    Returns
    -------
    ndarray
        Validated stationary distribution

    Raises
    ------
    StationaryNonPositive, StationaryNotNormalized
        If the vector is unusable after flooring
    """
    A = np.asarray(A, dtype=np.float64)
    n = A.shape[0]
    if n == 0:
        raise StationaryNotNormalized(0.0)

    _, s, Vh = svd(A)
    idx = int(np.argmin(s))
    v = Vh[idx, :].copy()

    # Singular vectors are sign-ambiguous
    if v.sum() < 0:
        v = -v

    pi = np.maximum(v, STATIONARY_FLOOR)
    pi = pi / pi.sum()
    validate_stationary(pi)
    return pi


def _frozen(a):
    a.setflags(write=False)
    return a


class SpectralTriple:
    """
    Immutable spectral triple of a finite Markov chain.

    Construct with ``SpectralTriple(L, pi, epsilon)`` when the stationary
    distribution is known, or with ``from_generator`` / ``from_transition``
    to derive it. All invariants are checked up front; the arrays are
    copied and made read-only.
    """

    def __init__(self, generator, stationary, epsilon):
        """
        Parameters
        ----------
        generator : array_like
            n x n generator, rows summing to 0 within 1e-9
        stationary : array_like
            Length-n positive vector summing to 1 within 1e-9
        epsilon : float
            Strictly positive regularization

        Raises
        ------
        ConnesError
            The first violated invariant
        """
        L = as_matrix(generator)
        validate_generator(L)
        pi = np.array(stationary, dtype=np.float64).ravel()
        validate_stationary(pi)
        epsilon = validate_epsilon(epsilon)
        if pi.shape[0] != L.shape[0]:
            raise NotSquare(L.shape[0], pi.shape[0])

        self._generator = _frozen(L)
        self._stationary = _frozen(pi)
        self._epsilon = epsilon
        self._spectrum = None

    @classmethod
    def from_generator(cls, generator, epsilon):
        """Build from a generator, deriving π as the null vector of Lᵀ."""
        L = as_matrix(generator)
        validate_generator(L)
        pi = stationary_from_null_space(L.T)
        return cls(L, pi, epsilon)

    @classmethod
    def from_transition(cls, transition, epsilon):
        """
        Build from a discrete-time transition matrix.

        The generator is P - I and π is the null vector of Pᵀ - I.
        """
        P = as_matrix(transition)
        validate_transition(P)
        eye = np.eye(P.shape[0])
        pi = stationary_from_null_space(P.T - eye)
        return cls(P - eye, pi, epsilon)

    @property
    def generator(self):
        return self._generator

    @property
    def stationary(self):
        return self._stationary

    @property
    def epsilon(self):
        return self._epsilon

    @property
    def n(self):
        return self._generator.shape[0]

    def __len__(self):
        return self.n

    def __repr__(self):
        return f"SpectralTriple(n={self.n}, epsilon={self._epsilon!r})"

    # ------------------------------------------------------------------
    # Spectral data
    # ------------------------------------------------------------------

    def symmetrized_generator(self):
        """Detailed-balance symmetrization of the generator."""
        s = np.sqrt(self._stationary)
        L = self._generator
        # Π^½ L Π^-½ scales row k by s_k and column l by 1/s_l
        L1 = s[:, np.newaxis] * L / s[np.newaxis, :]
        L2 = L.T * (s[np.newaxis, :] / s[:, np.newaxis])
        return 0.5 * (L1 + L2)

    def _eigensystem(self):
        if self._spectrum is None:
            H = -self.symmetrized_generator()
            H = (H + H.T) / 2
            eigs, vecs = eigh(H)
            self._spectrum = (_frozen(eigs), _frozen(vecs))
        return self._spectrum

    def eigenvalues(self):
        """Ascending spectrum of -L_sym (the stationary mode sits at ≈ 0)."""
        return self._eigensystem()[0].copy()

    def compute_dirac_operator(self):
        """
        Regularized resolvent D = V diag(1/(ε + max(λ, 0))) Vᵀ.

        Returns
        -------
        ndarray
            Symmetric n x n matrix
        """
        eigs, V = self._eigensystem()
        lam = np.maximum(eigs, 0.0)
        D = (V * (1.0 / (self._epsilon + lam))) @ V.T
        return (D + D.T) / 2

    # ------------------------------------------------------------------
    # Distances and diagnostics
    # ------------------------------------------------------------------

    def check_state(self, idx):
        n = self.n
        if not 0 <= idx < n:
            raise StateOutOfRange(idx, n)

    def connes_distance(self, i, j, optimizer=None, max_workers=None):
        """
        Estimate the Connes distance between states ``i`` and ``j``.

        The value is a lower bound on the true supremum, found by
        subgradient ascent with random restarts. Identical inputs give
        identical outputs. ``connes_distance(i, i)`` is exactly 0.

        Parameters
        ----------
        i, j : int
            State indices in [0, n)
        optimizer : DistanceOptimizer, optional
            Search settings (defaults: 8 restarts, 600 iterations, seed 42)
        max_workers : int, optional
            Run restarts in parallel processes

        Raises
        ------
        StateOutOfRange
            If either index is outside [0, n)
        """
        self.check_state(i)
        self.check_state(j)
        if i == j:
            return 0.0
        if optimizer is None:
            optimizer = DistanceOptimizer()
        D = self.compute_dirac_operator()
        return optimizer.maximize(D, int(i), int(j), max_workers=max_workers)

    def conditioning(self):
        """Spectral health snapshot, see ``conditioning_from_spectrum``."""
        return conditioning_from_spectrum(self._eigensystem()[0], self._epsilon)
