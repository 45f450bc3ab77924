"""
Conditioning Diagnostics
========================

Spectral health of a triple, read from the ascending spectrum of -L_sym:

- λ₀ should be ≈ 0 (the stationary mode)
- gap = max(λ₁ - λ₀, 0)

The chain is flagged ill-conditioned when the stationary mode is not
resolved (|λ₀| > 1e-8), when the chain is degenerate or disconnected
(gap < 1e-8), or when ε swamps the spectral gap (gap < 0.01 ε).
"""

from dataclasses import dataclass, asdict
from typing import Dict

import numpy as np


STATIONARY_MODE_TOL = 1e-8
MIN_SPECTRAL_GAP = 1e-8
GAP_TO_EPSILON_RATIO = 1e-2


@dataclass(frozen=True)
class Conditioning:
    """Snapshot of spectral health at the time of the call."""
    spectral_gap: float
    epsilon: float
    max_commutator_norm: float  # reserved, always 0.0
    ill_conditioned: bool

    def to_dict(self) -> Dict:
        return asdict(self)


def conditioning_from_spectrum(eigenvalues, epsilon) -> Conditioning:
    """
    Build a ``Conditioning`` record from the spectrum of -L_sym.

    Parameters
    ----------
    eigenvalues : array_like
        Eigenvalues of -L_sym; sorted here, so any order is accepted
    epsilon : float
        Regularization of the triple

    Returns
    -------
    Conditioning
    """
    eigs = np.sort(np.asarray(eigenvalues, dtype=np.float64))
    lambda_0 = float(eigs[0]) if len(eigs) > 0 else 0.0
    lambda_1 = float(eigs[1]) if len(eigs) > 1 else 0.0

    gap = max(lambda_1 - lambda_0, 0.0)
    lambda0_bad = abs(lambda_0) > STATIONARY_MODE_TOL
    ill = (lambda0_bad
           or gap < MIN_SPECTRAL_GAP
           or gap < GAP_TO_EPSILON_RATIO * epsilon)

    return Conditioning(
        spectral_gap=float(gap),
        epsilon=float(epsilon),
        max_commutator_norm=0.0,
        ill_conditioned=bool(ill),
    )
