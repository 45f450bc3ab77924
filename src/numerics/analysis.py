"""
Chain Analysis Module
=====================

This module runs the full spectral-triple analysis of a Markov chain:
1. Stationary distribution and spectrum of -L_sym
2. Dirac operator
3. All-pairs Connes distances
4. Conditioning diagnostics
5. Mixing monotonicity validation

and saves the resulting report as JSON.
"""

import json
import os
import warnings
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np

from connes import DistanceOptimizer, SpectralTriple

from .chains import increase_mixing

MONOTONICITY_SLACK = 1e-10


class IllConditionedWarning(RuntimeWarning):
    """Analysis ran on a chain whose spectral gap is not resolved."""


def _pair_distance(args):
    D, i, j, optimizer = args
    return i, j, optimizer.maximize(D, i, j)


def distance_matrix(triple, optimizer=None, max_workers=None):
    """
    All-pairs Connes distances of a triple.

    The Dirac operator is computed once and shared by every pair. Each
    ordered pair is optimized separately; the diagonal is exactly zero.

    Parameters
    ----------
    triple : SpectralTriple
        The chain to analyze
    optimizer : DistanceOptimizer, optional
        Search settings shared by all pairs
    max_workers : int, optional
        Distribute pairs over a process pool when greater than 1

    Returns
    -------
    ndarray
        n x n matrix of distance estimates
    """
    if optimizer is None:
        optimizer = DistanceOptimizer()
    n = triple.n
    D = triple.compute_dirac_operator()
    distances = np.zeros((n, n))

    tasks = [(D, i, j, optimizer) for i in range(n) for j in range(n) if i != j]

    if max_workers is not None and max_workers > 1 and len(tasks) > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(_pair_distance, t) for t in tasks]
            for fut in as_completed(futures):
                i, j, d = fut.result()
                distances[i, j] = d
    else:
        for t in tasks:
            i, j, d = _pair_distance(t)
            distances[i, j] = d

    return distances


def analyze_triple(triple, optimizer=None, max_workers=None):
    """
    Run the full analysis of a spectral triple.

    Returns
    -------
    dict with:
        'n': number of states
        'stationary': stationary distribution
        'eigenvalues': ascending spectrum of -L_sym
        'dirac': Dirac operator (n x n)
        'distances': Connes distance matrix (n x n, zero diagonal)
        'conditioning': conditioning diagnostics as a dict
    """
    cond = triple.conditioning()
    if cond.ill_conditioned:
        warnings.warn(
            f"ill-conditioned chain (spectral gap {cond.spectral_gap:.3e}, "
            f"epsilon {cond.epsilon:.3e}); distances may be unreliable",
            IllConditionedWarning,
        )

    return {
        'n': triple.n,
        'stationary': np.array(triple.stationary),
        'eigenvalues': triple.eigenvalues(),
        'dirac': triple.compute_dirac_operator(),
        'distances': distance_matrix(triple, optimizer, max_workers),
        'conditioning': cond.to_dict(),
    }


def analyze_transition(transition, epsilon=1e-3, optimizer=None, max_workers=None):
    """Build the triple of a transition matrix and analyze it."""
    triple = SpectralTriple.from_transition(transition, epsilon)
    return analyze_triple(triple, optimizer, max_workers)


def check_mixing_monotonicity(transition, i=0, j=1, p_ij=None, epsilon=1e-3,
                              optimizer=None):
    """
    Check that faster mixing between two states does not increase their
    distance.

    For small epsilon the stationary mode dominates D and the distance
    grows as the rarer state loses stationary mass, so the check can
    legitimately fail there.

    Parameters
    ----------
    transition : ndarray
        Base transition matrix
    i, j : int
        The pair of states
    p_ij : float, optional
        Increased transition probability P[i, j]; defaults to
        P[i, j] + 0.1
    epsilon : float
        Regularization for both triples

    Returns
    -------
    dict with:
        'passed': d_increased <= d_base + 1e-10
        'distance_base', 'distance_increased'
        'gap_base', 'gap_increased': spectral gaps of both chains
    """
    P0 = np.array(transition, dtype=np.float64)
    if p_ij is None:
        p_ij = P0[i, j] + 0.1
    P1 = increase_mixing(P0, i, j, p_ij)

    st0 = SpectralTriple.from_transition(P0, epsilon)
    st1 = SpectralTriple.from_transition(P1, epsilon)

    d0 = st0.connes_distance(i, j, optimizer)
    d1 = st1.connes_distance(i, j, optimizer)

    return {
        'passed': bool(d1 <= d0 + MONOTONICITY_SLACK),
        'pair': (int(i), int(j)),
        'p_ij_base': float(P0[i, j]),
        'p_ij_increased': float(p_ij),
        'distance_base': float(d0),
        'distance_increased': float(d1),
        'gap_base': st0.conditioning().spectral_gap,
        'gap_increased': st1.conditioning().spectral_gap,
    }


def _to_serializable(obj):
    """Recursively convert numpy types to Python native types."""
    if isinstance(obj, dict):
        return {k: _to_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_to_serializable(v) for v in obj]
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    else:
        return obj


def save_report(report, filepath):
    """Save an analysis report to JSON."""
    dirname = os.path.dirname(filepath)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    with open(filepath, 'w') as f:
        json.dump(_to_serializable(report), f, indent=2)
    return filepath


def load_report(filepath):
    """Load an analysis report from JSON (arrays come back as lists)."""
    with open(filepath, 'r') as f:
        return json.load(f)
