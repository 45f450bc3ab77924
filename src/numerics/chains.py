"""
Markov Chain Builders
=====================

Helpers producing transition matrices for analyses and tests, and
reading them from disk.
"""

import json
import os

import numpy as np
import pandas as pd


def preset_transition():
    """
    Three-state reference chain with stationary distribution
    (2/11, 5/11, 4/11).
    """
    return np.array([
        [0.95, 0.05, 0.00],
        [0.02, 0.94, 0.04],
        [0.00, 0.05, 0.95],
    ])


def normalize_rows(P):
    """
    Rescale each row of a non-negative matrix to sum to 1.

    Rows with no mass become the corresponding identity row (an absorbing
    state).
    """
    P = np.array(P, dtype=np.float64)
    sums = P.sum(axis=1)
    out = np.zeros_like(P)
    for i, s in enumerate(sums):
        if s > 0:
            out[i] = P[i] / s
        else:
            out[i, i] = 1.0
    return out


def random_stochastic(n, seed=1337):
    """
    Random dense transition matrix with uniform entries, row-normalized.

    Parameters
    ----------
    n : int
        Number of states
    seed : int
        Random seed for reproducibility

    Returns
    -------
    ndarray
        n x n row-stochastic matrix
    """
    rng = np.random.default_rng(seed)
    return normalize_rows(rng.uniform(0.0, 1.0, size=(n, n)))


def increase_mixing(P, i, j, p_ij):
    """
    Set P[i, j] = p_ij, compensating on the diagonal P[i, i] so the row
    still sums to 1.
    """
    P = np.array(P, dtype=np.float64)
    if i == j:
        raise ValueError("mixing is defined between distinct states")
    delta = p_ij - P[i, j]
    diag = P[i, i] - delta
    if diag < -1e-12:
        raise ValueError(
            f"cannot raise P[{i}, {j}] to {p_ij}: diagonal P[{i}, {i}] = {P[i, i]} too small"
        )
    P[i, j] = p_ij
    P[i, i] = max(diag, 0.0)
    return P


def load_transition(path):
    """
    Read a transition matrix from disk.

    Supported formats:
    - ``.json``: a nested list, or an object with a ``"transition"`` key
    - ``.npy``: a saved numpy array
    - ``.csv`` / ``.txt``: numeric rows without a header

    Returns
    -------
    ndarray
        The matrix as float64 (not validated here)
    """
    ext = os.path.splitext(path)[1].lower()
    if ext == '.json':
        with open(path, 'r') as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data['transition']
        return np.array(data, dtype=np.float64)
    elif ext == '.npy':
        return np.load(path).astype(np.float64)
    elif ext in ('.csv', '.txt'):
        sep = ',' if ext == '.csv' else r'\s+'
        frame = pd.read_csv(path, header=None, sep=sep)
        return frame.to_numpy(dtype=np.float64)
    raise ValueError(f"unsupported matrix file format: {ext or path}")
