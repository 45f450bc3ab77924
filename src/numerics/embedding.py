"""
Classical Multidimensional Scaling
==================================

Embeds a matrix of Connes distances into R^k so the geometry of the chain
can be plotted. Uses the usual double-centering construction

    B = -½ J D² J,    J = I - 11ᵀ/n

and the top eigenpairs of B; directions with non-positive eigenvalues get
zero coordinates.
"""

import numpy as np
from scipy.linalg import eigh


def classical_mds(distances, dims=3):
    """
    Embed a distance matrix in ``dims`` dimensions.

    Parameters
    ----------
    distances : ndarray
        Symmetric n x n distance matrix
    dims : int
        Target dimension

    Returns
    -------
    ndarray
        (n, dims) coordinates
    """
    Dm = np.asarray(distances, dtype=np.float64)
    n = Dm.shape[0]
    X = np.zeros((n, dims))
    if n == 0:
        return X

    # Optimizer estimates need not be exactly symmetric
    Dm = (Dm + Dm.T) / 2
    D2 = Dm ** 2
    J = np.eye(n) - np.ones((n, n)) / n
    B = -0.5 * J @ D2 @ J
    B = (B + B.T) / 2

    eigs, vecs = eigh(B)
    # Descending order
    eigs = eigs[::-1]
    vecs = vecs[:, ::-1]

    k = min(dims, n)
    for a in range(k):
        if eigs[a] > 0:
            X[:, a] = np.sqrt(eigs[a]) * vecs[:, a]
    return X


def normalize_to_unit_box(points):
    """
    Shift and scale points into the cube [-½, ½]^k.

    Returns
    -------
    pts : ndarray
        Rescaled points
    scale : float
        Largest side of the bounding box (floored at 1e-12)
    lo, hi : ndarray
        Bounding box corners of the input
    """
    P = np.asarray(points, dtype=np.float64)
    if P.size == 0:
        k = P.shape[1] if P.ndim == 2 else 0
        return P.reshape(0, k), 1.0, np.zeros(k), np.zeros(k)

    lo = P.min(axis=0)
    hi = P.max(axis=0)
    scale = max(1e-12, float(np.max(hi - lo)))
    return (P - lo) / scale - 0.5, scale, lo, hi
