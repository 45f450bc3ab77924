"""
Numerics subpackage: analyses built on the spectral-triple engine.

Contains:
- analysis: full chain analysis, distance matrix, monotonicity check, reports
- embedding: classical MDS of distance matrices
- chains: preset and random transition matrices
"""

from .analysis import (
    IllConditionedWarning,
    analyze_triple,
    analyze_transition,
    distance_matrix,
    check_mixing_monotonicity,
    save_report,
    load_report,
)
from .chains import (
    preset_transition,
    random_stochastic,
    normalize_rows,
    increase_mixing,
    load_transition,
)
from .embedding import classical_mds, normalize_to_unit_box
