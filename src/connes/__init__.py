"""
Core subpackage: spectral triples of finite Markov chains.

Contains:
- spectral_triple: SpectralTriple, stationary distribution, Dirac operator
- lipschitz: commutator seminorm and the Connes distance optimizer
- conditioning: spectral gap and ill-conditioning diagnostics
- errors: ConnesError taxonomy
"""

from .errors import (
    ConnesError,
    NotSquare,
    RowSumsNotZero,
    RowSumsNotOne,
    StationaryNonPositive,
    StationaryNotNormalized,
    NonPositiveEpsilon,
    StateOutOfRange,
)
from .conditioning import Conditioning, conditioning_from_spectrum
from .lipschitz import (
    DistanceOptimizer,
    commutator,
    operator_norm,
    lipschitz_constant,
    lipschitz_subgradient,
)
from .spectral_triple import SpectralTriple, stationary_from_null_space
