"""
Error Taxonomy
==============

Closed set of failures raised by the spectral-triple engine. Every error
carries the numeric payload needed to diagnose it (observed row-sum
deviation, offending index, ...) as attributes, and renders a
human-readable message via ``str(err)``.

All validation failures are raised at construction time; the distance
optimizer only ever raises ``StateOutOfRange``.
"""


class ConnesError(ValueError):
    """Base class for all spectral-triple failures."""


class NotSquare(ConnesError):
    """Input matrix is not square (or generator/stationary sizes disagree)."""

    def __init__(self, rows, cols):
        self.rows = int(rows)
        self.cols = int(cols)
        super().__init__(f"matrix must be square (got {self.rows}x{self.cols})")


class RowSumsNotZero(ConnesError):
    """Generator rows do not sum to zero within tolerance."""

    def __init__(self, max_abs):
        self.max_abs = float(max_abs)
        super().__init__(
            f"rows must sum to ~0 for generator L (max |row-sum| = {self.max_abs})"
        )


class RowSumsNotOne(ConnesError):
    """Transition matrix rows do not sum to one within tolerance."""

    def __init__(self, max_abs):
        self.max_abs = float(max_abs)
        super().__init__(
            f"rows must sum to ~1 for transition P (max |row-sum-1| = {self.max_abs})"
        )


class StationaryNonPositive(ConnesError):
    def __init__(self):
        super().__init__("stationary distribution must be strictly positive")


class StationaryNotNormalized(ConnesError):
    def __init__(self, total):
        self.sum = float(total)
        super().__init__(f"stationary distribution must sum to 1 (got {self.sum})")


class NonPositiveEpsilon(ConnesError):
    def __init__(self, value):
        self.value = float(value)
        super().__init__(f"epsilon must be > 0 (got {self.value})")


class StateOutOfRange(ConnesError, IndexError):
    """A distance query referenced a state index outside ``[0, n)``."""

    def __init__(self, idx, n):
        self.idx = int(idx)
        self.n = int(n)
        super().__init__(f"state index out of range: {self.idx} (n={self.n})")
