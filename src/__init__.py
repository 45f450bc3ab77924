"""
Connes Distance on Markov Chains
================================

Spectral-triple metric between the states of a finite Markov chain.

Modules:
- connes: spectral triple, Dirac operator, distance optimizer
- numerics: chain analysis, embeddings, reports
"""

__version__ = '1.0.0'
