"""
Strategies package for plantrepo.

This module re-exports the abstract interfaces and the concrete read
strategies so downstream code can import from `plantrepo.strategies` directly.
"""

from plantrepo.strategies.abstract import AbstractReadStrategy, ReadStrategy
from plantrepo.strategies.combined import CombinedReadStrategy
from plantrepo.strategies.sequential import SequentialReadStrategy

__all__ = [
    # Abstracts
    "AbstractReadStrategy",
    "ReadStrategy",
    # Concrete strategies
    "CombinedReadStrategy",
    "SequentialReadStrategy",
]
