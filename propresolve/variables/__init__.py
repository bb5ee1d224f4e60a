"""
Placeholder resolution module.
Expands ${key} references between entries of a flat key-value store.
"""

from .policy import MissingKeyPolicy
from .resolver import Resolver

__all__ = ['MissingKeyPolicy', 'Resolver']
