"""
Entropy - Sources of randomness for trials.

A source hands out draws, counts them and records labeled
groups of draws for later minimization.
"""

from .source import EntropySource, DrawGroup
from .random_source import RandomSource, ReplaySource

__all__ = [
    "EntropySource",
    "DrawGroup",
    "RandomSource",
    "ReplaySource",
]
