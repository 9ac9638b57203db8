"""Scoring and digest pipelines."""

from .compute import InMemoryScoreStore, WritableScoreStore, compute_and_save_scores
from .digest import DigestService

__all__ = [
    "DigestService",
    "InMemoryScoreStore",
    "WritableScoreStore",
    "compute_and_save_scores",
]
