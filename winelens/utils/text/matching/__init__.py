"""Matching package."""

from .similarity import (
    calculate_similarity,
    edit_distance,
    edit_similarity,
    jaccard_similarity,
)

__all__ = [
    "calculate_similarity",
    "edit_distance",
    "edit_similarity",
    "jaccard_similarity",
]
