"""Engine Layer - Tiered Wine Matching

This module provides the core engine layer, implementing:
- WineMatcher: Main entry point (exact → local fuzzy → remote)
- MatchThresholds: Acceptance thresholds from settings
- RemoteWineCatalog: Remote catalog protocol
- MatchResult: Standardized result format
"""

from .matcher import MatchThresholds, RemoteWineCatalog, WineMatcher, build_wine_matcher
from .result import EXACT_MATCH_CONFIDENCE, MatchResult, MatchType

__all__ = [
    "WineMatcher",
    "build_wine_matcher",
    "MatchThresholds",
    "RemoteWineCatalog",
    "MatchResult",
    "MatchType",
    "EXACT_MATCH_CONFIDENCE",
]
