"""Fuzzy identity resolution and confidence scoring.

This module provides:
- School name resolution against the reference corpus (exact -> partial ->
  word overlap -> fuzzy cascade)
- Confidence scoring and ranking of player match candidates
- PlayerMatchingService: signup duplicate search over the player store
- Name, phone and email normalization helpers

Logging goes through structlog; applications call
src.logging_config.configure_logging() once at startup to set the level
and renderer.
"""

from src.matching.confidence import (
    calculate_match_confidence,
    get_confidence_level,
    profile_completeness,
    sort_matches_by_confidence,
)
from src.matching.corpus import (
    CorpusLoadError,
    SchoolCorpus,
    get_school_corpus,
    load_school_corpus,
)
from src.matching.normalizer import normalize_name
from src.matching.player_matcher import (
    PlayerCreationError,
    PlayerMatchingService,
    remove_duplicate_matches,
)
from src.matching.schemas import (
    CanonicalEntity,
    ConfidenceLevel,
    MatchType,
    PlayerRecord,
    ScoredMatch,
    SearchCriteria,
    SignupInfo,
)
from src.matching.school_resolver import (
    MatchStage,
    ResolvedName,
    SchoolMatch,
    display_school_name,
    find_school,
    get_official_name,
    get_school_logo,
    resolve,
)

__all__ = [
    "CanonicalEntity",
    "ConfidenceLevel",
    "CorpusLoadError",
    "MatchStage",
    "MatchType",
    "PlayerCreationError",
    "PlayerMatchingService",
    "PlayerRecord",
    "ResolvedName",
    "SchoolCorpus",
    "SchoolMatch",
    "ScoredMatch",
    "SearchCriteria",
    "SignupInfo",
    "calculate_match_confidence",
    "display_school_name",
    "find_school",
    "get_confidence_level",
    "get_official_name",
    "get_school_corpus",
    "get_school_logo",
    "load_school_corpus",
    "normalize_name",
    "profile_completeness",
    "remove_duplicate_matches",
    "resolve",
    "sort_matches_by_confidence",
]
