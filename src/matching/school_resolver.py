"""Free-text school name resolution against the reference corpus.

Resolution cascade (first stage that matches wins):
1. Exact primary name
2. Exact alternative name
3. Partial primary name (query contained in a clearly longer name)
4. Partial alternative name
5. Word overlap with primary name (2+ shared words)
6. Word overlap with alternative name
7. Fuzzy primary name (Levenshtein similarity >= 0.8)
8. Fuzzy alternative name (overrides stage 7 only when strictly higher)

All comparisons run on normalized names. Invalid input (empty corpus,
missing or non-string query) resolves to None, never raises.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from src.matching import weights
from src.matching.corpus import PreparedEntity, SchoolCorpus, prepare_entities
from src.matching.normalizer import normalize_name
from src.matching.schemas import CanonicalEntity
from src.matching.similarity import similarity_ratio

logger = structlog.get_logger()

UNCOMMITTED = "Uncommitted"


class MatchStage(str, Enum):
    """Cascade stage that produced a school match."""

    EXACT = "exact"
    EXACT_ALTERNATIVE = "exact_alternative"
    PARTIAL = "partial"
    PARTIAL_ALTERNATIVE = "partial_alternative"
    WORD_OVERLAP = "word_overlap"
    WORD_OVERLAP_ALTERNATIVE = "word_overlap_alternative"
    FUZZY = "fuzzy"
    FUZZY_ALTERNATIVE = "fuzzy_alternative"


class SchoolMatch(BaseModel):
    """Matched corpus entry and how it was found."""

    model_config = ConfigDict(frozen=True)

    entity: CanonicalEntity
    stage: MatchStage
    similarity: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Similarity for fuzzy stages"
    )


class ResolvedName(BaseModel):
    """Canonical name and payload for a resolved school."""

    model_config = ConfigDict(frozen=True)

    name: str
    payload: Any = None


Strategy = Callable[[str, Sequence[PreparedEntity]], SchoolMatch | None]


def _is_partial(query: str, candidate: str) -> bool:
    return (
        query in candidate
        and len(query) >= weights.PARTIAL_MIN_QUERY_LENGTH
        and len(candidate) > len(query) + weights.PARTIAL_MIN_LENGTH_MARGIN
    )


def _shares_words(query: str, candidate: str) -> bool:
    shared = set(query.split()) & set(candidate.split())
    return len(shared) >= weights.MIN_SHARED_WORDS


def _first_primary(
    stage: MatchStage, predicate: Callable[[str, str], bool]
) -> Strategy:
    def strategy(query: str, entries: Sequence[PreparedEntity]) -> SchoolMatch | None:
        for entry in entries:
            if predicate(query, entry.primary):
                return SchoolMatch(entity=entry.entity, stage=stage)
        return None

    return strategy


def _first_alternative(
    stage: MatchStage, predicate: Callable[[str, str], bool]
) -> Strategy:
    def strategy(query: str, entries: Sequence[PreparedEntity]) -> SchoolMatch | None:
        for entry in entries:
            if any(predicate(query, alt) for alt in entry.alternatives):
                return SchoolMatch(entity=entry.entity, stage=stage)
        return None

    return strategy


def _fuzzy_match(query: str, entries: Sequence[PreparedEntity]) -> SchoolMatch | None:
    """Best similarity over primary names, then alternatives.

    Ties keep the first entry in corpus order; an alternative name only
    replaces the primary-name winner when it scores strictly higher.
    """
    best: CanonicalEntity | None = None
    best_score = 0.0
    stage = MatchStage.FUZZY

    for entry in entries:
        score = similarity_ratio(query, entry.primary)
        if score > best_score and score >= weights.FUZZY_SIMILARITY_THRESHOLD:
            best, best_score = entry.entity, score

    for entry in entries:
        for alt in entry.alternatives:
            score = similarity_ratio(query, alt)
            if score > best_score and score >= weights.FUZZY_SIMILARITY_THRESHOLD:
                best, best_score = entry.entity, score
                stage = MatchStage.FUZZY_ALTERNATIVE

    if best is None:
        return None
    return SchoolMatch(entity=best, stage=stage, similarity=best_score)


STRATEGIES: tuple[Strategy, ...] = (
    _first_primary(MatchStage.EXACT, lambda q, c: q == c),
    _first_alternative(MatchStage.EXACT_ALTERNATIVE, lambda q, c: q == c),
    _first_primary(MatchStage.PARTIAL, _is_partial),
    _first_alternative(MatchStage.PARTIAL_ALTERNATIVE, _is_partial),
    _first_primary(MatchStage.WORD_OVERLAP, _shares_words),
    _first_alternative(MatchStage.WORD_OVERLAP_ALTERNATIVE, _shares_words),
    _fuzzy_match,
)


def _entries(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
) -> Sequence[PreparedEntity]:
    if isinstance(corpus, SchoolCorpus):
        return corpus.prepared
    if not isinstance(corpus, Iterable) or isinstance(corpus, (str, Mapping)):
        return ()
    return prepare_entities(corpus)


def find_school(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
    school_name: Any,
) -> SchoolMatch | None:
    """Find the corpus entry a free-text school name refers to.

    Args:
        corpus: Reference institutions (SchoolCorpus or plain sequence)
        school_name: Free-text name as typed by a user

    Returns:
        SchoolMatch for the first cascade stage that matches, or None
    """
    if not isinstance(school_name, str) or not school_name:
        logger.debug("school lookup skipped", reason="invalid_name")
        return None

    entries = _entries(corpus)
    if not entries:
        logger.debug("school lookup skipped", reason="empty_corpus")
        return None

    query = normalize_name(school_name)
    if not query:
        return None

    for strategy in STRATEGIES:
        match = strategy(query, entries)
        if match is not None:
            logger.debug(
                "school resolved",
                school_name=school_name,
                official_name=match.entity.primary_name,
                stage=match.stage.value,
                similarity=round(match.similarity, 3),
            )
            return match

    logger.debug("school not resolved", school_name=school_name)
    return None


def resolve(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
    school_name: Any,
) -> ResolvedName | None:
    """Resolve a school name to its canonical name and payload."""
    match = find_school(corpus, school_name)
    if match is None:
        return None
    return ResolvedName(name=match.entity.primary_name, payload=match.entity.payload)


def get_school_logo(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
    school_name: Any,
) -> Any:
    """Logo payload for a school name, or None."""
    match = find_school(corpus, school_name)
    return match.entity.payload if match else None


def get_official_name(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
    school_name: Any,
) -> str | None:
    """Canonical name for a school name, or None."""
    match = find_school(corpus, school_name)
    return match.entity.primary_name if match else None


def display_school_name(
    corpus: SchoolCorpus | Iterable[CanonicalEntity | Mapping[str, Any]] | None,
    school_name: Any,
    fallback: str = UNCOMMITTED,
) -> str:
    """Name to show for a school field.

    Canonical name when resolved, otherwise the text as entered, otherwise
    the fallback for blank or missing values.
    """
    official = get_official_name(corpus, school_name)
    if official:
        return official
    if isinstance(school_name, str) and school_name.strip():
        return school_name
    return fallback
