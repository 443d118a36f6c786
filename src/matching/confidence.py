"""Confidence scoring for player match candidates.

Scores how likely an existing player record is the same person as a
signup, starting from the base score of the retrieval channel (MatchType)
and adjusting for name, school, phone, email, recency and profile
completeness. Every comparison treats missing or malformed values as
"no match for that factor"; scoring never raises on record content.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from src.matching import weights
from src.matching.normalizer import clean_text, normalize_email, normalize_phone
from src.matching.schemas import (
    AdditionalFactorsAnalysis,
    ConfidenceLevel,
    FieldAnalysis,
    MatchAnalysis,
    MatchType,
    NameAnalysis,
    PlayerRecord,
    ScoredMatch,
    SearchCriteria,
)
from src.matching.similarity import similarity_ratio

CONFIDENCE_LEVELS: tuple[ConfidenceLevel, ...] = (
    ConfidenceLevel(key="HIGH", label="High", range=(80, 100), color="green"),
    ConfidenceLevel(key="MEDIUM", label="Medium", range=(60, 79), color="yellow"),
    ConfidenceLevel(key="LOW", label="Low", range=(30, 59), color="orange"),
    ConfidenceLevel(key="VERY_LOW", label="Very Low", range=(0, 29), color="red"),
)

# Tie-break order: email_match first ... phone_only last, unknown after all
MATCH_TYPE_PRIORITY: dict[str, int] = {
    match_type.value: index for index, match_type in enumerate(MatchType)
}

SCORING_FIELDS = ("first_name", "last_name", "email_address", "phone_number", "school_id")
RANKING_FIELDS = SCORING_FIELDS + ("position", "class_year")


def _string_keys(data: Mapping[Any, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if isinstance(k, str)}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _has_value(record: PlayerRecord, field: str) -> bool:
    value = getattr(record, field, None)
    return value is not None and bool(str(value).strip())


def _as_record(candidate: PlayerRecord | Mapping[str, Any] | None) -> PlayerRecord:
    if isinstance(candidate, PlayerRecord):
        return candidate
    if isinstance(candidate, Mapping):
        return PlayerRecord.model_validate(_string_keys(candidate))
    return PlayerRecord()


def _as_criteria(criteria: SearchCriteria | Mapping[str, Any] | None) -> SearchCriteria:
    if isinstance(criteria, SearchCriteria):
        return criteria
    if isinstance(criteria, Mapping):
        return SearchCriteria.model_validate(_string_keys(criteria))
    return SearchCriteria()


def _match_type_value(match_type: MatchType | str | None) -> str:
    if isinstance(match_type, MatchType):
        return match_type.value
    return match_type if isinstance(match_type, str) else ""


def get_base_score(match_type: MatchType | str | None) -> int:
    """Base confidence for a retrieval channel (50 when unrecognized)."""
    return weights.BASE_SCORES.get(
        _match_type_value(match_type), weights.DEFAULT_BASE_SCORE
    )


def get_confidence_level(score: int) -> ConfidenceLevel:
    """Map a 0-100 score to its confidence bucket."""
    for level in CONFIDENCE_LEVELS:
        low, high = level.range
        if low <= score <= high:
            return level
    return CONFIDENCE_LEVELS[-1]


def profile_completeness(
    record: PlayerRecord | Mapping[str, Any], fields: Iterable[str] = RANKING_FIELDS
) -> float:
    """Fraction of the given fields that are filled in (0-1)."""
    player = _as_record(record)
    fields = tuple(fields)
    if not fields:
        return 0.0
    filled = sum(1 for field in fields if _has_value(player, field))
    return filled / len(fields)


def analyze_name_match(candidate: PlayerRecord, criteria: SearchCriteria) -> NameAnalysis:
    """Compare candidate and search names.

    Rules are tried from strongest to weakest; the first that applies
    sets the name sub-score.
    """
    result = NameAnalysis()

    search_first = clean_text(criteria.first_name)
    search_last = clean_text(criteria.last_name)
    search_full = clean_text(criteria.full_name)

    match_first = clean_text(candidate.first_name)
    match_last = clean_text(candidate.last_name)
    match_full = f"{match_first} {match_last}".strip() or clean_text(candidate.full_name)

    if (
        search_first
        and search_last
        and search_first == match_first
        and search_last == match_last
    ):
        result.score = weights.EXACT_NAME_SCORE
        result.factors.append("Exact first and last name match")
    elif search_full and search_full == match_full:
        result.score = weights.EXACT_NAME_SCORE
        result.factors.append("Exact full name match")
    elif search_first and search_first == match_first and search_last and search_last in match_last:
        result.score = weights.EXACT_AND_PARTIAL_NAME_SCORE
        result.factors.append("Exact first name, partial last name match")
    elif search_last and search_last == match_last and search_first and search_first in match_first:
        result.score = weights.EXACT_AND_PARTIAL_NAME_SCORE
        result.factors.append("Exact last name, partial first name match")
    elif (
        search_first
        and search_last
        and search_first in match_first
        and search_last in match_last
    ):
        result.score = weights.PARTIAL_NAME_SCORE
        result.factors.append("Partial first and last name match")
    elif search_first and search_first == match_first:
        result.score = weights.SINGLE_NAME_SCORE
        result.factors.append("First name match only")
        if not search_last or not match_last:
            result.penalties.append("Missing last name information")
    elif search_last and search_last == match_last:
        result.score = weights.SINGLE_NAME_SCORE
        result.factors.append("Last name match only")
        if not search_first or not match_first:
            result.penalties.append("Missing first name information")
    else:
        search_name = search_full or f"{search_first} {search_last}".strip()
        similarity = (
            similarity_ratio(search_name, match_full) if search_name and match_full else 0.0
        )
        result.score = _round_half_up(similarity * weights.FUZZY_NAME_SCALE)
        if result.score > weights.FUZZY_NAME_FACTOR_FLOOR:
            result.factors.append(f"Name similarity: {_round_half_up(similarity * 100)}%")
        else:
            result.penalties.append("Low name similarity")

    return result


def analyze_school_match(candidate: PlayerRecord, criteria: SearchCriteria) -> FieldAnalysis:
    """Compare school identifiers (IRN)."""
    result = FieldAnalysis()
    search_school = (criteria.school_id or "").strip()
    match_school = (candidate.school_id or "").strip()

    if search_school and match_school:
        if search_school == match_school:
            result.matched = True
            result.bonus = weights.SAME_SCHOOL_BONUS
            result.factors.append("Same school (IRN match)")
        else:
            result.penalty = weights.DIFFERENT_SCHOOL_PENALTY
            result.penalties.append("Different schools")
    elif search_school:
        result.penalties.append("Player missing school information")
    elif match_school:
        result.penalties.append("Search missing school information")

    return result


def analyze_phone_match(candidate: PlayerRecord, criteria: SearchCriteria) -> FieldAnalysis:
    """Compare phone numbers on their digits, ignoring a leading country 1."""
    result = FieldAnalysis()
    search_phone = normalize_phone(criteria.phone_number)
    match_phone = normalize_phone(candidate.phone_number)

    if search_phone and match_phone:
        if search_phone == match_phone:
            result.matched = True
            result.bonus = weights.SAME_PHONE_BONUS
            result.factors.append("Phone number match")
        else:
            result.penalty = weights.DIFFERENT_PHONE_PENALTY
            result.penalties.append("Different phone numbers")
    elif search_phone:
        result.penalties.append("Player missing phone number")
    elif match_phone:
        result.penalties.append("Search missing phone number")

    return result


def _days_between(earlier: datetime, later: datetime) -> float:
    # Naive timestamps are taken as UTC so aware and naive values compare
    if earlier.tzinfo is None:
        earlier = earlier.replace(tzinfo=timezone.utc)
    if later.tzinfo is None:
        later = later.replace(tzinfo=timezone.utc)
    return (later - earlier).total_seconds() / 86400


def analyze_additional_factors(
    candidate: PlayerRecord, criteria: SearchCriteria, now: datetime
) -> AdditionalFactorsAnalysis:
    """Email, profile recency and profile completeness adjustments."""
    result = AdditionalFactorsAnalysis()

    search_email = normalize_email(criteria.email)
    match_email = normalize_email(candidate.email_address)
    if search_email and match_email and search_email == match_email:
        result.adjustment += weights.EMAIL_MATCH_BONUS
        result.factors.append("Email address match")

    if candidate.updated_at is not None:
        days_since_update = _days_between(candidate.updated_at, now)
        if days_since_update < weights.RECENT_UPDATE_DAYS:
            result.adjustment += weights.RECENT_UPDATE_BONUS
            result.factors.append("Recently updated profile")
        elif days_since_update > weights.STALE_PROFILE_DAYS:
            result.adjustment -= weights.STALE_PROFILE_PENALTY
            result.penalties.append("Profile not updated recently")

    completeness = profile_completeness(candidate, SCORING_FIELDS) * weights.COMPLETENESS_SCALE
    if completeness >= weights.COMPLETE_PROFILE_THRESHOLD:
        result.adjustment += _round_half_up(completeness)
        result.factors.append("Complete profile information")
    elif completeness < weights.INCOMPLETE_PROFILE_THRESHOLD:
        result.adjustment -= weights.INCOMPLETE_PROFILE_PENALTY
        result.penalties.append("Incomplete profile information")

    return result


def calculate_match_confidence(
    candidate: PlayerRecord | Mapping[str, Any] | None,
    search_criteria: SearchCriteria | Mapping[str, Any] | None,
    match_type: MatchType | str | None,
    now: datetime,
) -> ScoredMatch:
    """Score one candidate record against the search criteria.

    The larger of the match-type base score and the name sub-score is
    kept, then school, phone, email, recency and completeness adjust it.

    Args:
        candidate: Existing player record (model or raw store dict)
        search_criteria: What the signup searched for
        match_type: Channel the candidate was retrieved through
        now: Reference time for the recency adjustment

    Returns:
        ScoredMatch with a 0-100 integer score and its breakdown
    """
    record = _as_record(candidate)
    criteria = _as_criteria(search_criteria)
    matching_factors: list[str] = []
    penalties: list[str] = []

    name = analyze_name_match(record, criteria)
    score = max(get_base_score(match_type), name.score)
    matching_factors.extend(name.factors)
    penalties.extend(name.penalties)

    school = analyze_school_match(record, criteria)
    phone = analyze_phone_match(record, criteria)
    for analysis in (school, phone):
        if analysis.matched:
            score += analysis.bonus
            matching_factors.extend(analysis.factors)
        else:
            score -= analysis.penalty
            penalties.extend(analysis.penalties)

    additional = analyze_additional_factors(record, criteria, now)
    score += additional.adjustment
    matching_factors.extend(additional.factors)
    penalties.extend(additional.penalties)

    score = max(weights.MIN_SCORE, min(weights.MAX_SCORE, _round_half_up(score)))

    return ScoredMatch.model_validate(
        {
            **record.model_dump(),
            "confidence_score": score,
            "confidence_level": get_confidence_level(score),
            "match_type": _match_type_value(match_type),
            "matching_factors": matching_factors,
            "penalties": penalties,
            "match_analysis": MatchAnalysis(
                name_match=name,
                school_match=school,
                phone_match=phone,
                additional_factors=additional,
            ),
        }
    )


def _ranking_key(match: ScoredMatch) -> tuple[int, int, float]:
    """Sort key: (score desc, match type priority, completeness desc)."""
    priority = MATCH_TYPE_PRIORITY.get(match.match_type, len(MATCH_TYPE_PRIORITY))
    return (-match.confidence_score, priority, -profile_completeness(match))


def sort_matches_by_confidence(matches: Iterable[ScoredMatch]) -> list[ScoredMatch]:
    """Rank scored matches, best first.

    Ties on score fall back to match type priority, then to how complete
    the profile is. Equal keys keep their input order.
    """
    return sorted(matches, key=_ranking_key)
