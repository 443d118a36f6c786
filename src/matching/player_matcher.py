"""Signup-to-player matching service.

Searches the player store through several retrieval channels (email,
name + school, name + phone, partial name), scores every hit with the
channel's MatchType, drops duplicate records and ranks the rest. When no
existing profile fits, a new one is created from the signup.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

import structlog

from src.config import settings
from src.matching.confidence import calculate_match_confidence, sort_matches_by_confidence
from src.matching.normalizer import normalize_email, normalize_phone, parse_full_name
from src.matching.schemas import MatchType, ScoredMatch, SearchCriteria, SignupInfo
from src.repositories.player_store import PlayerStore

logger = structlog.get_logger()

# Record store field names
FIRST_NAME_FIELD = "firstName"
LAST_NAME_FIELD = "lastName"
EMAIL_FIELD = "emailAddress"
PHONE_FIELD = "phoneNumber"
SCHOOL_FIELD = "highSchoolIRN"
SCHOOL_NAME_FIELD = "highSchool"


class PlayerCreationError(Exception):
    """Raised when a player profile cannot be created from a signup."""

    pass


def _as_signup(signup: SignupInfo | Mapping[str, Any]) -> SignupInfo:
    if isinstance(signup, SignupInfo):
        return signup
    return SignupInfo.model_validate(
        {k: v for k, v in signup.items() if isinstance(k, str)}
    )


def remove_duplicate_matches(matches: Iterable[ScoredMatch]) -> list[ScoredMatch]:
    """Keep the first match per record id.

    Matches without an id cannot be compared and are always kept.
    """
    seen: set[str] = set()
    unique: list[ScoredMatch] = []
    for match in matches:
        if match.id is not None:
            if match.id in seen:
                continue
            seen.add(match.id)
        unique.append(match)
    return unique


class PlayerMatchingService:
    """Finds existing player profiles that may belong to a new signup.

    Channels are queried from most to least specific, so when the same
    record comes back from several channels the copy scored with the
    strongest MatchType is the one kept.
    """

    def __init__(
        self,
        store: PlayerStore,
        candidate_limit: int | None = None,
        partial_limit: int | None = None,
    ):
        """Initialize service with a player store.

        Args:
            store: Record store to search
            candidate_limit: Max records per exact channel (default from settings)
            partial_limit: Max records per partial-name query (default from settings)
        """
        self._store = store
        self._limit = candidate_limit or settings.match_candidate_limit
        self._partial_limit = partial_limit or settings.partial_name_candidate_limit

    @staticmethod
    def build_search_criteria(signup: SignupInfo | Mapping[str, Any]) -> SearchCriteria:
        """Normalize signup input into search criteria."""
        signup = _as_signup(signup)
        first_name, last_name = parse_full_name(signup.full_name)
        return SearchCriteria(
            first_name=first_name or None,
            last_name=last_name or None,
            full_name=signup.full_name,
            email=normalize_email(signup.email) or None,
            phone_number=normalize_phone(signup.phone_number) or None,
            school_id=(signup.school_id or "").strip() or None,
        )

    async def find_potential_matches(
        self,
        signup: SignupInfo | Mapping[str, Any],
        now: datetime | None = None,
    ) -> list[ScoredMatch]:
        """Search, score, de-duplicate and rank candidate players.

        Args:
            signup: Player information from the signup form
            now: Reference time for recency scoring (default: current UTC time)

        Returns:
            Scored matches, best first
        """
        criteria = self.build_search_criteria(signup)
        now = now or datetime.now(timezone.utc)
        first, last = criteria.first_name, criteria.last_name

        channels: list[tuple[MatchType, list[Mapping[str, Any]], int]] = []
        if criteria.email:
            channels.append(
                (MatchType.EMAIL_MATCH, [{EMAIL_FIELD: criteria.email}], self._limit)
            )
        if criteria.school_id and first and last:
            channels.append(
                (
                    MatchType.NAME_SCHOOL,
                    [
                        {
                            FIRST_NAME_FIELD: first,
                            LAST_NAME_FIELD: last,
                            SCHOOL_FIELD: criteria.school_id,
                        }
                    ],
                    self._limit,
                )
            )
        if criteria.phone_number and first and last:
            channels.append(
                (
                    MatchType.NAME_PHONE,
                    [
                        {
                            FIRST_NAME_FIELD: first,
                            LAST_NAME_FIELD: last,
                            PHONE_FIELD: criteria.phone_number,
                        }
                    ],
                    self._limit,
                )
            )
        partial_queries = []
        if first:
            partial_queries.append({FIRST_NAME_FIELD: first})
        if last:
            partial_queries.append({LAST_NAME_FIELD: last})
        if partial_queries:
            channels.append((MatchType.NAME_PARTIAL, partial_queries, self._partial_limit))

        scored: list[ScoredMatch] = []
        for match_type, queries, limit in channels:
            records = await self._query_channel(match_type, queries, limit)
            logger.debug(
                "match channel searched", match_type=match_type.value, found=len(records)
            )
            scored.extend(
                calculate_match_confidence(record, criteria, match_type, now)
                for record in records
            )

        unique = remove_duplicate_matches(scored)
        ranked = sort_matches_by_confidence(unique)
        logger.info(
            "potential matches found",
            total=len(scored),
            unique=len(ranked),
            top_score=ranked[0].confidence_score if ranked else None,
        )
        return ranked

    async def _query_channel(
        self,
        match_type: MatchType,
        queries: list[Mapping[str, Any]],
        limit: int,
    ) -> list[Mapping[str, Any]]:
        """Run a channel's store queries.

        A failing query is logged and contributes no records, so one bad
        channel does not sink the whole search.
        """
        records: list[Mapping[str, Any]] = []
        for query in queries:
            try:
                records.extend(await self._store.filter(query, limit) or [])
            except Exception as e:
                logger.error(
                    "match channel query failed",
                    match_type=match_type.value,
                    error=str(e),
                )
        return records

    async def create_player_from_signup(
        self,
        signup: SignupInfo | Mapping[str, Any],
        user_id: str,
        created_by: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Create a new player profile when no existing match was accepted.

        Args:
            signup: Player information from the signup form
            user_id: Account the new profile is linked to
            created_by: Admin who approved the signup
            now: Creation timestamp (default: current UTC time)

        Returns:
            The stored player record, including its new id

        Raises:
            PlayerCreationError: If the store rejects the record
        """
        signup = _as_signup(signup)
        criteria = self.build_search_criteria(signup)
        now = now or datetime.now(timezone.utc)

        data: dict[str, Any] = {
            FIRST_NAME_FIELD: criteria.first_name or "",
            LAST_NAME_FIELD: criteria.last_name or "",
            EMAIL_FIELD: criteria.email or "",
            PHONE_FIELD: criteria.phone_number or "",
            SCHOOL_FIELD: criteria.school_id or "",
            SCHOOL_NAME_FIELD: (signup.school_name or "").strip(),
            "linkedUserId": user_id,
            "createdFromSignup": True,
            "createdAt": now.isoformat(),
            "createdBy": created_by,
            "profileFiles": {
                "photos": [],
                "schoolId": None,
                "reportCards": [],
                "highlightVideo": None,
            },
            "position": "",
            "class": None,
            "stars": 0,
            "idNumber": "",
            "middleName": "",
            "suffix": "",
            "nickname": "",
            "dob": "",
            "caption": "",
        }

        try:
            player = await self._store.create(data)
        except Exception as e:
            logger.error("player creation failed", user_id=user_id, error=str(e))
            raise PlayerCreationError(f"Failed to create player profile: {e}") from e

        logger.info(
            "player created from signup", user_id=user_id, player_id=player.get("id")
        )
        return player
