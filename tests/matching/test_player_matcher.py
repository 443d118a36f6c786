"""Tests for PlayerMatchingService."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from structlog.testing import capture_logs

from src.matching.confidence import calculate_match_confidence
from src.matching.player_matcher import (
    PlayerCreationError,
    PlayerMatchingService,
    remove_duplicate_matches,
)
from src.matching.schemas import MatchType, SignupInfo
from src.repositories.player_store import InMemoryPlayerStore, PlayerStore

PLAYERS = [
    {
        "id": "p1",
        "firstName": "John",
        "lastName": "Doe",
        "emailAddress": "john@example.com",
        "phoneNumber": "6145550100",
        "highSchoolIRN": "111",
    },
    {"id": "p2", "firstName": "John", "lastName": "Smith", "highSchoolIRN": "222"},
    {"id": "p3", "firstName": "Jane", "lastName": "Doe", "phoneNumber": "6145550199"},
    {"id": "p4", "firstName": "Mike", "lastName": "Brown"},
]


@pytest.fixture
def signup() -> SignupInfo:
    """Signup form for John Doe with messy formatting."""
    return SignupInfo(
        full_name="John Doe",
        email="  JOHN@example.com ",
        phone_number="(614) 555-0100",
        school_id="111",
        school_name="Central High",
    )


@pytest.fixture
def service() -> PlayerMatchingService:
    """Service over an in-memory store seeded with PLAYERS."""
    return PlayerMatchingService(store=InMemoryPlayerStore(PLAYERS))


@pytest.fixture
def mock_store() -> MagicMock:
    """Mock PlayerStore returning no records."""
    store = MagicMock(spec=PlayerStore)
    store.filter = AsyncMock(return_value=[])
    return store


class TestBuildSearchCriteria:
    """Tests for build_search_criteria."""

    def test_normalizes_signup(self, signup: SignupInfo):
        criteria = PlayerMatchingService.build_search_criteria(signup)

        assert criteria.first_name == "John"
        assert criteria.last_name == "Doe"
        assert criteria.full_name == "John Doe"
        assert criteria.email == "john@example.com"
        assert criteria.phone_number == "6145550100"
        assert criteria.school_id == "111"

    def test_accepts_raw_form_data(self):
        criteria = PlayerMatchingService.build_search_criteria(
            {"fullName": "Cher", "schoolIRN": " ", "phoneNumber": None}
        )

        assert criteria.first_name == "Cher"
        assert criteria.last_name is None
        assert criteria.school_id is None
        assert criteria.phone_number is None
        assert criteria.email is None

    def test_ignores_non_string_keys(self):
        criteria = PlayerMatchingService.build_search_criteria({1: "x", "fullName": "Cher"})

        assert criteria.first_name == "Cher"


class TestFindPotentialMatches:
    """Tests for find_potential_matches."""

    @pytest.mark.asyncio
    async def test_ranks_unique_matches(
        self, service: PlayerMatchingService, signup: SignupInfo, now: datetime
    ):
        """p1 hits every channel but is returned once, scored as an email match."""
        matches = await service.find_potential_matches(signup, now=now)

        assert [m.id for m in matches] == ["p1", "p3", "p2"]
        assert matches[0].match_type == MatchType.EMAIL_MATCH
        assert matches[0].confidence_score == 100
        assert matches[0].confidence_level.label == "High"
        assert matches[1].confidence_score == 57
        assert matches[2].confidence_score == 55

    @pytest.mark.asyncio
    async def test_unrelated_players_not_returned(
        self, service: PlayerMatchingService, signup: SignupInfo, now: datetime
    ):
        matches = await service.find_potential_matches(signup, now=now)

        assert "p4" not in {m.id for m in matches}

    @pytest.mark.asyncio
    async def test_queries_each_channel(
        self, mock_store: MagicMock, signup: SignupInfo, now: datetime
    ):
        service = PlayerMatchingService(store=mock_store, candidate_limit=5, partial_limit=7)

        await service.find_potential_matches(signup, now=now)

        mock_store.filter.assert_any_await({"emailAddress": "john@example.com"}, 5)
        mock_store.filter.assert_any_await(
            {"firstName": "John", "lastName": "Doe", "highSchoolIRN": "111"}, 5
        )
        mock_store.filter.assert_any_await(
            {"firstName": "John", "lastName": "Doe", "phoneNumber": "6145550100"}, 5
        )
        mock_store.filter.assert_any_await({"firstName": "John"}, 7)
        mock_store.filter.assert_any_await({"lastName": "Doe"}, 7)
        assert mock_store.filter.await_count == 5

    @pytest.mark.asyncio
    async def test_channels_skipped_without_inputs(self, mock_store: MagicMock, now: datetime):
        """Name-only signups only run the partial-name channel."""
        service = PlayerMatchingService(store=mock_store)

        await service.find_potential_matches({"fullName": "Cher"}, now=now)

        mock_store.filter.assert_awaited_once_with({"firstName": "Cher"}, 20)

    @pytest.mark.asyncio
    async def test_empty_signup(self, mock_store: MagicMock, now: datetime):
        service = PlayerMatchingService(store=mock_store)

        assert await service.find_potential_matches({}, now=now) == []
        mock_store.filter.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_channel_does_not_abort(
        self, mock_store: MagicMock, signup: SignupInfo, now: datetime
    ):
        async def flaky_filter(criteria, limit):
            if "emailAddress" in criteria:
                raise RuntimeError("store unavailable")
            return [PLAYERS[1]] if criteria.get("firstName") == "John" else []

        mock_store.filter = AsyncMock(side_effect=flaky_filter)
        service = PlayerMatchingService(store=mock_store)

        with capture_logs() as logs:
            matches = await service.find_potential_matches(signup, now=now)

        assert [m.id for m in matches] == ["p2"]
        failures = [e for e in logs if e["event"] == "match channel query failed"]
        assert failures[0]["match_type"] == "email_match"
        assert failures[0]["log_level"] == "error"


class TestCreatePlayerFromSignup:
    """Tests for create_player_from_signup."""

    @pytest.mark.asyncio
    async def test_builds_record_from_signup(
        self, mock_store: MagicMock, signup: SignupInfo, now: datetime
    ):
        mock_store.create = AsyncMock(side_effect=lambda data: {**data, "id": "new-1"})
        service = PlayerMatchingService(store=mock_store)

        player = await service.create_player_from_signup(
            signup, "user-9", created_by="admin@example.com", now=now
        )

        mock_store.create.assert_awaited_once()
        data = mock_store.create.await_args.args[0]
        assert data["firstName"] == "John"
        assert data["lastName"] == "Doe"
        assert data["emailAddress"] == "john@example.com"
        assert data["phoneNumber"] == "6145550100"
        assert data["highSchoolIRN"] == "111"
        assert data["highSchool"] == "Central High"
        assert data["linkedUserId"] == "user-9"
        assert data["createdFromSignup"] is True
        assert data["createdAt"] == now.isoformat()
        assert data["createdBy"] == "admin@example.com"
        assert data["profileFiles"]["photos"] == []
        assert data["stars"] == 0
        assert data["class"] is None
        assert player["id"] == "new-1"

    @pytest.mark.asyncio
    async def test_missing_fields_default_to_empty(self, mock_store: MagicMock, now: datetime):
        mock_store.create = AsyncMock(side_effect=lambda data: {**data, "id": "new-2"})
        service = PlayerMatchingService(store=mock_store)

        await service.create_player_from_signup({"fullName": "Cher"}, "user-1", now=now)

        data = mock_store.create.await_args.args[0]
        assert data["firstName"] == "Cher"
        assert data["lastName"] == ""
        assert data["emailAddress"] == ""
        assert data["phoneNumber"] == ""
        assert data["highSchoolIRN"] == ""
        assert data["highSchool"] == ""

    @pytest.mark.asyncio
    async def test_created_player_found_by_later_search(
        self, signup: SignupInfo, now: datetime
    ):
        """A profile created from a signup is the top match for the same signup."""
        service = PlayerMatchingService(store=InMemoryPlayerStore())

        player = await service.create_player_from_signup(signup, "user-9", now=now)
        matches = await service.find_potential_matches(signup, now=now)

        assert matches[0].id == player["id"]
        assert matches[0].match_type == MatchType.EMAIL_MATCH

    @pytest.mark.asyncio
    async def test_store_failure_raises(
        self, mock_store: MagicMock, signup: SignupInfo, now: datetime
    ):
        mock_store.create = AsyncMock(side_effect=RuntimeError("store unavailable"))
        service = PlayerMatchingService(store=mock_store)

        with capture_logs() as logs:
            with pytest.raises(PlayerCreationError, match="store unavailable"):
                await service.create_player_from_signup(signup, "user-9", now=now)

        assert logs[0]["event"] == "player creation failed"
        assert logs[0]["user_id"] == "user-9"


class TestRemoveDuplicateMatches:
    """Tests for remove_duplicate_matches."""

    def test_first_occurrence_wins(self, now: datetime):
        first = calculate_match_confidence({"id": "p1"}, {}, "email_match", now)
        again = calculate_match_confidence({"id": "p1"}, {}, "name_partial", now)
        other = calculate_match_confidence({"id": "p2"}, {}, "name_partial", now)

        unique = remove_duplicate_matches([first, again, other])

        assert [(m.id, m.match_type) for m in unique] == [
            ("p1", "email_match"),
            ("p2", "name_partial"),
        ]

    def test_records_without_id_kept(self, now: datetime):
        anonymous = calculate_match_confidence({}, {}, "phone_only", now)

        assert len(remove_duplicate_matches([anonymous, anonymous])) == 2
