"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest
import structlog

from src.matching.schemas import CanonicalEntity


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency scoring."""
    return datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def logos_data() -> list[dict]:
    """Raw college logo records as stored in the dataset."""
    return [
        {
            "name": "Alabama",
            "abbreviation": "ALA",
            "conference": "SEC",
            "division": "FBS",
            "logo": "https://a.espncdn.com/i/teamlogos/ncaa/500/ala.png",
            "alternativeNames": ["Alabama", "Bama"],
        },
        {
            "name": "Ohio State",
            "abbreviation": "OSU",
            "conference": "Big Ten",
            "division": "FBS",
            "logo": "https://a.espncdn.com/i/teamlogos/ncaa/500/osu.png",
            "alternativeNames": ["Ohio State", "Ohio"],
        },
        {
            "name": "Florida State",
            "abbreviation": "FSU",
            "conference": "ACC",
            "division": "FBS",
            "logo": "https://a.espncdn.com/i/teamlogos/ncaa/500/fsu.png",
            "alternativeNames": ["Florida State", "Florida"],
        },
    ]


@pytest.fixture
def small_corpus() -> list[CanonicalEntity]:
    """Two-school corpus used by the lookup scenarios."""
    return [
        CanonicalEntity(
            primary_name="Alabama", alternative_names=("Bama",), payload="ala.png"
        ),
        CanonicalEntity(
            primary_name="Ohio State", alternative_names=("Ohio",), payload="osu.png"
        ),
    ]


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()
