"""Matching schemas.

Defines data models for the institution reference corpus, player records
from the record store, search criteria and scored match results.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _coerce_optional_str(value: Any) -> str | None:
    """Keep strings, stringify numbers, drop everything else to None."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class CanonicalEntity(BaseModel):
    """Institution in the reference dataset.

    Mirrors one entry of the college logos dataset: a primary name,
    known alternative names and an opaque payload (the logo URL).
    Other dataset keys (abbreviation, conference, ...) are kept as extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    primary_name: str = Field(
        validation_alias=AliasChoices("primary_name", "primaryName", "name"),
        description="Canonical institution name",
    )
    alternative_names: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("alternative_names", "alternativeNames"),
        description="Known nicknames and variations",
    )
    payload: Any = Field(
        default=None,
        validation_alias=AliasChoices("payload", "logo"),
        description="Opaque value returned on match (e.g. logo URL)",
    )

    @field_validator("alternative_names", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> tuple[str, ...]:
        if not isinstance(value, (list, tuple)):
            return ()
        return tuple(v for v in value if isinstance(v, str))


class PlayerRecord(BaseModel):
    """Player record as read from the record store.

    Every field is optional. Store records use camelCase keys, which are
    accepted as aliases; unknown keys are preserved as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    first_name: str | None = Field(
        default=None, validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: str | None = Field(
        default=None, validation_alias=AliasChoices("last_name", "lastName")
    )
    full_name: str | None = Field(
        default=None, validation_alias=AliasChoices("full_name", "fullName")
    )
    email_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("email_address", "emailAddress", "email"),
    )
    phone_number: str | None = Field(
        default=None, validation_alias=AliasChoices("phone_number", "phoneNumber")
    )
    school_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "school_id", "schoolId", "highSchoolIRN", "schoolIRN"
        ),
        description="School identifier (IRN)",
    )
    updated_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )
    position: str | None = None
    class_year: str | None = Field(
        default=None,
        validation_alias=AliasChoices("class_year", "classYear", "class"),
    )

    @field_validator(
        "id",
        "first_name",
        "last_name",
        "full_name",
        "email_address",
        "phone_number",
        "school_id",
        "position",
        "class_year",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _coerce_optional_str(value)

    @field_validator("updated_at", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None


class SearchCriteria(BaseModel):
    """What the signup (or caller) is searching for."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    first_name: str | None = Field(
        default=None, validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: str | None = Field(
        default=None, validation_alias=AliasChoices("last_name", "lastName")
    )
    full_name: str | None = Field(
        default=None, validation_alias=AliasChoices("full_name", "fullName")
    )
    email: str | None = None
    phone_number: str | None = Field(
        default=None, validation_alias=AliasChoices("phone_number", "phoneNumber")
    )
    school_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("school_id", "schoolId", "schoolIRN"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _coerce_optional_str(value)


class SignupInfo(BaseModel):
    """Player information captured on the signup form."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    full_name: str | None = Field(
        default=None, validation_alias=AliasChoices("full_name", "fullName")
    )
    email: str | None = None
    phone_number: str | None = Field(
        default=None, validation_alias=AliasChoices("phone_number", "phoneNumber")
    )
    school_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("school_id", "schoolId", "schoolIRN"),
    )
    school_name: str | None = Field(
        default=None, validation_alias=AliasChoices("school_name", "schoolName")
    )

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _coerce_optional_str(value)


class MatchType(str, Enum):
    """How a candidate was retrieved from the record store."""

    EMAIL_MATCH = "email_match"
    NAME_SCHOOL = "name_school"
    NAME_PHONE = "name_phone"
    PARTIAL_NAME_SCHOOL = "partial_name_school"
    PARTIAL_NAME_PHONE = "partial_name_phone"
    NAME_PARTIAL = "name_partial"
    PHONE_ONLY = "phone_only"


class ConfidenceLevel(BaseModel):
    """Bucket a confidence score falls into."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Level key (HIGH, MEDIUM, LOW, VERY_LOW)")
    label: str = Field(description="Display label")
    range: tuple[int, int] = Field(description="Inclusive score range")
    color: str = Field(description="Display color hint")


class NameAnalysis(BaseModel):
    """Outcome of comparing names."""

    score: int = 0
    factors: list[str] = Field(default_factory=list)
    penalties: list[str] = Field(default_factory=list)


class FieldAnalysis(BaseModel):
    """Outcome of comparing one identifying field (school, phone)."""

    matched: bool = False
    bonus: int = 0
    penalty: int = 0
    factors: list[str] = Field(default_factory=list)
    penalties: list[str] = Field(default_factory=list)


class AdditionalFactorsAnalysis(BaseModel):
    """Email, recency and completeness adjustments."""

    adjustment: int = 0
    factors: list[str] = Field(default_factory=list)
    penalties: list[str] = Field(default_factory=list)


class MatchAnalysis(BaseModel):
    """Per-factor breakdown behind a confidence score."""

    name_match: NameAnalysis
    school_match: FieldAnalysis
    phone_match: FieldAnalysis
    additional_factors: AdditionalFactorsAnalysis


class ScoredMatch(PlayerRecord):
    """Player record annotated with a confidence score.

    Carries every field of the scored record plus the score breakdown.
    Created fresh per scoring call; never persisted by the engine.
    """

    confidence_score: int = Field(ge=0, le=100, description="Confidence (0-100)")
    confidence_level: ConfidenceLevel
    match_type: str = Field(description="MatchType value the record came from")
    matching_factors: list[str] = Field(
        default_factory=list, description="Reasons supporting the match"
    )
    penalties: list[str] = Field(
        default_factory=list, description="Reasons against the match"
    )
    match_analysis: MatchAnalysis
