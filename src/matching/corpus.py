"""Reference institution corpus.

Loads the college logos dataset once per process and exposes it as an
immutable handle that is passed into every school lookup.
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, NamedTuple

import structlog
from pydantic import ValidationError

from src.config import get_settings
from src.matching.normalizer import normalize_name
from src.matching.schemas import CanonicalEntity

logger = structlog.get_logger()


class CorpusLoadError(Exception):
    """Raised when the reference dataset cannot be read."""


class PreparedEntity(NamedTuple):
    """Entity with its names normalized up front."""

    entity: CanonicalEntity
    primary: str
    alternatives: tuple[str, ...]


def _to_entity(record: CanonicalEntity | Mapping[str, Any]) -> CanonicalEntity | None:
    if isinstance(record, CanonicalEntity):
        return record
    if not isinstance(record, Mapping):
        return None
    try:
        return CanonicalEntity.model_validate(dict(record))
    except ValidationError:
        return None


def prepare_entities(
    records: Iterable[CanonicalEntity | Mapping[str, Any]],
) -> tuple[PreparedEntity, ...]:
    """Normalize every name once; invalid records are skipped."""
    prepared = []
    for record in records:
        entity = _to_entity(record)
        if entity is None:
            logger.warning("skipping invalid corpus entry", entry=repr(record)[:80])
            continue
        prepared.append(
            PreparedEntity(
                entity=entity,
                primary=normalize_name(entity.primary_name),
                alternatives=tuple(normalize_name(a) for a in entity.alternative_names),
            )
        )
    return tuple(prepared)


class SchoolCorpus:
    """Immutable, shareable view of the reference institutions.

    Safe to share across threads and requests: nothing mutates it after
    construction.
    """

    def __init__(self, records: Iterable[CanonicalEntity | Mapping[str, Any]] = ()):
        self._prepared = prepare_entities(records)

    @property
    def prepared(self) -> tuple[PreparedEntity, ...]:
        return self._prepared

    @property
    def entities(self) -> tuple[CanonicalEntity, ...]:
        return tuple(p.entity for p in self._prepared)

    def __len__(self) -> int:
        return len(self._prepared)

    def __iter__(self) -> Iterator[CanonicalEntity]:
        return (p.entity for p in self._prepared)

    def __repr__(self) -> str:
        return f"SchoolCorpus({len(self)} entities)"


def _records_from_document(document: Any) -> list[Mapping[str, Any]]:
    """Accept a list of entries or a mapping keyed by institution name."""
    if isinstance(document, list):
        return document
    if isinstance(document, Mapping):
        records = []
        for key, value in document.items():
            if isinstance(value, Mapping):
                records.append({"name": key, **value})
        return records
    raise CorpusLoadError(
        f"Expected a list or object of institutions, got {type(document).__name__}"
    )


def load_school_corpus(path: str | Path) -> SchoolCorpus:
    """Read the institution dataset from a JSON file.

    Args:
        path: Path to the JSON dataset

    Returns:
        SchoolCorpus with every valid entry

    Raises:
        CorpusLoadError: If the file is missing or not valid JSON
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CorpusLoadError(f"Cannot read school corpus {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CorpusLoadError(f"Invalid JSON in school corpus {path}: {e}") from e

    corpus = SchoolCorpus(_records_from_document(document))
    logger.info("school corpus loaded", path=str(path), entities=len(corpus))
    return corpus


@lru_cache
def get_school_corpus() -> SchoolCorpus:
    """Get the process-wide corpus from the configured dataset path."""
    path = get_settings().school_corpus_path
    if path is None:
        raise CorpusLoadError("SCHOOL_CORPUS_PATH is not configured")
    return load_school_corpus(path)
