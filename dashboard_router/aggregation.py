"""Cross-app concept detection and counter aggregation."""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from .models import AggregateableData, AggregateResult


@dataclass(frozen=True)
class CrossAppConcept:
    """A data concept that can be answered by summing counters across apps."""
    name: str
    keywords: FrozenSet[str]
    aggregation_type: str = "sum"
    # Only entries of these types count toward the concept (None = every type)
    types: Optional[FrozenSet[str]] = None
    # Count metadata[metadata_key] instead of the entry's count when present
    metadata_key: Optional[str] = None
    noun: str = "items"


CROSS_APP_CONCEPTS: List[CrossAppConcept] = [
    CrossAppConcept(
        name="favorites",
        keywords=frozenset({"favorite", "favorites", "starred", "liked", "faves"}),
        metadata_key="favorites",
        noun="favorites",
    ),
    CrossAppConcept(
        name="images",
        keywords=frozenset({"image", "images", "photo", "photos", "picture", "pictures", "pics"}),
        types=frozenset({"image"}),
        noun="images",
    ),
    CrossAppConcept(
        name="saved",
        keywords=frozenset({"saved", "bookmarks", "bookmarked", "collection", "collections"}),
        noun="saved items",
    ),
    CrossAppConcept(
        name="media",
        keywords=frozenset({"media", "gifs", "gif", "videos", "video"}),
        types=frozenset({"image", "gif", "video"}),
        noun="media items",
    ),
]

CROSS_APP_TRIGGERS = [
    "all apps",
    "across all",
    "across apps",
    "across my apps",
    "everything",
    "combined",
    "all my",
    "in total",
]

_WORD = re.compile(r"[a-z0-9']+")

# Triggers match as whole phrases so "all my" never fires inside "call my"
_TRIGGER_PATTERNS = [
    re.compile(rf"(?<![\w'-]){re.escape(trigger)}(?![\w'-])") for trigger in CROSS_APP_TRIGGERS
]


def is_cross_app_query(query: str) -> bool:
    """Return True if the query contains a cross-app trigger phrase."""
    lower_query = query.lower()
    return any(pattern.search(lower_query) for pattern in _TRIGGER_PATTERNS)


def detect_concept(
    query: str,
    concepts: Optional[List[CrossAppConcept]] = None
) -> Optional[CrossAppConcept]:
    """
    Find the first concept whose keywords appear as whole words in the query.

    Args:
        query: Query text
        concepts: Concept table (defaults to CROSS_APP_CONCEPTS)

    Returns:
        Matching CrossAppConcept or None
    """
    words = set(_WORD.findall(query.lower()))
    for concept in concepts or CROSS_APP_CONCEPTS:
        if words & concept.keywords:
            return concept
    return None


def _concept_count(entry: AggregateableData, concept: Optional[CrossAppConcept]) -> int:
    if concept is None:
        return entry.count
    if concept.types is not None and entry.type not in concept.types:
        return 0
    if concept.metadata_key and concept.metadata_key in entry.metadata:
        return int(entry.metadata[concept.metadata_key])
    return entry.count


def aggregate_entries(
    query: str,
    entries: List[AggregateableData],
    concept: Optional[CrossAppConcept] = None
) -> AggregateResult:
    """
    Sum counters by type, and the concept's total across all entries.

    Args:
        query: Query that triggered the aggregation
        entries: Entries collected from every aggregating adapter
        concept: Concept detected in the query, if any

    Returns:
        AggregateResult with per-type totals and the concept total
    """
    totals: Dict[str, int] = {}
    for entry in entries:
        totals[entry.type] = totals.get(entry.type, 0) + entry.count

    return AggregateResult(
        query=query,
        concept=concept.name if concept else None,
        totals=totals,
        total=sum(_concept_count(entry, concept) for entry in entries),
        entries=list(entries),
    )


def format_aggregate_response(
    result: AggregateResult,
    concepts: Optional[List[CrossAppConcept]] = None
) -> str:
    """
    Render an aggregate result as a one-sentence answer.

    e.g. "You have 30 images across all apps: 20 photos in camera, 10 space images in nasa."
    """
    concept = None
    for candidate in concepts or CROSS_APP_CONCEPTS:
        if candidate.name == result.concept:
            concept = candidate
            break

    noun = concept.noun if concept else "items"
    scope = "all apps" if concept and concept.types else "your apps"
    parts = []
    for entry in result.entries:
        count = _concept_count(entry, concept)
        if count:
            parts.append(f"{count} {entry.label} in {entry.app_name}")

    response = f"You have {result.total} {noun} across {scope}"
    if parts:
        response += ": " + ", ".join(parts)
    return response + "."
