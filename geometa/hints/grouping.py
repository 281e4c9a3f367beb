from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .. import config
from .models import Hint

HintGroups = Dict[str, List[Hint]]
NestedHintGroups = Dict[str, Dict[str, List[Hint]]]


def _group(hints: Optional[Iterable[Hint]], field: str) -> HintGroups:
    grouped: HintGroups = {}
    for hint in hints or ():
        grouped.setdefault(getattr(hint, field), []).append(hint)
    return grouped


def group_by_meta_type(hints: Optional[Iterable[Hint]]) -> HintGroups:
    """Bucket a country's hints by meta type, keeping input order in each bucket."""
    return _group(hints, "meta_type")


def group_by_country(hints: Optional[Iterable[Hint]]) -> HintGroups:
    """Bucket a meta type's hints by country, countries sorted alphabetically."""
    grouped = _group(hints, "country")
    return {country: grouped[country] for country in sorted(grouped)}


def group_by_meta_and_country(hints: Optional[Iterable[Hint]]) -> NestedHintGroups:
    grouped: NestedHintGroups = {}
    for hint in hints or ():
        by_country = grouped.setdefault(hint.meta_type, {})
        by_country.setdefault(hint.country, []).append(hint)
    return grouped


@dataclass(frozen=True)
class Coverage:
    hint_count: int
    reference_total: int
    percent: float
    band: str


def coverage(
    hint_count: int, reference_total: int = config.PLONKIT_REFERENCE_TOTAL
) -> Coverage:
    """How far a country's hint count goes towards the Plonkit reference."""
    if reference_total <= 0:
        raise ValueError("Reference total must be positive")

    percent = min(max(hint_count, 0) / reference_total * 100.0, 100.0)
    band = "low"
    for name, threshold in config.COVERAGE_BANDS.items():
        if percent >= threshold:
            band = name
            break
    return Coverage(
        hint_count=hint_count,
        reference_total=reference_total,
        percent=percent,
        band=band,
    )
