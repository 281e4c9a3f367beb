from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .grouping import NestedHintGroups, group_by_meta_and_country
from .models import Hint
from .store import HintStore

logger = logging.getLogger(__name__)


def tokenize_query(query: str) -> List[str]:
    return [token.lower() for token in (query or "").split() if token]


def matches_all_tokens(hint: Hint, tokens: Sequence[str]) -> bool:
    text = hint.search_text
    return all(token in text for token in tokens)


def merge_results(exact: Sequence[Hint], keyword: Iterable[Hint]) -> List[Hint]:
    """Exact matches first, then keyword matches not already present."""
    seen_ids = {hint.id for hint in exact}
    merged = list(exact)
    for hint in keyword:
        if hint.id in seen_ids:
            continue
        merged.append(hint)
        seen_ids.add(hint.id)
    return merged


def search_hints(store: HintStore, query: str) -> NestedHintGroups:
    """Search hints and group the matches as meta type -> country -> hints.

    The whole query is first matched as a phrase by the store. Queries with more
    than one word also pull the full hint set and keep hints containing every
    word; those keyword-only matches rank after the phrase matches.
    """
    tokens = tokenize_query(query)
    if not tokens:
        return {}

    exact = store.fetch_hints(text=query.strip())
    keyword: List[Hint] = []
    if len(tokens) > 1:
        keyword = [hint for hint in store.all_hints() if matches_all_tokens(hint, tokens)]

    merged = merge_results(exact, keyword)
    logger.debug(
        "Search %r: %d tokens, %d exact, %d keyword, %d merged",
        query,
        len(tokens),
        len(exact),
        len(keyword),
        len(merged),
    )
    return group_by_meta_and_country(merged)
