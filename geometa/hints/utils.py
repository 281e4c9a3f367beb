from __future__ import annotations

import random
from typing import Hashable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
H = TypeVar("H", bound=Hashable)


def stable_shuffle(items: Sequence[T], rng: random.Random) -> List[T]:
    mutable = list(items)
    rng.shuffle(mutable)
    return mutable


def unique_in_order(values: Iterable[H]) -> List[H]:
    """Drop repeated values while keeping first-appearance order."""
    return list(dict.fromkeys(values))


def clean_labels(values: Iterable[Optional[str]]) -> List[str]:
    """Discard blank or missing labels, keeping the others exactly as stored."""
    return [value for value in values if value is not None and str(value).strip()]
