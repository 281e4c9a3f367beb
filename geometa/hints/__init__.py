"""Hint store client and the in-memory engines built on top of it."""

from .errors import HintStoreError, HintValidationError, NoHintsAvailable
from .grouping import (
    Coverage,
    coverage,
    group_by_country,
    group_by_meta_and_country,
    group_by_meta_type,
)
from .models import Hint, HintDraft, format_meta_type, validate_draft
from .quiz import Question, QuizEngine, Score
from .search import search_hints
from .store import HintStore, create_store

__all__ = [
    "Coverage",
    "Hint",
    "HintDraft",
    "HintStore",
    "HintStoreError",
    "HintValidationError",
    "NoHintsAvailable",
    "Question",
    "QuizEngine",
    "Score",
    "coverage",
    "create_store",
    "format_meta_type",
    "group_by_country",
    "group_by_meta_and_country",
    "group_by_meta_type",
    "search_hints",
    "validate_draft",
]
