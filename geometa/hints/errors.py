from __future__ import annotations

from typing import List, Sequence


class HintStoreError(Exception):
    """Raised when the remote hint store cannot complete a request."""


class HintValidationError(HintStoreError):
    """Raised when a new hint is rejected before it reaches the store."""

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "Invalid hint")


class NoHintsAvailable(Exception):
    """Raised when the quiz sample comes back empty."""
