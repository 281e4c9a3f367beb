from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

from .. import config
from .errors import NoHintsAvailable
from .models import Hint
from .store import HintStore
from .utils import clean_labels, stable_shuffle, unique_in_order


@dataclass(frozen=True)
class Score:
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    def record(self, is_correct: bool) -> "Score":
        return replace(
            self,
            correct=self.correct + (1 if is_correct else 0),
            total=self.total + 1,
        )


@dataclass(frozen=True)
class Question:
    hint: Hint
    options: Sequence[str]

    @property
    def correct_option(self) -> str:
        return self.hint.meta_type


class QuizEngine:
    def __init__(
        self,
        store: HintStore,
        sample_size: int = config.QUIZ_SAMPLE_SIZE,
        option_count: int = config.QUIZ_OPTION_COUNT,
        seed: int | None = None,
    ) -> None:
        if sample_size <= 0:
            raise ValueError("Sample size must be positive")

        if option_count < 1:
            raise ValueError("A question needs at least one option")

        self.store = store
        self.sample_size = sample_size
        self.option_count = option_count
        self.seed = seed if seed is not None else random.randint(0, 1_000_000)
        self.rng = random.Random(self.seed)

    def pick_question(self) -> Hint:
        # Uniform over the first ``sample_size`` rows by id, not over the whole table.
        sample = self.store.sample_hints(limit=self.sample_size)
        if not sample:
            raise NoHintsAvailable("No hints available for the quiz")
        return sample[self.rng.randrange(len(sample))]

    def build_answer_set(self, correct_hint: Hint, all_meta_types: Iterable[str]) -> List[str]:
        correct = correct_hint.meta_type
        others = [
            meta_type
            for meta_type in unique_in_order(clean_labels(all_meta_types))
            if meta_type != correct
        ]
        wanted = min(self.option_count - 1, len(others))
        distractors = self.rng.sample(others, wanted)
        return stable_shuffle([correct, *distractors], self.rng)

    def next_question(self, all_meta_types: Iterable[str]) -> Question:
        hint = self.pick_question()
        return Question(hint=hint, options=self.build_answer_set(hint, all_meta_types))

    @staticmethod
    def evaluate(question: Question, selected: str, score: Score) -> Tuple[bool, Score]:
        is_correct = selected == question.correct_option
        return is_correct, score.record(is_correct)

    def reset(self, all_meta_types: Iterable[str]) -> Tuple[Score, Question]:
        return Score(), self.next_question(all_meta_types)

