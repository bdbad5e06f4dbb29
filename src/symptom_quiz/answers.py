"""
Answer storage for a quiz session.
"""

from typing import Iterator, Optional

from .quiz.schema import Answer


class AnswerStore:
    """
    Recorded answers keyed by question index.

    One answer per index; recording again replaces it (last write wins).
    """

    def __init__(self, question_count: int):
        self._question_count = question_count
        self._answers: dict[int, Answer] = {}

    def record(self, index: int, answer: Answer) -> None:
        if not 0 <= index < self._question_count:
            raise IndexError(f"Question index {index} out of range 0..{self._question_count - 1}")
        self._answers[index] = answer

    def get(self, index: int) -> Optional[Answer]:
        return self._answers.get(index)

    def has(self, index: int) -> bool:
        return index in self._answers

    def count(self) -> int:
        """Number of distinct answered questions."""
        return len(self._answers)

    def clear(self) -> None:
        self._answers.clear()

    def snapshot(self) -> dict[int, Answer]:
        """Copy of the answers, ordered by question index."""
        return {index: self._answers[index] for index in sorted(self._answers)}

    def values(self) -> list[Answer]:
        return list(self._answers.values())

    def __contains__(self, index: object) -> bool:
        return index in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._answers))

    def __repr__(self) -> str:
        return f"AnswerStore(answered={len(self._answers)}/{self._question_count})"
