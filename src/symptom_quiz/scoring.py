"""
Risk scoring

Pure functions: sum answer weights, then place the total in a risk bucket.
Buckets are checked by ascending maxScore with an inclusive upper bound;
anything above every bound falls in the largest bucket.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Union

from .answers import AnswerStore
from .quiz.schema import Answer, ScoringRule


@dataclass(frozen=True)
class ScoreOutcome:
    """Score and risk level computed at quiz completion."""
    score: int
    level: str

    def to_dict(self) -> dict:
        return {"score": self.score, "level": self.level}


def calculate_score(answers: Union[AnswerStore, Mapping[int, Answer], Iterable[Answer]]) -> int:
    """
    Sum the weights of recorded answers.

    Partial answer sets are fine; order doesn't matter.

    Args:
        answers: AnswerStore, index -> Answer mapping, or iterable of Answers

    Returns:
        Total weight
    """
    if isinstance(answers, (AnswerStore, Mapping)):
        answers = answers.values()
    return sum(answer.weight for answer in answers)


def classify(score: int, rules: Union[Mapping[str, ScoringRule], Iterable[ScoringRule]]) -> str:
    """
    Map a score to a risk level.

    Args:
        score: Total score
        rules: Scoring buckets (mapping of level -> rule, or rules)

    Returns:
        Level of the first bucket (by ascending max_score) whose max_score
        is >= score, else the level of the largest bucket
    """
    if isinstance(rules, Mapping):
        rules = rules.values()
    ordered = sorted(rules, key=lambda r: r.max_score)
    if not ordered:
        raise ValueError("No scoring rules to classify against")

    for rule in ordered:
        if score <= rule.max_score:
            return rule.level
    return ordered[-1].level


def evaluate(
    answers: Union[AnswerStore, Mapping[int, Answer], Iterable[Answer]],
    rules: Union[Mapping[str, ScoringRule], Iterable[ScoringRule]],
) -> ScoreOutcome:
    """Score answers and classify the total."""
    score = calculate_score(answers)
    return ScoreOutcome(score=score, level=classify(score, rules))


def score_ratio(score: int, max_score: int) -> float:
    """Fraction of the display scale a score fills, clamped to [0, 1]."""
    if max_score <= 0:
        return 0.0
    return min(1.0, max(0.0, score / max_score))
