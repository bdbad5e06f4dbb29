"""
Result export

Packages a completed session into an immutable QuizResult. Score, level
and completion time are fixed at completion, so exporting the same
session twice yields equal results.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .navigation import QuizSession
from .quiz.schema import Answer, QuizDefinition
from .scoring import score_ratio


@dataclass(frozen=True)
class QuizResult:
    """Snapshot of a completed quiz."""
    tool: str
    score: int
    level: str
    answers: Mapping[int, Answer]
    completed_at: str
    recommendations: tuple
    label: str = ""
    color: str = ""
    max_score: int = 0

    # answers is a read-only mapping, which has no hash
    __hash__ = None

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def score_ratio(self) -> float:
        """Share of the display scale filled by the score."""
        return score_ratio(self.score, self.max_score)

    @property
    def is_high_risk(self) -> bool:
        """High-risk results come with an urgent-care warning."""
        return self.level == "high"

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "score": self.score,
            "level": self.level,
            "label": self.label,
            "color": self.color,
            "answers": {str(index): a.to_dict() for index, a in self.answers.items()},
            "completedAt": self.completed_at,
            "recommendations": list(self.recommendations),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def export_results(
    session: QuizSession,
    definition: QuizDefinition,
    tool: str,
) -> Optional[QuizResult]:
    """
    Build a result snapshot for a completed session.

    Args:
        session: The session to export
        definition: Definition the session was run against
        tool: Tool identifier to stamp on the result

    Returns:
        QuizResult, or None if the session hasn't completed
    """
    if not session.is_completed or session.outcome is None:
        return None

    outcome = session.outcome
    rule = definition.scoring_rules.get(outcome.level)

    return QuizResult(
        tool=tool,
        score=outcome.score,
        level=outcome.level,
        answers=MappingProxyType(session.answers.snapshot()),
        completed_at=session.completed_at or "",
        recommendations=definition.recommendations_for(outcome.level),
        label=rule.label if rule else outcome.level,
        color=rule.color if rule else "",
        max_score=definition.max_score,
    )
