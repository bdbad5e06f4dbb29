"""
Quiz data model for symptom-quiz

Immutable quiz definitions and the validation that builds them.
"""

from .schema import (
    Answer,
    QuestionKind,
    QuizDefinition,
    QuizOption,
    QuizQuestion,
    ScaleLabels,
    ScoringRule,
    REQUIRED_LEVELS,
    parse_quiz_definition,
)

__all__ = [
    "Answer",
    "QuestionKind",
    "QuizDefinition",
    "QuizOption",
    "QuizQuestion",
    "ScaleLabels",
    "ScoringRule",
    "REQUIRED_LEVELS",
    "parse_quiz_definition",
]
