"""
symptom-quiz: declarative symptom-assessment quiz engine.

Loads a quiz definition, walks a user through its questions, scores the
weighted answers into a risk level and exports the result.
"""

__version__ = "0.1.0"

from .answers import AnswerStore
from .config import config
from .engine import QuizEngine, start_quiz
from .errors import (
    QuizLoadError,
    QuizNotFoundError,
    MalformedQuizError,
    EmptyQuestionSetError,
)
from .events import LocalEventLog
from .export import QuizResult, export_results
from .loader import QuizDataLoader, tool_name_from_source
from .navigation import NavigationStateMachine, QuizSession, QuizState, SessionView
from .quiz.schema import (
    Answer,
    QuestionKind,
    QuizDefinition,
    QuizOption,
    QuizQuestion,
    ScoringRule,
    parse_quiz_definition,
)
from .scheduling import AsyncioScheduler, Scheduler, VirtualClock
from .scoring import ScoreOutcome, calculate_score, classify, evaluate

__all__ = [
    # Engine
    "QuizEngine",
    "start_quiz",
    "NavigationStateMachine",
    "QuizSession",
    "QuizState",
    "SessionView",
    "AnswerStore",
    # Loading
    "QuizDataLoader",
    "tool_name_from_source",
    "parse_quiz_definition",
    "QuizLoadError",
    "QuizNotFoundError",
    "MalformedQuizError",
    "EmptyQuestionSetError",
    # Data model
    "Answer",
    "QuestionKind",
    "QuizDefinition",
    "QuizOption",
    "QuizQuestion",
    "ScoringRule",
    # Scoring & results
    "ScoreOutcome",
    "calculate_score",
    "classify",
    "evaluate",
    "QuizResult",
    "export_results",
    # Collaborators
    "LocalEventLog",
    "Scheduler",
    "AsyncioScheduler",
    "VirtualClock",
    # Config
    "config",
]
