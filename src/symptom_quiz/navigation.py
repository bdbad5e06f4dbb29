"""
Quiz navigation state machine

States are AtQuestion(i) for each question and Completed. Forward movement
is gated on the current question having an answer; the last forward step
completes the quiz and scores it exactly once.

Misuse (next() without an answer, previous() at the first question,
answering a question that isn't current) is a no-op, never an error.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from .answers import AnswerStore
from .config import config
from .quiz.schema import Answer, QuizDefinition, QuizQuestion
from .scheduling import ScheduledCall, Scheduler
from .scoring import ScoreOutcome, evaluate

logger = logging.getLogger(__name__)


class QuizState(str, Enum):
    """Status of a quiz session."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class QuizSession:
    """Mutable state of one traversal of a quiz."""
    answers: AnswerStore
    current_index: int = 0
    state: QuizState = QuizState.IN_PROGRESS
    outcome: Optional[ScoreOutcome] = None
    completed_at: Optional[str] = None
    # Bumped on restart so callbacks scheduled earlier can tell they're stale
    generation: int = 0

    @property
    def is_completed(self) -> bool:
        return self.state == QuizState.COMPLETED

    def to_dict(self) -> dict:
        return {
            "current_index": self.current_index,
            "state": self.state.value,
            "answered_count": self.answers.count(),
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "completed_at": self.completed_at,
        }


@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot of a session for rendering."""
    current_index: int
    total_questions: int
    answered_count: int
    is_completed: bool
    can_proceed: bool = False

    @property
    def question_number(self) -> int:
        """1-based number of the current question."""
        return self.current_index + 1

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    @property
    def progress(self) -> float:
        """Fraction of the quiz reached, counting the current question."""
        if self.is_completed or self.total_questions == 0:
            return 1.0
        return self.question_number / self.total_questions


class NavigationStateMachine:
    """
    Drives a single quiz session.

    Owns the QuizSession; nothing else mutates it. When auto-advance is on,
    a successful selection schedules a delayed next() whose handle is
    cancelled by any manual navigation, restart or re-selection.
    """

    def __init__(
        self,
        definition: QuizDefinition,
        *,
        scheduler: Optional[Scheduler] = None,
        auto_advance: Optional[bool] = None,
        auto_advance_delay: Optional[float] = None,
        on_complete: Optional[Callable[[QuizSession], None]] = None,
        on_change: Optional[Callable[[QuizSession], None]] = None,
    ):
        """
        Initialize the state machine at the first question.

        Args:
            definition: Loaded quiz definition
            scheduler: Runs delayed auto-advance; auto-advance is off without one
            auto_advance: Override the definition's auto_advance_enabled
            auto_advance_delay: Seconds before auto-advancing (defaults to config)
            on_complete: Called once each time the session completes
            on_change: Called after every state change, including auto-advance
        """
        self.definition = definition
        self.session = QuizSession(answers=AnswerStore(definition.question_count))

        enabled = definition.auto_advance_enabled if auto_advance is None else auto_advance
        self.auto_advance = enabled and scheduler is not None
        self.auto_advance_delay = (
            auto_advance_delay
            if auto_advance_delay is not None
            else config.engine.auto_advance_delay_seconds
        )
        self._scheduler = scheduler
        self._on_complete = on_complete
        self._on_change = on_change
        self._pending: Optional[ScheduledCall] = None

    @property
    def current_index(self) -> int:
        return self.session.current_index

    @property
    def state(self) -> QuizState:
        return self.session.state

    @property
    def is_completed(self) -> bool:
        return self.session.is_completed

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        """The question on screen, or None once completed."""
        if self.is_completed:
            return None
        return self.definition.question(self.session.current_index)

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None and not self._pending.cancelled()

    def can_proceed(self) -> bool:
        return not self.is_completed and self.session.answers.has(self.session.current_index)

    def view(self) -> SessionView:
        return SessionView(
            current_index=self.session.current_index,
            total_questions=self.definition.question_count,
            answered_count=self.session.answers.count(),
            is_completed=self.is_completed,
            can_proceed=self.can_proceed(),
        )

    def select_answer(self, index: int, option: Any) -> Optional[Answer]:
        """
        Record an answer for the current question.

        Args:
            index: Question index; must be the current one
            option: QuizOption of that question, or an option value

        Returns:
            The recorded Answer, or None if the selection was rejected
        """
        if self.is_completed or index != self.session.current_index:
            logger.debug(f"Ignoring selection for question {index}: not current")
            return None

        question = self.definition.question(index)
        answer = question.resolve(option) if question else None
        if answer is None:
            logger.debug(f"Ignoring selection {option!r}: not an option of question {index}")
            return None

        self._cancel_pending()
        self.session.answers.record(index, answer)

        if self.auto_advance:
            self._schedule_advance(index)

        self._changed()
        return answer

    def next(self) -> bool:
        """Advance one question, or complete from the last. Returns True if moved."""
        if not self.can_proceed():
            return False

        self._cancel_pending()
        if self.session.current_index < self.definition.question_count - 1:
            self.session.current_index += 1
        else:
            self._complete()
        self._changed()
        return True

    def previous(self) -> bool:
        """Go back one question. Returns True if moved."""
        if self.is_completed or self.session.current_index == 0:
            return False

        self._cancel_pending()
        self.session.current_index -= 1
        self._changed()
        return True

    def restart(self) -> None:
        """Start over from the first question with no answers."""
        self._cancel_pending()
        self.session = QuizSession(
            answers=AnswerStore(self.definition.question_count),
            generation=self.session.generation + 1,
        )
        logger.debug("Quiz session restarted")
        self._changed()

    def _complete(self) -> None:
        outcome = evaluate(self.session.answers, self.definition.scoring_rules)
        self.session.state = QuizState.COMPLETED
        self.session.outcome = outcome
        self.session.completed_at = datetime.now(timezone.utc).isoformat()
        logger.debug(f"Quiz completed: score={outcome.score} level={outcome.level}")

        if self._on_complete is not None:
            self._on_complete(self.session)

    def _schedule_advance(self, index: int) -> None:
        generation = self.session.generation
        handle: Optional[ScheduledCall] = None

        def fire() -> None:
            if self._pending is handle:
                self._pending = None
            if self.session.generation != generation or self.session.current_index != index:
                return
            self.next()

        try:
            handle = self._scheduler.call_later(self.auto_advance_delay, fire)
        except RuntimeError as e:
            logger.debug(f"Auto-advance skipped: {e}")
            return
        self._pending = handle

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.session)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
