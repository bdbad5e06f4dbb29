"""
Quiz engine

The session facade a front-end talks to. Ties together:
1. The loaded quiz definition
2. The navigation state machine (answers, scoring on completion)
3. The announcer and telemetry collaborators
4. Change listeners for re-rendering

One engine owns one session; create as many engines as you need.
"""

import logging
from typing import Any, Callable, Optional

from .config import config
from .events import Announcer, TelemetrySink, announce, track
from .export import QuizResult, export_results
from .loader import QuizDataLoader, Source, tool_name_from_source
from .navigation import NavigationStateMachine, QuizSession, SessionView
from .quiz.schema import Answer, QuestionKind, QuizDefinition, QuizQuestion
from .scheduling import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)

Listener = Callable[[SessionView], None]


class QuizEngine:
    """
    Runs one quiz session for one user.

    Navigation calls never raise for misuse; they return whether anything
    happened. Listeners, the announcer and telemetry are notified after
    each change and their failures are logged, not propagated.
    """

    def __init__(
        self,
        definition: QuizDefinition,
        tool: Optional[str] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        announcer: Optional[Announcer] = None,
        telemetry: Optional[TelemetrySink] = None,
        auto_advance: Optional[bool] = None,
        auto_advance_delay: Optional[float] = None,
    ):
        """
        Initialize engine at the first question.

        Args:
            definition: Loaded quiz definition
            tool: Tool identifier stamped on telemetry and results
            scheduler: Runs auto-advance; defaults to whichever asyncio loop is
                running when an answer is selected
            announcer: Screen-reader message sink
            telemetry: Event sink
            auto_advance: Override the definition's auto-advance setting
            auto_advance_delay: Seconds before auto-advancing
        """
        if scheduler is None:
            scheduler = AsyncioScheduler()

        self.definition = definition
        self.tool = tool or config.engine.default_tool_name
        self.announcer = announcer
        self.telemetry = telemetry
        self._listeners: list[Listener] = []
        self._machine = NavigationStateMachine(
            definition,
            scheduler=scheduler,
            auto_advance=auto_advance,
            auto_advance_delay=auto_advance_delay,
            on_complete=self._handle_complete,
            on_change=self._handle_change,
        )

        track(self.telemetry, "quiz_initialized", {
            "tool": self.tool,
            "totalQuestions": definition.question_count,
        })
        logger.debug(f"{self.tool} quiz initialized with {definition.question_count} questions")

    @classmethod
    async def load(
        cls,
        source: Optional[Source] = None,
        *,
        tool: Optional[str] = None,
        loader: Optional[QuizDataLoader] = None,
        **kwargs: Any,
    ) -> "QuizEngine":
        """
        Load a quiz definition and start a session on it.

        Loading errors propagate, and no engine is created.

        Args:
            source: URL or path of the quiz document (defaults to config)
            tool: Tool identifier (derived from the source location if omitted)
            loader: Loader to use (a default QuizDataLoader otherwise)
            **kwargs: Passed to the QuizEngine constructor

        Returns:
            A QuizEngine at the first question

        Raises:
            QuizLoadError: If the definition can't be loaded
        """
        source = source if source is not None else config.loader.default_source
        loader = loader or QuizDataLoader()
        definition = await loader.load(source)
        return cls(definition, tool or tool_name_from_source(source), **kwargs)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def session(self) -> QuizSession:
        return self._machine.session

    @property
    def view(self) -> SessionView:
        return self._machine.view()

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        return self._machine.current_question

    @property
    def is_completed(self) -> bool:
        return self._machine.is_completed

    @property
    def has_pending_advance(self) -> bool:
        return self._machine.has_pending_advance

    def can_proceed(self) -> bool:
        return self._machine.can_proceed()

    def get_answer_summary(self) -> dict[int, Answer]:
        """Copy of the recorded answers keyed by question index."""
        return self._machine.session.answers.snapshot()

    def export_results(self) -> Optional[QuizResult]:
        """Result snapshot, or None until the quiz is completed."""
        return export_results(self._machine.session, self.definition, self.tool)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_answer(self, index: int, option: Any) -> Optional[Answer]:
        """Answer the current question. Returns None if rejected."""
        answer = self._machine.select_answer(index, option)
        if answer is None:
            return None

        question = self.definition.questions[index]
        if question.kind == QuestionKind.SCALE:
            announce(self.announcer, f"Selected scale value: {answer.value}")
        else:
            announce(self.announcer, f"Selected: {answer.display_text}")
        return answer

    def next(self) -> bool:
        return self._machine.next()

    def previous(self) -> bool:
        return self._machine.previous()

    def restart(self) -> None:
        self._machine.restart()
        announce(self.announcer, "Quiz restarted. Starting from question 1.")

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a SessionView after each change.

        Returns:
            Callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _handle_change(self, session: QuizSession) -> None:
        view = self._machine.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception as e:
                logger.warning(f"Session listener {listener!r} failed: {e}")

    def _handle_complete(self, session: QuizSession) -> None:
        outcome = session.outcome
        track(self.telemetry, "quiz_completed", {
            "tool": self.tool,
            "score": outcome.score,
            "level": outcome.level,
            "answeredCount": session.answers.count(),
        })
        announce(
            self.announcer,
            f"Quiz completed. Your risk level is {outcome.level}. Score: {outcome.score}.",
        )

    def __repr__(self) -> str:
        view = self.view
        return (
            f"QuizEngine(tool={self.tool!r}, question={view.question_number}/"
            f"{view.total_questions}, completed={view.is_completed})"
        )


# Convenience function for quick starts
async def start_quiz(
    source: Optional[Source] = None,
    *,
    tool: Optional[str] = None,
    announcer: Optional[Announcer] = None,
    telemetry: Optional[TelemetrySink] = None,
) -> QuizEngine:
    """
    Load a quiz and start a session with minimal setup.

    Args:
        source: URL or path of the quiz document
        tool: Tool identifier
        announcer: Screen-reader message sink
        telemetry: Event sink

    Returns:
        QuizEngine at the first question
    """
    return await QuizEngine.load(
        source,
        tool=tool,
        announcer=announcer,
        telemetry=telemetry,
    )
