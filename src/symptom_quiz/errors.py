"""
Quiz loading errors

Every loading failure is recoverable by the caller (retry or reload).
"""


class QuizLoadError(Exception):
    """Base exception for quiz definition loading errors."""
    pass


class QuizNotFoundError(QuizLoadError):
    """Quiz resource unreachable or returned a non-success status."""
    pass


class MalformedQuizError(QuizLoadError):
    """Quiz document could not be parsed or is missing required fields."""
    pass


class EmptyQuestionSetError(QuizLoadError):
    """Quiz document parsed but contains no questions."""
    pass
