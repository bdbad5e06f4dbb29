"""
Quiz schema and data structures

Defines the immutable quiz definition and the validation that builds one
from a parsed quiz-data document. Optional fields get their defaults here,
once, so nothing downstream needs to guess.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union
import json

from ..errors import MalformedQuizError, EmptyQuestionSetError


OptionValue = Union[str, int, float]

# Buckets every definition must provide, lowest risk first
REQUIRED_LEVELS = ("low", "moderate", "high")

DEFAULT_SCALE_MIN = "Not at all"
DEFAULT_SCALE_MAX = "Extremely"
DEFAULT_MAX_SCORE = 20
DEFAULT_BUCKET_COLOR = "#cccccc"

_MISSING = object()


class QuestionKind(str, Enum):
    """Types of quiz questions."""
    CHOICE = "choice"
    SCALE = "scale"


@dataclass(frozen=True)
class ScaleLabels:
    """End labels for a scale question."""
    min: str = DEFAULT_SCALE_MIN
    max: str = DEFAULT_SCALE_MAX

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class Answer:
    """A recorded answer, resolved from a selected option."""
    value: OptionValue
    weight: int
    display_text: str

    def to_dict(self) -> dict:
        return {"value": self.value, "weight": self.weight, "text": self.display_text}


@dataclass(frozen=True)
class QuizOption:
    """An option of a choice or scale question."""
    value: OptionValue
    weight: int = 0
    text: str = ""
    icon: Optional[str] = None

    def matches(self, value: Any) -> bool:
        """Options are identified by the string form of their value."""
        return str(self.value) == str(value)

    def to_dict(self) -> dict:
        result = {"value": self.value, "weight": self.weight}
        if self.text:
            result["text"] = self.text
        if self.icon:
            result["icon"] = self.icon
        return result


@dataclass(frozen=True)
class QuizQuestion:
    """A single quiz question. `index` is its position in the quiz."""
    index: int
    kind: QuestionKind
    prompt: str
    options: tuple = ()
    description: Optional[str] = None
    scale_labels: Optional[ScaleLabels] = None

    def find_option(self, option: Any) -> Optional[QuizOption]:
        """Look up an option of this question by instance or by value."""
        if isinstance(option, QuizOption):
            return option if option in self.options else None
        for candidate in self.options:
            if candidate.matches(option):
                return candidate
        return None

    def resolve(self, option: Any) -> Optional[Answer]:
        """
        Build the Answer for selecting `option` on this question.

        Args:
            option: A QuizOption of this question, or an option value

        Returns:
            The resolved Answer, or None if `option` doesn't belong here
        """
        match = self.find_option(option)
        if match is None:
            return None

        if self.kind == QuestionKind.SCALE:
            text = f"Scale: {match.value}"
        else:
            text = match.text or str(match.value)

        return Answer(value=match.value, weight=match.weight, display_text=text)

    def to_dict(self) -> dict:
        result = {
            "kind": self.kind.value,
            "prompt": self.prompt,
            "options": [o.to_dict() for o in self.options],
        }
        if self.description:
            result["description"] = self.description
        if self.scale_labels is not None:
            result["scaleLabels"] = self.scale_labels.to_dict()
        return result


@dataclass(frozen=True)
class ScoringRule:
    """A risk bucket: scores up to and including `max_score` fall in it."""
    level: str
    max_score: int
    label: str
    color: str = DEFAULT_BUCKET_COLOR

    def to_dict(self) -> dict:
        return {"maxScore": self.max_score, "label": self.label, "color": self.color}


@dataclass(frozen=True)
class QuizDefinition:
    """
    Immutable quiz definition.

    Built by parse_quiz_definition(); the mappings are read-only views and
    the sequences are tuples, so a loaded definition can be shared freely.
    """
    questions: tuple
    scoring_rules: Mapping[str, ScoringRule]
    recommendations: Mapping[str, tuple] = field(
        default_factory=lambda: MappingProxyType({})
    )
    max_score: int = DEFAULT_MAX_SCORE
    auto_advance_enabled: bool = True
    title: str = ""

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def question(self, index: int) -> Optional[QuizQuestion]:
        """Question at `index`, or None when out of range."""
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    def ordered_rules(self) -> list[ScoringRule]:
        """Scoring buckets by ascending max_score."""
        return sorted(self.scoring_rules.values(), key=lambda r: r.max_score)

    def recommendations_for(self, level: str) -> tuple:
        return tuple(self.recommendations.get(level, ()))

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
            "scoringRules": {level: r.to_dict() for level, r in self.scoring_rules.items()},
            "recommendations": {level: list(recs) for level, recs in self.recommendations.items()},
            "maxScore": self.max_score,
            "autoAdvanceEnabled": self.auto_advance_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizDefinition":
        return parse_quiz_definition(data)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


# =============================================================================
# VALIDATION
# =============================================================================

def _pick(data: dict, *keys: str, default: Any = _MISSING) -> Any:
    """First present key wins; quiz-data files use either spelling."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_str(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedQuizError(f"{where} must be a string")
    return value


def _scale_weight(value: OptionValue) -> int:
    """Scale options without an explicit weight score their own value."""
    if _is_int(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def _parse_option(kind: QuestionKind, where: str, data: Any) -> QuizOption:
    if not isinstance(data, dict):
        raise MalformedQuizError(f"{where} must be an object")

    value = data.get("value")
    if value is None or isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MalformedQuizError(f"{where} needs a string or number 'value'")

    weight = data.get("weight")
    if weight is None:
        weight = _scale_weight(value) if kind == QuestionKind.SCALE else 0
    elif not _is_int(weight):
        raise MalformedQuizError(f"{where} 'weight' must be an integer")

    text = _optional_str(data.get("text"), f"{where} 'text'")
    if kind == QuestionKind.CHOICE and not text:
        text = str(value)

    return QuizOption(
        value=value,
        weight=weight,
        text=text or "",
        icon=_optional_str(data.get("icon"), f"{where} 'icon'"),
    )


def _parse_question(index: int, data: Any) -> QuizQuestion:
    where = f"Question {index + 1}"
    if not isinstance(data, dict):
        raise MalformedQuizError(f"{where} must be an object")

    raw_kind = _pick(data, "kind", "type", default=QuestionKind.CHOICE.value)
    try:
        kind = QuestionKind(raw_kind)
    except ValueError:
        raise MalformedQuizError(f"{where} has unknown kind {raw_kind!r}")

    prompt = _pick(data, "prompt", "question", default=None)
    if not isinstance(prompt, str) or not prompt.strip():
        raise MalformedQuizError(f"{where} is missing its prompt")

    raw_options = data.get("options")
    if not isinstance(raw_options, list) or not raw_options:
        raise MalformedQuizError(f"{where} needs a non-empty 'options' list")

    options = tuple(
        _parse_option(kind, f"{where} option {i + 1}", o)
        for i, o in enumerate(raw_options)
    )
    seen = set()
    for option in options:
        key = str(option.value)
        if key in seen:
            raise MalformedQuizError(f"{where} has duplicate option value {key!r}")
        seen.add(key)

    scale_labels = None
    if kind == QuestionKind.SCALE:
        raw_labels = data.get("scaleLabels") or {}
        if not isinstance(raw_labels, dict):
            raise MalformedQuizError(f"{where} 'scaleLabels' must be an object")
        scale_labels = ScaleLabels(
            min=_optional_str(raw_labels.get("min"), f"{where} scale min") or DEFAULT_SCALE_MIN,
            max=_optional_str(raw_labels.get("max"), f"{where} scale max") or DEFAULT_SCALE_MAX,
        )

    return QuizQuestion(
        index=index,
        kind=kind,
        prompt=prompt,
        options=options,
        description=_optional_str(data.get("description"), f"{where} description"),
        scale_labels=scale_labels,
    )


def _parse_scoring_rules(data: Any) -> Mapping[str, ScoringRule]:
    if not isinstance(data, dict):
        raise MalformedQuizError("'scoringRules' must be an object")

    rules = {}
    for level, bucket in data.items():
        if not isinstance(bucket, dict):
            raise MalformedQuizError(f"Scoring bucket {level!r} must be an object")
        max_score = _pick(bucket, "maxScore", "max", default=None)
        if not _is_int(max_score):
            raise MalformedQuizError(f"Scoring bucket {level!r} needs an integer 'maxScore'")
        label = _pick(bucket, "label", "level", default=None)
        rules[level] = ScoringRule(
            level=level,
            max_score=max_score,
            label=_optional_str(label, f"Scoring bucket {level!r} label") or level.capitalize(),
            color=_optional_str(bucket.get("color"), f"Scoring bucket {level!r} color")
            or DEFAULT_BUCKET_COLOR,
        )

    missing = [level for level in REQUIRED_LEVELS if level not in rules]
    if missing:
        raise MalformedQuizError(f"Scoring rules missing bucket(s): {', '.join(missing)}")

    # Required tiers must rise strictly, and no two buckets may share a bound
    required_bounds = [rules[level].max_score for level in REQUIRED_LEVELS]
    if any(a >= b for a, b in zip(required_bounds, required_bounds[1:])):
        raise MalformedQuizError(
            "Scoring buckets must satisfy low < moderate < high by maxScore"
        )
    bounds = [r.max_score for r in rules.values()]
    if len(set(bounds)) != len(bounds):
        raise MalformedQuizError("Scoring buckets must have distinct maxScore values")

    ordered = sorted(rules.values(), key=lambda r: r.max_score)
    return MappingProxyType({r.level: r for r in ordered})


def _parse_recommendations(data: Any) -> Mapping[str, tuple]:
    if not isinstance(data, dict):
        raise MalformedQuizError("'recommendations' must be an object")

    parsed = {}
    for level, advice in data.items():
        if not isinstance(advice, list) or not all(isinstance(a, str) for a in advice):
            raise MalformedQuizError(f"Recommendations for {level!r} must be a list of strings")
        parsed[level] = tuple(advice)
    return MappingProxyType(parsed)


def parse_quiz_definition(data: Any) -> QuizDefinition:
    """
    Validate a parsed quiz-data document and build a QuizDefinition.

    Args:
        data: The decoded JSON document

    Returns:
        Frozen QuizDefinition with questions in document order

    Raises:
        MalformedQuizError: Missing or ill-typed fields, bad scoring buckets
        EmptyQuestionSetError: The question list is present but empty
    """
    if not isinstance(data, dict):
        raise MalformedQuizError("Quiz document must be a JSON object")

    raw_questions = _pick(data, "questions", default=None)
    if raw_questions is None:
        raise MalformedQuizError("Quiz document is missing 'questions'")
    raw_rules = _pick(data, "scoringRules", "scoring", default=None)
    if raw_rules is None:
        raise MalformedQuizError("Quiz document is missing 'scoringRules'")
    if not isinstance(raw_questions, list):
        raise MalformedQuizError("'questions' must be a list")
    if not raw_questions:
        raise EmptyQuestionSetError("Quiz document has no questions")

    questions = tuple(_parse_question(i, q) for i, q in enumerate(raw_questions))

    max_score = data.get("maxScore", DEFAULT_MAX_SCORE)
    if not _is_int(max_score) or max_score <= 0:
        raise MalformedQuizError("'maxScore' must be a positive integer")

    auto_advance = _pick(data, "autoAdvanceEnabled", "autoAdvance", default=True)
    if not isinstance(auto_advance, bool):
        raise MalformedQuizError("'autoAdvanceEnabled' must be a boolean")

    return QuizDefinition(
        questions=questions,
        scoring_rules=_parse_scoring_rules(raw_rules),
        recommendations=_parse_recommendations(data.get("recommendations", {})),
        max_score=max_score,
        auto_advance_enabled=auto_advance,
        title=_optional_str(data.get("title"), "'title'") or "",
    )
