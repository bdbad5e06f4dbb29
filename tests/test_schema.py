"""
Tests for quiz schema parsing and validation.
"""

import json

import pytest

from symptom_quiz.errors import EmptyQuestionSetError, MalformedQuizError
from symptom_quiz.quiz.schema import (
    Answer,
    QuestionKind,
    QuizDefinition,
    QuizOption,
    QuizQuestion,
    ScaleLabels,
    parse_quiz_definition,
)


class TestParseDefinition:
    """Tests for building a definition from a document."""

    def test_questions_keep_document_order(self, quiz_data_factory):
        """Question indices follow document position."""
        definition = parse_quiz_definition(quiz_data_factory([1, 2, 3]))

        assert definition.question_count == 3
        assert [q.index for q in definition.questions] == [0, 1, 2]
        assert [q.prompt for q in definition.questions] == [
            "Question 1?", "Question 2?", "Question 3?",
        ]

    def test_scoring_rules(self, quiz_data_factory):
        """Scoring buckets are parsed with labels and colors."""
        definition = parse_quiz_definition(quiz_data_factory([1], low=5, moderate=10))

        low = definition.scoring_rules["low"]
        assert low.max_score == 5
        assert low.label == "Low Risk"
        assert low.color == "green"
        assert [r.level for r in definition.ordered_rules()] == ["low", "moderate", "high"]

    def test_recommendations(self, quiz_data_factory):
        """Recommendations become tuples per level."""
        definition = parse_quiz_definition(quiz_data_factory([1]))

        assert definition.recommendations_for("high") == ("See a doctor.", "Call a helpline.")
        assert definition.recommendations_for("unknown") == ()

    def test_defaults(self, quiz_data_factory):
        """Optional top-level fields get defaults."""
        data = quiz_data_factory([1])
        del data["autoAdvanceEnabled"]
        del data["recommendations"]

        definition = parse_quiz_definition(data)

        assert definition.auto_advance_enabled is True
        assert definition.max_score == 20
        assert definition.title == ""
        assert dict(definition.recommendations) == {}

    def test_original_key_spellings(self, fixture_path):
        """The quiz-data.json spelling (question/type/scoring/max/level) is accepted."""
        definition = parse_quiz_definition(json.loads(fixture_path.read_text()))

        assert definition.title == "Anxiety Symptom Checker"
        assert definition.questions[0].prompt.startswith("How often")
        assert definition.questions[1].kind == QuestionKind.SCALE
        assert definition.scoring_rules["moderate"].max_score == 7
        assert definition.scoring_rules["high"].label == "High Risk"
        assert definition.max_score == 11
        assert definition.auto_advance_enabled is True

    def test_scale_defaults(self, fixture_path):
        """Scale weights fall back to the option value; labels to defaults."""
        definition = parse_quiz_definition(json.loads(fixture_path.read_text()))
        scale = definition.questions[1]

        assert [o.weight for o in scale.options] == [1, 2, 3, 4, 5]
        assert scale.scale_labels == ScaleLabels(min="Not at all", max="Extremely")

    def test_choice_text_defaults_to_value(self, quiz_data_factory):
        """Choice options without text display their value."""
        data = quiz_data_factory([1])
        data["questions"][0]["options"] = [{"value": "maybe", "weight": 1}]

        definition = parse_quiz_definition(data)

        assert definition.questions[0].options[0].text == "maybe"

    def test_choice_weight_defaults_to_zero(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["questions"][0]["options"] = [{"value": "a", "text": "A"}]

        definition = parse_quiz_definition(data)

        assert definition.questions[0].options[0].weight == 0

    def test_extra_bucket_allowed(self, quiz_data_factory):
        """Extra levels are fine as long as bounds stay distinct."""
        data = quiz_data_factory([1])
        data["scoringRules"]["severe"] = {"maxScore": 30, "label": "Severe"}

        definition = parse_quiz_definition(data)

        assert definition.ordered_rules()[-1].level == "severe"
        assert definition.scoring_rules["severe"].color == "#cccccc"

    def test_round_trip_dict(self, quiz_data_factory):
        """A definition's dict form parses back to an equal definition."""
        definition = parse_quiz_definition(quiz_data_factory([1, 2]))

        assert QuizDefinition.from_dict(definition.to_dict()) == definition


class TestValidationErrors:
    """Tests for rejected documents."""

    def test_not_an_object(self):
        with pytest.raises(MalformedQuizError):
            parse_quiz_definition(["questions"])

    def test_missing_questions(self, quiz_data_factory):
        data = quiz_data_factory([1])
        del data["questions"]

        with pytest.raises(MalformedQuizError, match="questions"):
            parse_quiz_definition(data)

    def test_missing_scoring_rules(self, quiz_data_factory):
        data = quiz_data_factory([1])
        del data["scoringRules"]

        with pytest.raises(MalformedQuizError, match="scoringRules"):
            parse_quiz_definition(data)

    def test_empty_questions(self, quiz_data_factory):
        """An empty question list is its own error."""
        data = quiz_data_factory([])

        with pytest.raises(EmptyQuestionSetError):
            parse_quiz_definition(data)

    def test_empty_questions_is_not_malformed(self, quiz_data_factory):
        with pytest.raises(EmptyQuestionSetError) as exc_info:
            parse_quiz_definition(quiz_data_factory([]))

        assert not isinstance(exc_info.value, MalformedQuizError)

    def test_unknown_kind(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["questions"][0]["kind"] = "free_text"

        with pytest.raises(MalformedQuizError, match="unknown kind"):
            parse_quiz_definition(data)

    def test_missing_prompt(self, quiz_data_factory):
        data = quiz_data_factory([1])
        del data["questions"][0]["prompt"]

        with pytest.raises(MalformedQuizError, match="prompt"):
            parse_quiz_definition(data)

    def test_question_without_options(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["questions"][0]["options"] = []

        with pytest.raises(MalformedQuizError, match="options"):
            parse_quiz_definition(data)

    def test_non_integer_weight(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["questions"][0]["options"][0]["weight"] = "heavy"

        with pytest.raises(MalformedQuizError, match="weight"):
            parse_quiz_definition(data)

    def test_duplicate_option_values(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["questions"][0]["options"][1]["value"] = "yes"

        with pytest.raises(MalformedQuizError, match="duplicate"):
            parse_quiz_definition(data)

    def test_missing_bucket(self, quiz_data_factory):
        """Every definition needs low, moderate and high buckets."""
        data = quiz_data_factory([1])
        del data["scoringRules"]["moderate"]

        with pytest.raises(MalformedQuizError, match="moderate"):
            parse_quiz_definition(data)

    def test_non_monotonic_buckets(self, quiz_data_factory):
        data = quiz_data_factory([1], low=10, moderate=5, high=20)

        with pytest.raises(MalformedQuizError, match="low < moderate < high"):
            parse_quiz_definition(data)

    def test_duplicate_bucket_bounds(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["scoringRules"]["extra"] = {"maxScore": 5}

        with pytest.raises(MalformedQuizError, match="distinct"):
            parse_quiz_definition(data)

    def test_bucket_without_max(self, quiz_data_factory):
        data = quiz_data_factory([1])
        del data["scoringRules"]["high"]["maxScore"]

        with pytest.raises(MalformedQuizError, match="high"):
            parse_quiz_definition(data)

    def test_recommendations_must_be_lists(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["recommendations"]["low"] = "Stay healthy."

        with pytest.raises(MalformedQuizError, match="Recommendations"):
            parse_quiz_definition(data)

    def test_auto_advance_must_be_bool(self, quiz_data_factory):
        data = quiz_data_factory([1])
        data["autoAdvanceEnabled"] = "yes"

        with pytest.raises(MalformedQuizError):
            parse_quiz_definition(data)


class TestImmutability:
    """Loaded definitions can't be changed."""

    def test_fields_frozen(self, three_question_quiz):
        with pytest.raises(AttributeError):
            three_question_quiz.max_score = 99

    def test_rules_read_only(self, three_question_quiz):
        with pytest.raises(TypeError):
            three_question_quiz.scoring_rules["low"] = None

    def test_questions_are_tuple(self, three_question_quiz):
        assert isinstance(three_question_quiz.questions, tuple)
        assert isinstance(three_question_quiz.questions[0].options, tuple)

    def test_source_document_changes_do_not_leak(self, quiz_data_factory):
        data = quiz_data_factory([1])
        definition = parse_quiz_definition(data)

        data["questions"].append({"prompt": "Late?", "options": [{"value": 1}]})
        data["recommendations"]["low"].append("Changed")

        assert definition.question_count == 1
        assert definition.recommendations_for("low") == ("Stay healthy.",)


class TestQuestionResolve:
    """Tests for resolving a selected option into an Answer."""

    @pytest.fixture
    def choice(self):
        return QuizQuestion(
            index=0,
            kind=QuestionKind.CHOICE,
            prompt="Fever?",
            options=(QuizOption("yes", 3, "Yes"), QuizOption("no", 0, "No")),
        )

    @pytest.fixture
    def scale(self):
        return QuizQuestion(
            index=1,
            kind=QuestionKind.SCALE,
            prompt="Pain level?",
            options=(QuizOption(1, 1), QuizOption(2, 2), QuizOption(3, 3)),
            scale_labels=ScaleLabels(),
        )

    def test_resolve_choice_by_instance(self, choice):
        answer = choice.resolve(choice.options[0])

        assert answer == Answer(value="yes", weight=3, display_text="Yes")

    def test_resolve_choice_by_value(self, choice):
        assert choice.resolve("no").weight == 0

    def test_resolve_scale_matches_string_value(self, scale):
        """Values compare by string form, as they arrive from form fields."""
        answer = scale.resolve("2")

        assert answer.value == 2
        assert answer.weight == 2
        assert answer.display_text == "Scale: 2"

    def test_foreign_option_rejected(self, choice):
        assert choice.resolve(QuizOption("yes", 99, "Yes")) is None
        assert choice.resolve("maybe") is None

    def test_answer_to_dict(self):
        answer = Answer(value="yes", weight=2, display_text="Yes")

        assert answer.to_dict() == {"value": "yes", "weight": 2, "text": "Yes"}
