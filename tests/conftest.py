"""
Shared fixtures for symptom-quiz tests.
"""

from pathlib import Path

import pytest

from symptom_quiz.quiz.schema import parse_quiz_definition

FIXTURES = Path(__file__).parent / "fixtures"


def build_quiz_data(weights, low=5, moderate=10, high=20, auto_advance=True):
    """Quiz document with one two-option choice question per weight."""
    return {
        "questions": [
            {
                "kind": "choice",
                "prompt": f"Question {i + 1}?",
                "options": [
                    {"value": "yes", "text": "Yes", "weight": w},
                    {"value": "no", "text": "No", "weight": 0},
                ],
            }
            for i, w in enumerate(weights)
        ],
        "scoringRules": {
            "low": {"maxScore": low, "label": "Low Risk", "color": "green"},
            "moderate": {"maxScore": moderate, "label": "Moderate Risk", "color": "orange"},
            "high": {"maxScore": high, "label": "High Risk", "color": "red"},
        },
        "recommendations": {
            "low": ["Stay healthy."],
            "moderate": ["Monitor symptoms."],
            "high": ["See a doctor.", "Call a helpline."],
        },
        "autoAdvanceEnabled": auto_advance,
    }


@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES / "anxiety-check" / "quiz-data.json"


@pytest.fixture
def quiz_factory():
    """Build a QuizDefinition from a list of 'yes' weights."""
    def factory(weights, **kwargs):
        return parse_quiz_definition(build_quiz_data(weights, **kwargs))
    return factory


@pytest.fixture
def three_question_quiz(quiz_factory):
    return quiz_factory([2, 3, 4])


@pytest.fixture
def quiz_data_factory():
    """Build a raw quiz document from a list of 'yes' weights."""
    return build_quiz_data
