"""
Tests for the quiz data loader.
"""

import json

import httpx
import pytest

from symptom_quiz.errors import (
    EmptyQuestionSetError,
    MalformedQuizError,
    QuizLoadError,
    QuizNotFoundError,
)
from symptom_quiz.loader import QuizDataLoader, is_url, tool_name_from_source


def mock_client(handler) -> httpx.AsyncClient:
    """HTTP client whose requests are answered by `handler`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFileSource:
    """Loading from the filesystem."""

    @pytest.mark.asyncio
    async def test_load_file(self, fixture_path):
        """A valid file loads into a definition."""
        definition = await QuizDataLoader().load(fixture_path)

        assert definition.question_count == 3
        assert definition.questions[0].options[0].icon == "😌"

    @pytest.mark.asyncio
    async def test_load_file_from_string_path(self, fixture_path):
        definition = await QuizDataLoader().load(str(fixture_path))

        assert definition.question_count == 3

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(QuizNotFoundError):
            await QuizDataLoader().load(tmp_path / "missing.json")

    @pytest.mark.asyncio
    async def test_path_through_a_file(self, tmp_path):
        """A regular file used as a directory is reported as not found."""
        parent = tmp_path / "file.json"
        parent.write_text("{}")

        with pytest.raises(QuizNotFoundError):
            await QuizDataLoader().load(parent / "quiz-data.json")

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "quiz-data.json"
        path.write_text("{not json")

        with pytest.raises(MalformedQuizError, match="not valid JSON"):
            await QuizDataLoader().load(path)

    @pytest.mark.asyncio
    async def test_deeply_nested_json(self, tmp_path):
        path = tmp_path / "quiz-data.json"
        path.write_text("[" * 100000 + "]" * 100000)

        with pytest.raises(MalformedQuizError, match="not valid JSON"):
            await QuizDataLoader().load(path)

    @pytest.mark.asyncio
    async def test_empty_question_set(self, tmp_path, quiz_data_factory):
        path = tmp_path / "quiz-data.json"
        path.write_text(json.dumps(quiz_data_factory([])))

        with pytest.raises(EmptyQuestionSetError):
            await QuizDataLoader().load(path)

    @pytest.mark.asyncio
    async def test_errors_share_base_class(self, tmp_path):
        """Callers can catch every loading failure at once."""
        with pytest.raises(QuizLoadError):
            await QuizDataLoader().load(tmp_path / "nope.json")


class TestUrlSource:
    """Loading over HTTP."""

    @pytest.mark.asyncio
    async def test_load_url(self, quiz_data_factory):
        """A 200 response with a valid document loads."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=quiz_data_factory([1, 2]))

        async with mock_client(handler) as client:
            definition = await QuizDataLoader(client=client).load(
                "https://example.org/tools/flu-check/quiz-data.json"
            )

        assert definition.question_count == 2
        assert seen[0].method == "GET"
        assert seen[0].headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_not_found_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with mock_client(handler) as client:
            with pytest.raises(QuizNotFoundError, match="404"):
                await QuizDataLoader(client=client).load("https://example.org/quiz-data.json")

    @pytest.mark.asyncio
    async def test_server_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with mock_client(handler) as client:
            with pytest.raises(QuizNotFoundError, match="503"):
                await QuizDataLoader(client=client).load("https://example.org/quiz-data.json")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(handler) as client:
            with pytest.raises(QuizNotFoundError, match="Connection error"):
                await QuizDataLoader(client=client).load("https://example.org/quiz-data.json")

    @pytest.mark.asyncio
    async def test_html_body_is_malformed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>Not here</html>")

        async with mock_client(handler) as client:
            with pytest.raises(MalformedQuizError):
                await QuizDataLoader(client=client).load("https://example.org/quiz-data.json")


class TestToolName:
    """Tests for deriving the tool identifier from a source."""

    def test_from_url(self):
        assert tool_name_from_source("https://example.org/tools/flu-check/quiz-data.json") == "flu-check"

    def test_from_path(self, fixture_path):
        assert tool_name_from_source(fixture_path) == "anxiety-check"

    def test_fallback(self):
        assert tool_name_from_source("quiz-data.json", default="quiz") == "quiz"

    def test_is_url(self):
        assert is_url("http://example.org/q.json") is True
        assert is_url("./quiz-data.json") is False
