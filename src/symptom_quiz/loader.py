"""
Quiz definition loader

Fetches a quiz-data document and validates it into a QuizDefinition.

SOURCES:
- http:// and https:// URLs are fetched with httpx
- Anything else is treated as a filesystem path

FAILURES:
- QuizNotFoundError: unreachable resource or non-success status
- MalformedQuizError: not JSON, or missing / ill-typed required fields
- EmptyQuestionSetError: the question list is empty
"""

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import urlparse

import httpx

from .config import config
from .errors import QuizNotFoundError, MalformedQuizError
from .quiz.schema import QuizDefinition, parse_quiz_definition

logger = logging.getLogger(__name__)

Source = Union[str, Path]


def is_url(source: Source) -> bool:
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def tool_name_from_source(source: Source, default: Optional[str] = None) -> str:
    """
    Derive a tool identifier from where a quiz lives.

    Quizzes are published as `<tool>/quiz-data.json`, so the parent
    directory names the tool.

    Args:
        source: URL or path of the quiz document
        default: Fallback when no parent directory exists

    Returns:
        Tool identifier (e.g. "anxiety-check")
    """
    fallback = default or config.engine.default_tool_name
    if is_url(source):
        path = PurePosixPath(urlparse(source).path)
    else:
        path = Path(source)
    name = path.parent.name
    return name or fallback


class QuizDataLoader:
    """
    Loads quiz definitions from URLs or files.

    An httpx.AsyncClient may be injected (tests pass one backed by
    httpx.MockTransport); otherwise one is created per load.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize loader.

        Args:
            client: Optional shared HTTP client
            timeout: Request timeout in seconds (defaults to config)
        """
        self._client = client
        self._timeout = timeout if timeout is not None else config.loader.fetch_timeout_seconds

    async def load(self, source: Optional[Source] = None) -> QuizDefinition:
        """
        Fetch and validate a quiz definition.

        Args:
            source: URL or path (defaults to config.loader.default_source)

        Returns:
            Frozen QuizDefinition

        Raises:
            QuizNotFoundError: Resource unreachable or non-success status
            MalformedQuizError: Document invalid
            EmptyQuestionSetError: Document has no questions
        """
        source = source if source is not None else config.loader.default_source

        if is_url(source):
            text = await self._fetch_url(source)
        else:
            text = self._read_file(Path(source))

        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            raise MalformedQuizError(f"Quiz data at {source} is not valid JSON: {e}") from e

        definition = parse_quiz_definition(data)
        logger.debug(f"Loaded {definition.question_count} questions from {source}")
        return definition

    async def _fetch_url(self, url: str) -> str:
        """GET a URL, mapping transport failures to QuizNotFoundError."""
        headers = {
            "User-Agent": config.loader.user_agent,
            "Accept": "application/json",
        }
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise QuizNotFoundError(
                f"HTTP {e.response.status_code} fetching quiz data from {url}"
            ) from e
        except httpx.RequestError as e:
            raise QuizNotFoundError(f"Connection error fetching {url}: {e}") from e

        return response.text

    def _read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedQuizError(f"Quiz data at {path} is not UTF-8 text") from e
        except OSError as e:
            raise QuizNotFoundError(f"Quiz data not found at {path}: {e.strerror}") from e
