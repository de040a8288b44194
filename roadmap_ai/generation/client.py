"""Structured generation client: one completion in, parsed JSON or text out.

Models occasionally wrap JSON in prose ("Here is the JSON: {...} Hope this
helps!"), so the parser keeps only the span from the first ``{`` to the
last ``}`` before decoding. This client never retries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from roadmap_ai.core.document import ErrorKind
from roadmap_ai.core.llm import CompletionRequest, GenerationTask, LLMProvider
from roadmap_ai.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseError:
    """Why a completion could not be turned into usable output."""

    kind: ErrorKind
    message: str
    raw_text: str = ""

    def __str__(self) -> str:
        return self.message


def extract_json_object(text: str) -> Result[dict[str, Any], ParseError]:
    """Parse the JSON object embedded in ``text``."""
    stripped = text.strip()
    if not stripped:
        return Err(ParseError(ErrorKind.UPSTREAM_EMPTY, "empty response"))

    start = stripped.find("{")
    end = stripped.rfind("}")
    if start == -1 or end < start:
        return Err(ParseError(ErrorKind.UPSTREAM_PARSE, "no JSON object in response", text))

    try:
        data = json.loads(stripped[start : end + 1])
    except json.JSONDecodeError as e:
        return Err(ParseError(ErrorKind.UPSTREAM_PARSE, str(e), text))
    except RecursionError:
        return Err(ParseError(ErrorKind.UPSTREAM_PARSE, "JSON nested too deeply", text))

    return Ok(data)


class StructuredGenerationClient:
    """Issues completion requests and parses their output."""

    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    @property
    def provider_name(self) -> str:
        return self._llm.name

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        task: GenerationTask,
        subject: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        metadata: Optional[dict[str, str | int]] = None,
    ) -> Result[dict[str, Any], ParseError]:
        """Request JSON output and return the decoded object."""
        request = CompletionRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            task=task,
            subject=subject,
            json_mode=True,
            temperature=temperature,
            max_tokens=max_tokens,
            metadata=metadata or {},
        )
        return (await self._complete(request)).and_then(extract_json_object)

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        task: GenerationTask,
        subject: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Result[str, ParseError]:
        """Request free-form (markdown) output; only emptiness is an error."""
        request = CompletionRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            task=task,
            subject=subject,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        result = await self._complete(request)
        if result.is_err():
            return result
        text = result.unwrap().strip()
        if not text:
            return Err(ParseError(ErrorKind.UPSTREAM_EMPTY, "empty response"))
        return Ok(text)

    async def _complete(self, request: CompletionRequest) -> Result[str, ParseError]:
        logger.debug(
            "Requesting %s completion (%d prompt chars)",
            request.task.value, len(request.system_prompt) + len(request.user_prompt),
        )
        result = await self._llm.complete(request)
        if result.is_err():
            return Err(ParseError(ErrorKind.UPSTREAM_UNAVAILABLE, str(result.error)))  # type: ignore[union-attr]
        return Ok(result.unwrap())
