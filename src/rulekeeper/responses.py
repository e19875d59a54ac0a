"""Classification of rules API responses.

Each HTTP response is turned into exactly one of three results so that
operations never inspect raw bodies for an ``error`` field themselves:

- ``ApiSuccess``: status 200 with a JSON (or empty) body.
- ``ApiErrorBody``: non-200 with a structured ``{"error": ...}`` body.
- ``ApiUnexpected``: anything else, including malformed bodies.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Union

import httpx

from .defaults import ERROR_CODE, UNEXPECTED_ERROR_MESSAGE
from .errors import RulesError

logger = logging.getLogger(__name__)


@dataclass
class ApiSuccess:
    status: int
    body: Any = field(default_factory=dict)


@dataclass
class ApiErrorBody:
    status: int
    error: Any
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        if isinstance(self.error, str):
            return self.error
        if isinstance(self.error, dict):
            message = self.error.get("message") or self.error.get("status")
            if message:
                return str(message)
        return str(self.error)


@dataclass
class ApiUnexpected:
    status: int
    text: str = ""


ApiResult = Union[ApiSuccess, ApiErrorBody, ApiUnexpected]


def _has_error(body: dict[str, Any]) -> bool:
    """An error field counts when present and truthy; an empty object still counts."""
    error = body.get("error")
    return isinstance(error, (dict, list)) or bool(error)


def classify(response: httpx.Response) -> ApiResult:
    """Classify an HTTP response. Only status 200 counts as success."""
    status = response.status_code

    body: Any = None
    parsed = True
    if response.content:
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            parsed = False

    if status == 200:
        if not parsed:
            return ApiUnexpected(status=status, text=response.text)
        return ApiSuccess(status=status, body=body if body is not None else {})

    if parsed and isinstance(body, dict) and _has_error(body):
        return ApiErrorBody(status=status, error=body["error"], body=body)

    return ApiUnexpected(status=status, text=response.text)


def raise_for_result(result: ApiResult) -> Any:
    """Return the success body, or raise RulesError for either failure kind."""
    if isinstance(result, ApiSuccess):
        return result.body

    if isinstance(result, ApiErrorBody):
        raise RulesError(
            result.message,
            code=ERROR_CODE,
            status_code=result.status,
            response=json.dumps(result.body)[:500],
        )

    logger.debug("[rules] error: %s %s", result.status, result.text)
    raise RulesError(
        UNEXPECTED_ERROR_MESSAGE,
        code=ERROR_CODE,
        status_code=result.status,
        response=result.text[:500],
    )
