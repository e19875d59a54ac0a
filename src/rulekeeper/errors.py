"""Errors raised by the rules client."""

from __future__ import annotations

from .defaults import ERROR_CODE


class RulesError(Exception):
    """Raised when a rules API request fails."""

    def __init__(
        self,
        message: str,
        code: int = ERROR_CODE,
        status_code: int = 0,
        response: str = "",
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.response = response
        super().__init__(message)
