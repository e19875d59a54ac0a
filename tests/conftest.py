"""Shared fixtures: a recording httpx transport with canned responses."""

from __future__ import annotations

import json

import httpx
import pytest

from rulekeeper.client import RulesClient

ORIGIN = "https://rules.test"


class MockTransport(httpx.AsyncBaseTransport):
    """Records requests and answers from a table keyed by 'METHOD /path?query'."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, list[httpx.Response]] = {}

    def set_response(self, method: str, path: str, status: int, body=None, text: str | None = None):
        """Queue a response. The last queued response for a key is reused once others run out."""
        key = f"{method.upper()} {path}"
        if text is not None:
            response = httpx.Response(status_code=status, text=text)
        elif body is None:
            response = httpx.Response(status_code=status)
        else:
            response = httpx.Response(status_code=status, json=body)
        self.responses.setdefault(key, []).append(response)

    def body(self, index: int = -1):
        return json.loads(self.requests[index].content)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.raw_path.decode()}"

        queued = self.responses.get(key)
        if queued:
            canned = queued.pop(0) if len(queued) > 1 else queued[0]
            return httpx.Response(
                status_code=canned.status_code,
                headers=canned.headers,
                content=canned.content,
                request=request,
            )

        # Default: 404 in the API's error shape
        return httpx.Response(
            status_code=404,
            json={"error": {"code": 404, "message": f"No mock for {key}", "status": "NOT_FOUND"}},
            request=request,
        )


@pytest.fixture
def mock_transport():
    return MockTransport()


@pytest.fixture
def client(mock_transport):
    """RulesClient backed by the mock transport."""
    return RulesClient(origin=ORIGIN, token="test-token", transport=mock_transport)
