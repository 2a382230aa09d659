from __future__ import annotations

from typing import Any

import httpx


class DummyResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("GET", "http://upstream.test")
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )

    def json(self):
        if self._payload is None:
            raise ValueError("Response body is not JSON")
        return self._payload


class DummyAsyncClient:
    """Answers from a URL -> response table and records every call."""

    def __init__(self, routes: dict[str, Any], calls: list[dict[str, Any]]):
        self._routes = routes
        self._calls = calls

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def post(self, url: str, data=None, headers=None):
        self._calls.append({"method": "POST", "url": url, "data": data, "headers": headers})
        return self._respond(url)

    async def get(self, url: str, headers=None):
        self._calls.append({"method": "GET", "url": url, "headers": headers})
        return self._respond(url)

    def _respond(self, url: str):
        response = self._routes[url]
        if isinstance(response, Exception):
            raise response
        return response


class FakeHttp:
    """Stand-in for ``httpx.AsyncClient`` shared by every client created in a test."""

    def __init__(self):
        self.routes: dict[str, Any] = {}
        self.calls: list[dict[str, Any]] = []

    def client(self, *args, **kwargs) -> DummyAsyncClient:
        return DummyAsyncClient(self.routes, self.calls)

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]
