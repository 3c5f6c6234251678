"""Fake Salesforce org for adapter tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable

INSTANCE_URL = "https://example.my.salesforce.com"
API = "/services/data/v61.0"

type Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class FakeSalesforce:
    """Route table standing in for a Salesforce org; records every request."""

    routes: dict[tuple[str, str], Handler] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def on(
        self,
        method: str,
        path: str,
        payload: object = None,
        *,
        status: int = 200,
        handler: Handler | None = None,
    ) -> None:
        def respond(_request: httpx.Request) -> httpx.Response:
            if payload is None:
                return httpx.Response(status)
            return httpx.Response(status, json=payload)

        self.routes[(method, path)] = handler or respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(
                404,
                json=[{"errorCode": "NOT_FOUND", "message": f"No route for {request.url.path}"}],
            )
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def body_of(request: httpx.Request) -> object:
    return json.loads(request.content)


def save_results(*ids: str) -> list[dict[str, object]]:
    return [{"id": record_id, "success": True, "errors": []} for record_id in ids]
