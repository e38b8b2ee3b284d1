"""Pytest configuration and fixtures."""

import io
import json
import threading
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from dashboard_api.client import ClientContext, DashboardClient


def make_response(
    status_code: int = 200,
    body: Any = None,
    *,
    text: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    url: str = "http://testserver/",
) -> requests.Response:
    """Build a real requests.Response with its body already loaded."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.headers = CaseInsensitiveDict(headers or {"Content-Type": "application/json"})
    if text is None:
        text = json.dumps(body) if body is not None else ""
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.raw = io.BytesIO(response._content)
    return response


class FakeTransport:
    """Records fetch calls and replays queued responses."""

    def __init__(self, responses: Optional[List[requests.Response]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, response: requests.Response) -> None:
        self.responses.append(response)

    def fetch(self, url, *, method="GET", headers=None, data=None, signal=None):
        self.calls.append({
            "url": url,
            "method": method,
            "headers": dict(headers or {}),
            "data": data,
            "signal": signal,
        })
        if signal is not None:
            signal.throw_if_aborted()
        if self.responses:
            return self.responses.pop(0)
        return make_response(200, {})


class BlockingTransport(FakeTransport):
    """Holds GETs open until their signal is aborted or they are released."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch(self, url, *, method="GET", headers=None, data=None, signal=None):
        self.calls.append({"url": url, "method": method, "headers": dict(headers or {}), "signal": signal})
        if signal is not None:
            signal.throw_if_aborted()
            signal.add_listener(self.release.set)
        self.started.set()
        self.release.wait(timeout=5)
        if signal is not None:
            signal.remove_listener(self.release.set)
            signal.throw_if_aborted()
        return make_response(200, {"url": url})


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def context():
    return ClientContext()


@pytest.fixture
def client(transport, context):
    """Client wired to a fake transport; no network access."""
    return DashboardClient(context=context, transport=transport)
