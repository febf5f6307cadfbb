import json
import threading

import pytest
import requests

from tracker.api import ApiClient
from tracker.session import TokenHolder

TX_URL = "https://api.test/api/Transaction"
CAT_URL = "https://api.test/api/Category"


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            return json.loads(self.text)
        return self._body


class FakeSession:
    """Stands in for requests.Session: canned responses keyed by (method, url)."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def add(self, method, url, response):
        self.routes[(method.upper(), url)] = response

    def request(self, method, url, headers=None, json=None, timeout=None, verify=True):
        with self._lock:
            self.calls.append({"method": method, "url": url, "headers": headers, "json": json})
        route = self.routes.get((method, url))
        if route is None:
            return FakeResponse(404, text="Not Found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            # runs on the worker thread while the request is in flight
            return route()
        return route

    def urls(self, method=None):
        return [c["url"] for c in self.calls if method is None or c["method"] == method]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def tokens():
    return TokenHolder("tok-123")


@pytest.fixture
def api(session, tokens):
    return ApiClient(tokens, session=session)


@pytest.fixture
def connection_error():
    return requests.ConnectionError("Failed to fetch")
