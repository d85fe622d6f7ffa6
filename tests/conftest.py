import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import requests

from medspa_seeder.config.settings import OverpassSettings
from medspa_seeder.utils.decorators import log_action

ENDPOINTS = [
    "https://overpass-a.test/api/interpreter",
    "https://overpass-b.test/api/interpreter",
    "https://overpass-c.test/api/interpreter",
]


@pytest.fixture
def fake_sleep(monkeypatch):
    """
    Replace time.sleep so tests run instantly and record delays.
    """
    delays = []

    def _fake_sleep(seconds: float):
        delays.append(seconds)

    monkeypatch.setattr("time.sleep", _fake_sleep)
    return delays


@pytest.fixture
def ovp_settings():
    return OverpassSettings(
        endpoints=list(ENDPOINTS),
        query_timeout=10,
        timeout=2,
        max_attempts=3,
        base_delay=1.0,
    )


class _DummyResp(SimpleNamespace):
    def raise_for_status(self):
        if 400 <= self.status_code:
            raise requests.HTTPError(response=self)

    def json(self):
        return json.loads(self._text) if isinstance(self._text, str) else self._text

    text = property(lambda self: self._text)


def json_resp(
    payload: Any, status_code: int = 200, content_type: str = "application/json"
) -> _DummyResp:
    return _DummyResp(
        status_code=status_code,
        headers={"content-type": content_type},
        _text=json.dumps(payload),
    )


def error_resp(status_code: int = 504) -> _DummyResp:
    return _DummyResp(
        status_code=status_code,
        headers={"content-type": "text/html"},
        _text="<html>Gateway Timeout</html>",
    )


@pytest.fixture
def patch_requests(monkeypatch):
    """
    Fixture that lets each test script `requests.post`:

        store["post"] = _DummyResp(...)          # returned on every call
        store["post"] = [resp, exc, resp, ...]   # consumed in order

    Exceptions in the script are raised. Every call is recorded in store["calls"].
    """
    store: Dict[str, Any] = {"post": None, "calls": []}

    def fake_post(url, *_, **kwargs):
        store["calls"].append({"url": url, **kwargs})
        scripted = store["post"]
        response = scripted.pop(0) if isinstance(scripted, list) else scripted
        if isinstance(response, BaseException):
            raise response
        return response

    monkeypatch.setattr(requests, "post", fake_post)
    return store


class FakeStorage:
    def __init__(self, input_data: Optional[Dict[str, Any]] = None):
        self.input_data = input_data
        self.rows: List[Dict[str, Any]] = []
        self.values: Dict[str, Any] = {}
        self.push_calls = 0
        self.purge_calls = 0

    def get_input(self):
        return self.input_data

    def push_data(self, rows):
        self.push_calls += 1
        self.rows.extend(rows)

    def set_value(self, key, value):
        self.values[key] = value

    def get_value(self, key):
        return self.values.get(key)

    def purge(self):
        self.purge_calls += 1
        self.rows = []
        self.values = {k: v for k, v in self.values.items() if k == "INPUT"}


@pytest.fixture
def fake_storage():
    return FakeStorage()


class DummyLogger:
    def __init__(self):
        self.infos = []
        self.debugs = []
        self.warnings = []

    def info(self, msg):
        self.infos.append(msg)

    def debug(self, msg):
        self.debugs.append(msg)

    def warning(self, msg):
        self.warnings.append(msg)


@pytest.fixture
def swap_logger(monkeypatch):
    stub = DummyLogger()
    monkeypatch.setattr("medspa_seeder.utils.decorators.logger", stub)
    return stub


class DummyAgent:
    name = "MyAgent"

    @log_action
    def act(self, action, context):
        return list(context)

    @log_action
    def simple(self, x):
        return x * 2


def element(
    osm_id: int,
    tags: Optional[Dict[str, Any]] = None,
    osm_type: str = "node",
    **coords: Any,
) -> Dict[str, Any]:
    """Build a raw Overpass element."""
    el: Dict[str, Any] = {"type": osm_type, "id": osm_id, **coords}
    if tags is not None:
        el["tags"] = tags
    return el


SAN_ANTONIO_BBOX = {"south": 29.1, "west": -98.85, "north": 29.75, "east": -98.1}
