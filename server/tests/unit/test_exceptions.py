"""Unit tests for failure envelope rendering."""

import json

import pytest
from starlette.requests import Request

from guided_tours.core import exceptions
from guided_tours.core.exceptions import NotFoundError, generic_exception_handler, service_error_handler


class RecordingLogger:
    def __init__(self):
        self.events = []

    def exception(self, event, **kwargs):
        self.events.append((event, kwargs))


def make_request(path):
    return Request({
        "type": "http",
        "method": "POST",
        "path": path,
        "root_path": "",
        "scheme": "http",
        "server": ("test", 80),
        "query_string": b"",
        "headers": [],
    })


@pytest.mark.asyncio
async def test_unhandled_error_is_logged_with_its_error_id(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(exceptions, "logger", recorder)
    failure = RuntimeError("boom")

    response = await generic_exception_handler(make_request("/v1/execution/start"), failure)

    body = json.loads(response.body)
    assert response.status_code == 500
    assert body["success"] is False
    assert body["error"]["code"] == "INTERNAL_ERROR"

    [(event, fields)] = recorder.events
    assert event == "unhandled_exception"
    assert fields["error_id"] == body["error"]["error_id"]
    assert fields["path"] == "/v1/execution/start"
    assert fields["exc_info"] is failure


@pytest.mark.asyncio
async def test_service_error_renders_envelope():
    error = NotFoundError(resource_type="execution", resource_id="missing")

    response = await service_error_handler(make_request("/v1/execution/get"), error)

    body = json.loads(response.body)
    assert response.status_code == 404
    assert body["success"] is False
    assert body["error"]["status"] == 404
    assert body["error"]["instance"] == "/v1/execution/get"
