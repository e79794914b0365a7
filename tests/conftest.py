import json

import pytest
import requests

EMPTY_REFS = {"tableLayouts": [], "categories": [], "clubCardIds": [], "eventGenre": []}


def make_response(status_code, body=None, text=None, reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


class FakePost:
    """Stands in for requests.post and records every call."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture(autouse=True)
def functions_env(monkeypatch):
    monkeypatch.setenv("FUNCTIONS_BASE_URL", "http://functions.test/guestbuddy/us-central1")
    monkeypatch.setenv("FIREBASE_ID_TOKEN", "test-token")
    monkeypatch.delenv("FUNCTIONS_EMULATOR_HOST", raising=False)
    monkeypatch.delenv("EVENT_REFERENCE_IDS", raising=False)
