"""Pytest configuration and shared fixtures."""

import json
from unittest.mock import patch

import pytest
import requests

from src.clockodo import ClockodoClient

EMAIL = "jane@example.com"
API_KEY = "s3cr3t-api-key"


def make_response(status_code=200, body=None, reason="OK", text=None):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(body if body is not None else {}).encode()
    return response


def paging(current_page, count_pages, count_items, items_per_page=2):
    return {
        "items_per_page": items_per_page,
        "current_page": current_page,
        "count_pages": count_pages,
        "count_items": count_items,
    }


def user(id, **fields):
    return {"id": id, "name": f"User {id}", "email": f"user{id}@example.com", "active": True, **fields}


def entry(id, users_id, **fields):
    return {
        "id": id,
        "customers_id": 10,
        "projects_id": None,
        "users_id": users_id,
        "billable": 1,
        "text": None,
        "time_since": "2025-09-01T08:00:00Z",
        "time_until": "2025-09-01T09:00:00Z",
        "time_insert": "2025-09-01T09:00:01Z",
        "time_last_change": "2025-09-01T09:00:01Z",
        **fields,
    }


def project(id, **fields):
    return {
        "id": id,
        "customers_id": 10,
        "name": f"Project {id}",
        "number": None,
        "active": True,
        "billable_default": True,
        "completed": False,
        "completed_at": None,
        "test_data": False,
        "count_subprojects": 0,
        **fields,
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CLOCKODO_EMAIL", "CLOCKODO_API_KEY", "CLOCKODO_BASE_URL", "CLOCKODO_TIMEOUT", "CLOCKODO_DEBUG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("CLOCKODO_EMAIL", EMAIL)
    monkeypatch.setenv("CLOCKODO_API_KEY", API_KEY)


@pytest.fixture
def session():
    return requests.Session()


@pytest.fixture
def client(credentials, session):
    return ClockodoClient(session=session, debug=True)


@pytest.fixture
def mock_get(session):
    """Patch the session's GET; set `side_effect` to the pages to serve."""
    with patch.object(session, "get") as get:
        yield get
