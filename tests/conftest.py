"""
Pytest configuration and shared fixtures
"""
import copy
import os
import socket
import sys
import threading
from unittest.mock import Mock

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import TerminalCapabilities
from models import AnalyzeResponse


CATEGORY_NAMES = {
    "title": "Title",
    "description": "Description",
    "openGraph": "Open Graph",
    "ogImage": "OG Image",
    "twitterCard": "Twitter Card",
    "canonical": "Canonical",
    "robots": "Robots",
}

DIAGNOSTIC_KEYS = {
    "title": "title",
    "description": "description",
    "openGraph": "ogTags",
    "ogImage": "ogImage",
    "twitterCard": "twitterCard",
    "canonical": "canonical",
    "robots": "robots",
}

STATUS_TO_DIAGNOSTIC = {
    "pass": ("green", "check"),
    "warning": ("yellow", "warning"),
    "fail": ("red", "error"),
}


def build_payload(statuses=None, scores=None, messages=None, grade="A",
                  overall=100, total_issues=0, timing=1234, url="https://example.com"):
    """Build an /api/analyze response body; every category passes unless overridden"""
    statuses = statuses or {}
    scores = scores or {}
    messages = messages or {}

    categories = {}
    diagnostics = {
        "overall": {"status": "green", "icon": "check", "message": "All good"},
    }
    for key, name in CATEGORY_NAMES.items():
        status = statuses.get(key, "pass")
        score = scores.get(key, 100 if status == "pass" else 0)
        categories[key] = {
            "name": name,
            "score": score,
            "maxScore": 100,
            "status": status,
            "weight": 10,
            "issues": [] if status == "pass" else [f"{name} problem"],
        }
        diag_status, icon = STATUS_TO_DIAGNOSTIC.get(status, ("yellow", "warning"))
        diagnostics[DIAGNOSTIC_KEYS[key]] = {
            "status": diag_status,
            "icon": icon,
            "message": messages.get(key, f"{name} present"),
        }

    return {
        "ok": True,
        "url": url,
        "finalUrl": url,
        "analyzedAt": "2025-01-01T00:00:00.000Z",
        "timing": timing,
        "meta": {},
        "diagnostics": diagnostics,
        "score": {
            "overall": overall,
            "categories": categories,
            "totalIssues": total_issues,
            "grade": grade,
        },
    }


@pytest.fixture
def perfect_payload():
    """All categories passing, grade A"""
    return build_payload()


@pytest.fixture
def failing_payload():
    """Grade F with four failing categories"""
    return build_payload(
        statuses={
            "openGraph": "fail",
            "ogImage": "fail",
            "twitterCard": "fail",
            "canonical": "fail",
        },
        messages={
            "openGraph": "Missing OG tags",
            "ogImage": "Missing OG image",
            "twitterCard": "Missing Twitter card",
            "canonical": "Missing canonical",
        },
        grade="F",
        overall=30,
        total_issues=4,
        timing=500,
    )


@pytest.fixture
def mixed_payload():
    """Pass, warning and fail rows together"""
    return build_payload(
        statuses={"description": "fail", "canonical": "warning"},
        scores={"canonical": 60},
        messages={"canonical": "Partial"},
        grade="C",
        overall=65,
        total_issues=2,
    )


@pytest.fixture
def make_response():
    """Factory turning a payload dict into an AnalyzeResponse"""
    def _make(payload):
        return AnalyzeResponse.from_dict(copy.deepcopy(payload))
    return _make


@pytest.fixture
def plain_terminal():
    return TerminalCapabilities(interactive=False, color_enabled=False)


@pytest.fixture
def color_terminal():
    return TerminalCapabilities(interactive=True, color_enabled=True)


def make_http_response(status_code=200, json_body=None, json_error=None):
    """Mock requests.Response"""
    resp = Mock()
    resp.status_code = status_code
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_body
    return resp


@pytest.fixture
def http_response():
    return make_http_response


@pytest.fixture
def payload_factory():
    return build_payload


@pytest.fixture
def silent_server():
    """Local TCP server that accepts connections and never responds"""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    accepted = []

    def accept():
        try:
            conn, _ = server.accept()
        except OSError:
            return
        accepted.append(conn)

    thread = threading.Thread(target=accept, daemon=True)
    thread.start()
    yield server.getsockname()[1], accepted

    for conn in accepted:
        conn.close()
    server.close()
    thread.join(1.0)
