import pytest

from portfolio_site.content import parse_project
from portfolio_site.errors import SubmissionError


class StubBackend:
    """Records submissions; fails or hands back a URL when told to."""

    name = "stub"

    def __init__(self, error=None, follow_up_url=None, hook=None):
        self.calls = []
        self.error = error
        self.follow_up_url = follow_up_url
        self.hook = hook

    def submit(self, submission):
        self.calls.append(submission)
        if self.hook is not None:
            self.hook(submission)
        if self.error is not None:
            raise self.error
        return self.follow_up_url


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


@pytest.fixture
def make_backend():
    return StubBackend


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def failing_backend():
    return StubBackend(error=SubmissionError("Form submission failed", detail="rejected"))


@pytest.fixture
def valid_values():
    return {"name": "Jane Lee", "email": "jane@example.com", "company": "Acme", "role": "Engineer"}


@pytest.fixture
def tool_project():
    return parse_project(
        {
            "title": "Beam Checker",
            "short_description": "Checks steel beams against code limits.",
            "media_reference": "/static/beam.png",
            "cta_kind": "interest_form",
            "detail": {
                "overview": "Fast beam checks.",
                "how_to_use": ["Upload a section", "Read the report"],
                "how_it_works": ["Runs the code checks"],
                "benefits": ["Saves time"],
                "technologies": ["Python"],
            },
        }
    )


@pytest.fixture
def service_project():
    return parse_project(
        {
            "title": "Site Survey Service",
            "short_description": "Drone surveys for construction sites.",
            "media_reference": "/static/survey.mp4",
            "cta_kind": "source_link",
            "source_url": "https://github.com/example/survey",
            "detail": {
                "overview": "Weekly progress surveys.",
                "features": ["Orthomosaics", "Volume reports"],
                "technologies": ["OpenDroneMap"],
                "challenges": "Wind on exposed sites.",
                "outcome": "Fewer site visits.",
            },
        }
    )


@pytest.fixture
def fake_post(monkeypatch):
    """Replace requests.post; set ``fake_post.response`` or ``fake_post.error``."""
    import requests

    class Recorder:
        def __init__(self):
            self.calls = []
            self.response = FakeResponse(200, {"ok": True})
            self.error = None

        def __call__(self, url, **kwargs):
            self.calls.append((url, kwargs))
            if self.error is not None:
                raise self.error
            return self.response

    recorder = Recorder()
    monkeypatch.setattr(requests, "post", recorder)
    return recorder


@pytest.fixture
def vdom_text():
    def _text(node):
        if node is None:
            return ""
        if isinstance(node, str):
            return node
        if isinstance(node, (list, tuple)):
            return " ".join(_text(child) for child in node)
        if isinstance(node, dict):
            return " ".join(_text(child) for child in node.get("children", []))
        return str(node)

    return _text


@pytest.fixture
def find_tags():
    def _find(node, tag):
        found = []
        if isinstance(node, dict):
            if node.get("tagName") == tag:
                found.append(node)
            for child in node.get("children", []):
                found.extend(_find(child, tag))
        elif isinstance(node, (list, tuple)):
            for child in node:
                found.extend(_find(child, tag))
        return found

    return _find


@pytest.fixture
def web_app(monkeypatch, stub_backend):
    import website

    monkeypatch.setitem(website.app.config, "TESTING", True)
    monkeypatch.setitem(website.app.config, "SUBMISSION_BACKEND", stub_backend)
    return website.app


@pytest.fixture
def client(web_app):
    return web_app.test_client()
