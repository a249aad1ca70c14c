import pytest
import requests

from portfolio_site.backends import (
    UNAVAILABLE_MESSAGE,
    FormEndpointBackend,
    HostedFormBackend,
    MailtoBackend,
    RelayApiBackend,
    build_backend,
)
from portfolio_site.errors import ConfigurationError, SubmissionError, ValidationError
from portfolio_site.interest_form import InterestSubmission
from portfolio_site.settings import Settings, load_settings

from conftest import FakeResponse

SUBMISSION = InterestSubmission(
    name="Jane Lee",
    email="jane@example.com",
    company="Acme",
    role="Engineer",
    project_title="Beam Checker",
)


@pytest.mark.backends
def test_form_endpoint_posts_multipart_fields(fake_post):
    backend = FormEndpointBackend("https://forms.example.com/f/abc", timeout=7)
    assert backend.submit(SUBMISSION) is None

    url, kwargs = fake_post.calls[0]
    assert url == "https://forms.example.com/f/abc"
    assert kwargs["timeout"] == 7
    assert kwargs["headers"] == {"Accept": "application/json"}
    files = kwargs["files"]
    assert files["name"] == (None, "Jane Lee")
    assert files["project"] == (None, "Beam Checker")
    assert files["_subject"] == (None, "New Interest Form Submission for Beam Checker")


@pytest.mark.backends
@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(200, {"next": "/thanks"}),
        FakeResponse(200, None, text="<html>"),
        FakeResponse(422, {"error": "Email is invalid"}),
        FakeResponse(500, {"ok": True}),
    ],
)
def test_form_endpoint_failures(fake_post, response):
    fake_post.response = response
    with pytest.raises(SubmissionError):
        FormEndpointBackend("https://forms.example.com/f/abc").submit(SUBMISSION)


@pytest.mark.backends
def test_form_endpoint_error_detail_is_kept(fake_post):
    fake_post.response = FakeResponse(422, {"error": "Email is invalid"})
    with pytest.raises(SubmissionError) as excinfo:
        FormEndpointBackend("https://forms.example.com/f/abc").submit(SUBMISSION)
    assert excinfo.value.detail == "Email is invalid"


@pytest.mark.backends
def test_unconfigured_backends_do_not_call_out(fake_post):
    with pytest.raises(SubmissionError):
        FormEndpointBackend("").submit(SUBMISSION)
    with pytest.raises(SubmissionError):
        RelayApiBackend("https://relay.example.com", "").submit(SUBMISSION)
    with pytest.raises(SubmissionError):
        HostedFormBackend("https://hosted.example.com/{form_id}", "").submit(SUBMISSION)
    with pytest.raises(SubmissionError):
        MailtoBackend("").submit(SUBMISSION)
    assert fake_post.calls == []


@pytest.mark.backends
def test_transport_errors_become_submission_errors(fake_post):
    fake_post.error = requests.ConnectionError("connection refused")
    with pytest.raises(SubmissionError) as excinfo:
        FormEndpointBackend("https://forms.example.com/f/abc").submit(SUBMISSION)
    assert excinfo.value.message == UNAVAILABLE_MESSAGE

    fake_post.error = requests.Timeout("slow")
    with pytest.raises(SubmissionError):
        RelayApiBackend("https://relay.example.com", "key").submit(SUBMISSION)


@pytest.mark.backends
def test_zero_timeout_setting_never_reaches_requests(fake_post):
    settings = load_settings(
        {"SUBMISSION_TIMEOUT_SECONDS": "0", "FORM_ENDPOINT_URL": "https://forms.example.com/f/abc"}
    )
    build_backend(settings).submit(SUBMISSION)
    assert fake_post.calls[0][1]["timeout"] == 12.0


@pytest.mark.backends
def test_relay_api_sends_access_key(fake_post):
    fake_post.response = FakeResponse(200, {"success": True, "message": "Email sent"})
    backend = RelayApiBackend("https://relay.example.com/submit", "secret-key")
    assert backend.submit(SUBMISSION) is None

    _, kwargs = fake_post.calls[0]
    assert kwargs["files"]["access_key"] == (None, "secret-key")
    assert kwargs["files"]["email"] == (None, "jane@example.com")


@pytest.mark.backends
def test_relay_api_requires_success_flag(fake_post):
    fake_post.response = FakeResponse(400, {"success": False, "message": "Invalid access key"})
    with pytest.raises(SubmissionError) as excinfo:
        RelayApiBackend("https://relay.example.com/submit", "bad").submit(SUBMISSION)
    assert excinfo.value.detail == "Invalid access key"


@pytest.mark.backends
def test_mailto_builds_a_draft_without_network(fake_post):
    url = MailtoBackend("john.doe@example.com").submit(SUBMISSION)
    assert url.startswith("mailto:john.doe@example.com?subject=Interest%20in%20Beam%20Checker&body=")
    assert "Name%3A%20Jane%20Lee" in url
    assert "Company%3A%20Acme" in url
    assert fake_post.calls == []


@pytest.mark.backends
def test_hosted_form_posts_json(fake_post):
    backend = HostedFormBackend("https://hosted.example.com/f/{form_id}", "xyz")
    assert backend.submit(SUBMISSION) is None

    url, kwargs = fake_post.calls[0]
    assert url == "https://hosted.example.com/f/xyz"
    assert kwargs["json"]["project"] == "Beam Checker"


@pytest.mark.backends
def test_hosted_form_field_errors_are_validation_errors(fake_post):
    fake_post.response = FakeResponse(
        422, {"errors": [{"field": "email", "code": "TYPE_EMAIL", "message": "should be an email"}]}
    )
    with pytest.raises(ValidationError) as excinfo:
        HostedFormBackend("https://hosted.example.com/f/{form_id}", "xyz").submit(SUBMISSION)
    assert excinfo.value.field == "email"
    assert excinfo.value.message == "should be an email"


@pytest.mark.backends
def test_hosted_form_other_errors_are_submission_errors(fake_post):
    fake_post.response = FakeResponse(403, {"errors": [{"code": "INACTIVE", "message": "Form not active"}]})
    with pytest.raises(SubmissionError) as excinfo:
        HostedFormBackend("https://hosted.example.com/f/{form_id}", "xyz").submit(SUBMISSION)
    assert excinfo.value.detail == "Form not active"


@pytest.mark.backends
@pytest.mark.parametrize(
    "name, expected",
    [
        ("form_endpoint", FormEndpointBackend),
        ("relay_api", RelayApiBackend),
        ("mailto", MailtoBackend),
        ("hosted_form", HostedFormBackend),
    ],
)
def test_build_backend_selects_strategy(name, expected):
    backend = build_backend(Settings(submission_backend=name, submission_timeout=3))
    assert isinstance(backend, expected)
    assert backend.name == name


@pytest.mark.backends
def test_build_backend_rejects_unknown_names():
    with pytest.raises(ConfigurationError):
        build_backend(Settings(submission_backend="carrier_pigeon"))
