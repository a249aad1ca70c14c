from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Protocol
from urllib.parse import quote

import requests

from portfolio_site.errors import ConfigurationError, SubmissionError, ValidationError
from portfolio_site.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 12.0
UNAVAILABLE_MESSAGE = "The form service is unavailable"


class InterestPayload(Protocol):
    name: str
    email: str
    company: str
    role: str
    project_title: str


class SubmissionBackend(Protocol):
    """Anything that can deliver an interest submission.

    ``submit`` returns normally on success, optionally with a URL the visitor
    should be sent to (a mail draft), and raises ``SubmissionError`` otherwise.
    """

    name: str

    def submit(self, submission: InterestPayload) -> str | None:
        ...


def subject_for(project_title: str) -> str:
    return f"New Interest Form Submission for {project_title}"


def submission_fields(submission: InterestPayload) -> Dict[str, str]:
    return {
        "name": submission.name,
        "email": submission.email,
        "company": submission.company or "",
        "role": submission.role or "",
        "project": submission.project_title,
    }


def post_request(url: str, timeout: float, **kwargs: Any) -> tuple[Any, int]:
    try:
        response = requests.post(url, headers={"Accept": "application/json"}, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        logger.exception("Form service request to %s failed", url)
        raise SubmissionError(UNAVAILABLE_MESSAGE, detail=str(exc)) from exc

    try:
        body: Any = response.json()
    except ValueError:
        body = {"raw": response.text}
    if not isinstance(body, dict):
        body = {"raw": body}
    return body, response.status_code


def _multipart(fields: Dict[str, str]) -> Dict[str, tuple]:
    return {key: (None, value) for key, value in fields.items()}


def _error_detail(body: Dict[str, Any]) -> str | None:
    for key in ("error", "message"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class FormEndpointBackend:
    """Multipart POST to a generic form endpoint such as Formspree."""

    name = "form_endpoint"

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.url = url
        self.timeout = timeout

    def submit(self, submission: InterestPayload) -> str | None:
        if not self.url:
            raise SubmissionError("The form endpoint is not configured", detail="FORM_ENDPOINT_URL")
        fields = submission_fields(submission)
        fields["_subject"] = subject_for(submission.project_title)

        body, status = post_request(self.url, self.timeout, files=_multipart(fields))
        if 200 <= status < 300 and (body.get("ok") or body.get("success")):
            return None
        logger.warning("Form endpoint rejected submission with status %s: %s", status, body)
        raise SubmissionError("Form submission failed", detail=_error_detail(body))


class RelayApiBackend:
    """Multipart POST to a relay API that authenticates with an access key."""

    name = "relay_api"

    def __init__(self, url: str, access_key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.url = url
        self.access_key = access_key
        self.timeout = timeout

    def submit(self, submission: InterestPayload) -> str | None:
        if not self.access_key:
            raise SubmissionError("The relay API is not configured", detail="RELAY_ACCESS_KEY")
        fields = {"access_key": self.access_key, "subject": subject_for(submission.project_title)}
        fields.update(submission_fields(submission))

        body, status = post_request(self.url, self.timeout, files=_multipart(fields))
        if body.get("success") is True:
            return None
        logger.warning("Relay API rejected submission with status %s: %s", status, _error_detail(body))
        raise SubmissionError("Form submission failed", detail=_error_detail(body))


class MailtoBackend:
    """Build a pre-filled email draft instead of calling a service."""

    name = "mailto"

    def __init__(self, recipient: str) -> None:
        self.recipient = recipient

    def draft_body(self, submission: InterestPayload) -> str:
        lines = [
            f"Hi, I'm interested in {submission.project_title}.",
            "",
            f"Name: {submission.name}",
            f"Email: {submission.email}",
            f"Company: {submission.company}",
            f"Role: {submission.role}",
        ]
        return "\n".join(lines)

    def submit(self, submission: InterestPayload) -> str | None:
        if not self.recipient:
            raise SubmissionError("No contact address is configured", detail="CONTACT_EMAIL")
        subject = quote(f"Interest in {submission.project_title}")
        body = quote(self.draft_body(submission))
        return f"mailto:{self.recipient}?subject={subject}&body={body}"


class HostedFormBackend:
    """JSON POST to a hosted form service that validates submissions itself."""

    name = "hosted_form"

    def __init__(self, url_template: str, form_id: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.url_template = url_template
        self.form_id = form_id
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.url_template.format(form_id=self.form_id)

    def submit(self, submission: InterestPayload) -> str | None:
        if not self.form_id:
            raise SubmissionError("The hosted form is not configured", detail="HOSTED_FORM_ID")
        payload = submission_fields(submission)
        payload["_subject"] = subject_for(submission.project_title)

        body, status = post_request(self.url, self.timeout, json=payload)
        if 200 <= status < 300 and body.get("ok", True) and not body.get("errors"):
            return None

        errors: List[Dict[str, Any]] = [error for error in body.get("errors") or [] if isinstance(error, dict)]
        field_errors = [error for error in errors if error.get("field")]
        if field_errors:
            first = field_errors[0]
            raise ValidationError(str(first.get("message") or "Invalid value"), field=str(first["field"]))
        detail = str(errors[0].get("message")) if errors else _error_detail(body)
        logger.warning("Hosted form rejected submission with status %s: %s", status, detail)
        raise SubmissionError("Form submission failed", detail=detail)


BACKEND_FACTORIES: Dict[str, Callable[[Settings], SubmissionBackend]] = {
    "form_endpoint": lambda settings: FormEndpointBackend(settings.form_endpoint_url, settings.submission_timeout),
    "relay_api": lambda settings: RelayApiBackend(
        settings.relay_api_url, settings.relay_access_key, settings.submission_timeout
    ),
    "mailto": lambda settings: MailtoBackend(settings.contact_email),
    "hosted_form": lambda settings: HostedFormBackend(
        settings.hosted_form_url, settings.hosted_form_id, settings.submission_timeout
    ),
}


def build_backend(settings: Settings) -> SubmissionBackend:
    try:
        factory = BACKEND_FACTORIES[settings.submission_backend]
    except KeyError as exc:
        choices = ", ".join(sorted(BACKEND_FACTORIES))
        raise ConfigurationError(
            f"Unknown submission backend '{settings.submission_backend}' (expected one of: {choices})"
        ) from exc
    return factory(settings)
