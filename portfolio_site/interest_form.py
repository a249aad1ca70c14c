from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping

from portfolio_site.backends import SubmissionBackend
from portfolio_site.errors import SubmissionError, ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
FIELD_NAMES = ("name", "email", "company", "role")

CLOSE_DELAY_SECONDS = 1.5
SUBMIT_TIMEOUT_SECONDS = 15.0

MISSING_FIELDS_MESSAGE = "Please fill in your name and email address"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
SUCCESS_MESSAGE = "Thank you for your interest in {title}! We'll be in touch soon."
FAILURE_MESSAGE = "There was an error submitting your form. Please try again or contact us directly."


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class InterestSubmission:
    name: str
    email: str
    company: str = ""
    role: str = ""
    project_title: str = ""

    def fields(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email, "company": self.company, "role": self.role}


def validate_submission(values: Mapping[str, Any], project_title: str) -> InterestSubmission:
    cleaned = {name: str(values.get(name) or "").strip() for name in FIELD_NAMES}
    if not cleaned["name"]:
        raise ValidationError(MISSING_FIELDS_MESSAGE, field="name")
    if not cleaned["email"]:
        raise ValidationError(MISSING_FIELDS_MESSAGE, field="email")
    if not EMAIL_PATTERN.match(cleaned["email"]):
        raise ValidationError(INVALID_EMAIL_MESSAGE, field="email")
    return InterestSubmission(project_title=project_title, **cleaned)


class InterestForm:
    """Interest capture form for one project, created fresh each time it opens.

    States move ``editing -> submitting -> succeeded`` or
    ``editing -> submitting -> failed -> editing``. A result that arrives
    after ``close`` is ignored.
    """

    def __init__(
        self,
        project_title: str,
        backend: SubmissionBackend,
        on_complete: Callable[[Dict[str, str]], None] | None = None,
        on_close: Callable[[], None] | None = None,
        on_change: Callable[["InterestForm"], None] | None = None,
        close_delay: float = CLOSE_DELAY_SECONDS,
        timeout: float = SUBMIT_TIMEOUT_SECONDS,
    ) -> None:
        self.project_title = project_title
        self.backend = backend
        self.on_complete = on_complete
        self.on_close = on_close
        self.on_change = on_change
        self.close_delay = close_delay
        self.timeout = timeout

        self.values: Dict[str, str] = {name: "" for name in FIELD_NAMES}
        self.state = FormState.EDITING
        self.message = ""
        self.error_field: str | None = None
        self.follow_up_url: str | None = None
        self.closed = False

    @property
    def is_submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    def set_field(self, name: str, value: Any) -> None:
        if self.closed or self.is_submitting or name not in FIELD_NAMES:
            return
        self.values[name] = "" if value is None else str(value)

    def update(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    async def submit(self) -> FormState:
        if self.closed or self.state is not FormState.EDITING:
            return self.state

        try:
            submission = validate_submission(self.values, self.project_title)
        except ValidationError as exc:
            self._transition(FormState.EDITING, exc.message, exc.field)
            return self.state

        self._transition(FormState.SUBMITTING)
        try:
            follow_up_url = await asyncio.wait_for(
                asyncio.to_thread(self.backend.submit, submission),
                timeout=self.timeout,
            )
        except ValidationError as exc:
            if self.closed:
                return self.state
            self._transition(FormState.FAILED, exc.message, exc.field)
            self._transition(FormState.EDITING, exc.message, exc.field)
            return self.state
        except (SubmissionError, asyncio.TimeoutError) as exc:
            if self.closed:
                return self.state
            logger.warning("Interest submission for %s failed: %s", self.project_title, exc)
            self._transition(FormState.FAILED, FAILURE_MESSAGE)
            self._transition(FormState.EDITING, FAILURE_MESSAGE)
            return self.state
        except Exception:
            if self.closed:
                return self.state
            logger.exception("Interest submission for %s failed unexpectedly", self.project_title)
            self._transition(FormState.FAILED, FAILURE_MESSAGE)
            self._transition(FormState.EDITING, FAILURE_MESSAGE)
            return self.state

        if self.closed:
            logger.info("Discarding result for %s; form already closed", self.project_title)
            return self.state

        self.follow_up_url = follow_up_url
        self._transition(FormState.SUCCEEDED, SUCCESS_MESSAGE.format(title=self.project_title))
        if self.on_complete is not None:
            self.on_complete(submission.fields())
        await asyncio.sleep(self.close_delay)
        self.close()
        return self.state

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.on_close is not None:
            self.on_close()

    def _transition(self, state: FormState, message: str = "", error_field: str | None = None) -> None:
        self.state = state
        self.message = message
        self.error_field = error_field
        if self.on_change is not None:
            self.on_change(self)
