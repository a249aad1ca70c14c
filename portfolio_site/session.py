from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping

from portfolio_site.backends import SubmissionBackend
from portfolio_site.content import ProjectRecord
from portfolio_site.dialog import Dialog
from portfolio_site.interest_form import CLOSE_DELAY_SECONDS, SUBMIT_TIMEOUT_SECONDS, InterestForm

logger = logging.getLogger(__name__)


class PortfolioSession:
    """Page state for one visitor: the dialog slot and the form it may hold.

    The component keeps one of these per mounted page and re-renders on
    ``on_change``. The interest form is dropped whenever the dialog closes,
    whichever close path was taken.
    """

    def __init__(
        self,
        backend_factory: Callable[[], SubmissionBackend],
        on_change: Callable[[], None] | None = None,
        on_interest: Callable[[ProjectRecord, Dict[str, str]], None] | None = None,
        close_delay: float = CLOSE_DELAY_SECONDS,
        submit_timeout: float = SUBMIT_TIMEOUT_SECONDS,
    ) -> None:
        self.backend_factory = backend_factory
        self.on_change = on_change
        self.on_interest = on_interest
        self.close_delay = close_delay
        self.submit_timeout = submit_timeout
        self.dialog = Dialog(on_change=self._changed)
        self.form: InterestForm | None = None
        self.submit_task: asyncio.Task | None = None

    @property
    def dialog_kind(self) -> str | None:
        if not self.dialog.is_open:
            return None
        kind, _ = self.dialog.content
        return kind

    def open_project(self, project: ProjectRecord) -> None:
        self.dialog.open(("detail", project), on_close=self._abandon_form)

    def open_interest(self, project: ProjectRecord) -> InterestForm:
        # The detail dialog goes away before the form is built.
        self.dialog.close()

        def completed(fields: Dict[str, str]) -> None:
            if self.on_interest is not None:
                self.on_interest(project, fields)

        form = InterestForm(
            project.title,
            self.backend_factory(),
            on_complete=completed,
            on_close=self.dialog.close,
            on_change=lambda form: self._changed(),
            close_delay=self.close_delay,
            timeout=self.submit_timeout,
        )
        self.form = form
        self.dialog.open(("interest", project), on_close=self._abandon_form)
        return form

    def close(self, event: Dict[str, Any] | None = None) -> None:
        self.dialog.close()

    def set_field(self, name: str, event_data: Dict[str, Any]) -> None:
        if self.form is None:
            return
        target = event_data.get("target") or {}
        self.form.set_field(name, target.get("value", ""))

    def start_submit(self, values: Mapping[str, Any]) -> asyncio.Task | None:
        """Schedule a submission on the running loop and return its task.

        Not awaited by the caller, so Cancel and Escape events are still
        handled while the request is in flight.
        """
        form = self.form
        if form is None or form.is_submitting:
            return None
        if self.submit_task is not None and not self.submit_task.done():
            return None
        form.update(values)
        task = asyncio.get_running_loop().create_task(form.submit())
        task.add_done_callback(self._log_submit_failure)
        self.submit_task = task
        return task

    def _log_submit_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Interest submission task failed", exc_info=exc)

    def _abandon_form(self) -> None:
        form = self.form
        self.form = None
        self.submit_task = None
        if form is not None:
            form.close()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
