from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

ESCAPE_KEYS = {"Escape", "Esc"}


class ScrollLock:
    """Page scroll suspension held while a dialog is visible."""

    def __init__(self) -> None:
        self.held = False

    def acquire(self) -> None:
        self.held = True

    def release(self) -> None:
        self.held = False


class Dialog:
    """Single overlay slot for the page.

    Opening while something is already shown closes it first, so at most one
    dialog is visible. Every close path (explicit close, escape key, backdrop
    click, a failing content renderer) releases the scroll lock and runs the
    teardown registered by ``open`` exactly once.
    """

    def __init__(
        self,
        scroll_lock: ScrollLock | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.scroll_lock = scroll_lock or ScrollLock()
        self.content: Any = None
        self._on_change = on_change
        self._teardown: Callable[[], None] | None = None

    @property
    def is_open(self) -> bool:
        return self.content is not None

    def open(self, content: Any, on_close: Callable[[], None] | None = None) -> None:
        if content is None:
            raise ValueError("Dialog content is required")
        if self.is_open:
            self.close()
        self.content = content
        self._teardown = on_close
        self.scroll_lock.acquire()
        self._notify()

    def close(self) -> None:
        if not self.is_open:
            return
        teardown = self._teardown
        self.content = None
        self._teardown = None
        try:
            if teardown is not None:
                teardown()
        finally:
            self.scroll_lock.release()
            self._notify()

    def handle_key(self, key: str | None) -> bool:
        if self.is_open and key in ESCAPE_KEYS:
            self.close()
            return True
        return False

    def handle_key_event(self, event: dict | None = None) -> None:
        self.handle_key((event or {}).get("key"))

    def handle_backdrop_click(self, event: dict | None = None) -> None:
        self.close()

    def render(self, render_content: Callable[[Any], Any]) -> Any:
        if not self.is_open:
            return None
        try:
            return render_content(self.content)
        except Exception:
            logger.exception("Dialog content failed to render; closing dialog")
            self.close()
            raise

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
