from __future__ import annotations

import os
from dataclasses import replace
from typing import Any, Dict, List

from flask import Flask, jsonify, request
from reactpy import component, event, hooks, html
from reactpy.backend.flask import Options, configure

from portfolio_site.backends import SubmissionBackend, build_backend
from portfolio_site.content import CtaKind, PortfolioContent, ProjectRecord, load_content
from portfolio_site.errors import ConfigurationError, SubmissionError, ValidationError
from portfolio_site.interest_form import FIELD_NAMES, validate_submission
from portfolio_site.session import PortfolioSession
from portfolio_site.settings import load_dotenv, load_settings
from portfolio_site.views import (
    ESCAPE_FORWARD_SCRIPT,
    render_about,
    render_contact,
    render_dialog,
    render_footer,
    render_header,
    render_hero,
    render_interest_form,
    render_project_detail,
    render_projects,
)

load_dotenv()

app = Flask(__name__)

SETTINGS = load_settings()


def load_content_safe(path: str) -> PortfolioContent:
    try:
        content = load_content(path)
    except ConfigurationError:
        app.logger.exception("Failed to load portfolio content from %s; using bundled content", path)
        content = load_content()
    for error in content.errors:
        app.logger.warning("Rejected project record %s: %s", error.record or "untitled", error.message)
    return content


app.config["PORTFOLIO_CONTENT"] = load_content_safe(SETTINGS.content_path)
if not SETTINGS.contact_email:
    SETTINGS = replace(SETTINGS, contact_email=str(app.config["PORTFOLIO_CONTENT"].profile.get("email") or ""))
app.config["SUBMISSION_BACKEND"] = build_backend(SETTINGS)
app.logger.info("Interest submissions go through the %s backend", SETTINGS.submission_backend)


def portfolio_content() -> PortfolioContent:
    return app.config["PORTFOLIO_CONTENT"]


def current_backend() -> SubmissionBackend:
    return app.config["SUBMISSION_BACKEND"]


def cors_origin_for_request() -> str | None:
    origin = request.headers.get("Origin")
    if not origin:
        return None
    if "*" in SETTINGS.cors_allowed_origins:
        return "*"
    if origin in SETTINGS.cors_allowed_origins:
        return origin
    return None


@app.before_request
def api_cors_preflight():
    if request.method == "OPTIONS" and request.path.startswith("/api/"):
        return "", 204


@app.after_request
def add_api_cors_headers(response):
    if not request.path.startswith("/api/"):
        return response

    origin = cors_origin_for_request()
    if origin:
        response.headers["Access-Control-Allow-Origin"] = origin
        if origin != "*":
            response.headers["Vary"] = "Origin"

    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Max-Age"] = "600"
    return response


@app.route("/api/projects")
def api_projects():
    content = portfolio_content()
    return jsonify(
        {
            "projects": [project.to_dict() for project in content.projects],
            "rejected": len(content.errors),
        }
    )


@app.route("/api/profile")
def api_profile():
    return jsonify(portfolio_content().profile)


@app.route("/api/interest", methods=["POST"])
def api_interest():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Expected a JSON object body"}), 400

    project = portfolio_content().find_project(str(payload.get("project") or ""))
    if project is None:
        return jsonify({"error": "Unknown project"}), 404
    if project.cta_kind is not CtaKind.INTEREST_FORM:
        return jsonify({"error": f"{project.title} does not take interest requests"}), 400

    try:
        submission = validate_submission(payload, project.title)
        follow_up_url = current_backend().submit(submission)
    except ValidationError as exc:
        return jsonify({"error": exc.message, "field": exc.field}), 400
    except SubmissionError as exc:
        app.logger.warning("Interest submission for %s failed: %s (%s)", project.title, exc.message, exc.detail)
        return jsonify({"error": exc.message}), 502

    app.logger.info("Interest captured for %s from %s", project.title, submission.email)
    return jsonify({"ok": True, "follow_up_url": follow_up_url})


PORTFOLIO_CSS = """
:root {
  color-scheme: light;
  --bg: #f5f7fb;
  --surface: rgba(255, 255, 255, 0.78);
  --border: rgba(15, 23, 42, 0.1);
  --text: #0b1220;
  --muted: #56627a;
  --accent: #0a84ff;
  --shadow: 0 18px 40px rgba(10, 20, 45, 0.14);
  --radius: 18px;
}

@media (prefers-color-scheme: dark) {
  :root {
    color-scheme: dark;
    --bg: #0b1022;
    --surface: rgba(16, 24, 44, 0.82);
    --border: rgba(255, 255, 255, 0.12);
    --text: #ecf2ff;
    --muted: #a7b6d3;
    --accent: #6bb7ff;
    --shadow: 0 18px 48px rgba(0, 0, 0, 0.45);
  }
}

* { box-sizing: border-box; }

html { scroll-behavior: smooth; }

body {
  margin: 0;
  font-family: "Inter", "Helvetica Neue", "Segoe UI", sans-serif;
  background: var(--bg);
  color: var(--text);
}

.navbar {
  position: sticky;
  top: 0;
  z-index: 20;
  display: flex;
  justify-content: space-between;
  align-items: center;
  padding: 16px 24px;
  background: var(--surface);
  border-bottom: 1px solid var(--border);
  backdrop-filter: blur(12px);
}

.nav-title { font-weight: 600; letter-spacing: -0.01em; }
.nav-links { display: flex; gap: 20px; font-size: 14px; }
.nav-links a { color: inherit; text-decoration: none; }
.nav-links a:hover { color: var(--accent); }

.page {
  max-width: 1120px;
  margin: 0 auto;
  padding: 32px 24px 88px;
  display: grid;
  gap: 32px;
}

.hero { text-align: center; padding: 56px 0 24px; }
.hero h1 { font-size: clamp(36px, 6vw, 60px); margin: 0 0 16px; }
.hero .accent { color: var(--accent); }
.lead { font-size: 20px; color: var(--muted); max-width: 720px; margin: 0 auto 28px; }

.card {
  background: var(--surface);
  border: 1px solid var(--border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
  padding: 24px;
}

.centered { text-align: center; justify-content: center; }

.grid {
  display: grid;
  grid-template-columns: repeat(auto-fill, minmax(300px, 1fr));
  gap: 20px;
}

.project-card { padding: 0; overflow: hidden; display: grid; }
.card-body { padding: 20px; display: grid; gap: 10px; }
.card-title { margin: 0; font-size: 18px; }

.media { aspect-ratio: 16 / 9; background: var(--border); overflow: hidden; }
.media img, .media video { width: 100%; height: 100%; object-fit: cover; display: block; }
.media-empty { display: flex; align-items: center; justify-content: center; }

.meta { color: var(--muted); font-size: 14px; line-height: 1.6; }

.tags { display: flex; flex-wrap: wrap; gap: 8px; }
.tag {
  padding: 4px 12px;
  border-radius: 999px;
  font-size: 13px;
  color: var(--accent);
  background: rgba(10, 132, 255, 0.12);
}

.btn {
  display: inline-flex;
  align-items: center;
  justify-content: center;
  padding: 10px 18px;
  border-radius: 12px;
  border: 1px solid var(--border);
  background: var(--surface);
  color: inherit;
  font: inherit;
  font-weight: 600;
  text-decoration: none;
  cursor: pointer;
}
.btn.primary { background: var(--accent); border-color: var(--accent); color: #fff; }
.btn.ghost { background: transparent; }
.btn:disabled { opacity: 0.55; cursor: not-allowed; }

.modal {
  position: fixed;
  inset: 0;
  z-index: 40;
  display: flex;
  align-items: center;
  justify-content: center;
  padding: 24px;
}
.modal:focus { outline: none; }

.modal-backdrop {
  position: fixed;
  inset: 0;
  background: rgba(8, 16, 32, 0.5);
  backdrop-filter: blur(6px);
}

.modal-card {
  position: relative;
  width: min(720px, 95vw);
  max-height: 90vh;
  overflow: hidden;
  display: grid;
  grid-template-rows: auto 1fr;
  background: var(--bg);
  border: 1px solid var(--border);
  border-radius: var(--radius);
  box-shadow: var(--shadow);
}

.modal-head {
  display: flex;
  justify-content: space-between;
  align-items: center;
  padding: 16px 24px;
  border-bottom: 1px solid var(--border);
}

.modal-title { font-size: 18px; margin: 0; }
.modal-body { overflow-y: auto; padding: 24px; }

.detail { display: grid; gap: 14px; }
.detail-title { margin: 0; font-size: 22px; }
.detail-section h4 { margin: 0 0 6px; font-size: 13px; text-transform: uppercase; letter-spacing: 0.1em; color: var(--muted); }
.detail-section ul, .detail-section ol { margin: 0; padding-left: 20px; line-height: 1.6; }

.form { display: grid; gap: 14px; }
.field { display: grid; gap: 6px; }
.label { font-size: 13px; font-weight: 600; }
.input {
  padding: 10px 12px;
  border-radius: 10px;
  border: 1px solid var(--border);
  background: var(--surface);
  color: inherit;
  font: inherit;
}
.input:focus { outline: 2px solid var(--accent); border-color: transparent; }
.input-invalid { border-color: #e5484d; }

.status { margin: 0; font-size: 14px; }
.status-error { color: #e5484d; }
.status-success { color: #30a46c; }
.link { color: var(--accent); font-weight: 600; }

.form-actions { display: flex; flex-wrap: wrap; gap: 10px; }

.footer { border-top: 1px solid var(--border); padding: 24px; text-align: center; font-size: 14px; color: var(--muted); }

@media (max-width: 720px) {
  .nav-links { display: none; }
  .modal { padding: 12px; }
  .modal-body { padding: 16px; }
}

@media (prefers-reduced-motion: reduce) {
  html { scroll-behavior: auto; }
}
"""


def submitted_form_values(event_data: Dict[str, Any]) -> Dict[str, str]:
    """Read the interest fields straight from the submitted form elements.

    Inputs are uncontrolled, so a change event can be lost when the visitor
    submits right after typing. Elements arrive in document order.
    """
    target = event_data.get("currentTarget") or event_data.get("target") or {}
    elements = target.get("elements") or []
    controls: List[Dict[str, Any]] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        if str(element.get("tagName") or "").upper() == "INPUT":
            controls.append(element)

    values: Dict[str, str] = {}
    for name, control in zip(FIELD_NAMES, controls):
        value = control.get("value")
        if value is not None:
            values[name] = str(value)
    return values


@component
def App():
    content = portfolio_content()
    profile = content.profile
    _, set_version = hooks.use_state(0)
    session_ref = hooks.use_ref(None)

    def rerender() -> None:
        set_version(lambda version: version + 1)

    def log_interest(project: ProjectRecord, fields: Dict[str, str]) -> None:
        app.logger.info("Interest captured for %s from %s", project.title, fields.get("email"))

    if session_ref.current is None:
        session_ref.current = PortfolioSession(
            current_backend,
            on_change=rerender,
            on_interest=log_interest,
            close_delay=SETTINGS.close_delay,
            submit_timeout=SETTINGS.submission_timeout + 3,
        )
    session: PortfolioSession = session_ref.current
    dialog = session.dialog

    @event(prevent_default=True)
    def handle_submit(event_data: Dict[str, Any]) -> None:
        session.start_submit(submitted_form_values(event_data))

    def render_dialog_body(dialog_content):
        kind, project = dialog_content
        if kind == "interest":
            return render_interest_form(session.form, session.set_field, handle_submit, session.close)
        return render_project_detail(project, session.open_interest)

    def render_modal():
        kind = session.dialog_kind
        if kind is None:
            return None
        title = "Interest Form" if kind == "interest" else "Project Details"
        try:
            body = dialog.render(render_dialog_body)
        except Exception:
            # Dialog.render has logged the failure and released the scroll lock.
            return None
        return render_dialog(title, body, session.close, dialog.handle_key_event, dialog.scroll_lock.held)

    return html.div(
        {"id": "portfolio-root"},
        html.style(PORTFOLIO_CSS),
        render_header(profile),
        html.main(
            {"class": "page"},
            render_hero(profile),
            render_about(profile),
            render_projects(content.projects, session.open_project),
            render_contact(profile),
        ),
        render_footer(profile),
        render_modal(),
    )


configure(
    app,
    App,
    Options(
        head=(
            {"tagName": "title", "children": [f"{portfolio_content().profile.get('name') or 'Portfolio'} | Portfolio"]},
            {
                "tagName": "meta",
                "attributes": {"name": "viewport", "content": "width=device-width, initial-scale=1"},
            },
            {
                "tagName": "meta",
                "attributes": {"name": "description", "content": str(portfolio_content().profile.get("tagline") or "")},
            },
            {"tagName": "script", "children": [ESCAPE_FORWARD_SCRIPT]},
        )
    ),
)


if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
    )
