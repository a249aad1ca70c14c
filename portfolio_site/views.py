from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Dict, List

from reactpy import html

from portfolio_site.content import CtaKind, MediaKind, ProjectRecord, ServiceDetail, ToolDetail
from portfolio_site.interest_form import FIELD_NAMES, FormState, InterestForm

SCROLL_LOCK_CSS = "body { overflow: hidden; }"

# Escape pressed while focus sits outside the open dialog (on body, or on a
# control that was just disabled) is routed to its Close button.
ESCAPE_FORWARD_SCRIPT = (
    "document.addEventListener('keydown', function (event) {"
    "  if (event.key !== 'Escape' && event.key !== 'Esc') {"
    "    return;"
    "  }"
    "  var modal = document.querySelector('.modal');"
    "  if (!modal || modal.contains(event.target)) {"
    "    return;"
    "  }"
    "  var closer = modal.querySelector('[data-dialog-close]');"
    "  if (closer) {"
    "    closer.click();"
    "  }"
    "});"
)

FIELD_DEFS: Dict[str, Dict[str, Any]] = {
    "name": {"label": "Name *", "input_type": "text", "placeholder": "Your full name", "required": True},
    "email": {
        "label": "Email Address *",
        "input_type": "email",
        "placeholder": "your.email@company.com",
        "required": True,
    },
    "company": {"label": "Company", "input_type": "text", "placeholder": "Your company name"},
    "role": {"label": "Role", "input_type": "text", "placeholder": "e.g. Structural Engineer, Project Manager"},
}


def render_media(project: ProjectRecord):
    if not project.media_reference:
        return html.div({"class": "media media-empty"}, html.span({"class": "meta"}, project.title))
    if project.media_kind is MediaKind.VIDEO:
        return html.div(
            {"class": "media"},
            html.video(
                {
                    "src": project.media_reference,
                    "controls": True,
                    "muted": True,
                    "loop": True,
                    "plays_inline": True,
                    "aria-label": project.title,
                }
            ),
        )
    return html.div({"class": "media"}, html.img({"src": project.media_reference, "alt": project.title}))


def _list_section(heading: str, items, ordered: bool = False):
    tag = html.ol if ordered else html.ul
    return html.section(
        {"class": "detail-section"},
        html.h4(heading),
        tag(*[html.li({"key": str(idx)}, item) for idx, item in enumerate(items)]),
    )


def _text_section(heading: str, text: str):
    return html.section({"class": "detail-section"}, html.h4(heading), html.p(text))


def detail_sections(project: ProjectRecord) -> List[Any]:
    detail = project.detail
    sections: List[Any] = []
    if detail.overview:
        sections.append(_text_section("Overview", detail.overview))
    if isinstance(detail, ToolDetail):
        if detail.how_to_use:
            sections.append(_list_section("How to Use", detail.how_to_use, ordered=True))
        if detail.how_it_works:
            sections.append(_list_section("How It Works", detail.how_it_works))
        if detail.benefits:
            sections.append(_list_section("Benefits", detail.benefits))
    elif isinstance(detail, ServiceDetail):
        if detail.features:
            sections.append(_list_section("Key Features", detail.features))
        if detail.challenges:
            sections.append(_text_section("Challenges", detail.challenges))
        if detail.outcome:
            sections.append(_text_section("Outcome", detail.outcome))
    if detail.technologies:
        sections.append(
            html.section(
                {"class": "detail-section"},
                html.h4("Technologies"),
                html.div(
                    {"class": "tags"},
                    *[html.span({"class": "tag", "key": tech}, tech) for tech in detail.technologies],
                ),
            )
        )
    return sections


def render_project_actions(project: ProjectRecord, on_request_access: Callable[[ProjectRecord], None]):
    if project.cta_kind is CtaKind.INTEREST_FORM:
        return html.div(
            {"class": "form-actions"},
            html.button(
                {"class": "btn primary", "type": "button", "on_click": lambda event: on_request_access(project)},
                "Request Access",
            ),
        )
    if project.cta_kind is CtaKind.SOURCE_LINK:
        return html.div(
            {"class": "form-actions"},
            html.a(
                {"class": "btn primary", "href": project.source_url, "target": "_blank", "rel": "noopener"},
                "View Source",
            ),
        )
    return html.div(
        {"class": "form-actions"},
        html.button({"class": "btn", "type": "button", "title": "Coming soon"}, "Live Demo"),
        html.button({"class": "btn ghost", "type": "button", "title": "Coming soon"}, "Source Code"),
    )


def render_project_detail(project: ProjectRecord, on_request_access: Callable[[ProjectRecord], None]):
    return html.div(
        {"class": "detail"},
        render_media(project),
        html.h3({"class": "detail-title"}, project.title),
        html.p({"class": "meta"}, project.short_description),
        *detail_sections(project),
        render_project_actions(project, on_request_access),
    )


def render_project_card(project: ProjectRecord, on_open: Callable[[ProjectRecord], None]):
    return html.article(
        {"class": "card project-card", "key": project.slug},
        render_media(project),
        html.div(
            {"class": "card-body"},
            html.h3({"class": "card-title"}, project.title),
            html.p({"class": "meta"}, project.short_description),
            html.button(
                {"class": "btn", "type": "button", "on_click": lambda event: on_open(project)},
                "View Details",
            ),
        ),
    )


def render_dialog(title: str, body, on_close, on_key_down, scroll_locked: bool):
    return html.div(
        {"class": "modal", "role": "dialog", "aria-modal": "true", "tab_index": -1, "on_key_down": on_key_down},
        *([html.style(SCROLL_LOCK_CSS)] if scroll_locked else []),
        html.div({"class": "modal-backdrop", "on_click": on_close}),
        html.div(
            {"class": "modal-card"},
            html.div(
                {"class": "modal-head"},
                html.h2({"class": "modal-title"}, title),
                html.button(
                    {
                        "class": "btn ghost",
                        "type": "button",
                        "aria-label": "Close",
                        "data-dialog-close": "true",
                        "auto_focus": True,
                        "on_click": on_close,
                    },
                    "Close",
                ),
            ),
            html.div({"class": "modal-body"}, body),
        ),
    )


def render_interest_form(
    form: InterestForm,
    on_field: Callable[[str, Dict[str, Any]], None],
    on_submit,
    on_cancel,
):
    busy = form.is_submitting
    status = None
    if form.message:
        kind = "success" if form.state is FormState.SUCCEEDED else "error"
        status = html.p({"class": f"status status-{kind}", "role": "status"}, form.message)

    follow_up: List[Any] = []
    if form.follow_up_url:
        follow_up = [
            html.script(f"window.location.href = {json.dumps(form.follow_up_url)};"),
            html.a({"class": "link", "href": form.follow_up_url}, "Open email draft"),
        ]

    fields = []
    for name in FIELD_NAMES:
        field = FIELD_DEFS[name]
        attrs = {
            "id": f"interest-{name}",
            "name": name,
            "class": "input" + (" input-invalid" if form.error_field == name else ""),
            "type": field["input_type"],
            "placeholder": field["placeholder"],
            "default_value": form.values.get(name, ""),
            "disabled": busy,
            "on_change": lambda event, name=name: on_field(name, event),
            "on_blur": lambda event, name=name: on_field(name, event),
        }
        if field.get("required"):
            attrs["required"] = True
        if name == "name":
            attrs["auto_focus"] = True
        fields.append(
            html.div(
                {"class": "field", "key": name},
                html.label({"class": "label", "html_for": f"interest-{name}"}, field["label"]),
                html.input(attrs),
            )
        )

    return html.form(
        {"class": "form", "on_submit": on_submit, "no_validate": True},
        html.p(
            {"class": "meta"},
            "Interested in trying ",
            html.strong(form.project_title),
            "? Please fill out your information below.",
        ),
        *fields,
        *([status] if status else []),
        *follow_up,
        html.div(
            {"class": "form-actions"},
            html.button({"class": "btn ghost", "type": "button", "disabled": busy, "on_click": on_cancel}, "Cancel"),
            html.button(
                {"class": "btn primary", "type": "submit", "disabled": busy or form.state is FormState.SUCCEEDED},
                "Submitting..." if busy else "Submit Interest",
            ),
        ),
    )


def render_header(profile: Dict[str, Any]):
    return html.header(
        {"class": "navbar"},
        html.div({"class": "nav-title"}, profile.get("name") or ""),
        html.nav(
            {"class": "nav-links"},
            html.a({"href": "#about"}, "About"),
            html.a({"href": "#projects"}, "Projects"),
            html.a({"href": "#contact"}, "Contact"),
        ),
    )


def render_hero(profile: Dict[str, Any]):
    return html.section(
        {"class": "hero"},
        html.h1(
            profile.get("headline") or "",
            " ",
            html.span({"class": "accent"}, profile.get("headline_accent") or ""),
        ),
        html.p({"class": "lead"}, profile.get("tagline") or ""),
        html.div(
            {"class": "form-actions centered"},
            html.a({"class": "btn primary", "href": "#projects"}, "View My Work"),
            html.a({"class": "btn", "href": "#contact"}, "Get In Touch"),
        ),
    )


def render_about(profile: Dict[str, Any]):
    return html.section(
        {"id": "about", "class": "card"},
        html.h2("About Me"),
        *[html.p({"class": "meta", "key": str(idx)}, text) for idx, text in enumerate(profile.get("about") or [])],
        html.div(
            {"class": "tags"},
            *[html.span({"class": "tag", "key": skill}, skill) for skill in profile.get("skills") or []],
        ),
    )


def render_projects(projects, on_open: Callable[[ProjectRecord], None]):
    return html.section(
        {"id": "projects"},
        html.h2("Featured Projects"),
        html.div(
            {"class": "grid"},
            *[render_project_card(project, on_open) for project in projects],
        )
        if projects
        else html.div({"class": "meta"}, "No projects to show yet."),
    )


def render_contact(profile: Dict[str, Any]):
    links = []
    if profile.get("email"):
        links.append(html.a({"class": "btn primary", "href": f"mailto:{profile['email']}", "key": "email"}, "Send Email"))
    if profile.get("linkedin"):
        links.append(html.a({"class": "btn", "href": profile["linkedin"], "key": "linkedin"}, "LinkedIn"))
    if profile.get("github"):
        links.append(html.a({"class": "btn", "href": profile["github"], "key": "github"}, "GitHub"))
    return html.section(
        {"id": "contact", "class": "card centered"},
        html.h2("Let's Work Together"),
        html.p({"class": "meta"}, profile.get("contact_blurb") or ""),
        html.div({"class": "form-actions centered"}, *links),
    )


def render_footer(profile: Dict[str, Any]):
    return html.footer(
        {"class": "footer"},
        html.p(f"© {datetime.now().year} {profile.get('name') or ''}. All rights reserved."),
    )
