from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from portfolio_site.errors import ConfigurationError

logger = logging.getLogger(__name__)


class CtaKind(str, Enum):
    INTEREST_FORM = "interest_form"
    SOURCE_LINK = "source_link"
    PLACEHOLDER = "placeholder"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov", ".ogg")
TOOL_ONLY_KEYS = ("how_to_use", "how_it_works", "benefits")
SERVICE_ONLY_KEYS = ("features", "challenges", "outcome")


@dataclass(frozen=True)
class ToolDetail:
    overview: str = ""
    how_to_use: Tuple[str, ...] = ()
    how_it_works: Tuple[str, ...] = ()
    benefits: Tuple[str, ...] = ()
    technologies: Tuple[str, ...] = ()

    kind = "tool"


@dataclass(frozen=True)
class ServiceDetail:
    overview: str = ""
    features: Tuple[str, ...] = ()
    technologies: Tuple[str, ...] = ()
    challenges: str = ""
    outcome: str = ""

    kind = "service"


Detail = Union[ToolDetail, ServiceDetail]


@dataclass(frozen=True)
class ProjectRecord:
    title: str
    short_description: str
    media_reference: str
    detail: Detail
    media_kind: MediaKind = MediaKind.IMAGE
    cta_kind: CtaKind = CtaKind.PLACEHOLDER
    source_url: str = ""

    @property
    def slug(self) -> str:
        return slugify(self.title)

    def to_dict(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"kind": self.detail.kind}
        for name, value in vars(self.detail).items():
            detail[name] = list(value) if isinstance(value, tuple) else value
        return {
            "title": self.title,
            "slug": self.slug,
            "short_description": self.short_description,
            "media_reference": self.media_reference,
            "media_kind": self.media_kind.value,
            "cta_kind": self.cta_kind.value,
            "source_url": self.source_url,
            "detail": detail,
        }


@dataclass(frozen=True)
class PortfolioContent:
    profile: Dict[str, Any]
    projects: Tuple[ProjectRecord, ...]
    errors: Tuple[ConfigurationError, ...] = field(default_factory=tuple)

    def find_project(self, title: str) -> ProjectRecord | None:
        wanted = (title or "").strip()
        for project in self.projects:
            if project.title == wanted or project.slug == wanted:
                return project
        return None


PROFILE: Dict[str, Any] = {
    "name": "John Doe",
    "headline": "Building Digital",
    "headline_accent": "Experiences",
    "tagline": (
        "Full-stack developer passionate about creating innovative solutions "
        "and beautiful user experiences."
    ),
    "about": [
        "I'm a passionate full-stack developer with over 5 years of experience "
        "creating digital solutions that make a difference. I specialize in "
        "modern web technologies and have a keen eye for design and user experience.",
        "When I'm not coding, you can find me exploring new technologies, "
        "contributing to open-source projects, or sharing knowledge with the "
        "developer community through blogs and talks.",
    ],
    "skills": ["React", "Node.js", "TypeScript", "Python", "AWS", "Docker"],
    "contact_blurb": (
        "I'm always interested in new opportunities and exciting projects. "
        "Whether you have a project in mind or just want to chat, I'd love to hear from you."
    ),
    "email": "john.doe@example.com",
    "linkedin": "https://linkedin.com/in/johndoe",
    "github": "https://github.com/johndoe",
}

PROJECTS: List[Dict[str, Any]] = [
    {
        "title": "AI-Powered Project Management Tool",
        "short_description": (
            "A comprehensive project management application with AI-driven task "
            "prioritization and timeline optimization."
        ),
        "media_reference": "https://via.placeholder.com/400x200/f3f4f6/6b7280?text=Project+1",
        "cta_kind": "interest_form",
        "detail": {
            "overview": (
                "Plans sprints from a backlog, ranks tasks by impact and risk, "
                "and keeps the timeline realistic as work lands."
            ),
            "how_to_use": [
                "Import a backlog from a CSV export or connect an issue tracker.",
                "Set the team's capacity and the target milestone.",
                "Review the suggested order and accept or pin individual tasks.",
            ],
            "how_it_works": [
                "Each task is scored from estimate, dependency depth and due date.",
                "A scheduler packs scored tasks into sprints under the capacity limit.",
                "Slipped tasks trigger a re-plan that keeps pinned work in place.",
            ],
            "benefits": [
                "Less time spent in planning meetings.",
                "Early warning when a milestone is at risk.",
            ],
            "technologies": ["Python", "FastAPI", "React", "PostgreSQL"],
        },
    },
    {
        "title": "E-commerce Analytics Dashboard",
        "short_description": (
            "Real-time analytics dashboard for e-commerce platforms with advanced "
            "data visualization and reporting features."
        ),
        "media_reference": "https://via.placeholder.com/400x200/f3f4f6/6b7280?text=Project+2",
        "detail": {
            "overview": "Live revenue, funnel and cohort reporting for online stores.",
            "features": [
                "Streaming order ingestion with minute-level refresh.",
                "Funnel and cohort views with saved filters.",
                "Scheduled PDF and CSV reports.",
            ],
            "technologies": ["TypeScript", "Node.js", "ClickHouse", "D3"],
            "challenges": "Keeping dashboards fast while order volume spiked during sales events.",
            "outcome": "Reporting latency dropped from hours to under a minute.",
        },
    },
    {
        "title": "Mobile Fitness Tracking App",
        "short_description": (
            "Cross-platform mobile application for fitness tracking with social "
            "features and personalized workout plans."
        ),
        "media_reference": "https://via.placeholder.com/400x200/f3f4f6/6b7280?text=Project+3",
        "detail": {
            "overview": "Workout logging, progress charts and plans that adapt to the user.",
            "features": [
                "Offline-first workout logging.",
                "Friend challenges and shared streaks.",
                "Plans that adjust to recorded effort.",
            ],
            "technologies": ["React Native", "Firebase"],
            "challenges": "Syncing offline edits from several devices without losing sessions.",
            "outcome": "Retention at four weeks improved for users on adaptive plans.",
        },
    },
    {
        "title": "Smart Home Automation System",
        "short_description": (
            "IoT-based home automation system with voice control and machine "
            "learning for predictive automation."
        ),
        "media_reference": "https://example.com/media/smart-home-demo.mp4",
        "detail": {
            "overview": "Learns household routines and drives lights, heating and blinds.",
            "how_to_use": [
                "Pair devices from the hub's setup page.",
                "Use the app or a voice assistant for manual control.",
                "Approve suggested routines as they appear.",
            ],
            "how_it_works": [
                "The hub records device events over MQTT.",
                "A small model predicts the next action from time and presence.",
            ],
            "benefits": ["Lower heating bills.", "Fewer manual switches during the day."],
            "technologies": ["Python", "MQTT", "scikit-learn", "Raspberry Pi"],
        },
    },
    {
        "title": "Real-time Chat Application",
        "short_description": (
            "Scalable real-time messaging platform with end-to-end encryption and "
            "multimedia sharing capabilities."
        ),
        "media_reference": "https://via.placeholder.com/400x200/f3f4f6/6b7280?text=Project+5",
        "detail": {
            "overview": "Group and direct messaging with encrypted media attachments.",
            "features": [
                "End-to-end encrypted direct and group chats.",
                "Image, video and file sharing.",
                "Presence and typing indicators.",
            ],
            "technologies": ["Go", "WebSockets", "Redis", "React"],
            "challenges": "Fanning out messages to large groups without hot shards.",
            "outcome": "Handled tens of thousands of concurrent connections per node.",
        },
    },
    {
        "title": "Machine Learning API Service",
        "short_description": (
            "RESTful API service providing machine learning models for text "
            "analysis and image recognition."
        ),
        "media_reference": "https://via.placeholder.com/400x200/f3f4f6/6b7280?text=Project+6",
        "cta_kind": "source_link",
        "source_url": "https://github.com/johndoe/ml-api-service",
        "detail": {
            "overview": "Hosted inference endpoints for sentiment, entities and image labels.",
            "features": [
                "Versioned model endpoints.",
                "Batch and streaming inference.",
                "Per-key rate limits and usage reports.",
            ],
            "technologies": ["Python", "PyTorch", "Flask", "Docker", "AWS"],
            "challenges": "Serving several large models on a small GPU budget.",
            "outcome": "Cold start times fell after models were loaded lazily per worker.",
        },
    },
]


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _text(raw: Mapping[str, Any], name: str, title: str | None) -> str:
    value = raw.get(name, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigurationError(f"Field '{name}' must be a string", record=title)
    return value.strip()


def _text_list(raw: Mapping[str, Any], name: str, title: str | None) -> Tuple[str, ...]:
    value = raw.get(name) or []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"Field '{name}' must be a list of strings", record=title)
    items = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigurationError(f"Field '{name}' must be a list of strings", record=title)
        if item.strip():
            items.append(item.strip())
    return tuple(items)


def parse_detail(raw: Any, title: str | None = None) -> Detail:
    """Build the tool or service detail shape from raw content.

    The shape comes from an explicit ``kind`` or is inferred from which
    shape-specific fields are present. Fields from both shapes at once are
    rejected.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Project detail must be a mapping", record=title)

    has_tool = any(raw.get(key) for key in TOOL_ONLY_KEYS)
    has_service = any(raw.get(key) for key in SERVICE_ONLY_KEYS)
    kind = raw.get("kind")
    if kind is None:
        if has_tool and has_service:
            raise ConfigurationError("Project detail mixes tool and service fields", record=title)
        kind = "service" if has_service else "tool"
    if (kind == "tool" and has_service) or (kind == "service" and has_tool):
        raise ConfigurationError(f"Project detail of kind '{kind}' has fields of the other shape", record=title)

    if kind == "tool":
        detail: Detail = ToolDetail(
            overview=_text(raw, "overview", title),
            how_to_use=_text_list(raw, "how_to_use", title),
            how_it_works=_text_list(raw, "how_it_works", title),
            benefits=_text_list(raw, "benefits", title),
            technologies=_text_list(raw, "technologies", title),
        )
    elif kind == "service":
        detail = ServiceDetail(
            overview=_text(raw, "overview", title),
            features=_text_list(raw, "features", title),
            technologies=_text_list(raw, "technologies", title),
            challenges=_text(raw, "challenges", title),
            outcome=_text(raw, "outcome", title),
        )
    else:
        raise ConfigurationError(f"Unknown detail kind '{kind}'", record=title)

    if not any(vars(detail).values()):
        raise ConfigurationError("Project detail needs at least one field", record=title)
    return detail


def infer_media_kind(reference: str) -> MediaKind:
    path = reference.split("?", 1)[0].lower()
    return MediaKind.VIDEO if path.endswith(VIDEO_EXTENSIONS) else MediaKind.IMAGE


def parse_project(raw: Any) -> ProjectRecord:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Project record must be a mapping")

    title = _text(raw, "title", None)
    if not title:
        raise ConfigurationError("Project record is missing 'title'")
    short_description = _text(raw, "short_description", title) or _text(raw, "description", title)
    if not short_description:
        raise ConfigurationError("Project record is missing 'short_description'", record=title)

    media_reference = _text(raw, "media_reference", title) or _text(raw, "image", title)
    try:
        media_kind = MediaKind(raw["media_kind"]) if raw.get("media_kind") else infer_media_kind(media_reference)
        cta_kind = CtaKind(raw.get("cta_kind") or CtaKind.PLACEHOLDER.value)
    except ValueError as exc:
        raise ConfigurationError(str(exc), record=title) from exc

    source_url = _text(raw, "source_url", title)
    if cta_kind is CtaKind.SOURCE_LINK and not source_url:
        raise ConfigurationError("Source link projects need 'source_url'", record=title)

    if "detail" not in raw:
        raise ConfigurationError("Project record is missing 'detail'", record=title)

    return ProjectRecord(
        title=title,
        short_description=short_description,
        media_reference=media_reference,
        detail=parse_detail(raw["detail"], title),
        media_kind=media_kind,
        cta_kind=cta_kind,
        source_url=source_url,
    )


def load_projects(raw_records: Iterable[Any]) -> Tuple[List[ProjectRecord], List[ConfigurationError]]:
    """Parse every record, skipping the malformed ones instead of failing the page."""
    projects: List[ProjectRecord] = []
    errors: List[ConfigurationError] = []
    seen = set()
    for index, raw in enumerate(raw_records):
        try:
            project = parse_project(raw)
            if project.slug in seen:
                raise ConfigurationError(f"Duplicate project title '{project.title}'", record=project.title)
        except ConfigurationError as exc:
            logger.warning("Skipping project record %d (%s): %s", index, exc.record or "untitled", exc.message)
            errors.append(exc)
            continue
        seen.add(project.slug)
        projects.append(project)
    return projects, errors


def load_content(path: str = "") -> PortfolioContent:
    """Load the bundled content, or the JSON document at ``path`` when given."""
    profile: Dict[str, Any] = dict(PROFILE)
    raw_records: Iterable[Any] = PROJECTS
    if path:
        try:
            with open(path, "r", encoding="utf-8") as content_file:
                document = json.load(content_file)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Cannot read portfolio content from {path}: {exc}") from exc
        if not isinstance(document, Mapping):
            raise ConfigurationError(f"Portfolio content in {path} must be a JSON object")
        override = document.get("profile") or {}
        if not isinstance(override, Mapping):
            raise ConfigurationError(f"\"profile\" in {path} must be a JSON object")
        raw_records = document.get("projects") or []
        if not isinstance(raw_records, list):
            raise ConfigurationError(f"\"projects\" in {path} must be a JSON array")
        profile.update(override)

    projects, errors = load_projects(raw_records)
    return PortfolioContent(profile=profile, projects=tuple(projects), errors=tuple(errors))
