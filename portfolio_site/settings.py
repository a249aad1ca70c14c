from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping

logger = logging.getLogger(__name__)

DEFAULT_RELAY_API_URL = "https://api.web3forms.com/submit"
DEFAULT_HOSTED_FORM_URL = "https://formspree.io/f/{form_id}"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"


def load_dotenv(path: str = ".env") -> None:
    if not os.path.exists(path):
        return

    try:
        with open(path, "r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip("'").strip('"')
                if key:
                    os.environ.setdefault(key, value)
    except OSError:
        logger.exception("Failed to read %s", path)


def parse_origins(raw: str) -> FrozenSet[str]:
    return frozenset(origin.strip() for origin in raw.split(",") if origin.strip())


def _float_env(source: Mapping[str, str], name: str, default: float, positive: bool = False) -> float:
    raw = source.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default
    if value < 0 or (positive and value == 0):
        logger.warning("Ignoring out-of-range %s=%r, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class Settings:
    submission_backend: str = "form_endpoint"
    form_endpoint_url: str = ""
    relay_api_url: str = DEFAULT_RELAY_API_URL
    relay_access_key: str = ""
    hosted_form_id: str = ""
    hosted_form_url: str = DEFAULT_HOSTED_FORM_URL
    contact_email: str = ""
    submission_timeout: float = 12.0
    close_delay: float = 1.5
    content_path: str = ""
    cors_allowed_origins: FrozenSet[str] = field(default_factory=lambda: parse_origins(DEFAULT_CORS_ORIGINS))


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read deployment settings from the environment.

    Credentials are optional here; a backend that needs a missing one
    reports it when a submission is attempted.
    """
    source = os.environ if environ is None else environ
    return Settings(
        submission_backend=source.get("SUBMISSION_BACKEND", "form_endpoint").strip().lower() or "form_endpoint",
        form_endpoint_url=source.get("FORM_ENDPOINT_URL", "").strip(),
        relay_api_url=source.get("RELAY_API_URL", DEFAULT_RELAY_API_URL).strip() or DEFAULT_RELAY_API_URL,
        relay_access_key=source.get("RELAY_ACCESS_KEY", "").strip(),
        hosted_form_id=source.get("HOSTED_FORM_ID", "").strip(),
        hosted_form_url=source.get("HOSTED_FORM_URL", DEFAULT_HOSTED_FORM_URL).strip() or DEFAULT_HOSTED_FORM_URL,
        contact_email=source.get("CONTACT_EMAIL", "").strip(),
        submission_timeout=_float_env(source, "SUBMISSION_TIMEOUT_SECONDS", 12.0, positive=True),
        close_delay=_float_env(source, "INTEREST_CLOSE_DELAY_SECONDS", 1.5),
        content_path=source.get("PORTFOLIO_CONTENT_PATH", "").strip(),
        cors_allowed_origins=parse_origins(source.get("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)),
    )
