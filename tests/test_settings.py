import os

import pytest

from portfolio_site.settings import DEFAULT_RELAY_API_URL, load_dotenv, load_settings


@pytest.mark.web
def test_defaults_when_environment_is_empty():
    settings = load_settings({})
    assert settings.submission_backend == "form_endpoint"
    assert settings.relay_api_url == DEFAULT_RELAY_API_URL
    assert settings.submission_timeout == 12.0
    assert settings.close_delay == 1.5
    assert "http://localhost:5173" in settings.cors_allowed_origins


@pytest.mark.web
def test_values_are_read_and_cleaned():
    settings = load_settings(
        {
            "SUBMISSION_BACKEND": " Relay_API ",
            "RELAY_ACCESS_KEY": "abc",
            "SUBMISSION_TIMEOUT_SECONDS": "10",
            "INTEREST_CLOSE_DELAY_SECONDS": "not-a-number",
            "CORS_ALLOWED_ORIGINS": "https://a.example, ,https://b.example",
        }
    )
    assert settings.submission_backend == "relay_api"
    assert settings.relay_access_key == "abc"
    assert settings.submission_timeout == 10.0
    assert settings.close_delay == 1.5
    assert settings.cors_allowed_origins == frozenset({"https://a.example", "https://b.example"})


@pytest.mark.web
def test_negative_numbers_fall_back_to_defaults():
    assert load_settings({"SUBMISSION_TIMEOUT_SECONDS": "-1"}).submission_timeout == 12.0


@pytest.mark.web
def test_zero_timeout_falls_back_but_zero_delay_is_kept():
    settings = load_settings({"SUBMISSION_TIMEOUT_SECONDS": "0", "INTEREST_CLOSE_DELAY_SECONDS": "0"})
    assert settings.submission_timeout == 12.0
    assert settings.close_delay == 0.0


@pytest.mark.web
def test_load_dotenv_does_not_override(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\nPORTFOLIO_TEST_NEW='from file'\nPORTFOLIO_TEST_SET=from file\nnot a pair\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("PORTFOLIO_TEST_NEW", raising=False)
    monkeypatch.setenv("PORTFOLIO_TEST_SET", "from shell")

    load_dotenv(str(env_file))
    assert os.environ["PORTFOLIO_TEST_NEW"] == "from file"
    assert os.environ["PORTFOLIO_TEST_SET"] == "from shell"
    monkeypatch.delenv("PORTFOLIO_TEST_NEW")
