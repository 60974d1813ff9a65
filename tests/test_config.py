# tests/test_config.py
import json

import pytest

from modules.company_jobs.lib.config import ConfigError, Settings


def test_defaults():
    s = Settings.from_env_and_kwargs({})

    assert s.max_results == 10
    assert s.timeout_for("google_jobs") == 5.0
    assert s.timeout_for("greenhouse") == s.default_timeout
    assert s.dedupe_include_company is False
    assert "netflix" in s.known_companies


def test_kwargs_override_file(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text("max_results: 5\ntimeouts:\n  jsearch: 3\nknown_companies: [Acme]\n", encoding="utf-8")

    s = Settings.from_env_and_kwargs({"settings_path": str(p), "max_results": 7})

    assert s.max_results == 7
    assert s.timeout_for("jsearch") == 3.0
    assert s.timeout_for("google_jobs") == 5.0  # merged over defaults
    assert s.known_companies == ("acme",)


def test_settings_path_from_env(tmp_path, monkeypatch):
    p = tmp_path / "settings.json"
    p.write_text(json.dumps({"dedupe_include_company": "yes"}), encoding="utf-8")
    monkeypatch.setenv("COMPANY_JOBS_SETTINGS", str(p))

    assert Settings.from_env_and_kwargs({}).dedupe_include_company is True


def test_credentials_path_from_env(monkeypatch):
    monkeypatch.setenv("COMPANY_JOBS_CREDENTIALS", "/tmp/creds.json")

    assert Settings.from_env_and_kwargs({}).credentials_path == "/tmp/creds.json"


def test_env_fields_sit_between_file_and_kwargs(tmp_path, monkeypatch):
    p = tmp_path / "settings.yaml"
    p.write_text("max_results: 5\nhttp_timeout: 4\ncredentials_path: from-file.json\n", encoding="utf-8")
    monkeypatch.setenv("COMPANY_JOBS_SETTINGS", str(p))
    monkeypatch.setenv("COMPANY_JOBS_MAX_RESULTS", "6")
    monkeypatch.setenv("COMPANY_JOBS_SKIP_NETWORK", "1")
    monkeypatch.setenv("COMPANY_JOBS_KNOWN_COMPANIES", "Acme, Initech")
    monkeypatch.setenv("COMPANY_JOBS_CREDENTIALS", "from-env.json")

    s = Settings.from_env_and_kwargs({"skip_network": False})

    assert s.http_timeout == 4.0  # file only
    assert s.max_results == 6  # env beats file
    assert s.skip_network is False  # kwargs beat env
    assert s.known_companies == ("acme", "initech")
    assert s.credentials_path == "from-env.json"


def test_bad_env_value_is_a_config_error(monkeypatch):
    monkeypatch.setenv("COMPANY_JOBS_MAX_RESULTS", "lots")

    with pytest.raises(ConfigError, match="Invalid setting value"):
        Settings.from_env_and_kwargs({})


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"bogus": 1}, "Unknown setting"),
        ({"timeouts": {"jsearch": 0}}, "jsearch"),
        ({"timeouts": "fast"}, "mapping"),
        ({"max_results": 0}, "max_results"),
        ({"max_results": "many"}, "Invalid setting value"),
        ({"apify_poll_interval": 40}, "apify_poll_interval"),
    ],
)
def test_invalid_settings_raise_config_error(kwargs, match):
    with pytest.raises(ConfigError, match=match):
        Settings.from_env_and_kwargs(kwargs)


def test_missing_or_bad_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        Settings.from_env_and_kwargs({"settings_path": str(tmp_path / "nope.json")})

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="object"):
        Settings.from_env_and_kwargs({"settings_path": str(bad)})
