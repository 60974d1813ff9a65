# tests/test_main.py
import pytest

from modules.company_jobs.lib.config import ConfigError
from modules.company_jobs.main import run


def test_run_returns_wire_dict():
    out = run(company="Acme", skip_network=True)

    assert out["success"] is False
    assert out["jobs"] == []
    assert out["sources"] == []
    assert out["suggestions"][0]["atsSource"] == "Career Page Suggestion"


def test_run_requires_company():
    with pytest.raises(ConfigError, match="company"):
        run(skip_network=True)


def test_run_rejects_unknown_mode():
    with pytest.raises(ValueError, match="mode"):
        run(company="Acme", mode="warp", skip_network=True)


def test_run_rejects_unknown_setting():
    with pytest.raises(ConfigError):
        run(company="Acme", colour="blue")
