import json

import pytest
from click.testing import CliRunner

from conftest import FORM_URL, SECRET
from form_relay.cli.main import app


@pytest.fixture
def relay_env(monkeypatch, tmp_path, field_map_entries):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("EVENTS_WEBHOOK_SECRET", SECRET)
    monkeypatch.setenv("FORM_ACTION_URL", FORM_URL)
    monkeypatch.setenv("FORM_ENTRY_MAP_JSON", json.dumps(field_map_entries))
    return tmp_path


def test_config_valid(relay_env):
    result = CliRunner().invoke(app, ["config"])

    assert result.exit_code == 0, result.output
    assert "Configuration is valid" in result.output
    assert SECRET not in result.output


def test_config_invalid(relay_env, monkeypatch):
    monkeypatch.delenv("FORM_ACTION_URL")

    result = CliRunner().invoke(app, ["config"])

    assert result.exit_code == 1
    assert "FORM_ACTION_URL" in result.output


def test_preview(relay_env):
    body_file = relay_env / "event.json"
    body_file.write_text(json.dumps({"title": "Launch", "date": "2024-03-07", "extra": "x"}))

    result = CliRunner().invoke(app, ["preview", str(body_file)])

    assert result.exit_code == 0, result.output
    assert "entry.1001" in result.output
    assert "4 fields" in result.output
    assert "entry.2001_month=3" in result.output


def test_preview_malformed_body(relay_env):
    body_file = relay_env / "broken.json"
    body_file.write_text("{broken")

    result = CliRunner().invoke(app, ["preview", str(body_file)])

    assert result.exit_code != 0
    assert "Invalid JSON body" in result.output
