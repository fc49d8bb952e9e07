from __future__ import annotations

import json

from utilization.config import (
    DEFAULTS,
    default_engine_config,
    engine_config_from_dict,
    load_config,
    migrate_config,
    teamup_settings_from_env,
)
from utilization.models import Employee
from utilization.statuses import normalize_status


def test_defaults_produce_org_exclusions():
    config = default_engine_config()
    assert config.is_excluded(Employee(1, "Bill Ahern"))
    assert config.is_excluded(Employee(2, "Future Work"))
    assert config.is_exempt(Employee(3, "Liz Quinn"))
    assert "holiday party" in config.excluded_holiday_titles
    assert config.validation_tolerance == 0.01
    assert config.local_timezone is None


def test_migrate_config_reports_unknown_keys_and_resets_invalid_values():
    config, warnings, unknown = migrate_config(
        {
            "excluded_employees": "Solo Person",
            "utilization_exempt_employees": ["Liz Quinn", 42, "Liz Quinn"],
            "validation_tolerance": "lots",
            "local_timezone": "Mars/Olympus",
            "status_synonyms": ["not", "a", "dict"],
            "theme": "dark",
        }
    )
    assert config["excluded_employees"] == ["Solo Person"]
    assert config["utilization_exempt_employees"] == ["Liz Quinn"]
    assert config["validation_tolerance"] == DEFAULTS["validation_tolerance"]
    assert config["local_timezone"] == ""
    assert config["status_synonyms"] == {}
    assert unknown == ["theme"]
    assert any("validation_tolerance" in w for w in warnings)
    assert any("local_timezone" in w for w in warnings)
    assert any("utilization_exempt_employees[1]" in w for w in warnings)


def test_migrate_config_non_dict_payload():
    config, warnings, unknown = migrate_config(["nope"])
    assert config == DEFAULTS
    assert warnings
    assert unknown == []


def test_engine_config_from_dict_merges_synonyms():
    config = engine_config_from_dict({"status_synonyms": {"Client Site": "Field"}, "local_timezone": "America/New_York"})
    assert normalize_status("client_site", config.synonym_table) == "field"
    assert normalize_status("wfh", config.synonym_table) == "work from home"
    assert config.local_timezone == "America/New_York"


def test_load_config_from_env_file(tmp_path, monkeypatch):
    path = tmp_path / "utilization.json"
    path.write_text(json.dumps({"utilization_exempt_employees": ["Pat Doe"], "extra": 1}), encoding="utf-8")
    monkeypatch.setenv("UTILIZATION_CONFIG", str(path))

    config, warnings = load_config()
    assert config.utilization_exempt_employees == frozenset({"Pat Doe"})
    assert any("extra" in w for w in warnings)


def test_load_config_falls_back_on_missing_or_broken_files(tmp_path, monkeypatch):
    monkeypatch.delenv("UTILIZATION_CONFIG", raising=False)
    config, warnings = load_config()
    assert config == default_engine_config()
    assert warnings == []

    missing, warnings = load_config(tmp_path / "absent.json")
    assert missing == default_engine_config()
    assert "not found" in warnings[0]

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    config, warnings = load_config(broken)
    assert config == default_engine_config()
    assert "Could not parse" in warnings[0]


def test_teamup_settings_from_env(monkeypatch):
    monkeypatch.setenv("TEAMUP_API_KEY", "token")
    monkeypatch.setenv("TEAMUP_CALENDAR_KEY", "ks123")
    monkeypatch.delenv("TEAMUP_BASE_URL", raising=False)
    settings = teamup_settings_from_env()
    assert settings == {"api_key": "token", "calendar_key": "ks123", "base_url": "https://api.teamup.com"}


def test_engine_config_is_hashable_and_synonyms_are_read_only():
    config = engine_config_from_dict({"status_synonyms": {"Client Site": "Field"}})
    assert hash(config) == hash(engine_config_from_dict({"status_synonyms": {"Client Site": "Field"}}))

    table = config.synonym_table
    table["client site"] = "office"
    assert normalize_status("client site", config.synonym_table) == "field"
