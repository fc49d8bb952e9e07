"""Configuration defaults, sanitisation and loading."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

from utilization.models import EngineConfig
from utilization.statuses import merged_synonyms


CONFIG_ENV_VAR = "UTILIZATION_CONFIG"
TEAMUP_API_KEY_ENV_VAR = "TEAMUP_API_KEY"
TEAMUP_CALENDAR_KEY_ENV_VAR = "TEAMUP_CALENDAR_KEY"
TEAMUP_BASE_URL_ENV_VAR = "TEAMUP_BASE_URL"
DEFAULT_TEAMUP_BASE_URL = "https://api.teamup.com"

DEFAULTS: dict[str, Any] = {
    "excluded_employees": ["Bill Ahern", "Harry Cannon", "Matt Mokracek", "Paul Yetman"],
    "utilization_exempt_employees": ["Jennifer Lengyel", "Liz Quinn", "Linda Torok"],
    "non_employee_calendars": ["Future Work", "Holidays"],
    "holiday_calendars": ["Holidays"],
    "excluded_holiday_titles": ["Holiday Party"],
    "ignored_title_keywords": ["tech on call"],
    "status_synonyms": {},
    "validation_tolerance": 0.01,
    "local_timezone": "",
}

LIST_KEYS = (
    "excluded_employees",
    "utilization_exempt_employees",
    "non_employee_calendars",
    "holiday_calendars",
    "excluded_holiday_titles",
    "ignored_title_keywords",
)


def _sanitize_name_list(raw: Any, key: str, warnings: list[str]) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple, set, frozenset)):
        warnings.append(f"{key} invalid and reset to default.")
        return list(DEFAULTS[key])
    names: list[str] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, str) or not item.strip():
            warnings.append(f"{key}[{idx}] ignored because it is not a non-empty string.")
            continue
        if item.strip() not in names:
            names.append(item.strip())
    return names


def _sanitize_synonyms(raw: Any, warnings: list[str]) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        warnings.append("status_synonyms ignored because it is not an object.")
        return {}
    synonyms: dict[str, str] = {}
    for label, category in raw.items():
        if not isinstance(label, str) or not isinstance(category, str):
            warnings.append(f"status_synonyms entry {label!r} ignored because it is not text.")
            continue
        synonyms[label] = category
    return synonyms


def _valid_timezone(name: str) -> bool:
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def migrate_config(raw_config: Any) -> tuple[dict, list[str], list[str]]:
    """Overlay a raw mapping on the defaults and return (config, warnings, unknown_keys)."""
    warnings: list[str] = []
    unknown_keys: list[str] = []
    config = deepcopy(DEFAULTS)
    if raw_config is None:
        payload: dict = {}
    elif isinstance(raw_config, dict):
        payload = raw_config
    else:
        warnings.append("Configuration is not a JSON object; defaults used.")
        payload = {}

    for k, v in payload.items():
        if k in config:
            config[k] = v
        else:
            unknown_keys.append(str(k))

    for key in LIST_KEYS:
        config[key] = _sanitize_name_list(config.get(key), key, warnings)
    config["status_synonyms"] = _sanitize_synonyms(config.get("status_synonyms"), warnings)

    try:
        tolerance = float(config["validation_tolerance"])
        if tolerance < 0:
            raise ValueError(tolerance)
        config["validation_tolerance"] = tolerance
    except (TypeError, ValueError):
        config["validation_tolerance"] = float(DEFAULTS["validation_tolerance"])
        warnings.append("validation_tolerance invalid and reset to default.")

    tz = config.get("local_timezone") or ""
    if not isinstance(tz, str):
        tz = ""
        warnings.append("local_timezone invalid and reset to default.")
    tz = tz.strip()
    if tz and not _valid_timezone(tz):
        warnings.append(f"local_timezone {tz!r} is not a known time zone; dates are taken as supplied.")
        tz = ""
    config["local_timezone"] = tz

    return config, warnings, sorted(unknown_keys)


def engine_config_from_dict(data: dict) -> EngineConfig:
    config, _, _ = migrate_config(data)
    return EngineConfig(
        excluded_employees=frozenset(config["excluded_employees"]),
        utilization_exempt_employees=frozenset(config["utilization_exempt_employees"]),
        non_employee_calendars=frozenset(config["non_employee_calendars"]),
        holiday_calendars=frozenset(config["holiday_calendars"]),
        excluded_holiday_titles=frozenset(t.lower() for t in config["excluded_holiday_titles"]),
        ignored_title_keywords=tuple(k.lower() for k in config["ignored_title_keywords"]),
        status_synonyms=tuple(sorted(merged_synonyms(config["status_synonyms"]).items())),
        validation_tolerance=float(config["validation_tolerance"]),
        local_timezone=config["local_timezone"] or None,
    )


def default_engine_config() -> EngineConfig:
    return engine_config_from_dict(DEFAULTS)


def _expand_path(path_value: str | Path | None) -> Path | None:
    if path_value is None:
        return None
    text = str(path_value).strip()
    if not text:
        return None
    return Path(os.path.expandvars(os.path.expanduser(text)))


def load_config(path: str | Path | None = None) -> tuple[EngineConfig, list[str]]:
    """Load engine configuration from a JSON file, falling back to defaults."""
    config_path = _expand_path(path) if path is not None else _expand_path(os.getenv(CONFIG_ENV_VAR, ""))
    if config_path is None:
        return default_engine_config(), []
    if not config_path.exists():
        return default_engine_config(), [f"Configuration file {config_path} not found; defaults used."]
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return default_engine_config(), [f"Could not parse configuration file {config_path}; defaults used."]
    config, warnings, unknown = migrate_config(payload)
    if unknown:
        warnings.append(f"Unknown configuration keys ignored: {', '.join(unknown)}.")
    return engine_config_from_dict(config), warnings


def teamup_settings_from_env() -> dict[str, str]:
    return {
        "api_key": os.getenv(TEAMUP_API_KEY_ENV_VAR, ""),
        "calendar_key": os.getenv(TEAMUP_CALENDAR_KEY_ENV_VAR, ""),
        "base_url": os.getenv(TEAMUP_BASE_URL_ENV_VAR, "") or DEFAULT_TEAMUP_BASE_URL,
    }
