"""Status label normalization and canonical category keys."""

from __future__ import annotations

import re
from typing import Mapping


FIELD = "field"
OFFICE = "office"
WORK_FROM_HOME = "work from home"
VACATION = "vacation"
SICK = "sick"
OVERTIME = "overtime"
HOLIDAY = "holiday"
UNKNOWN = "unknown"

CANONICAL_CATEGORIES = (FIELD, OFFICE, WORK_FROM_HOME, VACATION, SICK, OVERTIME, HOLIDAY, UNKNOWN)
WORKING_CATEGORIES = frozenset({FIELD, OFFICE})

STATUS_SYNONYMS: dict[str, str] = {
    "wfh": WORK_FROM_HOME,
    "home": WORK_FROM_HOME,
    "remote": WORK_FROM_HOME,
    "working from home": WORK_FROM_HOME,
    "work at home": WORK_FROM_HOME,
    "in office": OFFICE,
    "office day": OFFICE,
    "field work": FIELD,
    "in field": FIELD,
    "on site": FIELD,
    "onsite": FIELD,
    "pto": VACATION,
    "vacation day": VACATION,
    "time off": VACATION,
    "sick day": SICK,
    "sick leave": SICK,
    "ill": SICK,
    "ot": OVERTIME,
    "holidays": HOLIDAY,
}

_SEPARATORS = re.compile(r"[_\-/]+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def clean_label(raw_label: object) -> str:
    """Lower-case, trim and collapse a raw label without applying synonyms."""
    if raw_label is None:
        return ""
    text = _SEPARATORS.sub(" ", str(raw_label).lower())
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_status(raw_label: object, synonyms: Mapping[str, str] | None = None) -> str:
    """Map a free-text status label to a category key.

    Unrecognized labels come back as their cleaned text, so new statuses turn
    into ad-hoc categories instead of errors. A missing label maps to ``unknown``.
    """
    label = clean_label(raw_label)
    if not label:
        return UNKNOWN
    table = STATUS_SYNONYMS if synonyms is None else synonyms
    if label in table:
        return table[label]
    return label


def merged_synonyms(overrides: Mapping[str, str] | None) -> dict[str, str]:
    table = dict(STATUS_SYNONYMS)
    for key, value in (overrides or {}).items():
        table[clean_label(key)] = clean_label(value) or UNKNOWN
    return table
