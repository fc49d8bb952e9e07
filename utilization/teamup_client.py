"""Teamup calendar API client and payload parsers."""

from __future__ import annotations

from typing import Any, Iterable

import requests

from utilization.calendar_utils import to_local_date
from utilization.config import DEFAULT_TEAMUP_BASE_URL, teamup_settings_from_env
from utilization.models import AnalysisWindow, Employee, Event
from utilization.runtime_logging import append_runtime_event


class TeamupAPIError(RuntimeError):
    """Request-level failure talking to the scheduling API."""

    def __init__(self, message: str, status_code: int | None = None, reason: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


def parse_event(payload: dict[str, Any]) -> Event:
    """Build an ``Event`` from a Teamup event object."""
    custom = payload.get("custom") or {}
    status = custom.get("status") if isinstance(custom, dict) else None
    if isinstance(status, (list, tuple)):
        status_label = str(status[0]) if status else None
    elif status is not None:
        status_label = str(status)
    else:
        status_label = None

    ids = payload.get("subcalendar_ids")
    if ids is None and payload.get("subcalendar_id") is not None:
        ids = [payload["subcalendar_id"]]
    return Event(
        start=payload.get("start_dt", ""),
        end=payload.get("end_dt") or payload.get("start_dt", ""),
        status_label=status_label,
        title=payload.get("title") or "",
        subcalendar_ids=frozenset(ids or ()),
        event_id=str(payload["id"]) if payload.get("id") is not None else None,
    )


def parse_subcalendar(payload: dict[str, Any]) -> Employee:
    created = payload.get("creation_dt")
    enrollment = None
    if created:
        try:
            enrollment = to_local_date(created)
        except (TypeError, ValueError):
            enrollment = None
    return Employee(id=payload.get("id"), name=str(payload.get("name") or ""), enrollment_date=enrollment)


class TeamupClient:
    """Thin read-only wrapper over the Teamup REST API."""

    def __init__(
        self,
        api_key: str,
        calendar_key: str,
        base_url: str = DEFAULT_TEAMUP_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.calendar_key = calendar_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_env(cls, session: requests.Session | None = None) -> "TeamupClient":
        settings = teamup_settings_from_env()
        return cls(settings["api_key"], settings["calendar_key"], settings["base_url"], session=session)

    def _get(self, path: str, params: list[tuple[str, Any]] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}/{self.calendar_key}{path}"
        headers = {"Teamup-Token": self.api_key, "Content-Type": "application/json"}
        try:
            response = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            append_runtime_event("ERROR", "teamup_transport_error", str(exc), {"path": path}, exc=exc)
            raise TeamupAPIError(f"TeamUp API request failed: {exc}") from exc

        if not response.ok:
            append_runtime_event(
                "ERROR",
                "teamup_http_error",
                f"{response.status_code} {response.reason}",
                {"path": path, "status_code": response.status_code},
            )
            raise TeamupAPIError(
                f"TeamUp API Error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                reason=response.reason or "",
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TeamupAPIError("TeamUp API returned a non-JSON body.", status_code=response.status_code) from exc

    def fetch_subcalendars(self) -> list[Employee]:
        payload = self._get("/subcalendars")
        return [parse_subcalendar(item) for item in payload.get("subcalendars", [])]

    def fetch_events(self, window: AnalysisWindow, subcalendar_ids: Iterable[int | str] | None = None) -> list[Event]:
        params: list[tuple[str, Any]] = [
            ("startDate", window.start.isoformat()),
            ("endDate", window.end.isoformat()),
        ]
        for sub_id in subcalendar_ids or ():
            params.append(("subcalendarId[]", sub_id))
        payload = self._get("/events", params)
        return [parse_event(item) for item in payload.get("events", [])]
