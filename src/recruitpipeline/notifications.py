"""Outbound notification collaborators fired by round advancement."""

from __future__ import annotations

import json
from http import client
from typing import Any, Protocol, runtime_checkable
from urllib import request

import structlog

from .schemas import Application, ApplicationStatus


@runtime_checkable
class Notifier(Protocol):
    """Delivers the outcome of a final-round push to a candidate."""

    def notify(self, application: Application, status: ApplicationStatus) -> bool:
        """Return True when the notification was handed off."""


class NullNotifier:
    """Notifier that records nothing and sends nothing."""

    def notify(self, application: Application, status: ApplicationStatus) -> bool:
        return False


class HTTPNotifier:
    """POST outcome payloads to an email relay webhook."""

    def __init__(self, endpoint: str | None, api_key: str | None = None, *, timeout: float = 10.0):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._logger = structlog.get_logger(__name__)

    def notify(self, application: Application, status: ApplicationStatus) -> bool:
        if not self._endpoint:
            return False
        if not application.email:
            self._logger.warning("notify.missing_email", application_id=application.application_id)
            return False

        payload = build_notification_payload(application, status)
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
        try:
            with request.urlopen(req, timeout=self._timeout) as resp:
                ok = 200 <= resp.status < 300
        except (OSError, client.HTTPException) as exc:
            self._logger.warning(
                "notify.request_failed",
                application_id=application.application_id,
                error=str(exc),
            )
            return False
        if not ok:
            self._logger.warning("notify.unexpected_status", application_id=application.application_id)
        return ok


def build_notification_payload(application: Application, status: ApplicationStatus) -> dict[str, Any]:
    return {
        "application_id": application.application_id,
        "candidate_id": application.candidate_id,
        "cycle_id": application.cycle_id,
        "to": application.email,
        "name": application.name,
        "outcome": status.value,
    }


__all__ = ["HTTPNotifier", "Notifier", "NullNotifier", "build_notification_payload"]
