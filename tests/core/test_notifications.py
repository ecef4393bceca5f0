from __future__ import annotations

from http import client

import pytest

from recruitpipeline import notifications
from recruitpipeline.notifications import HTTPNotifier, build_notification_payload
from recruitpipeline.schemas import Application, ApplicationStatus


def make_application(**overrides) -> Application:
    data = {
        "application_id": "A-1",
        "candidate_id": "C-1",
        "cycle_id": "F25",
        "name": "Ada Lovelace",
        "email": "ada@example.edu",
    }
    data.update(overrides)
    return Application(**data)


@pytest.mark.parametrize(
    "failure",
    [
        TimeoutError("timed out"),
        client.RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("reset by peer"),
        client.IncompleteRead(b""),
    ],
)
def test_transport_failures_return_false(monkeypatch, failure):
    def fake_urlopen(req, timeout):
        raise failure

    monkeypatch.setattr(notifications.request, "urlopen", fake_urlopen)
    notifier = HTTPNotifier("http://relay.invalid/notify", api_key="k", timeout=0.3)

    assert notifier.notify(make_application(), ApplicationStatus.ACCEPTED) is False


def test_missing_endpoint_or_email_skips_request(monkeypatch):
    def fake_urlopen(req, timeout):
        raise AssertionError("should not be called")

    monkeypatch.setattr(notifications.request, "urlopen", fake_urlopen)

    assert HTTPNotifier(None).notify(make_application(), ApplicationStatus.ACCEPTED) is False
    notifier = HTTPNotifier("http://relay.invalid/notify")
    assert notifier.notify(make_application(email=None), ApplicationStatus.REJECTED) is False


def test_payload_carries_outcome_and_recipient():
    payload = build_notification_payload(make_application(), ApplicationStatus.REJECTED)

    assert payload["to"] == "ada@example.edu"
    assert payload["outcome"] == "REJECTED"
    assert payload["cycle_id"] == "F25"
