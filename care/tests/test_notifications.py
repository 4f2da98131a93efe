import logging

import pytest
import requests

from care.services import dispatch, notifications


class FakeResponse:
    def __init__(self, status=201, sid="SM123"):
        self.status_code = status
        self._sid = sid

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return {"sid": self._sid}


@pytest.fixture
def twilio(settings):
    settings.TWILIO_ACCOUNT_SID = "AC1"
    settings.TWILIO_AUTH_TOKEN = "secret"
    settings.TWILIO_PHONE_NUMBER = "+15550001"
    settings.TWILIO_WHATSAPP_NUMBER = "+15550002"
    return settings


def test_without_credentials_only_logs(monkeypatch, caplog):
    def boom(*a, **kw):
        raise AssertionError("no HTTP call expected")
    monkeypatch.setattr(notifications.requests, "post", boom)

    with caplog.at_level(logging.INFO, logger="care.services.notifications"):
        assert notifications.send_notification("+911", "hello") is False
    assert "SMS to +911: hello" in caplog.text


def test_missing_recipient_is_skipped():
    assert notifications.send_notification("", "hello") is False
    assert notifications.send_notification("+911", "") is False


def test_posts_to_twilio(twilio, monkeypatch):
    calls = []

    def fake_post(url, data=None, auth=None, timeout=None):
        calls.append((url, data, auth))
        return FakeResponse()
    monkeypatch.setattr(notifications.requests, "post", fake_post)

    assert notifications.send_notification("+911", "hi", notifications.CHANNEL_WHATSAPP) is True
    url, data, auth = calls[0]
    assert url.endswith("/Accounts/AC1/Messages.json")
    assert data == {"From": "whatsapp:+15550002", "To": "whatsapp:+911", "Body": "hi"}
    assert auth == ("AC1", "secret")


def test_provider_failure_is_swallowed(twilio, monkeypatch):
    monkeypatch.setattr(notifications.requests, "post", lambda *a, **kw: FakeResponse(status=500))
    assert notifications.send_notification("+911", "hi") is False

    def unreachable(*a, **kw):
        raise requests.ConnectionError("down")
    monkeypatch.setattr(notifications.requests, "post", unreachable)
    assert notifications.send_notification("+911", "hi") is False


def test_run_safely_logs_and_returns_none(caplog):
    def broken():
        raise RuntimeError("smtp down")

    with caplog.at_level(logging.ERROR, logger="care.services.dispatch"):
        assert dispatch.run_safely(broken) is None
    assert "smtp down" in caplog.text


@pytest.mark.asyncio
async def test_fire_and_forget_from_async_code(caplog):
    seen = []

    def broken(x):
        seen.append(x)
        raise RuntimeError("whatsapp down")

    with caplog.at_level(logging.ERROR, logger="care.services.dispatch"):
        dispatch.fire_and_forget(broken, 7)
        await dispatch.drain()
    assert seen == [7]
    assert "whatsapp down" in caplog.text
