from __future__ import annotations

import typing
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from twitch_auth.auth_utils import create_api_client
from twitch_auth.broker import BaseRedirectBroker
from twitch_auth.config import Settings
from twitch_auth.models import CallbackResult
from twitch_auth.session import AuthSession

TEST_CLIENT_ID = "test-client-id"

PROFILE_PAYLOAD = {
    "data": [
        {
            "id": "42",
            "login": "foo",
            "display_name": "foo",
            "email": "f@x.com",
            "profile_image_url": "http://x/y.png",
        }
    ]
}


def state_from_url(url: str) -> str:
    return parse_qs(urlsplit(url).query)["state"][0]


class FakeBroker(BaseRedirectBroker):
    """Scripted broker: `respond` maps the authorization URL to a broker payload."""

    def __init__(self, respond: typing.Callable[[str], dict] | None = None):
        super().__init__()
        self.respond = respond or (lambda url: {"type": "cancel"})
        self.opened_urls: list[str] = []
        self.revocations: list[tuple[str, str, str]] = []
        self.revoke_error: Exception | None = None

    async def open(self, authorization_url: str) -> CallbackResult:
        self.opened_urls.append(authorization_url)
        return CallbackResult.from_broker_response(self.respond(authorization_url))

    async def revoke(self, token: str, client_id: str, revocation_endpoint: str) -> None:
        self.revocations.append((token, client_id, revocation_endpoint))
        if self.revoke_error is not None:
            raise self.revoke_error


def echo_state(access_token: str = "tok123", **extra: str) -> typing.Callable[[str], dict]:
    """Broker response that succeeds and echoes the request's own state."""

    def respond(url: str) -> dict:
        params = {"state": state_from_url(url), "access_token": access_token}
        params.update(extra)
        return {"type": "success", "params": params}

    return respond


class HelixStub:
    """MockTransport handler standing in for the Helix API."""

    def __init__(self, status_code: int = 200, payload: typing.Any = None):
        self.status_code = status_code
        self.payload = PROFILE_PAYLOAD if payload is None else payload
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def settings() -> Settings:
    return Settings(CLIENT_ID=TEST_CLIENT_ID)


@pytest.fixture
def helix() -> HelixStub:
    return HelixStub()


@pytest.fixture
def broker() -> FakeBroker:
    return FakeBroker()


@pytest.fixture
def auth_session(settings: Settings, broker: FakeBroker, helix: HelixStub) -> AuthSession:
    client = create_api_client(settings, transport=httpx.MockTransport(helix))
    session = AuthSession(settings=settings, broker=broker, api_client=client)
    session.initialize()
    return session
