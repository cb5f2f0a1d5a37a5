# src/twitch_auth/auth_utils.py

import logging
import secrets
import typing

import httpx
from pydantic import ValidationError

from .config import Settings, TWITCH_API_BASE_URL, TWITCH_USERS_PATH
from .errors import ProfileFetchError
from .models import UserProfile

logger = logging.getLogger(__name__)

STATE_LENGTH = 30
# RFC 7636 unreserved characters
STATE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"


def generate_state(size: int = STATE_LENGTH) -> str:
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(size))


def states_match(expected_state: str, returned_state: typing.Optional[str]) -> bool:
    if returned_state is None:
        return False
    return secrets.compare_digest(expected_state.encode("utf-8"), returned_state.encode("utf-8"))


# --- Outgoing request decoration ---

class SessionRequestAuth(httpx.Auth):
    """
    Adds the Twitch headers to every request the API client sends.
    Client-Id is always present once set; Authorization only while a
    bearer token is held.
    """

    def __init__(self, client_id: typing.Optional[str] = None):
        self.client_id = client_id
        self.bearer_token: typing.Optional[str] = None

    def auth_flow(self, request: httpx.Request) -> typing.Generator[httpx.Request, httpx.Response, None]:
        if self.client_id:
            request.headers["Client-Id"] = self.client_id
        if self.bearer_token:
            request.headers["Authorization"] = f"Bearer {self.bearer_token}"
        yield request


def create_api_client(settings: Settings, transport: typing.Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=TWITCH_API_BASE_URL,
        timeout=settings.API_TIMEOUT_SECONDS,
        transport=transport,
    )


# --- Helix ---

async def fetch_user_profile(client: httpx.AsyncClient) -> UserProfile:
    """
    Calls the Helix users route with whatever credentials the client's
    auth currently carries and maps the first record.
    """
    try:
        response = await client.get(TWITCH_USERS_PATH)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as e:
        raise ProfileFetchError(
            f"Twitch users route returned {e.response.status_code}",
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        raise ProfileFetchError(f"Could not reach Twitch users route: {e}") from e
    except ValueError as e:
        raise ProfileFetchError("Twitch users route returned invalid JSON") from e

    records = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(records, list) or not records:
        raise ProfileFetchError("Twitch users route returned no user record")

    try:
        user = UserProfile.model_validate(records[0])
    except ValidationError as e:
        raise ProfileFetchError(f"Unexpected user record shape: {e.error_count()} error(s)") from e

    logger.debug("AUTH_UTILS: fetch_user_profile - Loaded profile for user id %s", user.id)
    return user
