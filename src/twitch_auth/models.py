# src/twitch_auth/models.py

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UserProfile(BaseModel):
    """Identity snapshot returned by the Helix /users route."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int  # Helix sends the numeric id as a string
    display_name: str
    email: str
    profile_image_url: str


class SessionState(BaseModel):
    """
    Immutable view of the authenticated session.
    A new instance replaces the old one on every change, so user and
    access_token are always observed together.
    """

    model_config = ConfigDict(frozen=True)

    user: Optional[UserProfile] = None
    access_token: Optional[str] = None
    is_logging_in: bool = False
    is_logging_out: bool = False

    @model_validator(mode="after")
    def check_user_matches_token(self) -> "SessionState":
        if (self.user is None) != (self.access_token is None):
            raise ValueError("user and access_token must be set or cleared together")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.access_token is not None

    def public_view(self) -> Dict[str, Any]:
        # access_token stays inside the process
        return {
            "user": self.user.model_dump() if self.user else None,
            "is_logging_in": self.is_logging_in,
            "is_logging_out": self.is_logging_out,
        }


class RedirectUriOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    use_proxy: bool = True
    proxy_base_url: Optional[str] = None
    scheme: str
    path: str = "redirect"


class AuthorizationRequest(BaseModel):
    """One sign-in attempt's outgoing request. Never reused."""

    model_config = ConfigDict(frozen=True)

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    state: str
    scopes: List[str] = Field(default_factory=list)
    response_type: str = "token"
    force_verify: bool = True

    def url(self) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": self.response_type,
            "scope": " ".join(self.scopes),
            "force_verify": "true" if self.force_verify else "false",
            "state": self.state,
        }
        # quote (not quote_plus): Twitch wants %20 between scopes
        return f"{self.authorization_endpoint}?{urlencode(params, quote_via=quote)}"


class CallbackOutcome(str, Enum):
    SUCCESS = "success"
    CANCEL = "cancel"
    DISMISS = "dismiss"
    ERROR = "error"


class CallbackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: CallbackOutcome
    access_token: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    @property
    def is_authorized(self) -> bool:
        return self.outcome == CallbackOutcome.SUCCESS and self.error != "access_denied"

    @classmethod
    def from_broker_response(cls, response: Mapping[str, Any]) -> "CallbackResult":
        """
        Builds a result from a broker payload shaped like
        {"type": "success", "params": {"access_token": ..., "state": ...}}.
        Unknown types are treated as errors.
        """
        raw_type = str(response.get("type") or "error")
        try:
            outcome = CallbackOutcome(raw_type)
        except ValueError:
            outcome = CallbackOutcome.ERROR
        params = response.get("params") or {}
        return cls(
            outcome=outcome,
            access_token=params.get("access_token"),
            state=params.get("state"),
            error=params.get("error"),
            error_description=params.get("error_description"),
        )

    @classmethod
    def from_redirect_url(cls, url: str) -> "CallbackResult":
        """
        Parses the URL the provider redirected to. The implicit grant puts
        the token in the fragment; errors may arrive in the query string.
        """
        parts = urlsplit(url)
        params: Dict[str, str] = dict(parse_qsl(parts.query))
        params.update(parse_qsl(parts.fragment))
        return cls.from_broker_response({"type": CallbackOutcome.SUCCESS.value, "params": params})
