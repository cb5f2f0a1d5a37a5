"""
Twitch implicit-grant authentication session.

Builds the authorization request, validates the callback state, loads the
user profile and keeps the session headers on the Helix API client.
"""

from .broker import BaseRedirectBroker, RedirectBroker
from .config import Settings, get_settings
from .errors import (
    AuthError,
    InvalidStateError,
    ProfileFetchError,
    RevocationError,
    SignInError,
    SignInInProgressError,
)
from .models import (
    AuthorizationRequest,
    CallbackOutcome,
    CallbackResult,
    RedirectUriOptions,
    SessionState,
    UserProfile,
)
from .session import AuthSession

__all__ = [
    # Session
    "AuthSession",
    # Broker
    "BaseRedirectBroker",
    "RedirectBroker",
    # Config
    "Settings",
    "get_settings",
    # Models
    "AuthorizationRequest",
    "CallbackOutcome",
    "CallbackResult",
    "RedirectUriOptions",
    "SessionState",
    "UserProfile",
    # Errors
    "AuthError",
    "InvalidStateError",
    "ProfileFetchError",
    "RevocationError",
    "SignInError",
    "SignInInProgressError",
]
