# src/twitch_auth/errors.py

from typing import Optional


class AuthError(Exception):
    """Generic authentication failure reported to callers of the session."""


class SignInError(AuthError):
    """
    Raised by AuthSession.sign_in for every in-flow failure.
    The underlying reason is chained as __cause__.
    """

    def __init__(self, message: str = "Sign-in failed"):
        super().__init__(message)


class InvalidStateError(AuthError):
    def __init__(self, expected_state: str, returned_state: Optional[str]):
        self.expected_state = expected_state
        self.returned_state = returned_state
        super().__init__("Authentication state mismatch. Possible CSRF attack.")


class ProfileFetchError(AuthError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RevocationError(AuthError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SignInInProgressError(AuthError):
    def __init__(self):
        super().__init__("A sign-in is already in progress.")
