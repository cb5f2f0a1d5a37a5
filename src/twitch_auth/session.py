# src/twitch_auth/session.py

import logging
import typing

import httpx

from .auth_utils import SessionRequestAuth, fetch_user_profile, generate_state, states_match
from .broker import RedirectBroker
from .config import Settings, TWITCH_AUTHORIZATION_ENDPOINT, TWITCH_REVOCATION_ENDPOINT
from .errors import AuthError, InvalidStateError, SignInError, SignInInProgressError
from .models import AuthorizationRequest, RedirectUriOptions, SessionState, UserProfile

logger = logging.getLogger(__name__)

Subscriber = typing.Callable[[SessionState], None]


class AuthSession:
    """
    Drives the Twitch implicit-grant sign-in and sign-out for one process.

    State is held as an immutable SessionState snapshot. Every change
    swaps in a new snapshot and notifies subscribers, so user and token
    are never seen half-set.
    """

    def __init__(self, settings: Settings, broker: RedirectBroker, api_client: httpx.AsyncClient):
        self.settings = settings
        self.broker = broker
        self.api_client = api_client
        self.request_auth = SessionRequestAuth()
        # Installed up front so the bearer token reaches the wire even before initialize()
        self.api_client.auth = self.request_auth
        self._state = SessionState()
        self._subscribers: typing.List[Subscriber] = []

    # --- Observe surface ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> typing.Optional[UserProfile]:
        return self._state.user

    @property
    def access_token(self) -> typing.Optional[str]:
        return self._state.access_token

    @property
    def is_logging_in(self) -> bool:
        return self._state.is_logging_in

    @property
    def is_logging_out(self) -> bool:
        return self._state.is_logging_out

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, callback: Subscriber) -> typing.Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, **changes: typing.Any) -> None:
        # model_copy skips validation; rebuild so the user/token pairing is checked
        self._state = SessionState.model_validate({**dict(self._state), **changes})
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception:
                logger.exception("AUTH_SESSION: subscriber raised while handling a state change")

    # --- Lifecycle ---

    def initialize(self) -> None:
        """Starts sending the Client-Id header on every API request."""
        self.request_auth.client_id = self.settings.CLIENT_ID
        logger.info("AUTH_SESSION: initialize - Client-Id header installed on API client")

    def build_authorization_request(self) -> AuthorizationRequest:
        redirect_uri = self.broker.build_redirect_uri(
            RedirectUriOptions(
                use_proxy=self.settings.REDIRECT_USE_PROXY,
                proxy_base_url=self.settings.REDIRECT_PROXY_BASE_URL,
                scheme=self.settings.REDIRECT_SCHEME,
                path=self.settings.REDIRECT_PATH,
            )
        )
        return AuthorizationRequest(
            authorization_endpoint=TWITCH_AUTHORIZATION_ENDPOINT,
            client_id=self.settings.CLIENT_ID,
            redirect_uri=redirect_uri,
            state=generate_state(),
            scopes=self.settings.scopes,
            response_type=self.settings.RESPONSE_TYPE,
            force_verify=self.settings.FORCE_VERIFY,
        )

    async def sign_in(self) -> None:
        """
        Runs one authorization attempt. Returns quietly when the user
        cancels or denies access; raises SignInError for anything else
        that goes wrong, leaving the previous session in place.
        """
        if self._state.is_logging_in:
            raise SignInInProgressError()

        self._set_state(is_logging_in=True)
        try:
            auth_request = self.build_authorization_request()
            logger.info("AUTH_SESSION: sign_in - Opening authorization URL. Redirect URI: %s", auth_request.redirect_uri)

            result = await self.broker.open(auth_request.url())

            if not result.is_authorized:
                logger.info(
                    "AUTH_SESSION: sign_in - Flow ended without authorization (outcome=%s, error=%s)",
                    result.outcome.value,
                    result.error,
                )
                return

            if not states_match(auth_request.state, result.state):
                raise InvalidStateError(auth_request.state, result.state)

            if not result.access_token:
                raise AuthError(f"Callback carried no access token (error={result.error})")

            self.request_auth.bearer_token = result.access_token
            user = await fetch_user_profile(self.api_client)

            self._set_state(user=user, access_token=result.access_token)
            logger.info("AUTH_SESSION: sign_in - Signed in as %r (id %s)", user.display_name, user.id)
        except Exception as e:
            logger.warning("AUTH_SESSION: sign_in - Sign-in failed: %r", e, exc_info=True)
            raise SignInError() from e
        finally:
            # The committed snapshot decides which bearer token stays installed
            self.request_auth.bearer_token = self._state.access_token
            self._set_state(is_logging_in=False)

    async def sign_out(self) -> None:
        """Revokes the token if possible, then always clears the local session."""
        self._set_state(is_logging_out=True)
        try:
            token = self._state.access_token
            if token:
                try:
                    await self.broker.revoke(token, self.settings.CLIENT_ID, TWITCH_REVOCATION_ENDPOINT)
                except Exception as e:
                    logger.warning("AUTH_SESSION: sign_out - Token revocation failed, continuing: %r", e)
            else:
                logger.debug("AUTH_SESSION: sign_out - No token held, skipping revocation")
        finally:
            self.request_auth.bearer_token = None
            self._set_state(user=None, access_token=None, is_logging_out=False)
            logger.info("AUTH_SESSION: sign_out - Local session cleared")
