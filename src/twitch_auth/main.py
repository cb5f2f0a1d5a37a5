# src/twitch_auth/main.py

import logging
import typing
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status

from .auth_utils import create_api_client
from .broker import RedirectBroker
from .config import Settings, get_settings
from .errors import AuthError, SignInInProgressError
from .session import AuthSession

logger = logging.getLogger(__name__)


def build_auth_session(broker: RedirectBroker, settings: typing.Optional[Settings] = None) -> AuthSession:
    settings = settings or get_settings()
    return AuthSession(settings=settings, broker=broker, api_client=create_api_client(settings))


def create_app(auth_session: AuthSession) -> FastAPI:
    """
    Exposes the session to UI layers: read the user and status flags,
    trigger sign-in and sign-out. Nothing else of the session leaks out.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("--- Twitch Auth Starting Up ---")
        auth_session.initialize()
        yield
        await auth_session.api_client.aclose()
        logger.info("--- Twitch Auth Shut Down ---")

    app = FastAPI(
        title="Twitch Auth API",
        description="Twitch implicit-grant session for UI layers.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.auth_session = auth_session

    @app.get("/healthz", include_in_schema=False)
    async def healthz():
        return {"ok": True}

    @app.get("/auth/session")
    async def read_session(session: AuthSession = Depends(get_auth_session)):
        return session.state.public_view()

    @app.post("/auth/sign-in")
    async def sign_in(session: AuthSession = Depends(get_auth_session)):
        try:
            await session.sign_in()
        except SignInInProgressError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        except AuthError:
            # Cause is already logged by the session
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign-in failed.")
        return session.state.public_view()

    @app.post("/auth/sign-out")
    async def sign_out(session: AuthSession = Depends(get_auth_session)):
        await session.sign_out()
        return session.state.public_view()

    return app


def get_auth_session(request: Request) -> AuthSession:
    return request.app.state.auth_session
