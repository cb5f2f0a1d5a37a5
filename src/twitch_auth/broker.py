# src/twitch_auth/broker.py

import logging
import typing
from abc import ABC, abstractmethod

import httpx

from .errors import RevocationError
from .models import CallbackResult, RedirectUriOptions

logger = logging.getLogger(__name__)


class RedirectBroker(typing.Protocol):
    """
    Presents the authorization URL to the user and waits for the provider
    to redirect back. open() resolves exactly once, with a terminal result.
    """

    async def open(self, authorization_url: str) -> CallbackResult: ...

    def build_redirect_uri(self, options: RedirectUriOptions) -> str: ...

    async def revoke(self, token: str, client_id: str, revocation_endpoint: str) -> None: ...


class BaseRedirectBroker(ABC):
    """
    Redirect URI construction and token revocation shared by concrete
    brokers. Subclasses only implement open().
    """

    def __init__(self, http_client: typing.Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._http_client = http_client
        self._timeout = timeout

    @abstractmethod
    async def open(self, authorization_url: str) -> CallbackResult:
        ...

    def build_redirect_uri(self, options: RedirectUriOptions) -> str:
        path = options.path.lstrip("/")
        if options.use_proxy and options.proxy_base_url:
            redirect_uri = f"{options.proxy_base_url.rstrip('/')}/{path}"
        else:
            redirect_uri = f"{options.scheme}://{path}"
        logger.debug("BROKER: build_redirect_uri - Redirect URI: %s", redirect_uri)
        return redirect_uri

    async def revoke(self, token: str, client_id: str, revocation_endpoint: str) -> None:
        data = {"client_id": client_id, "token": token}
        try:
            if self._http_client is not None:
                response = await self._http_client.post(revocation_endpoint, data=data)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(revocation_endpoint, data=data)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RevocationError(
                f"Revocation endpoint returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise RevocationError(f"Could not reach revocation endpoint: {e}") from e
        logger.info("BROKER: revoke - Token revoked")
