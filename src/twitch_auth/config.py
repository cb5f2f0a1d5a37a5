# src/twitch_auth/config.py

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# .env is at the project root, two levels up from src/twitch_auth/
CONFIG_FILE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT_DIR = CONFIG_FILE_DIR.parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

if ENV_FILE_PATH.exists():
    load_dotenv(dotenv_path=ENV_FILE_PATH, override=False)
    logger.info("CONFIG: Loaded .env file from: %s", ENV_FILE_PATH)
else:
    logger.debug("CONFIG: .env file not found at %s. Relying on environment variables.", ENV_FILE_PATH)

# --- Twitch endpoints (fixed, not configurable per call) ---
TWITCH_AUTHORIZATION_ENDPOINT = "https://id.twitch.tv/oauth2/authorize"
TWITCH_REVOCATION_ENDPOINT = "https://id.twitch.tv/oauth2/revoke"
TWITCH_API_BASE_URL = "https://api.twitch.tv/helix"
TWITCH_USERS_PATH = "/users"


class Settings(BaseSettings):
    # === Twitch application ===
    CLIENT_ID: str

    # === Authorization request ===
    RESPONSE_TYPE: str = "token"
    # Space separated, exactly as Twitch expects it in the scope parameter
    SCOPE: str = "openid user:read:email user:read:follows"
    FORCE_VERIFY: bool = True

    # === Redirect URI components ===
    REDIRECT_USE_PROXY: bool = True
    REDIRECT_PROXY_BASE_URL: str = "https://auth.expo.io"
    REDIRECT_SCHEME: str = "twitchauth"
    REDIRECT_PATH: str = "redirect"

    # === Helix API client ===
    API_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("SCOPE", mode="before")
    @classmethod
    def normalize_scope(cls, v: Any) -> str:
        # Accept a list from direct instantiation as well as the env string
        if isinstance(v, (list, tuple)):
            return " ".join(str(scope).strip() for scope in v if str(scope).strip())
        return v

    @property
    def scopes(self) -> List[str]:
        return [scope for scope in self.SCOPE.split(" ") if scope]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    logger.info("CONFIG: Client ID is set: %s", "Yes" if settings.CLIENT_ID else "NO")
    logger.info("CONFIG: Scopes: %s", settings.scopes)
    return settings
