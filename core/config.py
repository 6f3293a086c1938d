"""
Environment configuration for the image service.

Loads the project .env once at import time; credentials themselves are
read from the environment on every call so a key added or removed while
the server runs takes effect on the next request.
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

DEFAULT_CORS_ORIGINS = "http://localhost:3000"


def _read_secret(name: str) -> Optional[str]:
    """Return the env value, treating empty strings as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class ProviderCredentials:
    """
    Access keys for the paid image providers.

    A missing key disables the matching provider; it is never an error.
    """
    together_api_key: Optional[str] = None
    flux_api_key: Optional[str] = None
    unsplash_access_key: Optional[str] = None

    @property
    def hosted_enabled(self) -> bool:
        return bool(self.together_api_key)

    @property
    def direct_api_enabled(self) -> bool:
        return bool(self.flux_api_key)

    @property
    def stock_search_enabled(self) -> bool:
        return bool(self.unsplash_access_key)


def load_credentials() -> ProviderCredentials:
    """
    Read provider credentials from the environment.

    Called once per request; the result is not cached.

    Returns:
        ProviderCredentials: The keys currently configured
    """
    credentials = ProviderCredentials(
        together_api_key=_read_secret("TOGETHER_AI_API_KEY"),
        flux_api_key=_read_secret("FLUX_API_KEY"),
        unsplash_access_key=_read_secret("UNSPLASH_ACCESS_KEY"),
    )
    logger.debug(
        f"Credentials loaded: together={credentials.hosted_enabled} "
        f"bfl={credentials.direct_api_enabled} unsplash={credentials.stock_search_enabled}"
    )
    return credentials


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
