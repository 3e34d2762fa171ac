import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
# Load .env.local first (for local development), then .env (fallback)
load_dotenv(".env.local", override=True)  # Local development overrides
load_dotenv()  # Load .env if exists (won't override existing vars)
# General config in a central place


# Service

SERVICE_VERSION = "2.0"

# Domain used to render same-origin style paths and proxy URLs absolute.
# Leave empty to derive it from the incoming request instead.
DEFAULT_PUBLIC_BASE_URL = "https://mapconfig.geolantis.com"

# Locally hosted style documents (<name>.json)
DEFAULT_STYLES_DIR = Path(__file__).resolve().parent.parent / "static" / "styles"


# Database

# Database connection URL
DATABASE_URL = os.getenv("DATABASE_URL")


# Rate limiting (advisory, per process)

RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# Upstream style/tile fetches
PROXY_REQUEST_TIMEOUT = int(os.getenv("PROXY_REQUEST_TIMEOUT", "30"))

# ----------------------------------------------------------------------------
# Provider credentials and app tokens
# ----------------------------------------------------------------------------

# Environment variable holding the operator key for each tile/style provider.
PROVIDER_KEY_ENV = {
    "maptiler": "MAPTILER_API_KEY",
    "clockwork": "CLOCKWORK_API_KEY",
    "bev": "BEV_API_KEY",
}

# Environment variable holding the token each first-party app sends.
APP_TOKEN_ENV = {
    "android": "ANDROID_APP_TOKEN",
    "ios": "IOS_APP_TOKEN",
    "web": "WEB_APP_TOKEN",
}


def _env_bool(name: str, default: str = "false") -> bool:
    """Parse a boolean-like environment variable.

    Accepts a broad set of truthy values to be user-friendly.
    """
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on", "y"}


def get_provider_keys() -> Dict[str, str]:
    """Return the configured provider keys, skipping unset or blank ones.

    Exposed as a function so tests can override the environment at runtime
    and re-query the value without needing to reload this module.
    """
    keys = {}
    for provider, env_name in PROVIDER_KEY_ENV.items():
        value = os.getenv(env_name, "").strip()
        if value:
            keys[provider] = value
    return keys


def get_app_tokens() -> Dict[str, str]:
    """Return the configured app tokens keyed by app type."""
    tokens = {}
    for app_type, env_name in APP_TOKEN_ENV.items():
        value = os.getenv(env_name, "").strip()
        if value:
            tokens[app_type] = value
    return tokens


def get_public_base_url() -> Optional[str]:
    """Return the configured public base URL, or None to use the request's."""
    value = os.getenv("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).strip().rstrip("/")
    return value or None


def get_styles_dir() -> Path:
    """Return the directory holding locally hosted style documents."""
    return Path(os.getenv("STYLES_DIR", str(DEFAULT_STYLES_DIR)))


def get_allowed_cors_origins() -> List[str]:
    """Comma-separated ALLOWED_CORS_ORIGINS; empty means allow all without credentials."""
    raw = os.getenv("ALLOWED_CORS_ORIGINS", "")
    return [o.strip() for o in raw.split(",") if o.strip()]


# Whether to expose configured-credential flags on /health.
HEALTH_SHOW_PROVIDERS = _env_bool("HEALTH_SHOW_PROVIDERS", default="true")
