"""Per-process state shared by request handlers.

Built once at startup and stored on ``app.state.context`` so handlers never
reach for module-level singletons.
"""

import hmac
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from core import config
from services.mapconfig.providers import ProviderCredentials
from services.mapconfig.sanitizer import ConfigSanitizer
from services.mapconfig.style_documents import list_static_styles
from services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    credentials: ProviderCredentials
    app_tokens: Dict[str, str]
    rate_limiter: RateLimiter
    styles_dir: Path
    public_base_url: Optional[str] = None
    static_styles: List[str] = field(default_factory=list)
    proxy_timeout: int = 30

    def app_type_for_token(self, token: Optional[str]) -> Optional[str]:
        """Return the app type owning ``token``, or None if it is not recognised."""
        if not token:
            return None
        for app_type, app_token in self.app_tokens.items():
            if app_token and hmac.compare_digest(token.encode(), app_token.encode()):
                return app_type
        return None

    def sanitizer(self, base_url: str) -> ConfigSanitizer:
        return ConfigSanitizer(
            credentials=self.credentials,
            base_url=self.public_base_url or base_url,
            static_styles=self.static_styles,
        )


def build_service_context() -> ServiceContext:
    """Snapshot configuration from the environment into a ServiceContext."""
    styles_dir = config.get_styles_dir()
    context = ServiceContext(
        credentials=ProviderCredentials.from_env(),
        app_tokens=config.get_app_tokens(),
        rate_limiter=RateLimiter(
            limit=config.RATE_LIMIT_REQUESTS,
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
        ),
        styles_dir=styles_dir,
        public_base_url=config.get_public_base_url(),
        static_styles=list_static_styles(styles_dir),
        proxy_timeout=config.PROXY_REQUEST_TIMEOUT,
    )
    missing = [name for name, ok in context.credentials.configured().items() if not ok]
    if missing:
        logger.warning(f"No API key configured for: {', '.join(missing)}")
    if not context.app_tokens:
        logger.info("No app tokens configured; all callers are treated as anonymous")
    return context
