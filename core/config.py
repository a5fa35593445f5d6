"""Centralized configuration for the newsdesk client."""

import os
import logging

log = logging.getLogger("newsdesk.config")

# =========================
# Discord (presentation shell)
# =========================
DISCORD_TOKEN: str = os.environ.get("DISCORD_TOKEN", "")
COMMAND_PREFIX: str = os.getenv("COMMAND_PREFIX", "!")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# =========================
# Remote news service
# =========================
NEWSDESK_API_URL: str = os.getenv("NEWSDESK_API_URL", "http://localhost:8080/api")
NEWS_LIST_PATH: str = os.getenv("NEWS_LIST_PATH", "/news-list")
MARKET_INDICES_PATH: str = os.getenv("MARKET_INDICES_PATH", "/market-indices")
SUMMARIZE_PATH: str = os.getenv("SUMMARIZE_PATH", "/summarize")
REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))

# =========================
# List surface
# =========================
SEARCH_DEBOUNCE_SECONDS: float = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))
DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = 10
PAGE_SIZE_CHOICES: tuple = (10, 20, 50)
# Off: out-of-set pageSize values from a location are kept as-is.
STRICT_PAGE_SIZE: bool = os.getenv("STRICT_PAGE_SIZE", "0").lower() in ("1", "true", "yes")

# =========================
# Rendering
# =========================
EMBED_DESCRIPTION_MAX: int = int(os.getenv("EMBED_DESCRIPTION_MAX", "4000"))
EMBED_COLOR: int = 0x1565C0

# =========================
# Monitoring
# =========================
FAILURE_ALERT_THRESHOLD: int = int(os.getenv("FAILURE_ALERT_THRESHOLD", "5"))


def validate_required_env() -> None:
    """Validate that required environment variables are set. Call at startup."""
    missing = []
    if not DISCORD_TOKEN:
        missing.append("DISCORD_TOKEN")
    if missing:
        raise EnvironmentError(
            f"Variables d'environnement requises manquantes: {', '.join(missing)}"
        )
    if not NEWSDESK_API_URL.startswith(("http://", "https://")):
        log.warning("NEWSDESK_API_URL ne ressemble pas a une URL HTTP: %s", NEWSDESK_API_URL)
    if REQUEST_TIMEOUT <= 0:
        log.warning("REQUEST_TIMEOUT=%s invalide, les requetes echoueront immediatement.", REQUEST_TIMEOUT)
    if SEARCH_DEBOUNCE_SECONDS < 0:
        log.warning("SEARCH_DEBOUNCE_SECONDS negatif (%s), traite comme 0.", SEARCH_DEBOUNCE_SECONDS)
