"""Configuration constants for the Trilium ETAPI client."""

import os
from pathlib import Path

# Trilium server used when neither --url nor TRILIUM_URL is given.
DEFAULT_BASE_URL: str = "http://localhost:8080"

# ETAPI lives under this prefix of the server URL.
ETAPI_PREFIX: str = "/etapi"

BASE_URL_ENV: str = "TRILIUM_URL"
API_KEY_ENV: str = "TRILIUM_API_KEY"

# ETAPI token location, checked after the environment. First file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/trilium-etapi-token.txt").expanduser(),
    Path("~/.config/secret/trilium-etapi-token.txt").expanduser(),
]

# Seconds before an HTTP request is abandoned by requests.
DEFAULT_TIMEOUT: float = 30.0


def resolve_base_url(explicit: str | None = None) -> str:
    """Return the server URL: explicit value, then environment, then default."""
    return explicit or os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL


def resolve_api_key(explicit: str | None = None) -> str:
    """Return the ETAPI token: explicit value, then environment, then token files."""
    if explicit:
        return explicit
    from_env = os.environ.get(API_KEY_ENV)
    if from_env:
        return from_env
    for token_path in API_TOKEN_FILES:
        try:
            return token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            pass
    msg = f"Cannot find ETAPI token: set ${API_KEY_ENV} or create one of {API_TOKEN_FILES!r}"
    raise RuntimeError(msg)
