import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from api import DEFAULT_TIMEOUT_MS, build_api_config
from models import ApiConfig

log = logging.getLogger(__name__)

CLAUDE_DIR = Path.home() / ".claude"
CACHE_FILE = CLAUDE_DIR / "zai-usage-cache.json"
CACHE_TTL_MS = 5000
REQUEST_TIMEOUT_MS = DEFAULT_TIMEOUT_MS

BASE_URL_VAR = "ANTHROPIC_BASE_URL"
AUTH_TOKEN_VAR = "ANTHROPIC_AUTH_TOKEN"


def _settings_candidates(project_dir: Path, home: Path) -> list[Path]:
    # Highest priority first; settings.local.json is usually git-ignored
    return [
        project_dir / ".claude" / "settings.local.json",
        project_dir / ".claude" / "settings.json",
        home / ".claude" / "settings.json",
    ]


def load_claude_env(project_dir: Path | None = None, home: Path | None = None) -> dict[str, str] | None:
    """Return the base URL and token from the first Claude settings file defining both."""
    project_dir = project_dir or Path.cwd()
    home = home or Path.home()

    for path in _settings_candidates(project_dir, home):
        if not path.exists():
            continue
        try:
            settings = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Failed to read %s: %s", path, exc)
            continue

        env = settings.get("env") if isinstance(settings, dict) else None
        if not isinstance(env, dict):
            continue
        base_url = env.get(BASE_URL_VAR)
        auth_token = env.get(AUTH_TOKEN_VAR)
        if isinstance(base_url, str) and isinstance(auth_token, str):
            return {BASE_URL_VAR: base_url, AUTH_TOKEN_VAR: auth_token}

    return None


def load_api_config(
    environ: Mapping[str, str] | None = None,
    project_dir: Path | None = None,
    home: Path | None = None,
) -> ApiConfig | None:
    """Resolve credentials from the environment, falling back to Claude settings files."""
    environ = os.environ if environ is None else environ
    settings_env = load_claude_env(project_dir, home) or {}

    base_url = environ.get(BASE_URL_VAR) or settings_env.get(BASE_URL_VAR, "")
    auth_token = environ.get(AUTH_TOKEN_VAR) or settings_env.get(AUTH_TOKEN_VAR, "")
    return build_api_config(base_url, auth_token, REQUEST_TIMEOUT_MS)
