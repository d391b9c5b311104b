"""Environment-driven configuration for the research tool server.

Recognised environment variables:
  - ENABLED_TOOLS           : comma-separated tool groups to register (default: all)
  - RESEARCH_TMP_DIR        : scratch directory for saved results (default: ./tmp)
  - LOG_LEVEL               : logging level name (default: INFO)
  - PERPLEXITY_API_KEY, SERP_API_KEY, GITHUB_TOKEN : per-source credentials

Values are read from the process environment after ``.env.local`` and
``.env`` have been loaded; variables already set in the environment win.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from errors import ErrorKind, ToolError

ENV_FILES = (".env.local", ".env")

LOGGER = logging.getLogger(__name__)


def load_environment(base_dir: Path | None = None) -> None:
    """Load dotenv files from base_dir (default: current working directory)."""
    base = base_dir or Path.cwd()
    for name in ENV_FILES:
        path = base / name
        if path.exists():
            load_dotenv(path, override=False)
            LOGGER.debug("Loaded environment from %s", path)


def require_env(name: str) -> str:
    """Return a credential from the environment or fail as a configuration error."""
    value = os.getenv(name)
    if not value:
        raise ToolError(f"{name} not found in environment variables", ErrorKind.CONFIGURATION)
    return value


def scratch_dir() -> Path:
    configured = os.getenv("RESEARCH_TMP_DIR")
    if configured:
        return Path(configured)
    return Path.cwd() / "tmp"


def enabled_tool_groups() -> list[str] | None:
    """Parse ENABLED_TOOLS; None means every tool group is registered."""
    raw = os.getenv("ENABLED_TOOLS", "").strip()
    if not raw:
        return None
    groups = [name.strip() for name in raw.split(",") if name.strip()]
    return groups or None


def log_level() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
