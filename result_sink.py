"""Scratch-file sink for rendered tool results."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from config import scratch_dir

LOGGER = logging.getLogger(__name__)


def timestamp_slug(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with ':' and '.' replaced so it is filename-safe."""
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return f"{moment:%Y-%m-%dT%H-%M-%S}-{moment.microsecond // 1000:03d}Z"


def result_filename(source: str, label: str | None, ext: str = "md", now: datetime | None = None) -> str:
    parts = [source]
    if label:
        parts.append(label)
    parts.append(timestamp_slug(now))
    return f"{'-'.join(parts)}.{ext}"


def save_result(source: str, label: str | None, content: str, ext: str = "md") -> Path | None:
    """Write content to the scratch directory.

    Returns the written path, or None when the write failed. Failures are
    logged and never raised: the tool's text result does not depend on them.
    """
    try:
        directory = scratch_dir()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / result_filename(source, label, ext)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        LOGGER.warning("Failed to save %s result to scratch directory: %s", source, exc)
        return None

    LOGGER.info("Saved %s result to %s", source, path)
    return path


def save_json(source: str, label: str | None, data: Any) -> Path | None:
    return save_result(source, label, json.dumps(data, indent=2), ext="json")
