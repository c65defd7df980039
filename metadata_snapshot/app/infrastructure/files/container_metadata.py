"""Reads the ECS container metadata file named by ECS_CONTAINER_METADATA_FILE."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from metadata_snapshot.app.domain.errors import ParseError


def read_container_metadata(path: str | Path) -> dict[str, Any]:
    """Return the file's top-level JSON object; raise ParseError on read or decode failure."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise ParseError(f"reading container metadata file {path} failed: {exc}") from exc
    try:
        content = json.loads(raw)
    except ValueError as exc:
        raise ParseError(f"container metadata file {path} is not valid JSON: {exc}") from exc
    if not isinstance(content, dict):
        raise ParseError(f"container metadata file {path} does not hold a JSON object")
    return content
