"""Utilities for exporting collected responses to a JSON file."""

from __future__ import annotations

import json
from pathlib import Path
import re

from liveqa_app.core.models import Response

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def default_export_filename(event_name: str) -> str:
    """Build the ``event_<name>_responses.json`` download name."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", event_name.strip()) or "event"
    return f"event_{safe_name}_responses.json"


def save_responses_to_file(file_path: Path, responses: list[Response]) -> Path:
    """Persist the provided responses to disk as a pretty-printed JSON array."""

    file_path = Path(file_path).resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = json.dumps([response.to_document() for response in responses], indent=2)
    file_path.write_text(document + "\n", encoding="utf-8")
    return file_path
