"""JSON log formatting for AniVault.

Each record becomes one JSON object per line. The per-file fields (slot,
file, plan, outcome) are top-level keys, so a log shipper can follow one
episode through a batch or count outcomes without parsing messages.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# (record attribute, JSON key), copied in this order when set
RECORD_FIELDS: tuple[tuple[str, str], ...] = (
    ("slot_id", "slot"),
    ("file_name", "file"),
    ("mode", "mode"),
    ("plan", "plan"),
    ("outcome", "outcome"),
    ("command", "command"),
    ("returncode", "returncode"),
    ("elapsed_seconds", "elapsed_seconds"),
)


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Example output:
        {"time": "2026-10-17T21:04:05.120+00:00", "level": "info",
         "logger": "anivault.jobs.batch", "slot": "1", "file": "ep01.mkv",
         "outcome": "transcoded", "message": "ep01.mkv: transcoded"}

    Attributes outside RECORD_FIELDS are not emitted.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname.lower(),
            "logger": record.name,
        }
        for attr, key in RECORD_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                entry[key] = value
        entry["message"] = record.getMessage()

        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)
