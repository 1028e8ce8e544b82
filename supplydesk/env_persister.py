"""Merge key/value pairs into a dotenv file."""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def _format_value(value: str) -> str:
    if _INT_PATTERN.fullmatch(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace('"', '\\"')
    )
    return f'"{escaped}"'


class DotEnvPersister:
    """Writes settings into a dotenv file, keeping the keys already there."""

    def __init__(self, path: str | os.PathLike[str] = ".env") -> None:
        trimmed = str(path).strip()
        self.path = Path(trimmed or ".env")
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        values = dotenv_values(self.path, interpolate=False)
        return {key: value or "" for key, value in values.items()}

    def upsert(self, values: Mapping[str, str]) -> None:
        """Set the given keys (trimmed) and rewrite the file in sorted order."""
        with self._lock:
            current = self._read()
            for key, value in values.items():
                name = key.strip()
                if not name:
                    continue
                current[name] = value.strip()
            lines = [f"{key}={_format_value(current[key])}" for key in sorted(current)]
            self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")