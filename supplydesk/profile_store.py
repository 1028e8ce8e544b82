"""File-backed storage of per-user profile preferences."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any


def _string_field(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


@dataclass(frozen=True)
class ProfilePrefs:
    """Nickname and avatar chosen by a user."""

    nickname: str = ""
    avatar_url: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"nickname": self.nickname, "avatar_url": self.avatar_url}

    @classmethod
    def from_dict(cls, data: Any) -> ProfilePrefs:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("profile prefs entry must be an object")
        return cls(
            nickname=_string_field(data, "nickname"),
            avatar_url=_string_field(data, "avatar_url"),
        )


def _atomic_write(path: Path, text: str, prefix: str) -> None:
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=prefix, suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class ProfileStore:
    """Profile preferences keyed by user, kept in one JSON file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: dict[str, ProfilePrefs] | None = None

    def get(self, key: str) -> ProfilePrefs:
        """Return the preferences for key, or empty ones if none are stored."""
        with self._lock:
            return self._load().get(key, ProfilePrefs())

    def put(self, key: str, prefs: ProfilePrefs) -> None:
        """Store the preferences for key and write the file."""
        with self._lock:
            entries = self._load()
            entries[key] = prefs
            self._write(entries)

    def _load(self) -> dict[str, ProfilePrefs]:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def _read(self) -> dict[str, ProfilePrefs]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not raw:
            return {}
        data = json.loads(raw)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("profile store must hold a JSON object")
        return {key: ProfilePrefs.from_dict(value) for key, value in data.items()}

    def _write(self, entries: dict[str, ProfilePrefs]) -> None:
        payload = {key: entries[key].to_dict() for key in sorted(entries)}
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        _atomic_write(self.path, text, "profile-prefs-")
        self._cache = dict(entries)