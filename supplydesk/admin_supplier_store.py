"""File-backed admin state for suppliers: custom codes, blocking and item assignments."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from supplydesk.push_token_store import ZERO_TIME, _format_time, _parse_time

_TIME_FIELDS = (
    "pending_persist_at",
    "regen_window_started_at",
    "cooldown_until",
    "updated_at",
)


def _string(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string")
    return value


def _bool(data: dict[str, Any], name: str) -> bool:
    value = data.get(name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {name!r} must be a boolean")
    return value


def _int(data: dict[str, Any], name: str) -> int:
    value = data.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name!r} must be an integer")
    return value


def _codes(data: dict[str, Any]) -> tuple[str, ...]:
    value = data.get("assigned_item_codes")
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("field 'assigned_item_codes' must be a list of strings")
    return tuple(value)


@dataclass(frozen=True)
class AdminSupplierState:
    """What the admin has configured for one supplier or customer."""

    custom_code: str = ""
    blocked: bool = False
    removed: bool = False
    assignments_configured: bool = False
    assigned_item_codes: tuple[str, ...] = ()
    pending_persist_code: str = ""
    pending_persist_at: datetime = field(default=ZERO_TIME)
    regen_window_started_at: datetime = field(default=ZERO_TIME)
    regen_window_count: int = 0
    cooldown_until: datetime = field(default=ZERO_TIME)
    updated_at: datetime = field(default=ZERO_TIME)

    def is_code_locked(self, now: datetime) -> bool:
        """True while a code regeneration cooldown is running."""
        return self.cooldown_until != ZERO_TIME and now < self.cooldown_until

    def retry_after_seconds(self, now: datetime) -> int:
        """Whole seconds left in the cooldown; at least 1 while locked, else 0."""
        if not self.is_code_locked(now):
            return 0
        seconds = int((self.cooldown_until - now).total_seconds())
        return max(seconds, 1)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; empty scalar fields are left out, times are always kept."""
        result: dict[str, Any] = {}
        if self.custom_code:
            result["custom_code"] = self.custom_code
        if self.blocked:
            result["blocked"] = True
        if self.removed:
            result["removed"] = True
        if self.assignments_configured:
            result["assignments_configured"] = True
        if self.assigned_item_codes:
            result["assigned_item_codes"] = list(self.assigned_item_codes)
        if self.pending_persist_code:
            result["pending_persist_code"] = self.pending_persist_code
        result["pending_persist_at"] = _format_time(self.pending_persist_at)
        result["regen_window_started_at"] = _format_time(self.regen_window_started_at)
        if self.regen_window_count:
            result["regen_window_count"] = self.regen_window_count
        result["cooldown_until"] = _format_time(self.cooldown_until)
        result["updated_at"] = _format_time(self.updated_at)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> AdminSupplierState:
        """Build a state from a decoded JSON object; missing fields take their defaults."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("admin supplier state must be an object")
        times = {name: _parse_time(data.get(name)) for name in _TIME_FIELDS}
        return cls(
            custom_code=_string(data, "custom_code"),
            blocked=_bool(data, "blocked"),
            removed=_bool(data, "removed"),
            assignments_configured=_bool(data, "assignments_configured"),
            assigned_item_codes=_codes(data),
            pending_persist_code=_string(data, "pending_persist_code"),
            regen_window_count=_int(data, "regen_window_count"),
            **times,
        )


class AdminSupplierStore:
    """Admin supplier states keyed by reference, kept in one JSON file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: dict[str, AdminSupplierState] | None = None

    def get(self, ref: str) -> AdminSupplierState:
        """Return the state for ref, or an empty one if none is stored."""
        with self._lock:
            return self._load().get(ref, AdminSupplierState())

    def put(self, ref: str, state: AdminSupplierState) -> None:
        """Store the state for ref and write the file."""
        with self._lock:
            entries = self._load()
            entries[ref] = state
            self._write(entries)

    def delete(self, ref: str) -> None:
        """Forget ref and write the file."""
        with self._lock:
            entries = self._load()
            entries.pop(ref, None)
            self._write(entries)

    def list(self) -> dict[str, AdminSupplierState]:
        """Return a copy of every stored state."""
        with self._lock:
            return dict(self._load())

    def _load(self) -> dict[str, AdminSupplierState]:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def _read(self) -> dict[str, AdminSupplierState]:
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
            raise ValueError("admin supplier store must hold a JSON object")
        return {key: AdminSupplierState.from_dict(value) for key, value in data.items()}

    def _write(self, entries: dict[str, AdminSupplierState]) -> None:
        payload = {key: entries[key].to_dict() for key in sorted(entries)}
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix="admin-suppliers-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self._cache = dict(entries)