"""File-backed registry of push notification device tokens."""

from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _parse_time(raw: Any) -> datetime:
    if raw is None:
        return ZERO_TIME
    if not isinstance(raw, str):
        raise ValueError("updated_at must be a string")
    match = _TIME_PATTERN.fullmatch(raw)
    if match is None:
        raise ValueError(f"invalid timestamp: {raw!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    moment = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )
    return moment.astimezone(timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PushTokenRecord:
    """One device token registered under a key."""

    token: str
    platform: str = ""
    updated_at: datetime = field(default=ZERO_TIME)

    def to_dict(self) -> dict[str, str]:
        return {
            "token": self.token,
            "platform": self.platform,
            "updated_at": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Any) -> PushTokenRecord:
        if data is None:
            return cls(token="")
        if not isinstance(data, dict):
            raise ValueError("push token record must be an object")
        token = data.get("token") or ""
        platform = data.get("platform") or ""
        if not isinstance(token, str) or not isinstance(platform, str):
            raise ValueError("push token fields must be strings")
        return cls(token=token, platform=platform, updated_at=_parse_time(data.get("updated_at")))


def _without_token(records: list[PushTokenRecord], token: str) -> list[PushTokenRecord]:
    return [record for record in records if record.token.strip() != token]


class PushTokenStore:
    """Device tokens grouped by owner key, kept in one JSON file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: dict[str, list[PushTokenRecord]] | None = None

    def put(self, key: str, token: str, platform: str) -> None:
        """Register token under key, replacing an earlier entry of the same token."""
        with self._lock:
            entries = self._load()
            trimmed = token.strip()
            records = _without_token(entries.get(key, []), trimmed)
            records.append(PushTokenRecord(trimmed, platform.strip(), _now()))
            entries[key] = records
            self._write(entries)

    def delete(self, key: str, token: str) -> None:
        """Remove token from key, dropping the key when nothing is left."""
        with self._lock:
            entries = self._load()
            records = _without_token(entries.get(key, []), token.strip())
            if records:
                entries[key] = records
            else:
                entries.pop(key, None)
            self._write(entries)

    def move_token_to_key(self, target_key: str, token: str, platform: str) -> None:
        """Take token away from every key and register it under target_key."""
        with self._lock:
            entries = self._load()
            trimmed = token.strip()
            for key in list(entries):
                records = _without_token(entries[key], trimmed)
                if records:
                    entries[key] = records
                else:
                    del entries[key]
            target = target_key.strip()
            records = _without_token(entries.get(target, []), trimmed)
            records.append(PushTokenRecord(trimmed, platform.strip(), _now()))
            entries[target] = records
            self._write(entries)

    def list(self, key: str) -> list[PushTokenRecord]:
        """Return a copy of the records registered under key."""
        with self._lock:
            return list(self._load().get(key, []))

    def _load(self) -> dict[str, list[PushTokenRecord]]:
        if self._cache is None:
            self._cache = self._read()
        return self._cache

    def _read(self) -> dict[str, list[PushTokenRecord]]:
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
            raise ValueError("push token store must hold a JSON object")
        result: dict[str, list[PushTokenRecord]] = {}
        for key, records in data.items():
            if records is None:
                result[key] = []
                continue
            if not isinstance(records, list):
                raise ValueError("push token entries must be lists")
            result[key] = [PushTokenRecord.from_dict(item) for item in records]
        return result

    def _write(self, entries: dict[str, list[PushTokenRecord]]) -> None:
        payload = {
            key: [record.to_dict() for record in entries[key]] for key in sorted(entries)
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix="push-tokens-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self._cache = {key: list(records) for key, records in entries.items()}