"""Text helpers for supplier details, item code lists and item search."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

from supplydesk.admin_supplier_store import AdminSupplierState

ACCORD_CODE_LINE_PREFIX = "Accord Code:"
_PHONE_LINE_PREFIXES = ("telefon:", "phone:")


class _NamedItem(Protocol):
    code: str
    name: str


_ItemT = TypeVar("_ItemT", bound=_NamedItem)


def _detail_lines(details: str) -> list[str]:
    """Non-blank, trimmed lines of a details text."""
    lines = details.replace("\r\n", "\n").split("\n")
    return [line.strip() for line in lines if line.strip()]


def upsert_accord_code_in_details(details: str, code: str) -> str:
    """Replace any access code line in details with one holding code, placed last."""
    kept = [
        line for line in _detail_lines(details) if not line.startswith(ACCORD_CODE_LINE_PREFIX)
    ]
    kept.append(f"{ACCORD_CODE_LINE_PREFIX} {code.strip()}")
    return "\n".join(kept)


def upsert_supplier_phone_in_details(details: str, phone: str) -> str:
    """Replace any phone line in details with one holding phone, placed first."""
    kept = [
        line
        for line in _detail_lines(details)
        if not line.lower().startswith(_PHONE_LINE_PREFIXES)
    ]
    return "\n".join([f"Telefon: {phone.strip()}", *kept])


def normalize_item_codes(item_codes: Iterable[str]) -> list[str]:
    """Trim codes, drop blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for code in item_codes:
        trimmed = code.strip()
        if trimmed:
            seen.setdefault(trimmed, None)
    return list(seen)


def filter_items_by_query(items: Sequence[_ItemT], query: str) -> list[_ItemT]:
    """Items whose code or name contains query, ignoring case; all items for a blank query."""
    needle = query.strip().lower()
    if not needle:
        return list(items)
    return [
        item for item in items if needle in item.code.lower() or needle in item.name.lower()
    ]


def is_item_supplier_permission_error(error: object) -> bool:
    """True when error reports a permission denial from the ERP."""
    if error is None:
        return False
    message = str(error).lower()
    return "permissionerror" in message or "status 403:" in message


def state_includes_item(state: AdminSupplierState, item_code: str) -> bool:
    """True when item_code is among the state's assigned codes, ignoring case and padding."""
    wanted = item_code.strip().casefold()
    return any(candidate.strip().casefold() == wanted for candidate in state.assigned_item_codes)