"""Access code generation and the rate limit on regenerating codes."""

from __future__ import annotations

import secrets
from collections.abc import Container
from dataclasses import replace
from datetime import datetime, timedelta

from supplydesk.admin_supplier_store import AdminSupplierState
from supplydesk.push_token_store import ZERO_TIME

SUPPLIER_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_CODE_PREFIX = "10"
CODE_RANDOM_LENGTH = 10
CODE_GENERATION_ATTEMPTS = 64
CODE_REGEN_WINDOW = timedelta(minutes=1)
MAX_CODE_REGENS_PER_WINDOW = 3


class AdminSupplierNotFoundError(LookupError):
    """The supplier or customer does not exist or has been removed."""

    def __init__(self, message: str = "admin supplier not found") -> None:
        super().__init__(message)


class CodeRegenCooldownError(RuntimeError):
    """Codes were regenerated too often; wait for the cooldown to end."""

    def __init__(self, message: str = "code regenerate cooldown") -> None:
        super().__init__(message)


class CodeGenerationError(RuntimeError):
    """No unused code could be produced."""

    def __init__(self, message: str = "supplier code generation failed") -> None:
        super().__init__(message)


def random_supplier_code(prefix: str, existing: Container[str]) -> str:
    """Return prefix plus ten random alphabet characters, not already in existing.

    A blank prefix falls back to "10".
    """
    if not prefix.strip():
        prefix = DEFAULT_CODE_PREFIX
    size = len(SUPPLIER_CODE_ALPHABET)
    for _ in range(CODE_GENERATION_ATTEMPTS):
        raw = secrets.token_bytes(CODE_RANDOM_LENGTH)
        code = prefix + "".join(SUPPLIER_CODE_ALPHABET[value % size] for value in raw)
        if code not in existing:
            return code
    raise CodeGenerationError()


def bump_code_regen_state(state: AdminSupplierState, now: datetime) -> AdminSupplierState:
    """Count one more regeneration at now and return the updated state.

    Raises CodeRegenCooldownError while the cooldown is running. A window
    opens at the first regeneration; reaching the maximum within it starts
    a cooldown until the window ends.
    """
    if state.is_code_locked(now):
        raise CodeRegenCooldownError()

    if (
        state.regen_window_started_at == ZERO_TIME
        or now - state.regen_window_started_at >= CODE_REGEN_WINDOW
    ):
        state = replace(
            state,
            regen_window_started_at=now,
            regen_window_count=0,
            cooldown_until=ZERO_TIME,
        )

    count = state.regen_window_count + 1
    cooldown = state.cooldown_until
    if count >= MAX_CODE_REGENS_PER_WINDOW:
        cooldown = state.regen_window_started_at + CODE_REGEN_WINDOW
    return replace(state, regen_window_count=count, cooldown_until=cooldown)