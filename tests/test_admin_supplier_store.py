import json
from datetime import datetime, timedelta, timezone

import pytest

from supplydesk.admin_supplier_store import AdminSupplierState, AdminSupplierStore
from supplydesk.push_token_store import ZERO_TIME

NOW = datetime(2026, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return AdminSupplierStore(tmp_path / "nested" / "admin-suppliers.json")


def test_get_missing_returns_empty_state(store):
    assert store.get("SUP-404") == AdminSupplierState()


def test_put_then_get_round_trip(store):
    state = AdminSupplierState(
        assignments_configured=True,
        assigned_item_codes=("ITEM-001",),
        custom_code="10ABCDEF1234",
        updated_at=NOW,
    )
    store.put("SUP-001", state)
    assert store.get("SUP-001") == state


def test_persisted_state_is_read_by_new_store(store):
    state = AdminSupplierState(blocked=True, regen_window_count=2, cooldown_until=NOW)
    store.put("SUP-002", state)
    reopened = AdminSupplierStore(store.path)
    assert reopened.get("SUP-002") == state


def test_delete_removes_entry(store):
    store.put("SUP-001", AdminSupplierState(blocked=True))
    store.put("SUP-003", AdminSupplierState(removed=True))
    store.delete("SUP-001")
    assert set(store.list()) == {"SUP-003"}
    assert set(AdminSupplierStore(store.path).list()) == {"SUP-003"}


def test_list_returns_copy(store):
    store.put("SUP-001", AdminSupplierState(blocked=True))
    listed = store.list()
    listed["SUP-999"] = AdminSupplierState()
    assert "SUP-999" not in store.list()


def test_empty_file_reads_as_no_entries(tmp_path):
    path = tmp_path / "admin-suppliers.json"
    path.write_text("", encoding="utf-8")
    assert AdminSupplierStore(path).list() == {}


def test_null_json_reads_as_no_entries(tmp_path):
    path = tmp_path / "admin-suppliers.json"
    path.write_text("null", encoding="utf-8")
    assert AdminSupplierStore(path).list() == {}


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "admin-suppliers.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        AdminSupplierStore(path).get("SUP-001")


def test_file_omits_empty_scalars(store):
    store.put("SUP-001", AdminSupplierState(blocked=True))
    data = json.loads(store.path.read_text(encoding="utf-8"))
    entry = data["SUP-001"]
    assert entry["blocked"] is True
    assert "custom_code" not in entry
    assert "assigned_item_codes" not in entry
    assert entry["cooldown_until"] == "0001-01-01T00:00:00Z"


def test_to_dict_from_dict_round_trip():
    state = AdminSupplierState(
        custom_code="10ABCDEF1234",
        removed=True,
        assigned_item_codes=("ITEM-001", "ITEM-002"),
        pending_persist_code="10ABCDEF1234",
        pending_persist_at=NOW + timedelta(minutes=1),
        regen_window_started_at=NOW,
        regen_window_count=3,
        cooldown_until=NOW + timedelta(minutes=1),
        updated_at=NOW,
    )
    assert AdminSupplierState.from_dict(state.to_dict()) == state


def test_from_dict_accepts_missing_fields():
    state = AdminSupplierState.from_dict({"custom_code": "10ABCDEF1234"})
    assert state.custom_code == "10ABCDEF1234"
    assert state.cooldown_until == ZERO_TIME
    assert state.assigned_item_codes == ()


def test_from_dict_rejects_wrong_types():
    with pytest.raises(ValueError):
        AdminSupplierState.from_dict({"blocked": "yes"})


def test_zero_cooldown_is_not_locked():
    state = AdminSupplierState()
    assert state.is_code_locked(NOW) is False
    assert state.retry_after_seconds(NOW) == 0


def test_future_cooldown_is_locked():
    state = AdminSupplierState(cooldown_until=NOW + timedelta(seconds=30))
    assert state.is_code_locked(NOW) is True
    assert state.retry_after_seconds(NOW) == 30


def test_past_cooldown_is_not_locked():
    state = AdminSupplierState(cooldown_until=NOW - timedelta(seconds=1))
    assert state.is_code_locked(NOW) is False
    assert state.retry_after_seconds(NOW) == 0


def test_retry_after_is_at_least_one_while_locked():
    state = AdminSupplierState(cooldown_until=NOW + timedelta(milliseconds=500))
    assert state.is_code_locked(NOW) is True
    assert state.retry_after_seconds(NOW) == 1