import itertools

from admin_console.features.tenants.diff import apply_diff, diff_records, is_new
from admin_console.models.tenant import TenantAddress


def _records():
    snapshot = [
        {"id": 1, "city": "Sao Paulo", "line1": "Rua A"},
        {"id": 2, "city": "Rio", "line1": "Rua B"},
        {"id": 3, "city": "Recife", "line1": "Rua C"},
    ]
    current = [
        {"id": 1, "city": "Sao Paulo", "line1": "Rua A"},
        {"id": 2, "city": "Niteroi", "line1": "Rua B"},
        {"id": "tmp-1", "city": "Curitiba", "line1": "Rua D"},
        {"city": "Salvador", "line1": "Rua E"},
    ]
    return snapshot, current


def test_diff_classifies_records():
    snapshot, current = _records()
    diff = diff_records(snapshot, current)
    assert [r["city"] for r in diff.created] == ["Curitiba", "Salvador"]
    assert [r["id"] for r in diff.updated] == [2]
    assert diff.deleted_ids == [3]
    assert diff.call_count == 4


def test_diff_of_identical_lists_is_empty():
    snapshot, _ = _records()
    assert diff_records(snapshot, snapshot).is_empty


def test_diff_is_idempotent():
    snapshot, current = _records()
    counter = itertools.count(100)
    applied = apply_diff(snapshot, diff_records(snapshot, current), assign_id=lambda: next(counter))
    assert diff_records(applied, applied).is_empty


def test_records_without_ids_are_always_created():
    for record_id in (None, "", "tmp-9", "temp-3"):
        assert is_new({"id": record_id})
    diff = diff_records([{"id": 1}], [{"id": 1}, {"id": None}, {}])
    assert len(diff.created) == 2


def test_removed_ids_deleted_exactly_once():
    snapshot = [{"id": 1}, {"id": 2}, {"id": 3}]
    diff = diff_records(snapshot, [{"id": 2}])
    assert sorted(diff.deleted_ids) == [1, 3]
    assert len(set(diff.deleted_ids)) == len(diff.deleted_ids)


def test_apply_reproduces_current_modulo_new_ids():
    snapshot, current = _records()
    applied = apply_diff(snapshot, diff_records(snapshot, current))

    def strip(records):
        return sorted(
            ({k: v for k, v in r.items() if k != "id"} for r in records),
            key=lambda r: r["city"],
        )

    assert strip(applied) == strip(current)


def test_unknown_ids_in_current_are_ignored():
    diff = diff_records([{"id": 1}], [{"id": 1}, {"id": 99, "city": "X"}])
    assert diff.is_empty


def test_accepts_pydantic_models():
    snapshot = [TenantAddress(id=1, city="Rio", line1="Rua B", country_code="BR")]
    current = [TenantAddress(id=1, city="Niteroi", line1="Rua B", country_code="BR")]
    diff = diff_records(snapshot, current)
    assert diff.updated[0]["city"] == "Niteroi"
