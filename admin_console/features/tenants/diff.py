"""
Diff of repeated sub-entities (addresses, contacts) between the state the
edit screen was loaded with and the state being saved.

Purely structural and last-snapshot-wins: there is no conflict detection
against concurrent edits by someone else.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

PLACEHOLDER_PREFIXES = ("tmp-", "temp-")

Record = Union[Mapping[str, Any], BaseModel]


@dataclass
class RecordDiff:
    created: List[Dict[str, Any]] = field(default_factory=list)
    updated: List[Dict[str, Any]] = field(default_factory=list)
    deleted_ids: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.deleted_ids)

    @property
    def call_count(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted_ids)


def as_dict(record: Record) -> Dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump()
    return dict(record)


def is_placeholder_id(record_id: Any) -> bool:
    return isinstance(record_id, str) and record_id.startswith(PLACEHOLDER_PREFIXES)


def is_new(record: Dict[str, Any]) -> bool:
    record_id = record.get("id")
    return record_id is None or record_id == "" or is_placeholder_id(record_id)


def diff_records(snapshot: Iterable[Record], current: Iterable[Record]) -> RecordDiff:
    before = [as_dict(r) for r in snapshot]
    after = [as_dict(r) for r in current]

    previous: Dict[Any, Dict[str, Any]] = {}
    for record in before:
        if not is_new(record):
            previous[record["id"]] = record

    diff = RecordDiff()
    seen = set()
    for record in after:
        if is_new(record):
            diff.created.append(record)
            continue
        record_id = record["id"]
        seen.add(record_id)
        old = previous.get(record_id)
        if old is None:
            # An id the snapshot never had; nothing to compare against.
            continue
        if old != record:
            diff.updated.append(record)

    for record_id in previous:
        if record_id not in seen:
            diff.deleted_ids.append(record_id)
    return diff


def apply_diff(snapshot: Iterable[Record], diff: RecordDiff, assign_id: Optional[Any] = None) -> List[Dict[str, Any]]:
    """Replay a diff onto a snapshot, as the backend would.

    Created records get ids from `assign_id` (a callable) when given.
    """
    deleted = set(diff.deleted_ids)
    updates = {r["id"]: r for r in diff.updated}
    result = []
    for record in (as_dict(r) for r in snapshot):
        if is_new(record) or record.get("id") in deleted:
            continue
        result.append(updates.get(record["id"], record))
    for record in diff.created:
        created = dict(record)
        if assign_id is not None:
            created["id"] = assign_id()
        result.append(created)
    return result
