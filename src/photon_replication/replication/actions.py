"""Action records carried in a replication batch and their wire format.

Each record is one of three frozen shapes:

* ``DocumentAction`` - CREATE, UPDATE or UPDATE_OR_CREATE with ``id`` and ``doc``
* ``DeleteAction`` - DELETE by document ``id``
* ``DeleteOsmAction`` - DELETE_OSM by OSM type/id and optional tag key/value

A batch serialises to a compact JSON array which is gzip-compressed before it
is written to a segment file.
"""

from __future__ import annotations

import gzip
import json
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Union,
)

from ..document import DocumentLike, document_payload, document_uid
from ..errors import ActionValidationError, SegmentFormatError


class ActionType(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DELETE_OSM = "DELETE_OSM"
    UPDATE_OR_CREATE = "UPDATE_OR_CREATE"


DOCUMENT_ACTIONS: FrozenSet[ActionType] = frozenset(
    {ActionType.CREATE, ActionType.UPDATE, ActionType.UPDATE_OR_CREATE}
)

_ALLOWED_KEYS: Dict[ActionType, FrozenSet[str]] = {
    ActionType.CREATE: frozenset({"action", "id", "doc"}),
    ActionType.UPDATE: frozenset({"action", "id", "doc"}),
    ActionType.UPDATE_OR_CREATE: frozenset({"action", "id", "doc"}),
    ActionType.DELETE: frozenset({"action", "id"}),
    ActionType.DELETE_OSM: frozenset(
        {"action", "osmType", "osmId", "osmKey", "osmValue"}
    ),
}


def _require_text(name: str, value: object) -> None:
    if not isinstance(value, str) or not value:
        raise ActionValidationError(f"{name} must be a non-empty string")


def _optional_text(name: str, value: object) -> None:
    if value is not None and not isinstance(value, str):
        raise ActionValidationError(f"{name} must be a string or None")


@dataclass(frozen=True)
class DocumentAction:
    """Create, update or upsert of a full document."""

    action: ActionType
    id: str
    doc: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        try:
            action = ActionType(self.action)
        except ValueError as exc:
            raise ActionValidationError(f"unknown action {self.action!r}") from exc
        if action not in DOCUMENT_ACTIONS:
            raise ActionValidationError(f"{action.value} does not carry a document")
        object.__setattr__(self, "action", action)
        _require_text("id", self.id)
        if not isinstance(self.doc, Mapping):
            raise ActionValidationError("doc must be a JSON object")
        object.__setattr__(self, "doc", dict(self.doc))


@dataclass(frozen=True)
class DeleteAction:
    """Removal of a document by its key."""

    action: ClassVar[ActionType] = ActionType.DELETE

    id: str

    def __post_init__(self) -> None:
        _require_text("id", self.id)


@dataclass(frozen=True)
class DeleteOsmAction:
    """Removal addressed by OSM coordinates when the document key is unknown."""

    action: ClassVar[ActionType] = ActionType.DELETE_OSM

    osm_type: str
    osm_id: int
    osm_key: Optional[str] = None
    osm_value: Optional[str] = None

    def __post_init__(self) -> None:
        _require_text("osmType", self.osm_type)
        if isinstance(self.osm_id, bool) or not isinstance(self.osm_id, int):
            raise ActionValidationError("osmId must be an integer")
        _optional_text("osmKey", self.osm_key)
        _optional_text("osmValue", self.osm_value)


ActionRecord = Union[DocumentAction, DeleteAction, DeleteOsmAction]


def document_action(action: ActionType, doc: DocumentLike) -> DocumentAction:
    """Build a document-carrying record keyed by the document's uid."""
    try:
        uid = document_uid(doc)
    except ValueError as exc:
        raise ActionValidationError(str(exc)) from exc
    return DocumentAction(action=action, id=uid, doc=document_payload(doc))


def action_to_dict(record: ActionRecord) -> Dict[str, Any]:
    """Map a record onto its wire object."""
    if isinstance(record, DocumentAction):
        return {"action": record.action.value, "id": record.id, "doc": record.doc}
    if isinstance(record, DeleteAction):
        return {"action": ActionType.DELETE.value, "id": record.id}
    if isinstance(record, DeleteOsmAction):
        payload: Dict[str, Any] = {
            "action": ActionType.DELETE_OSM.value,
            "osmType": record.osm_type,
            "osmId": record.osm_id,
        }
        if record.osm_key is not None:
            payload["osmKey"] = record.osm_key
        if record.osm_value is not None:
            payload["osmValue"] = record.osm_value
        return payload
    raise ActionValidationError(f"unsupported record type {type(record).__name__}")


def action_from_dict(data: Mapping[str, Any]) -> ActionRecord:
    """Rebuild a record from its wire object, rejecting mixed variants."""
    if not isinstance(data, Mapping):
        raise ActionValidationError("action record must be a JSON object")
    raw_action = data.get("action")
    try:
        action = ActionType(raw_action)
    except ValueError as exc:
        raise ActionValidationError(f"unknown action {raw_action!r}") from exc

    extra = set(data) - _ALLOWED_KEYS[action]
    if extra:
        raise ActionValidationError(
            f"{action.value} record has illegal fields: {', '.join(sorted(extra))}"
        )

    if action in DOCUMENT_ACTIONS:
        if "doc" not in data:
            raise ActionValidationError(f"{action.value} record is missing doc")
        return DocumentAction(action=action, id=data.get("id"), doc=data["doc"])
    if action is ActionType.DELETE:
        return DeleteAction(id=data.get("id"))
    return DeleteOsmAction(
        osm_type=data.get("osmType"),
        osm_id=data.get("osmId"),
        osm_key=data.get("osmKey"),
        osm_value=data.get("osmValue"),
    )


def dumps_batch(records: Iterable[ActionRecord]) -> str:
    """Serialise records, in order, to a compact JSON array."""
    return json.dumps(
        [action_to_dict(record) for record in records],
        separators=(",", ":"),
    )


def loads_batch(text: str) -> List[ActionRecord]:
    data = json.loads(text)
    if not isinstance(data, list):
        raise ActionValidationError("batch must be a JSON array")
    return [action_from_dict(entry) for entry in data]


def encode_batch(records: Iterable[ActionRecord], *, compresslevel: int = 9) -> bytes:
    """Serialise and gzip-compress records for a segment file."""
    raw = dumps_batch(records).encode("utf-8")
    return gzip.compress(raw, compresslevel=compresslevel, mtime=0)


def decode_batch(data: bytes) -> List[ActionRecord]:
    """Inverse of :func:`encode_batch`."""
    try:
        text = gzip.decompress(data).decode("utf-8")
        return loads_batch(text)
    except (OSError, EOFError, zlib.error, UnicodeDecodeError) as exc:
        raise SegmentFormatError(f"segment is not valid gzip data: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SegmentFormatError(f"segment is not valid JSON: {exc}") from exc
    except ActionValidationError as exc:
        raise SegmentFormatError(f"segment holds an invalid record: {exc}") from exc


__all__ = [
    "ActionRecord",
    "ActionType",
    "DOCUMENT_ACTIONS",
    "DeleteAction",
    "DeleteOsmAction",
    "DocumentAction",
    "action_from_dict",
    "action_to_dict",
    "decode_batch",
    "document_action",
    "dumps_batch",
    "encode_batch",
    "loads_batch",
]
