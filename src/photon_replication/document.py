"""Geocoding document value passed through the change stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union


@dataclass(frozen=True)
class Document:
    """A geocoding record identified by ``uid``.

    Attributes are opaque to the replication log; they only need to be JSON
    serialisable.
    """

    uid: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.attributes)
        payload["uid"] = self.uid
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        if "uid" not in data:
            raise ValueError("document payload is missing 'uid'")
        attributes = {key: value for key, value in data.items() if key != "uid"}
        return cls(uid=str(data["uid"]), attributes=attributes)


DocumentLike = Union[Document, Mapping[str, Any]]


def document_uid(doc: DocumentLike) -> str:
    """Return the unique key of ``doc``."""
    if isinstance(doc, Document):
        return doc.uid
    try:
        uid = doc["uid"]
    except (KeyError, TypeError) as exc:
        raise ValueError("document has no 'uid'") from exc
    if uid is None:
        raise ValueError("document has no 'uid'")
    return str(uid)


def document_payload(doc: DocumentLike) -> Dict[str, Any]:
    """Return a JSON-ready copy of ``doc``."""
    if isinstance(doc, Document):
        return doc.to_dict()
    return dict(doc)


__all__ = ["Document", "DocumentLike", "document_payload", "document_uid"]
