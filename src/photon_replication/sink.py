"""Event sink contract for the per-document change stream."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from .document import DocumentLike

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    """Consumer of create/update/delete events emitted during a sync run.

    ``finish`` is called exactly once per run; buffering sinks perform their
    durable write there.
    """

    def create(self, doc: DocumentLike) -> None: ...

    def update(self, doc: DocumentLike) -> None: ...

    def update_or_create(self, doc: DocumentLike) -> None: ...

    def delete(self, doc_id: str) -> None: ...

    def delete_osm(
        self,
        osm_type: str,
        osm_id: int,
        osm_key: Optional[str] = None,
        osm_value: Optional[str] = None,
    ) -> None: ...

    def finish(self) -> None: ...


class NullSink:
    """Sink that accepts every event and does nothing."""

    def create(self, doc: DocumentLike) -> None:
        return None

    def update(self, doc: DocumentLike) -> None:
        return None

    def update_or_create(self, doc: DocumentLike) -> None:
        return None

    def delete(self, doc_id: str) -> None:
        return None

    def delete_osm(
        self,
        osm_type: str,
        osm_id: int,
        osm_key: Optional[str] = None,
        osm_value: Optional[str] = None,
    ) -> None:
        return None

    def finish(self) -> None:
        return None


class FanOutSink:
    """Forward every event to several sinks in order.

    The first failing sink aborts the call; sinks after it are not invoked.
    """

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self._sinks: List[EventSink] = list(sinks)

    @property
    def sinks(self) -> tuple[EventSink, ...]:
        return tuple(self._sinks)

    def create(self, doc: DocumentLike) -> None:
        for sink in self._sinks:
            sink.create(doc)

    def update(self, doc: DocumentLike) -> None:
        for sink in self._sinks:
            sink.update(doc)

    def update_or_create(self, doc: DocumentLike) -> None:
        for sink in self._sinks:
            sink.update_or_create(doc)

    def delete(self, doc_id: str) -> None:
        for sink in self._sinks:
            sink.delete(doc_id)

    def delete_osm(
        self,
        osm_type: str,
        osm_id: int,
        osm_key: Optional[str] = None,
        osm_value: Optional[str] = None,
    ) -> None:
        for sink in self._sinks:
            sink.delete_osm(osm_type, osm_id, osm_key, osm_value)

    def finish(self) -> None:
        for sink in self._sinks:
            logger.debug("finishing sink %s", type(sink).__name__)
            sink.finish()


__all__ = ["EventSink", "FanOutSink", "NullSink"]
