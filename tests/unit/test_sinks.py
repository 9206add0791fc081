import pytest

from photon_replication.document import Document
from photon_replication.replication.writer import ReplicationLogWriter
from photon_replication.sink import EventSink, FanOutSink, NullSink


class _Recorder:
    def __init__(self, name, log, fail=False):
        self.name = name
        self.log = log
        self.fail = fail

    def _hit(self, op):
        self.log.append((self.name, op))
        if self.fail:
            raise RuntimeError(f"{self.name} broke")

    def create(self, doc):
        self._hit("create")

    def update(self, doc):
        self._hit("update")

    def update_or_create(self, doc):
        self._hit("update_or_create")

    def delete(self, doc_id):
        self._hit("delete")

    def delete_osm(self, osm_type, osm_id, osm_key=None, osm_value=None):
        self._hit("delete_osm")

    def finish(self):
        self._hit("finish")


@pytest.mark.unit
def test_stock_sinks_satisfy_protocol(tmp_path):
    assert isinstance(NullSink(), EventSink)
    assert isinstance(FanOutSink([]), EventSink)
    assert isinstance(ReplicationLogWriter(tmp_path), EventSink)


@pytest.mark.unit
def test_null_sink_accepts_everything():
    sink = NullSink()
    sink.create(Document(uid="n1"))
    sink.update({"uid": "n1"})
    sink.update_or_create({"uid": "n1"})
    sink.delete("n1")
    sink.delete_osm("node", 1)
    sink.finish()


@pytest.mark.unit
def test_fan_out_preserves_sink_order():
    log = []
    fan_out = FanOutSink([_Recorder("index", log), _Recorder("audit", log)])

    fan_out.create({"uid": "n1"})
    fan_out.delete_osm("way", 4)
    fan_out.finish()

    assert log == [
        ("index", "create"),
        ("audit", "create"),
        ("index", "delete_osm"),
        ("audit", "delete_osm"),
        ("index", "finish"),
        ("audit", "finish"),
    ]


@pytest.mark.unit
def test_fan_out_stops_at_first_failure():
    log = []
    fan_out = FanOutSink(
        [_Recorder("index", log, fail=True), _Recorder("audit", log)]
    )

    with pytest.raises(RuntimeError, match="index broke"):
        fan_out.update({"uid": "n1"})

    assert log == [("index", "update")]


@pytest.mark.unit
def test_writer_daisy_chained_over_fan_out(tmp_path):
    log = []
    writer = ReplicationLogWriter(
        tmp_path, FanOutSink([_Recorder("index", log), _Recorder("cache", log)])
    )

    writer.update_or_create({"uid": "r7"})
    writer.finish()

    assert log == [
        ("index", "update_or_create"),
        ("cache", "update_or_create"),
        ("index", "finish"),
        ("cache", "finish"),
    ]
    assert writer.sequence_number == 1


@pytest.mark.unit
def test_document_round_trips_through_dict():
    doc = Document(uid="n1", attributes={"name": "Mitte", "importance": 0.4})

    assert Document.from_dict(doc.to_dict()) == doc
    with pytest.raises(ValueError):
        Document.from_dict({"name": "Mitte"})
