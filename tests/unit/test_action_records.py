import gzip
import json

import pytest

from photon_replication.document import Document
from photon_replication.errors import ActionValidationError, SegmentFormatError
from photon_replication.replication.actions import (
    ActionType,
    DeleteAction,
    DeleteOsmAction,
    DocumentAction,
    action_from_dict,
    action_to_dict,
    decode_batch,
    document_action,
    dumps_batch,
    encode_batch,
    loads_batch,
)


@pytest.mark.unit
def test_document_action_takes_id_from_document():
    doc = Document(uid="n1", attributes={"name": "Berlin", "osm_id": 240109189})
    record = document_action(ActionType.CREATE, doc)

    assert record == DocumentAction(
        action=ActionType.CREATE,
        id="n1",
        doc={"uid": "n1", "name": "Berlin", "osm_id": 240109189},
    )


@pytest.mark.unit
def test_document_action_accepts_plain_mapping():
    record = document_action(ActionType.UPDATE_OR_CREATE, {"uid": "w5", "name": "x"})
    assert record.id == "w5"
    assert record.action is ActionType.UPDATE_OR_CREATE


@pytest.mark.unit
def test_document_action_without_uid_is_rejected():
    with pytest.raises(ActionValidationError):
        document_action(ActionType.CREATE, {"name": "nameless"})


@pytest.mark.unit
@pytest.mark.parametrize("action", [ActionType.DELETE, ActionType.DELETE_OSM])
def test_document_action_rejects_delete_variants(action):
    with pytest.raises(ActionValidationError):
        DocumentAction(action=action, id="n1", doc={})


@pytest.mark.unit
def test_delete_osm_requires_integer_id():
    with pytest.raises(ActionValidationError):
        DeleteOsmAction(osm_type="way", osm_id="123")
    with pytest.raises(ActionValidationError):
        DeleteOsmAction(osm_type="way", osm_id=True)


@pytest.mark.unit
def test_delete_requires_id():
    with pytest.raises(ActionValidationError):
        DeleteAction(id="")


@pytest.mark.unit
def test_wire_shape_per_variant():
    assert action_to_dict(DeleteAction(id="n1")) == {"action": "DELETE", "id": "n1"}
    assert action_to_dict(
        DeleteOsmAction(
            osm_type="way", osm_id=123, osm_key="highway", osm_value="residential"
        )
    ) == {
        "action": "DELETE_OSM",
        "osmType": "way",
        "osmId": 123,
        "osmKey": "highway",
        "osmValue": "residential",
    }
    assert action_to_dict(DeleteOsmAction(osm_type="node", osm_id=7)) == {
        "action": "DELETE_OSM",
        "osmType": "node",
        "osmId": 7,
    }


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        {"action": "DELETE", "id": "n1", "doc": {"uid": "n1"}},
        {"action": "DELETE", "id": "n1", "osmType": "node"},
        {"action": "CREATE", "id": "n1", "doc": {}, "osmId": 4},
        {"action": "DELETE_OSM", "osmType": "way", "osmId": 1, "id": "w1"},
        {"action": "UPDATE", "id": "n1"},
        {"action": "MERGE", "id": "n1"},
    ],
)
def test_action_from_dict_rejects_mixed_or_unknown_shapes(payload):
    with pytest.raises(ActionValidationError):
        action_from_dict(payload)


@pytest.mark.unit
def test_mixed_batch_survives_serialisation():
    records = [
        DocumentAction(action=ActionType.CREATE, id="n1", doc={"uid": "n1", "a": 1}),
        DocumentAction(action=ActionType.UPDATE, id="w5", doc={"uid": "w5"}),
        DeleteAction(id="r9"),
        DeleteOsmAction(osm_type="way", osm_id=123, osm_key="highway"),
        DocumentAction(
            action=ActionType.UPDATE_OR_CREATE,
            id="n2",
            doc={"uid": "n2", "name": {"default": "Zürich"}},
        ),
    ]

    assert loads_batch(dumps_batch(records)) == records
    assert decode_batch(encode_batch(records)) == records


@pytest.mark.unit
def test_batch_json_is_compact_array():
    text = dumps_batch([DeleteAction(id="n1")])
    assert text == '[{"action":"DELETE","id":"n1"}]'


@pytest.mark.unit
def test_encoded_batch_is_gzip():
    data = encode_batch([DeleteAction(id="n1")])
    assert json.loads(gzip.decompress(data)) == [{"action": "DELETE", "id": "n1"}]


@pytest.mark.unit
def test_decode_batch_reports_garbage_as_format_error():
    with pytest.raises(SegmentFormatError):
        decode_batch(b"not gzip at all")
    with pytest.raises(SegmentFormatError):
        decode_batch(gzip.compress(b'{"action": "DELETE"}'))
    with pytest.raises(SegmentFormatError):
        decode_batch(gzip.compress(b'[{"action": "DELETE", "doc": {}}]'))


@pytest.mark.unit
def test_lone_surrogate_survives_encoding():
    doc = json.loads('{"uid": "n1", "name": "\\udc80 broken"}')
    records = [DocumentAction(action=ActionType.UPDATE, id="n1", doc=doc)]

    data = encode_batch(records)

    assert b"\\udc80" in gzip.decompress(data)
    assert decode_batch(data) == records
