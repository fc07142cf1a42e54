import uuid
from dataclasses import dataclass, field

import pytest

from nodeflow.connection import Connection
from nodeflow.geometry import PortType
from nodeflow.node_state import NodeState
from nodeflow.registry import NodeDataModel, NodeDataType

NUM = NodeDataType("num", "number")
TEXT = NodeDataType("text", "text")


@dataclass
class FakeNode:
    model: NodeDataModel
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    received: list = field(default_factory=list)

    def __post_init__(self):
        self.node_state = NodeState(self.model)

    def propagate_data(self, data, index):
        self.received.append((data, index))


def source_node():
    return FakeNode(NodeDataModel("Source", [], [NUM, NUM]))


def sink_node():
    return FakeNode(NodeDataModel("Sink", [TEXT, TEXT], []))


def test_dragging_from_output():
    node = source_node()
    conn = Connection.dragging(PortType.OUT, node, 1)
    assert conn.get_node(PortType.OUT) is node
    assert conn.get_port_index(PortType.OUT) == 1
    assert conn.required_port is PortType.IN
    assert conn.state.requires_port()
    assert conn.get_node(PortType.IN) is None
    assert conn.get_port_index(PortType.IN) is None


def test_between_attaches_both_ends():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 0, src, 1)
    assert conn.get_node(PortType.IN) is dst
    assert conn.get_node(PortType.OUT) is src
    assert conn.get_port_index(PortType.IN) == 0
    assert conn.get_port_index(PortType.OUT) == 1
    assert conn.required_port is PortType.NONE


def test_ids_are_unique():
    ids = [Connection().id for _ in range(5)]
    assert len(set(ids)) == 5


def test_save_complete_connection():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 1, src, 0)
    assert conn.save() == {
        "in_id": str(dst.id),
        "in_index": 1,
        "out_id": str(src.id),
        "out_index": 0,
    }


def test_save_with_converter_records_types():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 0, src, 0, str)
    saved = conn.save()
    assert saved["converter"] == {
        "in": {"id": "text", "name": "text"},
        "out": {"id": "num", "name": "number"},
    }


def test_save_incomplete_is_empty():
    assert Connection.dragging(PortType.OUT, source_node(), 0).save() == {}


def test_set_required_port_detaches_end():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 0, src, 0)
    conn.set_required_port(PortType.IN)
    assert conn.get_node(PortType.IN) is None
    assert conn.get_port_index(PortType.IN) is None
    assert conn.get_node(PortType.OUT) is src
    assert conn.state.requires_port()


def test_set_node_to_port_completes_drag():
    conn = Connection.dragging(PortType.OUT, source_node(), 0)
    seen = []
    conn.updated_callbacks.append(seen.append)
    dst = sink_node()
    conn.set_node_to_port(dst, PortType.IN, 1)
    assert conn.get_node(PortType.IN) is dst
    assert not conn.state.requires_port()
    assert seen == [conn]


def test_set_node_to_none_port_fails():
    with pytest.raises(ValueError):
        Connection().set_node_to_port(source_node(), PortType.NONE, 0)


def test_clear_node():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 0, src, 1)
    conn.clear_node(PortType.OUT)
    assert conn.get_node(PortType.OUT) is None
    assert conn.get_port_index(PortType.OUT) is None
    with pytest.raises(ValueError):
        conn.clear_node(PortType.NONE)


def test_get_node_none_port():
    conn = Connection.between(sink_node(), 0, source_node(), 0)
    assert conn.get_node(PortType.NONE) is None
    assert conn.get_port_index(PortType.NONE) is None


def test_data_type_both_ends():
    conn = Connection.between(sink_node(), 0, source_node(), 0)
    assert conn.data_type(PortType.IN) == TEXT
    assert conn.data_type(PortType.OUT) == NUM


def test_data_type_single_end_uses_attached_node():
    conn = Connection.dragging(PortType.OUT, source_node(), 0)
    assert conn.data_type(PortType.IN) == NUM


def test_data_type_without_nodes():
    with pytest.raises(RuntimeError):
        Connection().data_type(PortType.IN)


def test_propagate_data_applies_converter():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 1, src, 0, str)
    conn.propagate_data(42)
    assert dst.received == [("42", 1)]
    assert src.received == []


def test_propagate_without_input_end_does_nothing():
    src = source_node()
    conn = Connection.dragging(PortType.OUT, src, 0)
    conn.propagate_data(1)
    assert src.received == []


def test_propagate_empty_data():
    dst = sink_node()
    conn = Connection.between(dst, 0, source_node(), 0)
    conn.propagate_empty_data()
    assert dst.received == [(None, 0)]


def test_remove_from_nodes():
    src, dst = source_node(), sink_node()
    conn = Connection.between(dst, 1, src, 0)
    dst.node_state.set_connection(PortType.IN, 1, conn)
    src.node_state.set_connection(PortType.OUT, 0, conn)
    conn.remove_from_nodes()
    assert dst.node_state.connections(PortType.IN, 1) == {}
    assert src.node_state.connections(PortType.OUT, 0) == {}