"""A connection between an output port of one node and an input port of another.

A node used here exposes ``id``, ``model`` (a NodeDataModel), ``node_state``
(a NodeState) and ``propagate_data(data, in_port_index)``.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Callable, Optional

from nodeflow import styles
from nodeflow.geometry import ConnectionGeometry, PortType, opposite_port
from nodeflow.node_state import ConnectionState
from nodeflow.registry import NodeDataType, TypeConverter


class Connection:
    """Both ends of a link, its converter, drag state and curve geometry."""

    def __init__(self) -> None:
        self.id = uuid.uuid4()
        self.style = copy.deepcopy(styles.connection_style())
        self.in_node: Any = None
        self.out_node: Any = None
        self.in_port_index: Optional[int] = None
        self.out_port_index: Optional[int] = None
        self.state = ConnectionState()
        self.geometry = ConnectionGeometry()
        self.converter: Optional[TypeConverter] = None
        self.updated_callbacks: list[Callable[[Connection], None]] = []

    @classmethod
    def dragging(cls, port_type: PortType, node: Any, port_index: int) -> Connection:
        """A connection attached at one end and being dragged to find the other."""
        connection = cls()
        connection.set_node_to_port(node, port_type, port_index)
        connection.set_required_port(opposite_port(port_type))
        return connection

    @classmethod
    def between(
        cls,
        node_in: Any,
        port_index_in: int,
        node_out: Any,
        port_index_out: int,
        converter: Optional[TypeConverter] = None,
    ) -> Connection:
        """A complete connection from ``node_out`` to ``node_in``."""
        connection = cls()
        connection.converter = converter
        connection.set_node_to_port(node_in, PortType.IN, port_index_in)
        connection.set_node_to_port(node_out, PortType.OUT, port_index_out)
        return connection

    @property
    def required_port(self) -> PortType:
        return self.state.required_port

    def save(self) -> dict[str, Any]:
        """The JSON-ready description; empty while either end is unattached."""
        if self.in_node is None or self.out_node is None:
            return {}
        data: dict[str, Any] = {
            "in_id": str(self.in_node.id),
            "in_index": self.in_port_index,
            "out_id": str(self.out_node.id),
            "out_index": self.out_port_index,
        }
        if self.converter is not None:
            def type_json(port_type: PortType) -> dict[str, str]:
                data_type = self.data_type(port_type)
                return {"id": data_type.id, "name": data_type.name}

            data["converter"] = {"in": type_json(PortType.IN), "out": type_json(PortType.OUT)}
        return data

    def set_required_port(self, port_type: PortType) -> None:
        """Mark ``port_type`` as the end still looking for a port, detaching it."""
        self.state.set_required_port(port_type)
        if port_type is PortType.OUT:
            self.out_node = None
            self.out_port_index = None
        elif port_type is PortType.IN:
            self.in_node = None
            self.in_port_index = None

    def get_port_index(self, port_type: PortType) -> Optional[int]:
        if port_type is PortType.IN:
            return self.in_port_index
        if port_type is PortType.OUT:
            return self.out_port_index
        return None

    def set_node_to_port(self, node: Any, port_type: PortType, port_index: int) -> None:
        if port_type is PortType.OUT:
            self.out_node = node
            self.out_port_index = port_index
        elif port_type is PortType.IN:
            self.in_node = node
            self.in_port_index = port_index
        else:
            raise ValueError("cannot attach a node to PortType.NONE")
        self.state.set_no_required_port()
        for callback in list(self.updated_callbacks):
            callback(self)

    def remove_from_nodes(self) -> None:
        """Erase this connection from the state of the nodes it is attached to."""
        if self.in_node is not None:
            self.in_node.node_state.erase_connection(PortType.IN, self.in_port_index, self.id)
        if self.out_node is not None:
            self.out_node.node_state.erase_connection(PortType.OUT, self.out_port_index, self.id)

    def get_node(self, port_type: PortType) -> Any:
        if port_type is PortType.IN:
            return self.in_node
        if port_type is PortType.OUT:
            return self.out_node
        return None

    def clear_node(self, port_type: PortType) -> None:
        if port_type is PortType.IN:
            self.in_node = None
            self.in_port_index = None
        elif port_type is PortType.OUT:
            self.out_node = None
            self.out_port_index = None
        else:
            raise ValueError("a connection has no node at PortType.NONE")

    def data_type(self, port_type: PortType) -> NodeDataType:
        """The data type at ``port_type``'s end, or at whichever end is attached."""
        if self.in_node is not None and self.out_node is not None:
            if port_type is PortType.IN:
                return self.in_node.model.data_type(port_type, self.in_port_index)
            return self.out_node.model.data_type(port_type, self.out_port_index)
        if self.in_node is not None:
            return self.in_node.model.data_type(PortType.IN, self.in_port_index)
        if self.out_node is not None:
            return self.out_node.model.data_type(PortType.OUT, self.out_port_index)
        raise RuntimeError("connection is attached to no node")

    def propagate_data(self, data: Any) -> None:
        """Deliver ``data``, converted if needed, to the input end."""
        if self.in_node is None:
            return
        if self.converter is not None:
            data = self.converter(data)
        self.in_node.propagate_data(data, self.in_port_index)

    def propagate_empty_data(self) -> None:
        self.propagate_data(None)