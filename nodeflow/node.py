"""Graph nodes and the operations that attach connections to them."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Optional

from nodeflow.geometry import Point, PortType, opposite_port
from nodeflow.node_geometry import NodeGeometry
from nodeflow.node_state import NodeState, ReactionState
from nodeflow.registry import ConnectionPolicy, NodeDataModel, NodeDataType, TypeConverter

if TYPE_CHECKING:
    from nodeflow.connection import Connection


def _place_connection(connection: Connection) -> None:
    """Move both ends of ``connection`` onto the ports they are attached to."""
    for port_type in (PortType.IN, PortType.OUT):
        node = connection.get_node(port_type)
        if node is None:
            continue
        position = node.geometry.port_scene_position(
            connection.get_port_index(port_type), port_type, node.position
        )
        connection.geometry.set_end_point(port_type, position)


class Node:
    """A data model placed in the scene, with its connection state and geometry."""

    def __init__(self, model: NodeDataModel) -> None:
        self.id = uuid.uuid4()
        self.model = model
        self.node_state = NodeState(model)
        self.geometry = NodeGeometry(model)
        self.position = Point()
        self.geometry.recalculate_size()
        model.data_updated_callbacks.append(self.on_data_updated)

    def _attached_connections(self) -> list[Connection]:
        return [
            connection
            for port_type in (PortType.IN, PortType.OUT)
            for entries in self.node_state.get_entries(port_type)
            for connection in entries.values()
        ]

    def save(self) -> dict[str, Any]:
        """The JSON-ready description; ``position.x`` is the horizontal centre."""
        width = self.geometry.bounding_rect().width
        return {
            "id": str(self.id),
            "model": self.model.save(),
            "position": {"x": self.position.x + width * 0.5, "y": self.position.y},
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Restore identifier, model and position from saved data."""
        self.id = uuid.UUID(data["id"])
        self.model.restore(data.get("model", {}))
        width = self.geometry.bounding_rect().width
        position = data.get("position", {})
        self.position = Point(
            float(position.get("x", 0.0)) - width * 0.5, float(position.get("y", 0.0))
        )

    def react_to_possible_connection(
        self, port_type: PortType, data_type: NodeDataType, scene_point: Point
    ) -> None:
        """Record that a connection of ``data_type`` is being dragged over this node."""
        self.geometry.dragging_pos = scene_point - self.position
        self.node_state.set_reaction(ReactionState.REACTING, port_type, data_type)

    def reset_reaction_to_connection(self) -> None:
        self.node_state.set_reaction(ReactionState.NOT_REACTING)

    def propagate_data(self, data: Any, in_port_index: int) -> None:
        """Hand ``data`` to the model's input port and refresh the layout."""
        self.model.set_in_data(data, in_port_index)
        self.geometry.recalculate_size()
        self.move_connections()

    def on_data_updated(self, index: int) -> None:
        """Push the model's output ``index`` along every connection leaving it."""
        data = self.model.out_data(index)
        for connection in self.node_state.connections(PortType.OUT, index).values():
            connection.propagate_data(data)

    def on_node_size_updated(self) -> None:
        """Recompute the size, keeping the node centred horizontally."""
        previous_width = self.geometry.width
        self.geometry.recalculate_size()
        new_width = self.geometry.width
        if new_width != previous_width:
            shift = (new_width - previous_width) * 0.5
            self.position = Point(self.position.x - shift, self.position.y)
        self.move_connections()

    def move_connections(self) -> None:
        """Place the ends of every attached connection on their ports."""
        for connection in self._attached_connections():
            _place_connection(connection)


class NodeConnectionInteraction:
    """Operations on one node together with one connection being attached or detached.

    ``scene`` must expose a ``registry`` holding the type converters.
    """

    def __init__(self, node: Node, connection: Connection, scene: Any) -> None:
        self.node = node
        self.connection = connection
        self.scene = scene

    def _port_is_vacant(self, port_type: PortType, port_index: int) -> bool:
        if not self.node.node_state.get_entries(port_type)[port_index]:
            return True
        policy = self.node.model.port_out_connection_policy(port_index)
        return port_type is PortType.OUT and policy is ConnectionPolicy.MANY

    def can_connect(self) -> Optional[tuple[int, Optional[TypeConverter]]]:
        """The port index and converter (None if not needed) to connect with, or None.

        The connection must need a port, must not come from this node, its
        loose end must lie over a vacant port, and the data types must match
        or have a registered converter.
        """
        required = self.connection.required_port
        if required is PortType.NONE:
            return None

        if self.connection.get_node(opposite_port(required)) is self.node:
            return None

        end_point = self.connection.geometry.get_end_point(required)
        port_index = self.node.geometry.check_hit_scene_point(
            required, end_point, self.node.position
        )
        if port_index is None:
            return None

        if not self._port_is_vacant(required, port_index):
            return None

        connection_type = self.connection.data_type(opposite_port(required))
        candidate_type = self.node.model.data_type(required, port_index)
        if connection_type.id == candidate_type.id:
            return port_index, None

        registry = self.scene.registry
        if required is PortType.IN:
            converter = registry.get_type_converter(connection_type, candidate_type)
        else:
            converter = registry.get_type_converter(candidate_type, connection_type)
        if converter is None:
            return None
        return port_index, converter

    def try_connect(self) -> bool:
        """Attach the connection's loose end to this node if possible; True on success."""
        result = self.can_connect()
        if result is None:
            return False
        port_index, converter = result

        if converter is not None:
            self.connection.converter = converter

        required = self.connection.required_port
        self.node.node_state.set_connection(required, port_index, self.connection)
        self.connection.set_node_to_port(self.node, required, port_index)

        self.node.move_connections()

        out_node = self.connection.get_node(PortType.OUT)
        if out_node is not None:
            out_node.on_data_updated(self.connection.get_port_index(PortType.OUT))
        return True

    def disconnect(self, port_type: PortType) -> bool:
        """Detach the ``port_type`` end from this node, leaving it needing a port."""
        port_index = self.connection.get_port_index(port_type)
        self.node.node_state.get_entries(port_type)[port_index].clear()
        self.connection.propagate_empty_data()
        self.connection.clear_node(port_type)
        self.connection.set_required_port(port_type)
        return True