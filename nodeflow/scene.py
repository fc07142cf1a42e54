"""The scene: the set of nodes and connections forming one flow graph."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from nodeflow.connection import Connection
from nodeflow.geometry import Point, PortLayout, PortType
from nodeflow.node import Node
from nodeflow.registry import DataModelRegistry, NodeDataModel, NodeDataType, TypeConverter

_log = logging.getLogger(__name__)

T = TypeVar("T")

_LAYOUT_NAMES = {PortLayout.HORIZONTAL: "Horizontal", PortLayout.VERTICAL: "Vertical"}


class _Signal(Generic[T]):
    """A list of callbacks invoked with one argument."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[T], Any]] = []

    def connect(self, callback: Callable[[T], Any]) -> None:
        self._callbacks.append(callback)

    def emit(self, value: T) -> None:
        for callback in list(self._callbacks):
            callback(value)


def _parse_uuid(text: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(text))
    except ValueError:
        return None


def _place_ends(connection: Connection) -> None:
    """Put every attached end of ``connection`` on its port; a loose end follows the other."""
    attached: Optional[Point] = None
    for port_type in (PortType.IN, PortType.OUT):
        node = connection.get_node(port_type)
        if node is None:
            continue
        position = node.geometry.port_scene_position(
            connection.get_port_index(port_type), port_type, node.position
        )
        connection.geometry.set_end_point(port_type, position)
        attached = position
    loose = connection.required_port
    if loose is not PortType.NONE and attached is not None:
        connection.geometry.set_end_point(loose, attached)


class FlowScene:
    """Nodes and connections of one graph, created from a model registry."""

    def __init__(
        self,
        registry: Optional[DataModelRegistry] = None,
        layout: PortLayout = PortLayout.HORIZONTAL,
    ) -> None:
        self.registry = registry if registry is not None else DataModelRegistry()
        self.nodes: dict[uuid.UUID, Node] = {}
        self.connections: dict[uuid.UUID, Connection] = {}
        self.layout = layout
        self.node_created: _Signal[Node] = _Signal()
        self.node_deleted: _Signal[Node] = _Signal()
        self.connection_created: _Signal[Connection] = _Signal()
        self.connection_deleted: _Signal[Connection] = _Signal()

    # ------------------------------------------------------------------ connections

    def create_connection(self, port_type: PortType, node: Node, port_index: int) -> Connection:
        """A connection attached to ``node`` at one end, waiting for the other."""
        connection = Connection.dragging(port_type, node, port_index)
        connection.geometry.port_layout = self.layout
        _place_ends(connection)
        self.connections[connection.id] = connection
        return connection

    def create_connection_between(
        self,
        node_in: Node,
        port_index_in: int,
        node_out: Node,
        port_index_out: int,
        converter: Optional[TypeConverter] = None,
    ) -> Connection:
        """Connect output ``port_index_out`` of ``node_out`` to input ``port_index_in`` of ``node_in``."""
        if not 0 <= port_index_in < node_in.model.n_ports(PortType.IN):
            raise IndexError("the node model doesn't provide this input port index")
        if not 0 <= port_index_out < node_out.model.n_ports(PortType.OUT):
            raise IndexError("the node model doesn't provide this output port index")

        connection = Connection.between(
            node_in, port_index_in, node_out, port_index_out, converter
        )
        node_in.node_state.set_connection(PortType.IN, port_index_in, connection)
        node_out.node_state.set_connection(PortType.OUT, port_index_out, connection)

        connection.geometry.port_layout = self.layout
        _place_ends(connection)

        node_out.on_data_updated(port_index_out)

        self.connections[connection.id] = connection
        self.connection_created.emit(connection)
        return connection

    def restore_connection(self, data: dict[str, Any]) -> Optional[Connection]:
        """Recreate a saved connection; None if either of its nodes is missing."""
        in_id = _parse_uuid(data.get("in_id", ""))
        out_id = _parse_uuid(data.get("out_id", ""))
        port_index_in = int(data.get("in_index", 0))
        port_index_out = int(data.get("out_index", 0))

        node_in = self.nodes.get(in_id) if in_id is not None else None
        node_out = self.nodes.get(out_id) if out_id is not None else None
        if node_in is None or node_out is None:
            _log.debug(
                "invalid connection with ids %s and %s", data.get("in_id"), data.get("out_id")
            )
            return None

        converter: Optional[TypeConverter] = None
        converter_json = data.get("converter")
        if converter_json is not None:
            converter_json = converter_json if isinstance(converter_json, dict) else {}

            def data_type(key: str) -> NodeDataType:
                entry = converter_json.get(key)
                entry = entry if isinstance(entry, dict) else {}
                return NodeDataType(str(entry.get("id", "")), str(entry.get("name", "")))

            converter = self.registry.get_type_converter(data_type("out"), data_type("in"))

        connection = self.create_connection_between(
            node_in, port_index_in, node_out, port_index_out, converter
        )
        connection.geometry.port_layout = self.layout
        return connection

    def delete_connection(self, connection: Connection) -> None:
        """Detach ``connection`` from its nodes and drop it; its input end gets empty data."""
        connection.remove_from_nodes()
        self.connections.pop(connection.id, None)
        self.connection_deleted.emit(connection)
        connection.propagate_empty_data()

    # ------------------------------------------------------------------ nodes

    def create_node(self, model: NodeDataModel) -> Node:
        """Place a new node holding ``model`` in the scene."""
        node = Node(model)
        node.geometry.port_layout = self.layout
        self.nodes[node.id] = node
        self.node_created.emit(node)
        return node

    def restore_node(self, data: dict[str, Any]) -> Node:
        """Recreate a saved node through the registry; ValueError if its model is unknown."""
        model_json = data.get("model")
        model_name = model_json.get("name", "") if isinstance(model_json, dict) else ""
        model = self.registry.create(str(model_name))
        if model is None:
            raise ValueError(f"No registered model with name {model_name}")

        node = Node(model)
        node.restore(data)
        node.geometry.port_layout = self.layout
        self.nodes[node.id] = node
        self.node_created.emit(node)
        return node

    def remove_node(self, node: Node) -> None:
        """Remove ``node`` and every connection attached to it."""
        self.node_deleted.emit(node)
        attached = [
            connection
            for port_type in (PortType.IN, PortType.OUT)
            for entries in node.node_state.get_entries(port_type)
            for connection in list(entries.values())
        ]
        for connection in attached:
            self.delete_connection(connection)
        self.nodes.pop(node.id, None)

    # ------------------------------------------------------------------ iteration

    def iterate_over_nodes(self) -> Iterator[Node]:
        yield from list(self.nodes.values())

    def iterate_over_node_data(self) -> Iterator[NodeDataModel]:
        for node in list(self.nodes.values()):
            yield node.model

    def iterate_over_node_data_dependent_order(self) -> Iterator[NodeDataModel]:
        """Models ordered so that each comes after the nodes feeding its inputs.

        Raises ValueError if the connections form a cycle.
        """
        visited: set[uuid.UUID] = set()

        def input_sources(node: Node) -> Iterator[Optional[Node]]:
            for index in range(node.model.n_ports(PortType.IN)):
                for connection in node.node_state.connections(PortType.IN, index).values():
                    yield connection.get_node(PortType.OUT)

        for node in list(self.nodes.values()):
            if not any(True for _ in input_sources(node)):
                visited.add(node.id)
                yield node.model

        while len(visited) < len(self.nodes):
            progressed = False
            for node in list(self.nodes.values()):
                if node.id in visited:
                    continue
                if all(
                    source is None or source.id in visited for source in input_sources(node)
                ):
                    visited.add(node.id)
                    progressed = True
                    yield node.model
            if not progressed:
                raise ValueError("the nodes' connections form a cycle")

    # ------------------------------------------------------------------ placement

    def get_node_position(self, node: Node) -> Point:
        return node.position

    def set_node_position(self, node: Node, pos: Point) -> None:
        node.position = pos
        node.move_connections()

    def get_node_size(self, node: Node) -> tuple[float, float]:
        return (node.geometry.width, node.geometry.height)

    def set_layout(self, layout: PortLayout) -> None:
        """Use ``layout`` for the scene and for every node and connection in it."""
        self.layout = layout
        for node in self.nodes.values():
            node.geometry.port_layout = layout
        for connection in self.connections.values():
            connection.geometry.port_layout = layout

    # ------------------------------------------------------------------ persistence

    def clear_scene(self) -> None:
        """Delete every connection, then every node."""
        while self.connections:
            self.delete_connection(next(iter(self.connections.values())))
        while self.nodes:
            self.remove_node(next(iter(self.nodes.values())))

    def save_to_memory(self) -> bytes:
        """The scene as a JSON document."""
        connections = [connection.save() for connection in self.connections.values()]
        scene_json = {
            "layout": _LAYOUT_NAMES[self.layout],
            "nodes": [node.save() for node in self.nodes.values()],
            "connections": [data for data in connections if data],
        }
        return json.dumps(scene_json, indent=4, sort_keys=True).encode("utf-8")

    def load_from_memory(self, data: bytes | str) -> None:
        """Add the nodes and connections of a JSON document to the scene."""
        try:
            document = json.loads(data)
        except (TypeError, ValueError):
            document = {}
        if not isinstance(document, dict):
            document = {}

        layout_name = document.get("layout")
        self.set_layout(
            PortLayout.HORIZONTAL if layout_name == "Horizontal" else PortLayout.VERTICAL
        )

        nodes = document.get("nodes")
        for node_json in nodes if isinstance(nodes, list) else []:
            self.restore_node(node_json if isinstance(node_json, dict) else {})

        connections = document.get("connections")
        for connection_json in connections if isinstance(connections, list) else []:
            self.restore_connection(connection_json if isinstance(connection_json, dict) else {})

    def save(self, path: str | Path) -> Path:
        """Write the scene to ``path``, adding a ``.flow`` suffix if missing; returns the path."""
        target = Path(path)
        if not target.name.lower().endswith("flow"):
            target = target.with_name(target.name + ".flow")
        target.write_bytes(self.save_to_memory())
        return target

    def load(self, path: str | Path) -> None:
        """Clear the scene and load it from ``path``; a missing file leaves it empty."""
        self.clear_scene()
        source = Path(path)
        if not source.is_file():
            return
        try:
            data = source.read_bytes()
        except OSError:
            return
        self.load_from_memory(data)


def locate_node_at(scene: FlowScene, scene_point: Point) -> Optional[Node]:
    """The topmost node whose bounds contain ``scene_point``, or None."""
    for node in reversed(list(scene.nodes.values())):
        if node.geometry.bounding_rect().contains(scene_point - node.position):
            return node
    return None