"""Per-node connection bookkeeping and per-connection drag state."""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from nodeflow.geometry import PortType
from nodeflow.registry import NodeDataModel, NodeDataType

if TYPE_CHECKING:
    from nodeflow.connection import Connection


class ReactionState(Enum):
    REACTING = auto()
    NOT_REACTING = auto()


class NodeState:
    """The connections attached to each port of a node and its reaction to a dragged connection."""

    def __init__(self, model: NodeDataModel) -> None:
        self.in_connections: list[dict[UUID, Connection]] = [
            {} for _ in range(model.n_ports(PortType.IN))
        ]
        self.out_connections: list[dict[UUID, Connection]] = [
            {} for _ in range(model.n_ports(PortType.OUT))
        ]
        self.reaction = ReactionState.NOT_REACTING
        self.reacting_port_type = PortType.NONE
        self.reacting_data_type = NodeDataType()
        self.resizing = False

    def get_entries(self, port_type: PortType) -> list[dict[UUID, Connection]]:
        """The per-port connection maps for inputs, or for outputs otherwise."""
        return self.in_connections if port_type is PortType.IN else self.out_connections

    def connections(self, port_type: PortType, port_index: Optional[int]) -> dict[UUID, Connection]:
        """A copy of the connections on one port; empty for an invalid index."""
        entries = self.get_entries(port_type)
        if port_index is None or not 0 <= port_index < len(entries):
            return {}
        return dict(entries[port_index])

    def set_connection(self, port_type: PortType, port_index: int, connection: Connection) -> None:
        entries = self.get_entries(port_type)
        if not 0 <= port_index < len(entries):
            raise IndexError(f"no {port_type.name} port with index {port_index}")
        entries[port_index][connection.id] = connection

    def erase_connection(self, port_type: PortType, port_index: int, connection_id: UUID) -> None:
        self.get_entries(port_type)[port_index].pop(connection_id, None)

    def set_reaction(
        self,
        reaction: ReactionState,
        reacting_port_type: PortType = PortType.NONE,
        reacting_data_type: NodeDataType = NodeDataType(),
    ) -> None:
        self.reaction = reaction
        self.reacting_port_type = reacting_port_type
        self.reacting_data_type = reacting_data_type

    def is_reacting(self) -> bool:
        return self.reaction is ReactionState.REACTING


class ConnectionState:
    """Which end of a connection still needs a port, and the node it last hovered."""

    def __init__(self, required_port: PortType = PortType.NONE) -> None:
        self.required_port = required_port
        self.last_hovered_node: Any = None

    def interact_with_node(self, node: Any) -> None:
        if node is not None:
            self.last_hovered_node = node
        else:
            self.reset_last_hovered_node()

    def reset_last_hovered_node(self) -> None:
        if self.last_hovered_node is not None:
            self.last_hovered_node.reset_reaction_to_connection()
        self.last_hovered_node = None

    def set_required_port(self, port_type: PortType) -> None:
        self.required_port = port_type

    def set_no_required_port(self) -> None:
        self.required_port = PortType.NONE

    def requires_port(self) -> bool:
        return self.required_port is not PortType.NONE