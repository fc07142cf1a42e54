"""Node data models and the registry that creates them by name."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Iterable, Optional, Sequence

from nodeflow import styles
from nodeflow.geometry import PortType

_log = logging.getLogger(__name__)

TypeConverter = Callable[[Any], Any]


@dataclass(frozen=True)
class NodeDataType:
    """Identifier and display name of the data carried by a port."""

    id: str = ""
    name: str = ""


class ConnectionPolicy(Enum):
    ONE = auto()
    MANY = auto()


class NodeValidationState(Enum):
    VALID = auto()
    WARNING = auto()
    ERROR = auto()


class NodeDataModel:
    """The data side of a node: its ports, their types and the data flowing through them.

    ``embedded_widget`` may be any object with ``width`` and ``height``
    attributes; the node geometry makes room for it.
    """

    def __init__(
        self,
        name: str,
        in_types: Iterable[NodeDataType] = (),
        out_types: Iterable[NodeDataType] = (),
        *,
        out_policy: ConnectionPolicy = ConnectionPolicy.ONE,
        resizable: bool = False,
    ) -> None:
        self.name = name
        self.in_types: list[NodeDataType] = list(in_types)
        self.out_types: list[NodeDataType] = list(out_types)
        self.out_policy = out_policy
        self.resizable = resizable
        self.node_style = copy.deepcopy(styles.node_style())
        self.embedded_widget: Any = None
        self.validation_state = NodeValidationState.VALID
        self.validation_message = ""
        self.inputs: dict[int, Any] = {}
        self.outputs: dict[int, Any] = {}
        self.data_updated_callbacks: list[Callable[[int], None]] = []

    def _ports(self, port_type: PortType) -> Sequence[NodeDataType]:
        if port_type is PortType.IN:
            return self.in_types
        if port_type is PortType.OUT:
            return self.out_types
        return ()

    def save(self) -> dict[str, Any]:
        """The JSON-ready description of this model."""
        return {"name": self.name}

    def restore(self, data: dict[str, Any]) -> None:
        """Restore from saved data; the saved name must match this model's."""
        saved_name = data.get("name")
        if saved_name is not None and saved_name != self.name:
            raise ValueError(f"saved model {saved_name!r} does not match {self.name!r}")

    def n_ports(self, port_type: PortType) -> int:
        return len(self._ports(port_type))

    def data_type(self, port_type: PortType, index: int) -> NodeDataType:
        if port_type is PortType.NONE:
            raise ValueError("PortType.NONE has no data types")
        ports = self._ports(port_type)
        if index is None or not 0 <= index < len(ports):
            raise IndexError(f"no {port_type.name} port with index {index}")
        return ports[index]

    def port_out_connection_policy(self, index: int) -> ConnectionPolicy:
        return self.out_policy

    def set_in_data(self, data: Any, index: int) -> None:
        """Receive data (None for empty) on the input port ``index``."""
        self.inputs[index] = data

    def out_data(self, index: int) -> Any:
        """The data currently offered on the output port ``index``, or None."""
        return self.outputs.get(index)

    def notify_data_updated(self, index: int) -> None:
        """Tell listeners that the output port ``index`` has new data."""
        for callback in list(self.data_updated_callbacks):
            callback(index)


class DataModelRegistry:
    """Creators of node data models, grouped by category, plus type converters."""

    def __init__(self) -> None:
        self.registered_model_creators: dict[str, Callable[[], NodeDataModel]] = {}
        self.registered_models_category: dict[str, str] = {}
        self.categories: set[str] = set()
        self.type_converters: dict[tuple[NodeDataType, NodeDataType], TypeConverter] = {}

    def register_model(
        self, creator: Callable[[], NodeDataModel], category: str = "Nodes"
    ) -> None:
        """Register ``creator`` under the name of the model it makes; the first one wins."""
        name = creator().name
        if name in self.registered_model_creators:
            return
        self.registered_model_creators[name] = creator
        self.registered_models_category[name] = category
        self.categories.add(category)

    def create(self, model_name: str) -> Optional[NodeDataModel]:
        """A new model registered as ``model_name``, or None if there is none."""
        creator = self.registered_model_creators.get(model_name)
        if creator is not None:
            return creator()
        _log.debug(
            "unable to create [%s]; candidates are: %s",
            model_name,
            ", ".join(self.registered_model_creators),
        )
        return None

    def register_type_converter(
        self, source: NodeDataType, target: NodeDataType, converter: TypeConverter
    ) -> None:
        self.type_converters[(source, target)] = converter

    def get_type_converter(
        self, source: NodeDataType, target: NodeDataType
    ) -> Optional[TypeConverter]:
        return self.type_converters.get((source, target))

    def registered_models_by_category(self, category: str) -> set[str]:
        return {
            name
            for name, model_category in self.registered_models_category.items()
            if model_category == category
        }