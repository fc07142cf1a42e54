"""Reading and writing behaviour-tree node models in their XML form."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


class NodeType(Enum):
    UNDEFINED = auto()
    ACTION = auto()
    CONDITION = auto()
    CONTROL = auto()
    DECORATOR = auto()
    SUBTREE = auto()

    @classmethod
    def from_string(cls, text: str) -> NodeType:
        """The node type named by an XML tag; UNDEFINED for anything else."""
        return _NODE_TYPE_NAMES.get(text, cls.UNDEFINED)


_NODE_TYPE_NAMES: dict[str, NodeType] = {
    "Action": NodeType.ACTION,
    "Condition": NodeType.CONDITION,
    "Control": NodeType.CONTROL,
    "Decorator": NodeType.DECORATOR,
    "SubTree": NodeType.SUBTREE,
    "SubTreePlus": NodeType.SUBTREE,
}


class PortDirection(Enum):
    INPUT = auto()
    OUTPUT = auto()
    INOUT = auto()


_PORT_TAGS: dict[PortDirection, str] = {
    PortDirection.INPUT: "input_port",
    PortDirection.OUTPUT: "output_port",
    PortDirection.INOUT: "inout_port",
}


@dataclass
class PortModel:
    """Direction, type, default value and description of one port."""

    type_name: str = ""
    direction: PortDirection = PortDirection.INOUT
    description: str = ""
    default_value: str = ""


@dataclass
class NodeModel:
    """A node kind: its type, the ID it is registered under and its ports by name."""

    type: NodeType = NodeType.UNDEFINED
    registration_id: str = ""
    ports: dict[str, PortModel] = field(default_factory=dict)


def build_tree_node_model_from_xml(element: ET.Element) -> NodeModel:
    """The node model described by ``element``; an empty model if its tag names no node type.

    Attributes other than ``ID`` and ``name`` become in/out ports; ``input_port``,
    ``output_port`` and ``inout_port`` children become ports of that direction.
    When a port name appears twice, the first definition is kept.
    """
    tag = element.tag if isinstance(element.tag, str) else ""
    node_type = NodeType.from_string(tag)
    if node_type is NodeType.UNDEFINED:
        return NodeModel()

    registration_id = element.get("ID", tag)
    ports: dict[str, PortModel] = {}

    for attr_name in element.attrib:
        if attr_name not in ("ID", "name"):
            ports.setdefault(attr_name, PortModel(direction=PortDirection.INOUT))

    for direction, port_tag in _PORT_TAGS.items():
        for port_element in element.findall(port_tag):
            port_name = port_element.get("name")
            if port_name is None:
                continue
            ports.setdefault(
                port_name,
                PortModel(
                    type_name=port_element.get("type", ""),
                    direction=direction,
                    description="".join(port_element.itertext()),
                    default_value=port_element.get("default", ""),
                ),
            )

    return NodeModel(node_type, registration_id, ports)


def read_tree_nodes_model(root: Union[ET.Element, ET.ElementTree]) -> dict[str, NodeModel]:
    """All node models declared in ``<TreeNodesModel>`` or used inside ``<BehaviorTree>``.

    Declarations in ``<TreeNodesModel>`` come first and take precedence over
    models inferred from the trees.
    """
    if isinstance(root, ET.ElementTree):
        root = root.getroot()
    models: dict[str, NodeModel] = {}

    model_root = root.find("TreeNodesModel")
    if model_root is not None:
        for node in model_root:
            model = build_tree_node_model_from_xml(node)
            models.setdefault(model.registration_id, model)

    for tree_root in root.findall("BehaviorTree"):
        first_child = next(iter(tree_root), None)
        if first_child is None:
            continue
        for node in first_child.iter():
            model = build_tree_node_model_from_xml(node)
            if (
                model.type is not NodeType.UNDEFINED
                and model.registration_id
                and model.registration_id not in models
            ):
                models[model.registration_id] = model

    return models


def write_port_model(port_name: str, port: PortModel) -> ET.Element:
    """The XML element declaring ``port`` under the name ``port_name``."""
    element = ET.Element(_PORT_TAGS[port.direction])
    element.set("name", port_name)
    if port.type_name:
        element.set("type", port.type_name)
    if port.default_value:
        element.set("default", port.default_value)
    if port.description:
        element.text = port.description
    return element