import xml.etree.ElementTree as ET

import pytest

from nodeflow.xml_utilities import (
    NodeModel,
    NodeType,
    PortDirection,
    PortModel,
    build_tree_node_model_from_xml,
    read_tree_nodes_model,
    write_port_model,
)


def xml(text):
    return ET.fromstring(text)


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("Action", NodeType.ACTION),
        ("Condition", NodeType.CONDITION),
        ("Control", NodeType.CONTROL),
        ("Decorator", NodeType.DECORATOR),
        ("SubTree", NodeType.SUBTREE),
        ("Sequence", NodeType.UNDEFINED),
    ],
)
def test_node_type_from_string(tag, expected):
    assert NodeType.from_string(tag) is expected


def test_build_uses_id_and_attribute_ports():
    model = build_tree_node_model_from_xml(xml('<Action ID="Foo" name="inst" goal="{g}"/>'))
    assert model.type is NodeType.ACTION
    assert model.registration_id == "Foo"
    assert model.ports == {"goal": PortModel(direction=PortDirection.INOUT)}


def test_build_without_id_uses_tag():
    model = build_tree_node_model_from_xml(xml("<Condition/>"))
    assert model.registration_id == "Condition"
    assert model.ports == {}


def test_build_unknown_tag_gives_empty_model():
    assert build_tree_node_model_from_xml(xml('<Sequence name="s"/>')) == NodeModel()


def test_build_reads_port_children():
    element = xml(
        '<Action ID="Move">'
        '<input_port name="goal" type="Pose" default="0">target</input_port>'
        '<output_port name="result"/>'
        '<inout_port name="state"/>'
        '<input_port type="int"/>'
        "</Action>"
    )
    model = build_tree_node_model_from_xml(element)
    assert model.ports["goal"] == PortModel(
        type_name="Pose", direction=PortDirection.INPUT, description="target", default_value="0"
    )
    assert model.ports["result"].direction is PortDirection.OUTPUT
    assert model.ports["state"].direction is PortDirection.INOUT
    assert set(model.ports) == {"goal", "result", "state"}


def test_build_first_port_definition_wins():
    element = xml(
        '<Action ID="A" speed="1"><input_port name="speed" type="double"/></Action>'
    )
    model = build_tree_node_model_from_xml(element)
    assert model.ports["speed"].direction is PortDirection.INOUT
    assert model.ports["speed"].type_name == ""


def test_read_models_from_declarations_and_trees():
    root = xml(
        "<root>"
        '<BehaviorTree ID="MainTree">'
        '<Sequence><Action ID="Open" door="d"/><Condition ID="IsOpen"/>'
        '<SubTree ID="DoorClosed"/></Sequence>'
        "</BehaviorTree>"
        "<TreeNodesModel>"
        '<Action ID="Open"><input_port name="door" type="Door"/></Action>'
        "</TreeNodesModel>"
        "</root>"
    )
    models = read_tree_nodes_model(root)
    assert set(models) == {"Open", "IsOpen", "DoorClosed"}
    assert models["Open"].ports["door"].direction is PortDirection.INPUT
    assert models["Open"].ports["door"].type_name == "Door"
    assert models["IsOpen"].type is NodeType.CONDITION
    assert models["DoorClosed"].type is NodeType.SUBTREE


def test_read_accepts_element_tree_and_empty_trees():
    root = xml('<root><BehaviorTree ID="Empty"/><BehaviorTree><Action ID="X"/></BehaviorTree></root>')
    models = read_tree_nodes_model(ET.ElementTree(root))
    assert list(models) == ["X"]


def test_read_first_tree_occurrence_wins():
    root = xml(
        "<root><BehaviorTree><Sequence>"
        '<Action ID="Go" a="1"/><Action ID="Go" b="2"/>'
        "</Sequence></BehaviorTree></root>"
    )
    models = read_tree_nodes_model(root)
    assert set(models["Go"].ports) == {"a"}


@pytest.mark.parametrize(
    "direction, tag",
    [
        (PortDirection.INPUT, "input_port"),
        (PortDirection.OUTPUT, "output_port"),
        (PortDirection.INOUT, "inout_port"),
    ],
)
def test_write_port_model_tag(direction, tag):
    element = write_port_model("p", PortModel(direction=direction))
    assert element.tag == tag
    assert element.attrib == {"name": "p"}
    assert element.text is None


def test_write_port_model_full():
    port = PortModel(
        type_name="int", direction=PortDirection.INPUT, description="count", default_value="3"
    )
    element = write_port_model("n", port)
    assert element.attrib == {"name": "n", "type": "int", "default": "3"}
    assert element.text == "count"


def test_write_then_build_round_trip():
    ports = {
        "a": PortModel("int", PortDirection.INPUT, "first", "1"),
        "b": PortModel("", PortDirection.OUTPUT, "", ""),
        "c": PortModel("str", PortDirection.INOUT, "third", ""),
    }
    node = ET.Element("Decorator", {"ID": "Deco"})
    for name, port in ports.items():
        node.append(write_port_model(name, port))
    text = ET.tostring(node, encoding="unicode")
    model = build_tree_node_model_from_xml(ET.fromstring(text))
    assert model == NodeModel(NodeType.DECORATOR, "Deco", ports)