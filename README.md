# nodeflow

`nodeflow` is a headless model of a node-graph editor. It keeps nodes, their
ports, the connections between them and the data that flows along them. It
has no drawing code, so you can build, check and save graphs in plain Python.
It uses only the standard library.

## Installation

```
pip install nodeflow
```

To run the tests:

```
pip install "nodeflow[test]"
pytest
```

## Modules

- `nodeflow.styles`: the `NodeStyle`, `ConnectionStyle` and `FlowViewStyle`
  dataclasses. Each can be loaded from a JSON document with `load_json_text`
  or `from_json`, or from a file with `load_json_file`. `load_json_file` logs
  a file it cannot read and otherwise ignores it. `NodeStyle` and
  `FlowViewStyle` overwrite every field from their JSON section.
  `ConnectionStyle` overwrites only the keys that are present, and
  `ConnectionStyle.normal_color_for(type_id)` derives a stable colour from a
  data type id. `parse_color` reads `[r, g, b]` arrays, `#rgb`, `#rrggbb` and
  `#aarrggbb` strings and a set of colour names, and returns a `Color`.
  `node_style()`, `connection_style()` and `flow_view_style()` return the
  shared defaults. `set_node_style`, `set_connection_style` and
  `set_flow_view_style` replace them with a copy of the style you pass.
- `nodeflow.geometry`: the `PortType` (`NONE`, `IN`, `OUT`) and `PortLayout`
  enums, `opposite_port`, the `Point` and `Rect` value types and
  `ConnectionGeometry`. `ConnectionGeometry` holds a connection's end points,
  its Bézier control points (`points_c1_c2`) and its `bounding_rect`.
- `nodeflow.properties`: `Properties`, a named-value store. `get(name, kind)`
  returns the value as `kind`. It raises `KeyError` if the name is missing
  and `TypeError` if the value cannot be converted.
- `nodeflow.registry`: `NodeDataType`, `ConnectionPolicy`,
  `NodeValidationState`, `NodeDataModel` and `DataModelRegistry`. The
  registry holds model creators grouped by category; the first creator
  registered for a name wins. It also holds type converters keyed by
  `(source, target)`. `create` returns `None` for an unknown name.
- `nodeflow.node_state`: `NodeState` records the connections on each port of
  a node and how the node reacts while a connection is dragged over it.
  `ConnectionState` records which end of a connection still needs a port.
- `nodeflow.node_geometry`: `NodeGeometry` computes a node's size, its port
  positions (`port_scene_position`) and port hit testing
  (`check_hit_scene_point`). Text is measured with the fixed-pitch
  `FontMetrics`.
- `nodeflow.connection`: `Connection`. `Connection.dragging(...)` makes a
  connection attached at one end only, and `Connection.between(...)` makes a
  complete one, optionally with a type converter. `save()` returns an empty
  dict while either end is unattached.
- `nodeflow.node`: `Node` wraps a model, its state and its geometry.
  `NodeConnectionInteraction` checks whether a dragged connection can attach
  to a node (`can_connect`), attaches it (`try_connect`) or detaches one end
  (`disconnect`).
- `nodeflow.scene`: `FlowScene` creates, removes, saves and restores nodes and
  connections. It has `node_created`, `node_deleted`, `connection_created` and
  `connection_deleted` signals, and `locate_node_at` finds the topmost node
  under a point. `iterate_over_node_data_dependent_order` yields models so
  that each comes after the nodes that feed it. It raises `ValueError` if the
  connections form a cycle.
- `nodeflow.xml_utilities`: behaviour-tree `NodeModel`s, `PortModel`s,
  `NodeType` and `PortDirection`. `build_tree_node_model_from_xml` reads one
  element. `read_tree_nodes_model` collects the models declared in
  `<TreeNodesModel>` and those used inside `<BehaviorTree>` elements, and the
  declarations take precedence. `write_port_model` builds the
  `input_port` / `output_port` / `inout_port` element for a port.

## Example

```python
from nodeflow.registry import DataModelRegistry, NodeDataModel, NodeDataType
from nodeflow.scene import FlowScene

NUMBER = NodeDataType("number", "Number")


def make_source():
    return NodeDataModel("Source", out_types=[NUMBER])


def make_sink():
    return NodeDataModel("Sink", in_types=[NUMBER])


registry = DataModelRegistry()
registry.register_model(make_source, "Sources")
registry.register_model(make_sink, "Sinks")

scene = FlowScene(registry)
source = scene.create_node(registry.create("Source"))
sink = scene.create_node(registry.create("Sink"))
scene.create_connection_between(sink, 0, source, 0)

# Data offered on an output flows along its connections.
source.model.outputs[0] = 42
source.model.notify_data_updated(0)
assert sink.model.inputs[0] == 42

data = scene.save_to_memory()

restored = FlowScene(registry)
restored.load_from_memory(data)
```

`FlowScene.save(path)` writes the scene as JSON and returns the path written.
It adds a `.flow` suffix when the file name does not already end in `flow`.
`FlowScene.load(path)` clears the scene and reads it back. A missing file
leaves the scene empty.

## What it does not do

- It draws nothing and has no window, view, mouse or keyboard handling. Node
  positions, sizes and port positions are plain numbers. Label widths come
  from `FontMetrics`, a fixed-pitch approximation, not from real fonts.
- There is no command-line program; the package is used as a library.
- `nodeflow.xml_utilities` reads node and port models and writes single port
  declarations. It does not write whole behaviour trees and does not check
  that a tree document is valid.