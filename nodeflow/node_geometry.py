"""Size of a node and the positions of its ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from nodeflow import styles
from nodeflow.geometry import Point, PortLayout, PortType, Rect
from nodeflow.registry import NodeDataModel, NodeValidationState


@dataclass(frozen=True)
class FontMetrics:
    """Fixed-pitch text metrics used to lay out labels."""

    char_width: int = 7
    height: int = 16

    def width(self, text: str) -> int:
        return len(text) * self.char_width


class NodeGeometry:
    """Dimensions of a node, derived from its model's ports, widget and validation message."""

    def __init__(self, model: NodeDataModel) -> None:
        self.model = model
        self.width = 50
        self.height = 50
        self.input_port_width = 4
        self.output_port_width = 4
        self.entry_height = 1
        self.spacing = 1
        self.hovered = False
        self.dragging_pos = Point(-1000, -1000)
        self.font_metrics = FontMetrics()
        self.bold_font_metrics = FontMetrics(char_width=9, height=19)
        self.port_layout = PortLayout.VERTICAL

    @property
    def n_sources(self) -> int:
        return self.model.n_ports(PortType.OUT)

    @property
    def n_sinks(self) -> int:
        return self.model.n_ports(PortType.IN)

    def bounding_rect(self) -> Rect:
        addon = 2 * styles.node_style().connection_point_diameter
        return Rect(-addon, -addon, self.width + 2 * addon, self.height + 2 * addon)

    def recalculate_size(self) -> None:
        self.entry_height = self.font_metrics.height

        step = self.entry_height + self.spacing
        self.height = step * max(self.n_sinks, self.n_sources)

        widget = self.model.embedded_widget
        if widget is not None:
            self.height = max(self.height, widget.height)

        self.input_port_width = self.port_width(PortType.IN)
        self.output_port_width = self.port_width(PortType.OUT)
        self.width = self.input_port_width + self.output_port_width + 2 * self.spacing

        if widget is not None:
            self.width += widget.width

        if self.model.validation_state is not NodeValidationState.VALID:
            self.width = max(self.width, int(self.validation_width()))
            self.height += self.validation_height() + self.spacing

    def port_scene_position(
        self, index: int, port_type: PortType, offset: Point = Point()
    ) -> Point:
        """Position of a port, relative to the node, shifted by ``offset``."""
        diameter = styles.node_style().connection_point_diameter
        if self.port_layout is PortLayout.HORIZONTAL:
            step = self.entry_height + self.spacing
            y = step * index + step / 2.0
            x = self.width + diameter if port_type is PortType.OUT else -diameter
        else:
            step = int(self.width) // (self.model.n_ports(port_type) + 1)
            x = float(step * (index + 1))
            y = self.height + diameter if port_type is PortType.OUT else -diameter
        return Point(x, y) + offset

    def check_hit_scene_point(
        self, port_type: PortType, scene_point: Point, offset: Point = Point()
    ) -> Optional[int]:
        """Index of the port of ``port_type`` near ``scene_point``, or None."""
        if port_type is PortType.NONE:
            return None
        tolerance = 2 * styles.node_style().connection_point_diameter
        for index in range(self.model.n_ports(port_type)):
            delta = self.port_scene_position(index, port_type, offset) - scene_point
            if delta.dot(delta) ** 0.5 < tolerance:
                return index
        return None

    def resize_rect(self) -> Rect:
        size = 4
        return Rect(self.width - size, self.height - size, size, size)

    def widget_position(self) -> Point:
        widget = self.model.embedded_widget
        if widget is None:
            return Point()
        x = self.spacing + self.port_width(PortType.IN)
        if self.model.validation_state is not NodeValidationState.VALID:
            free = self.height - self.validation_height() - self.spacing - widget.height
            return Point(x, free / 2.0)
        return Point(x, (self.height - widget.height) / 2.0)

    def validation_height(self) -> int:
        return self.bold_font_metrics.height

    def validation_width(self) -> int:
        return self.bold_font_metrics.width(self.model.validation_message)

    def port_width(self, port_type: PortType) -> int:
        """Width of the widest port label of ``port_type``."""
        return max(
            (
                self.font_metrics.width(self.model.data_type(port_type, index).name)
                for index in range(self.model.n_ports(port_type))
            ),
            default=0,
        )