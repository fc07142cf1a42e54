"""Visual styles for nodes, connections and the flow view, plus the shared style collection."""

from __future__ import annotations

import colorsys
import copy
import json
import logging
import random
import re
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Color:
    """An RGBA colour; ``valid`` is False for colours that could not be parsed."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255
    valid: bool = True

    @classmethod
    def invalid(cls) -> Color:
        return cls(0, 0, 0, 255, False)

    @classmethod
    def from_hsl(cls, hue: float, saturation: float, lightness: float) -> Color:
        """Build a colour from hue (degrees) and saturation/lightness in 0..255."""
        r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 255.0, saturation / 255.0)
        return cls(round(r * 255), round(g * 255), round(b * 255))

    def name(self) -> str:
        """The colour as ``#rrggbb``."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


_NAMED_COLORS: dict[str, tuple[int, int, int, int]] = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "lime": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "cyan": (0, 255, 255, 255),
    "aqua": (0, 255, 255, 255),
    "magenta": (255, 0, 255, 255),
    "fuchsia": (255, 0, 255, 255),
    "gray": (128, 128, 128, 255),
    "grey": (128, 128, 128, 255),
    "darkgray": (169, 169, 169, 255),
    "darkgrey": (169, 169, 169, 255),
    "lightgray": (211, 211, 211, 255),
    "lightgrey": (211, 211, 211, 255),
    "dimgray": (105, 105, 105, 255),
    "dimgrey": (105, 105, 105, 255),
    "orange": (255, 165, 0, 255),
    "darkcyan": (0, 139, 139, 255),
    "lightcyan": (224, 255, 255, 255),
    "darkred": (139, 0, 0, 255),
    "darkblue": (0, 0, 139, 255),
    "darkgreen": (0, 100, 0, 255),
    "navy": (0, 0, 128, 255),
    "purple": (128, 0, 128, 255),
    "silver": (192, 192, 192, 255),
    "transparent": (0, 0, 0, 0),
}

_HEX_DIGITS = re.compile(r"[0-9a-f]+")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _to_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _parse_hex(digits: str) -> Color:
    if not _HEX_DIGITS.fullmatch(digits):
        return Color.invalid()
    if len(digits) == 3:
        r, g, b = (int(ch * 2, 16) for ch in digits)
        return Color(r, g, b)
    if len(digits) == 6:
        return Color(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    if len(digits) == 8:
        return Color(
            int(digits[2:4], 16), int(digits[4:6], 16), int(digits[6:8], 16), int(digits[0:2], 16)
        )
    return Color.invalid()


def parse_color(value: Any) -> Color:
    """Read a colour from a JSON value: an ``[r, g, b]`` array, a hex string or a colour name."""
    if isinstance(value, (list, tuple)):
        if len(value) < 3:
            raise ValueError("a colour array needs three components")
        r, g, b = (_to_int(component) for component in value[:3])
        if not all(0 <= c <= 255 for c in (r, g, b)):
            return Color.invalid()
        return Color(r, g, b)
    if not isinstance(value, str):
        return Color.invalid()
    text = value.strip().lower()
    if text.startswith("#"):
        return _parse_hex(text[1:])
    named = _NAMED_COLORS.get(text.replace(" ", ""))
    if named is None:
        return Color.invalid()
    return Color(*named)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _read_section(json_text: str | bytes, section: str) -> dict[str, Any]:
    try:
        document = json.loads(json_text)
    except (TypeError, ValueError):
        return {}
    if not isinstance(document, dict):
        return {}
    values = document.get(section)
    return values if isinstance(values, dict) else {}


class _JsonStyle:
    """Shared JSON loading for the style dataclasses."""

    _SECTION: ClassVar[str] = ""
    _COLOR_KEYS: ClassVar[tuple[str, ...]] = ()
    _FLOAT_KEYS: ClassVar[tuple[str, ...]] = ()
    _BOOL_KEYS: ClassVar[tuple[str, ...]] = ()
    _SKIP_MISSING: ClassVar[bool] = False

    def _apply_json(self, json_text: str | bytes) -> None:
        values = _read_section(json_text, self._SECTION)
        readers = (
            (self._COLOR_KEYS, parse_color),
            (self._FLOAT_KEYS, _to_float),
            (self._BOOL_KEYS, _to_bool),
        )
        for keys, reader in readers:
            for key in keys:
                value = values.get(key)
                if value is None and self._SKIP_MISSING:
                    continue
                setattr(self, _snake(key), reader(value))

    def load_json_file(self, path: str | Path) -> None:
        """Load from a JSON file; a file that cannot be read is logged and ignored."""
        try:
            data = Path(path).read_bytes()
        except OSError:
            _log.warning("Couldn't open file %s", path)
            return
        self._apply_json(data)


@dataclass
class NodeStyle(_JsonStyle):
    """Colours and sizes used to draw nodes."""

    _SECTION: ClassVar[str] = "NodeStyle"
    _COLOR_KEYS: ClassVar[tuple[str, ...]] = (
        "NormalBoundaryColor",
        "SelectedBoundaryColor",
        "GradientColor0",
        "GradientColor1",
        "GradientColor2",
        "GradientColor3",
        "ShadowColor",
        "FontColor",
        "FontColorFaded",
        "ConnectionPointColor",
        "FilledConnectionPointColor",
        "WarningColor",
        "ErrorColor",
    )
    _FLOAT_KEYS: ClassVar[tuple[str, ...]] = (
        "PenWidth",
        "HoveredPenWidth",
        "ConnectionPointDiameter",
        "Opacity",
    )

    normal_boundary_color: Color = Color(255, 255, 255)
    selected_boundary_color: Color = Color(255, 165, 0)
    gradient_color0: Color = Color(128, 128, 128)
    gradient_color1: Color = Color(80, 80, 80)
    gradient_color2: Color = Color(64, 64, 64)
    gradient_color3: Color = Color(58, 58, 58)
    shadow_color: Color = Color(20, 20, 20)
    font_color: Color = Color(255, 255, 255)
    font_color_faded: Color = Color(128, 128, 128)
    connection_point_color: Color = Color(169, 169, 169)
    filled_connection_point_color: Color = Color(0, 255, 255)
    warning_color: Color = Color(128, 128, 0)
    error_color: Color = Color(255, 0, 0)
    pen_width: float = 1.0
    hovered_pen_width: float = 1.5
    connection_point_diameter: float = 8.0
    opacity: float = 0.8

    @classmethod
    def from_json(cls, json_text: str | bytes) -> NodeStyle:
        style = cls()
        style.load_json_text(json_text)
        return style

    def load_json_text(self, json_text: str | bytes) -> None:
        """Overwrite every field from the ``NodeStyle`` section of a JSON document."""
        self._apply_json(json_text)


@dataclass
class ConnectionStyle(_JsonStyle):
    """Colours and sizes used to draw connections; absent keys keep their values."""

    _SECTION: ClassVar[str] = "ConnectionStyle"
    _COLOR_KEYS: ClassVar[tuple[str, ...]] = (
        "ConstructionColor",
        "NormalColor",
        "SelectedColor",
        "SelectedHaloColor",
        "HoveredColor",
    )
    _FLOAT_KEYS: ClassVar[tuple[str, ...]] = (
        "LineWidth",
        "ConstructionLineWidth",
        "PointDiameter",
    )
    _BOOL_KEYS: ClassVar[tuple[str, ...]] = ("UseDataDefinedColors",)
    _SKIP_MISSING: ClassVar[bool] = True

    construction_color: Color = Color(128, 128, 128)
    normal_color: Color = Color(0, 139, 139)
    selected_color: Color = Color(100, 100, 100)
    selected_halo_color: Color = Color(255, 165, 0)
    hovered_color: Color = Color(224, 255, 255)
    line_width: float = 3.0
    construction_line_width: float = 2.0
    point_diameter: float = 10.0
    use_data_defined_colors: bool = False

    @classmethod
    def from_json(cls, json_text: str | bytes) -> ConnectionStyle:
        style = cls()
        style.load_json_text(json_text)
        return style

    def load_json_text(self, json_text: str | bytes) -> None:
        """Overwrite the fields present in the ``ConnectionStyle`` section of a JSON document."""
        self._apply_json(json_text)

    def normal_color_for(self, type_id: str) -> Color:
        """A stable colour derived from a data type identifier."""
        digest = zlib.crc32(type_id.encode("utf-8"))
        hue = random.Random(digest).randrange(0xFF)
        saturation = 120 + digest % 129
        return Color.from_hsl(hue, saturation, 160)


@dataclass
class FlowViewStyle(_JsonStyle):
    """Colours of the flow view background and grid."""

    _SECTION: ClassVar[str] = "FlowViewStyle"
    _COLOR_KEYS: ClassVar[tuple[str, ...]] = (
        "BackgroundColor",
        "FineGridColor",
        "CoarseGridColor",
    )

    background_color: Color = Color(53, 53, 53)
    fine_grid_color: Color = Color(60, 60, 60)
    coarse_grid_color: Color = Color(25, 25, 25)

    @classmethod
    def from_json(cls, json_text: str | bytes) -> FlowViewStyle:
        style = cls()
        style.load_json_text(json_text)
        return style

    def load_json_text(self, json_text: str | bytes) -> None:
        """Overwrite every field from the ``FlowViewStyle`` section of a JSON document."""
        self._apply_json(json_text)


@dataclass
class _StyleCollection:
    node: NodeStyle = field(default_factory=NodeStyle)
    connection: ConnectionStyle = field(default_factory=ConnectionStyle)
    flow_view: FlowViewStyle = field(default_factory=FlowViewStyle)


_collection = _StyleCollection()


def node_style() -> NodeStyle:
    """The node style currently in use."""
    return _collection.node


def connection_style() -> ConnectionStyle:
    """The connection style currently in use."""
    return _collection.connection


def flow_view_style() -> FlowViewStyle:
    """The flow view style currently in use."""
    return _collection.flow_view


def set_node_style(style: NodeStyle) -> None:
    """Store a copy of ``style`` as the current node style."""
    _collection.node = copy.deepcopy(style)


def set_connection_style(style: ConnectionStyle) -> None:
    """Store a copy of ``style`` as the current connection style."""
    _collection.connection = copy.deepcopy(style)


def set_flow_view_style(style: FlowViewStyle) -> None:
    """Store a copy of ``style`` as the current flow view style."""
    _collection.flow_view = copy.deepcopy(style)