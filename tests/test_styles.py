import json

import pytest

from nodeflow.styles import (
    Color,
    ConnectionStyle,
    FlowViewStyle,
    NodeStyle,
    connection_style,
    flow_view_style,
    node_style,
    parse_color,
    set_connection_style,
    set_flow_view_style,
    set_node_style,
)


@pytest.fixture
def restore_styles():
    saved = (node_style(), connection_style(), flow_view_style())
    yield
    set_node_style(saved[0])
    set_connection_style(saved[1])
    set_flow_view_style(saved[2])


def test_parse_color_from_array():
    assert parse_color([10, 20, 30]) == Color(10, 20, 30)


def test_parse_color_hex_matches_array():
    assert parse_color("#0A141E") == parse_color([10, 20, 30])


def test_short_hex_and_name_agree():
    assert parse_color("#fff") == parse_color("#ffffff")
    assert parse_color("white") == parse_color("#ffffff")


def test_named_colors_are_case_insensitive():
    color = parse_color("DarkCyan")
    assert color.valid
    assert color == parse_color("darkcyan")


def test_hex_with_alpha():
    assert parse_color("#80ff0000") == Color(255, 0, 0, 128)


@pytest.mark.parametrize("value", ["nonsense", "", None, 42, "#12", "#zzzzzz"])
def test_unparseable_colors_are_invalid(value):
    assert parse_color(value).valid is False


def test_out_of_range_array_is_invalid():
    assert parse_color([300, 0, 0]).valid is False


def test_short_array_raises():
    with pytest.raises(ValueError):
        parse_color([1, 2])


def test_non_integral_components_read_as_zero():
    assert parse_color([1.5, "x", 7]) == Color(0, 0, 7)


def test_name_round_trip():
    color = Color(12, 200, 99)
    assert parse_color(color.name()) == color


def test_from_hsl_without_saturation_is_grey():
    assert Color.from_hsl(0, 0, 160) == Color(160, 160, 160)


def test_node_style_reads_given_and_resets_missing():
    text = json.dumps({"NodeStyle": {"NormalBoundaryColor": [1, 2, 3], "PenWidth": 2.5}})
    style = NodeStyle()
    style.load_json_text(text)
    assert style.normal_boundary_color == Color(1, 2, 3)
    assert style.pen_width == 2.5
    assert style.opacity == 0.0
    assert style.font_color.valid is False


def test_node_style_malformed_json_clears_fields():
    style = NodeStyle()
    style.load_json_text("{not json")
    assert style.pen_width == 0.0
    assert style.error_color.valid is False


def test_connection_style_partial_load_keeps_other_fields():
    style = ConnectionStyle()
    before = style.normal_color
    style.load_json_text('{"ConnectionStyle": {"LineWidth": 7, "NormalColor": null}}')
    assert style.line_width == 7.0
    assert style.normal_color == before


def test_connection_style_reads_bool():
    style = ConnectionStyle.from_json('{"ConnectionStyle": {"UseDataDefinedColors": true}}')
    assert style.use_data_defined_colors is True


def test_connection_style_from_json_keeps_defaults():
    style = ConnectionStyle.from_json('{"ConnectionStyle": {"PointDiameter": 4}}')
    assert style.point_diameter == 4.0
    assert style.construction_color == ConnectionStyle().construction_color


def test_connection_style_ignores_other_sections():
    style = ConnectionStyle()
    style.load_json_text('{"NodeStyle": {"LineWidth": 9}}')
    assert style == ConnectionStyle()


def test_normal_color_for_is_stable():
    first = ConnectionStyle().normal_color_for("int")
    second = ConnectionStyle().normal_color_for("int")
    assert first == second
    assert first.valid


def test_flow_view_style_load():
    style = FlowViewStyle()
    style.load_json_text('{"FlowViewStyle": {"BackgroundColor": "#102030"}}')
    assert style.background_color == parse_color("#102030")
    assert style.fine_grid_color.valid is False


def test_flow_view_style_from_file(tmp_path):
    path = tmp_path / "style.json"
    path.write_text('{"FlowViewStyle": {"CoarseGridColor": [5, 6, 7]}}', encoding="utf-8")
    style = FlowViewStyle()
    style.load_json_file(path)
    assert style.coarse_grid_color == Color(5, 6, 7)


def test_missing_file_leaves_style_untouched(tmp_path):
    style = FlowViewStyle()
    style.load_json_file(tmp_path / "absent.json")
    assert style == FlowViewStyle()


def test_set_node_style_stores_copy(restore_styles):
    style = NodeStyle(pen_width=4.0)
    set_node_style(style)
    style.pen_width = 9.0
    assert node_style().pen_width == 4.0


def test_set_connection_and_flow_view_styles(restore_styles):
    conn = ConnectionStyle(line_width=5.0)
    view = FlowViewStyle(background_color=Color(1, 1, 1))
    set_connection_style(conn)
    set_flow_view_style(view)
    assert connection_style() == conn
    assert flow_view_style() == view