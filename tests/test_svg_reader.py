from __future__ import annotations

import io

import pytest

from svgscene.errors import (
    DiagnosticKind,
    ParseCancelled,
    StreamError,
    StructuralError,
    TransformSyntaxError,
)
from svgscene.paint import fallback_color
from svgscene.scene_model import (
    ClipPath,
    Definitions,
    GradientPaint,
    Group,
    LinearGradient,
    NoPaint,
    Shape,
    ShapeKind,
    SolidPaint,
    SpreadMethod,
    StrokeLineCap,
    iter_nodes,
)
from svgscene.settings import ReaderSettings
from svgscene.svg_reader import SvgReader, read_svg

from .helpers import (
    basic_document,
    clip_document,
    forward_reference_document,
    href_document,
    wrap_svg,
    write_svg,
)


def _read(body: str, **kwargs) -> SvgReader:
    reader = SvgReader.from_string(wrap_svg(body), root_id="doc", **kwargs)
    reader.scene = reader.build_scene()
    return reader


def _kinds(reader: SvgReader) -> list[DiagnosticKind]:
    return [diagnostic.kind for diagnostic in reader.diagnostics]


def test_ids_are_prefixed_with_the_root_id():
    reader = SvgReader.from_string(basic_document(), root_id="doc")
    root = reader.build_scene()

    ids = [node.id for node in iter_nodes(root)]

    assert ids == ["doc", "doc-layer", "doc-box", "doc-dot"]


def test_reparsing_assigns_identical_ids():
    first = SvgReader.from_string(basic_document(), root_id="doc").build_scene()
    second = SvgReader.from_string(basic_document(), root_id="doc").build_scene()

    assert [n.id for n in iter_nodes(first)] == [n.id for n in iter_nodes(second)]


def test_root_id_defaults_to_sanitized_file_name(tmp_path):
    path = tmp_path / "icon.v2#dark.svg"
    write_svg(path, basic_document())

    root = SvgReader.from_file(path).build_scene()

    assert root.id == "icon-v2_dark-svg"
    assert root.children[0].id == "icon-v2_dark-svg-layer"


def test_settings_root_id_is_used_when_no_explicit_one():
    reader = SvgReader.from_string(basic_document(), settings=ReaderSettings(root_id="cfg"))

    assert reader.build_scene().id == "cfg"


def test_shapes_carry_geometry_paints_and_defaults():
    reader = SvgReader.from_string(basic_document(), root_id="doc")
    root = reader.build_scene()
    layer = root.children[0]
    box, dot = layer.children

    assert layer.transform.apply(1, 0) == (12.0, 0.0)
    assert box.kind is ShapeKind.RECT
    assert (box.geometry.x, box.geometry.y, box.geometry.width, box.geometry.height) == (
        1.0,
        2.0,
        30.0,
        20.0,
    )
    assert box.fill.color.as_rgb_tuple() == (255, 0, 0)
    assert isinstance(box.stroke, NoPaint)
    assert dot.fill.color.as_rgb_tuple() == (0, 0, 0)
    assert dot.stroke.color.as_rgb_tuple() == (0, 0, 255)
    assert dot.stroke_width == 2.0
    assert dot.stroke_cap is StrokeLineCap.BUTT
    assert dot.stroke_miter_limit == 4.0


def test_outermost_svg_records_the_viewport():
    reader = SvgReader.from_string(basic_document(), root_id="doc")
    reader.build_scene()

    assert reader.viewport.width == 100.0
    assert reader.viewport.height == 50.0


def test_definitions_never_appear_in_the_tree():
    reader = _read(
        "<defs>"
        '<linearGradient id="g"><stop offset="0"/></linearGradient>'
        '<rect id="tpl" width="4" height="4"/>'
        '<stop id="lonely" offset="1"/>'
        "</defs>"
        '<rect id="visible" width="1" height="1"/>'
    )

    nodes = list(iter_nodes(reader.scene))

    assert [node.id for node in nodes] == ["doc", "doc-visible"]
    assert not any(isinstance(node, Definitions) for node in nodes)
    assert {"doc-g", "doc-tpl", "doc-lonely"} <= set(reader.definitions)
    assert isinstance(reader.definitions["doc-tpl"], Shape)


def test_id_less_definition_is_dropped_with_a_diagnostic():
    reader = _read('<defs><rect width="1" height="1"/></defs>')

    assert reader.definitions == {}
    assert DiagnosticKind.ATTRIBUTE in _kinds(reader)


def test_fill_can_reference_a_gradient_declared_later():
    reader = SvgReader.from_string(forward_reference_document(), root_id="doc")
    root = reader.build_scene()
    rect = root.children[0]

    assert isinstance(rect.fill, GradientPaint)
    assert rect.fill.gradient is reader.definitions["doc-late"]
    assert reader.lookup("late") is rect.fill.gradient
    assert [stop.offset for stop in rect.fill.gradient.stops] == [0.0, 1.0]


def test_unresolved_paint_gets_a_reproducible_fallback():
    reader = _read('<rect id="r" fill="url(#missing)" stroke="url(#also-missing)"/>')
    rect = reader.scene.children[0]

    assert rect.fill == SolidPaint(color=fallback_color("doc-missing"))
    assert rect.stroke == SolidPaint(color=fallback_color("doc-also-missing"))
    assert _kinds(reader).count(DiagnosticKind.REFERENCE) == 2


def test_sentinel_fallback_paint_setting():
    reader = _read(
        '<rect fill="url(#missing)"/>',
        settings=ReaderSettings(fallback_paint="sentinel", sentinel_color="cyan"),
    )

    assert reader.scene.children[0].fill.color.as_rgb_tuple() == (0, 255, 255)


def test_gradients_are_registered_not_attached():
    reader = _read(
        '<g id="g1"><linearGradient id="inline"><stop offset="0"/></linearGradient>'
        '<rect fill="url(#inline)"/></g>'
    )
    group = reader.scene.children[0]

    assert len(group.children) == 1
    assert isinstance(reader.definitions["doc-inline"], LinearGradient)
    assert isinstance(group.children[0].fill, GradientPaint)


def test_stops_keep_document_order_and_clamp_offsets():
    reader = _read(
        '<linearGradient id="g">'
        '<stop offset="0.9" stop-color="red"/>'
        '<stop offset="50%" style="stop-color:#00ff00;stop-opacity:0.25"/>'
        '<stop offset="150%"/>'
        '<stop offset="-2"/>'
        "</linearGradient>"
    )
    stops = reader.definitions["doc-g"].stops

    assert [stop.offset for stop in stops] == [0.9, 0.5, 1.0, 0.0]
    assert stops[1].color.as_rgb_tuple() == (0, 255, 0)
    assert stops[1].opacity == 0.25


def test_href_inherits_referenced_stops_in_order():
    reader = SvgReader.from_string(href_document(), root_id="doc")
    root = reader.build_scene()
    derived = reader.definitions["doc-derived"]
    base = reader.definitions["doc-base"]

    assert [stop.offset for stop in derived.stops] == [0.8, 0.2, 1.0]
    assert [stop.color for stop in derived.stops] == [stop.color for stop in base.stops]
    assert derived.proportional is False
    assert root.children[0].fill.gradient is derived


def test_radial_focus_is_converted_to_polar_form():
    reader = SvgReader.from_string(href_document(), root_id="doc")
    reader.build_scene()
    derived = reader.definitions["doc-derived"]

    assert derived.focus_angle == 0.0
    assert derived.focus_distance == 0.5


def test_href_to_nothing_leaves_stops_empty():
    reader = _read('<linearGradient id="g" href="#nope"/>')

    assert reader.definitions["doc-g"].stops == []
    assert DiagnosticKind.REFERENCE in _kinds(reader)


def test_gradient_transform_is_baked_into_control_points():
    reader = _read(
        '<linearGradient id="lin" gradientTransform="translate(10,0)" x1="0" x2="1"/>'
        '<radialGradient id="rad" gradientTransform="scale(2)" cx="1" cy="1" r="1"/>'
    )
    linear = reader.definitions["doc-lin"]
    radial = reader.definitions["doc-rad"]

    assert (linear.x1, linear.x2, linear.transform) == (10.0, 11.0, None)
    assert (radial.cx, radial.cy, radial.r) == (2.0, 2.0, 2.0)
    assert radial.focus_distance == 0.0


def test_unknown_element_is_skipped_without_losing_siblings():
    reader = _read(
        '<g id="g"><blink><rect id="inner"/></blink><rect id="sibling"/>'
        '<sodipodi:namedview xmlns:sodipodi="urn:sodipodi"/></g>'
    )
    group = reader.scene.children[0]

    assert [child.id for child in group.children] == ["doc-inner", "doc-sibling"]
    assert _kinds(reader).count(DiagnosticKind.UNSUPPORTED) == 2


def test_unknown_attribute_is_reported_and_ignored():
    reader = _read('<rect id="r" data-foo="1" width="2"/>')

    assert reader.scene.children[0].geometry.width == 2.0
    diagnostic = reader.diagnostics[0]
    assert diagnostic.kind is DiagnosticKind.UNSUPPORTED
    assert diagnostic.attribute == "data-foo"


def test_attribute_for_another_kind_is_ignored():
    reader = _read('<circle cx="1" width="5"/>')

    assert reader.scene.children[0].geometry.cx == 1.0
    assert "does not use it" in reader.diagnostics[0].message


def test_bad_numeric_value_keeps_the_default():
    reader = _read('<rect width="wide" height="5"/>')
    rect = reader.scene.children[0]

    assert rect.geometry.width == 0.0
    assert rect.geometry.height == 5.0
    assert reader.diagnostics[0].kind is DiagnosticKind.ATTRIBUTE
    assert reader.diagnostics[0].attribute == "width"


def test_malformed_stream_is_fatal():
    with pytest.raises(StreamError):
        SvgReader.from_string("<svg><g></svg>", root_id="doc").build_scene()


def test_unknown_transform_function_is_fatal():
    with pytest.raises(TransformSyntaxError):
        _read('<g transform="warp(3)"/>')


def test_shape_inside_a_gradient_is_a_structural_error():
    with pytest.raises(StructuralError, match="Can't add a <rect>"):
        _read('<linearGradient id="g"><rect/></linearGradient>')


def test_stop_outside_a_gradient_is_a_structural_error():
    with pytest.raises(StructuralError):
        _read('<g><stop offset="0"/></g>')


def test_style_overrides_presentation_attributes():
    reader = _read('<rect style="fill: blue; stroke-linecap:round" fill="red"/>')
    rect = reader.scene.children[0]

    assert rect.fill.color.as_rgb_tuple() == (0, 0, 255)
    assert rect.stroke_cap is StrokeLineCap.ROUND


def test_style_replaces_a_pending_paint_reference():
    reader = _read(
        '<rect fill="url(#g)" style="fill:red"/>'
        '<linearGradient id="g"><stop offset="0"/></linearGradient>'
    )

    assert reader.scene.children[0].fill.color.as_rgb_tuple() == (255, 0, 0)


def test_style_problems_become_diagnostics():
    reader = _read('<rect style="fill;font-weight:bold;;stroke:green"/>')
    rect = reader.scene.children[0]

    assert rect.stroke.color.as_rgb_tuple() == (0, 128, 0)
    assert _kinds(reader) == [DiagnosticKind.ATTRIBUTE, DiagnosticKind.UNSUPPORTED]


def test_group_paint_is_not_inherited():
    reader = _read('<g fill="red"><rect/></g>')
    rect = reader.scene.children[0].children[0]

    assert rect.fill.color.as_rgb_tuple() == (0, 0, 0)
    assert reader.diagnostics[0].attribute == "fill"


def test_text_content_includes_nested_spans():
    reader = _read(
        '<text x="1" y="2" font-family="\'Serif\'" font-size="12">Hello <tspan>world</tspan></text>'
    )
    text = reader.scene.children[0]

    assert text.kind is ShapeKind.TEXT
    assert text.geometry.content == "Hello world"
    assert text.geometry.font_family == "Serif"
    assert text.geometry.font_size == 12.0


def test_clip_path_resolves_forward_reference():
    reader = SvgReader.from_string(clip_document(), root_id="doc")
    root = reader.build_scene()
    group = root.children[0]

    assert len(root.children) == 1
    assert isinstance(group.clip, ClipPath)
    assert group.clip is reader.definitions["doc-mask"]
    assert group.clip.group.children[0].kind is ShapeKind.CIRCLE


def test_missing_clip_is_reported():
    reader = _read('<rect clip-path="url(#none-here)"/>')

    assert reader.scene.children[0].clip is None
    assert reader.diagnostics[0].kind is DiagnosticKind.REFERENCE


def test_percentages_scale_with_the_viewport():
    scaled = SvgReader.from_string(
        wrap_svg('<rect width="50%" height="50%"/>', attrs='viewBox="0 0 200 100"'),
        root_id="doc",
    ).build_scene()
    raw = _read('<rect width="50%" height="50%"/>').scene

    assert (scaled.children[0].geometry.width, scaled.children[0].geometry.height) == (100.0, 50.0)
    assert (raw.children[0].geometry.width, raw.children[0].geometry.height) == (0.5, 0.5)


def test_polygon_points_and_dash_array():
    reader = _read('<polygon points="0,0 10,0 10,10" stroke-dasharray="4 2"/>')
    polygon = reader.scene.children[0]

    assert polygon.kind is ShapeKind.POLYGON
    assert polygon.geometry.points == [0.0, 0.0, 10.0, 0.0, 10.0, 10.0]
    assert polygon.dash_array == [4.0, 2.0]


def test_small_chunks_from_a_binary_stream():
    stream = io.BytesIO(basic_document().encode("utf-8"))
    reader = SvgReader(stream, root_id="doc", settings=ReaderSettings(chunk_size=7))

    root = reader.build_scene()

    assert [node.id for node in iter_nodes(root)][-1] == "doc-dot"


def test_read_svg_accepts_a_path(tmp_path):
    path = tmp_path / "shape.svg"
    write_svg(path, basic_document())

    root = read_svg(path, root_id="x")

    assert isinstance(root, Group)
    assert root.children[0].id == "x-layer"


def test_event_interface_builds_a_tree():
    reader = SvgReader(root_id="doc")
    reader.begin_document()
    reader.begin_element("g", {"id": "a"})
    reader.begin_element("line", {"x2": "3", "stroke": "black"})
    reader.end_element("line")
    reader.end_element("g")

    root = reader.end_document()

    assert root.children[0].id == "doc-a"
    assert root.children[0].children[0].geometry.x2 == 3.0


def test_end_document_with_open_elements_is_structural_error():
    reader = SvgReader(root_id="doc")
    reader.begin_document()
    reader.begin_element("g", {})

    with pytest.raises(StructuralError, match="Document ended inside <g>"):
        reader.end_document()


def test_cancel_stops_before_the_next_element():
    reader = SvgReader(root_id="doc")
    reader.begin_document()
    reader.begin_element("g", {})
    reader.cancel()

    with pytest.raises(ParseCancelled):
        reader.begin_element("rect", {})


def test_build_scene_requires_a_source():
    with pytest.raises(ValueError, match="no source"):
        SvgReader(root_id="doc").build_scene()


def test_nameless_source_uses_default_root_id():
    root = SvgReader.from_string(wrap_svg('<rect id="x"/>')).build_scene()

    assert [node.id for node in iter_nodes(root)] == ["svg", "svg-x"]


def test_href_is_followed_one_level_only():
    reader = _read(
        '<linearGradient id="c"><stop offset="0.3" stop-color="red"/></linearGradient>'
        '<linearGradient id="b" href="#c"/>'
        '<linearGradient id="a" href="#b"/>'
    )

    assert [stop.offset for stop in reader.definitions["doc-b"].stops] == [0.3]
    assert reader.definitions["doc-a"].stops == []


def test_href_chain_declared_in_reverse_order_is_one_level_too():
    reader = _read(
        '<linearGradient id="a" href="#b"/>'
        '<linearGradient id="b" href="#c"/>'
        '<linearGradient id="c"><stop offset="1"/></linearGradient>'
    )

    assert reader.definitions["doc-a"].stops == []
    assert len(reader.definitions["doc-b"].stops) == 1


def test_rotating_matrix_rederives_radius_and_focus():
    reader = _read(
        '<radialGradient id="g" gradientTransform="matrix(0,2,-1,0,0,0)"'
        ' cx="1" cy="0" r="1" fx="1.5" fy="0"/>'
    )
    radial = reader.definitions["doc-g"]

    assert (radial.cx, radial.cy) == pytest.approx((0.0, 2.0))
    assert radial.r == pytest.approx(2.0)
    assert radial.focus_angle == pytest.approx(90.0)
    assert radial.focus_distance == pytest.approx(0.5)
    assert radial.focus_point() == pytest.approx((0.0, 3.0))


def test_non_uniform_scale_then_rotation_moves_off_centre_focus():
    reader = _read(
        '<radialGradient id="g" gradientTransform="rotate(90) scale(3,1)"'
        ' cx="0" cy="0" r="2" fx="1" fy="0"/>'
    )
    radial = reader.definitions["doc-g"]

    assert radial.r == pytest.approx(6.0)
    assert (radial.cx, radial.cy) == pytest.approx((0.0, 0.0), abs=1e-9)
    assert radial.focus_angle == pytest.approx(90.0)
    assert radial.focus_distance == pytest.approx(0.5)
    assert radial.transform is None


@pytest.mark.parametrize(
    "value, expected",
    [("pad", SpreadMethod.PAD), ("reflect", SpreadMethod.REFLECT), ("repeat", SpreadMethod.REPEAT)],
)
def test_spread_method_values(value, expected):
    reader = _read(f'<linearGradient id="g" spreadMethod="{value}"/>')

    assert reader.definitions["doc-g"].spread is expected
    assert reader.diagnostics == []


def test_unknown_spread_method_falls_back_to_pad():
    reader = _read('<radialGradient id="g" spreadMethod="mirror"/>')

    assert reader.definitions["doc-g"].spread is SpreadMethod.PAD
    assert reader.diagnostics[0].kind is DiagnosticKind.ATTRIBUTE
    assert reader.diagnostics[0].attribute == "spreadMethod"


def test_style_element_is_reported_as_unsupported():
    reader = _read('<style>rect { fill: red; }</style><rect id="r"/>')

    assert reader.scene.children[0].fill.color.as_rgb_tuple() == (0, 0, 0)
    assert reader.diagnostics[0].kind is DiagnosticKind.UNSUPPORTED
    assert reader.diagnostics[0].element == "style"


def test_focal_radius_is_reported_as_unsupported():
    reader = _read('<radialGradient id="g" fr="0.1"/>')

    diagnostic = reader.diagnostics[0]
    assert diagnostic.kind is DiagnosticKind.UNSUPPORTED
    assert diagnostic.attribute == "fr"
