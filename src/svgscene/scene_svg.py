"""
Turn a scene tree back into SVG markup using svg.py.

Gradients and clip paths referenced anywhere in the tree are collected into
a single ``<defs>`` block; gradient transforms have already been baked into
their control points by the reader, so none is written back. Ids are kept as
namespaced by the reader so that output from several documents can be
merged without collisions.
"""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union

import svg

from .geometry import Affine
from .scene_model import (
    CircleGeometry,
    ClipPath,
    EllipseGeometry,
    Gradient,
    GradientPaint,
    Group,
    LineGeometry,
    LinearGradient,
    NoPaint,
    PathGeometry,
    PointsGeometry,
    RadialGradient,
    RectGeometry,
    Shape,
    ShapeKind,
    SolidPaint,
    TextGeometry,
    Viewport,
)

__all__ = ["SceneSvg", "materialize"]

ET.register_namespace("", "http://www.w3.org/2000/svg")


def _build(cls, **kwargs):
    """Instantiate an svg.py element, dropping unset values.

    Attributes svg.py has no field for are passed through ``extra`` with
    their markup spelling.
    """
    names = {field.name for field in dataclasses.fields(cls)}
    values = {}
    extra = {}
    for key, value in kwargs.items():
        if value is None:
            continue
        if key in names:
            values[key] = value
        else:
            extra[key.rstrip("_").replace("_", "-")] = str(value)
    if extra and "extra" in names:
        values["extra"] = extra
    return cls(**values)


def _transform(transform: Affine) -> Optional[List[svg.Matrix]]:
    if transform.is_identity:
        return None
    return [svg.Matrix(*transform.as_tuple())]


def _unit_value(value: float) -> Optional[float]:
    """None for the SVG default of 1, so it is left out of the markup."""
    return None if value == 1.0 else value


class SceneSvg:
    """Serialize a scene tree with svg.py structures."""

    def __init__(self, root: Group, *, viewport: Optional[Viewport] = None) -> None:
        self.root = root
        self.viewport = viewport
        self._gradients: Dict[str, Gradient] = {}
        self._clips: Dict[str, ClipPath] = {}

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #
    @classmethod
    def from_reader(cls, reader) -> "SceneSvg":
        """Parse with ``reader`` and wrap the resulting scene."""
        root = reader.build_scene()
        return cls(root, viewport=reader.viewport)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def to_svg_element(self) -> svg.SVG:
        """Return the root svg.SVG element."""
        self._gradients = {}
        self._clips = {}
        body = self.materialize(self.root)

        width = height = view_box = None
        if self.viewport is not None:
            width, height = self.viewport.width, self.viewport.height
            if self.viewport.view_box is not None:
                view_box = " ".join(f"{value:g}" for value in self.viewport.view_box)

        root = _build(svg.SVG, width=width, height=height, viewBox=view_box, elements=[])
        defs = self._build_defs()
        if defs is not None:
            root.elements.append(defs)
        root.elements.append(body)
        return root

    def materialize(self, node: Union[Group, Shape]):
        """svg.py element for ``node`` and its subtree."""
        if isinstance(node, Group):
            return self._group_element(node)
        return self._shape_element(node)

    def to_string(self, *, pretty: bool = True, indent: str = "  ") -> str:
        """Return the SVG as a string."""
        xml_text = self.to_svg_element().as_str()
        if not pretty:
            return xml_text
        return self._pretty_xml(xml_text, indent=indent)

    def write(self, path: str | Path, *, pretty: bool = True, indent: str = "  ") -> None:
        """Write the SVG to disk."""
        Path(path).write_text(
            self.to_string(pretty=pretty, indent=indent),
            encoding="utf-8",
        )

    def _pretty_xml(self, xml_text: str, *, indent: str = "  ") -> str:
        """Return pretty-formatted XML when parsing succeeds."""
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError:
            return xml_text
        ET.indent(root, space=indent)
        return ET.tostring(root, encoding="unicode", short_empty_elements=True) + "\n"

    # ------------------------------------------------------------------ #
    # Nodes
    # ------------------------------------------------------------------ #
    def _common(self, node) -> Dict[str, object]:
        values: Dict[str, object] = {
            "id": node.id or None,
            "transform": _transform(node.transform),
            "opacity": _unit_value(node.opacity),
        }
        if node.clip is not None and node.clip.id:
            self._clips.setdefault(node.clip.id, node.clip)
            values["clip_path"] = f"url(#{node.clip.id})"
        return values

    def _group_element(self, group: Group) -> svg.G:
        return _build(
            svg.G,
            elements=[self.materialize(child) for child in group.children],
            **self._common(group),
        )

    def _paint(self, paint) -> Optional[str]:
        if isinstance(paint, NoPaint):
            return "none"
        if isinstance(paint, SolidPaint):
            return paint.color.as_hex()
        if isinstance(paint, GradientPaint):
            gradient = paint.gradient
            if not gradient.id:
                gradient.id = f"gradient-{len(self._gradients) + 1}"
            self._gradients.setdefault(gradient.id, gradient)
            return f"url(#{gradient.id})"
        # Unresolved reference; renderers treat an unknown url as no paint.
        return f"url(#{paint.ref})"

    def _shape_element(self, shape: Shape):
        values = self._common(shape)
        values.update(
            fill=self._paint(shape.fill),
            stroke=self._paint(shape.stroke),
            fill_opacity=_unit_value(shape.fill_opacity),
            stroke_opacity=_unit_value(shape.stroke_opacity),
        )
        if not isinstance(shape.stroke, NoPaint):
            values.update(
                stroke_width=_unit_value(shape.stroke_width),
                stroke_linecap=shape.stroke_cap.value,
                stroke_linejoin=shape.stroke_join.value,
                stroke_miterlimit=shape.stroke_miter_limit,
                stroke_dasharray=list(shape.dash_array) or None,
            )

        geometry = shape.geometry
        if isinstance(geometry, PathGeometry):
            return _build(svg.Path, d=geometry.d, **values)
        if isinstance(geometry, PointsGeometry):
            cls = svg.Polygon if geometry.kind is ShapeKind.POLYGON else svg.Polyline
            return _build(cls, points=list(geometry.points), **values)
        if isinstance(geometry, RectGeometry):
            return _build(
                svg.Rect,
                x=geometry.x,
                y=geometry.y,
                width=geometry.width,
                height=geometry.height,
                rx=geometry.rx or None,
                ry=geometry.ry or None,
                **values,
            )
        if isinstance(geometry, CircleGeometry):
            return _build(svg.Circle, cx=geometry.cx, cy=geometry.cy, r=geometry.r, **values)
        if isinstance(geometry, EllipseGeometry):
            return _build(
                svg.Ellipse,
                cx=geometry.cx,
                cy=geometry.cy,
                rx=geometry.rx,
                ry=geometry.ry,
                **values,
            )
        if isinstance(geometry, LineGeometry):
            return _build(
                svg.Line,
                x1=geometry.x1,
                y1=geometry.y1,
                x2=geometry.x2,
                y2=geometry.y2,
                **values,
            )
        if isinstance(geometry, TextGeometry):
            return _build(
                svg.Text,
                x=geometry.x,
                y=geometry.y,
                text=geometry.content,
                font_family=geometry.font_family,
                font_size=geometry.font_size,
                **values,
            )
        raise TypeError(f"Unknown geometry {type(geometry).__name__}")

    # ------------------------------------------------------------------ #
    # Definitions
    # ------------------------------------------------------------------ #
    def _build_defs(self) -> Optional[svg.Defs]:
        """Clip paths and gradients collected while materializing the tree."""
        # Clip contents may reference further clips and gradients, so clips go
        # first and are drained until no new ones appear.
        clips: Dict[str, object] = {}
        while len(clips) < len(self._clips):
            for clip_id, clip in list(self._clips.items()):
                if clip_id not in clips:
                    clips[clip_id] = _build(
                        svg.ClipPath,
                        id=clip_id,
                        elements=[self.materialize(clip.group)],
                    )
        elements = list(clips.values())
        for gradient in self._gradients.values():
            elements.append(self._gradient_element(gradient))
        if not elements:
            return None
        return svg.Defs(elements=elements)

    def _gradient_element(self, gradient: Gradient):
        stops = [
            _build(
                svg.Stop,
                offset=stop.offset,
                stop_color=stop.color.as_hex(),
                stop_opacity=_unit_value(stop.opacity),
            )
            for stop in gradient.stops
        ]
        common = {
            "id": gradient.id,
            "gradientUnits": "objectBoundingBox" if gradient.proportional else "userSpaceOnUse",
            "spreadMethod": gradient.spread.value,
            "elements": stops,
        }
        if isinstance(gradient, LinearGradient):
            return _build(
                svg.LinearGradient,
                x1=gradient.x1,
                y1=gradient.y1,
                x2=gradient.x2,
                y2=gradient.y2,
                **common,
            )
        if isinstance(gradient, RadialGradient):
            fx, fy = gradient.focus_point()
            return _build(
                svg.RadialGradient,
                cx=gradient.cx,
                cy=gradient.cy,
                r=gradient.r,
                fx=fx,
                fy=fy,
                **common,
            )
        raise TypeError(f"Unknown gradient {type(gradient).__name__}")


def materialize(root: Group, *, viewport: Optional[Viewport] = None) -> str:
    """Serialize a scene tree to pretty-printed SVG markup."""
    return SceneSvg(root, viewport=viewport).to_string()
