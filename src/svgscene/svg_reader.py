"""
Build a scene tree from SVG markup with a single pull-parsing pass.

The reader keeps a stack of frames for the elements currently open. Each
element that produces an object pushes a frame when it starts and pops it
when it ends, at which point the object is attached to the frame below it
or registered in the definitions map. References that may point forward in
the document (paints, clip paths, gradient ``href``) are recorded as
deferred actions and run once, in registration order, after the last
element has been read.
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterator, List, Mapping, Optional, Union

from .errors import (
    AttributeValueError,
    Diagnostic,
    DiagnosticKind,
    ParseCancelled,
    StreamError,
    StructuralError,
)
from .geometry import parse_numbers, parse_transform_list
from .paint import PaintResolver, parse_color, parse_paint, parse_url_reference
from .scene_model import (
    Axis,
    ClipPath,
    Definitions,
    Gradient,
    Group,
    LinearGradient,
    PaintReference,
    RadialGradient,
    SceneNode,
    Shape,
    ShapeKind,
    SpreadMethod,
    Stop,
    StrokeLineCap,
    StrokeLineJoin,
    TextGeometry,
    Viewport,
)
from .settings import ReaderSettings, root_id_from_path
from .units import DefaultDisplayMetrics, DisplayMetrics, parse_length, resolve_length

__all__ = ["FrameKind", "Frame", "SvgReader", "read_svg"]

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

Source = Union[str, Path, bytes, BinaryIO]

# Root id for sources without a file name.
DEFAULT_ROOT_ID = "svg"


class FrameKind(str, Enum):
    GROUP = "group"
    SHAPE = "shape"
    CLIP = "clip"
    LINEAR_GRADIENT = "linearGradient"
    RADIAL_GRADIENT = "radialGradient"
    STOP = "stop"
    DEFINITIONS = "definitions"


_GRADIENT_FRAMES = (FrameKind.LINEAR_GRADIENT, FrameKind.RADIAL_GRADIENT)
_CONTAINER_FRAMES = (FrameKind.GROUP, FrameKind.CLIP)

Handler = Callable[["SvgReader", "Frame", str], None]


@dataclass
class Frame:
    kind: FrameKind
    element: str
    node: object
    table: Mapping[str, Handler]

    @property
    def target(self) -> SceneNode:
        """Node that receives transform, opacity and clip attributes."""
        if self.kind is FrameKind.CLIP:
            return self.node.group
        return self.node


_SHAPE_ELEMENTS = {kind.value: kind for kind in ShapeKind}

_FRAME_ELEMENTS = {
    "g": FrameKind.GROUP,
    "clipPath": FrameKind.CLIP,
    "linearGradient": FrameKind.LINEAR_GRADIENT,
    "radialGradient": FrameKind.RADIAL_GRADIENT,
    "stop": FrameKind.STOP,
    "defs": FrameKind.DEFINITIONS,
}

# Properties honoured inside a style="" attribute.
_STYLE_PROPERTIES = frozenset(
    {
        "clip-path",
        "fill",
        "fill-opacity",
        "font-family",
        "font-size",
        "opacity",
        "stop-color",
        "stop-opacity",
        "stroke",
        "stroke-dasharray",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-opacity",
        "stroke-width",
    }
)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _number(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise AttributeValueError(f"Not a number: {value!r}") from exc


def _element_name(tag: str) -> str:
    """Local name for SVG elements; foreign elements keep their full tag."""
    if tag.startswith("{"):
        namespace, local = tag[1:].split("}", 1)
        return local if namespace == SVG_NAMESPACE else tag
    return tag


def _local_attributes(attrib: Mapping[str, str]) -> Dict[str, str]:
    return {key.rsplit("}", 1)[-1]: value for key, value in attrib.items()}


class SvgReader:
    """Build a :class:`Group` scene tree from an SVG document.

    Ids in the document are prefixed with ``root_id + "-"``. When no root id
    is given it is derived from the source file name, or is ``"svg"`` for
    sources without one. A reader is not reentrant; use one instance per
    concurrent parse.
    """

    def __init__(
        self,
        source: Optional[Source] = None,
        *,
        root_id: Optional[str] = None,
        settings: Optional[ReaderSettings] = None,
        metrics: Optional[DisplayMetrics] = None,
    ) -> None:
        self.source = source
        self.settings = settings or ReaderSettings()
        self.metrics = metrics or DefaultDisplayMetrics(
            screen_dpi=self.settings.dpi, font_size=self.settings.font_size
        )
        self.root_id = root_id or self.settings.root_id or self._default_root_id(source)

        self.definitions: Dict[str, object] = {}
        self.diagnostics: List[Diagnostic] = []
        self.viewport: Optional[Viewport] = None
        self._stack: List[Frame] = []
        self._deferred: List[Callable[[], None]] = []
        self._own_stops: Dict[str, List[Stop]] = {}
        self._cancelled = False
        self._paints = self._paint_resolver()

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #
    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "SvgReader":
        """Read SVG markup from a file."""
        return cls(Path(path), **kwargs)

    @classmethod
    def from_string(cls, svg_text: str | bytes, **kwargs) -> "SvgReader":
        """Read SVG markup held in memory."""
        data = svg_text.encode("utf-8") if isinstance(svg_text, str) else svg_text
        return cls(data, **kwargs)

    @staticmethod
    def _default_root_id(source: Optional[Source]) -> str:
        if isinstance(source, (str, Path)):
            return root_id_from_path(source)
        name = getattr(source, "name", None)
        if isinstance(name, str):
            return root_id_from_path(name)
        return DEFAULT_ROOT_ID

    def _paint_resolver(self) -> PaintResolver:
        return PaintResolver(
            self.definitions,
            fallback=self.settings.fallback_paint,
            sentinel_color=self.settings.sentinel_color,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def build_scene(self) -> Group:
        """Parse the whole source and return the root group."""
        if self.source is None:
            raise ValueError("SvgReader has no source to read from.")
        self.begin_document()
        parser = ET.XMLPullParser(events=("start", "end"))
        text_depth = 0
        try:
            for chunk in self._chunks():
                parser.feed(chunk)
                text_depth = self._dispatch_events(parser, text_depth)
            parser.close()
            self._dispatch_events(parser, text_depth)
        except ET.ParseError as exc:
            raise StreamError(f"Malformed SVG markup: {exc}") from exc
        return self.end_document()

    def cancel(self) -> None:
        """Ask a running parse to stop before the next element."""
        self._cancelled = True

    def lookup(self, raw_id: str) -> Optional[object]:
        """Definition registered under the document's (un-prefixed) id."""
        return self.definitions.get(self._namespaced(raw_id))

    # ------------------------------------------------------------------ #
    # Event interface
    # ------------------------------------------------------------------ #
    def begin_document(self) -> None:
        self.definitions.clear()
        self.diagnostics.clear()
        self.viewport = None
        self._deferred = []
        self._cancelled = False
        self._stack = [Frame(FrameKind.GROUP, "", Group(id=self.root_id), _GROUP_ATTRIBUTES)]

    def begin_element(self, name: str, attributes: Mapping[str, str]) -> None:
        if self._cancelled:
            raise ParseCancelled(f"Parsing cancelled at <{name}>")

        if name == "svg":
            self._process_svg(attributes)
            return
        if name in _SHAPE_ELEMENTS:
            kind = _SHAPE_ELEMENTS[name]
            frame = Frame(FrameKind.SHAPE, name, Shape.of_kind(kind), _SHAPE_ATTRIBUTES[kind])
        elif name in _FRAME_ELEMENTS:
            frame = self._new_frame(_FRAME_ELEMENTS[name], name)
        else:
            if name == "style":
                self._diagnose(
                    DiagnosticKind.UNSUPPORTED,
                    "<style> element isn't supported yet",
                    element=name,
                    level=logging.WARNING,
                )
            else:
                self._diagnose(
                    DiagnosticKind.UNSUPPORTED,
                    f"Skipping unsupported element with {len(attributes)} attribute(s)",
                    element=name,
                    level=logging.INFO,
                )
            return

        self._apply_attributes(frame, attributes)
        self._stack.append(frame)

    def characters(self, text: str) -> None:
        """Character data of the innermost open element."""
        node = self._stack[-1].node
        if isinstance(node, Shape) and isinstance(node.geometry, TextGeometry):
            node.geometry.content += text

    def end_element(self, name: str) -> None:
        if name not in _SHAPE_ELEMENTS and name not in _FRAME_ELEMENTS:
            return
        if len(self._stack) < 2:
            raise StructuralError(f"</{name}> closes an element that was never opened")
        frame = self._stack.pop()
        if frame.element != name:
            raise StructuralError(f"</{name}> closes <{frame.element}>")
        self._attach(frame, self._stack[-1])

    def end_document(self) -> Group:
        """Run the deferred actions and hand back the root group."""
        if len(self._stack) != 1:
            open_elements = ", ".join(f"<{frame.element}>" for frame in self._stack[1:])
            raise StructuralError(f"Document ended inside {open_elements}")
        # Stops declared inside each gradient, before any href copies them.
        self._own_stops = {
            key: list(obj.stops)
            for key, obj in self.definitions.items()
            if isinstance(obj, Gradient)
        }
        actions, self._deferred = self._deferred, []
        logger.debug("Running %d deferred action(s)", len(actions))
        for action in actions:
            action()
        root = self._stack.pop()
        return root.node

    # ------------------------------------------------------------------ #
    # Stream handling
    # ------------------------------------------------------------------ #
    def _chunks(self) -> Iterator[bytes]:
        size = self.settings.chunk_size
        source = self.source
        if isinstance(source, bytes):
            yield source
            return
        if isinstance(source, (str, Path)):
            with open(source, "rb") as stream:
                yield from self._read_stream(stream, size)
            return
        yield from self._read_stream(source, size)

    @staticmethod
    def _read_stream(stream: Union[BinaryIO, io.TextIOBase], size: int) -> Iterator[bytes]:
        while True:
            chunk = stream.read(size)
            if not chunk:
                return
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk

    def _dispatch_events(self, parser: ET.XMLPullParser, text_depth: int) -> int:
        for event, elem in parser.read_events():
            name = _element_name(elem.tag)
            if event == "start":
                self.begin_element(name, _local_attributes(elem.attrib))
                if name == "text":
                    text_depth += 1
                continue
            if name == "text":
                self.characters("".join(elem.itertext()))
                text_depth -= 1
            self.end_element(name)
            if text_depth == 0:
                elem.clear()
        return text_depth

    # ------------------------------------------------------------------ #
    # Frames
    # ------------------------------------------------------------------ #
    def _new_frame(self, kind: FrameKind, name: str) -> Frame:
        if kind is FrameKind.GROUP:
            return Frame(kind, name, Group(), _GROUP_ATTRIBUTES)
        if kind is FrameKind.CLIP:
            return Frame(kind, name, ClipPath(), _GROUP_ATTRIBUTES)
        if kind is FrameKind.LINEAR_GRADIENT:
            return Frame(kind, name, LinearGradient(), _LINEAR_GRADIENT_ATTRIBUTES)
        if kind is FrameKind.RADIAL_GRADIENT:
            return Frame(kind, name, RadialGradient(), _RADIAL_GRADIENT_ATTRIBUTES)
        if kind is FrameKind.STOP:
            return Frame(kind, name, Stop(), _STOP_ATTRIBUTES)
        return Frame(kind, name, Definitions(), _DEFINITIONS_ATTRIBUTES)

    def _attach(self, frame: Frame, parent: Frame) -> None:
        kind = frame.kind
        if kind is FrameKind.DEFINITIONS:
            logger.debug("Dropping defs bucket holding %s", frame.node.registered)
            return
        if kind in _GRADIENT_FRAMES or kind is FrameKind.CLIP:
            # Paint servers and clip paths are only reachable through their id.
            if self._register(frame, parent) and kind in _GRADIENT_FRAMES:
                self._defer(partial(self._finalize_gradient, frame.node))
            return
        if kind is FrameKind.STOP and parent.kind in _GRADIENT_FRAMES:
            parent.node.stops.append(frame.node)
            return
        if parent.kind is FrameKind.DEFINITIONS:
            self._register(frame, parent)
            return
        if kind is not FrameKind.STOP and parent.kind in _CONTAINER_FRAMES:
            parent.target.children.append(frame.node)
            return
        raise StructuralError(f"Can't add a <{frame.element}> to <{parent.element or 'root'}>")

    def _register(self, frame: Frame, parent: Frame) -> bool:
        key = frame.node.id
        if not key:
            self._diagnose(
                DiagnosticKind.ATTRIBUTE,
                "Definition has no id and can never be referenced; dropped",
                element=frame.element,
            )
            return False
        if key in self.definitions:
            self._diagnose(
                DiagnosticKind.ATTRIBUTE,
                f"Duplicate id {key!r}; the later definition wins",
                element=frame.element,
                attribute="id",
            )
        self.definitions[key] = frame.node
        if parent.kind is FrameKind.DEFINITIONS:
            parent.node.registered.append(key)
        return True

    # ------------------------------------------------------------------ #
    # Deferred resolution
    # ------------------------------------------------------------------ #
    def _defer(self, action: Callable[[], None]) -> None:
        self._deferred.append(action)

    def _finalize_gradient(self, gradient: Gradient) -> None:
        if not gradient.inherit_stops(self._own_stops):
            self._diagnose(
                DiagnosticKind.REFERENCE,
                f"href {gradient.href!r} does not name a gradient; no stops inherited",
                element=gradient.id,
                attribute="href",
            )
        gradient.bake_transform()

    def _resolve_paint(self, shape: Shape, field: str, paint: PaintReference) -> None:
        if getattr(shape, field) is not paint:
            # A later fill/stroke assignment replaced this one.
            return
        resolved = self._paints.lookup(paint)
        if resolved is None:
            self._diagnose(
                DiagnosticKind.REFERENCE,
                f"No paint found for url(#{paint.ref}), using a fallback color",
                element=shape.id,
                attribute=field,
            )
            resolved = self._paints.fallback_paint(paint)
        setattr(shape, field, resolved)

    def _resolve_clip(self, node: SceneNode) -> None:
        clip = self.definitions.get(node.clip_ref)
        if isinstance(clip, ClipPath):
            node.clip = clip
            return
        self._diagnose(
            DiagnosticKind.REFERENCE,
            f"Can't find clip for id {node.clip_ref!r}",
            element=node.id,
            attribute="clip-path",
        )

    # ------------------------------------------------------------------ #
    # Attribute dispatch
    # ------------------------------------------------------------------ #
    def _apply_attributes(self, frame: Frame, attributes: Mapping[str, str]) -> None:
        style = None
        for name, value in attributes.items():
            if name == "style":
                style = value
                continue
            self._apply_attribute(frame, name, value)
        # style="" overrides presentation attributes whatever their order.
        if style is not None:
            self._apply_style(frame, style)

    def _apply_attribute(self, frame: Frame, name: str, value: str) -> None:
        handler = frame.table.get(name)
        if handler is None:
            if name in _KNOWN_ATTRIBUTES:
                message = f"{name} ignored, <{frame.element}> does not use it"
            else:
                message = f"Ignoring attribute {name}={value!r}"
            self._diagnose(
                DiagnosticKind.UNSUPPORTED, message, element=frame.element, attribute=name
            )
            return
        try:
            handler(self, frame, value.strip())
        except AttributeValueError as exc:
            self._diagnose(
                DiagnosticKind.ATTRIBUTE, str(exc), element=frame.element, attribute=name
            )

    def _apply_style(self, frame: Frame, style: str) -> None:
        for part in style.split(";"):
            if not part.strip():
                continue
            key, sep, value = part.partition(":")
            key = key.strip()
            if not sep or not key or not value.strip():
                self._diagnose(
                    DiagnosticKind.ATTRIBUTE,
                    f"Odd style info: {part.strip()!r}",
                    element=frame.element,
                    attribute="style",
                )
                continue
            if key not in _STYLE_PROPERTIES:
                self._diagnose(
                    DiagnosticKind.UNSUPPORTED,
                    f"Style not supported yet, key: {key}, value: {value.strip()}",
                    element=frame.element,
                    attribute="style",
                )
                continue
            self._apply_attribute(frame, key, value)

    def _diagnose(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        element: Optional[str] = None,
        attribute: Optional[str] = None,
        level: Optional[int] = None,
    ) -> None:
        diagnostic = Diagnostic(kind, message, element, attribute)
        self.diagnostics.append(diagnostic)
        if level is None:
            level = logging.DEBUG if kind is DiagnosticKind.UNSUPPORTED else logging.WARNING
        logger.log(level, "%s", diagnostic)

    # ------------------------------------------------------------------ #
    # Value helpers
    # ------------------------------------------------------------------ #
    def _namespaced(self, raw_id: str) -> str:
        return f"{self.root_id}-{raw_id}"

    def _length(self, value: str, axis: Axis, frame: Optional[Frame] = None) -> float:
        length = parse_length(value) if value != "none" else None
        if length is not None and length.is_percent:
            extent = self.viewport.extent(axis) if self.viewport else None
            fraction = length.value / 100.0
            return fraction * extent if extent is not None else fraction
        font_family = font_size = None
        if frame is not None and isinstance(frame.node, Shape):
            geometry = frame.node.geometry
            if isinstance(geometry, TextGeometry):
                font_family, font_size = geometry.font_family, geometry.font_size
        return resolve_length(value, self.metrics, font_family=font_family, font_size=font_size)

    def _process_svg(self, attributes: Mapping[str, str]) -> None:
        if self.viewport is not None:
            self._diagnose(DiagnosticKind.UNSUPPORTED, "Nested viewport ignored", element="svg")
            return
        viewport = Viewport()
        for name in ("width", "height"):
            value = attributes.get(name)
            if value is None:
                continue
            try:
                length = parse_length(value)
                if not length.is_percent:
                    setattr(viewport, name, resolve_length(value, self.metrics))
            except AttributeValueError as exc:
                self._diagnose(DiagnosticKind.ATTRIBUTE, str(exc), element="svg", attribute=name)
        view_box = attributes.get("viewBox")
        if view_box is not None:
            try:
                numbers = parse_numbers(view_box)
            except ValueError:
                numbers = []
            if len(numbers) == 4:
                viewport.view_box = tuple(numbers)
            else:
                self._diagnose(
                    DiagnosticKind.ATTRIBUTE,
                    f"Bad viewBox {view_box!r}",
                    element="svg",
                    attribute="viewBox",
                )
        self.viewport = viewport

    # ------------------------------------------------------------------ #
    # Universal attributes
    # ------------------------------------------------------------------ #
    def _attr_id(self, frame: Frame, value: str) -> None:
        frame.node.id = self._namespaced(value)

    def _attr_transform(self, frame: Frame, value: str) -> None:
        frame.target.transform = parse_transform_list(value)

    def _attr_opacity(self, frame: Frame, value: str) -> None:
        frame.target.opacity = _clamp(_number(value))

    def _attr_clip_path(self, frame: Frame, value: str) -> None:
        if value == "none":
            frame.target.clip_ref = None
            return
        ref = parse_url_reference(value)
        if ref is None:
            raise AttributeValueError(f"clip-path isn't referencing a url(): {value!r}")
        target = frame.target
        target.clip_ref = self._namespaced(ref)
        self._defer(partial(self._resolve_clip, target))

    # ------------------------------------------------------------------ #
    # Shape presentation attributes
    # ------------------------------------------------------------------ #
    def _assign_paint(self, frame: Frame, field: str, value: str) -> None:
        paint = parse_paint(value, self._namespaced)
        setattr(frame.node, field, paint)
        if isinstance(paint, PaintReference):
            self._defer(partial(self._resolve_paint, frame.node, field, paint))

    def _attr_fill(self, frame: Frame, value: str) -> None:
        self._assign_paint(frame, "fill", value)

    def _attr_stroke(self, frame: Frame, value: str) -> None:
        self._assign_paint(frame, "stroke", value)

    def _attr_stroke_width(self, frame: Frame, value: str) -> None:
        frame.node.stroke_width = self._length(value, Axis.DIAGONAL, frame)

    def _attr_stroke_linecap(self, frame: Frame, value: str) -> None:
        try:
            frame.node.stroke_cap = StrokeLineCap(value)
        except ValueError as exc:
            raise AttributeValueError(f"Unknown stroke-linecap {value!r}") from exc

    def _attr_stroke_linejoin(self, frame: Frame, value: str) -> None:
        try:
            frame.node.stroke_join = StrokeLineJoin(value)
        except ValueError as exc:
            raise AttributeValueError(f"Unknown stroke-linejoin {value!r}") from exc

    def _attr_stroke_miterlimit(self, frame: Frame, value: str) -> None:
        limit = _number(value)
        if limit < 1.0:
            raise AttributeValueError(f"stroke-miterlimit must be >= 1, got {value!r}")
        frame.node.stroke_miter_limit = limit

    def _attr_stroke_dasharray(self, frame: Frame, value: str) -> None:
        if value == "none":
            frame.node.dash_array = []
            return
        try:
            dashes = parse_numbers(value)
        except ValueError as exc:
            raise AttributeValueError(f"Bad stroke-dasharray {value!r}") from exc
        if any(dash < 0 for dash in dashes):
            raise AttributeValueError(f"Negative stroke-dasharray {value!r}")
        frame.node.dash_array = dashes

    def _attr_fill_opacity(self, frame: Frame, value: str) -> None:
        frame.node.fill_opacity = _clamp(_number(value))

    def _attr_stroke_opacity(self, frame: Frame, value: str) -> None:
        frame.node.stroke_opacity = _clamp(_number(value))

    def _attr_font_family(self, frame: Frame, value: str) -> None:
        frame.node.geometry.font_family = value.strip("'\"")

    def _attr_font_size(self, frame: Frame, value: str) -> None:
        frame.node.geometry.font_size = resolve_length(value, self.metrics)

    # ------------------------------------------------------------------ #
    # Shape geometry attributes
    # ------------------------------------------------------------------ #
    def _attr_d(self, frame: Frame, value: str) -> None:
        frame.node.geometry.d = value

    def _attr_points(self, frame: Frame, value: str) -> None:
        try:
            points = parse_numbers(value)
        except ValueError as exc:
            raise AttributeValueError(f"Bad points {value!r}: {exc}") from exc
        if len(points) % 2:
            self._diagnose(
                DiagnosticKind.ATTRIBUTE,
                "Odd number of coordinates, dropping the last one",
                element=frame.element,
                attribute="points",
            )
            points = points[:-1]
        frame.node.geometry.points = points

    # ------------------------------------------------------------------ #
    # Gradient and stop attributes
    # ------------------------------------------------------------------ #
    def _attr_gradient_units(self, frame: Frame, value: str) -> None:
        if value == "userSpaceOnUse":
            frame.node.proportional = False
        elif value == "objectBoundingBox":
            frame.node.proportional = True
        else:
            raise AttributeValueError(f"Unknown gradientUnits {value!r}")

    def _attr_gradient_transform(self, frame: Frame, value: str) -> None:
        frame.node.transform = parse_transform_list(value)

    def _attr_spread_method(self, frame: Frame, value: str) -> None:
        try:
            frame.node.spread = SpreadMethod(value)
        except ValueError as exc:
            frame.node.spread = SpreadMethod.PAD
            raise AttributeValueError(f"Unknown spreadMethod {value!r}, using pad") from exc

    def _attr_href(self, frame: Frame, value: str) -> None:
        if not value.startswith("#") or len(value) < 2:
            raise AttributeValueError(f"Only local #id references are supported: {value!r}")
        frame.node.href = self._namespaced(value[1:])

    def _attr_offset(self, frame: Frame, value: str) -> None:
        frame.node.offset = _clamp(resolve_length(value, self.metrics))

    def _attr_stop_color(self, frame: Frame, value: str) -> None:
        frame.node.color = parse_color(value)

    def _attr_stop_opacity(self, frame: Frame, value: str) -> None:
        frame.node.opacity = _clamp(_number(value))


def _geometry_length(field: str, axis: Axis) -> Handler:
    def handler(reader: SvgReader, frame: Frame, value: str) -> None:
        setattr(frame.node.geometry, field, reader._length(value, axis, frame))

    return handler


def _gradient_coordinate(field: str) -> Handler:
    # Gradient coordinates stay fractions when given as percentages.
    def handler(reader: SvgReader, frame: Frame, value: str) -> None:
        setattr(frame.node, field, resolve_length(value, reader.metrics))

    return handler


def _radius(field: str) -> Handler:
    def handler(reader: SvgReader, frame: Frame, value: str) -> None:
        radius = reader._length(value, Axis.DIAGONAL, frame)
        if radius < 0:
            raise AttributeValueError(f"Negative {field} {value!r}")
        setattr(frame.node.geometry, field, radius)

    return handler


_UNIVERSAL_ATTRIBUTES: Dict[str, Handler] = {
    "id": SvgReader._attr_id,
    "transform": SvgReader._attr_transform,
    "clip-path": SvgReader._attr_clip_path,
    "opacity": SvgReader._attr_opacity,
}

_PRESENTATION_ATTRIBUTES: Dict[str, Handler] = {
    "fill": SvgReader._attr_fill,
    "stroke": SvgReader._attr_stroke,
    "stroke-width": SvgReader._attr_stroke_width,
    "stroke-linecap": SvgReader._attr_stroke_linecap,
    "stroke-linejoin": SvgReader._attr_stroke_linejoin,
    "stroke-miterlimit": SvgReader._attr_stroke_miterlimit,
    "stroke-dasharray": SvgReader._attr_stroke_dasharray,
    "fill-opacity": SvgReader._attr_fill_opacity,
    "stroke-opacity": SvgReader._attr_stroke_opacity,
}

_GEOMETRY_ATTRIBUTES: Dict[ShapeKind, Dict[str, Handler]] = {
    ShapeKind.PATH: {"d": SvgReader._attr_d},
    ShapeKind.POLYGON: {"points": SvgReader._attr_points},
    ShapeKind.POLYLINE: {"points": SvgReader._attr_points},
    ShapeKind.RECT: {
        "x": _geometry_length("x", Axis.X),
        "y": _geometry_length("y", Axis.Y),
        "width": _geometry_length("width", Axis.X),
        "height": _geometry_length("height", Axis.Y),
        "rx": _radius("rx"),
        "ry": _radius("ry"),
    },
    ShapeKind.CIRCLE: {
        "cx": _geometry_length("cx", Axis.X),
        "cy": _geometry_length("cy", Axis.Y),
        "r": _radius("r"),
    },
    ShapeKind.ELLIPSE: {
        "cx": _geometry_length("cx", Axis.X),
        "cy": _geometry_length("cy", Axis.Y),
        "rx": _radius("rx"),
        "ry": _radius("ry"),
    },
    ShapeKind.LINE: {
        "x1": _geometry_length("x1", Axis.X),
        "y1": _geometry_length("y1", Axis.Y),
        "x2": _geometry_length("x2", Axis.X),
        "y2": _geometry_length("y2", Axis.Y),
    },
    ShapeKind.TEXT: {
        "x": _geometry_length("x", Axis.X),
        "y": _geometry_length("y", Axis.Y),
        "font-family": SvgReader._attr_font_family,
        "font-size": SvgReader._attr_font_size,
    },
}

_GROUP_ATTRIBUTES: Dict[str, Handler] = dict(_UNIVERSAL_ATTRIBUTES)

_SHAPE_ATTRIBUTES: Dict[ShapeKind, Dict[str, Handler]] = {
    kind: {**_UNIVERSAL_ATTRIBUTES, **_PRESENTATION_ATTRIBUTES, **geometry}
    for kind, geometry in _GEOMETRY_ATTRIBUTES.items()
}

_GRADIENT_ATTRIBUTES: Dict[str, Handler] = {
    "id": SvgReader._attr_id,
    "gradientUnits": SvgReader._attr_gradient_units,
    "gradientTransform": SvgReader._attr_gradient_transform,
    "spreadMethod": SvgReader._attr_spread_method,
    "href": SvgReader._attr_href,
}

_LINEAR_GRADIENT_ATTRIBUTES: Dict[str, Handler] = {
    **_GRADIENT_ATTRIBUTES,
    **{name: _gradient_coordinate(name) for name in ("x1", "y1", "x2", "y2")},
}

_RADIAL_GRADIENT_ATTRIBUTES: Dict[str, Handler] = {
    **_GRADIENT_ATTRIBUTES,
    **{name: _gradient_coordinate(name) for name in ("cx", "cy", "r", "fx", "fy")},
}

_STOP_ATTRIBUTES: Dict[str, Handler] = {
    "id": SvgReader._attr_id,
    "offset": SvgReader._attr_offset,
    "stop-color": SvgReader._attr_stop_color,
    "stop-opacity": SvgReader._attr_stop_opacity,
}

_DEFINITIONS_ATTRIBUTES: Dict[str, Handler] = {}

_KNOWN_ATTRIBUTES = frozenset(
    name
    for table in (
        _GROUP_ATTRIBUTES,
        _LINEAR_GRADIENT_ATTRIBUTES,
        _RADIAL_GRADIENT_ATTRIBUTES,
        _STOP_ATTRIBUTES,
        *_SHAPE_ATTRIBUTES.values(),
    )
    for name in table
)


def read_svg(source: Source, **kwargs) -> Group:
    """Parse ``source`` (a path, bytes or binary stream) into a scene tree."""
    return SvgReader(source, **kwargs).build_scene()
