from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field
from pydantic_extra_types.color import Color

from .geometry import Affine

__all__ = [
    "Axis",
    "ShapeKind",
    "SpreadMethod",
    "StrokeLineCap",
    "StrokeLineJoin",
    "Viewport",
    "Stop",
    "Gradient",
    "LinearGradient",
    "RadialGradient",
    "AnyGradient",
    "NoPaint",
    "SolidPaint",
    "PaintReference",
    "GradientPaint",
    "Paint",
    "PathGeometry",
    "PointsGeometry",
    "RectGeometry",
    "CircleGeometry",
    "EllipseGeometry",
    "LineGeometry",
    "TextGeometry",
    "ShapeGeometry",
    "SceneNode",
    "Group",
    "Shape",
    "ClipPath",
    "Definitions",
    "SceneChild",
    "iter_nodes",
]


def _black() -> Color:
    return Color("black")


class Axis(str, Enum):
    X = "x"
    Y = "y"
    DIAGONAL = "diagonal"


class ShapeKind(str, Enum):
    PATH = "path"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    RECT = "rect"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    LINE = "line"
    TEXT = "text"


class SpreadMethod(str, Enum):
    PAD = "pad"
    REFLECT = "reflect"
    REPEAT = "repeat"


class StrokeLineCap(str, Enum):
    BUTT = "butt"
    ROUND = "round"
    SQUARE = "square"


class StrokeLineJoin(str, Enum):
    MITER = "miter"
    ROUND = "round"
    BEVEL = "bevel"


class Viewport(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None
    view_box: Optional[Tuple[float, float, float, float]] = None

    def extent(self, axis: Axis) -> Optional[float]:
        """User-space length a percentage along ``axis`` is relative to."""
        if self.view_box is not None:
            width, height = self.view_box[2], self.view_box[3]
        else:
            width, height = self.width, self.height
        if axis is Axis.X:
            return width
        if axis is Axis.Y:
            return height
        if width is None or height is None:
            return None
        return math.hypot(width, height) / math.sqrt(2)


# ---------------------------------------------------------------------- #
# Gradients
# ---------------------------------------------------------------------- #
class Stop(BaseModel):
    id: Optional[str] = None
    offset: float = 0.0
    color: Color = Field(default_factory=_black)
    opacity: float = 1.0


class Gradient(BaseModel):
    id: Optional[str] = None
    stops: List[Stop] = Field(default_factory=list)
    spread: SpreadMethod = SpreadMethod.PAD
    proportional: bool = True
    # Gradient-space transform, cleared once baked into the control points.
    transform: Optional[Affine] = None
    href: Optional[str] = None

    def inherit_stops(self, own_stops: Mapping[str, List[Stop]]) -> bool:
        """Copy the stops of the ``href`` gradient when this one has none.

        ``own_stops`` maps gradient ids to the stops declared inside each
        gradient, taken before any inheritance ran, so chains of references
        are not followed. Returns False when the reference does not name a
        gradient.
        """
        if self.stops or not self.href:
            return True
        stops = own_stops.get(self.href)
        if stops is None:
            return False
        self.stops = list(stops)
        return True

    def bake_transform(self) -> None:
        """Apply ``transform`` to the control points; a plain gradient has none."""
        self.transform = None


class LinearGradient(Gradient):
    gradient_type: Literal["linear"] = "linear"
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 1.0
    y2: float = 0.0

    def bake_transform(self) -> None:
        if self.transform is None:
            return
        self.x1, self.y1 = self.transform.apply(self.x1, self.y1)
        self.x2, self.y2 = self.transform.apply(self.x2, self.y2)
        self.transform = None


class RadialGradient(Gradient):
    """Radial gradient whose focus is kept in polar form.

    ``focus_angle`` is in degrees and ``focus_distance`` is a fraction of
    the radius, both measured from the centre after the gradient transform
    has been baked in.
    """

    gradient_type: Literal["radial"] = "radial"
    cx: float = 0.5
    cy: float = 0.5
    r: float = 0.5
    fx: Optional[float] = None
    fy: Optional[float] = None
    focus_angle: float = 0.0
    focus_distance: float = 0.0

    def bake_transform(self) -> None:
        fx = self.cx if self.fx is None else self.fx
        fy = self.cy if self.fy is None else self.fy
        if self.transform is not None:
            t = self.transform
            ox, oy = t.apply(0.0, 0.0)
            rx, ry = t.apply(self.r, 0.0)
            self.cx, self.cy = t.apply(self.cx, self.cy)
            fx, fy = t.apply(fx, fy)
            self.r = math.hypot(rx - ox, ry - oy)
            self.transform = None
        self.fx, self.fy = fx, fy
        self.update_focus()

    def update_focus(self) -> None:
        """Re-derive the polar focus from ``fx``/``fy`` relative to the centre."""
        fx = self.cx if self.fx is None else self.fx
        fy = self.cy if self.fy is None else self.fy
        dx = fx - self.cx
        dy = fy - self.cy
        self.focus_angle = math.degrees(math.atan2(dy, dx))
        self.focus_distance = math.hypot(dx, dy) / self.r if self.r else 0.0

    def focus_point(self) -> Tuple[float, float]:
        theta = math.radians(self.focus_angle)
        distance = self.focus_distance * self.r
        return (self.cx + distance * math.cos(theta), self.cy + distance * math.sin(theta))


AnyGradient = Annotated[
    Union[LinearGradient, RadialGradient], Field(discriminator="gradient_type")
]


# ---------------------------------------------------------------------- #
# Paints
# ---------------------------------------------------------------------- #
class NoPaint(BaseModel):
    paint_type: Literal["none"] = "none"


class SolidPaint(BaseModel):
    paint_type: Literal["solid"] = "solid"
    color: Color


class PaintReference(BaseModel):
    """A ``url(#id)`` paint waiting for the definitions to be complete."""

    paint_type: Literal["reference"] = "reference"
    ref: str


class GradientPaint(BaseModel):
    paint_type: Literal["gradient"] = "gradient"
    gradient: AnyGradient


Paint = Annotated[
    Union[NoPaint, SolidPaint, PaintReference, GradientPaint],
    Field(discriminator="paint_type"),
]


# ---------------------------------------------------------------------- #
# Shape geometry, one variant per kind
# ---------------------------------------------------------------------- #
class PathGeometry(BaseModel):
    kind: Literal[ShapeKind.PATH] = ShapeKind.PATH
    d: str = ""


class PointsGeometry(BaseModel):
    kind: Literal[ShapeKind.POLYGON, ShapeKind.POLYLINE] = ShapeKind.POLYGON
    points: List[float] = Field(default_factory=list)


class RectGeometry(BaseModel):
    kind: Literal[ShapeKind.RECT] = ShapeKind.RECT
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rx: float = 0.0
    ry: float = 0.0


class CircleGeometry(BaseModel):
    kind: Literal[ShapeKind.CIRCLE] = ShapeKind.CIRCLE
    cx: float = 0.0
    cy: float = 0.0
    r: float = 0.0


class EllipseGeometry(BaseModel):
    kind: Literal[ShapeKind.ELLIPSE] = ShapeKind.ELLIPSE
    cx: float = 0.0
    cy: float = 0.0
    rx: float = 0.0
    ry: float = 0.0


class LineGeometry(BaseModel):
    kind: Literal[ShapeKind.LINE] = ShapeKind.LINE
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0


class TextGeometry(BaseModel):
    kind: Literal[ShapeKind.TEXT] = ShapeKind.TEXT
    x: float = 0.0
    y: float = 0.0
    content: str = ""
    font_family: Optional[str] = None
    font_size: Optional[float] = None


ShapeGeometry = Annotated[
    Union[
        PathGeometry,
        PointsGeometry,
        RectGeometry,
        CircleGeometry,
        EllipseGeometry,
        LineGeometry,
        TextGeometry,
    ],
    Field(discriminator="kind"),
]

_GEOMETRY_TYPES = {
    ShapeKind.PATH: PathGeometry,
    ShapeKind.POLYGON: PointsGeometry,
    ShapeKind.POLYLINE: PointsGeometry,
    ShapeKind.RECT: RectGeometry,
    ShapeKind.CIRCLE: CircleGeometry,
    ShapeKind.ELLIPSE: EllipseGeometry,
    ShapeKind.LINE: LineGeometry,
    ShapeKind.TEXT: TextGeometry,
}


# ---------------------------------------------------------------------- #
# Scene nodes
# ---------------------------------------------------------------------- #
class SceneNode(BaseModel):
    id: Optional[str] = None
    transform: Affine = Field(default_factory=Affine.identity)
    # Namespaced id from clip-path="url(#...)", resolved into ``clip`` later.
    clip_ref: Optional[str] = None
    clip: Optional[ClipPath] = None
    opacity: float = 1.0


class Group(SceneNode):
    node_type: Literal["group"] = "group"
    children: List[SceneChild] = Field(default_factory=list)


class Shape(SceneNode):
    node_type: Literal["shape"] = "shape"
    geometry: ShapeGeometry
    fill: Paint = Field(default_factory=lambda: SolidPaint(color=_black()))
    stroke: Paint = Field(default_factory=NoPaint)
    stroke_width: float = 1.0
    stroke_cap: StrokeLineCap = StrokeLineCap.BUTT
    stroke_join: StrokeLineJoin = StrokeLineJoin.MITER
    stroke_miter_limit: float = 4.0
    dash_array: List[float] = Field(default_factory=list)
    fill_opacity: float = 1.0
    stroke_opacity: float = 1.0

    @classmethod
    def of_kind(cls, kind: ShapeKind) -> "Shape":
        return cls(geometry=_GEOMETRY_TYPES[kind](kind=kind))

    @property
    def kind(self) -> ShapeKind:
        return self.geometry.kind


class ClipPath(BaseModel):
    """A group used only as a clip mask; never rendered on its own."""

    node_type: Literal["clip"] = "clip"
    id: Optional[str] = None
    group: Group = Field(default_factory=Group)


class Definitions(BaseModel):
    """Transient bucket for a ``defs`` element; never part of the tree."""

    node_type: Literal["definitions"] = "definitions"
    registered: List[str] = Field(default_factory=list)


SceneChild = Annotated[Union[Group, Shape], Field(discriminator="node_type")]

SceneNode.model_rebuild()
Group.model_rebuild()
Shape.model_rebuild()
ClipPath.model_rebuild()


def iter_nodes(node: Union[Group, Shape]):
    """Yield ``node`` and all of its descendants in document order."""
    yield node
    if isinstance(node, Group):
        for child in node.children:
            yield from iter_nodes(child)

