"""
svgscene package initialization.
Exports the SvgReader state machine, the SceneSvg emitter, the scene model
and reader settings.
"""

from .errors import (
    AttributeValueError,
    Diagnostic,
    DiagnosticKind,
    ParseCancelled,
    StreamError,
    StructuralError,
    SvgSceneError,
    TransformSyntaxError,
)
from .geometry import Affine, parse_transform_list
from .paint import FallbackPaint, PaintResolver
from .scene_model import (
    ClipPath,
    Gradient,
    GradientPaint,
    Group,
    LinearGradient,
    NoPaint,
    RadialGradient,
    Shape,
    ShapeKind,
    SolidPaint,
    Stop,
    Viewport,
    iter_nodes,
)
from .scene_svg import SceneSvg, materialize
from .settings import ReaderSettings, resolve_reader_settings, root_id_from_path
from .svg_reader import SvgReader, read_svg
from .units import DefaultDisplayMetrics, DisplayMetrics, resolve_length

__all__ = [
    "SvgReader",
    "read_svg",
    "SceneSvg",
    "materialize",
    "ReaderSettings",
    "resolve_reader_settings",
    "root_id_from_path",
    "Affine",
    "parse_transform_list",
    "FallbackPaint",
    "PaintResolver",
    "DisplayMetrics",
    "DefaultDisplayMetrics",
    "resolve_length",
    "Group",
    "Shape",
    "ShapeKind",
    "ClipPath",
    "Gradient",
    "LinearGradient",
    "RadialGradient",
    "Stop",
    "NoPaint",
    "SolidPaint",
    "GradientPaint",
    "Viewport",
    "iter_nodes",
    "SvgSceneError",
    "StreamError",
    "StructuralError",
    "TransformSyntaxError",
    "AttributeValueError",
    "ParseCancelled",
    "Diagnostic",
    "DiagnosticKind",
]
