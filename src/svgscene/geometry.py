"""
2D affine transforms and the SVG transform-list grammar.

Transforms use the SVG parameter order ``matrix(a, b, c, d, e, f)``, i.e. the
column-major 3x3 matrix::

    | a  c  e |
    | b  d  f |
    | 0  0  1 |

applied to column vectors. A transform list ``T1 T2 ... Tn`` composes to
``T1 @ T2 @ ... @ Tn``: the first listed function is the outermost one, so
``translate(10,0) scale(2)`` maps ``(1, 0)`` to ``(12, 0)``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict

from .errors import TransformSyntaxError

__all__ = [
    "Affine",
    "parse_numbers",
    "parse_transform",
    "parse_transform_list",
]

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATOR_RE = re.compile(r"[\s,]*")
_FUNCTION_RE = re.compile(r"\s*([A-Za-z]+)\s*\(")


def parse_numbers(text: str) -> List[float]:
    """Split a comma/whitespace separated number list.

    Compact forms such as ``"10-5"`` or ``"1.5.5"`` are accepted the way SVG
    path data writes them. Anything else between numbers raises ValueError.
    """
    numbers: List[float] = []
    pos = 0
    length = len(text)
    while True:
        pos = _SEPARATOR_RE.match(text, pos).end()
        if pos >= length:
            return numbers
        match = _NUMBER_RE.match(text, pos)
        if not match:
            raise ValueError(f"invalid number at {text[pos:pos + 12]!r}")
        numbers.append(float(match.group(0)))
        pos = match.end()


class Affine(BaseModel):
    model_config = ConfigDict(frozen=True)

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #
    @classmethod
    def identity(cls) -> "Affine":
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float = 0.0) -> "Affine":
        return cls(e=tx, f=ty)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "Affine":
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def rotation(cls, degrees: float, cx: float = 0.0, cy: float = 0.0) -> "Affine":
        theta = math.radians(degrees)
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        rotate = cls(a=cos_t, b=sin_t, c=-sin_t, d=cos_t)
        if cx == 0.0 and cy == 0.0:
            return rotate
        return cls.translation(cx, cy) @ rotate @ cls.translation(-cx, -cy)

    @classmethod
    def skew_x(cls, degrees: float) -> "Affine":
        return cls(c=math.tan(math.radians(degrees)))

    @classmethod
    def skew_y(cls, degrees: float) -> "Affine":
        return cls(b=math.tan(math.radians(degrees)))

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #
    def __matmul__(self, other: "Affine") -> "Affine":
        """Compose so that ``other`` is applied first, then ``self``."""
        if not isinstance(other, Affine):
            return NotImplemented
        return Affine(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def apply(self, x: float, y: float) -> Point:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    @property
    def is_identity(self) -> bool:
        return self.as_tuple() == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def _split_calls(value: str) -> List[Tuple[str, str]]:
    """Return ``(name, argument-text)`` pairs for every call in the list."""
    calls: List[Tuple[str, str]] = []
    pos = 0
    length = len(value)
    while True:
        pos = _SEPARATOR_RE.match(value, pos).end()
        if pos >= length:
            return calls
        match = _FUNCTION_RE.match(value, pos)
        if not match:
            raise TransformSyntaxError(f"Malformed transform list near {value[pos:]!r}")
        close = value.find(")", match.end())
        if close < 0:
            raise TransformSyntaxError(f"Unbalanced parenthesis in transform {value[pos:]!r}")
        calls.append((match.group(1), value[match.end():close]))
        pos = close + 1


def parse_transform(name: str, args_text: str) -> Affine:
    """Decode one transform function call.

    Unknown names and non-numeric arguments are fatal. A known function with
    the wrong number of arguments is skipped with a warning.
    """
    try:
        p = parse_numbers(args_text)
    except ValueError as exc:
        raise TransformSyntaxError(f"Bad arguments for {name}({args_text}): {exc}") from exc

    count = len(p)
    if name == "matrix":
        if count == 6:
            return Affine(a=p[0], b=p[1], c=p[2], d=p[3], e=p[4], f=p[5])
    elif name == "translate":
        if count in (1, 2):
            return Affine.translation(p[0], p[1] if count == 2 else 0.0)
    elif name == "rotate":
        if count == 1:
            return Affine.rotation(p[0])
        if count == 3:
            return Affine.rotation(p[0], p[1], p[2])
    elif name == "scale":
        if count in (1, 2):
            return Affine.scaling(p[0], p[1] if count == 2 else None)
    elif name == "skewX":
        if count == 1:
            return Affine.skew_x(p[0])
    elif name == "skewY":
        if count == 1:
            return Affine.skew_y(p[0])
    else:
        raise TransformSyntaxError(f"Unhandled transform: {name}({args_text})")

    logger.warning("Bad %s parameters %s, ignoring it", name, p)
    return Affine.identity()


def parse_transform_list(value: str) -> Affine:
    """Compose a whitespace/comma separated list of transform calls."""
    result = Affine.identity()
    for name, args_text in _split_calls(value):
        result = result @ parse_transform(name, args_text)
    return result
