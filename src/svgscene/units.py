"""
Length values: plain numbers, percentages and unit-suffixed values.

Percentages resolve to a raw fraction (``"50%"`` -> ``0.5``); the caller
decides what the fraction is relative to. ``em``/``ex`` are approximated
from the advance width of a reference glyph reported by a
:class:`DisplayMetrics` provider, so they are only as exact as that
provider is.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from .errors import AttributeValueError

__all__ = [
    "DisplayMetrics",
    "DefaultDisplayMetrics",
    "Length",
    "parse_length",
    "resolve_length",
]

_LENGTH_RE = re.compile(
    r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(%|[A-Za-z]{2})?\s*$"
)

# Units that scale linearly without any outside information.
_FIXED_SCALE = {
    None: 1.0,
    "px": 1.0,
    "pt": 1.0,
    "pc": 12.0,
}

# Physical units, expressed in inches.
_PER_INCH = {
    "in": 1.0,
    "cm": 1.0 / 2.54,
    "mm": 1.0 / 25.4,
}

_REFERENCE_GLYPHS = {
    "em": "M",
    "ex": "x",
}


@runtime_checkable
class DisplayMetrics(Protocol):
    """Host display and font information needed by the unit resolver."""

    def dpi(self) -> float:
        ...

    def glyph_advance(
        self,
        glyph: str,
        font_family: Optional[str] = None,
        font_size: Optional[float] = None,
    ) -> float:
        ...


class DefaultDisplayMetrics(BaseModel):
    """Metrics used when no host toolkit is attached.

    ``M`` advances one font size and every other glyph half of one, which is
    the usual CSS approximation of ``1em`` and ``1ex``.
    """

    screen_dpi: float = 96.0
    font_size: float = 16.0

    def dpi(self) -> float:
        return self.screen_dpi

    def glyph_advance(
        self,
        glyph: str,
        font_family: Optional[str] = None,
        font_size: Optional[float] = None,
    ) -> float:
        size = font_size if font_size is not None else self.font_size
        return size if glyph == "M" else size * 0.5


class Length(NamedTuple):
    value: float
    unit: Optional[str]

    @property
    def is_percent(self) -> bool:
        return self.unit == "%"


def parse_length(value: str) -> Length:
    """Split a length into its number and unit (``None`` when unitless)."""
    match = _LENGTH_RE.match(value)
    if not match:
        raise AttributeValueError(f"Not a length: {value!r}")
    number, unit = match.groups()
    if unit and unit != "%":
        unit = unit.lower()
        if unit not in _FIXED_SCALE and unit not in _PER_INCH and unit not in _REFERENCE_GLYPHS:
            raise AttributeValueError(f"Unknown unit {unit!r} in {value!r}")
    return Length(float(number), unit)


def resolve_length(
    value: str,
    metrics: Optional[DisplayMetrics] = None,
    *,
    font_family: Optional[str] = None,
    font_size: Optional[float] = None,
) -> float:
    """Convert a markup length to a scalar in user space.

    ``"none"`` is 0 and a percentage is returned as a fraction.
    """
    if value.strip() == "none":
        return 0.0
    length = parse_length(value)
    if length.is_percent:
        return length.value / 100.0
    if length.unit in _FIXED_SCALE:
        return length.value * _FIXED_SCALE[length.unit]

    metrics = metrics if metrics is not None else DefaultDisplayMetrics()
    if length.unit in _PER_INCH:
        return length.value * _PER_INCH[length.unit] * metrics.dpi()
    glyph = _REFERENCE_GLYPHS[length.unit]
    return length.value * metrics.glyph_advance(glyph, font_family, font_size)
