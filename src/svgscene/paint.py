"""
Fill and stroke values: ``none``, colour literals and ``url(#id)`` references.

References are looked up in the definitions map once the whole document has
been read. A reference that names nothing usable is replaced by a fallback
colour; by default the colour is derived from the id so repeated parses of
the same document produce the same scene.
"""

from __future__ import annotations

import hashlib
import logging
import random
import re
from enum import Enum
from typing import Callable, Mapping, Optional

from pydantic_extra_types.color import Color

from .errors import AttributeValueError
from .scene_model import Gradient, GradientPaint, NoPaint, Paint, PaintReference, SolidPaint

__all__ = [
    "FallbackPaint",
    "PaintResolver",
    "fallback_color",
    "parse_color",
    "parse_paint",
    "parse_url_reference",
]

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"""^\s*url\(\s*['"]?#([^)'"\s]+)['"]?\s*\)""")


class FallbackPaint(str, Enum):
    DERIVED = "derived"
    SENTINEL = "sentinel"
    RANDOM = "random"


def parse_color(value: str) -> Color:
    try:
        return Color(value.strip())
    except (TypeError, ValueError) as exc:
        raise AttributeValueError(f"Invalid color {value!r}") from exc


def parse_url_reference(value: str) -> Optional[str]:
    """Return the id inside ``url(#id)``, or None when it is not a url."""
    match = _URL_RE.match(value)
    return match.group(1) if match else None


def parse_paint(value: str, namespace: Callable[[str], str] = str) -> Paint:
    """Parse a paint without consulting any definitions.

    ``namespace`` maps the raw id of a ``url(#id)`` to the key it is stored
    under in the definitions map.
    """
    text = value.strip()
    if text == "none":
        return NoPaint()
    ref = parse_url_reference(text)
    if ref is not None:
        return PaintReference(ref=namespace(ref))
    return SolidPaint(color=parse_color(text))


def fallback_color(
    ref: str,
    mode: FallbackPaint = FallbackPaint.DERIVED,
    *,
    sentinel: str = "magenta",
    rng: Optional[random.Random] = None,
) -> Color:
    """Colour used in place of a paint reference that cannot be resolved."""
    if mode is FallbackPaint.SENTINEL:
        return Color(sentinel)
    if mode is FallbackPaint.RANDOM:
        rng = rng or random.Random()
        return Color((rng.randrange(256), rng.randrange(256), rng.randrange(256)))
    digest = hashlib.sha1(ref.encode("utf-8")).digest()
    return Color((digest[0], digest[1], digest[2]))


class PaintResolver:
    """Resolve paints against a definitions map."""

    def __init__(
        self,
        definitions: Mapping[str, object],
        *,
        fallback: FallbackPaint = FallbackPaint.DERIVED,
        sentinel_color: str = "magenta",
        rng: Optional[random.Random] = None,
    ) -> None:
        self.definitions = definitions
        self.fallback = FallbackPaint(fallback)
        self.sentinel_color = sentinel_color
        self.rng = rng

    def lookup(self, ref: PaintReference) -> Optional[GradientPaint]:
        obj = self.definitions.get(ref.ref)
        if isinstance(obj, Gradient):
            # model_construct keeps the registered instance; gradients are
            # finalized in place after the paint is resolved.
            return GradientPaint.model_construct(gradient=obj)
        return None

    def fallback_paint(self, ref: PaintReference) -> SolidPaint:
        return SolidPaint(
            color=fallback_color(
                ref.ref, self.fallback, sentinel=self.sentinel_color, rng=self.rng
            )
        )

    def resolve_paint(self, paint: Paint) -> Paint:
        if not isinstance(paint, PaintReference):
            return paint
        resolved = self.lookup(paint)
        if resolved is not None:
            logger.debug("Found paint: %s", paint.ref)
            return resolved
        logger.warning("No paint looking up %r", paint.ref)
        return self.fallback_paint(paint)

    def resolve(self, value: str, namespace: Callable[[str], str] = str) -> Paint:
        return self.resolve_paint(parse_paint(value, namespace))
