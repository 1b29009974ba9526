from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = [
    "SvgSceneError",
    "StreamError",
    "StructuralError",
    "TransformSyntaxError",
    "AttributeValueError",
    "ParseCancelled",
    "DiagnosticKind",
    "Diagnostic",
]


class SvgSceneError(Exception):
    """Base class for fatal errors raised while building a scene."""


class StreamError(SvgSceneError):
    """The underlying markup is not well formed."""


class StructuralError(SvgSceneError):
    """The document cannot be assembled into a scene tree."""


class TransformSyntaxError(StructuralError, ValueError):
    """A transform list uses an unknown function or broken syntax."""


class ParseCancelled(SvgSceneError):
    """Parsing stopped because the reader was cancelled."""


class AttributeValueError(ValueError):
    """A single attribute value could not be parsed.

    Never escapes the reader: it is turned into a diagnostic and the
    attribute keeps its default.
    """


class DiagnosticKind(str, Enum):
    ATTRIBUTE = "ATTRIBUTE"
    REFERENCE = "REFERENCE"
    UNSUPPORTED = "UNSUPPORTED"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    element: Optional[str] = None
    attribute: Optional[str] = None

    def __str__(self) -> str:
        where = self.element or "document"
        if self.attribute:
            where = f"{where}@{self.attribute}"
        return f"[{self.kind.value}] {where}: {self.message}"
