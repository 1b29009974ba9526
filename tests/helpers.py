from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

SVG_NS = {"svg": "http://www.w3.org/2000/svg"}


def wrap_svg(body: str, *, attrs: str = "") -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'xmlns:xlink="http://www.w3.org/1999/xlink"{(" " + attrs) if attrs else ""}>'
        f"{body}</svg>"
    )


def basic_document() -> str:
    return wrap_svg(
        '<g id="layer" transform="translate(10,0) scale(2)">'
        '<rect id="box" x="1" y="2" width="30" height="20" fill="red"/>'
        '<circle id="dot" cx="5" cy="5" r="3" stroke="blue" stroke-width="2"/>'
        "</g>",
        attrs='width="100" height="50"',
    )


def forward_reference_document() -> str:
    return wrap_svg(
        '<rect id="early" width="10" height="10" fill="url(#late)"/>'
        "<defs>"
        '<linearGradient id="late" x1="0" y1="0" x2="1" y2="1">'
        '<stop offset="0" stop-color="red"/>'
        '<stop offset="1" stop-color="blue"/>'
        "</linearGradient>"
        "</defs>"
    )


def href_document() -> str:
    return wrap_svg(
        "<defs>"
        '<linearGradient id="base">'
        '<stop offset="0.8" stop-color="#00ff00"/>'
        '<stop offset="0.2" stop-color="#0000ff"/>'
        '<stop offset="1" stop-color="#ff0000"/>'
        "</linearGradient>"
        '<radialGradient id="derived" xlink:href="#base" cx="0" cy="0" r="10" fx="5" fy="0"'
        ' gradientUnits="userSpaceOnUse"/>'
        "</defs>"
        '<circle id="ball" r="10" fill="url(#derived)"/>'
    )


def clip_document() -> str:
    return wrap_svg(
        '<g id="clipped" clip-path="url(#mask)">'
        '<rect width="50" height="50"/>'
        "</g>"
        '<clipPath id="mask"><circle cx="25" cy="25" r="20"/></clipPath>'
    )


def parse_svg(svg_text: str) -> ET.Element:
    return ET.fromstring(svg_text)


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def root_children_signature(root: ET.Element) -> list[tuple[str, str | None]]:
    out: list[tuple[str, str | None]] = []
    for child in list(root):
        out.append((local_name(child.tag), child.get("id")))
    return out


def write_svg(path: Path, svg_text: str) -> None:
    path.write_text(svg_text, encoding="utf-8")
