# File: geosvg/svg/exporter.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Serialización del árbol SVG del renderer (string / archivo .svg).
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from xml.etree.ElementTree import tostring

from geosvg.core.serialization import force_suffix, write_atomic

if TYPE_CHECKING:
    from geosvg.svg.layers import GeoSvgRenderer

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


def to_svg_string(renderer: "GeoSvgRenderer", *, xml_declaration: bool = False) -> str:
    """Devuelve el documento SVG completo (con xmlns) como texto."""
    body = tostring(renderer.svg, encoding="unicode")
    return (XML_HEADER + body) if xml_declaration else body


def export_svg(renderer: "GeoSvgRenderer", out_path: str | Path) -> Path:
    """Exporta el SVG a disco. Fuerza extensión .svg y escribe de forma atómica."""
    p = force_suffix(out_path, ".svg")
    return write_atomic(p, to_svg_string(renderer, xml_declaration=True) + "\n")
