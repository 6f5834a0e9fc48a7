# File: geosvg/svg/compiler.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Compilador recursivo GeoJSON -> nodos SVG (circle/path/polygon/g).
# Notes:
# - Todo o nada: una forma fuera del viewport se descarta entera (no hay clipping).
# - Las properties de un Feature solo aplican a su geometría directa (no se heredan).
from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from geosvg.core.version import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_POINT_RADIUS,
    DEFAULT_POLYGON_MODE,
    POLYGON_MODES,
)
from geosvg.geo.geojson import (
    Feature,
    FeatureCollection,
    GeoNode,
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    Properties,
    SkippedNode,
    check_max_depth,
    parse_geojson,
)
from geosvg.geom.projection import Projector
from geosvg.svg.surface import SvgSurface, fmt_number, fmt_points
from geosvg.utils.errors import GsvConfigurationError

if TYPE_CHECKING:
    from geosvg.svg.layers import GeoSvgRenderer

log = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


class LayerRenderer(Protocol):
    """Capacidad de renderizar el contenido de una capa dentro de `parent`."""

    def render(self, data: Any, parent: ET.Element, store: "GeoSvgRenderer") -> Any:
        ...


@dataclass
class CompileReport:
    shapes: int = 0
    skipped: list[SkippedNode] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped


# ------------------------------
# Properties -> tags / payload
# ------------------------------

def property_value_text(value: Any) -> str:
    """Texto de un valor escalar como lo escribiría JSON (true/false, 2 en vez de 2.0)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, str)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def properties_to_tags(properties: Optional[Properties]) -> list[str]:
    """Un tag `clave--valor` por cada entrada truthy; espacios colapsados a '-'."""
    tags: list[str] = []
    for key, value in (properties or {}).items():
        if not value:
            continue
        tag = _WS_RE.sub("-", f"{key}--{property_value_text(value)}")
        if tag not in tags:
            tags.append(tag)
    return tags


def properties_payload(properties: Optional[Properties]) -> Optional[str]:
    if not properties:
        return None
    return json.dumps(dict(properties), ensure_ascii=False, separators=(",", ":"), default=str)


# ------------------------------
# Compilador
# ------------------------------

class GeometryCompiler:
    """Implementación por defecto de LayerRenderer.

    Parámetros:
    - point_radius: radio fijo de los <circle> de Point.
    - polygon_mode: "concat" (un <polygon> con anillos concatenados) o
      "contours" (<path> con un subpath por anillo, fill-rule evenodd).
    - polygon_culling: si es False los polígonos se dibujan siempre; si es True
      se descartan cuando ningún anillo tiene un punto visible.
    """

    def __init__(
        self,
        projector: Projector,
        surface: SvgSurface,
        *,
        point_radius: float = DEFAULT_POINT_RADIUS,
        polygon_mode: str = DEFAULT_POLYGON_MODE,
        polygon_culling: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if polygon_mode not in POLYGON_MODES:
            raise GsvConfigurationError(
                f"polygon_mode inválido: {polygon_mode!r} (opciones: {', '.join(POLYGON_MODES)})"
            )
        self.projector = projector
        self.surface = surface
        self.point_radius = float(point_radius)
        self.polygon_mode = polygon_mode
        self.polygon_culling = bool(polygon_culling)
        self.max_depth = check_max_depth(max_depth)

    def render(self, data: Any, parent: ET.Element, store: Any = None) -> CompileReport:
        """Parsea `data` (GeoJSON decodificado o nodo tipado) y emite las formas en `parent`."""
        report = CompileReport()
        if isinstance(data, (Feature, FeatureCollection, Point, MultiPoint, LineString,
                             MultiLineString, Polygon, MultiPolygon, GeometryCollection)):
            node: Optional[GeoNode] = data
        else:
            parsed = parse_geojson(data, max_depth=self.max_depth)
            node = parsed.node
            report.skipped.extend(parsed.skipped)

        for skip in report.skipped:
            log.warning("Nodo GeoJSON descartado %s: %s", skip.path, skip.reason)

        if node is not None:
            before = len(parent)
            try:
                report.shapes = self.compile(node, parent)
            except RecursionError:
                # Nodos tipados armados a mano no pasan por el límite del parser.
                for partial in list(parent)[before:]:
                    self.surface.remove(partial)
                report.skipped.append(SkippedNode("$", "anidamiento excede el límite de recursión"))
                log.warning("Nodo GeoJSON descartado $: anidamiento excede el límite de recursión")
        return report

    def compile(self, node: GeoNode, parent: ET.Element, properties: Optional[Properties] = None) -> int:
        """Emite `node` dentro de `parent`. Devuelve la cantidad de formas emitidas."""
        props = properties or {}

        if isinstance(node, FeatureCollection):
            return sum(self.compile(f, parent) for f in node.features)

        if isinstance(node, Feature):
            if node.geometry is None:
                return 0
            return self.compile(node.geometry, parent, node.properties)

        if isinstance(node, Point):
            x, y = self.projector.project(node.coordinates)
            if not self.projector.in_bounds((x, y)):
                return 0
            circle = self._emit(parent, "point", props)
            self.surface.set_attr(circle, "cx", fmt_number(x))
            self.surface.set_attr(circle, "cy", fmt_number(y))
            self.surface.set_attr(circle, "r", fmt_number(self.point_radius))
            return 1

        if isinstance(node, LineString):
            points = self.projector.project_many(node.coordinates)
            if not points or not self.projector.any_in_bounds(points):
                return 0
            path = self._emit(parent, "path", props)
            self.surface.set_attr(path, "d", "M" + "L".join(fmt_points(points)))
            return 1

        if isinstance(node, Polygon):
            return self._polygon(node, parent, props)

        if isinstance(node, MultiPoint):
            group = self._emit(parent, "group", props)
            return sum(self.compile(p, group) for p in node.points)

        if isinstance(node, MultiLineString):
            group = self._emit(parent, "group", props)
            return sum(self.compile(line, group) for line in node.lines)

        if isinstance(node, MultiPolygon):
            group = self._emit(parent, "group", props)
            return sum(self.compile(poly, group) for poly in node.polygons)

        if isinstance(node, GeometryCollection):
            group = self._emit(parent, "group", props)
            return sum(self.compile(g, group) for g in node.geometries)

        raise TypeError(f"Nodo GeoJSON no soportado: {type(node).__name__}")

    def _polygon(self, node: Polygon, parent: ET.Element, props: Properties) -> int:
        rings = [self.projector.project_many(ring) for ring in node.rings]
        rings = [r for r in rings if r]
        if not rings:
            return 0
        if self.polygon_culling and not any(self.projector.any_in_bounds(r) for r in rings):
            return 0

        if self.polygon_mode == "contours":
            shape = self._emit(parent, "path", props)
            d = " ".join("M" + "L".join(fmt_points(r)) + "Z" for r in rings)
            self.surface.set_attr(shape, "d", d)
            self.surface.set_attr(shape, "fill-rule", "evenodd")
        else:
            shape = self._emit(parent, "polygon", props)
            self.surface.set_attr(shape, "points", " ".join(p for r in rings for p in fmt_points(r)))
        return 1

    def _emit(self, parent: ET.Element, kind: str, props: Properties) -> ET.Element:
        node = self.surface.append(parent, self.surface.create(kind))
        payload = properties_payload(props)
        if payload is not None:
            self.surface.set_attr(node, "data-properties", payload)
        tags = properties_to_tags(props)
        if tags:
            self.surface.add_class(node, *tags)
        return node
