# File: geosvg/geo/geojson.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Modelo tipado de GeoJSON (union etiquetada) + parser tolerante.
# Notes:
# - Coordenadas en convención GeoJSON: [lon, lat] (o [lon, lat, alt]).
# - Un hijo mal formado dentro de una colección se saltea y se registra; sus hermanos siguen.
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from geosvg.core.version import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT
from geosvg.utils.errors import GsvConfigurationError, GsvMalformedGeometryError

Position = tuple[float, ...]
Scalar = Union[str, int, float, bool, None]
# Valores no escalares (listas, objetos) se conservan y se serializan como JSON.
Properties = Mapping[str, Scalar]


@dataclass(frozen=True)
class Point:
    coordinates: Position
    type: str = field(default="Point", init=False)


@dataclass(frozen=True)
class MultiPoint:
    points: tuple[Point, ...]
    type: str = field(default="MultiPoint", init=False)


@dataclass(frozen=True)
class LineString:
    coordinates: tuple[Position, ...]
    type: str = field(default="LineString", init=False)


@dataclass(frozen=True)
class MultiLineString:
    lines: tuple[LineString, ...]
    type: str = field(default="MultiLineString", init=False)


@dataclass(frozen=True)
class Polygon:
    # Anillo exterior primero, huecos después.
    rings: tuple[tuple[Position, ...], ...]
    type: str = field(default="Polygon", init=False)


@dataclass(frozen=True)
class MultiPolygon:
    polygons: tuple[Polygon, ...]
    type: str = field(default="MultiPolygon", init=False)


@dataclass(frozen=True)
class GeometryCollection:
    geometries: tuple["Geometry", ...]
    type: str = field(default="GeometryCollection", init=False)


Geometry = Union[Point, MultiPoint, LineString, MultiLineString, Polygon, MultiPolygon, GeometryCollection]


@dataclass(frozen=True)
class Feature:
    geometry: Optional[Geometry]
    properties: Properties = field(default_factory=dict)
    id: Optional[Union[str, int]] = None
    type: str = field(default="Feature", init=False)


@dataclass(frozen=True)
class FeatureCollection:
    features: tuple["GeoNode", ...]
    type: str = field(default="FeatureCollection", init=False)


GeoNode = Union[Geometry, Feature, FeatureCollection]

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
)


@dataclass(frozen=True)
class SkippedNode:
    """Nodo descartado durante parse/compilación."""

    path: str
    reason: str


@dataclass
class ParseResult:
    node: Optional[GeoNode]
    skipped: list[SkippedNode] = field(default_factory=list)


def parse_geojson(raw: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """Parsea un documento GeoJSON ya decodificado (dict/list) a nodos tipados.

    Nunca lanza por contenido: si la raíz es inválida, `node` es None y el
    motivo queda en `skipped`.
    """
    parser = _Parser(max_depth=max_depth)
    try:
        node = parser.node(raw, "$", 0)
    except GsvMalformedGeometryError as e:
        parser.skipped.append(SkippedNode(e.path, e.reason))
        node = None
    except RecursionError:
        # Solo si el caller ya venía con el stack muy cargado.
        parser.skipped.append(SkippedNode("$", "anidamiento excede el límite de recursión"))
        node = None
    return ParseResult(node=node, skipped=parser.skipped)


def check_max_depth(value: Any) -> int:
    """Valida max_depth (1..MAX_DEPTH_LIMIT). Configuración inválida: GsvConfigurationError."""
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_DEPTH_LIMIT:
        raise GsvConfigurationError(f"max_depth inválido: {value!r} (rango 1..{MAX_DEPTH_LIMIT})")
    return value


class _Parser:
    def __init__(self, *, max_depth: int) -> None:
        self.max_depth = check_max_depth(max_depth)
        self.skipped: list[SkippedNode] = []

    # ---------------------------- Wrappers ----------------------------

    def node(self, raw: Any, path: str, depth: int) -> GeoNode:
        if depth > self.max_depth:
            raise GsvMalformedGeometryError(f"anidamiento supera max_depth={self.max_depth}", path)
        if not isinstance(raw, Mapping):
            raise GsvMalformedGeometryError(f"se espera objeto, no {type(raw).__name__}", path)
        kind = raw.get("type")
        if kind == "Feature":
            return self.feature(raw, path, depth)
        if kind == "FeatureCollection":
            return self.feature_collection(raw, path, depth)
        return self.geometry(raw, path, depth)

    def feature(self, raw: Mapping[str, Any], path: str, depth: int) -> Feature:
        props = raw.get("properties")
        if props is None:
            props = {}
        if not isinstance(props, Mapping):
            raise GsvMalformedGeometryError("properties debe ser objeto", f"{path}.properties")

        geom_raw = raw.get("geometry")
        geometry = None
        if geom_raw is not None:
            geometry = self.geometry(geom_raw, f"{path}.geometry", depth + 1)

        fid = raw.get("id")
        if not isinstance(fid, (str, int)) or isinstance(fid, bool):
            fid = None
        return Feature(geometry=geometry, properties=dict(props), id=fid)

    def feature_collection(self, raw: Mapping[str, Any], path: str, depth: int) -> FeatureCollection:
        items = raw.get("features")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise GsvMalformedGeometryError("features debe ser lista", f"{path}.features")

        # Además de Features se aceptan geometrías sueltas y colecciones anidadas.
        features: list[GeoNode] = []
        for idx, item in enumerate(items):
            sub = f"{path}.features[{idx}]"
            try:
                features.append(self.node(item, sub, depth + 1))
            except GsvMalformedGeometryError as e:
                self.skipped.append(SkippedNode(e.path, e.reason))
        return FeatureCollection(features=tuple(features))

    # ---------------------------- Geometrías ----------------------------

    def geometry(self, raw: Any, path: str, depth: int) -> Geometry:
        if depth > self.max_depth:
            raise GsvMalformedGeometryError(f"anidamiento supera max_depth={self.max_depth}", path)
        if not isinstance(raw, Mapping):
            raise GsvMalformedGeometryError(f"geometría debe ser objeto, no {type(raw).__name__}", path)

        kind = raw.get("type")
        if kind not in GEOMETRY_TYPES:
            raise GsvMalformedGeometryError(f"type no soportado: {kind!r}", path)

        if kind == "GeometryCollection":
            items = raw.get("geometries")
            if not isinstance(items, list):
                raise GsvMalformedGeometryError("geometries debe ser lista", f"{path}.geometries")
            geometries: list[Geometry] = []
            for idx, item in enumerate(items):
                try:
                    geometries.append(self.geometry(item, f"{path}.geometries[{idx}]", depth + 1))
                except GsvMalformedGeometryError as e:
                    self.skipped.append(SkippedNode(e.path, e.reason))
            return GeometryCollection(geometries=tuple(geometries))

        coords = raw.get("coordinates")
        cpath = f"{path}.coordinates"

        if kind == "Point":
            return Point(_position(coords, cpath))
        if kind == "LineString":
            return LineString(_line(coords, cpath))
        if kind == "Polygon":
            return Polygon(_rings(coords, cpath))

        # Multi*: cada componente es independiente (uno roto no invalida al resto).
        if not isinstance(coords, list):
            raise GsvMalformedGeometryError("coordinates debe ser lista", cpath)
        if kind == "MultiPoint":
            return MultiPoint(tuple(self._components(coords, cpath, lambda c, p: Point(_position(c, p)))))
        if kind == "MultiLineString":
            return MultiLineString(tuple(self._components(coords, cpath, lambda c, p: LineString(_line(c, p)))))
        return MultiPolygon(tuple(self._components(coords, cpath, lambda c, p: Polygon(_rings(c, p)))))

    def _components(self, coords: list, path: str, build):
        out = []
        for idx, component in enumerate(coords):
            sub = f"{path}[{idx}]"
            try:
                out.append(build(component, sub))
            except GsvMalformedGeometryError as e:
                self.skipped.append(SkippedNode(e.path, e.reason))
        return out


def _position(value: Any, path: str) -> Position:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise GsvMalformedGeometryError("posición debe ser [lon, lat]", path)
    out = []
    for v in value:
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            raise GsvMalformedGeometryError(f"posición con valor no numérico: {v!r}", path)
        out.append(float(v))
    return tuple(out)


def _line(value: Any, path: str) -> tuple[Position, ...]:
    if not isinstance(value, list):
        raise GsvMalformedGeometryError("se espera lista de posiciones", path)
    return tuple(_position(c, f"{path}[{i}]") for i, c in enumerate(value))


def _rings(value: Any, path: str) -> tuple[tuple[Position, ...], ...]:
    if not isinstance(value, list):
        raise GsvMalformedGeometryError("se espera lista de anillos", path)
    return tuple(_line(r, f"{path}[{i}]") for i, r in enumerate(value))
