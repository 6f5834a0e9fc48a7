# File: geosvg/geom/projection.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Proyección lineal grados -> px y chequeo de visibilidad.
# Notes:
# - No es una proyección cartográfica real (no Mercator): escala lineal fija.
# - El viewport es inmutable por instancia; si cambia el ancho, se crea otro Projector.
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from geosvg.core.version import DEFAULT_MAX_DEPTH
from geosvg.utils.errors import GsvConfigurationError

Position = Sequence[float]
PixelPoint = tuple[float, float]

_BOUND_KEYS = ("north", "south", "west", "east")

# Extensión mínima (grados) para --fit sobre datos sin extensión.
FIT_MIN_SPAN_DEG = 0.01


@dataclass(frozen=True)
class BoundaryBox:
    """Rectángulo geográfico (grados) que se mapea al viewport completo."""

    north: float
    south: float
    west: float
    east: float

    def __post_init__(self) -> None:
        for key in _BOUND_KEYS:
            v = getattr(self, key)
            if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
                raise GsvConfigurationError(f"boundaries.{key} inválido: {v!r}")
        if self.north <= self.south:
            raise GsvConfigurationError(
                f"boundaries inválidos: north ({self.north}) debe ser > south ({self.south})"
            )
        if self.east <= self.west:
            raise GsvConfigurationError(
                f"boundaries inválidos: east ({self.east}) debe ser > west ({self.west})"
            )

    @classmethod
    def from_mapping(cls, obj: Any) -> "BoundaryBox":
        """Construye desde {north, south, west, east}. Falla si falta alguna clave."""
        if isinstance(obj, BoundaryBox):
            return obj
        if not isinstance(obj, Mapping):
            raise GsvConfigurationError(f"boundaries inválido: se espera objeto, no {type(obj).__name__}")
        missing = [k for k in _BOUND_KEYS if obj.get(k) is None]
        if missing:
            raise GsvConfigurationError(f"boundaries incompleto: faltan {', '.join(missing)}")
        return cls(**{k: _as_float(obj[k], k) for k in _BOUND_KEYS})

    def to_dict(self) -> dict[str, float]:
        return {k: float(getattr(self, k)) for k in _BOUND_KEYS}


class Projector:
    """Convierte posiciones [lon, lat] a píxeles dentro del viewport.

    Escalas (se calculan una sola vez):
    - px_per_degree_lon = (east - west) / width_px   (grados por píxel, a pesar del nombre histórico)
    - px_per_degree_lat = px_per_degree_lon * aspect_adjustment
    - height_px = (north - south) / px_per_degree_lat
    """

    def __init__(
        self,
        viewport_width_px: float,
        boundaries: BoundaryBox | Mapping[str, Any],
        aspect_adjustment: float = 1.0,
    ) -> None:
        width = _as_float(viewport_width_px, "viewport_width_px")
        if not math.isfinite(width) or width <= 0:
            raise GsvConfigurationError(f"viewport_width_px debe ser > 0: {viewport_width_px!r}")
        aspect = _as_float(aspect_adjustment, "aspect_adjustment")
        if not math.isfinite(aspect) or aspect <= 0:
            raise GsvConfigurationError(f"aspect_adjustment debe ser > 0: {aspect_adjustment!r}")

        self.boundaries = BoundaryBox.from_mapping(boundaries)
        self.width_px = width
        self.aspect_adjustment = aspect
        self.px_per_degree_lon = (self.boundaries.east - self.boundaries.west) / width
        self.px_per_degree_lat = self.px_per_degree_lon * aspect
        self.height_px = (self.boundaries.north - self.boundaries.south) / self.px_per_degree_lat

    def project(self, coord: Position) -> PixelPoint:
        # Solo se usan lon/lat; la altitud (3er elemento) se ignora.
        b = self.boundaries
        x = (coord[0] - b.west) / self.px_per_degree_lon
        y = self.height_px - (coord[1] - b.south) / self.px_per_degree_lat
        return (x, y)

    def project_many(self, coords: Iterable[Position]) -> list[PixelPoint]:
        return [self.project(c) for c in coords]

    def in_bounds(self, point: PixelPoint) -> bool:
        x, y = point
        return 0 <= x <= self.width_px and 0 <= y <= self.height_px

    def any_in_bounds(self, points: Iterable[PixelPoint]) -> bool:
        """True si al menos un punto cae dentro del rectángulo visible (bordes incluidos)."""
        return any(self.in_bounds(p) for p in points)

    def __repr__(self) -> str:
        return (
            f"Projector(width_px={self.width_px:g}, height_px={self.height_px:g}, "
            f"boundaries={self.boundaries.to_dict()}, aspect_adjustment={self.aspect_adjustment:g})"
        )


def bounds_from_geojson(data: Any, *, margin: float = 0.0) -> BoundaryBox:
    """Envolvente (north/south/west/east) de todas las posiciones de un documento GeoJSON.

    `margin` es una fracción del tamaño de la envolvente (0.05 = 5% por lado).
    Un eje con extensión nula (un solo punto, línea horizontal) se abre centrado:
    toma la extensión del otro eje, o FIT_MIN_SPAN_DEG si ambos son nulos.
    Documentos sin posiciones no tienen bounds.
    """
    lons: list[float] = []
    lats: list[float] = []
    for pos in _iter_positions(data):
        lons.append(float(pos[0]))
        lats.append(float(pos[1]))
    if not lons:
        raise GsvConfigurationError("No se pueden calcular bounds: el GeoJSON no tiene coordenadas")

    west, east = min(lons), max(lons)
    south, north = min(lats), max(lats)
    span = max(east - west, north - south, FIT_MIN_SPAN_DEG)
    if east == west:
        west, east = west - span / 2, east + span / 2
    if north == south:
        south, north = south - span / 2, north + span / 2

    dx = (east - west) * float(margin)
    dy = (north - south) * float(margin)
    return BoundaryBox(north=north + dy, south=south - dy, west=west - dx, east=east + dx)


def _iter_positions(node: Any, depth: int = 0):
    # Tolerante: ignora nodos que no entiende (el compilador es quien reporta).
    if depth > DEFAULT_MAX_DEPTH or not isinstance(node, Mapping):
        return
    kind = node.get("type")
    if kind == "FeatureCollection":
        for f in _as_list(node.get("features")):
            yield from _iter_positions(f, depth + 1)
    elif kind == "Feature":
        yield from _iter_positions(node.get("geometry"), depth + 1)
    elif kind == "GeometryCollection":
        for g in _as_list(node.get("geometries")):
            yield from _iter_positions(g, depth + 1)
    else:
        yield from _walk_coords(node.get("coordinates"), depth + 1)


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _walk_coords(value: Any, depth: int):
    if depth > DEFAULT_MAX_DEPTH or not isinstance(value, (list, tuple)) or not value:
        return
    if _is_position(value):
        yield value
        return
    for item in value:
        yield from _walk_coords(item, depth + 1)


def _is_position(value: Any) -> bool:
    return (
        len(value) >= 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v) for v in value[:2])
    )


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise GsvConfigurationError(f"Campo {field} inválido (float): {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise GsvConfigurationError(f"Campo {field} inválido (float): {value!r}") from e
