# File: geosvg/svg/layers.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Registro de capas (handle -> <g> + datos fuente) sobre la superficie SVG.
# Notes:
# - API encadenable: add/remove/update/sort devuelven el renderer.
# - El orden Z es explícito (sort_layers); no se sincroniza solo con las capas vivas.
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Literal, Mapping, Optional, Union

from geosvg.core.version import (
    DEFAULT_ASPECT_ADJUSTMENT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_POINT_RADIUS,
    DEFAULT_POLYGON_MODE,
)
from geosvg.geom.projection import BoundaryBox, Projector
from geosvg.svg.compiler import CompileReport, GeometryCompiler, LayerRenderer
from geosvg.svg.surface import SvgSurface
from geosvg.utils.errors import GsvUnknownLayerError

log = logging.getLogger(__name__)

LayerHandler = Union[LayerRenderer, Callable[[Any, ET.Element, "GeoSvgRenderer"], Any]]
LayerStatus = Literal["added", "replaced", "updated", "removed", "sorted", "unknown"]


@dataclass
class Layer:
    handle: str
    source_data: Any
    root: ET.Element
    report: Optional[CompileReport] = None


@dataclass(frozen=True)
class LayerResult:
    """Resultado explícito de la última operación sobre capas."""

    op: str
    handle: Optional[str]
    status: LayerStatus
    details: tuple[str, ...] = field(default_factory=tuple)


class GeoSvgRenderer:
    """Renderer GeoJSON -> SVG organizado en capas.

    Ejemplo:
        r = GeoSvgRenderer(800, {"north": 1, "south": 0, "west": 0, "east": 1})
        r.add_layer("rios", rios_geojson).add_layer("ciudades", ciudades).sort_layers(["rios", "ciudades"])
    """

    def __init__(
        self,
        viewport_width_px: float,
        boundaries: BoundaryBox | Mapping[str, Any],
        *,
        aspect_adjustment: float = DEFAULT_ASPECT_ADJUSTMENT,
        point_radius: float = DEFAULT_POINT_RADIUS,
        polygon_mode: str = DEFAULT_POLYGON_MODE,
        polygon_culling: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        renderer: Optional[LayerRenderer] = None,
        surface: Optional[SvgSurface] = None,
    ) -> None:
        self.projector = Projector(viewport_width_px, boundaries, aspect_adjustment)
        self.surface = surface or SvgSurface(self.projector.width_px, self.projector.height_px)
        self.renderer: LayerRenderer = renderer or GeometryCompiler(
            self.projector,
            self.surface,
            point_radius=point_radius,
            polygon_mode=polygon_mode,
            polygon_culling=polygon_culling,
            max_depth=max_depth,
        )
        self.layers: dict[str, Layer] = {}
        self.layer_order: list[str] = []
        self.last_result: Optional[LayerResult] = None

    # ---------------------------- Accesos ----------------------------

    @property
    def svg(self) -> ET.Element:
        return self.surface.root

    @property
    def boundaries(self) -> BoundaryBox:
        return self.projector.boundaries

    @property
    def width_px(self) -> float:
        return self.projector.width_px

    @property
    def height_px(self) -> float:
        return self.projector.height_px

    def has_layer(self, handle: str) -> bool:
        return handle in self.layers

    def get_layer(self, handle: str) -> Optional[Layer]:
        return self.layers.get(handle)

    def handles(self) -> list[str]:
        """Handles vivos en el orden actual de la superficie (fondo -> frente)."""
        by_root = {id(layer.root): h for h, layer in self.layers.items()}
        return [by_root[id(n)] for n in self.surface.children() if id(n) in by_root]

    def layer_report(self, handle: str) -> Optional[CompileReport]:
        layer = self.layers.get(handle)
        return layer.report if layer else None

    # ---------------------------- Operaciones ----------------------------

    def add_layer(self, handle: str, data: Any, handler: Optional[LayerHandler] = None) -> "GeoSvgRenderer":
        """Crea el <g class=handle> de la capa y lo llena con `data`.

        Si el handle ya existía se pisa: el grupo anterior se desengancha.
        El grupo se llena fuera del árbol y se engancha al final.
        """
        root = self.surface.create("group")
        self.surface.add_class(root, handle)
        try:
            report = self._render(data, root, handler)
        except Exception:
            # Si el handler falla, la capa previa (si había) queda como estaba.
            self.surface.clear(root)
            raise

        previous = self.layers.get(handle)
        if previous is not None:
            self.surface.remove(previous.root)
        self.surface.append(self.surface.root, root)
        layer = Layer(handle=handle, source_data=data, root=root, report=report)
        self.layers[handle] = layer

        status: LayerStatus = "replaced" if previous is not None else "added"
        self._record("add", handle, status, layer.report)
        return self

    def remove_layer(self, handle: str, *, strict: bool = False) -> "GeoSvgRenderer":
        """Quita la capa. Handle inexistente: no-op con status 'unknown' (o error si strict)."""
        layer = self.layers.pop(handle, None)
        if layer is None:
            self._record("remove", handle, "unknown")
            if strict:
                raise GsvUnknownLayerError(handle)
            return self
        self.surface.remove(layer.root)
        self._record("remove", handle, "removed")
        return self

    def update_layer(self, handle: str, data: Any, handler: Optional[LayerHandler] = None) -> "GeoSvgRenderer":
        """Reconstruye la capa fuera del árbol y reemplaza su contenido de una vez."""
        layer = self.layers.get(handle)
        if layer is None:
            return self.add_layer(handle, data, handler)

        fragment = self.surface.fragment()
        try:
            report = self._render(data, fragment, handler)
        except Exception:
            # El contenido anterior queda intacto.
            self.surface.clear(fragment)
            raise
        self.surface.clear(layer.root)
        self.surface.move_children(fragment, layer.root)
        layer.source_data = data
        layer.report = report
        self._record("update", handle, "updated", report)
        return self

    def sort_layers(self, order: Optional[Iterable[str]] = None) -> "GeoSvgRenderer":
        """Re-apila las capas según `order` (o el último orden guardado).

        Handles sin capa viva se ignoran; capas fuera de la lista no se mueven.
        """
        if order is not None:
            if isinstance(order, str):
                order = [order]
            self.layer_order = list(order)

        missing: list[str] = []
        for handle in self.layer_order:
            layer = self.layers.get(handle)
            if layer is None:
                missing.append(handle)
                continue
            self.surface.append(self.surface.root, layer.root)
        self.last_result = LayerResult("sort", None, "sorted", tuple(missing))
        log.debug("sort_layers: orden=%s ignorados=%s", self.layer_order, missing)
        return self

    # ---------------------------- Internos ----------------------------

    def _render(self, data: Any, parent: ET.Element, handler: Optional[LayerHandler]) -> Optional[CompileReport]:
        target = handler or self.renderer
        if hasattr(target, "render"):
            out = target.render(data, parent, self)
        elif callable(target):
            out = target(data, parent, self)
        else:
            raise TypeError(f"handler inválido: {target!r}")
        return out if isinstance(out, CompileReport) else None

    def _record(self, op: str, handle: str, status: LayerStatus, report: Optional[CompileReport] = None) -> None:
        details: tuple[str, ...] = ()
        if report is not None:
            details = tuple(s.path for s in report.skipped)
        self.last_result = LayerResult(op, handle, status, details)
        if status == "unknown":
            log.info("%s_layer: handle inexistente %r (no-op)", op, handle)
        else:
            log.debug("%s_layer %r -> %s (formas=%s, descartados=%d)",
                      op, handle, status, report.shapes if report else "-", len(details))
