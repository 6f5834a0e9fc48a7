# File: geosvg/app.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Entry-point CLI: GeoJSON (archivos) -> SVG (+ PNG / reporte bbox opcionales).
# Notes: Cada archivo de entrada es una capa; el handle es el nombre del archivo sin extensión.
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from geosvg.core.serialization import load_geojson
from geosvg.core.settings import RenderSettings, parse_bounds_arg
from geosvg.core.version import APP_NAME, APP_VERSION, POLYGON_MODES
from geosvg.geom.projection import bounds_from_geojson
from geosvg.svg.exporter import export_svg
from geosvg.svg.layers import GeoSvgRenderer
from geosvg.utils.errors import GsvError
from geosvg.utils.log import get_logger, setup_logging

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="geosvg",
        description="Renderiza GeoJSON a SVG en capas (proyección lineal lon/lat -> px).",
    )
    ap.add_argument("inputs", nargs="+", help="Archivos .geojson/.json (uno por capa)")
    ap.add_argument("-o", "--out", default="map.svg", help="SVG de salida (default: map.svg)")
    ap.add_argument("--width", type=float, default=None, help="Ancho del viewport en px")
    g = ap.add_mutually_exclusive_group()
    g.add_argument("--bounds", default=None, help="Boundaries N,S,W,E en grados")
    g.add_argument("--fit", action="store_true", help="Calcular boundaries desde los datos")
    ap.add_argument("--fit-margin", type=float, default=0.02, help="Margen relativo para --fit")
    ap.add_argument("--aspect", type=float, default=None, help="Ajuste de aspecto (lat/lon)")
    ap.add_argument("--point-radius", type=float, default=None)
    ap.add_argument("--polygon-mode", choices=POLYGON_MODES, default=None)
    ap.add_argument("--cull-polygons", action="store_true", default=None,
                    help="Descartar polígonos sin puntos visibles")
    ap.add_argument("--order", default=None, help="Orden Z: handles separados por coma (fondo -> frente)")
    ap.add_argument("--png", default=None, help="Exportar además un PNG (requiere PySide6/QtSvg)")
    ap.add_argument("--report", action="store_true", help="Imprimir reporte de bbox (svgelements) en JSON")
    ap.add_argument("--log-dir", default="logs")
    ap.add_argument("-v", "--verbose", action="store_true")
    ap.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return ap


def run(args: argparse.Namespace) -> int:
    settings = RenderSettings.load()
    settings = settings.merged(
        {
            "viewport_width_px": args.width,
            "aspect_adjustment": args.aspect,
            "point_radius": args.point_radius,
            "polygon_mode": args.polygon_mode,
            "polygon_culling": args.cull_polygons,
            "boundaries": parse_bounds_arg(args.bounds) if args.bounds else None,
        }
    )

    layers: list[tuple[str, Any]] = []
    for raw_path in args.inputs:
        p = Path(raw_path)
        layers.append((p.stem, load_geojson(p)))

    if args.fit:
        # Envolvente conjunta de todos los inputs (un documento virtual que los envuelve).
        merged = {"type": "FeatureCollection", "features": [{"type": "Feature", "geometry": doc} for _, doc in layers]}
        settings.boundaries = bounds_from_geojson(merged, margin=args.fit_margin).to_dict()
        settings.applied["boundaries"] = "fit"

    renderer = GeoSvgRenderer(settings.viewport_width_px, settings.boundary_box(), **settings.renderer_kwargs())
    log.info("Viewport %.0fx%.0f px, boundaries=%s", renderer.width_px, renderer.height_px,
             renderer.boundaries.to_dict())

    for handle, doc in layers:
        renderer.add_layer(handle, doc)
        rep = renderer.layer_report(handle)
        if rep is not None:
            log.info("Capa %r: %d formas, %d descartados", handle, rep.shapes, len(rep.skipped))

    if args.order:
        renderer.sort_layers([h.strip() for h in args.order.split(",") if h.strip()])

    out = export_svg(renderer, args.out)
    log.info("SVG exportado: %s", out)

    if args.png:
        from geosvg.svg.raster import export_png

        png = export_png(renderer, args.png)
        log.info("PNG exportado: %s", png)

    if args.report:
        from geosvg.geom.svgelements_bbox import bbox_report

        print(json.dumps(bbox_report(renderer), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_dir, level=logging.DEBUG if args.verbose else None)
    try:
        return run(args)
    except GsvError as e:
        log.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
