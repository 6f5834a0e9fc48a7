# File: geosvg/svg/raster.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: wip
# Date: 2026-10-18
# Purpose: Rasterizado del SVG renderizado a PNG (QtSvg) para previews.
# Notes:
# - Sin ventana: si no hay QGuiApplication se crea una con plataforma "offscreen".
# - Qt6/PySide6: el alto se deriva del viewBox (mismo aspecto que el SVG).
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QByteArray, QRectF
from PySide6.QtGui import QColor, QGuiApplication, QImage, QPainter

from geosvg.core.serialization import force_suffix, write_atomic
from geosvg.utils.errors import GsvIOError, GsvValidationError

try:
    from PySide6.QtSvg import QSvgRenderer
except ImportError:  # pragma: no cover
    QSvgRenderer = None  # type: ignore

if TYPE_CHECKING:
    from geosvg.svg.layers import GeoSvgRenderer

log = logging.getLogger(__name__)

_APP: Optional[QGuiApplication] = None

# Render máximo por lado (evita QImage gigantes por un --width mal tipeado).
MAX_RENDER_PX = 8192


def _ensure_app() -> None:
    global _APP
    if QGuiApplication.instance() is not None:
        return
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    _APP = QGuiApplication([])


def render_svg_to_image(svg_text: str, width_px: int, *, background: Optional[QColor] = None) -> QImage:
    """Rasteriza `svg_text` a un QImage de `width_px` de ancho (alto según aspecto)."""
    if QSvgRenderer is None:
        raise GsvIOError("QtSvg no disponible (PySide6 sin módulo QtSvg)")
    _ensure_app()

    r = QSvgRenderer(QByteArray(svg_text.encode("utf-8")))
    if not r.isValid():
        raise GsvValidationError("SVG inválido para QtSvg")

    vb = r.viewBoxF()
    if vb.isNull() or vb.width() <= 0 or vb.height() <= 0:
        ds = r.defaultSize()
        svg_w = float(ds.width() if ds.width() > 0 else width_px)
        svg_h = float(ds.height() if ds.height() > 0 else width_px)
    else:
        svg_w = float(vb.width())
        svg_h = float(vb.height())

    w = max(1, min(int(width_px), MAX_RENDER_PX))
    h = max(1, min(int(round(w * svg_h / svg_w)), MAX_RENDER_PX))

    img = QImage(w, h, QImage.Format_ARGB32_Premultiplied)
    img.fill(background if background is not None else QColor(0, 0, 0, 0))

    p = QPainter(img)
    try:
        p.setRenderHint(QPainter.Antialiasing, True)
        r.render(p, QRectF(0, 0, w, h))
    finally:
        p.end()
    return img


def export_png(renderer: "GeoSvgRenderer", out_path: str | Path, *, width_px: Optional[int] = None) -> Path:
    """Exporta el renderer a PNG (ancho = viewport salvo override)."""
    from geosvg.svg.exporter import to_svg_string

    pth = force_suffix(out_path, ".png")
    width = int(width_px or round(renderer.width_px))
    img = render_svg_to_image(to_svg_string(renderer), width, background=QColor(255, 255, 255, 255))

    buf = QByteArray()
    from PySide6.QtCore import QBuffer, QIODevice

    qb = QBuffer(buf)
    qb.open(QIODevice.WriteOnly)
    ok = img.save(qb, "PNG")
    qb.close()
    if not ok:
        raise GsvIOError(f"No se pudo codificar PNG: {pth}")
    log.debug("PNG %dx%d -> %s", img.width(), img.height(), pth)
    return write_atomic(pth, bytes(buf.data()))
