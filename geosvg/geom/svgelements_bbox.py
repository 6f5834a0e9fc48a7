"""svgelements adapter for rendered-document bbox (report tooling).

Computes the geometry bbox of a rendered GeoSvg document with `svgelements`
and compares it with the viewport rectangle. Useful to spot layers whose
boundaries were configured for another region (everything culled) or
polygons drawn far outside the view (polygon culling disabled).

Must never raise on bad SVG: errors are returned inside the report.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from xml.etree.ElementTree import Element, tostring

from svgelements import SVG, Shape

if TYPE_CHECKING:
    from geosvg.svg.layers import GeoSvgRenderer


def compute_document_bbox(svg_text: str, *, ppi: float = 96.0) -> Dict[str, Any]:
    """Compute the bbox of every shape in `svg_text`.

    Returns a dict like:
    - bbox: (x0, y0, x1, y1) or None (no shapes)
    - shapes: number of shapes seen by svgelements
    - error: str (optional)
    """
    try:
        svg = SVG.parse(io.StringIO(svg_text), ppi=float(ppi), reify=True)
    except Exception as e:  # svgelements raises a wide range of parse errors
        return {"bbox": None, "shapes": 0, "error": f"{type(e).__name__}: {e}"}

    x0 = y0 = float("inf")
    x1 = y1 = float("-inf")
    count = 0
    for el in svg.elements():
        if not isinstance(el, Shape):
            continue
        b = el.bbox(with_stroke=False)
        if b is None:
            continue
        count += 1
        x0, y0 = min(x0, float(b[0])), min(y0, float(b[1]))
        x1, y1 = max(x1, float(b[2])), max(y1, float(b[3]))

    bbox: Optional[Tuple[float, float, float, float]] = (x0, y0, x1, y1) if count else None
    return {"bbox": bbox, "shapes": count}


def _viewport_svg_text(renderer: "GeoSvgRenderer") -> str:
    # width="100%" is resolved by svgelements against its own default size, which
    # adds a viewBox scale. Pin width/height to the viewBox so bbox stays in px.
    from geosvg.svg.surface import fmt_number

    src = renderer.svg
    attrs = dict(src.attrib, width=fmt_number(renderer.width_px), height=fmt_number(renderer.height_px))
    root = Element(src.tag, attrs)
    root.extend(list(src))
    return tostring(root, encoding="unicode")


def bbox_report(renderer: "GeoSvgRenderer", *, tol_px: float = 0.5) -> Dict[str, Any]:
    """JSON-serializable report: content bbox vs viewport.

    Status:
    - IN_VIEW: content bbox inside [0, width] x [0, height] (± tol_px)
    - OVERFLOW: some content extends outside the viewport
    - EMPTY: no drawable shapes
    - ERROR: svgelements could not parse the document
    """
    res = compute_document_bbox(_viewport_svg_text(renderer))
    out: Dict[str, Any] = {
        "viewport": [0.0, 0.0, float(renderer.width_px), float(renderer.height_px)],
        "bbox": list(res["bbox"]) if res.get("bbox") else None,
        "shapes": res.get("shapes", 0),
        "layers": renderer.handles(),
    }
    if res.get("error"):
        out["status"] = "ERROR"
        out["error"] = res["error"]
        return out
    if res["bbox"] is None:
        out["status"] = "EMPTY"
        return out

    bx0, by0, bx1, by1 = res["bbox"]
    w, h = float(renderer.width_px), float(renderer.height_px)
    inside = bx0 >= -tol_px and by0 >= -tol_px and bx1 <= w + tol_px and by1 <= h + tol_px
    out["status"] = "IN_VIEW" if inside else "OVERFLOW"
    return out
