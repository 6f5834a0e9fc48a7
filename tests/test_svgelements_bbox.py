"""Tests del reporte de bbox (svgelements) sobre el SVG renderizado."""

import pytest

pytest.importorskip("svgelements")

from geosvg.geom.svgelements_bbox import bbox_report, compute_document_bbox  # noqa: E402
from geosvg.svg.layers import GeoSvgRenderer  # noqa: E402


class TestBBoxReport:
    def test_line_in_view(self, renderer):
        renderer.add_layer("line", {"type": "LineString", "coordinates": [[0.2, 0.2], [0.8, 0.6]]})
        rep = bbox_report(renderer)
        assert rep["status"] == "IN_VIEW"
        assert rep["bbox"] == pytest.approx([20, 40, 80, 80], abs=1e-6)
        assert rep["shapes"] == 1
        assert rep["layers"] == ["line"]

    def test_polygon_overflow_without_culling(self, renderer):
        ring = [[0.5, 0.5], [3, 0.5], [3, 3], [0.5, 0.5]]
        renderer.add_layer("big", {"type": "Polygon", "coordinates": [ring]})
        assert bbox_report(renderer)["status"] == "OVERFLOW"

    def test_empty(self, renderer):
        renderer.add_layer("none", {"type": "Point", "coordinates": [5, 5]})
        assert bbox_report(renderer)["status"] == "EMPTY"

    def test_aspect_keeps_px_units(self, unit_bounds):
        r = GeoSvgRenderer(200, unit_bounds, aspect_adjustment=2)
        r.add_layer("diag", {"type": "LineString", "coordinates": [[0, 0], [1, 1]]})
        rep = bbox_report(r)
        assert rep["viewport"] == pytest.approx([0, 0, 200, 100])
        assert rep["bbox"] == pytest.approx([0, 0, 200, 100], abs=1e-6)
        assert rep["status"] == "IN_VIEW"

    def test_unparseable_svg(self):
        res = compute_document_bbox("<svg")
        assert res["bbox"] is None
        assert "error" in res
