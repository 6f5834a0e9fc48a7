"""Tests del registro de capas: add/remove/update/sort + handlers."""

import xml.etree.ElementTree as ET

import pytest

from geosvg.core.version import MAX_DEPTH_LIMIT
from geosvg.svg.compiler import CompileReport
from geosvg.svg.layers import GeoSvgRenderer
from geosvg.svg.surface import class_list, strip_ns
from geosvg.utils.errors import GsvConfigurationError, GsvUnknownLayerError

POINT = {"type": "Point", "coordinates": [0.5, 0.5]}
LINE = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}


def layer_groups(renderer, handle):
    return [n for n in renderer.svg if handle in class_list(n)]


class TestConstruction:
    """El renderer falla rápido con configuración inválida."""

    def test_svg_root_attributes(self, renderer):
        assert strip_ns(renderer.svg.tag) == "svg"
        assert renderer.svg.get("width") == "100%"
        assert renderer.svg.get("height") == "100px"
        assert renderer.svg.get("viewBox") == "0 0 100 100"

    def test_height_rounded_up(self, unit_bounds):
        r = GeoSvgRenderer(100, unit_bounds, aspect_adjustment=3)
        assert r.height_px == pytest.approx(33.333, abs=1e-3)
        assert r.svg.get("height") == "34px"

    def test_missing_boundaries(self):
        with pytest.raises(GsvConfigurationError):
            GeoSvgRenderer(100, {})

    def test_bad_width(self, unit_bounds):
        with pytest.raises(GsvConfigurationError):
            GeoSvgRenderer(0, unit_bounds)


class TestAddLayer:
    """add_layer crea <g class=handle> y lo llena."""

    def test_add_and_chain(self, renderer):
        out = renderer.add_layer("a", POINT).add_layer("b", LINE)
        assert out is renderer
        assert renderer.handles() == ["a", "b"]
        assert renderer.has_layer("a")
        assert renderer.get_layer("a").source_data is POINT

    def test_group_content(self, renderer, feature_collection):
        renderer.add_layer("city", feature_collection)
        (g,) = layer_groups(renderer, "city")
        assert strip_ns(g.tag) == "g"
        assert [strip_ns(c.tag) for c in g] == ["circle", "path", "polygon"]
        assert renderer.layer_report("city").shapes == 3
        assert renderer.last_result.status == "added"

    def test_overwrite_handle(self, renderer):
        """Re-agregar un handle pisa datos y grupo (no quedan grupos huérfanos)."""
        renderer.add_layer("a", POINT).add_layer("a", LINE)
        groups = layer_groups(renderer, "a")
        assert len(groups) == 1
        assert [strip_ns(c.tag) for c in groups[0]] == ["path"]
        assert renderer.get_layer("a").source_data is LINE
        assert renderer.last_result.status == "replaced"

    def test_skips_recorded(self, renderer):
        doc = {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "geometry": POINT, "properties": {}},
                {"type": "Feature", "geometry": {"type": "Hexagon"}, "properties": {}},
            ],
        }
        renderer.add_layer("mixed", doc)
        assert renderer.layer_report("mixed").shapes == 1
        assert renderer.last_result.details == ("$.features[1].geometry",)


class TestHandlers:
    """Handlers custom (callable o LayerRenderer) reemplazan al compilador."""

    def test_callable_handler(self, renderer):
        calls = []

        def handler(data, parent, store):
            calls.append((data, store))
            node = store.surface.append(parent, store.surface.create("point"))
            store.surface.set_attr(node, "r", 4)

        renderer.add_layer("custom", {"anything": True}, handler)
        assert calls == [({"anything": True}, renderer)]
        (g,) = layer_groups(renderer, "custom")
        assert g[0].get("r") == "4"
        assert renderer.layer_report("custom") is None

    def test_layer_renderer_object(self, renderer):
        class Marker:
            def render(self, data, parent, store):
                for _ in range(data):
                    store.surface.append(parent, store.surface.create("group"))
                return CompileReport(shapes=data)

        renderer.add_layer("m", 3, Marker())
        assert len(layer_groups(renderer, "m")[0]) == 3
        assert renderer.layer_report("m").shapes == 3

    def test_update_handler_builds_off_tree(self, renderer):
        seen = []

        def handler(data, parent, store):
            seen.append(parent in list(store.svg.iter()))
            store.surface.append(parent, store.surface.create("path"))

        renderer.add_layer("h", POINT)
        renderer.update_layer("h", None, handler)
        assert seen == [False]
        (g,) = layer_groups(renderer, "h")
        assert [strip_ns(c.tag) for c in g] == ["path"]


class TestRemoveLayer:
    """remove_layer desengancha el grupo y olvida los datos."""

    def test_remove(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", LINE)
        assert renderer.remove_layer("a") is renderer
        assert renderer.handles() == ["b"]
        assert not renderer.has_layer("a")
        assert layer_groups(renderer, "a") == []
        assert renderer.last_result.status == "removed"

    def test_remove_unknown_is_noop_with_status(self, renderer):
        renderer.add_layer("a", POINT)
        before = ET.tostring(renderer.svg)
        renderer.remove_layer("ghost")
        assert ET.tostring(renderer.svg) == before
        assert renderer.last_result.status == "unknown"
        assert renderer.last_result.handle == "ghost"

    def test_remove_unknown_strict(self, renderer):
        with pytest.raises(GsvUnknownLayerError):
            renderer.remove_layer("ghost", strict=True)

    def test_remove_then_add_is_identical(self, unit_bounds, feature_collection):
        r1 = GeoSvgRenderer(100, unit_bounds).add_layer("a", feature_collection)
        r2 = GeoSvgRenderer(100, unit_bounds).add_layer("a", feature_collection)
        r2.remove_layer("a").add_layer("a", feature_collection)
        assert ET.tostring(r1.svg) == ET.tostring(r2.svg)


class TestUpdateLayer:
    """update_layer reemplaza el contenido en su lugar."""

    def test_update_matches_fresh_add(self, unit_bounds, feature_collection):
        r1 = GeoSvgRenderer(100, unit_bounds).add_layer("a", POINT).update_layer("a", feature_collection)
        r2 = GeoSvgRenderer(100, unit_bounds).add_layer("a", feature_collection)
        groups = layer_groups(r1, "a")
        assert len(groups) == 1
        assert ET.tostring(groups[0]) == ET.tostring(layer_groups(r2, "a")[0])
        assert r1.get_layer("a").source_data is feature_collection
        assert r1.last_result.status == "updated"

    def test_update_keeps_position(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", POINT).add_layer("c", POINT)
        renderer.update_layer("a", LINE)
        assert renderer.handles() == ["a", "b", "c"]

    def test_update_unknown_adds(self, renderer):
        renderer.update_layer("new", LINE)
        assert renderer.handles() == ["new"]
        assert renderer.last_result.status == "added"

    def test_update_twice(self, renderer):
        renderer.add_layer("a", POINT).update_layer("a", LINE).update_layer("a", POINT)
        (g,) = layer_groups(renderer, "a")
        assert [strip_ns(c.tag) for c in g] == ["circle"]


class TestSortLayers:
    """sort_layers: orden Z explícito."""

    def test_sort_two(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", POINT)
        assert renderer.sort_layers(["b", "a"]) is renderer
        assert renderer.handles() == ["b", "a"]

    def test_unknown_handles_skipped(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", POINT)
        renderer.sort_layers(["ghost", "b", "a"])
        assert renderer.handles() == ["b", "a"]
        assert renderer.last_result.details == ("ghost",)

    def test_unlisted_layers_keep_position(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", POINT).add_layer("c", POINT)
        renderer.sort_layers(["a"])
        assert renderer.handles() == ["b", "c", "a"]

    def test_stored_order_reused(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", POINT).sort_layers(["b", "a"])
        renderer.add_layer("c", POINT).update_layer("b", LINE)
        renderer.sort_layers()
        assert renderer.layer_order == ["b", "a"]
        assert renderer.handles() == ["c", "b", "a"]

    def test_order_not_synced_automatically(self, renderer):
        renderer.add_layer("a", POINT).sort_layers(["a", "b"])
        renderer.add_layer("b", POINT).add_layer("x", POINT)
        assert renderer.handles() == ["a", "b", "x"]
        renderer.remove_layer("a").sort_layers()
        assert renderer.layer_order == ["a", "b"]
        assert renderer.handles() == ["x", "b"]


class TestFailingHandlers:
    """Un handler que lanza no deja nodos a medio construir ni entradas viejas en la superficie."""

    @staticmethod
    def exploding(data, parent, store):
        for _ in range(50):
            store.surface.append(parent, store.surface.create("point"))
        raise RuntimeError("boom")

    def test_update_failure_keeps_content_and_parent_map(self, renderer):
        renderer.add_layer("a", POINT)
        for _ in range(20):
            with pytest.raises(RuntimeError):
                renderer.update_layer("a", None, self.exploding)
        (g,) = layer_groups(renderer, "a")
        assert [strip_ns(c.tag) for c in g] == ["circle"]
        assert len(renderer.surface._parents) == 2

    def test_add_failure_keeps_previous_layer(self, renderer):
        renderer.add_layer("a", POINT)
        with pytest.raises(RuntimeError):
            renderer.add_layer("a", None, self.exploding)
        (g,) = layer_groups(renderer, "a")
        assert [strip_ns(c.tag) for c in g] == ["circle"]
        assert renderer.get_layer("a").source_data is POINT
        assert len(renderer.surface._parents) == 2

    def test_add_failure_on_new_handle(self, renderer):
        with pytest.raises(RuntimeError):
            renderer.add_layer("b", None, self.exploding)
        assert not renderer.has_layer("b")
        assert len(renderer.svg) == 0
        assert renderer.surface._parents == {}

    def test_layers_usable_after_failure(self, renderer):
        renderer.add_layer("a", POINT).add_layer("b", LINE)
        with pytest.raises(RuntimeError):
            renderer.update_layer("a", None, self.exploding)
        renderer.sort_layers(["b", "a"]).update_layer("a", LINE)
        assert renderer.handles() == ["b", "a"]
        (g,) = layer_groups(renderer, "a")
        assert [strip_ns(c.tag) for c in g] == ["path"]


class TestDeepNesting:
    """Anidamiento hostil: nunca escapa un RecursionError de add_layer."""

    def test_max_depth_over_limit_rejected(self, unit_bounds):
        with pytest.raises(GsvConfigurationError):
            GeoSvgRenderer(100, unit_bounds, max_depth=10_000)

    def test_deep_collections_rendered_up_to_limit(self, unit_bounds):
        nested = POINT
        for _ in range(1000):
            nested = {"type": "GeometryCollection", "geometries": [nested]}
        r = GeoSvgRenderer(100, unit_bounds, max_depth=MAX_DEPTH_LIMIT)
        r.add_layer("deep", nested)
        report = r.layer_report("deep")
        assert report.shapes == 0
        assert len(report.skipped) == 1
        assert r.last_result.status == "added"
