"""Tests de RenderSettings: JSON de proyecto + env GSV_* + overrides."""

import json

import pytest

from geosvg.core.settings import (
    PROJECT_SETTINGS_FILENAME,
    RenderSettings,
    find_project_settings_path,
    parse_bounds_arg,
)
from geosvg.core.version import DEFAULT_MAX_DEPTH, DEFAULT_POLYGON_MODE, DEFAULT_VIEWPORT_WIDTH_PX
from geosvg.utils.errors import GsvConfigurationError


def write_settings(path, render):
    p = path / PROJECT_SETTINGS_FILENAME
    p.write_text(json.dumps({"render": render}), encoding="utf-8")
    return p


class TestLoad:
    """Precedencia: defaults < JSON < env."""

    def test_defaults(self, tmp_path):
        s = RenderSettings.load(tmp_path, env={})
        assert s.viewport_width_px == DEFAULT_VIEWPORT_WIDTH_PX
        assert s.polygon_mode == DEFAULT_POLYGON_MODE
        assert s.boundaries is None

    def test_project_file(self, tmp_path):
        write_settings(tmp_path, {
            "viewport_width_px": 640,
            "polygon_mode": "contours",
            "polygon_culling": True,
            "boundaries": {"north": 2, "south": 1, "west": 3, "east": 4},
        })
        s = RenderSettings.load(tmp_path, env={})
        assert s.viewport_width_px == 640
        assert s.polygon_mode == "contours"
        assert s.polygon_culling is True
        assert s.boundary_box().east == 4
        assert s.applied["viewport_width_px"] == PROJECT_SETTINGS_FILENAME

    def test_found_from_subdirectory(self, tmp_path):
        write_settings(tmp_path, {"point_radius": 3})
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        assert find_project_settings_path(sub) == (tmp_path / PROJECT_SETTINGS_FILENAME).resolve()
        assert RenderSettings.load(sub, env={}).point_radius == 3

    def test_env_overrides_file(self, tmp_path):
        write_settings(tmp_path, {"viewport_width_px": 640})
        s = RenderSettings.load(tmp_path, env={"GSV_WIDTH": "320", "GSV_BOUNDS": "1,0,0,1", "GSV_CULL_POLYGONS": "yes"})
        assert s.viewport_width_px == 320
        assert s.boundaries == {"north": 1, "south": 0, "west": 0, "east": 1}
        assert s.polygon_culling is True
        assert s.applied["viewport_width_px"] == "env"

    def test_invalid_values_ignored(self, tmp_path):
        write_settings(tmp_path, {"viewport_width_px": -5, "polygon_mode": "weird", "max_depth": "x"})
        s = RenderSettings.load(tmp_path, env={"GSV_BOUNDS": "nope"})
        assert s.viewport_width_px == DEFAULT_VIEWPORT_WIDTH_PX
        assert s.polygon_mode == DEFAULT_POLYGON_MODE
        assert s.boundaries is None
        assert s.applied == {}

    def test_max_depth_capped(self, tmp_path):
        s = RenderSettings.load(tmp_path, env={"GSV_MAX_DEPTH": "10000"})
        assert s.max_depth == DEFAULT_MAX_DEPTH
        s = RenderSettings.load(tmp_path, env={"GSV_MAX_DEPTH": "200"})
        assert s.max_depth == 200

    def test_broken_json_is_ignored(self, tmp_path):
        (tmp_path / PROJECT_SETTINGS_FILENAME).write_text("{not json", encoding="utf-8")
        s = RenderSettings.load(tmp_path, env={})
        assert s.applied == {}


class TestMergedAndBounds:
    """Overrides de CLI y boundaries."""

    def test_merged_none_keeps_value(self, tmp_path):
        base = RenderSettings.load(tmp_path, env={})
        s = base.merged({"viewport_width_px": None, "aspect_adjustment": 1.5})
        assert s.viewport_width_px == base.viewport_width_px
        assert s.aspect_adjustment == 1.5
        assert base.aspect_adjustment == 1.0

    def test_missing_boundaries_fail(self):
        with pytest.raises(GsvConfigurationError):
            RenderSettings().boundary_box()

    def test_incomplete_boundaries_fail(self):
        s = RenderSettings(boundaries={"north": 1, "south": 0})
        with pytest.raises(GsvConfigurationError):
            s.boundary_box()

    def test_parse_bounds_arg(self):
        assert parse_bounds_arg("44.92, 44.89, -93.29, -93.24") == {
            "north": 44.92,
            "south": 44.89,
            "west": -93.29,
            "east": -93.24,
        }
        with pytest.raises(GsvConfigurationError):
            parse_bounds_arg("1,2,3")
        with pytest.raises(GsvConfigurationError):
            parse_bounds_arg("a,b,c,d")
