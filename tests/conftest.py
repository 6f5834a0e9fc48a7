"""Fixtures compartidos: renderer unitario (0..1 grados -> 100 px) y documentos GeoJSON."""

import pytest

from geosvg.geom.projection import Projector
from geosvg.svg.layers import GeoSvgRenderer

UNIT_BOUNDS = {"north": 1.0, "south": 0.0, "west": 0.0, "east": 1.0}


@pytest.fixture
def unit_bounds():
    return dict(UNIT_BOUNDS)


@pytest.fixture
def projector():
    return Projector(100, UNIT_BOUNDS)


@pytest.fixture
def renderer():
    return GeoSvgRenderer(100, UNIT_BOUNDS)


@pytest.fixture
def feature_collection():
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [0.5, 0.5]},
                "properties": {"name": "Plaza Mayor", "kind": "square"},
            },
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
                "properties": {"name": "Ruta 2"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[0.1, 0.1], [0.9, 0.1], [0.9, 0.9], [0.1, 0.1]]],
                },
                "properties": {},
            },
        ],
    }
