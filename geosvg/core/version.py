"""GeoSvg - version constants.

Keep this module tiny and dependency-free. It is imported by many places
(projection, compiler, settings, CLI) and must not have side effects.
"""

APP_NAME = "GeoSvg"
APP_SHORT = "GSV"

# App semantic version (must match pyproject.toml).
APP_VERSION = "0.1.0"

SVG_NS = "http://www.w3.org/2000/svg"

# Defaults
# NOTE: keep these stable; changing impacts rendered output of existing layers.
DEFAULT_VIEWPORT_WIDTH_PX = 800
DEFAULT_ASPECT_ADJUSTMENT = 1.0
DEFAULT_POINT_RADIUS = 1.0
# Límite de anidamiento GeoJSON (colecciones de colecciones).
DEFAULT_MAX_DEPTH = 64
# Tope duro: el parser y el compilador son recursivos (lejos del límite del intérprete).
MAX_DEPTH_LIMIT = 256

# "concat": un solo <polygon> con los anillos concatenados (compat).
# "contours": <path> con un subpath por anillo y fill-rule evenodd.
POLYGON_MODES = ("concat", "contours")
DEFAULT_POLYGON_MODE = "concat"
