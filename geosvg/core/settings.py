# File: geosvg/core/settings.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Configuración de render: defaults + geosvg_settings.json (repo-local) + env GSV_*.
# Notes: No depende de Qt. Valores inválidos se ignoran con warning; boundaries inválidos fallan al construir el renderer.
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from geosvg.core.version import (
    DEFAULT_ASPECT_ADJUSTMENT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_POINT_RADIUS,
    DEFAULT_POLYGON_MODE,
    DEFAULT_VIEWPORT_WIDTH_PX,
    MAX_DEPTH_LIMIT,
    POLYGON_MODES,
)
from geosvg.geom.projection import BoundaryBox
from geosvg.utils.errors import GsvConfigurationError

log = logging.getLogger(__name__)


# ------------------------------
# Project settings (repo-local)
# ------------------------------
# Defaults reproducibles por proyecto sin tocar el código.
# Archivo esperado: geosvg_settings.json en la raíz del repo/proyecto (o en un padre del CWD).
PROJECT_SETTINGS_FILENAME = "geosvg_settings.json"

ENV_PREFIX = "GSV_"


def find_project_settings_path(start: Path | None = None) -> Path | None:
    """Busca geosvg_settings.json subiendo desde start (o CWD)."""
    start = (start or Path.cwd()).resolve()
    for p in (start, *start.parents):
        candidate = p / PROJECT_SETTINGS_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_project_settings(start: Path | None = None, *, logger: logging.Logger | None = None) -> Dict[str, Any]:
    """Carga el JSON de project settings. Devuelve {} si no existe o es inválido."""
    _log = logger or log
    p = find_project_settings_path(start)
    if not p:
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _log.warning("No se pudo leer %s: %s", p, e)
        return {}
    if not isinstance(data, dict):
        _log.warning("%s: la raíz debe ser un objeto JSON", p)
        return {}
    return data


def _deep_get(d: Mapping[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return default
        cur = cur[part]
    return cur


@dataclass
class RenderSettings:
    """Parámetros del renderer (lo que no es GeoJSON)."""

    viewport_width_px: float = DEFAULT_VIEWPORT_WIDTH_PX
    boundaries: Optional[Dict[str, float]] = None
    aspect_adjustment: float = DEFAULT_ASPECT_ADJUSTMENT
    point_radius: float = DEFAULT_POINT_RADIUS
    polygon_mode: str = DEFAULT_POLYGON_MODE
    polygon_culling: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    # Qué fuente aportó cada valor (debug/logging).
    applied: Dict[str, str] = field(default_factory=dict)

    def boundary_box(self) -> BoundaryBox:
        if self.boundaries is None:
            raise GsvConfigurationError(
                "Faltan boundaries: definir render.boundaries, GSV_BOUNDS o usar --fit"
            )
        return BoundaryBox.from_mapping(self.boundaries)

    def renderer_kwargs(self) -> Dict[str, Any]:
        return {
            "aspect_adjustment": self.aspect_adjustment,
            "point_radius": self.point_radius,
            "polygon_mode": self.polygon_mode,
            "polygon_culling": self.polygon_culling,
            "max_depth": self.max_depth,
        }

    def merged(self, overrides: Mapping[str, Any], *, source: str = "cli") -> "RenderSettings":
        """Copia con overrides (None = no pisar). Valida igual que el JSON."""
        out = replace(self, applied=dict(self.applied))
        _apply_values(out, overrides, source)
        return out

    # [GSV-KEEP] Orden de precedencia: defaults < JSON de proyecto < env.
    @classmethod
    def load(
        cls,
        start: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> "RenderSettings":
        _log = logger or log
        out = cls()

        data = load_project_settings(start, logger=_log)
        section = _deep_get(data, "render", {})
        if isinstance(section, Mapping):
            _apply_values(out, section, PROJECT_SETTINGS_FILENAME, logger=_log)

        _apply_values(out, _env_values(os.environ if env is None else env, _log), "env", logger=_log)

        if out.applied:
            _log.info("Render settings aplicados: %s", out.applied)
        return out


def _env_values(env: Mapping[str, str], _log: logging.Logger) -> Dict[str, Any]:
    vals: Dict[str, Any] = {}
    simple = {
        "WIDTH": "viewport_width_px",
        "ASPECT": "aspect_adjustment",
        "POINT_RADIUS": "point_radius",
        "POLYGON_MODE": "polygon_mode",
        "MAX_DEPTH": "max_depth",
    }
    for suffix, key in simple.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw:
            vals[key] = raw.strip()

    cull = env.get(ENV_PREFIX + "CULL_POLYGONS")
    if cull:
        vals["polygon_culling"] = cull.strip().lower() in ("1", "true", "yes", "on")

    bounds = env.get(ENV_PREFIX + "BOUNDS")
    if bounds:
        try:
            vals["boundaries"] = parse_bounds_arg(bounds)
        except GsvConfigurationError as e:
            _log.warning("%sBOUNDS ignorado: %s", ENV_PREFIX, e)
    return vals


def parse_bounds_arg(text: str) -> Dict[str, float]:
    """'N,S,W,E' -> {north, south, west, east}."""
    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) != 4:
        raise GsvConfigurationError(f"bounds inválido (se espera N,S,W,E): {text!r}")
    try:
        n, s, w, e = (float(p) for p in parts)
    except ValueError as ex:
        raise GsvConfigurationError(f"bounds inválido (no numérico): {text!r}") from ex
    return {"north": n, "south": s, "west": w, "east": e}


def _apply_values(
    out: RenderSettings,
    values: Mapping[str, Any],
    source: str,
    *,
    logger: logging.Logger | None = None,
) -> None:
    _log = logger or log

    def _warn(key: str, v: Any) -> None:
        _log.warning("%s: valor inválido para %s: %r (se ignora)", source, key, v)

    for key in ("viewport_width_px", "aspect_adjustment", "point_radius"):
        v = values.get(key)
        if v is None:
            continue
        f = _coerce_float(v)
        if f is None or f <= 0:
            _warn(key, v)
            continue
        setattr(out, key, f)
        out.applied[key] = source

    v = values.get("max_depth")
    if v is not None:
        n = _coerce_int(v)
        if n is None or not (1 <= n <= MAX_DEPTH_LIMIT):
            _warn("max_depth", v)
        else:
            out.max_depth = n
            out.applied["max_depth"] = source

    v = values.get("polygon_mode")
    if v is not None:
        mode = str(v).strip().lower()
        if mode in POLYGON_MODES:
            out.polygon_mode = mode
            out.applied["polygon_mode"] = source
        else:
            _warn("polygon_mode", v)

    v = values.get("polygon_culling")
    if isinstance(v, bool):
        out.polygon_culling = v
        out.applied["polygon_culling"] = source
    elif v is not None:
        _warn("polygon_culling", v)

    # boundaries: se guarda tal cual; la validación fuerte es al construir (fail fast).
    v = values.get("boundaries")
    if isinstance(v, Mapping):
        out.boundaries = {k: v[k] for k in ("north", "south", "west", "east") if k in v}
        out.applied["boundaries"] = source
    elif v is not None:
        _warn("boundaries", v)


def _coerce_float(v: Any) -> float | None:
    if isinstance(v, bool):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _coerce_int(v: Any) -> int | None:
    if isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None
