# File: geosvg/core/serialization.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Lectura de GeoJSON desde disco y escritura atómica de salidas (SVG/PNG).
# Notes: El fetch por red no es parte del núcleo: el caller trae el GeoJSON ya parseado o un archivo.
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from geosvg.utils.errors import GsvIOError, GsvValidationError


def load_geojson(path: str | Path) -> Any:
    """Lee un .geojson/.json y devuelve el documento decodificado (dict)."""
    p = Path(path)
    try:
        # utf-8-sig: acepta el BOM que dejan algunos editores de Windows.
        raw = p.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise GsvValidationError(f"GeoJSON inválido (no es UTF-8): {p} (byte {e.start})") from e
    except OSError as e:
        raise GsvIOError(f"No se pudo leer GeoJSON: {p}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GsvValidationError(
            "GeoJSON inválido (JSON malformado): {} (línea {}, columna {})".format(p, e.lineno, e.colno)
        ) from e

    if not isinstance(data, dict):
        raise GsvValidationError(f"Estructura GeoJSON inválida: raíz no es objeto JSON: {p}")
    return data


def write_atomic(path: str | Path, payload: str | bytes) -> Path:
    """Escribe de forma atómica (tmp + replace) para evitar archivos corruptos."""
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        if isinstance(payload, bytes):
            tmp.write_bytes(payload)
        else:
            tmp.write_text(payload, encoding="utf-8")
        tmp.replace(p)
        return p
    except OSError as e:
        raise GsvIOError(f"No se pudo escribir: {p}") from e


def force_suffix(path: str | Path, suffix: str) -> Path:
    p = Path(path)
    if p.suffix.lower() != suffix.lower():
        p = p.with_suffix(suffix)
    return p
