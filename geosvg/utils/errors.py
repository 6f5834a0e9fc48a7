# File: geosvg/utils/errors.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Errores tipados del proyecto.
# Notes: Los errores de geometría son recuperables (se saltea el nodo, no el documento).
from __future__ import annotations


class GsvError(Exception):
    """Error base del proyecto."""


class GsvConfigurationError(GsvError):
    """Configuración inválida (boundaries, ancho de viewport, aspecto)."""


class GsvValidationError(GsvError):
    """Error de validación (input/archivo/estructura)."""


class GsvMalformedGeometryError(GsvValidationError):
    """GeoJSON mal formado en un nodo puntual.

    `path` indica dónde está el nodo dentro del documento (ej: `$.features[2].geometry`).
    """

    def __init__(self, reason: str, path: str = "$") -> None:
        super().__init__(f"{path}: {reason}")
        self.reason = reason
        self.path = path


class GsvUnknownLayerError(GsvError):
    """Operación sobre un handle de capa que no existe."""

    def __init__(self, handle: str) -> None:
        super().__init__(f"Capa inexistente: {handle!r}")
        self.handle = handle


class GsvIOError(GsvError):
    """Error de E/S (lectura/escritura)."""
