# File: geosvg/utils/log.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Logging del CLI (stderr + archivo) y helpers.
# Notes:
# - La librería solo pide loggers; la configuración la hace el CLI.
# - stdout queda libre para salidas de datos (reporte JSON de --report).
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping

LOG_FILENAME = "geosvg.log"
LOG_LEVEL_ENV = "GSV_LOG_LEVEL"

# Handlers instalados por setup_logging (se reemplazan en cada llamada).
_HANDLERS: list[logging.Handler] = []


def resolve_level(level: int | str | None = None, env: Mapping[str, str] | None = None) -> int:
    """Nivel efectivo: el pedido por el caller, si no GSV_LOG_LEVEL, si no INFO."""
    env = os.environ if env is None else env
    for candidate in (level, env.get(LOG_LEVEL_ENV)):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
        if isinstance(candidate, str) and candidate.strip():
            named = logging.getLevelName(candidate.strip().upper())
            if isinstance(named, int):
                return named
    return logging.INFO


def setup_logging(
    log_dir: str | os.PathLike | None = "logs",
    level: int | str | None = None,
) -> Path | None:
    """Configura logging en stderr + archivo y devuelve la ruta del log (o None).

    Nota:
        - Re-llamarla reemplaza los handlers anteriores (varias corridas del CLI en un proceso).
        - No lanza excepción si no puede escribir el archivo; cae a consola.
        - `log_dir=None` desactiva el archivo.
    """
    reset_logging()
    lvl = resolve_level(level)

    logger = logging.getLogger()
    logger.setLevel(lvl)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(lvl)
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    _HANDLERS.append(ch)

    if log_dir is None:
        return None
    path = Path(log_dir) / LOG_FILENAME
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("No se pudo inicializar FileHandler: %s", e)
        return None
    fh.setLevel(lvl)
    fh.setFormatter(fmt)
    logger.addHandler(fh)
    _HANDLERS.append(fh)
    return path


def reset_logging() -> None:
    """Quita y cierra los handlers que instaló setup_logging."""
    root = logging.getLogger()
    while _HANDLERS:
        h = _HANDLERS.pop()
        root.removeHandler(h)
        h.close()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
