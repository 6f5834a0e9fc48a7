# File: geosvg/svg/surface.py
# Project: GeoSvg (GSV)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Superficie de dibujo SVG sobre xml.etree (árbol de nodos).
# Notes:
# - ElementTree no guarda el padre de cada nodo: la superficie mantiene un mapa hijo->padre.
# - Un nodo re-agregado se mueve (no se duplica), igual que en el DOM.
from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from typing import Iterable, Optional

from geosvg.core.version import SVG_NS

ET.register_namespace("", SVG_NS)

NODE_KINDS = {
    "group": "g",
    "point": "circle",
    "path": "path",
    "polygon": "polygon",
}

FRAGMENT_TAG = "fragment"


def svg_tag(local: str) -> str:
    return f"{{{SVG_NS}}}{local}"


def strip_ns(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


class SvgSurface:
    """Raíz <svg> + operaciones mínimas que necesita el núcleo.

    create/append/set_attr/add_class/remove/clear/fragment es toda la
    capacidad que se le pide al host; el rasterizado es cosa de otro módulo.
    """

    def __init__(self, width_px: float, height_px: float) -> None:
        self.width_px = float(width_px)
        self.height_px = float(height_px)
        self.root = ET.Element(
            svg_tag("svg"),
            {
                "version": "1.1",
                "width": "100%",
                "height": f"{math.ceil(self.height_px)}px",
                "viewBox": f"0 0 {fmt_number(self.width_px)} {fmt_number(self.height_px)}",
            },
        )
        self._parents: dict[int, ET.Element] = {}

    # ---------------------------- Nodos ----------------------------

    def create(self, kind: str) -> ET.Element:
        try:
            local = NODE_KINDS[kind]
        except KeyError:
            raise ValueError(f"Tipo de nodo desconocido: {kind!r}") from None
        return ET.Element(svg_tag(local))

    def fragment(self) -> ET.Element:
        """Contenedor fuera del árbol (equivalente a un DocumentFragment)."""
        return ET.Element(FRAGMENT_TAG)

    def append(self, parent: ET.Element, child: ET.Element) -> ET.Element:
        old = self.parent_of(child)
        if old is not None:
            old.remove(child)
        parent.append(child)
        self._parents[id(child)] = parent
        return child

    def parent_of(self, node: ET.Element) -> Optional[ET.Element]:
        """Padre registrado del nodo. Una entrada vieja (id reciclado) se descarta."""
        parent = self._parents.get(id(node))
        if parent is None:
            return None
        if not any(c is node for c in parent):
            self._parents.pop(id(node), None)
            return None
        return parent

    def remove(self, node: ET.Element) -> None:
        """Desengancha el nodo de su padre (no-op si ya estaba suelto)."""
        parent = self.parent_of(node)
        if parent is not None:
            parent.remove(node)
            self._parents.pop(id(node), None)
        self._forget(node)

    def clear(self, node: ET.Element) -> None:
        for child in list(node):
            node.remove(child)
            self._parents.pop(id(child), None)
            self._forget(child)

    def move_children(self, src: ET.Element, dst: ET.Element) -> None:
        for child in list(src):
            self.append(dst, child)

    def children(self, node: Optional[ET.Element] = None) -> list[ET.Element]:
        return list(self.root if node is None else node)

    # ---------------------------- Atributos ----------------------------

    def set_attr(self, node: ET.Element, key: str, value: object) -> None:
        if isinstance(value, float):
            value = fmt_number(value)
        node.set(key, str(value))

    def add_class(self, node: ET.Element, *tags: str) -> None:
        # Semántica classList: sin duplicados, respeta el orden de alta.
        current = node.get("class", "").split()
        for tag in tags:
            if tag and tag not in current:
                current.append(tag)
        if current:
            node.set("class", " ".join(current))

    def _forget(self, node: ET.Element) -> None:
        for desc in node.iter():
            if desc is not node:
                self._parents.pop(id(desc), None)


def class_list(node: ET.Element) -> list[str]:
    return node.get("class", "").split()


def fmt_number(value: float) -> str:
    """Número compacto para atributos SVG: hasta 3 decimales, sin ceros de cola."""
    s = f"{float(value):.3f}".rstrip("0").rstrip(".")
    if s in ("-0", ""):
        return "0"
    return s


def fmt_points(points: Iterable[tuple[float, float]]) -> list[str]:
    return [f"{fmt_number(x)},{fmt_number(y)}" for x, y in points]
