"""Geometry helpers.

This package is intentionally small and dependency-light.

`projection` is pure Python (no deps); `svgelements_bbox` is report tooling
on top of `svgelements` and is only imported by the CLI `--report` path.
"""

from __future__ import annotations
