"""Run configuration for tree placement and rendering.

Values are read once per run.  ``TreeConfig.from_env()`` picks them up from
the environment (``.env`` is loaded by :mod:`treebuilder.constants`):

    TREEBUILDER_USE_BILLBOARDS=1
    TREEBUILDER_TREES_PER_SQUARE_METER=0.005
    TREEBUILDER_TREE_ROW_SPACING=6
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_DENSITY_DECLARATIVE,
    DEFAULT_DENSITY_IMMEDIATE,
    DEFAULT_MIN_SPACING_FRACTION,
    DEFAULT_TREE_ROW_SPACING,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_float(name: str, default):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return default


@dataclass(frozen=True)
class TreeConfig:
    use_billboards: bool = False
    trees_per_square_meter: Optional[float] = None
    tree_row_spacing: float = DEFAULT_TREE_ROW_SPACING
    min_spacing_fraction: float = DEFAULT_MIN_SPACING_FRACTION

    def density_for(self, declarative: bool) -> float:
        """Trees per square metre for a target kind.

        An explicit ``trees_per_square_meter`` wins; otherwise scene files
        get the denser default and mesh targets a sparser one.
        """
        if self.trees_per_square_meter is not None:
            return self.trees_per_square_meter
        if declarative:
            return DEFAULT_DENSITY_DECLARATIVE
        return DEFAULT_DENSITY_IMMEDIATE

    @classmethod
    def from_env(cls) -> "TreeConfig":
        use_billboards = (os.environ.get("TREEBUILDER_USE_BILLBOARDS", "")
                          .strip().lower() in _TRUE_VALUES)
        return cls(
            use_billboards=use_billboards,
            trees_per_square_meter=_env_float(
                "TREEBUILDER_TREES_PER_SQUARE_METER", None),
            tree_row_spacing=_env_float(
                "TREEBUILDER_TREE_ROW_SPACING", DEFAULT_TREE_ROW_SPACING),
        )
