"""Tree classification and height estimation from OSM tags."""

import logging
import math

from .constants import (
    BROAD_LEAVED_VALUES,
    CONIFEROUS_VALUES,
    DEFAULT_TREE_HEIGHT,
    FOREST_HEIGHT_VARIANCE,
    FRUIT_SPECIES_MARKER,
)
from .models import MapArea

logger = logging.getLogger(__name__)


def _x_is_even(pos) -> bool:
    """"Random" but repeatable decision based on the x coordinate."""
    return int(pos[0]) % 2 == 0


def is_coniferous(tags, pos) -> bool:
    """Decide leaf type from ``wood`` (or ``type``); mixed/unknown by position."""
    value = tags.get('wood')
    if value is None:
        value = tags.get('type')

    if value in BROAD_LEAVED_VALUES:
        return False
    if value in CONIFEROUS_VALUES:
        return True
    # mixed or undefined
    return _x_is_even(pos)


def is_fruit_tree(tags) -> bool:
    if tags.get('landuse') == 'orchard':
        return True
    species = tags.get('species')
    return species is not None and FRUIT_SPECIES_MARKER in species.lower()


def parse_height(tags, default: float = DEFAULT_TREE_HEIGHT) -> float:
    """Parse the ``height`` tag in metres, falling back to *default*.

    Handles ``"12"``, ``"12 m"``, ``"12m"``, ``"40 ft"`` and ``"40'"``.
    """
    raw = tags.get('height')
    if raw is None:
        return default

    raw_str = str(raw).strip().lower().replace(',', '.')
    try:
        if raw_str.endswith('ft') or raw_str.endswith("'"):
            h = float(raw_str.rstrip("'").replace('ft', '').strip()) * 0.3048
        elif raw_str.endswith('m'):
            h = float(raw_str[:-1].strip())
        else:
            h = float(raw_str)
    except ValueError:
        logger.debug(f"Unparsable height {raw!r}, using {default}")
        return default

    if math.isnan(h) or math.isinf(h) or h <= 0:
        logger.debug(f"Invalid height {raw!r}, using {default}")
        return default
    return h


def tree_height(element, rng) -> float:
    """Tree height for *element*; forest and orchard trees vary randomly.

    *rng* is a ``random.Random`` owned by the caller.
    """
    factor = 1.0
    if isinstance(element, MapArea):
        factor += FOREST_HEIGHT_VARIANCE * (2.0 * rng.random() - 1.0)
    return factor * parse_height(element.tags, DEFAULT_TREE_HEIGHT)
