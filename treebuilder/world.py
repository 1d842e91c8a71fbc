"""World objects: the representations attached to map elements.

A world object knows its ground state, how much space it needs above and
below, and which ground positions it occupies.  Tree placement reads the
latter from every ground-level object overlapping a forest.
"""

import math
import logging

from .constants import (
    DEFAULT_LINE_WIDTH,
    DEFAULT_OBSTACLE_RADIUS,
    OBSTACLE_KEYS,
    OBSTACLE_NODE_KEYS,
    OBSTACLE_TAGS,
)
from .geometry import equally_distribute_points_along
from .models import ClearanceZone, GroundState, MapArea, MapNode, MapWaySegment

logger = logging.getLogger(__name__)


class WorldObject:
    """Base class for representations of map elements."""

    def get_primary_element(self):
        raise NotImplementedError

    def get_ground_state(self) -> GroundState:
        return GroundState.ON

    def get_clearing_above(self, pos) -> float:
        return 0.0

    def get_clearing_below(self, pos) -> float:
        return 0.0

    def get_clearance_zones(self):
        """Circles on the ground that other objects must keep out of."""
        return []

    def get_footprint(self):
        """Shapely polygon covered by this object, or None."""
        return None


def ground_state_from_tags(tags) -> GroundState:
    if tags.get('bridge', 'no') != 'no':
        return GroundState.ABOVE
    if tags.get('tunnel', 'no') != 'no':
        return GroundState.BELOW
    try:
        layer = int(tags.get('layer', 0))
    except ValueError:
        layer = 0
    if layer > 0:
        return GroundState.ABOVE
    if layer < 0:
        return GroundState.BELOW
    return GroundState.ON


def _parse_width(tags, default):
    raw = tags.get('width')
    if raw is None:
        return default
    try:
        width = float(str(raw).strip().lower().rstrip('m').strip())
    except ValueError:
        return default
    return width if width > 0 else default


class Obstacle(WorldObject):
    """Generic representation of a non-vegetation element.

    Nodes block a small circle, lines a corridor of their width (sampled as
    overlapping circles), areas their footprint.
    """

    def __init__(self, element):
        self.element = element
        self.ground_state = ground_state_from_tags(element.tags)

    def get_primary_element(self):
        return self.element

    def get_ground_state(self):
        return self.ground_state

    def get_clearance_zones(self):
        element = self.element
        if isinstance(element, MapNode):
            return [ClearanceZone(*element.pos, DEFAULT_OBSTACLE_RADIUS)]

        if isinstance(element, MapWaySegment):
            radius = _parse_width(element.tags, DEFAULT_LINE_WIDTH) / 2.0
            count = int(math.ceil(element.length / radius)) + 1
            points = equally_distribute_points_along(
                count, True, element.start, element.end)
            return [ClearanceZone(x, z, radius) for x, z in points]

        return []

    def get_footprint(self):
        if isinstance(self.element, MapArea):
            return self.element.polygon
        return None

    def __repr__(self):
        return f"Obstacle({self.element!r}, {self.ground_state.value})"


def is_obstacle(element) -> bool:
    """Whether *element* physically occupies the ground."""
    tags = element.tags
    if any(key in tags for key in OBSTACLE_KEYS):
        return True
    if isinstance(element, MapNode) and any(key in tags for key in OBSTACLE_NODE_KEYS):
        return True
    return any(tags.get(key) in values for key, values in OBSTACLE_TAGS.items())


def attach_obstacles(map_data):
    """Give every unrepresented physical element a generic Obstacle.

    Run after the feature modules so trees, rows and forests keep their
    own representations.  Land use, parks, boundaries and untagged
    elements stay without a representation and never block trees.
    """
    attached = 0
    for element in map_data.elements():
        if not element.representations and is_obstacle(element):
            element.add_representation(Obstacle(element))
            attached += 1
    logger.info(f"Attached {attached} obstacle representations")
    return attached
