"""Map data model: elements, map boundary, overlaps, and tree instances.

Coordinates are ground-plane metres.  ``x`` grows east and ``z`` grows
north; ``y`` is elevation.  Positions are plain ``(x, z)`` tuples.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from shapely.geometry import LineString, Point, Polygon, box
from shapely.strtree import STRtree

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


def _flat(x, z):
    return 0.0


class GroundState(Enum):
    """Where an object sits relative to the terrain."""
    ON = 'on'
    ABOVE = 'above'
    BELOW = 'below'


@dataclass
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def to_polygon(self) -> Polygon:
        """Convert bounding box to shapely polygon."""
        return box(self.west, self.south, self.east, self.north)

    def contains(self, x: float, z: float) -> bool:
        return self.west <= x <= self.east and self.south <= z <= self.north

    @classmethod
    def from_bounds(cls, bounds) -> "BoundingBox":
        """Build from a shapely ``(minx, miny, maxx, maxy)`` tuple."""
        minx, miny, maxx, maxy = bounds
        return cls(north=maxy, south=miny, east=maxx, west=minx)


@dataclass(frozen=True)
class ClearanceZone:
    """Circle around an occupied position that trees must keep out of."""
    x: float
    z: float
    radius: float


class MapElement:
    """Base for nodes, way segments and areas read from the map.

    The tree code only reads elements; representations (world objects) are
    attached by modules such as :class:`treebuilder.module.TreeModule`.
    """

    def __init__(self, id: int, tags: Optional[Dict[str, str]] = None):
        self.id = id
        self.tags = dict(tags or {})
        self.representations = []
        self.elevation_fn: Callable[[float, float], float] = _flat

    def add_representation(self, representation):
        self.representations.append(representation)

    def get_with_ele(self, pos: Position) -> Tuple[float, float, float]:
        """Lift a ground position onto the terrain: ``(x, y, z)``."""
        x, z = pos
        return (x, float(self.elevation_fn(x, z)), z)

    @property
    def geometry(self):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(id={self.id}, tags={self.tags})"


class MapNode(MapElement):
    def __init__(self, id, pos: Position, tags=None):
        super().__init__(id, tags)
        self.pos = (float(pos[0]), float(pos[1]))

    @property
    def geometry(self):
        return Point(self.pos)


class MapWaySegment(MapElement):
    def __init__(self, id, start: Position, end: Position, tags=None):
        super().__init__(id, tags)
        self.start = (float(start[0]), float(start[1]))
        self.end = (float(end[0]), float(end[1]))

    @property
    def geometry(self):
        return LineString([self.start, self.end])

    @property
    def length(self) -> float:
        dx = self.end[0] - self.start[0]
        dz = self.end[1] - self.start[1]
        return (dx * dx + dz * dz) ** 0.5


class MapArea(MapElement):
    def __init__(self, id, polygon: Polygon, tags=None):
        super().__init__(id, tags)
        self.polygon = polygon

    @property
    def geometry(self):
        return self.polygon


class MapData:
    """All elements of one map plus the map boundary.

    Overlap queries use a shapely STRtree built on first use and rebuilt
    whenever elements have been added or removed since.
    """

    def __init__(self, nodes=(), way_segments=(), areas=(),
                 boundary: Optional[BoundingBox] = None,
                 elevation_fn: Optional[Callable[[float, float], float]] = None):
        self.nodes: List[MapNode] = list(nodes)
        self.way_segments: List[MapWaySegment] = list(way_segments)
        self.areas: List[MapArea] = list(areas)
        self._tree = None
        self._indexed: List[MapElement] = []

        if elevation_fn is not None:
            for element in self.elements():
                element.elevation_fn = elevation_fn

        if boundary is None:
            boundary = self._derive_boundary()
        self.boundary = boundary

    def elements(self) -> List[MapElement]:
        return [*self.nodes, *self.way_segments, *self.areas]

    def _derive_boundary(self) -> BoundingBox:
        geoms = [e.geometry for e in self.elements()]
        if not geoms:
            return BoundingBox(north=0.0, south=0.0, east=0.0, west=0.0)
        minx = min(g.bounds[0] for g in geoms)
        miny = min(g.bounds[1] for g in geoms)
        maxx = max(g.bounds[2] for g in geoms)
        maxy = max(g.bounds[3] for g in geoms)
        return BoundingBox.from_bounds((minx, miny, maxx, maxy))

    def get_overlaps(self, element: MapElement) -> List[MapElement]:
        """Other elements whose geometry intersects *element*'s geometry."""
        elements = self.elements()
        if self._tree is None or len(elements) != len(self._indexed):
            self._indexed = elements
            self._tree = STRtree([e.geometry for e in self._indexed])
            logger.debug(f"Built overlap index for {len(self._indexed)} elements")

        hits = self._tree.query(element.geometry, predicate='intersects')
        return [self._indexed[i] for i in sorted(hits)
                if self._indexed[i] is not element]


@dataclass(frozen=True)
class TreeInstance:
    """One placed tree, fully classified and sized for rendering."""
    pos: Position
    element: MapElement
    base: Tuple[float, float, float]
    coniferous: bool
    fruit: bool
    height: float
    rotation: float  # degrees about the vertical axis
