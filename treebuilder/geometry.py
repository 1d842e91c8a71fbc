"""Point distribution along tree rows and inside wooded areas."""

import math
import logging
import random

from shapely.geometry import Point
from shapely.prepared import prep

from .constants import DEFAULT_TREE_ROW_SPACING, MAX_ATTEMPTS_PER_POINT

logger = logging.getLogger(__name__)


# ── Lines ───────────────────────────────────────────────────────────────

def equally_distribute_points_along(count, include_ends, start, end):
    """Return *count* equally spaced points from *start* to *end*.

    With *include_ends* the first and last point sit on the endpoints
    (spacing ``length / (count - 1)``; a single point goes to the middle).
    Without, the points keep one spacing ``length / (count + 1)`` away from
    both ends.  Points are ordered from start to end.
    """
    if count <= 0:
        return []

    sx, sz = start
    ex, ez = end

    if include_ends:
        if count == 1:
            fractions = [0.5]
        else:
            fractions = [i / (count - 1) for i in range(count)]
    else:
        fractions = [(i + 1) / (count + 1) for i in range(count)]

    return [(sx + f * (ex - sx), sz + f * (ez - sz)) for f in fractions]


def tree_row_count(length, spacing=DEFAULT_TREE_ROW_SPACING):
    """Number of trees on a row of *length* metres at average *spacing*."""
    if length <= 0:
        return 0
    if spacing <= 0:
        return 1
    return max(1, int(round(length / spacing)))


# ── Areas ───────────────────────────────────────────────────────────────

def minimum_spacing(density, min_spacing_fraction):
    """Minimum distance between trees: a fraction of the mean spacing."""
    if density <= 0:
        return 0.0
    return min_spacing_fraction / math.sqrt(density)


def _cell(x, z, cell_size):
    return (int(math.floor(x / cell_size)), int(math.floor(z / cell_size)))


def _too_close(grid, cell_size, x, z, min_distance):
    cx, cz = _cell(x, z, cell_size)
    min_sq = min_distance * min_distance
    for dx in (-1, 0, 1):
        for dz in (-1, 0, 1):
            for px, pz in grid.get((cx + dx, cz + dz), ()):
                if (px - x) ** 2 + (pz - z) ** 2 < min_sq:
                    return True
    return False


def distribute_points_on(seed, polygon, boundary, density,
                         min_spacing_fraction):
    """Scatter points inside *polygon* clipped to the map *boundary*.

    Parameters
    ----------
    seed : int
        RNG seed (the owning feature's id) so repeated runs agree.
    polygon : shapely Polygon/MultiPolygon
    boundary : BoundingBox or None
    density : float
        Trees per square metre.
    min_spacing_fraction : float
        Minimum distance between two points as a fraction of the mean
        spacing ``1 / sqrt(density)``.

    Returns a list of ``(x, z)`` tuples.  When the attempt budget runs out
    before ``density * area`` points are placed, a warning is logged and
    the shorter list is returned.
    """
    if density <= 0 or polygon is None or polygon.is_empty:
        return []

    if not polygon.is_valid:
        polygon = polygon.buffer(0)

    region = polygon
    if boundary is not None:
        region = polygon.intersection(boundary.to_polygon())
    if region.is_empty or region.area <= 0:
        return []

    target = int(region.area * density)
    if target == 0:
        return []

    min_distance = minimum_spacing(density, min_spacing_fraction)
    rng = random.Random(seed)
    prepared = prep(region)
    minx, minz, maxx, maxz = region.bounds

    grid = {}
    points = []
    attempts = 0
    max_attempts = target * MAX_ATTEMPTS_PER_POINT
    while len(points) < target and attempts < max_attempts:
        attempts += 1
        x = rng.uniform(minx, maxx)
        z = rng.uniform(minz, maxz)
        if not prepared.contains(Point(x, z)):
            continue
        if min_distance > 0 and _too_close(grid, min_distance, x, z,
                                           min_distance):
            continue
        points.append((x, z))
        if min_distance > 0:
            grid.setdefault(_cell(x, z, min_distance), []).append((x, z))

    if len(points) < target:
        logger.warning(f"Placed only {len(points)} of {target} points "
                       f"after {attempts} attempts (seed {seed}, "
                       f"min spacing {min_distance:.1f}m)")
    else:
        logger.debug(f"Placed {len(points)} points in {attempts} attempts "
                     f"(seed {seed})")
    return points
