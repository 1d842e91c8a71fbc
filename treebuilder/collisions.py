"""Keep trees off the ground occupied by other world objects."""

import logging

import numpy as np
from shapely.geometry import Point
from shapely.ops import unary_union
from shapely.prepared import prep

from .models import GroundState

logger = logging.getLogger(__name__)


def avoided_objects(area, map_data):
    """Ground-level representations of elements overlapping *area*.

    Bridges, tunnels and other elevated or buried objects do not block
    tree placement, and neither does an object whose footprint encloses
    the whole area.
    """
    avoided = []
    for other in map_data.get_overlaps(area):
        for rep in other.representations:
            if rep.get_ground_state() != GroundState.ON:
                continue
            footprint = rep.get_footprint()
            if footprint is not None and footprint.covers(area.polygon):
                logger.debug(f"Ignoring {other!r}: encloses area {area.id}")
                continue
            avoided.append(rep)
    return avoided


def filter_world_object_collisions(positions, avoided):
    """Drop positions inside any avoided object's clearance.

    A position collides when it is closer than ``radius`` to a clearance
    zone centre, or lies inside an object's footprint polygon.  Returns a
    new list in the original order.
    """
    positions = list(positions)
    if not positions or not avoided:
        return positions

    zones = [z for obj in avoided for z in obj.get_clearance_zones()]
    footprints = [fp for fp in (obj.get_footprint() for obj in avoided)
                  if fp is not None and not fp.is_empty]

    keep = np.ones(len(positions), dtype=bool)

    if zones:
        pts = np.array(positions, dtype=np.float64)
        centers = np.array([(z.x, z.z) for z in zones], dtype=np.float64)
        radii = np.array([z.radius for z in zones], dtype=np.float64)
        d2 = ((pts[:, None, :] - centers[None, :, :]) ** 2).sum(axis=2)
        keep &= (d2 >= radii[None, :] ** 2).all(axis=1)

    if footprints:
        prepped = prep(unary_union(footprints))
        for i, (x, z) in enumerate(positions):
            if keep[i] and prepped.intersects(Point(x, z)):
                keep[i] = False

    result = [p for p, k in zip(positions, keep) if k]
    removed = len(positions) - len(result)
    if removed:
        logger.debug(f"Collision filter: removed {removed} of "
                     f"{len(positions)} positions")
    return result
