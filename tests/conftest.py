"""Shared fixtures: small metric maps built directly from model classes."""

import pytest
from shapely.geometry import box

from treebuilder.config import TreeConfig
from treebuilder.models import BoundingBox, MapArea, MapData, MapNode, MapWaySegment


class RecordingTarget:
    """Immediate target stand-in that records every primitive call."""

    def __init__(self):
        self.columns = []
        self.billboards = []

    def draw_column(self, material, base, height, radius_bottom, radius_top,
                    draw_bottom=True, draw_top=True):
        self.columns.append({
            'material': material, 'base': base, 'height': height,
            'radius_bottom': radius_bottom, 'radius_top': radius_top,
        })

    def draw_crosstree(self, material, base, width, height, mirrored=False):
        self.billboards.append({
            'material': material, 'base': base, 'width': width,
            'height': height, 'mirrored': mirrored,
        })


@pytest.fixture
def recording_target():
    return RecordingTarget()


@pytest.fixture
def config():
    return TreeConfig(trees_per_square_meter=0.02)


@pytest.fixture
def forest_map():
    """A 100 m square forest crossed by a road, a bridge and a tree row."""
    forest = MapArea(1, box(0, 0, 100, 100),
                     {'landuse': 'forest', 'wood': 'coniferous'})
    road = MapWaySegment(2, (-10, 50), (110, 50),
                         {'highway': 'residential', 'width': '10'})
    bridge = MapWaySegment(3, (50, -10), (50, 110),
                           {'highway': 'primary', 'bridge': 'yes', 'width': '10'})
    row = MapWaySegment(4, (0, 120), (40, 120), {'natural': 'tree_row'})
    tree = MapNode(5, (20.5, 20.5), {'natural': 'tree', 'height': '12'})
    return MapData(nodes=[tree], way_segments=[road, bridge, row],
                   areas=[forest],
                   boundary=BoundingBox(north=150, south=-20, east=150, west=-20))
