"""Collision filtering against ground-level world objects."""

import numpy as np
import pytest
from shapely.geometry import Point, box

from treebuilder.collisions import avoided_objects, filter_world_object_collisions
from treebuilder.models import ClearanceZone, GroundState, MapArea, MapData, MapNode, MapWaySegment
from treebuilder.world import (
    Obstacle,
    WorldObject,
    attach_obstacles,
    ground_state_from_tags,
    is_obstacle,
)


class ZoneObject(WorldObject):
    def __init__(self, zones, footprint=None, ground_state=GroundState.ON):
        self.zones = zones
        self.footprint = footprint
        self.ground_state = ground_state

    def get_ground_state(self):
        return self.ground_state

    def get_clearance_zones(self):
        return self.zones

    def get_footprint(self):
        return self.footprint


class TestFilter:

    def test_removes_points_inside_radius(self):
        positions = [(0, 0), (1, 0), (3, 0), (10, 10)]
        avoided = [ZoneObject([ClearanceZone(0, 0, 2.0)])]
        assert filter_world_object_collisions(positions, avoided) == [(3, 0), (10, 10)]

    def test_point_exactly_on_radius_is_kept(self):
        avoided = [ZoneObject([ClearanceZone(0, 0, 2.0)])]
        assert filter_world_object_collisions([(2.0, 0.0)], avoided) == [(2.0, 0.0)]

    def test_order_preserved(self):
        rng = np.random.RandomState(4)
        positions = [tuple(p) for p in rng.uniform(0, 50, (200, 2))]
        avoided = [ZoneObject([ClearanceZone(25, 25, 10), ClearanceZone(5, 40, 4)])]
        result = filter_world_object_collisions(positions, avoided)
        indices = [positions.index(p) for p in result]
        assert indices == sorted(indices)

    def test_retained_points_clear_every_zone(self):
        rng = np.random.RandomState(8)
        positions = [tuple(p) for p in rng.uniform(0, 100, (500, 2))]
        zones = [ClearanceZone(*rng.uniform(0, 100, 2), r)
                 for r in rng.uniform(1, 12, 15)]
        avoided = [ZoneObject(zones[:7]), ZoneObject(zones[7:])]
        for x, z in filter_world_object_collisions(positions, avoided):
            for zone in zones:
                assert np.hypot(x - zone.x, z - zone.z) >= zone.radius

    def test_footprint_excludes_interior(self):
        positions = [(5, 5), (15, 5), (10, 10)]
        avoided = [ZoneObject([], footprint=box(0, 0, 10, 10))]
        assert filter_world_object_collisions(positions, avoided) == [(15, 5)]

    def test_no_avoided_objects_returns_copy(self):
        positions = [(1, 1), (2, 2)]
        result = filter_world_object_collisions(positions, [])
        assert result == positions
        assert result is not positions

    def test_empty_positions(self):
        avoided = [ZoneObject([ClearanceZone(0, 0, 1)])]
        assert filter_world_object_collisions([], avoided) == []


class TestGroundState:

    @pytest.mark.parametrize("tags, expected", [
        ({}, GroundState.ON),
        ({'bridge': 'yes'}, GroundState.ABOVE),
        ({'bridge': 'viaduct'}, GroundState.ABOVE),
        ({'bridge': 'no'}, GroundState.ON),
        ({'tunnel': 'yes'}, GroundState.BELOW),
        ({'layer': '2'}, GroundState.ABOVE),
        ({'layer': '-1'}, GroundState.BELOW),
        ({'layer': 'high'}, GroundState.ON),
    ])
    def test_from_tags(self, tags, expected):
        assert ground_state_from_tags(tags) is expected


class TestObstacle:

    def test_node_blocks_small_circle(self):
        obstacle = Obstacle(MapNode(1, (4, 5), {'amenity': 'bench'}))
        (zone,) = obstacle.get_clearance_zones()
        assert (zone.x, zone.z) == (4, 5)
        assert zone.radius > 0

    def test_line_corridor_uses_width(self):
        segment = MapWaySegment(2, (0, 0), (20, 0), {'highway': 'service', 'width': '6'})
        zones = Obstacle(segment).get_clearance_zones()
        assert all(z.radius == 3.0 for z in zones)
        xs = sorted(z.x for z in zones)
        assert xs[0] == 0 and xs[-1] == 20
        assert max(np.diff(xs)) <= 3.0 + 1e-9

    def test_area_blocks_footprint(self):
        polygon = box(0, 0, 5, 5)
        obstacle = Obstacle(MapArea(3, polygon, {'building': 'yes'}))
        assert obstacle.get_clearance_zones() == []
        assert obstacle.get_footprint() is polygon


class TestAvoidedObjects:

    def test_only_ground_level_overlapping_objects(self):
        forest = MapArea(1, box(0, 0, 50, 50), {'landuse': 'forest'})
        road = MapWaySegment(2, (-5, 25), (55, 25), {'highway': 'primary'})
        bridge = MapWaySegment(3, (25, -5), (25, 55), {'highway': 'primary', 'bridge': 'yes'})
        far_bench = MapNode(4, (200, 200), {'amenity': 'bench'})
        map_data = MapData(way_segments=[road, bridge], nodes=[far_bench], areas=[forest])
        attach_obstacles(map_data)

        avoided = avoided_objects(forest, map_data)
        assert [obj.get_primary_element() for obj in avoided] == [road]

    def test_building_inside_forest_clears_trees(self):
        building = MapArea(2, box(10, 10, 20, 20), {'building': 'yes'})
        forest = MapArea(1, box(0, 0, 50, 50), {'landuse': 'forest'})
        map_data = MapData(areas=[forest, building])
        attach_obstacles(map_data)
        avoided = avoided_objects(forest, map_data)
        positions = [(15, 15), (30, 30)]
        assert filter_world_object_collisions(positions, avoided) == [(30, 30)]
        assert not building.polygon.contains(Point(30, 30))

    def test_enclosing_footprint_does_not_block(self):
        forest = MapArea(1, box(0, 0, 50, 50), {'landuse': 'forest'})
        plaza = MapArea(2, box(-10, -10, 60, 60), {'highway': 'pedestrian', 'area': 'yes'})
        map_data = MapData(areas=[forest, plaza])
        attach_obstacles(map_data)
        assert plaza.representations
        assert avoided_objects(forest, map_data) == []

    def test_overlap_index_sees_added_elements(self):
        forest = MapArea(1, box(0, 0, 50, 50), {'landuse': 'forest'})
        map_data = MapData(areas=[forest])
        assert map_data.get_overlaps(forest) == []

        building = MapArea(2, box(10, 10, 20, 20), {'building': 'yes'})
        map_data.areas.append(building)
        assert map_data.get_overlaps(forest) == [building]


class TestObstacleSelection:

    @pytest.mark.parametrize("element, expected", [
        (MapArea(1, box(0, 0, 1, 1), {'building': 'yes'}), True),
        (MapArea(1, box(0, 0, 1, 1), {'natural': 'water'}), True),
        (MapArea(1, box(0, 0, 1, 1), {'landuse': 'residential'}), False),
        (MapArea(1, box(0, 0, 1, 1), {'leisure': 'park'}), False),
        (MapArea(1, box(0, 0, 1, 1), {'boundary': 'administrative'}), False),
        (MapArea(1, box(0, 0, 1, 1), {'amenity': 'school'}), False),
        (MapArea(1, box(0, 0, 1, 1), {}), False),
        (MapWaySegment(1, (0, 0), (1, 0), {'highway': 'path'}), True),
        (MapWaySegment(1, (0, 0), (1, 0), {'barrier': 'fence'}), True),
        (MapWaySegment(1, (0, 0), (1, 0), {'boundary': 'administrative'}), False),
        (MapNode(1, (0, 0), {'amenity': 'bench'}), True),
        (MapNode(1, (0, 0), {'man_made': 'mast'}), True),
        (MapNode(1, (0, 0), {'name': 'Somewhere'}), False),
    ])
    def test_physical_elements_only(self, element, expected):
        assert is_obstacle(element) is expected

    def test_landuse_and_untagged_stay_unrepresented(self):
        residential = MapArea(1, box(0, 0, 10, 10), {'landuse': 'residential'})
        outline = MapArea(2, box(0, 0, 5, 5), {})
        wall = MapWaySegment(3, (0, 0), (10, 0), {'barrier': 'wall'})
        map_data = MapData(way_segments=[wall], areas=[residential, outline])
        assert attach_obstacles(map_data) == 1
        assert residential.representations == outline.representations == []
        assert isinstance(wall.representations[0], Obstacle)
