"""GeoJSON loading into MapData."""

import json

import pytest

from treebuilder.models import MapArea, MapNode, MapWaySegment
from treebuilder.osm_data import load_geojson, map_data_from_features, utm_epsg_for


def _feature(geometry, properties, id=None):
    feature = {'type': 'Feature', 'geometry': geometry, 'properties': properties}
    if id is not None:
        feature['id'] = id
    return feature


METRIC_FEATURES = [
    _feature({'type': 'Point', 'coordinates': [1000.0, 2000.0]},
             {'natural': 'tree', 'height': '9'}, id='node/11'),
    _feature({'type': 'LineString',
              'coordinates': [[0.0, 0.0], [300.0, 0.0], [300.0, 400.0]]},
             {'natural': 'tree_row'}, id='way/12'),
    _feature({'type': 'Polygon',
              'coordinates': [[[0, 0], [500, 0], [500, 500], [0, 500], [0, 0]]]},
             {'landuse': 'forest', '@id': 'ignored'}, id='way/13'),
    _feature(None, {'natural': 'tree'}),
]


class TestFeatures:

    def test_metric_features(self):
        map_data = map_data_from_features(METRIC_FEATURES, project=False)

        (node,) = map_data.nodes
        assert isinstance(node, MapNode)
        assert node.id == 11
        assert node.pos == (1000.0, 2000.0)
        assert node.tags == {'natural': 'tree', 'height': '9'}

        assert len(map_data.way_segments) == 2
        first, second = map_data.way_segments
        assert isinstance(first, MapWaySegment)
        assert (first.start, first.end) == ((0.0, 0.0), (300.0, 0.0))
        assert second.start == (300.0, 0.0)
        assert first.id != second.id
        assert first.tags == second.tags == {'natural': 'tree_row'}

        (area,) = map_data.areas
        assert isinstance(area, MapArea)
        assert area.id == 13
        assert area.polygon.area == pytest.approx(250000.0)
        assert '@id' not in area.tags

    def test_ids_unique(self):
        map_data = map_data_from_features(METRIC_FEATURES, project=False)
        ids = [e.id for e in map_data.elements()]
        assert len(ids) == len(set(ids))

    def test_boundary_covers_all_elements(self):
        map_data = map_data_from_features(METRIC_FEATURES, project=False)
        b = map_data.boundary
        assert (b.west, b.south, b.east, b.north) == (0.0, 0.0, 1000.0, 2000.0)

    def test_geographic_input_is_projected(self):
        # ~100 m square in Berlin
        lon, lat = 13.40, 52.52
        d_lat = 100 / 111320.0
        d_lon = d_lat / 0.6085
        ring = [[lon, lat], [lon + d_lon, lat], [lon + d_lon, lat + d_lat],
                [lon, lat + d_lat], [lon, lat]]
        features = [_feature({'type': 'Polygon', 'coordinates': [ring]},
                             {'natural': 'wood'}, id=5)]
        map_data = map_data_from_features(features)

        (area,) = map_data.areas
        assert area.polygon.area == pytest.approx(10000.0, rel=0.05)
        minx, miny, maxx, maxy = area.polygon.bounds
        assert abs(minx + maxx) < 1.0 and abs(miny + maxy) < 1.0

    def test_degenerate_area_skipped(self):
        features = [_feature({'type': 'Polygon',
                              'coordinates': [[[0, 0], [10, 0], [20, 0], [0, 0]]]},
                             {'landuse': 'forest'})]
        assert map_data_from_features(features, project=False).areas == []

    def test_ids_shared_across_osm_types_are_made_unique(self):
        square = [[0, 0], [100, 0], [100, 100], [0, 100], [0, 0]]
        far = [[500, 0], [600, 0], [600, 100], [500, 100], [500, 0]]
        features = [
            _feature({'type': 'Polygon', 'coordinates': [square]},
                     {'landuse': 'forest'}, id='way/123'),
            _feature({'type': 'Polygon', 'coordinates': [far]},
                     {'natural': 'wood'}, id='relation/123'),
            _feature({'type': 'Point', 'coordinates': [50, 50]},
                     {'natural': 'tree'}, id='node/123'),
        ]
        map_data = map_data_from_features(features, project=False)
        ids = [e.id for e in map_data.elements()]
        assert len(set(ids)) == 3
        assert map_data.areas[0].id == 123

    def test_empty(self):
        map_data = map_data_from_features([])
        assert map_data.elements() == []


class TestLoadGeojson:

    def test_feature_collection(self, tmp_path):
        path = tmp_path / 'trees.geojson'
        path.write_text(json.dumps({'type': 'FeatureCollection',
                                    'features': METRIC_FEATURES,
                                    'bbox': [-50, -50, 1500, 2500]}))
        map_data = load_geojson(path, project=False)
        assert len(map_data.elements()) == 4
        assert map_data.boundary.east == 1500

    def test_single_feature(self, tmp_path):
        path = tmp_path / 'tree.geojson'
        path.write_text(json.dumps(METRIC_FEATURES[0]))
        map_data = load_geojson(path, project=False)
        assert len(map_data.nodes) == 1


@pytest.mark.parametrize("lon, lat, epsg", [
    (13.4, 52.5, 32633), (-122.3, 47.6, 32610), (151.2, -33.8, 32756),
])
def test_utm_epsg(lon, lat, epsg):
    assert utm_epsg_for(lon, lat) == epsg
