"""Load OSM features from GeoJSON into a :class:`MapData`.

Geographic input (WGS84 lon/lat) is projected to the UTM zone at the data
centre and shifted so the centre sits at the origin; input that is already
metric is used as-is.  Lines become one way segment per pair of
consecutive vertices, sharing the line's tags.
"""

import json
import logging
import pathlib

import numpy as np
from pyproj import Transformer
from shapely.geometry import shape
from shapely.ops import transform as shapely_transform
from tqdm import tqdm

from .models import BoundingBox, MapArea, MapData, MapNode, MapWaySegment

logger = logging.getLogger(__name__)


def utm_epsg_for(lon: float, lat: float) -> int:
    """EPSG code of the UTM zone containing (lon, lat)."""
    utm_zone = int((lon + 180) / 6) + 1
    return 32600 + utm_zone if lat >= 0 else 32700 + utm_zone


def _is_geographic(bounds) -> bool:
    minx, miny, maxx, maxy = bounds
    return -180 <= minx <= maxx <= 180 and -90 <= miny <= maxy <= 90


def _make_projector(bounds):
    """WGS84 → local metres centred on the data; returns a callable."""
    minx, miny, maxx, maxy = bounds
    center_lon = (minx + maxx) / 2
    center_lat = (miny + maxy) / 2
    epsg = utm_epsg_for(center_lon, center_lat)
    transformer = Transformer.from_crs("EPSG:4326", f"EPSG:{epsg}",
                                       always_xy=True)
    origin_x, origin_z = transformer.transform(center_lon, center_lat)
    logger.info(f"Using UTM EPSG:{epsg} for coordinate transform")

    def project(x, y, z=None):
        ux, uy = transformer.transform(np.asarray(x), np.asarray(y))
        return ux - origin_x, uy - origin_z

    return project


def _tags_of(feature):
    props = feature.get('properties') or {}
    return {str(k): str(v) for k, v in props.items()
            if v is not None and not str(k).startswith('@')}


def _id_of(feature, index):
    props = feature.get('properties') or {}
    raw = feature.get('id', props.get('@id', props.get('osm_id')))
    if raw is not None:
        digits = ''.join(ch for ch in str(raw) if ch.isdigit())
        if digits:
            return int(digits)
    return index + 1


def map_data_from_features(features, project=None):
    """Build MapData from GeoJSON feature dicts.

    *project* is ``None`` for auto-detection, ``True`` to force the UTM
    projection, ``False`` to use coordinates as given.
    """
    parsed = []
    for index, feature in enumerate(features):
        geom_json = feature.get('geometry')
        if not geom_json:
            continue
        try:
            geom = shape(geom_json)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping feature {index}: {e}")
            continue
        if geom.is_empty:
            continue
        parsed.append((_id_of(feature, index), _tags_of(feature), geom))

    if not parsed:
        return MapData()

    minx = min(g.bounds[0] for _, _, g in parsed)
    miny = min(g.bounds[1] for _, _, g in parsed)
    maxx = max(g.bounds[2] for _, _, g in parsed)
    maxy = max(g.bounds[3] for _, _, g in parsed)
    if project is None:
        project = _is_geographic((minx, miny, maxx, maxy))
    projector = _make_projector((minx, miny, maxx, maxy)) if project else None

    # ids are only unique within one OSM type (way/123 vs relation/123)
    next_id = max(fid for fid, _, _ in parsed) + 1
    used = set()
    for i, (fid, tags, geom) in enumerate(parsed):
        if fid in used:
            logger.debug(f"Duplicate feature id {fid}, using {next_id}")
            parsed[i] = (next_id, tags, geom)
            fid = next_id
            next_id += 1
        used.add(fid)

    nodes, segments, areas = [], [], []
    next_segment_id = next_id

    for fid, tags, geom in tqdm(parsed, desc="Features", disable=len(parsed) < 1000):
        if projector is not None:
            geom = shapely_transform(projector, geom)

        if geom.geom_type == 'Point':
            nodes.append(MapNode(fid, (geom.x, geom.y), tags))
        elif geom.geom_type in ('LineString', 'MultiLineString'):
            lines = geom.geoms if geom.geom_type == 'MultiLineString' else [geom]
            for line in lines:
                coords = list(line.coords)
                for start, end in zip(coords, coords[1:]):
                    segments.append(MapWaySegment(
                        next_segment_id, start[:2], end[:2], tags))
                    next_segment_id += 1
        elif geom.geom_type in ('Polygon', 'MultiPolygon'):
            if not geom.is_valid:
                geom = geom.buffer(0)
            if geom.is_empty or geom.area <= 0:
                logger.warning(f"Skipping degenerate area {fid}")
                continue
            areas.append(MapArea(fid, geom, tags))
        else:
            logger.debug(f"Ignoring {geom.geom_type} feature {fid}")

    logger.info(f"Loaded {len(nodes)} nodes, {len(segments)} way segments, "
                f"{len(areas)} areas")
    return MapData(nodes, segments, areas)


def load_geojson(path, project=None) -> MapData:
    """Read a GeoJSON FeatureCollection (or a single Feature) from *path*."""
    path = pathlib.Path(path)
    with open(path) as f:
        data = json.load(f)

    if data.get('type') == 'Feature':
        features = [data]
    else:
        features = data.get('features', [])
    logger.info(f"Reading {len(features)} features from {path.name}")

    map_data = map_data_from_features(features, project)
    if 'bbox' in data and not project and map_data.elements():
        west, south, east, north = data['bbox'][:4]
        if not _is_geographic((west, south, east, north)):
            map_data.boundary = BoundingBox(north=north, south=south,
                                            east=east, west=west)
    return map_data
