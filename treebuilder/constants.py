"""Configuration constants, .env loading, and logging setup."""

import logging

from dotenv import load_dotenv

# ── Tree geometry ───────────────────────────────────────────────────────
DEFAULT_TREE_HEIGHT = 10.0          # metres, when no height tag is present
TREE_RADIUS_PER_HEIGHT = 0.2        # crown radius as a fraction of height
STEM_RATIO_CONIFEROUS = 0.3         # share of the height used by the trunk
STEM_RATIO_BROAD_LEAVED = 0.5
FOREST_HEIGHT_VARIANCE = 0.25       # area trees get height * [0.75, 1.25)

# ── Placement ───────────────────────────────────────────────────────────
DEFAULT_DENSITY_DECLARATIVE = 0.01  # trees per square metre (scene files)
DEFAULT_DENSITY_IMMEDIATE = 0.001   # sparser for per-primitive meshes
DEFAULT_MIN_SPACING_FRACTION = 0.3  # of the mean tree spacing 1/sqrt(density)
DEFAULT_TREE_ROW_SPACING = 8.0      # metres between trees of a tree row
MAX_ATTEMPTS_PER_POINT = 30         # rejection-sampling budget per tree

# ── Clearance ───────────────────────────────────────────────────────────
TREE_ROW_CLEARING_ABOVE = 5.0
FOREST_CLEARING_ABOVE = 2.0
DEFAULT_OBSTACLE_RADIUS = 1.0       # point obstacles (poles, benches, ...)
DEFAULT_LINE_WIDTH = 4.0            # line obstacles without a width tag

# ── OSM selection tags ──────────────────────────────────────────────────
BROAD_LEAVED_VALUES = frozenset({'broad_leaved', 'broad_leafed', 'deciduous'})
CONIFEROUS_VALUES = frozenset({'coniferous'})
FRUIT_SPECIES_MARKER = 'malus'

# Tags of elements that physically occupy the ground trees would grow on.
# Land use, parks and boundaries only describe the ground and never block.
OBSTACLE_KEYS = frozenset({'building', 'highway', 'railway', 'waterway', 'barrier'})
OBSTACLE_NODE_KEYS = frozenset({'amenity', 'man_made', 'power', 'emergency'})
OBSTACLE_TAGS = {
    'natural': frozenset({'water', 'bare_rock'}),
    'landuse': frozenset({'reservoir', 'basin'}),
    'leisure': frozenset({'pitch', 'swimming_pool'}),
}

# Solid PBR colours per material (RGBA, 0-1)
MATERIAL_COLORS = {
    'tree_trunk':                   [0.45, 0.30, 0.15, 1.0],   # brown
    'tree_crown':                   [0.20, 0.50, 0.20, 1.0],   # dark green
    'billboard_broad_leaved':       [0.25, 0.55, 0.25, 1.0],
    'billboard_broad_leaved_fruit': [0.35, 0.55, 0.20, 1.0],   # apple green
    'billboard_coniferous':         [0.10, 0.28, 0.10, 1.0],   # spruce green
}

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
