"""TreeBuilder package: trees, tree rows and forests from OpenStreetMap data.

Import constants FIRST so logging and ``.env`` are set up before any
other module logs or reads configuration.
"""

from treebuilder import constants as _constants  # noqa: F401

from treebuilder.builder import TreeBuilder
from treebuilder.config import TreeConfig
from treebuilder.models import BoundingBox, MapArea, MapData, MapNode, MapWaySegment
from treebuilder.module import TreeModule
