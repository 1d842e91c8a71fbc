"""Adds trees, tree rows, tree groups and forests to the world."""

import logging
import random

from .collisions import avoided_objects, filter_world_object_collisions
from .config import TreeConfig
from .constants import (
    FOREST_CLEARING_ABOVE,
    TREE_RADIUS_PER_HEIGHT,
    TREE_ROW_CLEARING_ABOVE,
)
from .geometry import (
    distribute_points_on,
    equally_distribute_points_along,
    tree_row_count,
)
from .models import ClearanceZone, GroundState
from .placement import PlacementCache
from .render import TreeRenderer
from .tags import tree_height
from .world import WorldObject

logger = logging.getLogger(__name__)


def is_tree_node(tags) -> bool:
    return tags.get('natural') == 'tree'


def is_tree_row(tags) -> bool:
    return tags.get('natural') == 'tree_row'


def is_forest(tags) -> bool:
    return (tags.get('natural') == 'wood'
            or tags.get('landuse') == 'forest'
            or 'wood' in tags
            or tags.get('landuse') == 'orchard')


class TreeModule:
    """Create tree representations for map elements and render them.

    One module owns the renderer and the placement cache, so every target
    rendered through it reuses the same forest positions.
    """

    def __init__(self, config: TreeConfig = None):
        self.config = config or TreeConfig()
        self.renderer = TreeRenderer(self.config)
        self.placement_cache = PlacementCache()
        self.world_objects = []

    def apply_to(self, map_data):
        created = []

        for node in map_data.nodes:
            if is_tree_node(node.tags):
                created.append(Tree(self, node))

        for segment in map_data.way_segments:
            if is_tree_row(segment.tags):
                created.append(TreeRow(self, segment))

        for area in map_data.areas:
            if is_forest(area.tags):
                created.append(Forest(self, area, map_data))

        for obj in created:
            obj.get_primary_element().add_representation(obj)
        self.world_objects.extend(created)

        logger.info(f"Tree module: {sum(isinstance(o, Tree) for o in created)} "
                    f"trees, {sum(isinstance(o, TreeRow) for o in created)} "
                    f"tree rows, {sum(isinstance(o, Forest) for o in created)} "
                    f"forests")
        return created

    def render_to(self, target, session=None):
        """Render every tree object onto *target*; returns the tree count."""
        adapter = self.renderer.adapter_for(target, session)
        count = 0
        for obj in self.world_objects:
            count += len(obj.render_to(adapter))
        logger.info(f"Rendered {count} trees to {type(target).__name__}")
        return count


class Tree(WorldObject):

    def __init__(self, module, node):
        self.module = module
        self.node = node

    def get_primary_element(self):
        return self.node

    def get_ground_state(self):
        return GroundState.ON

    def get_clearing_above(self, pos):
        return tree_height(self.node, random.Random(self.node.id))

    def get_clearance_zones(self):
        radius = self.get_clearing_above(self.node.pos) * TREE_RADIUS_PER_HEIGHT
        return [ClearanceZone(*self.node.pos, radius)]

    def tree_positions(self, density=None):
        return (self.node.pos,)

    def render_to(self, adapter):
        return self.module.renderer.render(adapter, self.node,
                                           self.tree_positions())


class TreeRow(WorldObject):

    def __init__(self, module, segment):
        self.module = module
        self.segment = segment

        # rows are spaced per way segment; a multi-segment way restarts at each node
        count = tree_row_count(segment.length, module.config.tree_row_spacing)
        self._positions = tuple(equally_distribute_points_along(
            count, False, segment.start, segment.end))

    def get_primary_element(self):
        return self.segment

    def get_start_position(self):
        return self.segment.start

    def get_end_position(self):
        return self.segment.end

    def get_clearing_above(self, pos):
        return TREE_ROW_CLEARING_ABOVE

    def get_clearance_zones(self):
        radius = (tree_height(self.segment, random.Random(self.segment.id))
                  * TREE_RADIUS_PER_HEIGHT)
        return [ClearanceZone(x, z, radius) for x, z in self._positions]

    def tree_positions(self, density=None):
        return self._positions

    def render_to(self, adapter):
        return self.module.renderer.render(adapter, self.segment,
                                           self.tree_positions())


class Forest(WorldObject):

    def __init__(self, module, area, map_data):
        self.module = module
        self.area = area
        self.map_data = map_data

    def get_primary_element(self):
        return self.area

    def get_clearing_above(self, pos):
        return FOREST_CLEARING_ABOVE

    def _create_tree_positions(self, density):
        # collect other objects that the trees should not be placed on
        avoided = avoided_objects(self.area, self.map_data)

        positions = distribute_points_on(
            self.area.id, self.area.polygon, self.map_data.boundary,
            density, self.module.config.min_spacing_fraction)

        filtered = filter_world_object_collisions(positions, avoided)
        logger.debug(f"Forest {self.area.id}: {len(filtered)} trees "
                     f"({len(positions) - len(filtered)} removed by "
                     f"{len(avoided)} avoided objects)")
        return filtered

    def tree_positions(self, density):
        return self.module.placement_cache.get_or_compute(
            self.area, density, self._create_tree_positions)

    def render_to(self, adapter):
        density = self.module.config.density_for(adapter.declarative)
        return self.module.renderer.render(adapter, self.area,
                                           self.tree_positions(density))
