"""TreeBuilder orchestrator. Load map data, place trees, export."""

import logging
import time
from typing import Union

from .config import TreeConfig
from .models import MapData
from .module import TreeModule
from .osm_data import load_geojson
from .render import RenderSession
from .targets import MeshTarget, POVRayTarget
from .world import attach_obstacles

logger = logging.getLogger(__name__)


class TreeBuilder:
    def __init__(self, config: TreeConfig = None):
        """
        config: placement and rendering settings; defaults to the
        environment (see ``TreeConfig.from_env``).
        """
        self.config = config or TreeConfig.from_env()
        self.module = TreeModule(self.config)
        self.map_data = None

    def load(self, source: Union[str, MapData], project=None) -> MapData:
        """Load a GeoJSON path (or take a ready MapData) and attach objects."""
        t0 = time.perf_counter()
        if isinstance(source, MapData):
            map_data = source
        else:
            map_data = load_geojson(source, project=project)

        self.module.apply_to(map_data)
        attach_obstacles(map_data)
        self.map_data = map_data
        logger.info(f"Prepared map data in {time.perf_counter() - t0:.1f}s")
        return map_data

    def _require_data(self):
        if self.map_data is None:
            raise ValueError("No map data loaded; call load() first")

    def render_mesh(self) -> MeshTarget:
        self._require_data()
        target = MeshTarget()
        self.module.render_to(target)
        return target

    def render_pov(self) -> POVRayTarget:
        self._require_data()
        target = POVRayTarget()
        self.module.render_to(target, RenderSession())
        return target

    def generate_glb(self, output_path: str) -> str:
        """Render all trees as meshes and export a GLB file."""
        t0 = time.perf_counter()
        path = self.render_mesh().export(output_path)
        logger.info(f"GLB generation took {time.perf_counter() - t0:.1f}s")
        return path

    def generate_pov(self, output_path: str) -> str:
        """Render all trees as POV-Ray template instances."""
        t0 = time.perf_counter()
        path = self.render_pov().write(output_path)
        logger.info(f"POV-Ray generation took {time.perf_counter() - t0:.1f}s")
        return path
