"""Turn tree positions into geometry on either target kind.

Classification and sizing happen once in :meth:`TreeRenderer.describe`;
the two adapters only translate a :class:`TreeInstance` into their
target's vocabulary:

* ``ImmediateTreeAdapter`` draws trunk and crown columns (or a crossed
  billboard) for every tree.
* ``DeclarativeTreeAdapter`` declares one unit-height template per leaf
  type and then instantiates it with rotation, scale and translation.

All randomness comes from a ``random.Random`` passed in by the caller,
seeded with the element id, so a render pass is reproducible.
"""

import logging
import random
from enum import Enum

from .config import TreeConfig
from .constants import (
    STEM_RATIO_BROAD_LEAVED,
    STEM_RATIO_CONIFEROUS,
    TREE_RADIUS_PER_HEIGHT,
)
from .models import TreeInstance
from .tags import is_coniferous, is_fruit_tree, tree_height
from .targets import Materials, POVRayTarget

logger = logging.getLogger(__name__)

TEMPLATE_NAMES = {
    False: 'broad_leaved_tree',
    True: 'coniferous_tree',
}


def render_tree_geometry(target, base, coniferous, height):
    """Trunk column topped by a crown column (cone for conifers)."""
    stem_ratio = STEM_RATIO_CONIFEROUS if coniferous else STEM_RATIO_BROAD_LEAVED
    radius = height * TREE_RADIUS_PER_HEIGHT
    x, y, z = base

    target.draw_column(Materials.TREE_TRUNK, base, height * stem_ratio,
                       radius / 4, radius / 5,
                       draw_bottom=False, draw_top=True)
    target.draw_column(Materials.TREE_CROWN, (x, y + height * stem_ratio, z),
                       height * (1 - stem_ratio),
                       radius, 0 if coniferous else radius,
                       draw_bottom=True, draw_top=True)


class DeclarationState(Enum):
    NOT_DECLARED = 'not_declared'
    DECLARED = 'declared'


class RenderSession:
    """Template bookkeeping for one rendering pass over one target."""

    def __init__(self):
        self.state = DeclarationState.NOT_DECLARED
        self.declared = set()

    @property
    def is_declared(self) -> bool:
        return self.state is DeclarationState.DECLARED

    def mark_declared(self, names):
        self.declared.update(names)
        self.state = DeclarationState.DECLARED


class ImmediateTreeAdapter:
    declarative = False

    def __init__(self, target, use_billboards=False):
        self.target = target
        self.use_billboards = use_billboards

    def ensure_declarations(self):
        pass

    def draw_tree(self, tree: TreeInstance):
        if not self.use_billboards:
            render_tree_geometry(self.target, tree.base, tree.coniferous,
                                 tree.height)
            return

        # "random" decision based on x coord
        mirrored = int(tree.pos[0]) % 2 == 0
        if tree.fruit:
            material = Materials.TREE_BILLBOARD_BROAD_LEAVED_FRUIT
        elif tree.coniferous:
            material = Materials.TREE_BILLBOARD_CONIFEROUS
        else:
            material = Materials.TREE_BILLBOARD_BROAD_LEAVED

        width = (1.0 if tree.fruit else 0.5) * tree.height
        self.target.draw_crosstree(material, tree.base, width, tree.height,
                                   mirrored)


class DeclarativeTreeAdapter:
    declarative = True

    def __init__(self, target, session=None):
        self.target = target
        self.session = session if session is not None else RenderSession()

    def ensure_declarations(self):
        if self.session.is_declared:
            return

        for coniferous, name in TEMPLATE_NAMES.items():
            self.target.append(f"#ifndef ({name})\n")
            self.target.append(f"#declare {name} = object {{ union {{\n")
            render_tree_geometry(self.target, (0.0, 0.0, 0.0), coniferous, 1.0)
            self.target.append("} }\n#end\n\n")

        self.session.mark_declared(TEMPLATE_NAMES.values())
        logger.debug("Declared tree templates")

    def draw_tree(self, tree: TreeInstance):
        x, y, z = tree.base
        self.target.append(f"object {{ {TEMPLATE_NAMES[tree.coniferous]} rotate ")
        self.target.append(float(tree.rotation))
        self.target.append("*y scale ")
        self.target.append(float(tree.height))
        self.target.append(" translate ")
        self.target.append_vector(x, y, z)
        self.target.append(" }\n")


class TreeRenderer:
    """Classify, size and draw trees through a target adapter."""

    def __init__(self, config: TreeConfig = None):
        self.config = config or TreeConfig()

    def describe(self, element, pos, rng) -> TreeInstance:
        height = tree_height(element, rng)
        rotation = rng.uniform(0.0, 360.0) % 360.0
        return TreeInstance(
            pos=pos,
            element=element,
            base=element.get_with_ele(pos),
            coniferous=is_coniferous(element.tags, pos),
            fruit=is_fruit_tree(element.tags),
            height=height,
            rotation=rotation,
        )

    def adapter_for(self, target, session=None):
        if isinstance(target, POVRayTarget):
            return DeclarativeTreeAdapter(target, session)
        return ImmediateTreeAdapter(target, self.config.use_billboards)

    def render(self, adapter, element, positions):
        """Draw one tree per position of *element*; returns the instances."""
        rng = random.Random(element.id)
        adapter.ensure_declarations()
        trees = []
        for pos in positions:
            tree = self.describe(element, pos, rng)
            adapter.draw_tree(tree)
            trees.append(tree)
        return trees
