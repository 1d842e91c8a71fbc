"""Geometry targets: the primitive vocabularies trees are drawn with.

``MeshTarget`` collects per-material triangle groups and exports them as a
binary glTF scene through trimesh.  ``POVRayTarget`` writes a POV-Ray scene
description; besides primitives it accepts raw text, which is how reusable
``#declare`` templates and ``object { ... }`` instances get emitted.
"""

import io
import math
import logging
import pathlib
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import trimesh

from .constants import MATERIAL_COLORS

logger = logging.getLogger(__name__)

COLUMN_SIDES = 8


@dataclass(frozen=True)
class Material:
    name: str
    color: Tuple[float, float, float, float]
    billboard: bool = False


class Materials:
    TREE_TRUNK = Material('tree_trunk', tuple(MATERIAL_COLORS['tree_trunk']))
    TREE_CROWN = Material('tree_crown', tuple(MATERIAL_COLORS['tree_crown']))
    TREE_BILLBOARD_BROAD_LEAVED = Material(
        'billboard_broad_leaved',
        tuple(MATERIAL_COLORS['billboard_broad_leaved']), billboard=True)
    TREE_BILLBOARD_BROAD_LEAVED_FRUIT = Material(
        'billboard_broad_leaved_fruit',
        tuple(MATERIAL_COLORS['billboard_broad_leaved_fruit']), billboard=True)
    TREE_BILLBOARD_CONIFEROUS = Material(
        'billboard_coniferous',
        tuple(MATERIAL_COLORS['billboard_coniferous']), billboard=True)


# ── Immediate mesh target ───────────────────────────────────────────────

def _make_column(base, height, r_bot, r_top, draw_bottom, draw_top,
                 nsides=COLUMN_SIDES):
    """Tapered prism (frustum, or cone when *r_top* is 0) on *base*.

    Returns (verts, faces) in Y-up [x, elevation, z] format.
    """
    cx, y_bot, cz = base
    y_top = y_bot + height
    verts = []
    faces = []

    for i in range(nsides):
        angle = 2.0 * math.pi * i / nsides
        verts.append([cx + r_bot * math.cos(angle), y_bot,
                      cz + r_bot * math.sin(angle)])

    if r_top > 0:
        for i in range(nsides):
            angle = 2.0 * math.pi * i / nsides
            verts.append([cx + r_top * math.cos(angle), y_top,
                          cz + r_top * math.sin(angle)])
        for i in range(nsides):
            j = (i + 1) % nsides
            faces.append([i, j, nsides + j])
            faces.append([i, nsides + j, nsides + i])
        if draw_top:
            ctop = len(verts)
            verts.append([cx, y_top, cz])
            for i in range(nsides):
                j = (i + 1) % nsides
                faces.append([ctop, nsides + i, nsides + j])
    else:
        apex = len(verts)
        verts.append([cx, y_top, cz])
        for i in range(nsides):
            j = (i + 1) % nsides
            faces.append([i, j, apex])

    if draw_bottom:
        cbot = len(verts)
        verts.append([cx, y_bot, cz])
        for i in range(nsides):
            j = (i + 1) % nsides
            faces.append([cbot, j, i])

    return verts, faces


def _make_crosstree(base, width, height, mirrored):
    """Two crossing vertical quads with UVs; *mirrored* flips them in u."""
    cx, y, cz = base
    half = width / 2.0
    u0, u1 = (1.0, 0.0) if mirrored else (0.0, 1.0)

    verts = [
        # quad along x
        [cx - half, y, cz], [cx + half, y, cz],
        [cx + half, y + height, cz], [cx - half, y + height, cz],
        # quad along z
        [cx, y, cz - half], [cx, y, cz + half],
        [cx, y + height, cz + half], [cx, y + height, cz - half],
    ]
    uv = [[u0, 0.0], [u1, 0.0], [u1, 1.0], [u0, 1.0]] * 2
    faces = [[0, 1, 2], [0, 2, 3], [4, 5, 6], [4, 6, 7]]
    return verts, faces, uv


class MeshTarget:
    """Collect tree primitives into per-material mesh groups."""

    def __init__(self):
        self.groups: dict[str, dict] = {}
        self.materials: dict[str, Material] = {}
        self.counts = {'columns': 0, 'billboards': 0}

    def _group(self, material: Material) -> dict:
        group = self.groups.get(material.name)
        if group is None:
            group = {'verts': [], 'faces': [], 'offset': 0}
            if material.billboard:
                group['uv'] = []
            self.groups[material.name] = group
            self.materials[material.name] = material
        return group

    def _add(self, material, verts, faces, uv=None):
        group = self._group(material)
        off = group['offset']
        for f in faces:
            group['faces'].append([f[0] + off, f[1] + off, f[2] + off])
        group['verts'].extend(verts)
        group['offset'] += len(verts)
        if uv is not None:
            group['uv'].extend(uv)

    def draw_column(self, material, base, height, radius_bottom, radius_top,
                    draw_bottom=True, draw_top=True):
        verts, faces = _make_column(base, height, radius_bottom, radius_top,
                                    draw_bottom, draw_top)
        self._add(material, verts, faces)
        self.counts['columns'] += 1

    def draw_crosstree(self, material, base, width, height, mirrored=False):
        verts, faces, uv = _make_crosstree(base, width, height, mirrored)
        self._add(material, verts, faces, uv)
        self.counts['billboards'] += 1

    def to_scene(self) -> trimesh.Scene:
        """One mesh per material group, each with a solid PBR colour."""
        total_verts = sum(len(g['verts']) for g in self.groups.values())
        if total_verts == 0:
            raise ValueError("No valid geometry to generate GLB file")

        scene = trimesh.Scene()
        for name, group in self.groups.items():
            if not group['faces']:
                continue

            verts_arr = np.array(group['verts'], dtype=np.float64)
            faces_arr = np.array(group['faces'], dtype=np.int64)
            # Negate Z so +Z = south in glTF's right-handed frame, and
            # reverse face winding to compensate for the handedness flip.
            verts_arr[:, 2] *= -1
            faces_arr = faces_arr[:, ::-1]

            material = self.materials[name]
            pbr = trimesh.visual.material.PBRMaterial(
                baseColorFactor=list(material.color),
                doubleSided=True,
            )
            if 'uv' in group:
                mesh = trimesh.Trimesh(vertices=verts_arr, faces=faces_arr,
                                       process=False)
                mesh.visual = trimesh.visual.TextureVisuals(
                    uv=np.array(group['uv'], dtype=np.float64),
                    material=pbr)
            else:
                mesh = trimesh.Trimesh(vertices=verts_arr, faces=faces_arr)
                mesh.fix_normals()
                mesh.visual = trimesh.visual.TextureVisuals(material=pbr)

            scene.add_geometry(mesh, geom_name=name)
        return scene

    def export(self, output_path) -> str:
        output_path = pathlib.Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.to_scene().export(str(output_path), file_type='glb')
        logger.info(f"GLB file generated: {output_path} "
                    f"({self.counts['columns']} columns, "
                    f"{self.counts['billboards']} billboards)")
        return str(output_path)


# ── Declarative POV-Ray target ──────────────────────────────────────────

def _fmt(value) -> str:
    """Millimetre precision without trailing zeros (``12.5``, ``10``)."""
    if isinstance(value, float):
        return f"{value:.3f}".rstrip('0').rstrip('.')
    return str(value)


class POVRayTarget:
    """Accumulate a POV-Ray scene description in memory."""

    def __init__(self):
        self._buffer = io.StringIO()

    def append(self, text):
        self._buffer.write(_fmt(text))

    def append_vector(self, x, y, z):
        self._buffer.write(f"<{_fmt(float(x))}, {_fmt(float(y))}, "
                           f"{_fmt(float(z))}>")

    def draw_column(self, material, base, height, radius_bottom, radius_top,
                    draw_bottom=True, draw_top=True):
        x, y, z = base
        if radius_bottom == radius_top:
            self.append("cylinder { ")
            self.append_vector(x, y, z)
            self.append(", ")
            self.append_vector(x, y + height, z)
            self.append(f", {_fmt(float(radius_bottom))}")
        else:
            self.append("cone { ")
            self.append_vector(x, y, z)
            self.append(f", {_fmt(float(radius_bottom))}, ")
            self.append_vector(x, y + height, z)
            self.append(f", {_fmt(float(radius_top))}")
        if not draw_bottom and not draw_top:
            self.append(" open")
        r, g, b, _ = material.color
        self.append(" pigment { color rgb ")
        self.append_vector(r, g, b)
        self.append(" } }\n")

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def write(self, output_path) -> str:
        output_path = pathlib.Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.getvalue())
        logger.info(f"POV-Ray scene written: {output_path}")
        return str(output_path)
