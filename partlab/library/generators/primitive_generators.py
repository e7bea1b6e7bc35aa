"""
基本形状（直方体・球・円柱）とサイコロのメッシュ生成関数。
"""

import math
from typing import List, Tuple

import numpy as np
import trimesh

from ...mesh import MeshGroup
from ..models import BoxParameters, CylinderParameters, DiceParameters, SphereParameters
from ..profiles import lathe

BLACK = (0, 0, 0, 255)

# サイコロの目の球の分割数
PIP_SEGMENTS = 16


def sphere_profile(radius: float, segments: int) -> np.ndarray:
    """南極から北極へ向かう半円の (r, y) プロファイル。極は軸上に固定する。"""
    rings = max(segments // 2, 2)
    phi = np.linspace(-math.pi / 2.0, math.pi / 2.0, rings + 1)
    profile = np.column_stack([radius * np.cos(phi), radius * np.sin(phi)])
    profile[0] = (0.0, -radius)
    profile[-1] = (0.0, radius)
    return profile


def _sphere_mesh(radius: float, segments: int) -> trimesh.Trimesh:
    return lathe(sphere_profile(radius, segments), segments=segments)


def generate_box(params: BoxParameters) -> MeshGroup:
    group = MeshGroup("box")
    group.add("body", trimesh.creation.box(extents=(params.width, params.height, params.depth)))
    return group


def generate_sphere(params: SphereParameters) -> MeshGroup:
    profile = sphere_profile(params.radius, params.segments)
    group = MeshGroup("sphere", profile=profile)
    group.add("body", lathe(profile, segments=params.segments))
    return group


def generate_cylinder(params: CylinderParameters) -> MeshGroup:
    """上下の半径が異なる円柱（片側 0 で円錐）。原点は高さ方向の中心。"""
    half = params.height / 2.0
    profile = np.array(
        [
            (0.0, -half),
            (params.radius_bottom, -half),
            (params.radius_top, half),
            (0.0, half),
        ]
    )
    group = MeshGroup("cylinder", profile=profile)
    group.add("body", lathe(profile, segments=params.segments))
    return group


def dice_pip_layout(size: float) -> List[List[Tuple[float, float, float]]]:
    """
    1〜6の目の面上の位置を返す。

    s = size/2 が面までの距離、d = size*0.3 が目の間隔。
    1: +Z、2: -Z、3: +X、4: -X、5: +Y、6: -Y の面に配置する。
    """
    s = size / 2.0
    d = size * 0.3
    return [
        [(0.0, 0.0, s)],
        [(-d, d, -s), (d, -d, -s)],
        [(s, d, d), (s, 0.0, 0.0), (s, -d, -d)],
        [(-s, -d, -d), (-s, -d, d), (-s, d, -d), (-s, d, d)],
        [(0.0, s, 0.0), (-d, s, -d), (d, s, d), (-d, s, d), (d, s, -d)],
        [(x, -s, z) for x in (-d, d) for z in (-d, 0.0, d)],
    ]


def generate_dice(params: DiceParameters) -> MeshGroup:
    """
    サイコロのメッシュを生成する。

    本体は一辺 size の立方体、目は半径 dot_radius の黒い球を21個。
    各球は面に内接させ、外形（最下点を含む）が立方体からはみ出さないようにする。

    注意: 目の球は立方体に完全に包まれるため、プレビューでは見えず、
    エクスポートでは本体内部の閉じた殻として出力される。
    """
    size = params.size
    group = MeshGroup("dice")
    group.add("body", trimesh.creation.box(extents=(size, size, size)))

    pip = _sphere_mesh(params.dot_radius, PIP_SEGMENTS)
    for face, positions in enumerate(dice_pip_layout(size), start=1):
        for index, point in enumerate(positions, start=1):
            point = np.asarray(point, dtype=float)
            axis = int(np.argmax(np.abs(point)))
            normal = np.zeros(3)
            normal[axis] = math.copysign(1.0, point[axis])
            center = point - normal * params.dot_radius
            group.add(f"pip-{face}-{index}", pip.copy(), offset=center, color=BLACK)
    return group
