"""
部品記述子からメッシュを合成する。

プレビューとエクスポートはどちらもこのモジュールを通り、
形状の生成・着色・接地補正・変換の適用を同じ手順で行う。
"""

from dataclasses import dataclass
from typing import List

import numpy as np
import trimesh

from .grounding import ground_offset
from .library.generators import build_group
from .library.models import PartDescriptor, Transform
from .mesh import MeshGroup


@dataclass
class PartGenerationResult:
    mesh: trimesh.Trimesh
    curves: List[np.ndarray]
    part_id: str
    position_y: float
    group: MeshGroup


def transform_matrix(transform: Transform, position_y: float) -> np.ndarray:
    """T(接地補正後の位置) · R(XYZ順のオイラー角) · S(スケール) の4x4行列。"""
    x, _, z = transform.position
    translation = trimesh.transformations.translation_matrix((x, position_y, z))
    rotation = trimesh.transformations.euler_matrix(*transform.rotation, axes="rxyz")
    scale = np.diag([*transform.scale, 1.0])
    return translation @ rotation @ scale


def assemble(descriptor: PartDescriptor) -> MeshGroup:
    """記述子のファミリ生成関数でローカル座標のメッシュグループを作る。"""
    return build_group(descriptor.family, descriptor.parameters)


def generate_part(descriptor: PartDescriptor) -> PartGenerationResult:
    """
    部品を生成し、色・接地補正・変換を適用する。

    引数:
        descriptor: 部品記述子

    戻り値:
        変換済みメッシュ、変換済みガイド曲線、接地補正後のY位置を含む結果
    """
    group = assemble(descriptor)
    rgba = trimesh.visual.color.hex_to_rgba(descriptor.material.color)
    mesh = group.flatten(default_color=rgba)

    position_y = ground_offset(descriptor.family, descriptor.parameters, descriptor.transform.position[1])
    matrix = transform_matrix(descriptor.transform, position_y)
    mesh.apply_transform(matrix)

    curves = [trimesh.transformations.transform_points(curve.placed(), matrix) for curve in group.curves]
    return PartGenerationResult(
        mesh=mesh,
        curves=curves,
        part_id=descriptor.id,
        position_y=position_y,
        group=group,
    )


def synthesize(descriptor: PartDescriptor) -> trimesh.Trimesh:
    """エクスポート用のメッシュのみを返す。"""
    return generate_part(descriptor).mesh
