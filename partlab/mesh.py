"""
部品メッシュのグループ表現。

複合部品（ねじ、サイコロなど）は名前付きのサブメッシュとローカルオフセットの
組として保持し、エクスポート前に flatten() で1つの trimesh.Trimesh にまとめる。
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from .errors import EmptyMesh

Offset = Tuple[float, float, float]


@dataclass
class MeshPart:
    name: str
    mesh: trimesh.Trimesh
    offset: Offset = (0.0, 0.0, 0.0)
    # None の場合は部品マテリアルの色を使う
    color: Optional[Sequence[int]] = None

    def placed(self) -> trimesh.Trimesh:
        """オフセットを適用したコピーを返す。"""
        mesh = self.mesh.copy()
        if any(self.offset):
            mesh.apply_translation(self.offset)
        return mesh


@dataclass
class Curve:
    """ねじ山ガイドなどのポリライン。ソリッドには含めない。"""

    name: str
    points: np.ndarray
    offset: Offset = (0.0, 0.0, 0.0)

    def placed(self) -> np.ndarray:
        return np.asarray(self.points, dtype=float) + np.asarray(self.offset, dtype=float)


@dataclass
class MeshGroup:
    name: str
    parts: List[MeshPart] = field(default_factory=list)
    curves: List[Curve] = field(default_factory=list)
    # 押し出し系は shapely Polygon、回転体系は (r, y) 点列
    profile: Any = None

    def add(self, name, mesh, offset=(0.0, 0.0, 0.0), color=None) -> MeshPart:
        part = MeshPart(name=name, mesh=mesh, offset=tuple(float(v) for v in offset), color=color)
        self.parts.append(part)
        return part

    def add_curve(self, name, points, offset=(0.0, 0.0, 0.0)) -> Curve:
        curve = Curve(name=name, points=np.asarray(points, dtype=float), offset=tuple(float(v) for v in offset))
        self.curves.append(curve)
        return curve

    def part(self, name: str) -> MeshPart:
        for part in self.parts:
            if part.name == name:
                return part
        raise KeyError(name)

    def flatten(self, default_color=None) -> trimesh.Trimesh:
        """
        サブメッシュのオフセットを絶対座標に合成し、追加順に1つのメッシュへ連結する。

        グループ構造は出力に残らない。default_color を与えると各パーツに
        頂点色（パーツ固有の色があればそちら）を設定する。
        """
        if not self.parts:
            raise EmptyMesh(f"{self.name}: group has no parts")
        placed = []
        for part in self.parts:
            mesh = part.placed()
            color = part.color if part.color is not None else default_color
            if color is not None:
                mesh.visual.vertex_colors = np.tile(np.asarray(color, dtype=np.uint8), (len(mesh.vertices), 1))
            placed.append(mesh)
        if len(placed) == 1:
            return placed[0]
        return trimesh.util.concatenate(placed)
