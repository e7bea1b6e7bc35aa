"""
部品メッシュ生成モジュール。

各部品ファミリのパラメータレコードを受け取り、MeshGroup を返す生成関数を含む。
FAMILIES はファミリ名からレコード型・生成関数・原点の規約を引く登録表。
"""

from typing import Callable, Dict, NamedTuple, Type

from ...mesh import MeshGroup
from ..models import (
    BoxParameters,
    CupParameters,
    CylinderParameters,
    DiceParameters,
    NutParameters,
    PlateParameters,
    ScrewParameters,
    SphereParameters,
    canonical_family,
)
from .primitive_generators import (
    generate_box,
    generate_sphere,
    generate_cylinder,
    generate_dice,
)
from .fastener_generators import (
    generate_screw,
    generate_nut,
)
from .tableware_generators import (
    generate_cup,
    generate_plate,
)

# 原点が底面の中心（接地補正の加算量 0）
ORIGIN_BASE = "origin-at-base"
# 原点が形状の中心
ORIGIN_CENTER = "origin-at-center"


class Family(NamedTuple):
    record: Type
    builder: Callable[..., MeshGroup]
    origin: str


FAMILIES: Dict[str, Family] = {
    "box": Family(BoxParameters, generate_box, ORIGIN_CENTER),
    "sphere": Family(SphereParameters, generate_sphere, ORIGIN_CENTER),
    "cylinder": Family(CylinderParameters, generate_cylinder, ORIGIN_CENTER),
    "dice": Family(DiceParameters, generate_dice, ORIGIN_CENTER),
    "screw": Family(ScrewParameters, generate_screw, ORIGIN_CENTER),
    "nut": Family(NutParameters, generate_nut, ORIGIN_CENTER),
    "cup": Family(CupParameters, generate_cup, ORIGIN_BASE),
    "plate": Family(PlateParameters, generate_plate, ORIGIN_BASE),
}


def build_group(family: str, params) -> MeshGroup:
    """ファミリの生成関数でメッシュグループを作る。"""
    entry = FAMILIES[canonical_family(family)]
    return entry.builder(params)


__all__ = [
    "FAMILIES",
    "Family",
    "ORIGIN_BASE",
    "ORIGIN_CENTER",
    "build_group",
    # 基本形状
    "generate_box",
    "generate_sphere",
    "generate_cylinder",
    "generate_dice",
    # 締結部品
    "generate_screw",
    "generate_nut",
    # 食器
    "generate_cup",
    "generate_plate",
]
