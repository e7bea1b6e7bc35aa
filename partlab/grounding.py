"""
接地補正（部品の最下点を地面 Y=0 より上に置くためのY方向オフセット）。

ファミリごとの加算量は表で定義し、実行時のメッシュ境界からは再計算しない。
原点が底面にあるファミリ（カップ・皿）は加算量 0 で、要求位置がそのまま使われる。
"""

from typing import Callable, Dict, NamedTuple

from .library.generators import FAMILIES, ORIGIN_BASE
from .library.models import canonical_family

# 地面からの最小クリアランス
EPSILON = 0.01


class GroundingRule(NamedTuple):
    add_on: Callable[[object], float]
    clearance: float = EPSILON


def _base_rule(_params) -> float:
    return 0.0


GROUNDING_RULES: Dict[str, GroundingRule] = {
    "box": GroundingRule(lambda p: p.height / 2.0),
    "sphere": GroundingRule(lambda p: p.radius),
    "cylinder": GroundingRule(lambda p: p.height / 2.0),
    # サイコロは最低高さが一辺の半分ちょうど
    "dice": GroundingRule(lambda p: p.size / 2.0, clearance=0.0),
    "screw": GroundingRule(lambda p: p.shank_length / 2.0),
    "nut": GroundingRule(lambda p: p.height / 2.0),
}


def grounding_rule(family: str) -> GroundingRule:
    family = canonical_family(family)
    if FAMILIES[family].origin == ORIGIN_BASE:
        return GroundingRule(_base_rule)
    return GROUNDING_RULES[family]


def minimum_y(family: str, params) -> float:
    """接地後に許される最小のY位置。"""
    rule = grounding_rule(family)
    return rule.clearance + rule.add_on(params)


def ground_offset(family: str, params, position_y: float = 0.0) -> float:
    """
    接地補正後のY位置を返す。

    引数:
        family: 部品ファミリ名
        params: ファミリのパラメータレコード
        position_y: 要求されたY位置

    戻り値:
        max(position_y, clearance + add_on)
    """
    return max(float(position_y), minimum_y(family, params))
