"""
寸法線の算出。

寸法はパラメータのみから求め、メッシュ形状は参照しない。
値は パラメータ × 10 × max(scale)（直径は半径 × 20）で、小数1桁に丸めてラベル化する。
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from .config import get_settings
from .library.models import PartDescriptor, Vec3

FRONT = "front"
SIDE = "side"
TOP = "top"

DIAMETER_PREFIX = "⌀"

BLUE = "#0066cc"
RED = "#cc3300"
GREEN = "#009933"
BROWN = "#996633"


@dataclass(frozen=True)
class Dimension:
    start: Vec3
    end: Vec3
    label: str
    value: float
    position: str = FRONT
    color: str = BLUE
    offset: float = 0.0

    def to_json(self):
        return {
            "start": list(self.start),
            "end": list(self.end),
            "label": self.label,
            "value": self.value,
            "position": self.position,
            "color": self.color,
            "offset": self.offset,
        }


class CameraQuadrant(NamedTuple):
    x: int
    z: int
    top: bool


def round_to_1(value: float) -> float:
    """小数1桁への四捨五入（.5 は正の方向へ）。"""
    return math.floor(value * 10.0 + 0.5) / 10.0


def format_label(value: float, unit: str, diameter: bool = False) -> str:
    prefix = DIAMETER_PREFIX if diameter else ""
    return f"{prefix}{round_to_1(value):.1f}{unit}"


class _Builder:
    """寸法リストを組み立てる補助クラス。"""

    def __init__(self, scale_factor: float, unit: str):
        self.scale_factor = scale_factor
        self.offset_base = 0.15 * scale_factor
        self.unit = unit
        self.items: List[Dimension] = []

    def linear(self, start, end, magnitude, position, color):
        self._add(start, end, magnitude * 10.0 * self.scale_factor, position, color, False)

    def diameter(self, start, end, radius, position, color):
        self._add(start, end, radius * 20.0 * self.scale_factor, position, color, True)

    def _add(self, start, end, value, position, color, is_diameter):
        self.items.append(
            Dimension(
                start=tuple(float(v) for v in start),
                end=tuple(float(v) for v in end),
                label=format_label(value, self.unit, is_diameter),
                value=value,
                position=position,
                color=color,
                offset=self.offset_base,
            )
        )


def _nut(b: _Builder, p):
    off = b.offset_base
    half = p.width / 2.0
    b.linear((-half, 0, -half - off), (half, 0, -half - off), p.width, FRONT, BLUE)
    b.linear((half + off, 0, 0), (half + off, p.height, 0), p.height, SIDE, RED)
    if p.hole_radius:
        y = p.height / 2.0
        b.diameter((-p.hole_radius, y, 0), (p.hole_radius, y, 0), p.hole_radius, TOP, GREEN)


def _screw(b: _Builder, p):
    off = b.offset_base
    total = p.shank_length + p.head_height
    b.linear((p.head_radius + off, 0, 0), (p.head_radius + off, total, 0), total, SIDE, RED)
    head_y = total - p.head_height / 2.0
    b.diameter((-p.head_radius, head_y, 0), (p.head_radius, head_y, 0), p.head_radius, TOP, BLUE)
    shank_y = p.shank_length / 2.0
    b.diameter((-p.shank_radius, shank_y, 0), (p.shank_radius, shank_y, 0), p.shank_radius, FRONT, GREEN)


def _cup(b: _Builder, p):
    off = b.offset_base
    rt = p.top_radius
    b.diameter((-rt, p.height, 0), (rt, p.height, 0), rt, TOP, BLUE)
    b.linear((rt + off, 0, 0), (rt + off, p.height, 0), p.height, SIDE, RED)
    y = p.height / 2.0
    b.linear((rt - p.thickness, y, 0), (rt, y, 0), p.thickness, FRONT, GREEN)


def _dice(b: _Builder, p):
    off = b.offset_base
    size = p.size
    b.linear((0, 0, -size / 2.0 - off), (size, 0, -size / 2.0 - off), size, FRONT, BLUE)
    b.linear((size + off, 0, 0), (size + off, size, 0), size, SIDE, RED)
    b.linear((0, 0, 0), (0, 0, size), size, TOP, GREEN)
    if p.dot_radius:
        c = size / 2.0
        b.diameter((c - p.dot_radius, size + 0.1, c), (c + p.dot_radius, size + 0.1, c), p.dot_radius, TOP, BROWN)


def _plate(b: _Builder, p):
    off = b.offset_base
    r = p.radius
    bt = p.bottom_thickness
    b.diameter((-r, bt / 2.0, 0), (r, bt / 2.0, 0), r, TOP, BLUE)
    b.linear((r + off, 0, 0), (r + off, bt, 0), bt, SIDE, RED)
    if p.rim_height:
        x = r - p.rim_width / 2.0
        b.linear((x, bt, 0), (x, bt + p.rim_height, 0), p.rim_height, FRONT, GREEN)


def _box(b: _Builder, p):
    off = b.offset_base
    w, h, d = p.width / 2.0, p.height / 2.0, p.depth / 2.0
    b.linear((-w, -h, -d - off), (w, -h, -d - off), p.width, FRONT, BLUE)
    b.linear((w + off, -h, 0), (w + off, h, 0), p.height, SIDE, RED)
    b.linear((0, h, -d), (0, h, d), p.depth, TOP, GREEN)


def _sphere(b: _Builder, p):
    off = b.offset_base
    r = p.radius
    b.diameter((-r, 0, 0), (r, 0, 0), r, TOP, BLUE)
    b.linear((r + off, -r, 0), (r + off, r, 0), 2.0 * r, SIDE, RED)


def _cylinder(b: _Builder, p):
    off = b.offset_base
    h = p.height / 2.0
    widest = max(p.radius_top, p.radius_bottom)
    b.linear((widest + off, -h, 0), (widest + off, h, 0), p.height, SIDE, RED)
    if p.radius_top:
        b.diameter((-p.radius_top, h, 0), (p.radius_top, h, 0), p.radius_top, TOP, BLUE)
    if p.radius_bottom:
        b.diameter((-p.radius_bottom, -h, 0), (p.radius_bottom, -h, 0), p.radius_bottom, FRONT, GREEN)


_LAYOUTS: Dict[str, Callable[[_Builder, object], None]] = {
    "nut": _nut,
    "screw": _screw,
    "cup": _cup,
    "dice": _dice,
    "plate": _plate,
    "box": _box,
    "sphere": _sphere,
    "cylinder": _cylinder,
}


def dimensions(descriptor: PartDescriptor, unit: Optional[str] = None) -> List[Dimension]:
    """
    部品記述子の寸法線を返す。

    引数:
        descriptor: 部品記述子
        unit: ラベルの単位（省略時は設定値、既定 "mm"）

    戻り値:
        Dimension のリスト（座標は部品のローカル座標）
    """
    if unit is None:
        unit = get_settings().unit
    builder = _Builder(max(descriptor.transform.scale), unit)
    _LAYOUTS[descriptor.family](builder, descriptor.parameters)
    return builder.items


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def camera_quadrant(camera_position: Sequence[float]) -> CameraQuadrant:
    """カメラ位置から視点の象限を求める（Y > 5 で上方視点）。"""
    x, y, z = (float(v) for v in camera_position)
    return CameraQuadrant(x=_sign(x), z=_sign(z), top=y > 5.0)


def is_visible(quadrant: CameraQuadrant, dimension: Dimension) -> bool:
    if dimension.position == TOP:
        return True
    if dimension.position == FRONT:
        return quadrant.z > 0 or not quadrant.top
    if dimension.position == SIDE:
        return quadrant.x > 0 or abs(quadrant.z) < 0.5
    return False


def visible_dimensions(quadrant: CameraQuadrant, dims: Sequence[Dimension]) -> List[Dimension]:
    """視点の象限に応じて重なりやすい寸法線を除外する。"""
    return [dim for dim in dims if is_visible(quadrant, dim)]
