"""
食器（カップ・皿）のメッシュ生成関数。

どちらも断面プロファイルの回転体で、原点は底面の中心。
"""

import numpy as np

from ...mesh import MeshGroup
from ..models import CupParameters, PlateParameters
from ..profiles import ProfilePath, circle_points, cubic_bezier, lathe, sweep_tube
from ..validators import PLATE_RING_FRACTIONS, PLATE_RING_TUBE_RADIUS

CUP_SEGMENTS = 32
HANDLE_DIVISIONS = 20
HANDLE_RADIAL_SEGMENTS = 8

# 皿の装飾リングの断面分割数
RING_TUBE_SEGMENTS = 12


def _outer_wall(params: CupParameters, y: float) -> float:
    """高さ y での外壁の半径。"""
    return params.bottom_radius + (params.top_radius - params.bottom_radius) * y / params.height


def cup_profile(params: CupParameters) -> np.ndarray:
    """
    外側の底 → 外壁上端 → 内壁上端 → 内側の底 の (r, y) プロファイル。

    内壁は外壁を半径方向に thickness だけ内側へ平行移動した線分で、
    テーパーの大小にかかわらず外壁と交差しない。
    """
    rt = params.top_radius
    rb = params.bottom_radius
    h = params.height
    t = params.thickness
    return np.array(
        [
            (0.0, 0.0),
            (rb, 0.0),
            (rt, h),
            (rt - t, h),
            (_outer_wall(params, t) - t, t),
            (0.0, t),
        ]
    )


def handle_path(params: CupParameters) -> np.ndarray:
    """外壁の高さ 0.9h から 0.1h へ張り出すC字型の取っ手の中心線。"""
    h = params.height
    reach = params.top_radius + params.handle_size

    top = 0.9 * h
    bottom = 0.1 * h
    return cubic_bezier(
        (_outer_wall(params, top), top, 0.0),
        (reach, top, 0.0),
        (reach, bottom, 0.0),
        (_outer_wall(params, bottom), bottom, 0.0),
        HANDLE_DIVISIONS,
    )


def generate_cup(params: CupParameters) -> MeshGroup:
    profile = cup_profile(params)
    group = MeshGroup("cup", profile=profile)
    group.add("body", lathe(profile, segments=CUP_SEGMENTS))
    group.add(
        "handle",
        sweep_tube(handle_path(params), params.handle_thickness, HANDLE_RADIAL_SEGMENTS),
    )
    return group


def plate_profile(params: PlateParameters) -> np.ndarray:
    """
    皿の断面を生成する。

    底面から外周へ向かうベジェ曲線と、リム上端から内側へ戻るベジェ曲線で
    縁を作り、上面を通って回転軸へ戻る閉じたプロファイル。
    """
    r = params.radius
    w = params.rim_width
    bt = params.bottom_thickness
    rh = params.rim_height

    path = ProfilePath()
    path.move_to(0.0, 0.0)
    path.line_to(r - w, 0.0)
    path.bezier_curve_to(r - w * 0.8, 0.0, r - w * 0.2, bt * 0.1, r, bt)
    path.line_to(r, bt + rh)
    path.bezier_curve_to(r - w * 0.2, bt + rh, r - w * 0.8, bt + rh * 0.9, r - w, bt)
    path.line_to(0.0, bt)
    path.line_to(0.0, 0.0)
    return path.points()


def generate_plate(params: PlateParameters) -> MeshGroup:
    """
    皿のメッシュを生成する。

    本体の回転体に加え、上面 (bottom_thickness + 0.01) に半径比 0.3/0.6/0.8 の
    細いトーラスを3本載せる。
    """
    profile = plate_profile(params)
    group = MeshGroup("plate", profile=profile)
    group.add("body", lathe(profile, segments=params.segments, closed=True))

    ring_y = params.bottom_thickness + PLATE_RING_TUBE_RADIUS
    for index, fraction in enumerate(PLATE_RING_FRACTIONS, start=1):
        section = circle_points((params.radius * fraction, ring_y), PLATE_RING_TUBE_RADIUS, RING_TUBE_SEGMENTS)
        group.add(f"ring-{index}", lathe(section, segments=params.segments, closed=True))
    return group
