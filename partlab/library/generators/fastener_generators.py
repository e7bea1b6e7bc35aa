"""
締結部品（ねじ・ナット）のメッシュ生成関数。
"""

import math

import numpy as np
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from ...mesh import MeshGroup
from ..models import NutParameters, ScrewParameters
from ..profiles import extrude_profile, helix_points, lathe, regular_polygon

# 丸頭は32角形で近似する
ROUND_HEAD_CORNERS = 32
SHANK_SEGMENTS = 32
HOLE_SEGMENTS = 48


def generate_screw(params: ScrewParameters) -> MeshGroup:
    """
    ねじのメッシュを生成する。

    引数:
        params: 軸長・軸半径・ねじピッチ/深さ・頭部寸法・頭部形状

    戻り値:
        head（六角柱または丸頭）、shank（円柱）、thread（螺旋ガイド曲線）のグループ。
        原点は軸の中心で、頭部は Y = shank_length/2 + head_height/2 に載る。
    """
    length = params.shank_length
    radius = params.shank_radius
    group = MeshGroup("screw")

    # 頭部
    corners = 6 if params.head_type == "hex" else ROUND_HEAD_CORNERS
    head_outline = regular_polygon(corners, params.head_radius)
    head = extrude_profile(head_outline, [], params.head_height)
    group.add("head", head, offset=(0.0, length / 2.0 + params.head_height / 2.0, 0.0))

    # 軸部
    half = length / 2.0
    shank_profile = np.array([(0.0, -half), (radius, -half), (radius, half), (0.0, half)])
    group.add("shank", lathe(shank_profile, segments=SHANK_SEGMENTS))
    group.profile = shank_profile

    # ねじ山
    thread = helix_points(length, params.thread_pitch, radius, params.thread_depth)
    if len(thread):
        group.add_curve("thread", thread)
    return group


def nut_profile(params: NutParameters) -> Polygon:
    """外接円半径 width/2 の正多角形から円形の穴を切り抜いた断面。"""
    outline = regular_polygon(params.corners, params.width / 2.0)
    # 穴の頂点は外形の角と同じ方位に置かない
    hole = regular_polygon(HOLE_SEGMENTS, params.hole_radius, start_angle=math.pi / HOLE_SEGMENTS)
    return orient(Polygon(outline, [hole]), sign=1.0)


def generate_nut(params: NutParameters) -> MeshGroup:
    """
    ナットのメッシュを生成する。

    穴は押し出し前の2D断面に切り抜くため、3Dブーリアンは使わない。
    chamfer > 0 の場合は上下の端面で外形を面取りする。
    thread_pitch > 0 の場合は穴の内側に雌ねじのガイド曲線を加える。
    """
    profile = nut_profile(params)
    group = MeshGroup("nut", profile=profile)
    body = extrude_profile(
        list(profile.exterior.coords)[:-1],
        [list(ring.coords)[:-1] for ring in profile.interiors],
        params.height,
        chamfer=params.chamfer,
    )
    group.add("body", body)

    if params.thread_pitch > 0:
        thread = helix_points(params.height, params.thread_pitch, params.hole_radius, -params.thread_depth)
        if len(thread):
            group.add_curve("thread", thread)
    return group

