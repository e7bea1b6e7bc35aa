"""
2Dプロファイルと曲線のプリミティブ。

押し出し・回転体・チューブ掃引の元になる点列を生成し、
trimesh.Trimesh（Y軸が上）へ変換する。状態を持たない純粋な計算のみ。
"""

import math
from typing import List, Sequence, Tuple

import numpy as np
import trimesh
from shapely.geometry import LineString, Polygon
from shapely.geometry.polygon import orient

from ..errors import InvalidParameter

Point2 = Tuple[float, float]

# 半径がこれ未満の点は回転軸上とみなす
AXIS_TOLERANCE = 1e-12
# 面積がこれ以下の三角形は縮退面として出力しない
AREA_TOLERANCE = 1e-12

# Z方向の押し出しをY軸上向きへ: (x, y, z) -> (x, z, -y)
_Z_UP_TO_Y_UP = trimesh.transformations.rotation_matrix(-math.pi / 2.0, [1.0, 0.0, 0.0])


def circle_points(center: Point2, radius: float, segments: int = 48) -> List[Point2]:
    """円周上の点を生成する。"""
    cx, cy = center
    pts = []
    for i in range(segments):
        theta = 2.0 * math.pi * i / segments
        x = cx + radius * math.cos(theta)
        y = cy + radius * math.sin(theta)
        pts.append((x, y))
    return pts


def regular_polygon(
    corners: int, radius: float, center: Point2 = (0.0, 0.0), start_angle: float = 0.0
) -> List[Point2]:
    """外接円半径 radius の正多角形の頂点列（反時計回り）を生成する。"""
    if corners < 3:
        raise InvalidParameter(f"corners: polygon needs at least 3 corners, got {corners}")
    cx, cy = center
    pts = []
    for i in range(int(corners)):
        angle = start_angle + 2.0 * math.pi * i / corners
        pts.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return pts


def cubic_bezier(p0, p1, p2, p3, divisions: int = 64) -> np.ndarray:
    """
    3次ベジェ曲線を divisions 区間でサンプリングする。

    2D・3Dどちらの制御点でも動作し、端点を含む divisions + 1 点を返す。
    """
    t = np.linspace(0.0, 1.0, int(divisions) + 1)[:, None]
    p0, p1, p2, p3 = (np.asarray(p, dtype=float) for p in (p0, p1, p2, p3))
    u = 1.0 - t
    return u ** 3 * p0 + 3.0 * u ** 2 * t * p1 + 3.0 * u * t ** 2 * p2 + t ** 3 * p3


def _dedupe(points: np.ndarray) -> np.ndarray:
    """連続する重複点を取り除く。"""
    if len(points) < 2:
        return points
    step = np.linalg.norm(np.diff(points, axis=0), axis=1)
    keep = np.concatenate([[True], step > AXIS_TOLERANCE])
    return points[keep]


class ProfilePath:
    """
    直線とベジェ曲線をつないだ2Dパス。

    使用例:
        path = ProfilePath()
        path.move_to(0.0, 0.0)
        path.line_to(1.0, 0.0)
        path.bezier_curve_to(1.2, 0.0, 1.4, 0.1, 1.5, 0.3)
        points = path.points()
    """

    def __init__(self):
        self._points: List[np.ndarray] = []

    @property
    def current(self) -> np.ndarray:
        if not self._points:
            raise ValueError("path has no current point; call move_to first")
        return self._points[-1][-1]

    def move_to(self, x: float, y: float) -> "ProfilePath":
        self._points.append(np.array([[x, y]], dtype=float))
        return self

    def line_to(self, x: float, y: float) -> "ProfilePath":
        if not self._points:
            raise ValueError("path has no current point; call move_to first")
        self._points.append(np.array([[x, y]], dtype=float))
        return self

    def bezier_curve_to(
        self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float, divisions: int = 64
    ) -> "ProfilePath":
        start = self.current
        curve = cubic_bezier(start, (c1x, c1y), (c2x, c2y), (x, y), divisions)
        self._points.append(curve[1:])
        return self

    def points(self) -> np.ndarray:
        """連続重複を除いた点列 (n, 2) を返す。"""
        if not self._points:
            return np.zeros((0, 2))
        return _dedupe(np.vstack(self._points))


def helix_points(
    length: float, pitch: float, radius: float, depth: float, points_per_turn: int = 64
) -> np.ndarray:
    """
    ねじ山の螺旋ガイド曲線を生成する。

    turns = floor(length / pitch) として turns * points_per_turn 点を
    θ ∈ [0, 2π·turns] に等間隔で配置する。半径は radius + depth·sin(θ)、
    高さは θ/(2π)·pitch − length/2（長さ方向の中心が原点）。
    depth を負にすると内ねじ（ナット）側のガイドになる。
    """
    if pitch <= 0:
        raise InvalidParameter(f"thread_pitch: must be positive, got {pitch}")
    turns = int(math.floor(length / pitch + 1e-9))
    count = turns * int(points_per_turn)
    if count <= 0:
        return np.zeros((0, 3))
    theta = np.linspace(0.0, 2.0 * math.pi * turns, count)
    r = radius + depth * np.sin(theta)
    y = theta / (2.0 * math.pi) * pitch - length / 2.0
    return np.column_stack([r * np.cos(theta), y, r * np.sin(theta)])


def lathe(profile, segments: int = 32, closed: bool = False) -> trimesh.Trimesh:
    """
    (r, y) プロファイルをY軸まわりに360°回転させたメッシュを生成する。

    プロファイルは断面を反時計回り（内側が進行方向の左）に辿ること。
    軸上（r = 0）の点は1頂点にまとめ、三角形ファンで閉じる。
    両端が軸上にない開いたプロファイルは開いた面になる。
    """
    if segments < 3:
        raise InvalidParameter(f"segments: lathe needs at least 3 segments, got {segments}")
    segments = int(segments)
    pts = _dedupe(np.asarray(profile, dtype=float).reshape(-1, 2))
    if closed and len(pts) > 2 and np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    if len(pts) < 2:
        raise InvalidParameter("profile: lathe needs at least 2 distinct points")
    radii = pts[:, 0].copy()
    radii[np.abs(radii) < AXIS_TOLERANCE] = 0.0
    if np.any(radii < 0):
        raise InvalidParameter("profile: lathe radius must not be negative")
    line = np.vstack([pts, pts[:1]]) if closed else pts
    if not LineString(line).is_simple:
        raise InvalidParameter("profile: lathe profile must not self-intersect")

    angles = 2.0 * math.pi * np.arange(segments) / segments
    sin_a = np.sin(angles)
    cos_a = np.cos(angles)

    vertices = []
    index = []  # プロファイル点ごとの先頭頂点番号
    for r, y in zip(radii, pts[:, 1]):
        index.append(len(vertices))
        if r == 0.0:
            vertices.append((0.0, y, 0.0))
        else:
            vertices.extend(zip(r * sin_a, np.full(segments, y), r * cos_a))

    on_axis = radii == 0.0

    def vid(i, j):
        return index[i] if on_axis[i] else index[i] + j % segments

    edges = [(i, i + 1) for i in range(len(pts) - 1)]
    if closed:
        edges.append((len(pts) - 1, 0))

    faces = []
    for a, b in edges:
        if on_axis[a] and on_axis[b]:
            continue
        for j in range(segments):
            if not on_axis[a]:
                faces.append((vid(a, j), vid(a, j + 1), vid(b, j)))
            if not on_axis[b]:
                faces.append((vid(a, j + 1), vid(b, j + 1), vid(b, j)))
    if not faces:
        raise InvalidParameter("profile: lathe profile lies entirely on the axis")

    return trimesh.Trimesh(vertices=np.array(vertices), faces=np.array(faces, dtype=np.int64))


def _inset_ring(ring: np.ndarray, distance: float) -> np.ndarray:
    """反時計回りのリングを各辺から distance だけ内側へマイター offset する。"""
    prev_edge = ring - np.roll(ring, 1, axis=0)
    next_edge = np.roll(ring, -1, axis=0) - ring
    n0 = np.column_stack([-prev_edge[:, 1], prev_edge[:, 0]])
    n1 = np.column_stack([-next_edge[:, 1], next_edge[:, 0]])
    n0 /= np.linalg.norm(n0, axis=1)[:, None]
    n1 /= np.linalg.norm(n1, axis=1)[:, None]
    miter = (n0 + n1) / (1.0 + np.sum(n0 * n1, axis=1))[:, None]
    return ring + distance * miter


def _ring_coords(ring) -> np.ndarray:
    coords = np.asarray(ring.coords, dtype=float)
    return coords[:-1]


def _cap(outer: np.ndarray, holes: List[np.ndarray], z: float, up: bool):
    """穴付き断面をearcutで三角形分割し、法線が±Zを向く面を返す。"""
    vertices, faces = trimesh.creation.triangulate_polygon(
        Polygon(outer, holes), engine="earcut"
    )
    vertices = np.asarray(vertices, dtype=float)
    faces = np.asarray(faces, dtype=np.int64)
    tri = vertices[faces]
    e1 = tri[:, 1] - tri[:, 0]
    e2 = tri[:, 2] - tri[:, 0]
    area = e1[:, 0] * e2[:, 1] - e1[:, 1] * e2[:, 0]
    faces[area < 0] = faces[area < 0][:, ::-1]
    faces = faces[np.abs(area) * 0.5 > AREA_TOLERANCE]
    if not up:
        faces = faces[:, ::-1]
    vertices3 = np.column_stack([vertices, np.full(len(vertices), z)])
    return vertices3, faces


def _loft(layers) -> trimesh.Trimesh:
    """
    同じ頂点数のリングを持つ断面層 [(z, outer, holes), ...] を側面でつなぎ、
    最下層と最上層に蓋をする。
    """
    vertices = []
    faces = []
    count = 0

    def add(points):
        nonlocal count
        start = count
        vertices.append(points)
        count += len(points)
        return start

    ring_count = 1 + len(layers[0][2])
    for k in range(len(layers) - 1):
        z0, outer0, holes0 = layers[k]
        z1, outer1, holes1 = layers[k + 1]
        rings0 = [outer0] + list(holes0)
        rings1 = [outer1] + list(holes1)
        for ring_index in range(ring_count):
            lower = rings0[ring_index]
            upper = rings1[ring_index]
            n = len(lower)
            lo = add(np.column_stack([lower, np.full(n, z0)]))
            up = add(np.column_stack([upper, np.full(n, z1)]))
            for i in range(n):
                i1 = (i + 1) % n
                faces.append((lo + i, lo + i1, up + i1))
                faces.append((lo + i, up + i1, up + i))

    z_bottom, outer_bottom, holes_bottom = layers[0]
    cap_vertices, cap_faces = _cap(outer_bottom, holes_bottom, z_bottom, up=False)
    faces.extend(cap_faces + add(cap_vertices))
    z_top, outer_top, holes_top = layers[-1]
    cap_vertices, cap_faces = _cap(outer_top, holes_top, z_top, up=True)
    faces.extend(cap_faces + add(cap_vertices))

    # 側面と蓋の重複頂点は process=True で結合され、閉じたメッシュになる
    return trimesh.Trimesh(
        vertices=np.vstack(vertices), faces=np.array(faces, dtype=np.int64), process=True
    )


def extrude_profile(
    outline: Sequence[Point2],
    holes: Sequence[Sequence[Point2]],
    height: float,
    chamfer: float = 0.0,
) -> trimesh.Trimesh:
    """
    穴付き2Dプロファイルを高さ height だけ押し出す。

    結果はY軸が押し出し方向で、Y ∈ [-height/2, height/2] に中心合わせされる。
    chamfer > 0 の場合は両端面で外形を chamfer だけ内側へ面取りする（穴は面取りしない）。
    """
    if not height > 0:
        raise InvalidParameter(f"height: must be positive, got {height}")
    poly = Polygon(outline, holes)
    if not poly.is_valid or poly.is_empty:
        raise InvalidParameter("profile: outline and holes do not form a valid polygon")
    poly = orient(poly, sign=1.0)

    if chamfer <= 0:
        mesh = trimesh.creation.extrude_polygon(
            poly, height=height, engine="earcut"
        )
        mesh.apply_translation((0.0, 0.0, -height / 2.0))
        # earcutが穴と外形の頂点を結ぶ際に一直線上の三角形を作ることがある
        mesh.update_faces(mesh.area_faces > AREA_TOLERANCE)
        mesh.remove_unreferenced_vertices()
    else:
        if chamfer * 2.0 >= height:
            raise InvalidParameter(f"chamfer: must be below half the height, got {chamfer}")
        outer = _ring_coords(poly.exterior)
        holes_xy = [_ring_coords(ring) for ring in poly.interiors]
        inset = _inset_ring(outer, chamfer)
        inset_poly = Polygon(inset, holes_xy)
        inset_shell = Polygon(inset)
        if not (inset_shell.is_valid and inset_shell.exterior.is_ccw and inset_poly.is_valid):
            raise InvalidParameter(f"chamfer: {chamfer} is too large for this profile")
        half = height / 2.0
        layers = [
            (-half, inset, holes_xy),
            (-half + chamfer, outer, holes_xy),
            (half - chamfer, outer, holes_xy),
            (half, inset, holes_xy),
        ]
        mesh = _loft(layers)

    mesh.apply_transform(_Z_UP_TO_Y_UP)
    return mesh


def sweep_tube(path, radius: float, radial_segments: int = 8) -> trimesh.Trimesh:
    """
    3Dポリラインに沿って円断面のチューブを掃引し、両端に蓋をする。

    断面の向きは平行移動フレームで決め、ねじれを抑える。
    """
    if not radius > 0:
        raise InvalidParameter(f"radius: tube radius must be positive, got {radius}")
    if radial_segments < 3:
        raise InvalidParameter(f"radial_segments: need at least 3, got {radial_segments}")
    pts = _dedupe(np.asarray(path, dtype=float).reshape(-1, 3))
    if len(pts) < 2:
        raise InvalidParameter("path: tube needs at least 2 distinct points")

    tangents = np.empty_like(pts)
    tangents[0] = pts[1] - pts[0]
    tangents[-1] = pts[-1] - pts[-2]
    tangents[1:-1] = pts[2:] - pts[:-2]
    tangents /= np.linalg.norm(tangents, axis=1)[:, None]

    seed = np.eye(3)[np.argmin(np.abs(tangents[0]))]
    normals = np.empty_like(pts)
    normals[0] = np.cross(tangents[0], seed)
    normals[0] /= np.linalg.norm(normals[0])
    for i in range(1, len(pts)):
        n = normals[i - 1] - np.dot(normals[i - 1], tangents[i]) * tangents[i]
        normals[i] = n / np.linalg.norm(n)
    binormals = np.cross(tangents, normals)

    m = int(radial_segments)
    angles = 2.0 * math.pi * np.arange(m) / m
    offsets = (
        np.cos(angles)[None, :, None] * normals[:, None, :]
        + np.sin(angles)[None, :, None] * binormals[:, None, :]
    )
    rings = pts[:, None, :] + radius * offsets
    vertices = rings.reshape(-1, 3)

    faces = []
    for i in range(len(pts) - 1):
        a = i * m
        c = (i + 1) * m
        for k in range(m):
            k1 = (k + 1) % m
            faces.append((a + k, a + k1, c + k))
            faces.append((a + k1, c + k1, c + k))

    start = len(vertices)
    end = start + 1
    last = (len(pts) - 1) * m
    for k in range(m):
        k1 = (k + 1) % m
        faces.append((start, k1, k))
        faces.append((end, last + k, last + k1))
    vertices = np.vstack([vertices, pts[0], pts[-1]])

    return trimesh.Trimesh(vertices=vertices, faces=np.array(faces, dtype=np.int64))
