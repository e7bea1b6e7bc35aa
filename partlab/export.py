"""
メッシュのエクスポート（バイナリSTL・ASCII OBJ）。

FBX は形式として認識するが未実装で、常に UnsupportedFormat を送出する。
"""

import enum
import io
import os
from typing import Tuple, Union

import numpy as np
import trimesh

from .errors import EmptyMesh, UnsupportedFormat
from .mesh import MeshGroup
from .utils import ensure_dir, slugify_name


class ExportFormat(enum.Enum):
    STL = "stl"
    OBJ = "obj"
    FBX = "fbx"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token) -> "ExportFormat":
        if isinstance(token, cls):
            return token
        value = str(token or "").strip().lower().lstrip(".")
        for fmt in cls:
            if fmt.value == value:
                return fmt
        raise UnsupportedFormat(f"Unknown export format: {token}")


def _as_mesh(mesh: Union[trimesh.Trimesh, MeshGroup]) -> trimesh.Trimesh:
    if isinstance(mesh, MeshGroup):
        if not mesh.parts:
            raise EmptyMesh(f"{mesh.name}: nothing to export")
        return mesh.flatten()
    return mesh


def encode_stl(mesh: trimesh.Trimesh) -> bytes:
    """バイナリSTL。面法線は trimesh が辺ベクトルの外積から求めた単位ベクトル。"""
    return mesh.export(file_type="stl")


def encode_obj(mesh: trimesh.Trimesh) -> bytes:
    """頂点と面のみのASCII OBJ（面は1始まり）。"""
    text = mesh.export(
        file_type="obj", include_normals=False, include_color=False, include_texture=False
    )
    return text.encode("utf-8")


def export_mesh(mesh: Union[trimesh.Trimesh, MeshGroup], fmt) -> bytes:
    """
    メッシュを指定形式のバイト列に変換する。

    引数:
        mesh: trimesh.Trimesh または MeshGroup（flatten して出力）
        fmt: ExportFormat または "stl" / "obj" / "fbx"

    戻り値:
        エンコード済みのバイト列
    """
    fmt = ExportFormat.parse(fmt)
    if fmt is ExportFormat.FBX:
        raise UnsupportedFormat("FBX export is not supported")
    mesh = _as_mesh(mesh)
    if len(mesh.faces) == 0:
        raise EmptyMesh("mesh has no faces")
    if fmt is ExportFormat.STL:
        return encode_stl(mesh)
    return encode_obj(mesh)


def export_filename(name: str, fmt) -> str:
    return f"{slugify_name(name)}.{ExportFormat.parse(fmt).extension}"


def write_payload(payload: bytes, name: str, fmt, out_dir: str) -> str:
    """エンコード済みのバイト列を命名規則どおりのファイル名で書き出す。"""
    ensure_dir(out_dir)
    path = os.path.join(out_dir, export_filename(name, fmt))
    with open(path, "wb") as f:
        f.write(payload)
    return path


def write_export(mesh, name: str, fmt, out_dir: str) -> str:
    """エクスポートしたファイルを out_dir に書き出し、パスを返す。"""
    return write_payload(export_mesh(mesh, fmt), name, fmt, out_dir)


def read_stl(data: bytes) -> Tuple[np.ndarray, np.ndarray]:
    """バイナリSTLを (法線 (n, 3), 三角形 (n, 3, 3)) に復号する。"""
    mesh = trimesh.load(io.BytesIO(data), file_type="stl", force="mesh", process=False)
    return np.asarray(mesh.face_normals, dtype=np.float64), np.asarray(mesh.triangles, dtype=np.float64)


def read_obj(text) -> Tuple[np.ndarray, np.ndarray]:
    """OBJ を (頂点 (n, 3), 0始まりの面 (m, 3)) に復号する。"""
    if isinstance(text, str):
        text = text.encode("utf-8")
    mesh = trimesh.load(io.BytesIO(text), file_type="obj", force="mesh", process=False)
    return np.asarray(mesh.vertices, dtype=np.float64), np.asarray(mesh.faces, dtype=np.int64)
