"""
部品記述子（PartDescriptor）と部品ファミリごとのパラメータレコード。

記述子は不変の値オブジェクトで、編集時は with_* で変更済みのコピーを作る。
JSON表現は camelCase のキー、Python側は snake_case のフィールドを使う。
"""

import math
import re
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

from ..errors import InvalidParameter
from .validators import PARAMETER_SPECS, camel_case, prepare_parameters, validate_parameters

Vec3 = Tuple[float, float, float]

CATEGORIES = ("mechanical", "geometric", "everyday")

# 旧カタログの型名
FAMILY_ALIASES = {
    "diceCube": "dice",
    "complexScrew": "screw",
    "complexNut": "nut",
    "complexCup": "cup",
    "complexPlate": "plate",
}

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _default(family, name):
    return PARAMETER_SPECS[family][name]["default"]


class _Parameters:
    """パラメータレコードの共通処理。生成時に検証する。"""

    family: ClassVar[str] = ""

    def __post_init__(self):
        validate_parameters(self.family, asdict(self))

    def to_json(self) -> Dict[str, Any]:
        return {camel_case(f.name): getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class BoxParameters(_Parameters):
    family: ClassVar[str] = "box"
    width: float = _default("box", "width")
    height: float = _default("box", "height")
    depth: float = _default("box", "depth")


@dataclass(frozen=True)
class SphereParameters(_Parameters):
    family: ClassVar[str] = "sphere"
    radius: float = _default("sphere", "radius")
    segments: int = _default("sphere", "segments")


@dataclass(frozen=True)
class CylinderParameters(_Parameters):
    family: ClassVar[str] = "cylinder"
    radius_top: float = _default("cylinder", "radius_top")
    radius_bottom: float = _default("cylinder", "radius_bottom")
    height: float = _default("cylinder", "height")
    segments: int = _default("cylinder", "segments")


@dataclass(frozen=True)
class DiceParameters(_Parameters):
    family: ClassVar[str] = "dice"
    size: float = _default("dice", "size")
    dot_radius: float = _default("dice", "dot_radius")


@dataclass(frozen=True)
class ScrewParameters(_Parameters):
    family: ClassVar[str] = "screw"
    shank_length: float = _default("screw", "shank_length")
    shank_radius: float = _default("screw", "shank_radius")
    thread_pitch: float = _default("screw", "thread_pitch")
    thread_depth: float = _default("screw", "thread_depth")
    head_height: float = _default("screw", "head_height")
    head_radius: float = _default("screw", "head_radius")
    head_type: str = _default("screw", "head_type")


@dataclass(frozen=True)
class NutParameters(_Parameters):
    family: ClassVar[str] = "nut"
    width: float = _default("nut", "width")
    height: float = _default("nut", "height")
    hole_radius: float = _default("nut", "hole_radius")
    corners: int = _default("nut", "corners")
    chamfer: float = _default("nut", "chamfer")
    thread_pitch: float = _default("nut", "thread_pitch")
    thread_depth: float = _default("nut", "thread_depth")


@dataclass(frozen=True)
class CupParameters(_Parameters):
    family: ClassVar[str] = "cup"
    top_radius: float = _default("cup", "top_radius")
    bottom_radius: float = _default("cup", "bottom_radius")
    height: float = _default("cup", "height")
    thickness: float = _default("cup", "thickness")
    handle_size: float = _default("cup", "handle_size")
    handle_thickness: float = _default("cup", "handle_thickness")


@dataclass(frozen=True)
class PlateParameters(_Parameters):
    family: ClassVar[str] = "plate"
    radius: float = _default("plate", "radius")
    rim_height: float = _default("plate", "rim_height")
    rim_width: float = _default("plate", "rim_width")
    bottom_thickness: float = _default("plate", "bottom_thickness")
    segments: int = _default("plate", "segments")


PARAMETER_RECORDS: Dict[str, Type[_Parameters]] = {
    cls.family: cls
    for cls in (
        BoxParameters,
        SphereParameters,
        CylinderParameters,
        DiceParameters,
        ScrewParameters,
        NutParameters,
        CupParameters,
        PlateParameters,
    )
}


def canonical_family(tag: str) -> str:
    family = FAMILY_ALIASES.get(tag, tag)
    if family not in PARAMETER_RECORDS:
        raise InvalidParameter(f"Unknown geometry family: {tag}")
    return family


def make_parameters(family: str, raw: Optional[Mapping[str, Any]] = None):
    """JSON形式のパラメータ辞書からファミリのレコードを生成する。"""
    family = canonical_family(family)
    params = prepare_parameters(family, raw or {})
    return PARAMETER_RECORDS[family](**params)


def _vec3(value, name) -> Vec3:
    if isinstance(value, Mapping):
        value = (value.get("x", 0.0), value.get("y", 0.0), value.get("z", 0.0))
    try:
        x, y, z = (float(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"{name}: expected three numbers, got {value!r}") from exc
    if not all(math.isfinite(v) for v in (x, y, z)):
        raise InvalidParameter(f"{name}: values must be finite, got {value!r}")
    return (x, y, z)


def _replace_fields(record, label: str, changes: Mapping[str, Any]):
    """未知のフィールドを InvalidParameter として拒否してから replace する。"""
    known = {f.name for f in fields(record)}
    for key in changes:
        if key not in known:
            raise InvalidParameter(f"{label}: unknown field '{key}'")
    return replace(record, **changes)


def _vec3_json(value: Vec3) -> Dict[str, float]:
    return {"x": value[0], "y": value[1], "z": value[2]}


@dataclass(frozen=True)
class GeometrySpec:
    """ファミリタグとそのパラメータレコードの組。"""

    family: str
    parameters: Any

    def __post_init__(self):
        family = canonical_family(self.family)
        object.__setattr__(self, "family", family)
        if not isinstance(self.parameters, PARAMETER_RECORDS[family]):
            raise InvalidParameter(
                f"{family}: parameters must be {PARAMETER_RECORDS[family].__name__}, "
                f"got {type(self.parameters).__name__}"
            )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "GeometrySpec":
        family = canonical_family(data.get("type") or data.get("family") or "")
        return cls(family=family, parameters=make_parameters(family, data.get("parameters")))

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.family, "parameters": self.parameters.to_json()}


@dataclass(frozen=True)
class Material:
    color: str = "#808080"
    metalness: Optional[float] = None
    roughness: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.color, str) or not _COLOR_RE.match(self.color):
            raise InvalidParameter(f"color: expected '#rrggbb', got {self.color!r}")
        for name in ("metalness", "roughness"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise InvalidParameter(f"{name}: must be within [0, 1], got {value!r}")

    @classmethod
    def from_json(cls, data: Optional[Mapping[str, Any]]) -> "Material":
        data = data or {}
        return cls(
            color=data.get("color", "#808080"),
            metalness=data.get("metalness"),
            roughness=data.get("roughness"),
        )

    def to_json(self) -> Dict[str, Any]:
        result = {"color": self.color}
        if self.metalness is not None:
            result["metalness"] = self.metalness
        if self.roughness is not None:
            result["roughness"] = self.roughness
        return result


@dataclass(frozen=True)
class Transform:
    """位置・回転（ラジアン、XYZ順）・非一様スケール。"""

    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    def __post_init__(self):
        for name in ("position", "rotation", "scale"):
            object.__setattr__(self, name, _vec3(getattr(self, name), name))
        if any(s <= 0 for s in self.scale):
            raise InvalidParameter(f"scale: components must be positive, got {self.scale}")

    @classmethod
    def from_json(cls, data: Optional[Mapping[str, Any]]) -> "Transform":
        data = data or {}
        return cls(
            position=data.get("position", (0.0, 0.0, 0.0)),
            rotation=data.get("rotation", (0.0, 0.0, 0.0)),
            scale=data.get("scale", (1.0, 1.0, 1.0)),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "position": _vec3_json(self.position),
            "rotation": _vec3_json(self.rotation),
            "scale": _vec3_json(self.scale),
        }


@dataclass(frozen=True)
class PartDescriptor:
    """カタログの1部品。編集は常にコピーで行う。"""

    id: str
    name: str
    category: str
    geometry: GeometrySpec
    material: Material = field(default_factory=Material)
    transform: Transform = field(default_factory=Transform)
    keywords: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise InvalidParameter(f"category: expected one of {CATEGORIES}, got {self.category!r}")
        object.__setattr__(self, "keywords", tuple(self.keywords))

    @property
    def family(self) -> str:
        return self.geometry.family

    @property
    def parameters(self):
        return self.geometry.parameters

    def with_changes(self, **changes) -> "PartDescriptor":
        return replace(self, **changes)

    def with_parameters(self, **changes) -> "PartDescriptor":
        """パラメータの一部を変更したコピーを返す（camelCase のキーも可）。"""
        current = self.parameters.to_json()
        for key, value in changes.items():
            current[camel_case(key)] = value
        geometry = GeometrySpec(self.family, make_parameters(self.family, current))
        return replace(self, geometry=geometry)

    def with_material(self, **changes) -> "PartDescriptor":
        return replace(self, material=_replace_fields(self.material, "material", changes))

    def with_transform(self, **changes) -> "PartDescriptor":
        return replace(self, transform=_replace_fields(self.transform, "transform", changes))

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "PartDescriptor":
        """JSON辞書から PartDescriptor を生成する。"""
        try:
            part_id = data["id"]
            geometry = data["geometry"]
        except KeyError as exc:
            raise InvalidParameter(f"descriptor: missing field {exc.args[0]!r}") from exc
        transform = Transform.from_json(
            {key: data[key] for key in ("position", "rotation", "scale") if key in data}
        )
        return cls(
            id=part_id,
            name=data.get("name", part_id),
            category=data.get("category", "geometric"),
            geometry=GeometrySpec.from_json(geometry),
            material=Material.from_json(data.get("material")),
            transform=transform,
            keywords=tuple(data.get("keywords", ())),
        )

    def to_json(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "keywords": list(self.keywords),
            "geometry": self.geometry.to_json(),
            "material": self.material.to_json(),
        }
        result.update(self.transform.to_json())
        return result
