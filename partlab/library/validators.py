"""
部品パラメータの検証ユーティリティ。

パラメータ仕様は部品ファミリごとの辞書で定義する。
検証に失敗した値は補正せず InvalidParameter を送出する。
"""

import math
import re
from typing import Any, Dict, Mapping

from ..errors import InvalidParameter

# 寸法（正の値）
_LENGTH = {"type": "float", "exclusive_min": 0.0}
# 0 を許す寸法
_OPTIONAL_LENGTH = {"type": "float", "min": 0.0}

# 皿の上面に載せる装飾リング（半径比とチューブ半径）
PLATE_RING_FRACTIONS = (0.3, 0.6, 0.8)
PLATE_RING_TUBE_RADIUS = 0.01


def _length(default, optional=False):
    spec = dict(_OPTIONAL_LENGTH if optional else _LENGTH)
    spec["default"] = default
    return spec


def _count(default, minimum=3):
    return {"type": "int", "default": default, "min": minimum}


PARAMETER_SPECS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "box": {
        "width": _length(1.0),
        "height": _length(1.0),
        "depth": _length(1.0),
    },
    "sphere": {
        "radius": _length(0.5),
        "segments": _count(32),
    },
    "cylinder": {
        "radius_top": _length(0.5, optional=True),
        "radius_bottom": _length(0.5, optional=True),
        "height": _length(1.0),
        "segments": _count(32),
    },
    "dice": {
        "size": _length(1.0),
        "dot_radius": _length(0.08),
    },
    "screw": {
        "shank_length": _length(1.0),
        "shank_radius": _length(0.2),
        "thread_pitch": _length(0.05),
        "thread_depth": _length(0.03, optional=True),
        "head_height": _length(0.2),
        "head_radius": _length(0.4),
        "head_type": {"type": "string", "default": "hex", "enum_values": ["hex", "round"]},
    },
    "nut": {
        "width": _length(0.8),
        "height": _length(0.2),
        "hole_radius": _length(0.2),
        "corners": _count(6),
        "chamfer": _length(0.0, optional=True),
        "thread_pitch": _length(0.0, optional=True),
        "thread_depth": _length(0.0, optional=True),
    },
    "cup": {
        "top_radius": _length(0.4),
        "bottom_radius": _length(0.35),
        "height": _length(1.4),
        "thickness": _length(0.05),
        "handle_size": _length(0.4, optional=True),
        "handle_thickness": _length(0.06),
    },
    "plate": {
        "radius": _length(1.2),
        "rim_height": _length(0.15, optional=True),
        "rim_width": _length(0.2),
        "bottom_thickness": _length(0.05),
        "segments": _count(64),
    },
}


def snake_case(name: str) -> str:
    """camelCase のキーを snake_case に変換する。"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def camel_case(name: str) -> str:
    """snake_case のキーを camelCase に変換する。"""
    head, *rest = name.split("_")
    return head + "".join(word.title() for word in rest)


def get_specs(family: str) -> Dict[str, Dict[str, Any]]:
    specs = PARAMETER_SPECS.get(family)
    if specs is None:
        raise InvalidParameter(f"Unknown geometry family: {family}")
    return specs


def normalize_keys(family: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    JSON形式のキーを snake_case にそろえ、未知のキーを拒否する。

    ファミリのパラメータは閉じた集合であり、他ファミリのフィールドは受け付けない。
    """
    specs = get_specs(family)
    result = {}
    for key, value in (params or {}).items():
        name = snake_case(key)
        if name not in specs:
            raise InvalidParameter(f"{family}: unknown parameter '{key}'")
        result[name] = value
    return result


def fill_defaults(family: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    欠落パラメータに既定値を補完する。

    引数:
        family: 部品ファミリ名
        params: snake_case のパラメータ

    戻り値:
        既定値を補完したパラメータ辞書
    """
    result = {}
    for param_name, param_def in get_specs(family).items():
        if param_name in params and params[param_name] is not None:
            result[param_name] = params[param_name]
        else:
            result[param_name] = param_def.get("default")
    return result


def _to_float(param_name, value):
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"{param_name}: cannot convert {value!r} to a number") from exc


def coerce_parameters(family: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    パラメータ値を期待される型に変換する。

    bool や数値に変換できない文字列は InvalidParameter とする。
    """
    specs = get_specs(family)
    result = {}
    for param_name, value in params.items():
        param_type = specs[param_name].get("type", "float")
        if value is None:
            result[param_name] = None
            continue
        if param_type in ("int", "float") and isinstance(value, bool):
            raise InvalidParameter(f"{param_name}: expected number, got bool")
        if param_type == "int":
            number = _to_float(param_name, value)
            if math.isfinite(number) and number != int(number):
                raise InvalidParameter(f"{param_name}: expected int, got {value}")
            result[param_name] = int(number) if math.isfinite(number) else number
        elif param_type == "float":
            result[param_name] = _to_float(param_name, value)
        elif param_type == "string":
            result[param_name] = str(value)
        else:
            result[param_name] = value
    return result


def validate_parameters(family: str, params: Mapping[str, Any]) -> None:
    """
    パラメータを仕様の制約に対して検証する。

    非有限値、範囲外の値、列挙外の値、ファミリ固有の幾何制約違反は
    InvalidParameter として送出する（値の丸めは行わない）。
    """
    for param_name, param_def in get_specs(family).items():
        value = params.get(param_name)
        if value is None:
            raise InvalidParameter(f"{family}: missing parameter '{param_name}'")

        param_type = param_def.get("type", "float")
        if param_type in ("int", "float"):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameter(f"{param_name}: expected number, got {type(value).__name__}")
            if not math.isfinite(value):
                raise InvalidParameter(f"{param_name}: value must be finite, got {value}")
            if param_type == "int" and value != int(value):
                raise InvalidParameter(f"{param_name}: expected int, got {value}")

            min_val = param_def.get("min")
            if min_val is not None and value < min_val:
                raise InvalidParameter(f"{param_name}: value {value} below minimum {min_val}")
            exclusive_min = param_def.get("exclusive_min")
            if exclusive_min is not None and value <= exclusive_min:
                raise InvalidParameter(f"{param_name}: value {value} must be greater than {exclusive_min}")

        enum_values = param_def.get("enum_values")
        if enum_values is not None and value not in enum_values:
            raise InvalidParameter(f"{param_name}: value {value} not in allowed values {enum_values}")

    check = _FAMILY_CHECKS.get(family)
    if check:
        check(params)


def _check_cylinder(p):
    if p["radius_top"] == 0 and p["radius_bottom"] == 0:
        raise InvalidParameter("cylinder: radius_top and radius_bottom cannot both be zero")


def _check_dice(p):
    if p["dot_radius"] >= p["size"] * 0.2:
        raise InvalidParameter("dice: dot_radius must be below size * 0.2 so the pips fit their face")


def _check_screw(p):
    if p["thread_depth"] >= p["shank_radius"]:
        raise InvalidParameter("screw: thread_depth must be below shank_radius")


def _check_nut(p):
    apothem = p["width"] / 2.0 * math.cos(math.pi / p["corners"])
    if p["hole_radius"] >= apothem:
        raise InvalidParameter(f"nut: hole_radius must be below the polygon apothem {apothem:.4f}")
    if p["chamfer"] * 2.0 >= p["height"]:
        raise InvalidParameter("nut: chamfer must be below height / 2")
    if p["chamfer"] >= apothem - p["hole_radius"]:
        raise InvalidParameter("nut: chamfer would cut into the hole")
    if p["thread_depth"] >= p["hole_radius"]:
        raise InvalidParameter("nut: thread_depth must be below hole_radius")


def _check_cup(p):
    if p["thickness"] >= min(p["top_radius"], p["bottom_radius"]):
        raise InvalidParameter("cup: thickness must be below both radii")
    if p["thickness"] >= p["height"]:
        raise InvalidParameter("cup: thickness must be below height")
    if p["handle_thickness"] >= p["height"] * 0.1:
        raise InvalidParameter("cup: handle_thickness must be below height * 0.1 so the handle clears the base")


def _check_plate(p):
    if p["rim_width"] >= p["radius"]:
        raise InvalidParameter("plate: rim_width must be below radius")
    if p["radius"] * PLATE_RING_FRACTIONS[0] <= PLATE_RING_TUBE_RADIUS:
        raise InvalidParameter("plate: radius is too small for the inner decorative ring")
    if p["radius"] * PLATE_RING_FRACTIONS[-1] + PLATE_RING_TUBE_RADIUS > p["radius"] - p["rim_width"]:
        raise InvalidParameter("plate: rim_width leaves no flat surface for the outer decorative ring")


_FAMILY_CHECKS = {
    "cylinder": _check_cylinder,
    "dice": _check_dice,
    "screw": _check_screw,
    "nut": _check_nut,
    "cup": _check_cup,
    "plate": _check_plate,
}


def prepare_parameters(family: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    """キー正規化・既定値補完・型変換・検証をまとめて行う。"""
    result = normalize_keys(family, params)
    result = fill_defaults(family, result)
    result = coerce_parameters(family, result)
    validate_parameters(family, result)
    return result
