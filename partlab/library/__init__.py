"""
部品ライブラリモジュール - 公開API

このモジュールは以下の主要インターフェースを提供する:
1. 部品カタログの読み込みと検索
2. 部品記述子とファミリ別パラメータ
3. パラメータからのメッシュ生成
"""

from .catalog import PartsCatalog, get_catalog, reload_catalog
from .models import (
    GeometrySpec,
    Material,
    PartDescriptor,
    Transform,
    make_parameters,
)
from .generators import FAMILIES, ORIGIN_BASE, ORIGIN_CENTER, build_group
from .validators import validate_parameters, fill_defaults

__all__ = [
    # カタログ
    "PartsCatalog",
    "get_catalog",
    "reload_catalog",
    # 記述子
    "GeometrySpec",
    "Material",
    "PartDescriptor",
    "Transform",
    "make_parameters",
    # 生成
    "FAMILIES",
    "ORIGIN_BASE",
    "ORIGIN_CENTER",
    "build_group",
    # 検証
    "validate_parameters",
    "fill_defaults",
]
