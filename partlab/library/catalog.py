"""
部品記述子を読み込み、索引化するカタログモジュール。

主な責務:
1. library/parts/<category>/ から全てのJSON部品記述子を読み込む
2. キーワード・カテゴリの索引を構築する
3. 名前・キーワード・ID・カテゴリで検索するAPIを提供する
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from ..config import get_settings
from ..errors import PartLabError, UnknownPart
from .models import CATEGORIES, PartDescriptor

ALL = "all"


class PartsCatalog:
    """
    全ての部品記述子を扱うカタログの中心クラス。

    使用例:
        catalog = PartsCatalog()
        catalog.load()  # library/parts/ から全件読み込み

        # IDで取得
        nut = catalog.get("mech_2")

        # 名前またはキーワードで検索
        matches = catalog.search("screw")

        # カテゴリ内の全件取得
        tableware = catalog.by_category("everyday")
    """

    def __init__(self, parts_dir: Optional[str] = None):
        if parts_dir is None:
            parts_dir = get_settings().parts_dir or Path(__file__).parent / "parts"
        self.parts_dir = Path(parts_dir)
        self._parts: Dict[str, PartDescriptor] = {}
        self._keyword_index: Dict[str, List[str]] = {}  # キーワード -> [part_id]
        self._category_index: Dict[str, List[str]] = {}  # カテゴリ -> [part_id]

    def load(self) -> None:
        """JSONファイルから部品記述子を読み込む。"""
        self._parts.clear()
        self._keyword_index.clear()
        self._category_index.clear()

        if not self.parts_dir.exists():
            return

        for category_dir in sorted(self.parts_dir.iterdir()):
            if not category_dir.is_dir() or category_dir.name.startswith("_"):
                continue
            for json_file in sorted(category_dir.glob("*.json")):
                self._load_part(json_file)

        self._build_indices()

    def _load_part(self, path: Path) -> None:
        """単一の部品記述子を読み込む。"""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            data.setdefault("category", path.parent.name)
            part = PartDescriptor.from_json(data)
            self._parts[part.id] = part
        except (json.JSONDecodeError, PartLabError) as e:
            print(f"Warning: Failed to load part from {path}: {e}")

    def add(self, part: PartDescriptor) -> None:
        """部品を追加（同じIDは置き換え）して索引を作り直す。"""
        self._parts[part.id] = part
        self._keyword_index.clear()
        self._category_index.clear()
        self._build_indices()

    def _build_indices(self) -> None:
        """キーワードとカテゴリの索引を構築する。"""
        order = {category: i for i, category in enumerate(CATEGORIES)}
        ordered = sorted(self._parts.values(), key=lambda p: (order.get(p.category, len(order)), p.id))
        self._parts = {part.id: part for part in ordered}
        for part_id, part in self._parts.items():
            # キーワード索引
            for kw in part.keywords:
                self._keyword_index.setdefault(kw.lower(), []).append(part_id)

            # カテゴリ索引
            self._category_index.setdefault(part.category, []).append(part_id)

    def get(self, part_id: str) -> PartDescriptor:
        """IDで部品を取得する。存在しない場合は UnknownPart。"""
        part = self._parts.get(part_id)
        if part is None:
            raise UnknownPart(f"Unknown part: {part_id}")
        return part

    def __contains__(self, part_id) -> bool:
        return part_id in self._parts

    def __len__(self) -> int:
        return len(self._parts)

    def search(self, query: str = "", category: str = ALL) -> List[PartDescriptor]:
        """
        部品名の部分一致またはキーワードの一致で検索する（大文字小文字は区別しない）。

        引数:
            query: 検索文字列（空の場合はカテゴリ内の全件）
            category: カテゴリ名または "all"

        戻り値:
            一致した部品のリスト（カタログ順）
        """
        candidates = self.all_parts() if category == ALL else self.by_category(category)
        needle = (query or "").strip().lower()
        if not needle:
            return candidates
        keyword_hits = set(self._keyword_index.get(needle, []))
        return [part for part in candidates if needle in part.name.lower() or part.id in keyword_hits]

    def by_category(self, category: str) -> List[PartDescriptor]:
        """カテゴリ内の全ての部品を取得する。"""
        part_ids = self._category_index.get(category, [])
        return [self._parts[pid] for pid in part_ids]

    def all_parts(self) -> List[PartDescriptor]:
        """読み込み済みの部品を全て取得する。"""
        return list(self._parts.values())

    def categories(self) -> List[str]:
        """部品が存在するカテゴリ名を取得する。"""
        return [category for category in CATEGORIES if category in self._category_index]


# グローバルシングルトン
_catalog: Optional[PartsCatalog] = None


def get_catalog() -> PartsCatalog:
    """グローバルなカタログインスタンスを取得または作成する。"""
    global _catalog
    if _catalog is None:
        _catalog = PartsCatalog()
        _catalog.load()
    return _catalog


def reload_catalog() -> PartsCatalog:
    """カタログを強制的に再読み込みする。"""
    global _catalog
    _catalog = PartsCatalog()
    _catalog.load()
    return _catalog
