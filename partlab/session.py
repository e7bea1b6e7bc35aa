"""
エディタのセッション状態。

選択中の部品記述子は編集のたびに変更済みコピーへ置き換える。
検索と保存は非同期で、後から発行したリクエストの結果だけを反映する。
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from .assembly import PartGenerationResult, generate_part, synthesize
from .config import get_settings
from .errors import RequestSuperseded
from .export import ExportFormat, export_filename, export_mesh, write_payload
from .library.catalog import ALL, PartsCatalog, get_catalog
from .library.models import PartDescriptor


class LatestRequestGate:
    """リクエストごとに単調増加のチケットを発行し、最新のものだけを有効とする。"""

    def __init__(self):
        self._ticket = 0

    def issue(self) -> int:
        self._ticket += 1
        return self._ticket

    def is_current(self, ticket: int) -> bool:
        return ticket == self._ticket

    def check(self, ticket: int, what: str = "request") -> None:
        if not self.is_current(ticket):
            raise RequestSuperseded(f"{what} #{ticket} was superseded by #{self._ticket}")


@dataclass
class ExportResult:
    filename: str
    payload: bytes
    path: Optional[str] = None


class EditorSession:
    """
    カタログ検索・部品選択・編集・エクスポートをまとめたセッション。

    使用例:
        session = EditorSession()
        await session.search("nut")
        session.select("mech_2")
        session.update_parameters(holeRadius=0.25)
        result = await session.save("stl")
    """

    def __init__(self, catalog: Optional[PartsCatalog] = None, latency: Optional[float] = None):
        self.catalog = catalog or get_catalog()
        self.latency = get_settings().search_latency if latency is None else latency
        self.results: List[PartDescriptor] = []
        self.selected: Optional[PartDescriptor] = None
        self.last_export: Optional[ExportResult] = None
        self._search_gate = LatestRequestGate()
        self._save_gate = LatestRequestGate()

    async def search(self, query: str = "", category: str = ALL, latency: Optional[float] = None) -> List[PartDescriptor]:
        """カタログを検索する。待機中に新しい検索が始まった場合は RequestSuperseded。"""
        ticket = self._search_gate.issue()
        await asyncio.sleep(self.latency if latency is None else latency)
        self._search_gate.check(ticket, "search")
        results = self.catalog.search(query, category)
        self.results = results
        return results

    def select(self, part) -> PartDescriptor:
        if not isinstance(part, PartDescriptor):
            part = self.catalog.get(part)
        self.selected = part
        return part

    def _require_selection(self) -> PartDescriptor:
        if self.selected is None:
            raise ValueError("no part selected")
        return self.selected

    def update_parameters(self, **changes) -> PartDescriptor:
        self.selected = self._require_selection().with_parameters(**changes)
        return self.selected

    def update_material(self, **changes) -> PartDescriptor:
        self.selected = self._require_selection().with_material(**changes)
        return self.selected

    def update_transform(self, **changes) -> PartDescriptor:
        self.selected = self._require_selection().with_transform(**changes)
        return self.selected

    def preview(self) -> PartGenerationResult:
        return generate_part(self._require_selection())

    async def save(self, fmt="stl", out_dir: Optional[str] = None, latency: float = 0.0) -> ExportResult:
        """
        選択中の部品をエクスポートする。

        呼び出し時点の記述子を使い、合成は別スレッドで行う。
        完了前に新しい保存が始まった場合は結果を捨てて RequestSuperseded を送出する。
        """
        descriptor = self._require_selection()
        fmt = ExportFormat.parse(fmt)
        ticket = self._save_gate.issue()
        mesh = await asyncio.to_thread(synthesize, descriptor)
        payload = export_mesh(mesh, fmt)
        if latency:
            await asyncio.sleep(latency)
        self._save_gate.check(ticket, "save")

        result = ExportResult(filename=export_filename(descriptor.name, fmt), payload=payload)
        if out_dir is not None:
            result.path = write_payload(payload, descriptor.name, fmt, out_dir)
        self.last_export = result
        return result
