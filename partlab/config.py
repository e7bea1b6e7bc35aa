"""
環境変数（.env を含む）から設定を読み込む。
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    output_dir: str
    unit: str
    search_latency: float
    parts_dir: Optional[str]


def _get_float(name, default):
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _load_settings() -> Settings:
    return Settings(
        output_dir=os.getenv("PARTLAB_OUTPUT_DIR") or "outputs",
        unit=os.getenv("PARTLAB_UNIT") or "mm",
        search_latency=max(0.0, _get_float("PARTLAB_SEARCH_LATENCY", 0.1)),
        parts_dir=os.getenv("PARTLAB_PARTS_DIR") or None,
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """設定のシングルトンを取得する。"""
    global _settings
    if _settings is None:
        _settings = _load_settings()
    return _settings


def reload_settings() -> Settings:
    """環境変数から設定を再読み込みする。"""
    global _settings
    _settings = _load_settings()
    return _settings
