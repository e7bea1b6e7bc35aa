"""
パラメトリック部品の形状合成とメッシュ出力。
"""

__version__ = "0.1.0"
