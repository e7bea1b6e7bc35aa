"""
部品合成・エクスポートで発生するエラー型。

コアはログ出力やリトライを行わず、これらの例外を呼び出し側へそのまま送出する。
"""


class PartLabError(Exception):
    """partlab の全エラーの基底クラス。"""

    kind = "PartLabError"


class InvalidParameter(PartLabError, ValueError):
    """範囲外・非有限のパラメータ、または未知のフィールド。"""

    kind = "InvalidParameter"


class UnsupportedFormat(PartLabError, ValueError):
    """FBX など実装されていない、または未知のエクスポート形式。"""

    kind = "UnsupportedFormat"


class EmptyMesh(PartLabError, ValueError):
    """面を持たないメッシュのエクスポート要求。"""

    kind = "EmptyMesh"


class UnknownPart(PartLabError, KeyError):
    """カタログに存在しない部品ID。"""

    kind = "UnknownPart"

    def __str__(self):
        return str(self.args[0]) if self.args else self.kind


class RequestSuperseded(PartLabError):
    """新しいリクエストが発行されたため結果を破棄した非同期リクエスト。"""

    kind = "RequestSuperseded"
