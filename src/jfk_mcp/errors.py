"""検索レイヤーのエラー型。

- 入力検証エラー（RequestValidationError）はバックエンド呼び出し前に送出される。
- バックエンド失敗は例外として伝播させず、OperationError（値）として保持し、
  応答の境界でのみテキスト化する。
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError


def describe_validation_error(exc: ValidationError) -> tuple[str, ...]:
    """pydantic の ValidationError を "<フィールドパス>: <メッセージ>" の列に変換する。"""
    described: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        described.append(f"{loc}: {msg}" if loc else msg)
    return tuple(described)


class UnknownOperationError(KeyError):
    """登録されていない操作名が指定された。"""

    def __init__(self, operation: str) -> None:
        super().__init__(operation)
        self.operation = operation

    def __str__(self) -> str:
        return f"Unknown operation: {self.operation}"


class RequestValidationError(ValueError):
    """呼び出し引数が操作のリクエストスキーマに適合しない。"""

    def __init__(self, operation: str, errors: tuple[str, ...]) -> None:
        self.operation = operation
        self.errors = errors
        super().__init__(f"Invalid arguments for {operation}: " + "; ".join(errors))

    @classmethod
    def from_pydantic(cls, operation: str, exc: ValidationError) -> RequestValidationError:
        return cls(operation, describe_validation_error(exc))


@dataclass(frozen=True)
class OperationError:
    """バックエンド呼び出しの失敗。テキスト化は render() で遅延して行う。"""

    operation: str
    description: str
    message: str

    @classmethod
    def from_exception(cls, operation: str, description: str, exc: BaseException) -> OperationError:
        # メッセージが空の例外（TimeoutError() など）はクラス名で代替する
        message = str(exc) or type(exc).__name__
        return cls(operation=operation, description=description, message=message)

    def render(self) -> str:
        return f"Error performing {self.description}: {self.message}"
