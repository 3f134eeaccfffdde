"""ツール名 → (リクエストスキーマ, バックエンド呼び出し, 応答整形) の明示的なルーティング。

- 操作は OPERATIONS に列挙したもののみ（自動検出はしない）。
- バックエンドの失敗は例外として伝播させず、
  "Error performing <説明>: <メッセージ>" のテキスト応答に変換する。
- 呼び出し間で状態は持たない。
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from mcp.types import TextContent
from pydantic import BaseModel, ValidationError

from ..backend.archives import ArchivesBackend
from ..errors import OperationError, RequestValidationError, UnknownOperationError
from ..schemas import MetadataSearchRequest, PageRequest, TextSearchRequest, VectorSearchRequest

logger = logging.getLogger(__name__)

BackendCall = Callable[[ArchivesBackend, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Operation:
    name: str
    description: str
    error_label: str
    request_model: type[BaseModel]
    call: BackendCall


async def _text_search(backend: ArchivesBackend, request: TextSearchRequest) -> Any:
    return await backend.search.text(
        query=request.query, metadata=request.metadata, limit=request.limit
    )


async def _vector_search(backend: ArchivesBackend, request: VectorSearchRequest) -> Any:
    return await backend.search.vector(
        query=request.query, metadata=request.metadata, limit=request.limit
    )


async def _metadata_search(backend: ArchivesBackend, request: MetadataSearchRequest) -> Any:
    return await backend.search.metadata(metadata=request.metadata, limit=request.limit)


async def _get_page_text(backend: ArchivesBackend, request: PageRequest) -> Any:
    return await backend.pages.get_text(page_ids=request.page_ids)


async def _get_page_png(backend: ArchivesBackend, request: PageRequest) -> Any:
    return await backend.pages.get_png(page_ids=request.page_ids)


TEXT_SEARCH: Final = Operation(
    name="text-search",
    description=(
        "Perform a text search on JFK files using a query string and optional metadata filters. "
        "Should only use 1 word for the query, since it does an exact match. "
        "NARA release dates between 2017-2025"
    ),
    error_label="text search",
    request_model=TextSearchRequest,
    call=_text_search,
)
VECTOR_SEARCH: Final = Operation(
    name="vector-search",
    description=(
        "Perform a vector search on JFK files using a query string and optional metadata "
        "filters (excluding comments). NARA release dates between 2017-2025"
    ),
    error_label="vector search",
    request_model=VectorSearchRequest,
    call=_vector_search,
)
METADATA_SEARCH: Final = Operation(
    name="metadata-search",
    description=(
        "Perform a metadata search on JFK files using detailed metadata filters. "
        "NARA release dates between 2017-2025"
    ),
    error_label="metadata search",
    request_model=MetadataSearchRequest,
    call=_metadata_search,
)
GET_PAGE_TEXT: Final = Operation(
    name="get-page-text",
    description="Retrieve text content for specific pages of a JFK document",
    error_label="page text retrieval",
    request_model=PageRequest,
    call=_get_page_text,
)
GET_PAGE_PNG: Final = Operation(
    name="get-page-png",
    description="Retrieve PNG images for specific pages of a JFK document",
    error_label="page PNG retrieval",
    request_model=PageRequest,
    call=_get_page_png,
)

# every mapping explicit: adding a tool requires editing this dict
OPERATIONS: Final[dict[str, Operation]] = {
    op.name: op
    for op in (TEXT_SEARCH, VECTOR_SEARCH, METADATA_SEARCH, GET_PAGE_TEXT, GET_PAGE_PNG)
}


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    return result


def format_result(result: Any) -> str:
    """バックエンドの結果をインデント付き JSON 文字列にする。"""
    return json.dumps(_to_jsonable(result), indent=2, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class ToolResponse:
    """ツール応答。content は常に TextContent 1 件。"""

    content: list[TextContent]
    error: OperationError | None = field(default=None)

    @property
    def text(self) -> str:
        return self.content[0].text

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, result: Any) -> ToolResponse:
        return cls(content=[TextContent(type="text", text=format_result(result))])

    @classmethod
    def failure(cls, error: OperationError) -> ToolResponse:
        return cls(content=[TextContent(type="text", text=error.render())], error=error)


class Dispatcher:
    """操作名に応じて検証・バックエンド呼び出し・応答整形を行う。"""

    def __init__(
        self,
        backend: ArchivesBackend,
        operations: Mapping[str, Operation] = OPERATIONS,
    ) -> None:
        self._backend = backend
        self._operations = dict(operations)

    @property
    def operations(self) -> Mapping[str, Operation]:
        return self._operations

    def operation(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def validate(self, name: str, arguments: Mapping[str, Any]) -> BaseModel:
        """生の引数を操作のリクエストスキーマで検証する（全項目一括、部分的な結果は返さない）。"""
        op = self.operation(name)
        try:
            return op.request_model.model_validate(dict(arguments))
        except ValidationError as e:
            err = RequestValidationError.from_pydantic(name, e)
            logger.warning("Rejected arguments for %s: %s", name, "; ".join(err.errors))
            raise err from e

    async def execute(self, name: str, request: BaseModel) -> ToolResponse:
        """検証済みリクエストでバックエンドを呼び出す。

        バックエンド呼び出しと結果の整形の失敗は送出せず、エラー応答として返す。
        """
        op = self.operation(name)
        if not isinstance(request, op.request_model):
            raise TypeError(
                f"{name} expects {op.request_model.__name__}, got {type(request).__name__}"
            )

        logger.info("Invoking %s", name)
        try:
            result = await op.call(self._backend, request)
            return ToolResponse.success(result)
        except Exception as e:  # noqa: BLE001
            error = OperationError.from_exception(name, op.error_label, e)
            logger.error("Operation %s failed: %s", name, error.message, exc_info=True)
            return ToolResponse.failure(error)

    async def dispatch(self, name: str, arguments: Mapping[str, Any]) -> ToolResponse:
        request = self.validate(name, arguments)
        return await self.execute(name, request)


__all__ = [
    "OPERATIONS",
    "Dispatcher",
    "Operation",
    "ToolResponse",
    "format_result",
]
