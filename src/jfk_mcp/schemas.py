"""検索/ページ取得リクエストのスキーマ。

パラメータ型（TextQuery, Limit など）は MCP ツールのシグネチャでもそのまま使い、
ツールの入力スキーマとリクエストモデルで説明文と制約を共有する。
"""

from __future__ import annotations

from typing import Annotated, Final

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from .metadata import JFKMetadataFilter, VectorMetadataFilter

MIN_LIMIT: Final[int] = 1
MAX_LIMIT: Final[int] = 100

TextQuery = Annotated[
    StrictStr,
    Field(
        description=(
            "The text query to search for. Good for keyword search. "
            "Matches for exact query string."
        )
    ),
]
VectorQuery = Annotated[
    StrictStr,
    Field(description="The text query to use for vector search. Good for semantic search."),
]
Limit = Annotated[
    StrictInt,
    Field(ge=MIN_LIMIT, le=MAX_LIMIT, description="Max results to return (default: 25)"),
]
PageIds = Annotated[list[StrictStr], Field(description="List of page IDs to retrieve")]


class _RequestModel(BaseModel):
    # 未知のトップレベル引数は無視する（フィルタ内の未知キーは拒否）
    model_config = ConfigDict(frozen=True)


class TextSearchRequest(_RequestModel):
    query: TextQuery
    metadata: JFKMetadataFilter | None = Field(
        default=None, description="Optional metadata filters for text search"
    )
    limit: Limit | None = None


class VectorSearchRequest(_RequestModel):
    query: VectorQuery
    metadata: VectorMetadataFilter | None = Field(
        default=None,
        description="Optional metadata filters (excluding comments) for vector search",
    )
    limit: Limit | None = None


class MetadataSearchRequest(_RequestModel):
    metadata: JFKMetadataFilter = Field(description="Metadata filters for the search")
    limit: Limit | None = None


class PageRequest(_RequestModel):
    page_ids: PageIds


SearchRequest = TextSearchRequest | VectorSearchRequest | MetadataSearchRequest


__all__ = [
    "Limit",
    "MAX_LIMIT",
    "MIN_LIMIT",
    "MetadataSearchRequest",
    "PageIds",
    "PageRequest",
    "SearchRequest",
    "TextQuery",
    "TextSearchRequest",
    "VectorQuery",
    "VectorSearchRequest",
]
