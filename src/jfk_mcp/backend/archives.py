"""Archives API クライアントの薄いラッパー（JFK コレクション）。

- search.text / search.vector / search.metadata: 検索系エンドポイント
- pages.get_text / pages.get_png: ページ取得エンドポイント

リトライやキャッシュは行わない。HTTP エラーは httpx.HTTPStatusError としてそのまま送出し、
呼び出し側（Dispatcher）でエラー応答に変換する。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from ..config import ArchivesSettings
from ..metadata import MetadataFilterBase

logger = logging.getLogger(__name__)


class SearchAPI(Protocol):
    async def text(
        self, *, query: str, metadata: MetadataFilterBase | None = None, limit: int | None = None
    ) -> Any: ...

    async def vector(
        self, *, query: str, metadata: MetadataFilterBase | None = None, limit: int | None = None
    ) -> Any: ...

    async def metadata(self, *, metadata: MetadataFilterBase, limit: int | None = None) -> Any: ...


class PagesAPI(Protocol):
    async def get_text(self, *, page_ids: Sequence[str]) -> Any: ...

    async def get_png(self, *, page_ids: Sequence[str]) -> Any: ...


class ArchivesBackend(Protocol):
    """Dispatcher が依存するバックエンドのインターフェース。"""

    @property
    def search(self) -> SearchAPI: ...

    @property
    def pages(self) -> PagesAPI: ...


def _search_payload(
    query: str | None, metadata: MetadataFilterBase | None, limit: int | None
) -> dict[str, Any]:
    # 未指定の項目は送らない（limit の既定値はバックエンド側で決まる）
    payload: dict[str, Any] = {}
    if query is not None:
        payload["query"] = query
    if metadata is not None:
        payload["metadata"] = metadata.to_payload()
    if limit is not None:
        payload["limit"] = int(limit)
    return payload


class _SearchResource:
    def __init__(self, client: ArchivesClient) -> None:
        self._client = client

    async def text(
        self, *, query: str, metadata: MetadataFilterBase | None = None, limit: int | None = None
    ) -> Any:
        return await self._client.post("search/text", _search_payload(query, metadata, limit))

    async def vector(
        self, *, query: str, metadata: MetadataFilterBase | None = None, limit: int | None = None
    ) -> Any:
        return await self._client.post("search/vector", _search_payload(query, metadata, limit))

    async def metadata(self, *, metadata: MetadataFilterBase, limit: int | None = None) -> Any:
        return await self._client.post("search/metadata", _search_payload(None, metadata, limit))


class _PagesResource:
    def __init__(self, client: ArchivesClient) -> None:
        self._client = client

    async def get_text(self, *, page_ids: Sequence[str]) -> Any:
        return await self._client.post("pages/text", {"page_ids": list(page_ids)})

    async def get_png(self, *, page_ids: Sequence[str]) -> Any:
        return await self._client.post("pages/png", {"page_ids": list(page_ids)})


class ArchivesClient:
    """httpx.AsyncClient を 1 つ保持する Archives API クライアント。

    同一インスタンスを複数の呼び出しから並行に使ってよい（コネクションプールのみ共有）。
    transport はテスト用（httpx.MockTransport など）に差し替え可能。
    """

    def __init__(
        self,
        settings: ArchivesSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._collection = settings.collection
        self._http = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={"x-api-key": settings.api_key, "accept": "application/json"},
            timeout=settings.timeout,
            transport=transport,
        )
        self._search = _SearchResource(self)
        self._pages = _PagesResource(self)

    @property
    def search(self) -> _SearchResource:
        return self._search

    @property
    def pages(self) -> _PagesResource:
        return self._pages

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        url = f"/{self._collection}/{path}"
        logger.debug("POST %s keys=%s", url, sorted(payload))
        response = await self._http.post(url, json=payload)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self._http.aclose()


__all__ = ["ArchivesBackend", "ArchivesClient", "PagesAPI", "SearchAPI"]
