from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from .backend.archives import ArchivesBackend, ArchivesClient
from .config import ArchivesSettings
from .metadata import JFKMetadataFilter, VectorMetadataFilter
from .schemas import Limit, PageIds, TextQuery, VectorQuery
from .tools.dispatch import (
    GET_PAGE_PNG,
    GET_PAGE_TEXT,
    METADATA_SEARCH,
    TEXT_SEARCH,
    VECTOR_SEARCH,
    Dispatcher,
)

SERVER_NAME = "jfk"
SERVER_INSTRUCTIONS = (
    "Search and read the JFK assassination records released by NARA. "
    "Use text-search for exact keyword matches, vector-search for semantic queries, "
    "metadata-search for structured filters, and get-page-text / get-page-png to read pages."
)

logger = logging.getLogger(__name__)


def build_server(settings: ArchivesSettings, backend: ArchivesBackend | None = None) -> FastMCP:
    """JFK 検索ツールを登録した FastMCP サーバーを構築して返します。

    backend を省略した場合は settings から ArchivesClient を生成し、
    サーバー終了時（lifespan の終了）にクローズします。
    """
    owned_client: ArchivesClient | None = None
    if backend is None:
        owned_client = ArchivesClient(settings)
        backend = owned_client

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        try:
            yield None
        finally:
            if owned_client is not None:
                await owned_client.aclose()

    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS, lifespan=lifespan)
    dispatcher = Dispatcher(backend)

    # FastMCP がシグネチャで型を検証した引数を、Dispatcher が操作のリクエストスキーマで再検証する
    @server.tool(
        name=TEXT_SEARCH.name, description=TEXT_SEARCH.description, structured_output=False
    )
    async def text_search(
        query: TextQuery,
        metadata: JFKMetadataFilter | None = None,
        limit: Limit | None = None,
    ) -> list[TextContent]:
        response = await dispatcher.dispatch(
            TEXT_SEARCH.name, {"query": query, "metadata": metadata, "limit": limit}
        )
        return response.content

    @server.tool(
        name=VECTOR_SEARCH.name, description=VECTOR_SEARCH.description, structured_output=False
    )
    async def vector_search(
        query: VectorQuery,
        metadata: VectorMetadataFilter | None = None,
        limit: Limit | None = None,
    ) -> list[TextContent]:
        response = await dispatcher.dispatch(
            VECTOR_SEARCH.name, {"query": query, "metadata": metadata, "limit": limit}
        )
        return response.content

    @server.tool(
        name=METADATA_SEARCH.name, description=METADATA_SEARCH.description, structured_output=False
    )
    async def metadata_search(
        metadata: JFKMetadataFilter,
        limit: Limit | None = None,
    ) -> list[TextContent]:
        response = await dispatcher.dispatch(
            METADATA_SEARCH.name, {"metadata": metadata, "limit": limit}
        )
        return response.content

    @server.tool(
        name=GET_PAGE_TEXT.name, description=GET_PAGE_TEXT.description, structured_output=False
    )
    async def get_page_text(page_ids: PageIds) -> list[TextContent]:
        response = await dispatcher.dispatch(GET_PAGE_TEXT.name, {"page_ids": page_ids})
        return response.content

    @server.tool(
        name=GET_PAGE_PNG.name, description=GET_PAGE_PNG.description, structured_output=False
    )
    async def get_page_png(page_ids: PageIds) -> list[TextContent]:
        response = await dispatcher.dispatch(GET_PAGE_PNG.name, {"page_ids": page_ids})
        return response.content

    logger.info("Registered %d tools on %s", len(dispatcher.operations), SERVER_NAME)
    return server


def _log_level(name: str) -> int:
    """ログレベル名を数値に変換する。不明な名前は INFO とする。"""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def main() -> None:
    """stdio トランスポートで MCP サーバーを起動します。

    ARCHIVES_API_KEY が未設定の場合はツールを登録せずに終了コード 1 で終了します。
    ログは標準エラー出力へ（標準出力は MCP のプロトコル通信に使われるため）。
    """
    load_dotenv()
    logging.basicConfig(
        level=_log_level(os.getenv("LOG_LEVEL", "INFO")),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        settings = ArchivesSettings.from_env()
    except RuntimeError as e:
        logger.error("Fatal error at startup: %s", e)
        raise SystemExit(1) from e

    server = build_server(settings)
    logger.info("JFK MCP Server running on stdio")
    server.run("stdio")


if __name__ == "__main__":  # pragma: no cover
    main()
