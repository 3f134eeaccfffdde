from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.archivesapi.com"
DEFAULT_COLLECTION = "jfk"


@dataclass(frozen=True)
class ArchivesSettings:
    api_key: str
    base_url: str
    collection: str
    timeout: float | None

    @staticmethod
    def from_env() -> ArchivesSettings:
        """環境変数から Archives API の設定値を読み込みます。

        必須の環境変数:
        - ARCHIVES_API_KEY: Archives API の API キー

        オプションの環境変数:
        - ARCHIVES_API_URL: API のベース URL（デフォルト: https://api.archivesapi.com）
        - ARCHIVES_COLLECTION: 対象コレクション（デフォルト: jfk）
        - ARCHIVES_TIMEOUT: HTTP タイムアウト秒数（未設定時はタイムアウトなし）
        """
        # .env が存在する場合は読み込む
        load_dotenv()

        api_key = os.getenv("ARCHIVES_API_KEY")
        base_url = os.getenv("ARCHIVES_API_URL") or DEFAULT_BASE_URL
        collection = os.getenv("ARCHIVES_COLLECTION") or DEFAULT_COLLECTION

        if not api_key:
            raise RuntimeError("ARCHIVES_API_KEY が設定されていません")

        timeout: float | None = None
        timeout_str = os.getenv("ARCHIVES_TIMEOUT")
        if timeout_str:
            try:
                timeout = float(timeout_str)
            except ValueError:
                timeout = None
            else:
                if timeout <= 0:
                    timeout = None

        return ArchivesSettings(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            collection=collection.strip("/"),
            timeout=timeout,
        )
