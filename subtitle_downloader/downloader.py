"""
YouTube字幕ダウンローダー（ライブラリの入口）

Usage:
    with create_downloader() as downloader:
        outcome = downloader.download_subtitles(
            "https://youtu.be/VIDEO_ID",
            language_preferences=["hi", "en", "auto"],
        )

    match outcome:
        case SubtitleSuccess(text=text, language_code=lang):
            print(lang, text)
        case SubtitleError(kind=kind, message=message):
            print(kind, message)
"""

from typing import Any

import httpx

from config.settings import Settings, get_settings
from subtitle_downloader.application.interfaces.key_value_store import KeyValueStore
from subtitle_downloader.application.usecases.download_subtitles import (
    DownloadSubtitlesConfig,
    DownloadSubtitlesUseCase,
)
from subtitle_downloader.domain.entities import SubtitleOutcome
from subtitle_downloader.infrastructure.credential_cache import CredentialCache
from subtitle_downloader.infrastructure.innertube_client import InnerTubeClient
from subtitle_downloader.infrastructure.key_value_store import JsonFileStore
from subtitle_downloader.infrastructure.logging_config import get_logger, set_log_level
from subtitle_downloader.infrastructure.transcript_parser import XmlTranscriptParser

logger = get_logger(__name__)


class SubtitleDownloader:
    """
    字幕ダウンロードの窓口

    シングルトンにはしない。プロセスで1つを共有するかは組み立て側が決める。
    """

    def __init__(
        self,
        store: KeyValueStore,
        http_client: httpx.Client | None = None,
        settings: Settings | None = None,
    ):
        """
        Args:
            store: APIキーキャッシュの保存先
            http_client: 共有するhttpxクライアント（Noneの場合は内部で生成）
            settings: 設定（Noneの場合は環境変数・.envから読み込む）
        """
        settings = settings or get_settings()

        self.credential_cache = CredentialCache(store, ttl_sec=settings.credential_ttl_sec)
        self.api_client = InnerTubeClient(
            http_client=http_client,
            user_agent=settings.USER_AGENT,
            timeout=settings.HTTP_TIMEOUT_SEC,
            api_url=settings.INNERTUBE_API_URL,
            client_name=settings.INNERTUBE_CLIENT_NAME,
            client_version=settings.INNERTUBE_CLIENT_VERSION,
        )
        self.usecase = DownloadSubtitlesUseCase(
            subtitle_api=self.api_client,
            credential_cache=self.credential_cache,
            transcript_parser=XmlTranscriptParser(),
            config=DownloadSubtitlesConfig(
                default_language_preferences=list(settings.DEFAULT_LANGUAGE_PREFERENCES),
            ),
        )
        logger.info("SubtitleDownloader initialized")

    def download_subtitles(
        self,
        url: str,
        language_preferences: list[str] | None = None,
    ) -> SubtitleOutcome:
        """
        YouTube動画の字幕をタイムスタンプなしのテキストで取得

        Args:
            url: 動画URL。対応形式:
                - https://www.youtube.com/watch?v=VIDEO_ID
                - https://youtu.be/VIDEO_ID
                - https://www.youtube.com/embed/VIDEO_ID
                - https://m.youtube.com/watch?v=VIDEO_ID
            language_preferences: 優先言語コード（ISO 639-1、"auto" は自動生成字幕）。
                先に見つかったものを使う。デフォルト: ["en", "hi", "auto"]

        Returns:
            SubtitleSuccess（text, language_code）または SubtitleError（kind, message）
        """
        return self.usecase.execute(url, language_preferences)

    def clear_cache(self) -> None:
        """キャッシュ済みのAPIキーを削除（次回は動画ページから取り直す）"""
        self.credential_cache.clear()
        logger.info("APIキーキャッシュをクリア")

    def has_valid_cached_credential(self) -> bool:
        """有効期限内のAPIキーがキャッシュされているか"""
        return self.credential_cache.has_valid()

    @staticmethod
    def set_log_level(level: str | int) -> None:
        """ライブラリのログレベルを変更（"NONE" で無効化）"""
        set_log_level(level)

    def close(self) -> None:
        self.api_client.close()

    def __enter__(self) -> "SubtitleDownloader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def create_downloader(settings: Settings | None = None) -> SubtitleDownloader:
    """
    設定からダウンローダーを組み立て

    APIキーはJSONファイルに永続化し、ライブラリのログレベルは LOG_LEVEL に合わせる。
    """
    settings = settings or get_settings()
    set_log_level(settings.LOG_LEVEL)
    return SubtitleDownloader(
        store=JsonFileStore(settings.cache_path),
        settings=settings,
    )
