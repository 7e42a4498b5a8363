"""設定管理"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション設定"""

    # APIキーキャッシュ
    CACHE_DIR: str = ".cache"
    CACHE_NAMESPACE: str = "youtube_subtitle_downloader_prefs"
    CREDENTIAL_TTL_HOURS: float = 24

    # HTTP
    HTTP_TIMEOUT_SEC: float = 30.0
    # サーバーの応答はUser-Agentで変わる
    USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # InnerTube
    INNERTUBE_API_URL: str = "https://www.youtube.com/youtubei/v1/player"
    INNERTUBE_CLIENT_NAME: str = "WEB"
    INNERTUBE_CLIENT_VERSION: str = "2.20241108.01.00"

    # 字幕
    # JSON形式で指定: DEFAULT_LANGUAGE_PREFERENCES='["ja", "en", "auto"]'
    DEFAULT_LANGUAGE_PREFERENCES: list[str] = ["en", "hi", "auto"]

    # Logging & Observability
    LOG_LEVEL: str = "INFO"
    LANGSMITH_TRACING: bool = False
    LANGSMITH_API_KEY: str | None = None
    LANGSMITH_PROJECT: str = "youtube-subtitle-downloader"

    @property
    def credential_ttl_sec(self) -> float:
        """APIキーの有効期間（秒）"""
        return self.CREDENTIAL_TTL_HOURS * 3600

    @property
    def cache_path(self) -> Path:
        """APIキーキャッシュのJSONファイル"""
        return Path(self.CACHE_DIR) / f"{self.CACHE_NAMESPACE}.json"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """シングルトンで設定を取得"""
    return Settings()
