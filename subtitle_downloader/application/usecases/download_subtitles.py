"""メインユースケース: YouTube URL から字幕テキストを取得"""

from dataclasses import dataclass, field

from tenacity import RetryCallState, Retrying, stop_after_attempt, wait_none

from subtitle_downloader.application.interfaces.credential_store import CredentialStore
from subtitle_downloader.application.interfaces.subtitle_api import SubtitleApi
from subtitle_downloader.application.interfaces.transcript_parser import TranscriptParser
from subtitle_downloader.domain.entities import (
    CaptionTrack,
    ErrorKind,
    SubtitleError,
    SubtitleOutcome,
    SubtitleSuccess,
)
from subtitle_downloader.domain.exceptions import (
    CredentialExtractionError,
    NetworkError,
    SubtitleDownloaderError,
    TranscriptDownloadError,
)
from subtitle_downloader.domain.track_selector import select_caption_track
from subtitle_downloader.domain.url_validator import (
    build_watch_url,
    extract_video_id,
    is_recognized,
)
from subtitle_downloader.infrastructure.logging_config import (
    LogContext,
    get_logger,
    trace_chain,
)

logger = get_logger(__name__)

# 英語 → ヒンディー語 → 自動生成
DEFAULT_LANGUAGE_PREFERENCES = ["en", "hi", "auto"]


@dataclass
class DownloadSubtitlesConfig:
    """ユースケースの設定"""

    default_language_preferences: list[str] = field(
        default_factory=lambda: list(DEFAULT_LANGUAGE_PREFERENCES)
    )


class DownloadSubtitlesUseCase:
    """
    メインユースケース: URL検証 → APIキー取得 → 字幕トラック選択 → 字幕XML → テキスト

    失敗は全て SubtitleError として返し、例外を呼び出し側に漏らさない。
    """

    def __init__(
        self,
        subtitle_api: SubtitleApi,
        credential_cache: CredentialStore,
        transcript_parser: TranscriptParser,
        config: DownloadSubtitlesConfig | None = None,
    ):
        self.subtitle_api = subtitle_api
        self.credential_cache = credential_cache
        self.transcript_parser = transcript_parser
        self.config = config or DownloadSubtitlesConfig()

    @trace_chain(name="download_subtitles")
    def execute(
        self,
        url: str,
        language_preferences: list[str] | None = None,
    ) -> SubtitleOutcome:
        """
        メイン実行フロー

        Args:
            url: YouTube動画のURL
            language_preferences: 優先言語コード（"auto" は自動生成字幕）。
                Noneの場合は設定のデフォルト

        Returns:
            SubtitleSuccess または SubtitleError
        """
        if not url or not url.strip():
            logger.error("[字幕] URLが空です")
            return SubtitleError(kind=ErrorKind.INVALID_URL, message="URL cannot be empty")

        preferences = (
            language_preferences
            if language_preferences is not None
            else self.config.default_language_preferences
        )
        ctx = LogContext(url=url, languages=preferences)
        logger.info(f"[字幕] ダウンロード開始 {ctx}")

        try:
            return self._download(url, preferences)
        except SubtitleDownloaderError as e:
            logger.error(f"[字幕] 失敗 ({e.kind.value}): {e}")
            return SubtitleError(kind=e.kind, message=str(e), cause=e)
        except Exception as e:
            logger.exception(f"[字幕] 予期しないエラー: {e}")
            return SubtitleError(
                kind=ErrorKind.UNKNOWN_ERROR,
                message=str(e) or "Unknown error occurred",
                cause=e,
            )

    def _download(self, url: str, preferences: list[str]) -> SubtitleOutcome:
        # Step 1: URL検証と動画ID抽出
        if not is_recognized(url):
            logger.debug(f"  YouTubeのURLではない: {url}")
            return SubtitleError(kind=ErrorKind.INVALID_URL, message="Not a valid YouTube URL")

        video_id = extract_video_id(url)
        if video_id is None:
            logger.debug(f"  動画IDを抽出できない: {url}")
            return SubtitleError(
                kind=ErrorKind.INVALID_VIDEO_ID,
                message="Failed to extract video ID from URL",
            )
        logger.debug(f"  動画ID: {video_id}")

        # Step 2: APIキー（キャッシュ or 動画ページから取得）
        secret = self.credential_cache.get_secret()
        if secret is None:
            secret = self._fetch_and_cache_credential(video_id)
        if secret is None:
            return SubtitleError(
                kind=ErrorKind.CREDENTIAL_EXTRACTION_FAILED,
                message="Failed to fetch INNERTUBE_API_KEY",
            )

        # Step 3: 字幕トラック一覧（失敗時はキーを更新して1回だけ再試行）
        tracks = self._fetch_caption_tracks(secret, video_id)
        if not tracks:
            return SubtitleError(
                kind=ErrorKind.NO_SUBTITLES_AVAILABLE,
                message="No subtitles available for this video",
            )

        # Step 4: 優先言語でトラック選択
        track = select_caption_track(tracks, preferences)
        if track is None:
            return SubtitleError(
                kind=ErrorKind.LANGUAGE_NOT_AVAILABLE,
                message="None of the preferred languages are available",
            )
        logger.info(f"  選択した字幕: {track.display_name} ({track.language_code})")

        # Step 5: 字幕XMLを取得してプレーンテキスト化
        text = self._download_transcript_text(track)

        logger.info(f"[字幕] ダウンロード完了: {len(text)} 文字")
        return SubtitleSuccess(text=text, language_code=track.language_code)

    def _fetch_and_cache_credential(self, video_id: str) -> str | None:
        """
        動画ページからAPIキーを抽出してキャッシュ

        Returns:
            APIキー、抽出できない場合はNone

        Raises:
            NetworkError: 動画ページの取得失敗
        """
        logger.info("[APIキー] 動画ページから新しいキーを取得")
        html = self.subtitle_api.fetch_page(build_watch_url(video_id))
        secret = self.subtitle_api.extract_credential(html)
        if secret is None:
            logger.error("[APIキー] 動画ページからの抽出に失敗")
            return None

        self.credential_cache.put(secret)
        return secret

    def _fetch_caption_tracks(self, secret: str, video_id: str) -> list[CaptionTrack]:
        """
        字幕トラック一覧を取得

        キャッシュ済みのキーはTTL内でもサーバー側で無効になっていることがある。
        失敗したらキャッシュを消して新しいキーで1回だけ再試行する。
        再試行も失敗した場合は空リスト（字幕なし）として扱う。
        """
        current = {"secret": secret}

        def refresh_credential(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(f"[字幕トラック] 現在のキーで失敗、キーを更新して再試行: {error}")
            self.credential_cache.clear()
            fresh = self._fetch_and_cache_credential(video_id)
            if fresh is None:
                raise CredentialExtractionError("Failed to refresh INNERTUBE_API_KEY")
            current["secret"] = fresh

        retrying = Retrying(
            stop=stop_after_attempt(2),
            wait=wait_none(),
            before_sleep=refresh_credential,
            reraise=True,
        )
        try:
            return retrying(
                lambda: self.subtitle_api.call_player_info(current["secret"], video_id)
            )
        except Exception as e:
            logger.warning(f"[字幕トラック] 再試行後も取得できず、字幕なしとして扱う: {e}")
            return []

    def _download_transcript_text(self, track: CaptionTrack) -> str:
        try:
            xml = self.subtitle_api.fetch_transcript(track.base_url)
        except NetworkError as e:
            raise TranscriptDownloadError(f"Failed to download transcript: {e}") from e

        segments = self.transcript_parser.parse(xml)
        return self.transcript_parser.to_plain_text(segments)
