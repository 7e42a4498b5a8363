"""InnerTube（YouTube非公開API）クライアント"""

import json
import re
from typing import Any

import httpx

from subtitle_downloader.domain.entities import CaptionKind, CaptionTrack
from subtitle_downloader.domain.exceptions import CaptionTracksNotFoundError, NetworkError
from subtitle_downloader.infrastructure.logging_config import (
    VERBOSE,
    get_logger,
    log_step,
    trace_tool,
)

logger = get_logger(__name__)

INNERTUBE_API_URL = "https://www.youtube.com/youtubei/v1/player"
INNERTUBE_CLIENT_NAME = "WEB"
INNERTUBE_CLIENT_VERSION = "2.20241108.01.00"

# サーバーの応答はUser-Agentで変わる（デスクトップブラウザとして振る舞う）
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_TIMEOUT_SEC = 30.0

_API_KEY_PATTERN = re.compile(r'"INNERTUBE_API_KEY":\s*"([a-zA-Z0-9_-]+)"')

# 字幕トラックの kind が "asr" なら自動生成
_ASR_KIND = "asr"


class InnerTubeClient:
    """
    動画ページ → プレイヤー情報API → 字幕XML の順に呼び出すクライアント

    - APIキーは公式の手続きではなく動画ページのHTMLから抽出する
    - リトライはしない（呼び出し側の判断に任せる）
    - 非2xxレスポンスはステータスコード付きの NetworkError にする
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        api_url: str = INNERTUBE_API_URL,
        client_name: str = INNERTUBE_CLIENT_NAME,
        client_version: str = INNERTUBE_CLIENT_VERSION,
    ):
        """
        Args:
            http_client: 共有するhttpxクライアント。Noneの場合は内部で生成して所有する
            user_agent: 全リクエストに付与するUser-Agent
            timeout: 接続・読み込み・書き込みのタイムアウト（秒）
            api_url: プレイヤー情報APIのURL
            client_name: InnerTubeに名乗るクライアント名
            client_version: InnerTubeに名乗るクライアントバージョン
        """
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )
        self.user_agent = user_agent
        self.api_url = api_url
        self.client_name = client_name
        self.client_version = client_version

    @trace_tool(name="fetch_video_page")
    def fetch_page(self, video_url: str) -> str:
        """
        動画ページのHTMLを取得

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
        """
        log_step(logger, "動画ページ取得", f"URL: {video_url}")
        response = self._request("GET", video_url)
        return response.text

    def extract_credential(self, html: str) -> str | None:
        """
        HTMLに埋め込まれた INNERTUBE_API_KEY を抽出

        Returns:
            APIキー、見つからない場合はNone
        """
        log_step(logger, "APIキー抽出", f"HTML {len(html)} 文字から検索")

        match = _API_KEY_PATTERN.search(html)
        if not match:
            logger.warning("[APIキー] HTML内に INNERTUBE_API_KEY が見つかりません")
            return None

        secret = match.group(1)
        logger.info(f"[APIキー] 抽出成功: {secret[:10]}...")
        return secret

    @trace_tool(name="fetch_player_info")
    def call_player_info(self, secret: str, video_id: str) -> list[CaptionTrack]:
        """
        プレイヤー情報APIを呼び出して字幕トラック一覧を取得

        Args:
            secret: 動画ページから抽出したAPIキー
            video_id: YouTube動画ID

        Returns:
            字幕トラックのリスト（字幕がない動画は空リスト）

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
            CaptionTracksNotFoundError: レスポンスを解釈できない
        """
        log_step(logger, "プレイヤー情報API", f"動画ID: {video_id}")

        payload = {
            "context": {
                "client": {
                    "clientName": self.client_name,
                    "clientVersion": self.client_version,
                },
            },
            "videoId": video_id,
        }
        response = self._request(
            "POST",
            self.api_url,
            params={"key": secret},
            json=payload,
        )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CaptionTracksNotFoundError(
                f"Player response is not valid JSON: {e}"
            ) from e

        return parse_caption_tracks(data)

    @trace_tool(name="fetch_transcript")
    def fetch_transcript(self, track_url: str) -> str:
        """
        字幕XMLを取得

        track_url は署名付きパラメータを含むのでそのまま使う。

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
        """
        log_step(logger, "字幕XML取得", f"URL: {track_url[:100]}...")
        response = self._request("GET", track_url)
        xml = response.text
        logger.debug(f"  字幕XML受信: {len(xml)} 文字")
        return xml

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """共通のリクエスト処理（エラーを NetworkError に変換）"""
        headers = {"User-Agent": self.user_agent, **kwargs.pop("headers", {})}
        try:
            response = self.http_client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[HTTP] 通信失敗: {method} {_redact(url)} - {e}")
            raise NetworkError(f"Request failed: {e}") from e

        logger.log(
            VERBOSE,
            f"[HTTP] {method} {_redact(url)} -> {response.status_code}",
        )
        if not response.is_success:
            logger.error(f"[HTTP] エラーレスポンス: {response.status_code} {_redact(url)}")
            raise NetworkError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    def close(self) -> None:
        """内部で生成したhttpxクライアントを閉じる"""
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "InnerTubeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def parse_caption_tracks(data: Any) -> list[CaptionTrack]:
    """
    プレイヤー情報レスポンスから字幕トラックを取り出す

    captions.playerCaptionsTracklistRenderer.captionTracks が
    どの階層で欠けていても「字幕なし」として空リストを返す。

    Raises:
        CaptionTracksNotFoundError: 階層の型が想定外、またはトラックの必須項目が欠けている
    """
    if not isinstance(data, dict):
        raise CaptionTracksNotFoundError("Player response is not a JSON object")

    captions = data.get("captions") or {}
    if not isinstance(captions, dict):
        raise CaptionTracksNotFoundError("Unexpected type for captions")
    renderer = captions.get("playerCaptionsTracklistRenderer") or {}
    if not isinstance(renderer, dict):
        raise CaptionTracksNotFoundError("Unexpected type for playerCaptionsTracklistRenderer")
    raw_tracks = renderer.get("captionTracks")
    if raw_tracks and not isinstance(raw_tracks, list):
        raise CaptionTracksNotFoundError("Unexpected type for captionTracks")
    if not raw_tracks:
        logger.warning("[字幕トラック] レスポンスに字幕トラックがありません")
        return []

    tracks = []
    for raw in raw_tracks:
        try:
            base_url = raw["baseUrl"]
            language_code = raw["languageCode"]
        except (KeyError, TypeError) as e:
            raise CaptionTracksNotFoundError(f"Malformed caption track: {e}") from e

        tracks.append(
            CaptionTrack(
                base_url=base_url,
                display_name=_display_name(raw.get("name"), language_code),
                language_code=language_code,
                kind=CaptionKind.AUTO_GENERATED if raw.get("kind") == _ASR_KIND else CaptionKind.MANUAL,
                is_translatable=bool(raw.get("isTranslatable", False)),
            )
        )

    logger.info(f"[字幕トラック] {len(tracks)}件")
    for track in tracks:
        label = "[AUTO]" if track.is_auto_generated else "[MANUAL]"
        logger.debug(f"  - {track.display_name} ({track.language_code}) {label}")
    return tracks


def _display_name(name: Any, fallback: str) -> str:
    """name.simpleText または name.runs[].text から表示名を取得"""
    if isinstance(name, dict):
        if name.get("simpleText"):
            return name["simpleText"]
        runs = name.get("runs") or []
        text = "".join(run.get("text", "") for run in runs if isinstance(run, dict))
        if text:
            return text
    return fallback


def _redact(url: str) -> str:
    """ログ出力用にクエリ文字列（APIキー・署名）を伏せる"""
    return url.split("?", 1)[0]
