"""ドメインエンティティ定義"""

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(str, Enum):
    """字幕取得エラーの種別（呼び出し側に見える閉じた分類）"""

    INVALID_URL = "invalid_url"
    INVALID_VIDEO_ID = "invalid_video_id"
    NETWORK_ERROR = "network_error"
    CREDENTIAL_EXTRACTION_FAILED = "credential_extraction_failed"
    CAPTION_TRACKS_NOT_FOUND = "caption_tracks_not_found"
    NO_SUBTITLES_AVAILABLE = "no_subtitles_available"
    LANGUAGE_NOT_AVAILABLE = "language_not_available"
    TRANSCRIPT_DOWNLOAD_FAILED = "transcript_download_failed"
    TRANSCRIPT_PARSE_FAILED = "transcript_parse_failed"
    UNKNOWN_ERROR = "unknown_error"


class CaptionKind(str, Enum):
    """字幕トラックの種類"""

    MANUAL = "manual"
    AUTO_GENERATED = "auto_generated"  # 音声認識 (asr)


@dataclass(frozen=True)
class Credential:
    """InnerTube APIキーとその取得時刻"""

    secret: str = field(repr=False)
    issued_at: float  # UNIX時刻（秒）

    def age_sec(self, now: float) -> float:
        """取得からの経過秒数"""
        return now - self.issued_at

    def is_valid(self, ttl_sec: float, now: float) -> bool:
        """TTL内かどうか（経過時間がTTL未満の間だけ有効）"""
        return self.age_sec(now) < ttl_sec


@dataclass(frozen=True)
class CaptionTrack:
    """動画で利用可能な字幕トラック1件"""

    base_url: str
    display_name: str
    language_code: str
    kind: CaptionKind
    is_translatable: bool = False

    @property
    def is_auto_generated(self) -> bool:
        return self.kind is CaptionKind.AUTO_GENERATED


@dataclass(frozen=True)
class TranscriptSegment:
    """字幕XMLの <text> 要素1つ分"""

    text: str
    start_sec: float
    duration_sec: float


@dataclass(frozen=True)
class SubtitleSuccess:
    """字幕取得成功（タイムスタンプなしのプレーンテキスト）"""

    text: str
    language_code: str


@dataclass(frozen=True)
class SubtitleError:
    """字幕取得失敗"""

    kind: ErrorKind
    message: str
    cause: BaseException | None = field(default=None, compare=False)


# 呼び出し側に返る唯一の値
SubtitleOutcome = SubtitleSuccess | SubtitleError
