"""ドメイン固有の例外定義"""

from subtitle_downloader.domain.entities import ErrorKind


class SubtitleDownloaderError(Exception):
    """基底例外クラス"""

    kind: ErrorKind = ErrorKind.UNKNOWN_ERROR


class NetworkError(SubtitleDownloaderError):
    """HTTP通信エラー（タイムアウト、接続失敗、非2xxレスポンス）"""

    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CredentialExtractionError(SubtitleDownloaderError):
    """動画ページからAPIキーを抽出できない"""

    kind = ErrorKind.CREDENTIAL_EXTRACTION_FAILED


class CaptionTracksNotFoundError(SubtitleDownloaderError):
    """プレイヤー情報レスポンスから字幕トラックを読み取れない"""

    kind = ErrorKind.CAPTION_TRACKS_NOT_FOUND


class TranscriptDownloadError(SubtitleDownloaderError):
    """字幕XMLのダウンロード失敗"""

    kind = ErrorKind.TRANSCRIPT_DOWNLOAD_FAILED


class TranscriptParseError(SubtitleDownloaderError):
    """字幕XMLのパース失敗"""

    kind = ErrorKind.TRANSCRIPT_PARSE_FAILED
