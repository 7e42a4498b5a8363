# Domain Layer
from subtitle_downloader.domain.entities import (
    CaptionKind,
    CaptionTrack,
    Credential,
    ErrorKind,
    SubtitleError,
    SubtitleOutcome,
    SubtitleSuccess,
    TranscriptSegment,
)
from subtitle_downloader.domain.exceptions import (
    CaptionTracksNotFoundError,
    CredentialExtractionError,
    NetworkError,
    SubtitleDownloaderError,
    TranscriptDownloadError,
    TranscriptParseError,
)
from subtitle_downloader.domain.track_selector import select_caption_track
from subtitle_downloader.domain.url_validator import (
    build_watch_url,
    extract_video_id,
    is_recognized,
)

__all__ = [
    "CaptionKind",
    "CaptionTrack",
    "Credential",
    "ErrorKind",
    "SubtitleError",
    "SubtitleOutcome",
    "SubtitleSuccess",
    "TranscriptSegment",
    "SubtitleDownloaderError",
    "NetworkError",
    "CredentialExtractionError",
    "CaptionTracksNotFoundError",
    "TranscriptDownloadError",
    "TranscriptParseError",
    "select_caption_track",
    "is_recognized",
    "extract_video_id",
    "build_watch_url",
]
