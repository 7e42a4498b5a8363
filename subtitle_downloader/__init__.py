# YouTube Subtitle Downloader
from subtitle_downloader.domain.entities import (
    CaptionKind,
    CaptionTrack,
    ErrorKind,
    SubtitleError,
    SubtitleOutcome,
    SubtitleSuccess,
)
from subtitle_downloader.downloader import SubtitleDownloader, create_downloader

__all__ = [
    "SubtitleDownloader",
    "create_downloader",
    "SubtitleOutcome",
    "SubtitleSuccess",
    "SubtitleError",
    "ErrorKind",
    "CaptionTrack",
    "CaptionKind",
]
