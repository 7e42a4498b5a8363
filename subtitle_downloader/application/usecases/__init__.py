# Use Cases
from subtitle_downloader.application.usecases.download_subtitles import (
    DownloadSubtitlesConfig,
    DownloadSubtitlesUseCase,
)

__all__ = [
    "DownloadSubtitlesUseCase",
    "DownloadSubtitlesConfig",
]
