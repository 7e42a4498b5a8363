# Application Interfaces (Protocols)
from subtitle_downloader.application.interfaces.credential_store import CredentialStore
from subtitle_downloader.application.interfaces.key_value_store import KeyValueStore
from subtitle_downloader.application.interfaces.subtitle_api import SubtitleApi
from subtitle_downloader.application.interfaces.transcript_parser import TranscriptParser

__all__ = [
    "SubtitleApi",
    "TranscriptParser",
    "KeyValueStore",
    "CredentialStore",
]
