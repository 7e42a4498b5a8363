# Infrastructure Layer
from subtitle_downloader.infrastructure.credential_cache import CredentialCache
from subtitle_downloader.infrastructure.innertube_client import InnerTubeClient
from subtitle_downloader.infrastructure.key_value_store import InMemoryStore, JsonFileStore
from subtitle_downloader.infrastructure.transcript_parser import XmlTranscriptParser

__all__ = [
    "InnerTubeClient",
    "XmlTranscriptParser",
    "CredentialCache",
    "JsonFileStore",
    "InMemoryStore",
]
