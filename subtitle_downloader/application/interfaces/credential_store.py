"""APIキーキャッシュのインターフェース"""

from typing import Protocol

from subtitle_downloader.domain.entities import Credential


class CredentialStore(Protocol):
    """TTL付きでAPIキーを1つだけ保持するキャッシュ"""

    def get(self) -> Credential | None:
        """有効なキーを返す。期限切れなら削除してNone"""
        ...

    def get_secret(self) -> str | None:
        ...

    def put(self, secret: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def has_valid(self) -> bool:
        ...
