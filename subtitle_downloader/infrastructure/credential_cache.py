"""TTL付きAPIキーキャッシュ"""

import threading
import time
from typing import Any, Callable

from subtitle_downloader.application.interfaces.key_value_store import KeyValueStore
from subtitle_downloader.domain.entities import Credential
from subtitle_downloader.infrastructure.logging_config import get_logger

logger = get_logger(__name__)

# デフォルトTTL（24時間）
DEFAULT_TTL_SEC = 24 * 60 * 60

# ストア内のキー（キーと取得時刻を1レコードで保存する）
CREDENTIAL_KEY = "innertube_api_key"


class CredentialCache:
    """
    InnerTube APIキーをTTL付きで1つだけ保持するキャッシュ

    期限切れ判定は読み出し時に行い、期限切れなら削除してNoneを返す。
    (secret, issued_at) は常に1つの値として書き込まれる。
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_sec: float = DEFAULT_TTL_SEC,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            store: 永続キーバリューストア
            ttl_sec: 有効期間（秒）
            clock: 現在時刻（UNIX秒）を返す関数
        """
        self.store = store
        self.ttl_sec = ttl_sec
        self.clock = clock
        self._lock = threading.Lock()

    def get(self) -> Credential | None:
        """
        有効なAPIキーを取得

        Returns:
            Credential、未保存または期限切れの場合はNone
        """
        with self._lock:
            credential = _credential_from_record(self.store.get(CREDENTIAL_KEY))
            if credential is None:
                logger.debug("APIキーキャッシュ: 未保存")
                return None

            now = self.clock()
            if not credential.is_valid(self.ttl_sec, now):
                age_min = int(credential.age_sec(now) // 60)
                logger.debug(f"APIキーキャッシュ: 期限切れ (経過 {age_min} 分)")
                self._clear_locked()
                return None

            remaining_hours = int((self.ttl_sec - credential.age_sec(now)) // 3600)
            logger.debug(f"APIキーキャッシュ: ヒット (残り {remaining_hours} 時間)")
            return credential

    def get_secret(self) -> str | None:
        """有効なAPIキー文字列、なければNone"""
        credential = self.get()
        return credential.secret if credential else None

    def put(self, secret: str) -> None:
        """現在時刻を取得時刻としてAPIキーを保存"""
        with self._lock:
            self.store.put(
                CREDENTIAL_KEY,
                {"secret": secret, "issued_at": self.clock()},
            )
        logger.debug(f"APIキーをキャッシュ (TTL: {self.ttl_sec / 3600:g} 時間)")

    def clear(self) -> None:
        """キャッシュを削除"""
        with self._lock:
            self._clear_locked()

    def has_valid(self) -> bool:
        """有効なAPIキーがキャッシュされているか"""
        return self.get() is not None

    def _clear_locked(self) -> None:
        self.store.delete(CREDENTIAL_KEY)
        logger.debug("APIキーキャッシュを削除")


def _credential_from_record(record: Any) -> Credential | None:
    """ストアのレコードからCredentialを復元（形式が不正ならNone）"""
    if not isinstance(record, dict):
        return None
    secret = record.get("secret")
    issued_at = record.get("issued_at")
    if not isinstance(secret, str) or not secret:
        return None
    if not isinstance(issued_at, (int, float)) or isinstance(issued_at, bool) or issued_at <= 0:
        return None
    return Credential(secret=secret, issued_at=float(issued_at))
