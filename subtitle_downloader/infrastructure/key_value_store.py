"""キーバリューストアの実装（JSONファイル / メモリ）"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from subtitle_downloader.infrastructure.logging_config import get_logger

logger = get_logger(__name__)


class JsonFileStore:
    """
    1つのJSONファイルを1つの名前空間として扱う永続ストア

    書き込みは一時ファイル + os.replace で原子的に行うため、
    別プロセスの読み手は更新前か更新後のどちらかの内容だけを見る。
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        logger.debug(f"JsonFileStore initialized: {self.path}")

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._read().get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # 壊れたファイルは空として扱い、次の書き込みで上書きする
            logger.warning(f"ストアの読み込みに失敗: {self.path} - {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


class InMemoryStore:
    """プロセス内だけで有効なストア（テスト・一時利用向け）"""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
