"""永続キーバリューストアのインターフェース"""

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """1つの名前空間に閉じたキーバリューストア"""

    def get(self, key: str) -> Any | None:
        ...

    def put(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
