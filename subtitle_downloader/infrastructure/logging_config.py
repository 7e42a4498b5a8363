"""ロギング設定とLangSmithトレーシング統合"""

import logging
import os
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, TypeVar

# LangSmithのインポート
try:
    from langsmith import traceable

    LANGSMITH_AVAILABLE = True
except ImportError:
    LANGSMITH_AVAILABLE = False
    traceable = None  # type: ignore

# 型変数
F = TypeVar("F", bound=Callable[..., Any])

# ライブラリ全体の親ロガー名
PACKAGE_LOGGER_NAME = "subtitle_downloader"

# DEBUGより詳細なレベル（HTTP通信の詳細など）
VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")

# ログ出力を完全に止めるためのレベル
NONE = logging.CRITICAL + 10
logging.addLevelName(NONE, "NONE")

_LEVEL_NAMES: dict[str, int] = {
    "VERBOSE": VERBOSE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "NONE": NONE,
}

# ロガーのキャッシュ
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    名前付きロガーを取得

    Args:
        name: ロガー名（通常は __name__ を使用）

    Returns:
        設定済みのロガー
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    _loggers[name] = logger
    return logger


def parse_log_level(level: str | int) -> int:
    """
    ログレベル名を数値に変換

    Args:
        level: "VERBOSE" / "DEBUG" / "INFO" / "WARN" / "ERROR" / "NONE" または数値

    Raises:
        ValueError: 未知のレベル名
    """
    if isinstance(level, int):
        return level
    try:
        return _LEVEL_NAMES[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def set_log_level(level: str | int) -> None:
    """
    ライブラリ（subtitle_downloader 配下）のログレベルを変更

    "NONE" を指定するとライブラリのログを全て止める。
    """
    numeric = parse_log_level(level)
    logger = get_logger(PACKAGE_LOGGER_NAME)
    logger.setLevel(numeric)
    if numeric < NONE:
        logger.info(f"ログレベル変更: {logging.getLevelName(numeric)}")


def log_step(logger: logging.Logger, step: str, details: str) -> None:
    """処理ステップを "[ステップ名] 詳細" 形式でDEBUG出力"""
    logger.debug(f"[{step}] {details}")


def is_langsmith_enabled() -> bool:
    """LangSmithが有効かどうかを確認"""
    if not LANGSMITH_AVAILABLE:
        return False

    # Settingsから値を取得（.envファイルを読み込む）
    try:
        from config.settings import get_settings
        settings = get_settings()
        return settings.LANGSMITH_TRACING and bool(settings.LANGSMITH_API_KEY)
    except Exception:
        # Settingsが使えない場合は環境変数から直接取得
        tracing_enabled = os.getenv("LANGSMITH_TRACING", "").lower() in ("true", "1", "yes")
        api_key_set = bool(os.getenv("LANGSMITH_API_KEY"))
        return tracing_enabled and api_key_set


def generate_trace_metadata() -> dict[str, Any]:
    """
    トレース用のメタデータを生成

    各トレースを一意に識別するためのセッションIDとタイムスタンプを含む
    """
    return {
        "session_id": str(uuid.uuid4())[:8],  # 短縮UUID
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _trace(
    name: str | None,
    run_type: str,
    metadata: dict[str, Any] | None,
) -> Callable[[F], F]:
    """
    関数呼び出しをトレースするデコレータ

    LangSmithが無効の場合はパススルー
    各呼び出しで新しいrun_idを生成し、トレースが上書きされないようにする
    """
    def decorator(func: F) -> F:
        if is_langsmith_enabled() and traceable is not None:
            @wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                combined_metadata = {
                    **(metadata or {}),
                    **generate_trace_metadata(),
                }
                traced_func = traceable(
                    name=name or func.__name__,
                    run_type=run_type,
                    metadata=combined_metadata,
                    run_id=uuid.uuid4(),
                )(func)
                return traced_func(*args, **kwargs)

            return wrapper  # type: ignore
        else:
            # LangSmithが無効な場合はそのまま返す
            return func

    return decorator


def trace_chain(
    name: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """
    ユースケース全体をトレースするデコレータ
    """
    return _trace(name=name, run_type="chain", metadata=metadata)


def trace_tool(
    name: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """
    リモート呼び出しをトレースするデコレータ
    """
    return _trace(name=name, run_type="tool", metadata=metadata)


class LogContext:
    """
    ログのコンテキスト情報を保持するヘルパー

    Example:
        ctx = LogContext(video_id="abc123", languages=["en"])
        logger.info(f"Processing {ctx}")
    """

    def __init__(self, **kwargs: Any):
        self._data = kwargs

    def __str__(self) -> str:
        parts = [f"{k}={v!r}" for k, v in self._data.items()]
        return " | ".join(parts)

    def update(self, **kwargs: Any) -> "LogContext":
        """新しいコンテキストを追加した新しいインスタンスを返す"""
        return LogContext(**{**self._data, **kwargs})

    def to_dict(self) -> dict[str, Any]:
        """辞書形式で返す"""
        return self._data.copy()
