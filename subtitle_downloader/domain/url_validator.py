"""YouTube URL の検証と動画IDの抽出"""

import re

# 対応URL形式（先にマッチしたものを採用）
_URL_PATTERNS = [
    # 通常: https://www.youtube.com/watch?v=VIDEO_ID
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/watch\?(?:.*&)?v=([a-zA-Z0-9_-]{11})"),
    # 短縮: https://youtu.be/VIDEO_ID
    re.compile(r"(?:https?://)?youtu\.be/([a-zA-Z0-9_-]{11})"),
    # 埋め込み: https://www.youtube.com/embed/VIDEO_ID
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    # モバイル: https://m.youtube.com/watch?v=VIDEO_ID
    re.compile(r"(?:https?://)?m\.youtube\.com/watch\?(?:.*&)?v=([a-zA-Z0-9_-]{11})"),
]

_VIDEO_ID_PATTERN = re.compile(r"[a-zA-Z0-9_-]{11}")

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def is_recognized(url: str) -> bool:
    """YouTube の URL かどうか（空文字列は False）"""
    if not url or not url.strip():
        return False
    return "youtube.com" in url or "youtu.be" in url


def extract_video_id(url: str) -> str | None:
    """
    URLから11文字の動画IDを抽出

    既に動画IDの形式であればそのまま返す。

    Args:
        url: YouTube URL または動画ID

    Returns:
        動画ID、どの形式にも一致しない場合はNone
    """
    for pattern in _URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)

    candidate = url.strip()
    if _VIDEO_ID_PATTERN.fullmatch(candidate):
        return candidate

    return None


def build_watch_url(video_id: str) -> str:
    """動画IDから視聴ページURLを生成"""
    return WATCH_URL.format(video_id=video_id)
