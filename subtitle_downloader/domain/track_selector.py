"""言語優先リストによる字幕トラック選択"""

from subtitle_downloader.domain.entities import CaptionTrack

# 「自動生成字幕ならどれでも」を表す特別なトークン
AUTO_TOKEN = "auto"


def select_caption_track(
    tracks: list[CaptionTrack],
    preferences: list[str],
) -> CaptionTrack | None:
    """
    優先言語リストに従って字幕トラックを1つ選ぶ

    優先リストを先頭から順に見て、最初に一致したトラックを返す。
    "auto" は最初の自動生成トラック、それ以外は言語コードの大文字小文字を無視した一致。
    どれにも一致しなければ tracks の先頭にフォールバックする。

    Args:
        tracks: 利用可能な字幕トラック（レスポンス順）
        preferences: 優先言語コードのリスト

    Returns:
        選択されたトラック、tracks が空の場合のみNone

    Example:
        tracks = [en(manual), hi(manual), en(asr)]
        select_caption_track(tracks, ["hi", "en"])  → hi(manual)
        select_caption_track(tracks, ["auto"])      → en(asr)
        select_caption_track(tracks, ["fr"])        → en(manual)  # フォールバック
    """
    for token in preferences:
        wanted = token.lower()
        for track in tracks:
            if wanted == AUTO_TOKEN:
                if track.is_auto_generated:
                    return track
            elif track.language_code.lower() == wanted:
                return track

    return tracks[0] if tracks else None
