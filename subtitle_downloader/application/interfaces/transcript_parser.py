"""字幕XMLパーサーのインターフェース"""

from typing import Protocol

from subtitle_downloader.domain.entities import TranscriptSegment


class TranscriptParser(Protocol):
    """字幕XML → セグメント → プレーンテキスト"""

    def parse(self, xml: str) -> list[TranscriptSegment]:
        """
        Raises:
            TranscriptParseError: XMLとして解釈できない
        """
        ...

    def to_plain_text(self, segments: list[TranscriptSegment]) -> str:
        """タイムスタンプを捨ててテキストを空白で連結"""
        ...
