"""字幕取得API（InnerTube）のインターフェース"""

from typing import Protocol

from subtitle_downloader.domain.entities import CaptionTrack


class SubtitleApi(Protocol):
    """動画IDから字幕XMLを得るための3つのリモート呼び出し + APIキー抽出"""

    def fetch_page(self, video_url: str) -> str:
        """
        動画ページのHTMLを取得

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
        """
        ...

    def extract_credential(self, html: str) -> str | None:
        """HTMLからAPIキーを抽出、見つからない場合はNone"""
        ...

    def call_player_info(self, secret: str, video_id: str) -> list[CaptionTrack]:
        """
        プレイヤー情報APIを呼び出して字幕トラック一覧を取得

        Returns:
            字幕トラックのリスト（字幕がない動画は空リスト）

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
            CaptionTracksNotFoundError: レスポンスを解釈できない
        """
        ...

    def fetch_transcript(self, track_url: str) -> str:
        """
        字幕トラックのURLから字幕XMLを取得

        Raises:
            NetworkError: 通信エラー、非2xxレスポンス
        """
        ...
