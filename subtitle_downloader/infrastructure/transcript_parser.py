"""字幕XML（timedtext形式）のパーサー"""

import io
import re
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, iterparse

from subtitle_downloader.domain.entities import TranscriptSegment
from subtitle_downloader.domain.exceptions import TranscriptParseError
from subtitle_downloader.infrastructure.logging_config import get_logger, log_step

logger = get_logger(__name__)

# 文字列として受け取った文書の encoding 宣言は無視する
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

# XMLとしてデコードした後にも残るHTMLエンティティ（置換順に意味がある）
HTML_ENTITIES = [
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
    ("&#160;", " "),  # ノーブレークスペース
]


class XmlTranscriptParser:
    """
    <transcript><text start=".." dur="..">本文</text>...</transcript> をパース

    start / dur が欠落・不正な <text> 要素も本文は残す（タイミングは0秒）。
    文書全体がXMLとして不正な場合は TranscriptParseError。
    """

    def parse(self, xml: str) -> list[TranscriptSegment]:
        """
        字幕XMLをセグメントのリストに変換

        Args:
            xml: 字幕XML文字列

        Returns:
            TranscriptSegment のリスト（文書順）

        Raises:
            TranscriptParseError: XMLとして解釈できない
        """
        log_step(logger, "XMLパース", f"{len(xml)} 文字")

        segments = []
        try:
            source = io.BytesIO(_XML_DECLARATION.sub("", xml, count=1).encode("utf-8"))
            for _, element in iterparse(source, events=("end",)):
                if element.tag != "text":
                    continue
                segments.append(self._parse_text_element(element))
                element.clear()
        except (ParseError, DefusedXmlException) as e:
            logger.error(f"[XMLパース] 失敗: {e}")
            raise TranscriptParseError(f"Invalid transcript XML: {e}") from e

        logger.info(f"[XMLパース] {len(segments)} セグメント")
        return segments

    def _parse_text_element(self, element: Element) -> TranscriptSegment:
        """<text> 要素1つを変換（タイミングが読めなくても本文は残す）"""
        return TranscriptSegment(
            text=decode_html_entities("".join(element.itertext())),
            start_sec=_parse_seconds(element.get("start"), "start"),
            duration_sec=_parse_seconds(element.get("dur"), "dur"),
        )

    def to_plain_text(self, segments: list[TranscriptSegment]) -> str:
        """
        タイムスタンプを捨てて本文だけを空白1つで連結

        空のセグメントは除外する。タイミング情報は復元できない。
        """
        log_step(logger, "テキスト整形", f"{len(segments)} セグメント")
        text = " ".join(segment.text for segment in segments if segment.text.strip())
        logger.debug(f"  プレーンテキスト: {len(text)} 文字")
        return text


def decode_html_entities(text: str) -> str:
    """HTMLエンティティをデコードし、改行を空白にして前後の空白を除去"""
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text.replace("\n", " ").strip()


def _parse_seconds(value: str | None, name: str) -> float:
    """秒数の属性を読む。欠落・不正な値は0秒"""
    if value is None:
        return 0.0
    try:
        return float(value)
    except ValueError:
        logger.debug(f"[XMLパース] 不正な {name} 属性を0秒として扱う: {value!r}")
        return 0.0
