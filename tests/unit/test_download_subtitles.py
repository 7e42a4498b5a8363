"""字幕ダウンロードユースケースのテスト"""

from collections.abc import Callable

import pytest

from subtitle_downloader.application.usecases.download_subtitles import (
    DownloadSubtitlesConfig,
    DownloadSubtitlesUseCase,
)
from subtitle_downloader.domain.entities import (
    CaptionKind,
    CaptionTrack,
    ErrorKind,
    SubtitleError,
    SubtitleSuccess,
)
from subtitle_downloader.domain.exceptions import NetworkError
from subtitle_downloader.infrastructure.credential_cache import CredentialCache
from subtitle_downloader.infrastructure.key_value_store import InMemoryStore
from subtitle_downloader.infrastructure.transcript_parser import XmlTranscriptParser

VIDEO_ID = "abc12345678"
URL = f"https://youtu.be/{VIDEO_ID}"

EN_TRACK = CaptionTrack(
    base_url="https://www.youtube.com/api/timedtext?lang=en",
    display_name="English",
    language_code="en",
    kind=CaptionKind.MANUAL,
)
HI_TRACK = CaptionTrack(
    base_url="https://www.youtube.com/api/timedtext?lang=hi",
    display_name="Hindi",
    language_code="hi",
    kind=CaptionKind.MANUAL,
)
ASR_TRACK = CaptionTrack(
    base_url="https://www.youtube.com/api/timedtext?lang=ja&kind=asr",
    display_name="Japanese (auto-generated)",
    language_code="ja",
    kind=CaptionKind.AUTO_GENERATED,
)

TRANSCRIPT_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0.5" dur="1.2">Hello &amp;amp; welcome</text>'
    '<text start="1.7" dur="2.0">to the\nshow</text>'
    "</transcript>"
)
PAGE_HTML = '<script>ytcfg.set({"INNERTUBE_API_KEY":"fresh-key"})</script>'


class FakeSubtitleApi:
    """呼び出しを記録するテスト用API"""

    def __init__(
        self,
        tracks: list[CaptionTrack] | None = None,
        player_results: list[object] | None = None,
        page_html: str = PAGE_HTML,
        page_error: Exception | None = None,
        transcript: str | Exception = TRANSCRIPT_XML,
    ):
        # player_results: 呼び出しごとの結果（例外なら送出）。なければ常に tracks
        self.tracks = tracks if tracks is not None else [EN_TRACK]
        self.player_results = list(player_results or [])
        self.page_html = page_html
        self.page_error = page_error
        self.transcript = transcript
        self.calls: list[tuple] = []

    def fetch_page(self, video_url: str) -> str:
        self.calls.append(("fetch_page", video_url))
        if self.page_error is not None:
            raise self.page_error
        return self.page_html

    def extract_credential(self, html: str) -> str | None:
        self.calls.append(("extract_credential",))
        return "fresh-key" if "INNERTUBE_API_KEY" in html else None

    def call_player_info(self, secret: str, video_id: str) -> list[CaptionTrack]:
        self.calls.append(("call_player_info", secret, video_id))
        if self.player_results:
            result = self.player_results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result  # type: ignore[return-value]
        return self.tracks

    def fetch_transcript(self, track_url: str) -> str:
        self.calls.append(("fetch_transcript", track_url))
        if isinstance(self.transcript, Exception):
            raise self.transcript
        return self.transcript

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def cache() -> CredentialCache:
    return CredentialCache(InMemoryStore(), clock=lambda: 1_700_000_000.0)


@pytest.fixture
def make_usecase(cache: CredentialCache) -> Callable[[FakeSubtitleApi], DownloadSubtitlesUseCase]:
    def factory(api: FakeSubtitleApi) -> DownloadSubtitlesUseCase:
        return DownloadSubtitlesUseCase(
            subtitle_api=api,
            credential_cache=cache,
            transcript_parser=XmlTranscriptParser(),
        )

    return factory


class TestSuccess:
    """正常系"""

    def test_end_to_end_with_fresh_credential(self, make_usecase, cache) -> None:
        """キャッシュなし: ページ取得 → キー抽出 → トラック → 字幕"""
        api = FakeSubtitleApi(tracks=[EN_TRACK])

        outcome = make_usecase(api).execute(URL, ["en"])

        assert outcome == SubtitleSuccess(text="Hello & welcome to the show", language_code="en")
        assert api.calls[0] == ("fetch_page", f"https://www.youtube.com/watch?v={VIDEO_ID}")
        assert ("call_player_info", "fresh-key", VIDEO_ID) in api.calls
        assert ("fetch_transcript", EN_TRACK.base_url) in api.calls
        assert cache.get_secret() == "fresh-key"

    def test_cached_credential_skips_page_fetch(self, make_usecase, cache) -> None:
        """キャッシュ済みならページを取得しない"""
        cache.put("cached-key")
        api = FakeSubtitleApi()

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleSuccess)
        assert "fetch_page" not in api.call_names()
        assert api.calls[0] == ("call_player_info", "cached-key", VIDEO_ID)

    def test_default_preferences(self, make_usecase) -> None:
        """優先言語を省略すると en → hi → auto"""
        api = FakeSubtitleApi(tracks=[ASR_TRACK, HI_TRACK])

        outcome = make_usecase(api).execute(URL)

        assert isinstance(outcome, SubtitleSuccess)
        assert outcome.language_code == "hi"
        assert ("fetch_transcript", HI_TRACK.base_url) in api.calls

    def test_configured_default_preferences(self, cache) -> None:
        """設定でデフォルトの優先言語を変えられる"""
        api = FakeSubtitleApi(tracks=[EN_TRACK, ASR_TRACK])
        usecase = DownloadSubtitlesUseCase(
            subtitle_api=api,
            credential_cache=cache,
            transcript_parser=XmlTranscriptParser(),
            config=DownloadSubtitlesConfig(default_language_preferences=["auto"]),
        )

        usecase.execute(URL)

        assert ("fetch_transcript", ASR_TRACK.base_url) in api.calls

    def test_unmatched_preference_falls_back_to_first_track(self, make_usecase) -> None:
        """希望言語がなくても先頭トラックで成功"""
        api = FakeSubtitleApi(tracks=[HI_TRACK, EN_TRACK])

        outcome = make_usecase(api).execute(URL, ["fr"])

        assert isinstance(outcome, SubtitleSuccess)
        assert outcome.language_code == "hi"


class TestCredentialRetry:
    """APIキー更新と再試行"""

    def test_stale_cached_key_refreshed_and_retried(self, make_usecase, cache) -> None:
        """キャッシュ済みキーで失敗 → キー更新 → 再試行で成功"""
        cache.put("stale-key")
        api = FakeSubtitleApi(
            player_results=[NetworkError("HTTP 403: Forbidden", status_code=403), [EN_TRACK]]
        )

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleSuccess)
        player_calls = [c for c in api.calls if c[0] == "call_player_info"]
        assert [c[1] for c in player_calls] == ["stale-key", "fresh-key"]
        assert cache.get_secret() == "fresh-key"

    def test_retry_exhausted_becomes_no_subtitles(self, make_usecase) -> None:
        """再試行も失敗したら通信エラーではなく字幕なし"""
        api = FakeSubtitleApi(
            player_results=[NetworkError("HTTP 403"), NetworkError("HTTP 403")]
        )

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NO_SUBTITLES_AVAILABLE
        assert api.call_names().count("call_player_info") == 2

    def test_retries_exactly_once(self, make_usecase) -> None:
        """再試行は1回だけ"""
        api = FakeSubtitleApi(player_results=[RuntimeError("a"), RuntimeError("b"), [EN_TRACK]])

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NO_SUBTITLES_AVAILABLE
        assert api.call_names().count("call_player_info") == 2

    def test_refresh_extraction_failure_becomes_no_subtitles(self, make_usecase, cache) -> None:
        """再取得でキーが抽出できなければ字幕なし、再試行しない"""
        cache.put("stale-key")
        api = FakeSubtitleApi(
            player_results=[NetworkError("HTTP 403")],
            page_html="<html>consent wall</html>",
        )

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NO_SUBTITLES_AVAILABLE
        assert api.call_names().count("call_player_info") == 1
        assert cache.get() is None

    def test_refresh_network_failure_becomes_no_subtitles(self, make_usecase, cache) -> None:
        """再取得時のページ取得失敗も字幕なし"""
        cache.put("stale-key")
        api = FakeSubtitleApi(
            player_results=[NetworkError("HTTP 403")],
            page_error=NetworkError("connection reset"),
        )

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NO_SUBTITLES_AVAILABLE


class TestErrors:
    """異常系"""

    @pytest.mark.parametrize("url", ["", "   "])
    def test_blank_url(self, make_usecase, url: str) -> None:
        """空URLは INVALID_URL"""
        api = FakeSubtitleApi()
        outcome = make_usecase(api).execute(url)
        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.INVALID_URL
        assert api.calls == []

    def test_not_a_url(self, make_usecase) -> None:
        """URLでない文字列は INVALID_URL"""
        outcome = make_usecase(FakeSubtitleApi()).execute("not a url")
        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.INVALID_URL

    def test_youtube_url_without_id(self, make_usecase) -> None:
        """動画IDを抽出できないYouTube URLは INVALID_VIDEO_ID"""
        outcome = make_usecase(FakeSubtitleApi()).execute("https://www.youtube.com/feed/trending")
        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.INVALID_VIDEO_ID

    def test_credential_not_in_page(self, make_usecase, cache) -> None:
        """ページにキーがなければ CREDENTIAL_EXTRACTION_FAILED"""
        api = FakeSubtitleApi(page_html="<html>nothing</html>")

        outcome = make_usecase(api).execute(URL)

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.CREDENTIAL_EXTRACTION_FAILED
        assert "call_player_info" not in api.call_names()
        assert cache.get() is None

    def test_initial_page_fetch_failure_is_network_error(self, make_usecase) -> None:
        """初回のページ取得失敗は再試行せず NETWORK_ERROR"""
        error = NetworkError("HTTP 503", status_code=503)
        api = FakeSubtitleApi(page_error=error)

        outcome = make_usecase(api).execute(URL)

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NETWORK_ERROR
        assert outcome.cause is error
        assert api.call_names() == ["fetch_page"]

    def test_no_tracks(self, make_usecase) -> None:
        """トラックがなければ NO_SUBTITLES_AVAILABLE"""
        outcome = make_usecase(FakeSubtitleApi(tracks=[])).execute(URL)
        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.NO_SUBTITLES_AVAILABLE

    def test_transcript_download_failure(self, make_usecase) -> None:
        """字幕XMLの取得失敗は TRANSCRIPT_DOWNLOAD_FAILED"""
        api = FakeSubtitleApi(transcript=NetworkError("HTTP 404", status_code=404))

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.TRANSCRIPT_DOWNLOAD_FAILED
        assert isinstance(outcome.cause.__cause__, NetworkError)

    def test_transcript_parse_failure(self, make_usecase) -> None:
        """壊れたXMLは TRANSCRIPT_PARSE_FAILED"""
        api = FakeSubtitleApi(transcript="<transcript><text>")

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.TRANSCRIPT_PARSE_FAILED

    def test_unexpected_exception_is_unknown_error(self, make_usecase) -> None:
        """想定外の例外は UNKNOWN_ERROR（causeを保持）"""
        error = RuntimeError("boom")
        api = FakeSubtitleApi(transcript=error)

        outcome = make_usecase(api).execute(URL, ["en"])

        assert isinstance(outcome, SubtitleError)
        assert outcome.kind is ErrorKind.UNKNOWN_ERROR
        assert outcome.message == "boom"
        assert outcome.cause is error
