"""End-to-end tests for the ``get_transcript`` tool with HTTP mocked out."""

import json
from unittest.mock import MagicMock, patch

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from conftest import (
    INITIAL_DATA,
    PLAYER_RESPONSE,
    language_item,
    mobile_response,
    mobile_segment,
    section_header,
    watch_page,
    web_response,
    web_segment,
)
from tools.transcript_tools import NO_CHAPTERS_NOTE, build_transcript_response, get_transcript
from utils.errors import InvalidArgumentError

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

PLAIN_PAGE = watch_page({"videoDetails": {"title": "Plain", "author": "Someone"}}, {})


def _response(text, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.reason = "OK"
    response.text = text
    return response


def _mock_http(page_html, api_body):
    """Patch requests so the page GET and the API POST return fixed bodies."""
    def fake_request(method, url, **kwargs):
        if method == "GET":
            return _response(page_html)
        return _response(api_body if isinstance(api_body, str) else json.dumps(api_body))
    return patch("utils.youtube_client.requests.request", side_effect=fake_request)


def test_plain_transcript():
    body = web_response([web_segment(" Never gonna ", 0, 2000), web_segment("give you up", 2000, 4000)])
    with _mock_http(PLAIN_PAGE, body):
        result = get_transcript(URL, strip_ads=False)

    assert result["transcript"] == "Never gonna give you up"
    assert result["transcript_single_line"] == "Never gonna give you up"
    assert result["video_id"] == "dQw4w9WgXcQ"
    assert result["requested_language"] == "en"
    assert result["actual_language"] == "en"
    assert result["ads_removed"] == 0
    assert result["char_count"] == len(result["transcript"])
    assert result["summary"] == "Plain | Someone | N/A | N/A | N/A"


def test_language_fallback_notice():
    body = web_response(
        [web_segment("hello", 0, 1000), web_segment("there", 65000, 66000)],
        languages=[language_item("en", "English", selected=True), language_item("fr", "French")],
    )
    with _mock_http(PLAIN_PAGE, body):
        result = get_transcript(URL, lang="ko", include_timestamps=True, strip_ads=False)

    assert result["transcript"] == (
        "[Note: Requested language 'ko' not available. Using 'en'. Available: en, fr]\n\n"
        "[0:00] hello\n[1:05] there"
    )
    assert result["actual_language"] == "en"
    assert result["available_languages"] == ["en", "fr"]
    assert result["transcript_single_line"] == (
        "[Note: Requested language 'ko' not available. Using 'en'. Available: en, fr] "
        "[0:00] hello [1:05] there"
    )


def test_available_languages_fall_back_to_page_tracks():
    body = web_response([web_segment("hi", 0, 1000)])
    with _mock_http(watch_page(PLAYER_RESPONSE, INITIAL_DATA), body):
        result = get_transcript(URL, strip_ads=False)
    assert result["available_languages"] == ["en", "de"]
    assert result["summary"] == (
        "Never Gonna Give You Up | Rick Astley | 4.2M subscribers | 1500000000 | 2009-10-24"
    )


def test_mobile_response_reports_requested_language():
    body = mobile_response([mobile_segment("annyeong", 0, 1000)])
    with _mock_http(watch_page(PLAYER_RESPONSE, INITIAL_DATA), body):
        result = get_transcript(URL, lang="ko", strip_ads=False)
    assert result["transcript"] == "annyeong"
    assert result["requested_language"] == "ko"
    assert result["actual_language"] == "ko"
    assert result["available_languages"] == ["en", "de"]


def test_ad_lines_removed_using_response_chapters():
    body = web_response([
        section_header("Intro", 0, 10000),
        web_segment("welcome", 0, 10000),
        section_header("Sponsor", 10000, 20000),
        web_segment("buy this", 10000, 15000),
        web_segment("and this", 15000, 20000),
        section_header("Main", 20000, 30000),
        web_segment("content", 20000, 30000),
    ])
    with _mock_http(PLAIN_PAGE, body):
        stripped = get_transcript(URL)
    with _mock_http(PLAIN_PAGE, body):
        unstripped = get_transcript(URL, strip_ads=False)

    assert stripped["transcript"] == (
        "[Note: Removed 2 caption line(s) inside sponsored chapters]\n\nwelcome content"
    )
    assert stripped["ads_removed"] == 2
    assert unstripped["transcript"] == "welcome buy this and this content"


def test_ad_lines_removed_using_page_chapters():
    body = web_response([
        web_segment("intro", 0, 30000),
        web_segment("sponsor read", 30000, 60000),
        web_segment("song", 60000, 90000),
    ])
    with _mock_http(watch_page(PLAYER_RESPONSE, INITIAL_DATA), body):
        result = get_transcript(URL)
    assert result["transcript"].endswith("intro song")
    assert result["ads_removed"] == 1
    assert NO_CHAPTERS_NOTE not in result["transcript"]


def test_no_chapters_note_is_appended_when_stripping():
    body = web_response([web_segment("hi", 0, 1000)])
    with _mock_http(PLAIN_PAGE, body):
        result = get_transcript(URL)
    assert result["transcript"] == f"hi\n\n{NO_CHAPTERS_NOTE}"


def test_api_error_becomes_tool_error():
    body = {"error": {"code": 400, "message": "Precondition check failed.", "status": "FAILED_PRECONDITION"}}
    with _mock_http(PLAIN_PAGE, body):
        with pytest.raises(ToolError) as excinfo:
            get_transcript(URL)
    assert str(excinfo.value) == "ApiError: YouTube API error: Precondition check failed."


def test_empty_response_becomes_tool_error():
    with _mock_http(PLAIN_PAGE, web_response([])):
        with pytest.raises(ToolError) as excinfo:
            get_transcript(URL)
    assert str(excinfo.value).startswith("NoTranscriptAvailable: ")


def test_invalid_json_becomes_tool_error():
    with _mock_http(PLAIN_PAGE, "<html>oops</html>"):
        with pytest.raises(ToolError) as excinfo:
            get_transcript(URL)
    assert str(excinfo.value).startswith("ParseError: ")
    assert "<html>oops</html>" in str(excinfo.value)


def test_invalid_url_fails_before_any_request():
    with patch("utils.youtube_client.requests.request") as mock_request:
        with pytest.raises(ToolError) as excinfo:
            get_transcript("https://www.youtube.com/shorts/")
    assert str(excinfo.value).startswith("InvalidArgument: ")
    mock_request.assert_not_called()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"url": None},
        {"url": 123},
        {"url": URL, "lang": ""},
        {"url": URL, "lang": 5},
        {"url": URL, "include_timestamps": "yes"},
        {"url": URL, "strip_ads": 1},
    ],
)
def test_argument_types_are_checked(kwargs):
    with pytest.raises(InvalidArgumentError):
        build_transcript_response(**kwargs)
