"""HTTP access to YouTube: the watch page and the transcript endpoint.

Two requests are made per transcript:

1. ``GET /watch?v=<id>`` with a desktop browser user agent.  The page
   carries the anonymous ``visitorData`` token the transcript endpoint
   wants, plus the embedded ``ytInitialPlayerResponse`` and
   ``ytInitialData`` objects from which metadata, caption tracks and
   chapters are scraped.
2. ``POST /youtubei/v1/get_transcript`` posing as the Android app.  The
   web client identity gets ``FAILED_PRECONDITION`` from YouTube's
   proof-of-origin check; the Android one does not.

Both calls use a 30 second timeout and map every failure to
:class:`~utils.errors.NetworkError`.  Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import Any, Dict, List

import requests

from utils.errors import NetworkError
from utils.models import Chapter, LanguageTrack, PageData, VideoMetadata
from utils.transcript_parser import dig, find_all, parse_video_metadata, text_of

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
TRANSCRIPT_API_URL = "https://www.youtube.com/youtubei/v1/get_transcript?prettyPrint=false"

REQUEST_TIMEOUT = 30  # seconds

DEFAULT_CLIENT_VERSION = "2.20251201.01.00"
ANDROID_CLIENT_VERSION = "19.29.37"
ANDROID_SDK_VERSION = 30

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}
ANDROID_HEADERS = {
    "User-Agent": f"com.google.android.youtube/{ANDROID_CLIENT_VERSION} (Linux; U; Android 11) gzip",
    "Origin": "https://www.youtube.com",
}

_VISITOR_RE = re.compile(r'"visitorData":"([^"]+)"')
_CLIENT_VERSION_RE = re.compile(r'"clientVersion":"([\d.]+)"')
_PLAYER_RESPONSE_RE = re.compile(r"ytInitialPlayerResponse\s*=\s*\{")
_INITIAL_DATA_RE = re.compile(r"ytInitialData\s*=\s*\{")


def _request(method: str, url: str, **kwargs: Any) -> str:
    """Issue one request and return the buffered body text."""
    logger.debug("%s %s", method, url)
    try:
        response = requests.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
    except requests.Timeout as e:
        raise NetworkError(f"Request timeout after {REQUEST_TIMEOUT}s: {e}") from e
    except requests.RequestException as e:
        raise NetworkError(f"Network error: {e}") from e
    try:
        response.raise_for_status()
        return response.text
    except requests.HTTPError as e:
        raise NetworkError(
            f"HTTP {response.status_code}: {response.reason or 'Unknown error'}"
        ) from e
    finally:
        response.close()


def _embedded_json(html: str, pattern: "re.Pattern[str]") -> Dict[str, Any]:
    """Decode the JSON object literal that follows ``pattern`` in ``html``."""
    match = pattern.search(html)
    if not match:
        return {}
    try:
        obj, _ = json.JSONDecoder().raw_decode(html, match.end() - 1)
    except ValueError:
        logger.debug("Could not decode embedded object matching %s", pattern.pattern)
        return {}
    return obj if isinstance(obj, dict) else {}


def _subscriber_count(initial_data: Dict[str, Any]) -> str:
    for node in find_all(initial_data, "subscriberCountText"):
        text = text_of(node) or text_of(dig(node, "accessibility", "accessibilityData", "label"))
        if text:
            return text
    return ""


def _caption_tracks(player_response: Dict[str, Any]) -> List[LanguageTrack]:
    tracks: List[LanguageTrack] = []
    seen = set()
    raw = dig(player_response, "captions", "playerCaptionsTracklistRenderer", "captionTracks") or []
    for track in raw:
        code = track.get("languageCode") if isinstance(track, dict) else None
        if not code or code in seen:
            continue
        seen.add(code)
        tracks.append(LanguageTrack(code=code, name=text_of(track.get("name"))))
    return tracks


def _page_chapters(initial_data: Dict[str, Any], length_ms: int) -> List[Chapter]:
    starts = {}
    for renderer in find_all(initial_data, "chapterRenderer"):
        if not isinstance(renderer, dict):
            continue
        try:
            start = int(renderer["timeRangeStartMillis"])
        except (KeyError, TypeError, ValueError):
            continue
        starts.setdefault(start, text_of(renderer.get("title")))
    ordered = sorted(starts.items())
    chapters: List[Chapter] = []
    for i, (start_ms, title) in enumerate(ordered):
        if i + 1 < len(ordered):
            end_ms = ordered[i + 1][0]
        else:
            end_ms = length_ms if length_ms > start_ms else sys.maxsize
        chapters.append(Chapter(title=title, start_ms=start_ms, end_ms=end_ms))
    return chapters


def parse_page(video_id: str, html: str) -> PageData:
    """Scrape the values the transcript request needs from a watch page.

    Only the visitor token matters for the request itself, and even
    that is allowed to be missing.  Everything else is best-effort.
    """
    visitor_match = _VISITOR_RE.search(html)
    visitor_token = visitor_match.group(1) if visitor_match else ""
    if not visitor_token:
        logger.warning(
            "Could not extract visitorData for video %s. Request may fail.", video_id
        )

    version_match = _CLIENT_VERSION_RE.search(html)
    client_version = version_match.group(1) if version_match else DEFAULT_CLIENT_VERSION

    player_response = _embedded_json(html, _PLAYER_RESPONSE_RE)
    initial_data = _embedded_json(html, _INITIAL_DATA_RE)

    metadata = parse_video_metadata(player_response).merged_with(
        VideoMetadata(subscriber_count=_subscriber_count(initial_data))
    )
    try:
        length_ms = int(dig(player_response, "videoDetails", "lengthSeconds") or 0) * 1000
    except (TypeError, ValueError):
        length_ms = 0

    page = PageData(
        visitor_token=visitor_token,
        client_version=client_version,
        metadata=metadata,
        tracks=_caption_tracks(player_response),
        chapters=_page_chapters(initial_data, length_ms),
    )
    logger.debug(
        "Page data for %s: client version %s, %d caption track(s), %d chapter(s)",
        video_id, client_version, len(page.tracks), len(page.chapters),
    )
    return page


def fetch_page_data(video_id: str) -> PageData:
    """Fetch the watch page for ``video_id`` and scrape it.

    Raises:
        NetworkError: on timeout, connection failure or an HTTP error status.
    """
    try:
        html = _request("GET", WATCH_URL.format(video_id=video_id), headers=BROWSER_HEADERS)
    except NetworkError as e:
        raise NetworkError(f"Failed to fetch video page: {e.message}") from e
    return parse_page(video_id, html)


def build_request_body(params: str, visitor_token: str, lang: str) -> Dict[str, Any]:
    """Return the JSON body for the transcript endpoint."""
    return {
        "context": {
            "client": {
                "hl": lang,
                "gl": "US",
                "clientName": "ANDROID",
                "clientVersion": ANDROID_CLIENT_VERSION,
                "androidSdkVersion": ANDROID_SDK_VERSION,
                "visitorData": visitor_token,
            }
        },
        "params": params,
    }


def fetch_transcript_json(
    video_id: str,
    params: str,
    visitor_token: str,
    lang: str = "en",
) -> str:
    """POST the transcript request and return the raw response body.

    Raises:
        NetworkError: on timeout, connection failure or an HTTP error status.
    """
    body = build_request_body(params, visitor_token, lang)
    logger.debug("Requesting transcript for %s (lang=%s)", video_id, lang)
    try:
        return _request(
            "POST",
            TRANSCRIPT_API_URL,
            headers=ANDROID_HEADERS,
            json=body,
        )
    except NetworkError as e:
        raise NetworkError(f"Failed to fetch transcript API: {e.message}") from e
