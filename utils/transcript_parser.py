"""Decode responses from YouTube's ``get_transcript`` endpoint.

The endpoint answers in one of two shapes depending on which client
the server thinks it is talking to:

* **web** – segments live under
  ``updateEngagementPanelAction ... transcriptSegmentListRenderer`` and
  each segment's text is a list of ``runs``;
* **mobile** – segments live under
  ``elementsCommand ... transformTranscriptSegmentListArguments`` and
  each segment's text is a single ``elementsAttributedString``.

:data:`SEGMENT_EXTRACTORS` lists one extractor per shape; they are
tried in order and the first non-empty result wins.  Section header
entries in a segment list are not captions but become
:class:`~utils.models.Chapter` objects.

The module also holds the small helpers for walking YouTube's nested
JSON (:func:`dig`, :func:`find_all`, :func:`text_of`) and
:func:`parse_video_metadata`, which the page fetcher reuses.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterator, List

from utils.errors import ApiError, NoTranscriptAvailableError, ParseError
from utils.models import (
    CaptionLine,
    Chapter,
    LanguageTrack,
    ParsedTranscript,
    VideoMetadata,
)
from utils.params import read_language

PREVIEW_CHARS = 200

_WEB_PANEL = (
    "actions", 0, "updateEngagementPanelAction", "content",
    "transcriptRenderer", "content", "transcriptSearchPanelRenderer",
)
_MOBILE_LIST = (
    "actions", 0, "elementsCommand", "transformEntityCommand",
    "arguments", "transformTranscriptSegmentListArguments", "overwrite",
)


def dig(obj: Any, *path: Any) -> Any:
    """Follow ``path`` (dict keys and list indices) into ``obj``.

    Returns ``None`` as soon as a step is missing.
    """
    for step in path:
        if isinstance(step, int):
            if not isinstance(obj, list) or not -len(obj) <= step < len(obj):
                return None
        elif not isinstance(obj, dict):
            return None
        obj = obj[step] if isinstance(step, int) else obj.get(step)
        if obj is None:
            return None
    return obj


def find_all(obj: Any, key: str) -> Iterator[Any]:
    """Yield every value stored under ``key`` anywhere inside ``obj``."""
    stack = [obj]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            for k, v in current.items():
                if k == key:
                    yield v
                elif isinstance(v, (dict, list)):
                    stack.append(v)
        elif isinstance(current, list):
            stack.extend(reversed(current))


def text_of(node: Any) -> str:
    """Flatten one of YouTube's text containers to a plain string.

    Handles ``{"simpleText": ...}``, ``{"runs": [{"text": ...}]}`` and
    ``{"content": ...}`` (attributed strings).
    """
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""
    if isinstance(node.get("simpleText"), str):
        return node["simpleText"]
    runs = node.get("runs")
    if isinstance(runs, list):
        return "".join(r.get("text", "") for r in runs if isinstance(r, dict))
    if isinstance(node.get("content"), str):
        return node["content"]
    return ""


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_video_metadata(player_response: Dict[str, Any]) -> VideoMetadata:
    """Read metadata from a player-response style object.

    Looks at ``videoDetails`` and
    ``microformat.playerMicroformatRenderer``; missing fields are left
    empty.  The subscriber count is not part of a player response and is
    filled in by the page fetcher.
    """
    details = player_response.get("videoDetails") or {}
    microformat = dig(player_response, "microformat", "playerMicroformatRenderer") or {}
    return VideoMetadata(
        title=str(details.get("title") or text_of(microformat.get("title"))),
        author=str(details.get("author") or microformat.get("ownerChannelName") or ""),
        view_count=str(details.get("viewCount") or microformat.get("viewCount") or ""),
        publish_date=str(microformat.get("publishDate") or microformat.get("uploadDate") or ""),
    )


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _web_segments(data: Dict[str, Any]) -> List[Any]:
    return _as_list(dig(data, *_WEB_PANEL, "body", "transcriptSegmentListRenderer", "initialSegments"))


def _mobile_segments(data: Dict[str, Any]) -> List[Any]:
    return _as_list(dig(data, *_MOBILE_LIST, "initialSegments"))


# Tried in order; the first extractor returning a non-empty list wins.
SEGMENT_EXTRACTORS: List[Callable[[Dict[str, Any]], List[Any]]] = [
    _web_segments,
    _mobile_segments,
]


def _segment_text(renderer: Dict[str, Any]) -> str:
    snippet = renderer.get("snippet") or {}
    runs = snippet.get("runs")
    if isinstance(runs, list):
        web_text = "".join(r.get("text") or "" for r in runs if isinstance(r, dict))
        if web_text:
            return web_text
    return dig(snippet, "elementsAttributedString", "content") or ""


def _header_title(renderer: Dict[str, Any]) -> str:
    title = text_of(renderer.get("snippet"))
    if not title:
        title = text_of(dig(renderer, "snippet", "elementsAttributedString"))
    if not title:
        title = text_of(dig(renderer, "sectionHeader", "sectionHeaderViewModel", "headline"))
    return title


def _parse_segments(segments: List[Any]) -> tuple:
    lines: List[CaptionLine] = []
    headers: List[tuple] = []
    for seg in segments:
        if not isinstance(seg, dict):
            continue
        renderer = seg.get("transcriptSegmentRenderer")
        if renderer is None:
            header = seg.get("transcriptSectionHeaderRenderer")
            if isinstance(header, dict):
                end = header.get("endMs")
                headers.append((
                    _header_title(header),
                    _to_int(header.get("startMs")),
                    _to_int(end) if end is not None else None,
                ))
            continue
        text = _segment_text(renderer)
        if not text:
            continue
        start_ms = _to_int(renderer.get("startMs"))
        end_ms = _to_int(renderer.get("endMs"))
        lines.append(CaptionLine(
            text=text,
            start=start_ms / 1000,
            duration=(end_ms - start_ms) / 1000,
        ))

    last_end = 0
    if lines:
        last = lines[-1]
        last_end = int(round((last.start + last.duration) * 1000))
    chapters: List[Chapter] = []
    for i, (title, start_ms, end_ms) in enumerate(headers):
        if end_ms is None:
            end_ms = headers[i + 1][1] if i + 1 < len(headers) else max(last_end, start_ms)
        chapters.append(Chapter(title=title, start_ms=start_ms, end_ms=end_ms))
    return lines, chapters


def _parse_tracks(data: Dict[str, Any]) -> List[LanguageTrack]:
    items = _as_list(dig(
        data, *_WEB_PANEL, "footer", "transcriptFooterRenderer", "languageMenu",
        "sortFilterSubMenuRenderer", "subMenuItems",
    ))
    tracks: List[LanguageTrack] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        token = dig(item, "continuation", "reloadContinuationData", "continuation")
        code = read_language(token) if isinstance(token, str) else None
        if not code:
            continue
        tracks.append(LanguageTrack(
            code=code,
            name=text_of(item.get("title")),
            selected=bool(item.get("selected")),
        ))
    return tracks


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        error = error.get("message") or error.get("code")
    if error is None or error == "" or isinstance(error, bool):
        return "Unknown API error"
    return str(error)


def parse_transcript_response(body: str) -> ParsedTranscript:
    """Decode a raw ``get_transcript`` response body.

    Raises:
        ParseError: body is not a JSON object.
        ApiError: body carries an ``error`` member.
        NoTranscriptAvailableError: neither known shape has segments.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        preview = (body or "")[:PREVIEW_CHARS]
        raise ParseError(
            f"Failed to parse YouTube API response: {e}. Response preview: {preview}"
        ) from e
    if not isinstance(data, dict):
        raise ParseError(
            f"Unexpected YouTube API response. Response preview: {body[:PREVIEW_CHARS]}"
        )

    if data.get("error") is not None:
        raise ApiError(f"YouTube API error: {_error_message(data['error'])}")

    segments: List[Any] = []
    for extractor in SEGMENT_EXTRACTORS:
        segments = extractor(data)
        if segments:
            break
    if not segments:
        raise NoTranscriptAvailableError(
            "No transcript available for this video. The video may not have captions enabled."
        )

    lines, chapters = _parse_segments(segments)
    return ParsedTranscript(
        lines=lines,
        tracks=_parse_tracks(data),
        chapters=chapters,
        metadata=parse_video_metadata(data),
    )
