"""MCP tools for retrieving YouTube transcripts.

This module exposes a single tool, ``get_transcript``, that accepts a
YouTube URL (or bare video ID) and returns the video's caption
transcript as text.  It uses ``utils.video_id`` to normalize the
reference, ``utils.video_transcript`` to download and decode the
captions via YouTube's Innertube API, and ``utils.formatting`` to drop
sponsor segments and render the text.

The tool output includes:

* ``transcript`` – The transcript text, optionally with ``[M:SS]``
  timestamps.  Bracketed notes are prepended when YouTube served a
  different language than requested or when sponsor lines were
  removed, and appended when ad filtering was requested but the video
  has no chapter markers.
* ``summary`` – ``Title | Author | Subs | Views | Date``.
* ``transcript_single_line`` – The same text with all line breaks and
  whitespace runs collapsed to single spaces.
* ``video_id``, ``requested_language``, ``actual_language``,
  ``available_languages``, ``include_timestamps``, ``ads_removed`` and
  ``char_count`` for reference.

Example call:

.. code-block:: json

    {
      "url": "https://www.youtube.com/watch?v=DFlm3_EIbko",
      "lang": "en",
      "include_timestamps": true
    }

Failures are reported as MCP tool errors whose text starts with the
error kind (``InvalidArgument``, ``NetworkError``, ``ParseError``,
``ApiError`` or ``NoTranscriptAvailable``).
"""

from __future__ import annotations

import logging
from typing import Dict

from mcp.server.fastmcp.exceptions import ToolError

from server import mcp  # Shared FastMCP instance
from utils.errors import InvalidArgumentError, TranscriptError
from utils.formatting import filter_ad_lines, format_transcript, normalize_whitespace
from utils.models import TranscriptResult
from utils.video_id import extract_video_id
from utils.video_transcript import fetch_transcript

logger = logging.getLogger(__name__)

NO_CHAPTERS_NOTE = (
    "[Note: No chapter markers found. Please manually exclude any "
    "sponsored or promotional content.]"
)


def _validate_arguments(url: object, lang: object, include_timestamps: object, strip_ads: object) -> None:
    if not isinstance(url, str) or not url.strip():
        raise InvalidArgumentError("URL parameter is required and must be a string")
    if not isinstance(lang, str) or not lang.strip():
        raise InvalidArgumentError("Language code must be a non-empty string")
    if not isinstance(include_timestamps, bool):
        raise InvalidArgumentError("include_timestamps must be a boolean")
    if not isinstance(strip_ads, bool):
        raise InvalidArgumentError("strip_ads must be a boolean")


def compose_transcript_text(result: TranscriptResult, text: str, removed: int, strip_ads: bool) -> str:
    """Wrap formatted transcript text with the bracketed notices."""
    if removed:
        text = f"[Note: Removed {removed} caption line(s) inside sponsored chapters]\n\n{text}"
    if result.language_fell_back:
        available = ", ".join(result.available_languages) or result.language
        text = (
            f"[Note: Requested language '{result.requested_language}' not available. "
            f"Using '{result.language}'. Available: {available}]\n\n{text}"
        )
    if strip_ads and not result.chapters:
        text = f"{text}\n\n{NO_CHAPTERS_NOTE}"
    return text


def build_transcript_response(
    url: str,
    lang: str = "en",
    include_timestamps: bool = False,
    strip_ads: bool = True,
) -> Dict[str, object]:
    """Run the whole pipeline and build the tool's result dictionary.

    Raises:
        TranscriptError: any pipeline failure, unchanged.
    """
    _validate_arguments(url, lang, include_timestamps, strip_ads)
    video_id = extract_video_id(url)
    logger.info(
        "Processing transcript for video: %s, lang: %s, timestamps: %s, strip_ads: %s",
        video_id, lang, include_timestamps, strip_ads,
    )

    result = fetch_transcript(video_id, lang)
    lines, removed = filter_ad_lines(result.lines, result.chapters, enabled=strip_ads)
    text = format_transcript(lines, include_timestamps)
    transcript = compose_transcript_text(result, text, removed, strip_ads)

    logger.info(
        "Extracted transcript for %s (%d chars, lang: %s, %d ad line(s) removed)",
        video_id, len(transcript), result.language, removed,
    )
    return {
        "transcript": transcript,
        "summary": result.metadata.summary_line(),
        "transcript_single_line": normalize_whitespace(transcript),
        "video_id": video_id,
        "requested_language": lang,
        "actual_language": result.language,
        "available_languages": result.available_languages,
        "include_timestamps": include_timestamps,
        "ads_removed": removed,
        "char_count": len(transcript),
    }


@mcp.tool()
def get_transcript(
    url: str,
    lang: str = "en",
    include_timestamps: bool = False,
    strip_ads: bool = True,
) -> Dict[str, object]:  # type: ignore[override]
    """Extract the transcript of a YouTube video.

    YouTube falls back to an available language on its own if ``lang``
    has no captions; the returned text then starts with a note naming
    the requested and served languages.

    Args:
        url: YouTube video URL (``youtube.com/watch?v=``, ``youtu.be/``
            or ``youtube.com/shorts/``) or an 11‑character video ID.
        lang: Caption language code, e.g. ``"en"`` or ``"ko"``.
        include_timestamps: Prefix each line with ``[M:SS]`` (or
            ``[H:MM:SS]`` past the first hour).  Useful for referencing
            specific moments.
        strip_ads: Drop caption lines inside chapters titled like
            sponsor segments.

    Returns:
        A dictionary with ``transcript``, ``summary``,
        ``transcript_single_line`` and reference fields such as
        ``video_id`` and ``actual_language``.
    """
    try:
        return build_transcript_response(url, lang, include_timestamps, strip_ads)
    except TranscriptError as e:
        logger.error("Transcript extraction failed: %s", e)
        raise ToolError(str(e)) from e
