"""Download a YouTube transcript through the Innertube ``get_transcript`` API.

This module ties the pipeline together:

1. :func:`utils.youtube_client.fetch_page_data` scrapes the watch page
   for the visitor token, metadata, caption tracks and chapters;
2. :func:`utils.params.build_params` encodes the request parameter;
3. :func:`utils.youtube_client.fetch_transcript_json` calls the API;
4. :func:`utils.transcript_parser.parse_transcript_response` decodes it.

The response and the page are then merged into a
:class:`~utils.models.TranscriptResult`.  Filtering and formatting are
left to the caller (see ``tools.transcript_tools``).

We avoid external dependencies such as ``youtube_transcript_api``; the
only HTTP client used is ``requests``.

Functions:
    fetch_transcript(video_id: str, lang: str = "en") -> TranscriptResult:
        Fetch captions for a video.  Raises one of the
        :mod:`utils.errors` types on failure; nothing is retried.
"""

from __future__ import annotations

import logging

from utils.models import TranscriptResult
from utils.params import build_params
from utils.transcript_parser import parse_transcript_response
from utils.youtube_client import fetch_page_data, fetch_transcript_json

logger = logging.getLogger(__name__)


def fetch_transcript(video_id: str, lang: str = "en") -> TranscriptResult:
    """Download the transcript for ``video_id`` in ``lang``.

    If YouTube serves another language instead (the API falls back on
    its own when ``lang`` has no track), the served language is
    reported in ``TranscriptResult.language``; no substitution is made
    here.

    Only the web-shaped response carries a language menu.  A
    mobile-shaped response has none, so a fallback there cannot be
    detected: the served language is reported as ``lang`` and the
    available tracks come from the watch page's ``captionTracks``.

    Args:
        video_id: A normalized video ID (see ``utils.video_id``).
        lang: Requested caption language code.

    Returns:
        A fresh :class:`TranscriptResult`.
    """
    page = fetch_page_data(video_id)
    logger.debug("Scraped web client version %s for %s", page.client_version, video_id)

    params = build_params(video_id, lang)
    body = fetch_transcript_json(video_id, params, page.visitor_token, lang)
    parsed = parse_transcript_response(body)

    tracks = parsed.tracks or page.tracks
    selected = parsed.selected_track
    language = selected.code if selected else lang

    return TranscriptResult(
        video_id=video_id,
        lines=parsed.lines,
        requested_language=lang,
        language=language,
        available_tracks=tracks,
        chapters=parsed.chapters or page.chapters,
        metadata=parsed.metadata.merged_with(page.metadata),
    )
