"""Normalize YouTube URLs and bare IDs to a video identifier.

Accepted forms::

    https://www.youtube.com/watch?v=dQw4w9WgXcQ
    https://youtu.be/dQw4w9WgXcQ
    https://www.youtube.com/shorts/dQw4w9WgXcQ
    dQw4w9WgXcQ

Scheme-less URLs (``youtu.be/...``, ``www.youtube.com/...``) are
treated as ``https``.  No network access happens here.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from utils.errors import InvalidArgumentError

VIDEO_ID_RE = re.compile(r"^-?[A-Za-z0-9_-]{10,11}$")

SHORT_HOSTS = {"youtu.be", "www.youtu.be"}
LONG_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
}

_SCHEMELESS_RE = re.compile(r"^(?:www\.|m\.|music\.)?youtu(?:\.be|be\.com)/", re.IGNORECASE)


def _looks_like_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _id_from_url(value: str) -> str:
    parsed = urlparse(value)
    host = (parsed.hostname or "").lower()

    if host in SHORT_HOSTS:
        video_id = parsed.path.lstrip("/").split("/", 1)[0]
        if video_id:
            return video_id
        raise InvalidArgumentError(f"Invalid YouTube URL: {value}")

    if host in LONG_HOSTS:
        video_id = parse_qs(parsed.query).get("v", [""])[0]
        if video_id:
            return video_id
        if parsed.path.startswith("/shorts/"):
            video_id = parsed.path[len("/shorts/"):].split("/", 1)[0]
            if video_id:
                return video_id
        raise InvalidArgumentError(f"Invalid YouTube URL: {value}")

    raise InvalidArgumentError(f"Could not extract video ID from: {value}")


def extract_video_id(value: str) -> str:
    """Return the video identifier for a URL or bare ID.

    Raises:
        InvalidArgumentError: if ``value`` is empty, is a URL with no
            locatable ID, or is a bare string that is not a valid ID.

    Examples::

        >>> extract_video_id("https://www.youtube.com/watch?v=abc123def45")
        'abc123def45'
        >>> extract_video_id("https://youtu.be/abc123def45")
        'abc123def45'
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError("YouTube URL or ID is required")
    value = value.strip()

    if _SCHEMELESS_RE.match(value):
        value = "https://" + value
    if _looks_like_url(value):
        return _id_from_url(value)

    if not VIDEO_ID_RE.match(value):
        raise InvalidArgumentError(f"Invalid YouTube video ID: {value}")
    return value
