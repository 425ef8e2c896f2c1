"""Data types shared by the transcript pipeline.

All of these are created inside a single tool call and thrown away
when it returns; nothing here is cached or shared between calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

# Chapter titles that mark sponsored segments.  Korean keywords are
# matched as substrings since word boundaries do not apply to them.
_AD_TITLE_RE = re.compile(
    r"\b(?:sponsor(?:ed|ship)?|ads?|advert(?:isement)?|promo(?:tion)?|paid promotion)\b"
    r"|광고|협찬",
    re.IGNORECASE,
)


def is_ad_title(title: str) -> bool:
    """Return ``True`` if a chapter title looks like a sponsor segment."""
    return bool(_AD_TITLE_RE.search(title or ""))


@dataclass(frozen=True)
class CaptionLine:
    """One timed caption unit.  Times are in seconds."""

    text: str
    start: float
    duration: float

    @property
    def start_ms(self) -> int:
        return int(round(self.start * 1000))


@dataclass(frozen=True)
class LanguageTrack:
    code: str
    name: str = ""
    selected: bool = False


@dataclass(frozen=True)
class Chapter:
    """A named half-open interval ``[start_ms, end_ms)`` of a video."""

    title: str
    start_ms: int
    end_ms: int

    @property
    def is_ad(self) -> bool:
        return is_ad_title(self.title)

    def contains(self, ms: int) -> bool:
        return self.start_ms <= ms < self.end_ms


@dataclass(frozen=True)
class VideoMetadata:
    """Descriptive fields shown next to a transcript.

    Everything is best-effort; any field may be an empty string.
    """

    title: str = ""
    author: str = ""
    subscriber_count: str = ""
    view_count: str = ""
    publish_date: str = ""

    def merged_with(self, other: "VideoMetadata") -> "VideoMetadata":
        """Fill this instance's empty fields from ``other``."""
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(self)
            if not getattr(self, f.name) and getattr(other, f.name)
        }
        return replace(self, **updates) if updates else self

    def summary_line(self) -> str:
        values = [
            self.title,
            self.author,
            self.subscriber_count,
            self.view_count,
            self.publish_date,
        ]
        return " | ".join(v if v else "N/A" for v in values)


@dataclass(frozen=True)
class PageData:
    """Values scraped from a video's public watch page."""

    visitor_token: str
    client_version: str
    metadata: VideoMetadata = field(default_factory=VideoMetadata)
    tracks: List[LanguageTrack] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedTranscript:
    """Everything the response decoder pulls out of one API response."""

    lines: List[CaptionLine]
    tracks: List[LanguageTrack] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)
    metadata: VideoMetadata = field(default_factory=VideoMetadata)

    @property
    def ad_chapters(self) -> List[Chapter]:
        return [c for c in self.chapters if c.is_ad]

    @property
    def selected_track(self) -> Optional[LanguageTrack]:
        for track in self.tracks:
            if track.selected:
                return track
        return None


@dataclass(frozen=True)
class TranscriptResult:
    """Terminal artifact of :func:`utils.video_transcript.fetch_transcript`."""

    video_id: str
    lines: List[CaptionLine]
    requested_language: str
    language: str
    available_tracks: List[LanguageTrack] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)
    metadata: VideoMetadata = field(default_factory=VideoMetadata)

    @property
    def ad_chapters(self) -> List[Chapter]:
        return [c for c in self.chapters if c.is_ad]

    @property
    def available_languages(self) -> List[str]:
        return [t.code for t in self.available_tracks]

    @property
    def language_fell_back(self) -> bool:
        return self.language != self.requested_language
