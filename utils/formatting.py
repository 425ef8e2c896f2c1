"""Turn caption lines into transcript text.

:func:`filter_ad_lines` drops lines that start inside sponsor chapters,
:func:`format_transcript` renders what is left either as one paragraph
or as ``[M:SS] text`` lines, and :func:`normalize_whitespace` gives the
single-line copy returned next to the formatted text.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

from utils.models import CaptionLine, Chapter


def filter_ad_lines(
    lines: Sequence[CaptionLine],
    chapters: Iterable[Chapter],
    enabled: bool = True,
) -> Tuple[List[CaptionLine], int]:
    """Remove lines whose start falls inside an ad chapter.

    A chapter covers ``[start_ms, end_ms)``, so a line starting exactly
    at ``end_ms`` is kept.  Chapters that are not ad chapters are
    ignored.

    Returns:
        The surviving lines in their original order, and the number
        of lines removed.
    """
    ad_chapters = [c for c in chapters if c.is_ad]
    if not enabled or not ad_chapters:
        return list(lines), 0
    kept = [
        line for line in lines
        if not any(c.contains(line.start_ms) for c in ad_chapters)
    ]
    return kept, len(lines) - len(kept)


def format_timestamp(seconds: float) -> str:
    """``[M:SS]`` below an hour, ``[H:MM:SS]`` from an hour on."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"[{hours}:{minutes:02d}:{secs:02d}]"
    return f"[{minutes}:{secs:02d}]"


def format_transcript(lines: Iterable[CaptionLine], include_timestamps: bool = False) -> str:
    if include_timestamps:
        return "\n".join(
            f"{format_timestamp(line.start)} {line.text.strip()}"
            for line in lines
            if line.text.strip()
        )
    return " ".join(line.text.strip() for line in lines if line.text.strip())


def normalize_whitespace(text: str) -> str:
    """Collapse line breaks and runs of whitespace to single spaces."""
    return re.sub(r"\s+", " ", text).strip()
