"""Pytest configuration and fixtures for the transcript server tests."""

import json
import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# Add the project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Import the server first so tool modules register against it.
import server  # noqa: E402,F401
from utils.params import build_params  # noqa: E402


def web_segment(text: str, start_ms: int, end_ms: int) -> Dict[str, Any]:
    return {
        "transcriptSegmentRenderer": {
            "startMs": str(start_ms),
            "endMs": str(end_ms),
            "snippet": {"runs": [{"text": text}]},
        }
    }


def mobile_segment(text: str, start_ms: int, end_ms: int) -> Dict[str, Any]:
    return {
        "transcriptSegmentRenderer": {
            "startMs": str(start_ms),
            "endMs": str(end_ms),
            "snippet": {"elementsAttributedString": {"content": text}},
        }
    }


def section_header(title: str, start_ms: int, end_ms: Optional[int] = None) -> Dict[str, Any]:
    header: Dict[str, Any] = {"startMs": str(start_ms), "snippet": {"simpleText": title}}
    if end_ms is not None:
        header["endMs"] = str(end_ms)
    return {"transcriptSectionHeaderRenderer": header}


def language_item(code: str, title: str, selected: bool = False) -> Dict[str, Any]:
    return {
        "title": title,
        "selected": selected,
        "continuation": {
            "reloadContinuationData": {"continuation": build_params("dQw4w9WgXcQ", code)}
        },
    }


def web_response(segments: List[Dict[str, Any]], languages: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    panel: Dict[str, Any] = {
        "body": {"transcriptSegmentListRenderer": {"initialSegments": segments}},
    }
    if languages is not None:
        panel["footer"] = {
            "transcriptFooterRenderer": {
                "languageMenu": {"sortFilterSubMenuRenderer": {"subMenuItems": languages}}
            }
        }
    return {
        "actions": [{
            "updateEngagementPanelAction": {
                "content": {
                    "transcriptRenderer": {
                        "content": {"transcriptSearchPanelRenderer": panel}
                    }
                }
            }
        }]
    }


def mobile_response(segments: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "actions": [{
            "elementsCommand": {
                "transformEntityCommand": {
                    "arguments": {
                        "transformTranscriptSegmentListArguments": {
                            "overwrite": {"initialSegments": segments}
                        }
                    }
                }
            }
        }]
    }


WATCH_PAGE_TEMPLATE = """<!DOCTYPE html><html><head>
<script>ytcfg.set({{"INNERTUBE_CONTEXT":{{"client":{{"visitorData":"CgtWaXNpdG9y","clientVersion":"2.20250101.00.00"}}}}}});</script>
<script>var ytInitialPlayerResponse = {player};var meta = document.createElement('meta');</script>
<script>var ytInitialData = {initial};</script>
</head><body></body></html>"""


def watch_page(player: Dict[str, Any], initial: Dict[str, Any]) -> str:
    return WATCH_PAGE_TEMPLATE.format(player=json.dumps(player), initial=json.dumps(initial))


PLAYER_RESPONSE = {
    "videoDetails": {
        "videoId": "dQw4w9WgXcQ",
        "title": "Never Gonna Give You Up",
        "author": "Rick Astley",
        "lengthSeconds": "212",
        "viewCount": "1500000000",
    },
    "microformat": {"playerMicroformatRenderer": {"publishDate": "2009-10-24"}},
    "captions": {
        "playerCaptionsTracklistRenderer": {
            "captionTracks": [
                {"languageCode": "en", "name": {"simpleText": "English"}},
                {"languageCode": "en", "kind": "asr", "name": {"simpleText": "English (auto-generated)"}},
                {"languageCode": "de", "name": {"simpleText": "German"}},
            ]
        }
    },
}

INITIAL_DATA = {
    "contents": {
        "videoSecondaryInfoRenderer": {
            "owner": {"videoOwnerRenderer": {"subscriberCountText": {"simpleText": "4.2M subscribers"}}}
        }
    },
    "playerOverlays": {
        "markers": [
            {"chapterRenderer": {"title": {"simpleText": "Intro"}, "timeRangeStartMillis": 0}},
            {"chapterRenderer": {"title": {"simpleText": "Sponsor"}, "timeRangeStartMillis": 30000}},
            {"chapterRenderer": {"title": {"simpleText": "Song"}, "timeRangeStartMillis": 60000}},
        ]
    },
}


@pytest.fixture
def watch_html() -> str:
    return watch_page(PLAYER_RESPONSE, INITIAL_DATA)
