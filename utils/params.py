"""Build the ``params`` blob expected by the ``get_transcript`` endpoint.

The blob is a tiny protobuf-style record (tag byte, varint length,
raw bytes) holding the video ID and a nested, base64-and-percent-
encoded record with the caption kind and language.  Only the one
fixed schema needed here is implemented, so there is no dependency on
a protobuf runtime.

Layout of the inner record::

    0x0a 0x03 "asr"          field 1: caption kind
    0x12 <len> <lang>        field 2: language code
    0x1a 0x00                field 3: empty

Layout of the outer record::

    0x0a <len> <video id>    field 1
    0x12 <len> <inner>       field 2: quote(b64(inner record))
    0x18 0x01                field 3
    0x2a <len> <panel name>  field 5
    0x30 0x01                field 6
    0x38 0x01                field 7
    0x40 0x01                field 8

The same reader (:func:`iter_fields`) is used to get the language code
back out of the continuation tokens in a transcript's language menu.
"""

from __future__ import annotations

import base64
from typing import Iterator, Optional, Tuple, Union
from urllib.parse import quote, unquote

PANEL_NAME = "engagement-panel-searchable-transcript-search-panel"

# Characters left alone by JavaScript's encodeURIComponent.
_URI_SAFE = "-_.!~*'()"

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a base-128 varint."""
    out = bytearray()
    while value > 0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _length_delimited(tag: int, payload: bytes) -> bytes:
    return bytes([tag]) + encode_varint(len(payload)) + payload


def _inner_record(lang: str) -> bytes:
    return (
        _length_delimited(0x0A, b"asr")
        + _length_delimited(0x12, lang.encode("utf-8"))
        + _length_delimited(0x1A, b"")
    )


def build_params(video_id: str, lang: str = "en") -> str:
    """Return the base64 ``params`` value for a video and language.

    The output depends only on the arguments, so identical inputs
    always produce identical strings.
    """
    inner = base64.b64encode(_inner_record(lang)).decode("ascii")
    inner_encoded = quote(inner, safe=_URI_SAFE).encode("ascii")

    outer = (
        _length_delimited(0x0A, video_id.encode("utf-8"))
        + _length_delimited(0x12, inner_encoded)
        + b"\x18\x01"
        + _length_delimited(0x2A, PANEL_NAME.encode("ascii"))
        + b"\x30\x01"
        + b"\x38\x01"
        + b"\x40\x01"
    )
    return base64.b64encode(outer).decode("ascii")


def decode_varint(data: bytes, pos: int) -> Tuple[int, int]:
    """Read a varint at ``pos``.  Returns ``(value, next_pos)``."""
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7


def iter_fields(data: bytes) -> Iterator[Tuple[int, int, Union[int, bytes]]]:
    """Yield ``(field_number, wire_type, value)`` for each field in ``data``.

    Only varint and length-delimited fields occur in these records;
    anything else raises ``ValueError``.
    """
    pos = 0
    while pos < len(data):
        key, pos = decode_varint(data, pos)
        field_number, wire_type = key >> 3, key & 0x07
        if wire_type == WIRE_VARINT:
            value, pos = decode_varint(data, pos)
            yield field_number, wire_type, value
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length, pos = decode_varint(data, pos)
            if pos + length > len(data):
                raise ValueError("truncated field")
            yield field_number, wire_type, data[pos:pos + length]
            pos += length
        else:
            raise ValueError(f"unsupported wire type {wire_type}")


def _b64decode(text: str) -> bytes:
    text = unquote(text).replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    return base64.b64decode(text, validate=True)


def _field(data: bytes, number: int) -> Optional[Union[int, bytes]]:
    for field_number, _, value in iter_fields(data):
        if field_number == number:
            return value
    return None


def read_language(params: str) -> Optional[str]:
    """Return the language code encoded in a ``params`` blob.

    Works on the output of :func:`build_params` as well as on the
    continuation tokens the API hands out for other languages.
    Returns ``None`` if the blob does not have the expected shape.
    """
    try:
        inner_encoded = _field(_b64decode(params), 2)
        if not isinstance(inner_encoded, bytes):
            return None
        lang = _field(_b64decode(inner_encoded.decode("ascii")), 2)
        if not isinstance(lang, bytes):
            return None
        return lang.decode("utf-8") or None
    except ValueError:
        return None
