"""Bencode codec for the nREPL wire protocol.

nREPL frames every message as one bencoded dictionary. Byte strings are
decoded as UTF-8 text because every field nREPL sends (code, output, printed
values, status flags) is text.
"""

from __future__ import annotations

from typing import Any, Final

from anyio import DelimiterNotFound, EndOfStream, IncompleteRead
from anyio.streams.buffered import BufferedByteReceiveStream

from nrepl_mcp.exceptions import BencodeError

# Upper bound on the digits of a length or integer prefix.
MAX_PREFIX_BYTES: Final[int] = 32

BencodeValue = int | str | list[Any] | dict[str, Any]


def encode(value: Any) -> bytes:
    """Encode a str/bytes/int/list/dict tree. Dictionary keys are sorted as the format requires."""
    chunks: list[bytes] = []
    _encode_into(value, chunks)
    return b"".join(chunks)


def _encode_into(value: Any, chunks: list[bytes]) -> None:
    match value:
        case str():
            raw = value.encode("utf-8")
            chunks.append(b"%d:" % len(raw))
            chunks.append(raw)
        case bytes():
            chunks.append(b"%d:" % len(value))
            chunks.append(value)
        case bool():
            raise TypeError("bencode has no boolean type")
        case int():
            chunks.append(b"i%de" % value)
        case list() | tuple():
            chunks.append(b"l")
            for item in value:
                _encode_into(item, chunks)
            chunks.append(b"e")
        case dict():
            if not all(isinstance(key, str) for key in value):
                raise TypeError("bencode dictionary keys must be str")
            chunks.append(b"d")
            for key in sorted(value, key=lambda k: k.encode("utf-8")):
                _encode_into(key, chunks)
                _encode_into(value[key], chunks)
            chunks.append(b"e")
        case _:
            raise TypeError(f"cannot bencode {type(value).__name__}")


def decode(data: bytes) -> BencodeValue:
    """Decode exactly one value from ``data``."""
    value, end = _decode_at(data, 0)
    if end != len(data):
        raise BencodeError(f"trailing data after bencoded value at offset {end}")
    return value


def _decode_at(data: bytes, pos: int) -> tuple[BencodeValue, int]:
    if pos >= len(data):
        raise BencodeError("unexpected end of data")
    lead = data[pos : pos + 1]
    if lead == b"i":
        end = data.find(b"e", pos)
        if end < 0:
            raise BencodeError("unterminated integer")
        return _parse_int(data[pos + 1 : end]), end + 1
    if lead == b"l":
        items: list[Any] = []
        pos += 1
        while data[pos : pos + 1] != b"e":
            item, pos = _decode_at(data, pos)
            items.append(item)
        return items, pos + 1
    if lead == b"d":
        result: dict[str, Any] = {}
        pos += 1
        while data[pos : pos + 1] != b"e":
            key, pos = _decode_at(data, pos)
            if not isinstance(key, str):
                raise BencodeError("dictionary key is not a string")
            result[key], pos = _decode_at(data, pos)
        return result, pos + 1
    if lead.isdigit():
        colon = data.find(b":", pos)
        if colon < 0:
            raise BencodeError("string length without ':'")
        length = _parse_int(data[pos:colon])
        start = colon + 1
        if start + length > len(data):
            raise BencodeError("unexpected end of data")
        return data[start : start + length].decode("utf-8", errors="replace"), start + length
    raise BencodeError(f"invalid bencode type marker {lead!r}")


async def read_value(stream: BufferedByteReceiveStream) -> BencodeValue:
    """Read exactly one value from a buffered byte stream.

    Raises:
        BencodeError: on malformed input
        anyio.EndOfStream: if the peer closed the stream before a value started
    """
    try:
        lead = await stream.receive_exactly(1)
    except IncompleteRead as exc:
        raise EndOfStream from exc
    try:
        return await _read_after(lead, stream)
    except IncompleteRead as exc:
        raise BencodeError("connection closed in the middle of a message") from exc
    except DelimiterNotFound as exc:
        raise BencodeError("length or integer prefix too long") from exc


async def _read_after(lead: bytes, stream: BufferedByteReceiveStream) -> BencodeValue:
    if lead == b"i":
        return _parse_int(await stream.receive_until(b"e", MAX_PREFIX_BYTES))
    if lead == b"l":
        items: list[Any] = []
        while (marker := await stream.receive_exactly(1)) != b"e":
            items.append(await _read_after(marker, stream))
        return items
    if lead == b"d":
        result: dict[str, Any] = {}
        while (marker := await stream.receive_exactly(1)) != b"e":
            key = await _read_after(marker, stream)
            if not isinstance(key, str):
                raise BencodeError("dictionary key is not a string")
            result[key] = await _read_after(await stream.receive_exactly(1), stream)
        return result
    if lead.isdigit():
        length = _parse_int(lead + await stream.receive_until(b":", MAX_PREFIX_BYTES))
        raw = await stream.receive_exactly(length) if length else b""
        return raw.decode("utf-8", errors="replace")
    raise BencodeError(f"invalid bencode type marker {lead!r}")


def _parse_int(raw: bytes) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise BencodeError(f"invalid integer {raw!r}") from exc
