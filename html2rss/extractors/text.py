"""Text repair and normalization for strings pulled out of HTML.

Pages in the wild regularly serve UTF-8 bytes that some layer decoded as
Windows-1252 ("CafÃ©", "itâ€™s").  :func:`normalize_text` undoes that, then
applies NFKC and whitespace collapsing so titles compare and render cleanly.
"""

from __future__ import annotations

import re
import unicodedata

# Glyphs that show up when UTF-8 is decoded as a single-byte Western encoding,
# plus the replacement character left behind by lossy decoders.
MOJIBAKE_MARKERS: frozenset[str] = frozenset({"Ã", "â", "\ufffd"})

_MAX_REPAIR_PASSES = 3

# NFKC can compose new marker glyphs, so repair and normalization repeat
_MAX_NORMALIZE_ROUNDS = 4

_WHITESPACE_RE = re.compile(r"\s+")


def _cp1252_table() -> tuple[str, ...]:
    """Byte -> character table for Windows-1252; undefined bytes map to Latin-1."""
    chars: list[str] = []
    for byte in range(256):
        try:
            chars.append(bytes([byte]).decode("cp1252"))
        except UnicodeDecodeError:
            chars.append(chr(byte))
    return tuple(chars)


_CP1252_DECODE: tuple[str, ...] = _cp1252_table()

# Windows-1252 glyphs outside Latin-1 (e.g. "€", "™", "’") -> source byte
_CP1252_ENCODE: dict[str, int] = {
    char: byte
    for byte, char in enumerate(_CP1252_DECODE)
    if 0x80 <= byte < 0xA0 and ord(char) > 0xFF
}


def has_mojibake(text: str) -> bool:
    """Return True if *text* contains any mis-decoding marker glyph."""
    return any(marker in text for marker in MOJIBAKE_MARKERS)


def _to_bytes(text: str) -> bytes:
    """Reinterpret *text* as the byte sequence it was most likely decoded from."""
    out = bytearray()
    for char in text:
        code = ord(char)
        if code <= 0xFF:
            out.append(code)
        elif char in _CP1252_ENCODE:
            out.append(_CP1252_ENCODE[char])
        else:
            out.extend(char.encode("utf-8", errors="surrogatepass"))
    return bytes(out)


def _decode_cp1252(data: bytes) -> str:
    return "".join(_CP1252_DECODE[byte] for byte in data)


def repair_mojibake(text: str) -> str:
    """Undo up to three layers of UTF-8-read-as-Windows-1252 corruption.

    Strings without marker glyphs are returned untouched.
    """
    if not has_mojibake(text):
        return text

    current = text
    for _ in range(_MAX_REPAIR_PASSES):
        data = _to_bytes(current)
        try:
            repaired = data.decode("utf-8")
        except UnicodeDecodeError:
            repaired = _decode_cp1252(data)
        if repaired == current:
            break
        current = repaired
        if not has_mojibake(current):
            break
    return current


def collapse_whitespace(text: str) -> str:
    """NFKC-normalize, turn NBSP into spaces, collapse runs and trim."""
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\u00a0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(raw: str | None) -> str:
    """Repair mojibake and normalize whitespace / Unicode form.

    Total: never raises, ``None`` becomes ``""``.  Idempotent on its output:
    rounds of NFKC, repair and whitespace collapsing run until the text
    stops changing.
    """
    if not raw:
        return ""
    text = str(raw)
    for _ in range(_MAX_NORMALIZE_ROUNDS):
        cleaned = collapse_whitespace(repair_mojibake(unicodedata.normalize("NFKC", text)))
        if cleaned == text:
            break
        text = cleaned
    return text
