"""Input canonicalization for the sanitizer.

Attack payloads hide markup and keywords behind layers of encoding:
HTML entities (named, decimal and hex, with or without the trailing
semicolon), percent-encoding, backslash Unicode escapes and control
characters sprinkled inside keywords. `decode` peels those layers until the
text stops changing (or a pass limit is hit) so later stages only ever match
against the literal characters a browser would see. Callers check
`is_canonical` to tell the two apart.

Quote entities (``&quot;``, ``&#34;``, ``&apos;``, ``&#39;``...) stay encoded:
inside an attribute value they cannot end the value, and decoding them would
let benign text split one attribute into two.

Tab/newline noise inside keywords is not removed here. Renderers apply
`compact_exploded` to tag internals only, so literal text keeps its
whitespace.

Decoding never fails. A sequence that does not decode cleanly is left as
literal text.
"""

import re
from html.entities import html5
from urllib.parse import unquote_to_bytes

# Invisible characters a browser ignores (or that terminate strings in C
# backed parsers). Tab, newline and carriage return are kept.
INVISIBLE_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b-\u200d\u2060\ufeff]")

NUMERIC_ENTITY_RE = re.compile(r"&#(?:[xX]0*([0-9a-fA-F]{1,6})|0*([0-9]{1,7}));?")
NAMED_ENTITY_RE = re.compile(r"&([A-Za-z][A-Za-z0-9]{1,31});?")
PERCENT_RUN_RE = re.compile(r"(?:%[0-9a-fA-F]{2})+")
UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")

# Keywords that browsers still recognize with tabs or newlines inside them.
EXPLODED_KEYWORDS = (
    "javascript", "vbscript", "livescript", "jscript", "ecmascript", "script",
    "expression", "base64", "applet", "document", "window", "cookie",
    "alert", "confirm", "prompt", "eval",
)

_NOISE = "[\t\n\r]*"
EXPLODED_RE = re.compile(
    "|".join(_NOISE.join(re.escape(c) for c in word) for word in EXPLODED_KEYWORDS),
    re.IGNORECASE,
)
_NOISE_RE = re.compile("[\t\n\r]")

QUOTES = ('"', "'")


def _numeric_entity(match):
    hex_digits, dec_digits = match.groups()
    code = int(hex_digits, 16) if hex_digits else int(dec_digits)
    if code == 0:
        return ""
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF or chr(code) in QUOTES:
        return match.group(0)
    return chr(code)


def _named_entity(match):
    # a missing semicolon is tolerated for every known name, not just the
    # legacy ones
    value = html5.get(match.group(1) + ";")
    if value is None or value in QUOTES:
        return match.group(0)
    return value


def _percent_run(match):
    raw = unquote_to_bytes(match.group(0))
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return match.group(0)


def _unicode_escape(match):
    code = int(match.group(1), 16)
    if 0xD800 <= code <= 0xDFFF:
        return match.group(0)
    return chr(code)


def strip_invisible(text: str) -> str:
    """Removes NUL bytes, BOMs and other invisible control characters."""
    return INVISIBLE_RE.sub("", text)


def compact_exploded(text: str) -> str:
    """Joins dangerous keywords split by tab/newline noise (``j\\tavascript``).

    Whitespace outside a recognized keyword is untouched.
    """
    if "\t" not in text and "\n" not in text and "\r" not in text:
        return text
    return EXPLODED_RE.sub(lambda m: _NOISE_RE.sub("", m.group(0)), text)


def decode_once(text: str) -> str:
    """Runs a single normalization pass over every supported encoding."""
    if "&" in text:
        text = NUMERIC_ENTITY_RE.sub(_numeric_entity, text)
        text = NAMED_ENTITY_RE.sub(_named_entity, text)
    if "%" in text:
        text = PERCENT_RUN_RE.sub(_percent_run, text)
    if "\\u" in text:
        text = UNICODE_ESCAPE_RE.sub(_unicode_escape, text)
    return strip_invisible(text)


def decode(text: str, max_passes: int = 10) -> str:
    """Decodes `text` to a fixed point.

    Args:
        text (str): Raw, untrusted input.
        max_passes (int): Iteration bound for deeply nested encodings.

    Returns:
        str: Text with CRLF normalized to LF and invisible characters
        removed. When `max_passes` runs out first, the result still holds an
        encoded layer and `is_canonical` returns False for it.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = strip_invisible(text)
    for _ in range(max_passes):
        decoded = decode_once(text)
        if decoded == text:
            break
        text = decoded
    return text


def is_canonical(text: str) -> bool:
    """True when another decoding pass would not change `text`."""
    return decode_once(text) == text
