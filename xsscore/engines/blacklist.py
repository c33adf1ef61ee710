"""Blacklist matching for tags and attributes.

Three outcomes exist for every piece of markup:

- whole elements whose content is executable (``<script>...</script>``) and
  caller-supplied never-allowed regexes are removed before tokenizing and
  replaced by the configured replacement token;
- tags whose mere presence is unsafe are escaped (`ESCAPE_WHOLE_TAG`);
- attributes whose name matches an evil pattern are dropped (`DROP_ATTRIBUTE`).

Everything else is kept.
"""

import enum
import re
from typing import List, Optional, Tuple

from xsscore.engines.findings import REMOVED_ELEMENT, REMOVED_MATCH, Finding, record

NEVER_ALLOWED_TAGS = frozenset([
    "applet", "audio", "base", "basefont", "behavior", "bgsound", "blink",
    "body", "button", "embed", "eval", "expression", "form", "frame",
    "frameset", "head", "html", "ilayer", "iframe", "input", "isindex",
    "keygen", "layer", "link", "math", "meta", "object", "plaintext",
    "script", "select", "source", "style", "svg", "textarea", "title",
    "video", "xml", "xss",
])

DEFAULT_EVIL_ATTRIBUTES = (
    r"on\w+",
    "style",
    r"xmlns(?::[\w.-]+)?",
    "formaction",
    "form",
    "xlink:href",
    "FSCommand",
    "seekSegmentTime",
)

# A name counts as never-allowed when it starts with a listed name that is
# not continued by another letter or digit (``svg:svg``, ``script&x``).
_NEVER_ALLOWED_RE = re.compile(
    r"(?:%s)(?![a-z0-9])" % "|".join(sorted(NEVER_ALLOWED_TAGS, key=len, reverse=True)),
    re.IGNORECASE,
)

SCRIPT_ELEMENT_RE = re.compile(
    r"<\s*script\b[^>]*>.*?(?:<\s*/\s*script\b[^>]*>|\Z)",
    re.IGNORECASE | re.DOTALL,
)


class MatchDecision(enum.Enum):
    KEEP = "keep"
    DROP_ATTRIBUTE = "drop_attribute"
    ESCAPE_WHOLE_TAG = "escape_whole_tag"


def _matches_any(name: str, patterns) -> bool:
    return any(p.fullmatch(name) for p in patterns)


def classify_tag(name: str, config) -> MatchDecision:
    """Decides whether a tag must be escaped.

    Comments and declarations (``<!...>``, ``<?...>``) are always escaped.
    Caller-supplied patterns apply to tag names as well as attribute names.
    """
    if name[:1] in ("!", "?") or _NEVER_ALLOWED_RE.match(name):
        return MatchDecision.ESCAPE_WHOLE_TAG
    if config.custom_patterns and _matches_any(name, config.attribute_patterns):
        return MatchDecision.ESCAPE_WHOLE_TAG
    return MatchDecision.KEEP


def classify_attribute(name: str, config) -> MatchDecision:
    if _matches_any(name, config.attribute_patterns):
        return MatchDecision.DROP_ATTRIBUTE
    return MatchDecision.KEEP


def remove_never_allowed(text: str, config,
                         findings: Optional[List[Finding]] = None) -> str:
    """Removes executable elements and never-allowed matches from `text`.

    Returns:
        str: `text` with each removed span replaced by ``config.replacement``.
    """
    def _replace(kind, replacement):
        def _callback(match):
            record(findings, kind, match.group(0))
            return replacement
        return _callback

    if "<" in text:
        text = SCRIPT_ELEMENT_RE.sub(_replace(REMOVED_ELEMENT, config.replacement), text)
    for pattern, replacement in config.removal_patterns:
        text = pattern.sub(_replace(REMOVED_MATCH, replacement), text)
    return text


def strip_evil_names(patterns: Tuple[str, ...], names) -> Tuple[str, ...]:
    """Returns `patterns` without the entries equal (case-insensitively) to `names`."""
    lowered = {n.lower() for n in names}
    return tuple(p for p in patterns if p.lower() not in lowered)
