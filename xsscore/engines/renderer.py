"""Reassembles a token stream into safe output text.

- Literal text: ``<`` and ``>`` become ``&lt;``/``&gt;`` and dangerous calls
  get their parentheses re-encoded.
- Kept tags: evil attributes are replaced by the replacement token (the
  separator in front of them stays), the remaining values are defanged. A tag
  with nothing to change is emitted byte for byte.
- Escaped tags: rendered like kept tags but with entity brackets.
- Unterminated tags: rendered as literal text. When one of their attributes
  is dangerous only ``&lt;``, the name and the first separator survive.

Attribute values are judged by what a browser would act on: entities
unescaped and tab/newline noise inside keywords removed. Values that still
carry ``<`` or ``>`` are handed to `nested`, which sanitizes them as a
fragment of their own.
"""

import html
from typing import Callable, List, Optional

from xsscore.engines.blacklist import MatchDecision, classify_attribute, classify_tag
from xsscore.engines.decoder import compact_exploded
from xsscore.engines.defanger import defang_value, encode_calls
from xsscore.engines.findings import DROPPED_ATTRIBUTE, ESCAPED_TAG, Finding, record
from xsscore.engines.tokenizer import Attribute, Literal, Tag, Token

LT = "&lt;"
GT = "&gt;"


def exposed_value(value: str) -> str:
    """Returns the form of `value` to sanitize.

    That is the unescaped, compacted form when it reveals markup or a
    dangerous construct, and `value` itself otherwise.
    """
    plain = compact_exploded(html.unescape(value))
    if plain == value:
        return value
    if "<" in plain or ">" in plain or defang_value(plain) != plain:
        return plain
    return value


class Renderer:
    """Renders tokens for one sanitization call."""

    def __init__(self, config, nested: Callable[[str], str],
                 findings: Optional[List[Finding]] = None):
        self.config = config
        self.nested = nested
        self.findings = findings

    def render(self, tokens: List[Token]) -> str:
        return "".join(
            self.render_literal(t) if isinstance(t, Literal) else self.render_tag(t)
            for t in tokens
        )

    def render_literal(self, token: Literal) -> str:
        text = token.text.replace("<", LT).replace(">", GT)
        return encode_calls(text, self.config.call_pattern, self.findings)

    def render_value(self, attr: Attribute) -> str:
        value = defang_value(exposed_value(attr.value), self.findings)
        if "<" in value or ">" in value:
            return self.nested(value)
        return encode_calls(value, self.config.call_pattern, self.findings)

    def render_attributes(self, tag: Tag) -> str:
        parts = []
        for attr in tag.attributes:
            parts.append(attr.prefix)
            if classify_attribute(attr.name, self.config) is MatchDecision.DROP_ATTRIBUTE:
                record(self.findings, DROPPED_ATTRIBUTE, attr.raw)
                parts.append(self.config.replacement)
                continue
            value = self.render_value(attr)
            parts.append(attr.raw if value == attr.value else attr.rebuild(value))
        parts.append(tag.tail)
        return "".join(parts)

    def is_dangerous(self, attr: Attribute) -> bool:
        if classify_attribute(attr.name, self.config) is MatchDecision.DROP_ATTRIBUTE:
            return True
        value = exposed_value(attr.value)
        return value != attr.value or defang_value(value) != value

    def render_unterminated(self, tag: Tag) -> str:
        if any(self.is_dangerous(attr) for attr in tag.attributes):
            record(self.findings, ESCAPED_TAG, tag.raw)
            return LT + tag.opener + tag.attributes[0].prefix
        if classify_tag(tag.name, self.config) is MatchDecision.ESCAPE_WHOLE_TAG:
            record(self.findings, ESCAPED_TAG, tag.raw)
        return self.render_literal(Literal(tag.raw))

    def render_tag(self, tag: Tag) -> str:
        if not tag.terminated:
            return self.render_unterminated(tag)

        body = self.render_attributes(tag)
        if classify_tag(tag.name, self.config) is MatchDecision.ESCAPE_WHOLE_TAG:
            record(self.findings, ESCAPED_TAG, tag.raw)
            return LT + tag.opener + body + GT
        return tag.raw_open + body + tag.raw_close
