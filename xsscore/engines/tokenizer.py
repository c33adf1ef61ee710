"""Tag tokenizer.

Splits canonical text into `Literal` and `Tag` tokens with one left-to-right
scan. This is deliberately not an HTML parser: there is no tree, no implied
end tags and no error recovery beyond the two rules below.

1. A `<` only opens a tag when a name follows it (a letter, or `!`/`?` for
   comments and declarations). Anything else stays literal text.
2. A `<` met outside a quoted attribute value before the closing `>`
   abandons the current candidate. The abandoned `<` becomes literal text and
   scanning restarts at the nested `<`, so for ``<a<b<c>`` only ``<c>`` is
   a live tag.

A tag that runs into the end of the input is still emitted as a `Tag` with
``terminated=False``.

Concatenating ``token.raw`` over the result reproduces the input exactly.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

TAG_OPEN_RE = re.compile(r"<(/?)([A-Za-z!?][^\s/<>]*)")
SEPARATOR_RE = re.compile(r"[\s/]*")
ATTR_NAME_RE = re.compile(r"[^\s/<>][^\s/<>=]*")
ATTR_VALUE_RE = re.compile(r"""(\s*=\s*)(?:"([^"]*)"|'([^']*)'|([^\s<>]*))""")

QUOTE_ENTITIES = {'"': "&quot;", "'": "&#39;"}


@dataclass
class Attribute:
    """One attribute of a tag.

    ``raw`` is the exact source span (name, assignment, quotes and value);
    ``prefix`` is the separator text (whitespace and slashes) before it.
    """
    name: str
    value: str = ""
    raw: str = ""
    prefix: str = ""
    assign: str = ""
    quote: str = ""

    def rebuild(self, value: str) -> str:
        """Returns the span with `value` in place of the current value.

        The quote character is entity-encoded inside the value so the value
        cannot end early.
        """
        if not self.assign:
            return self.raw
        if self.quote:
            value = value.replace(self.quote, QUOTE_ENTITIES[self.quote])
        return f"{self.name}{self.assign}{self.quote}{value}{self.quote}"


@dataclass
class Tag:
    name: str
    closing: bool = False
    attributes: List[Attribute] = field(default_factory=list)
    # separator text between the last attribute and the closing bracket
    tail: str = ""
    terminated: bool = True
    raw: str = ""

    @property
    def self_closing(self) -> bool:
        return self.terminated and self.tail.endswith("/")

    @property
    def opener(self) -> str:
        return "/" + self.name if self.closing else self.name

    @property
    def raw_open(self) -> str:
        return "<" + self.opener

    @property
    def raw_close(self) -> str:
        return ">" if self.terminated else ""


@dataclass
class Literal:
    text: str

    @property
    def raw(self) -> str:
        return self.text


Token = Union[Literal, Tag]


def _scan_tag(text: str, match) -> Tuple[Optional[Tag], int]:
    """Scans one tag candidate starting at `match`.

    Returns:
        tuple: ``(tag, end)``; ``tag`` is None when a nested ``<`` abandoned
        the candidate, in which case ``end`` is the position of that ``<``.
    """
    closing, name = match.group(1) == "/", match.group(2)
    tag = Tag(name=name, closing=closing)
    length = len(text)
    pos = match.end()

    while True:
        sep_end = SEPARATOR_RE.match(text, pos).end()
        if sep_end >= length:
            tag.tail = text[pos:]
            tag.terminated = False
            tag.raw = text[match.start():]
            return tag, length
        char = text[sep_end]
        if char == ">":
            tag.tail = text[pos:sep_end]
            tag.raw = text[match.start():sep_end + 1]
            return tag, sep_end + 1
        if char == "<":
            return None, sep_end

        name_match = ATTR_NAME_RE.match(text, sep_end)
        attr = Attribute(name=name_match.group(0), prefix=text[pos:sep_end])
        end = name_match.end()
        value_match = ATTR_VALUE_RE.match(text, end)
        if value_match:
            attr.assign = value_match.group(1)
            if value_match.group(2) is not None:
                attr.quote, attr.value = '"', value_match.group(2)
            elif value_match.group(3) is not None:
                attr.quote, attr.value = "'", value_match.group(3)
            else:
                attr.value = value_match.group(4)
            end = value_match.end()
        attr.raw = text[sep_end:end]
        tag.attributes.append(attr)
        pos = end


def tokenize(text: str) -> List[Token]:
    """Splits `text` into literal and tag tokens.

    Args:
        text (str): Canonical (already decoded) text.

    Returns:
        List[Token]: Tokens in source order. Adjacent literal text is merged.
    """
    tokens: List[Token] = []
    literal_start = 0
    pos = 0

    while True:
        lt = text.find("<", pos)
        if lt == -1:
            break
        match = TAG_OPEN_RE.match(text, lt)
        if match is None:
            pos = lt + 1
            continue
        tag, end = _scan_tag(text, match)
        if tag is None:
            pos = end
            continue
        if lt > literal_start:
            tokens.append(Literal(text[literal_start:lt]))
        tokens.append(tag)
        pos = literal_start = end

    if literal_start < len(text):
        tokens.append(Literal(text[literal_start:]))
    return tokens
