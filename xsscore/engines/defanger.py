"""URI and expression defanging.

Attribute values are inspected for script pseudo-protocols and CSS
``expression(...)``. The scheme (plus everything up to the first opening
parenthesis) is cut out, so ``javascript:void(alert(1))`` leaves
``(alert(1))``: the argument list survives as inert text.

Calls to known dangerous identifiers (``alert(1)``, ``eval(x)``...) have
their parentheses re-encoded to ``&#40;``/``&#41;`` wherever they remain, in
attribute values and literal text alike. The ``(`` must follow the name
directly, so prose such as ``system (Linux)`` is left alone, as are
parentheses not attached to such an identifier, including the pair exposed
by scheme removal.

Unknown schemes pass through unchanged.
"""

import re
from typing import Dict, List, Optional, Tuple

from xsscore.engines.findings import DEFANGED_VALUE, ENCODED_CALL, Finding, record

DANGEROUS_SCHEMES = ("javascript", "vbscript", "livescript", "jscript", "ecmascript", "mocha")

DEFAULT_CALL_IDENTIFIERS = (
    "alert", "confirm", "prompt", "eval", "execScript", "setTimeout",
    "setInterval", "setImmediate", "expression", "msgbox",
    "exec", "system", "passthru", "cmd",
)

SCHEME_RE = re.compile(
    r"(?<![\w.+-])(?:%s)\s*:[^(]*" % "|".join(DANGEROUS_SCHEMES),
    re.IGNORECASE,
)
EXPRESSION_RE = re.compile(r"(?<![\w-])expression\s*(?=\()", re.IGNORECASE)
DATA_BASE64_RE = re.compile(
    r"(?<![\w.+-])data\s*:\s*(?!image/)[^,]*;\s*base64\s*,.*",
    re.IGNORECASE | re.DOTALL,
)

OPEN_ENTITY = "&#40;"
CLOSE_ENTITY = "&#41;"


def defang_value(value: str, findings: Optional[List[Finding]] = None) -> str:
    """Strips dangerous schemes, ``expression`` and base64 data URIs from a value.

    Args:
        value (str): A decoded attribute value.
        findings (list, optional): Collector for what was removed.

    Returns:
        str: The inert remainder.
    """
    if ":" in value:
        defanged = DATA_BASE64_RE.sub("", value)
        # repeat until stable: removal can splice a new scheme together
        for _ in range(len(DANGEROUS_SCHEMES) + 1):
            stripped = SCHEME_RE.sub("", defanged)
            if stripped == defanged:
                break
            defanged = stripped
    else:
        defanged = value
    if "(" in defanged:
        defanged = EXPRESSION_RE.sub("", defanged)
    if defanged != value:
        record(findings, DEFANGED_VALUE, value)
    return defanged


def _paren_pairs(text: str) -> Dict[int, int]:
    """Maps each balanced ``(`` index to the index of its ``)``, in one pass."""
    pairs = {}
    stack = []
    for pos, char in enumerate(text):
        if char == "(":
            stack.append(pos)
        elif char == ")" and stack:
            pairs[stack.pop()] = pos
    return pairs


def call_paren_positions(text: str, call_pattern) -> Tuple[int, ...]:
    """Returns the indexes of parentheses belonging to dangerous calls."""
    opens = [match.end() - 1 for match in call_pattern.finditer(text)]
    if not opens:
        return ()
    pairs = _paren_pairs(text)
    positions = set(opens)
    positions.update(pairs[pos] for pos in opens if pos in pairs)
    return tuple(sorted(positions))


def encode_calls(text: str, call_pattern, findings: Optional[List[Finding]] = None) -> str:
    """Re-encodes the parentheses of every dangerous call in `text`."""
    if call_pattern is None or "(" not in text:
        return text
    positions = call_paren_positions(text, call_pattern)
    if not positions:
        return text
    record(findings, ENCODED_CALL, text)
    chars = list(text)
    for pos in positions:
        chars[pos] = OPEN_ENTITY if chars[pos] == "(" else CLOSE_ENTITY
    return "".join(chars)
