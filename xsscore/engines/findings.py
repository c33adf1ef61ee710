"""Records of what the engine changed while sanitizing one string."""

import logging
from typing import List, NamedTuple, Optional

logger = logging.getLogger("xsscore.engine")

REMOVED_ELEMENT = "removed_element"
REMOVED_MATCH = "removed_match"
ESCAPED_TAG = "escaped_tag"
DROPPED_ATTRIBUTE = "dropped_attribute"
DEFANGED_VALUE = "defanged_value"
ENCODED_CALL = "encoded_call"
ESCAPED_INPUT = "escaped_input"


class Finding(NamedTuple):
    kind: str
    detail: str


def record(findings: Optional[List[Finding]], kind: str, detail: str) -> None:
    """Appends a finding when a collector is given and logs it at DEBUG."""
    logger.debug(f"🧹 {kind}: {detail[:80]!r}")
    if findings is not None:
        findings.append(Finding(kind, detail))
