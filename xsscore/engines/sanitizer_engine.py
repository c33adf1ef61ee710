"""HTML Sanitization Engine for XSS Protection.

This module wires the decoder, tokenizer, blacklist matcher, defanger and
renderer into one pure function of (text, config). The engine escapes and
strips instead of re-serializing a DOM: markup that is not dangerous is left
as it was written.

Typical Usage:
    from xsscore.engines.sanitizer_engine import SanitizerEngine
    engine = SanitizerEngine()
    engine.sanitize('<a href="javascript:alert(1)">x</a>')
"""

import html
import logging
import re
from typing import Dict, Iterable, List, Optional

import bleach
from pydantic import BaseModel

from xsscore.app.config import SanitizationConfig
from xsscore.engines import decoder
from xsscore.engines.blacklist import remove_never_allowed, strip_evil_names
from xsscore.engines.findings import ESCAPED_INPUT, Finding, record
from xsscore.engines.renderer import Renderer
from xsscore.engines.tokenizer import tokenize

logger = logging.getLogger("xsscore.engine")

NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class SanitizationReport(BaseModel):
    """Outcome of `SanitizerEngine.inspect`.

    Attributes:
        output (str): The sanitized text.
        xss_found (bool): True when anything was removed, escaped or defanged.
        findings (List[Finding]): What changed, in the order it was detected.
    """
    output: str
    xss_found: bool
    findings: List[Finding] = []


class SanitizerEngine:
    """A configured sanitizer. Safe to share between threads."""

    def __init__(self, config: Optional[SanitizationConfig] = None,
                 allowed_tags: Optional[Iterable[str]] = None):
        """Initializes the engine.

        Args:
            config (SanitizationConfig, optional): Rule set. Defaults to the
                built-in blacklist with an empty replacement token.
            allowed_tags (Iterable[str], optional): When given, the output is
                additionally reduced to this tag allowlist with `bleach`.
        """
        self.config = config or SanitizationConfig()
        self.allowed_tags = frozenset(allowed_tags) if allowed_tags is not None else None

    def __repr__(self):
        return (f"{type(self).__name__}(replacement={self.config.replacement!r}, "
                f"evil_attributes={len(self.config.evil_attributes)})")

    # --- Entry points ---
    def sanitize(self, text) -> str:
        """Returns `text` with every script vector neutralized. Never raises."""
        return self._run(text, None)

    def inspect(self, text) -> SanitizationReport:
        """Sanitizes `text` and reports what was changed."""
        findings: List[Finding] = []
        output = self._run(text, findings)
        return SanitizationReport(output=output, xss_found=bool(findings), findings=findings)

    def is_xss(self, text) -> bool:
        return self.inspect(text).xss_found

    # --- Builders (each returns a new engine) ---
    def with_replacement(self, replacement: str) -> "SanitizerEngine":
        return self._evolve(replacement=replacement)

    def with_evil_attributes(self, patterns: List[str]) -> "SanitizerEngine":
        return self._evolve(evil_attributes=tuple(patterns), custom_patterns=True)

    def without_evil_attributes(self, names: List[str]) -> "SanitizerEngine":
        """Allows the given attributes again (e.g. ``['style']``)."""
        return self._evolve(evil_attributes=strip_evil_names(self.config.evil_attributes, names))

    def with_never_allowed_regex(self, mapping: Dict[str, Optional[str]]) -> "SanitizerEngine":
        """Adds text patterns removed before tokenizing.

        A None replacement uses the engine's replacement token.
        """
        return type(self)(self.config.with_never_allowed(mapping), self.allowed_tags)

    def _evolve(self, **changes) -> "SanitizerEngine":
        return type(self)(self.config.evolve(**changes), self.allowed_tags)

    # --- Pipeline ---
    def _run(self, text, findings: Optional[List[Finding]]) -> str:
        text = _coerce(text)
        if not text or NUMERIC_RE.fullmatch(text):
            return text
        try:
            canonical = decoder.decode(text, self.config.max_decode_passes)
            if not decoder.is_canonical(canonical):
                # still encoded after the last pass: nothing below can be trusted
                logger.warning(
                    f"⚠️ Input still encoded after {self.config.max_decode_passes} "
                    f"decoding passes. Escaping it instead."
                )
                record(findings, ESCAPED_INPUT, text)
                return html.escape(text, quote=False)
            output = self._clean_canonical(canonical, findings)
            if self.allowed_tags is not None:
                output = bleach.clean(output, tags=self.allowed_tags, attributes={}, strip=True)
            return output
        except Exception as e:
            # Fail closed: an engine bug must never let markup through.
            logger.critical(f"❌ Sanitizer failed, escaping input instead: {e}")
            return html.escape(text, quote=False)

    def _clean_canonical(self, text: str, findings: Optional[List[Finding]]) -> str:
        text = remove_never_allowed(text, self.config, findings)
        if "<" not in text and ">" not in text and "(" not in text:
            return text
        renderer = Renderer(
            self.config,
            nested=lambda value: self._clean_canonical(value, findings),
            findings=findings,
        )
        return renderer.render(tokenize(text))


def _coerce(value) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


_default_engine = SanitizerEngine()


def sanitize(text: str, config: Optional[SanitizationConfig] = None) -> str:
    """Sanitizes `text` with `config` (or the default rules)."""
    engine = _default_engine if config is None else SanitizerEngine(config)
    return engine.sanitize(text)
