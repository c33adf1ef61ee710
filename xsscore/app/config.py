"""Configuration management for the xsscore sanitizer.

This module defines the Pydantic settings and configuration models used
throughout the package. It handles environment variable loading and the
immutable, eagerly validated `SanitizationConfig` shared read-only by every
call on a given engine.
"""

import re
from typing import Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xsscore.engines.blacklist import DEFAULT_EVIL_ATTRIBUTES
from xsscore.engines.defanger import DEFAULT_CALL_IDENTIFIERS


class Settings(BaseSettings):
    """Global settings loaded from environment variables.

    Attributes:
        PROJECT_NAME (str): Display name used in log lines.
        POLICY_PATH (str): Path of the YAML sanitization policy file.
    """
    PROJECT_NAME: str = "xsscore"
    POLICY_PATH: str = "xsscore.yaml"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="XSSCORE_",
        case_sensitive=True,
        extra="ignore",
    )


class SanitizationConfig(BaseModel):
    """Immutable rule set for one engine instance.

    Attributes:
        evil_attributes (Tuple[str, ...]): Attribute-name regexes (case-insensitive,
            matched against the whole name). Matching attributes are dropped.
        custom_patterns (bool): True when the caller supplied `evil_attributes`.
            Caller patterns are then also matched against tag names.
        replacement (str): Token substituted for fully removed content.
        never_allowed_regex (Tuple[Tuple[str, str], ...]): Extra
            (pattern, replacement) pairs applied to the whole text before tokenizing.
        call_identifiers (Tuple[str, ...]): Identifiers whose call parentheses are
            re-encoded to numeric entities.
        max_decode_passes (int): Upper bound on decoder iterations.
    """
    model_config = ConfigDict(frozen=True)

    evil_attributes: Tuple[str, ...] = DEFAULT_EVIL_ATTRIBUTES
    custom_patterns: bool = False
    replacement: str = ""
    never_allowed_regex: Tuple[Tuple[str, str], ...] = ()
    call_identifiers: Tuple[str, ...] = DEFAULT_CALL_IDENTIFIERS
    max_decode_passes: int = Field(default=10, ge=1, le=64)

    _attribute_patterns: List[Pattern] = PrivateAttr(default_factory=list)
    _removal_patterns: List[Tuple[Pattern, str]] = PrivateAttr(default_factory=list)
    _call_pattern: Optional[Pattern] = PrivateAttr(default=None)

    @field_validator("evil_attributes")
    @classmethod
    def _check_evil_attributes(cls, value):
        for pattern in value:
            _compile(pattern, "evil attribute")
        return tuple(value)

    @field_validator("never_allowed_regex")
    @classmethod
    def _check_never_allowed(cls, value):
        for pattern, _ in value:
            _compile(pattern, "never-allowed")
        return tuple((p, r) for p, r in value)

    @field_validator("call_identifiers")
    @classmethod
    def _check_identifiers(cls, value):
        for name in value:
            if not re.fullmatch(r"[A-Za-z_$][\w$]*", name):
                raise ValueError(f"Invalid call identifier: {name!r}")
        return tuple(value)

    def model_post_init(self, __context) -> None:
        flags = re.IGNORECASE
        self._attribute_patterns = [re.compile(p, flags) for p in self.evil_attributes]
        self._removal_patterns = [
            (re.compile(p, flags | re.DOTALL), r) for p, r in self.never_allowed_regex
        ]
        if self.call_identifiers:
            names = "|".join(sorted(map(re.escape, self.call_identifiers), key=len, reverse=True))
            self._call_pattern = re.compile(rf"(?<![\w$])(?:{names})\(", flags)

    @property
    def attribute_patterns(self) -> List[Pattern]:
        return self._attribute_patterns

    @property
    def removal_patterns(self) -> List[Tuple[Pattern, str]]:
        return self._removal_patterns

    @property
    def call_pattern(self) -> Optional[Pattern]:
        return self._call_pattern

    @classmethod
    def create(cls, evil: Optional[List[str]] = None, replacement: Optional[str] = None,
               **overrides) -> "SanitizationConfig":
        """Builds a config, falling back to the defaults for absent values.

        Raises:
            pydantic.ValidationError: If a pattern does not compile.
        """
        values = dict(overrides)
        if evil is not None:
            values["evil_attributes"] = tuple(evil)
            values["custom_patterns"] = True
        if replacement is not None:
            values["replacement"] = replacement
        return cls(**values)

    def evolve(self, **changes) -> "SanitizationConfig":
        """Returns a validated copy with `changes` applied."""
        values = self.model_dump()
        values.update(changes)
        return type(self)(**values)

    def with_never_allowed(self, mapping: Dict[str, Optional[str]]) -> "SanitizationConfig":
        pairs = list(self.never_allowed_regex)
        for pattern, replacement in mapping.items():
            pairs.append((pattern, self.replacement if replacement is None else replacement))
        return self.evolve(never_allowed_regex=tuple(pairs))


def _compile(pattern: str, kind: str) -> None:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid {kind} pattern {pattern!r}: {e}") from e


settings = Settings()
