"""Sanitization policy loader.

Engine rules (evil attribute patterns, replacement token, extra never-allowed
regexes...) can be kept in a YAML file (`xsscore.yaml`) instead of code, so
deployments tune the sanitizer without a release.

Typical Usage:
    from xsscore.app.policy import policy
    if policy.sanitizer_enabled:
        config = policy.sanitization_config()
"""

import logging
import os
from typing import Dict, List, Optional

import yaml

from xsscore.app.config import SanitizationConfig, settings

logger = logging.getLogger("xsscore.policy")


class SanitizerPolicy:
    """A wrapper around the YAML policy file enforcing default behaviors.

    Missing or broken configuration falls back to secure defaults: the
    sanitizer stays enabled with the built-in blacklist.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initializes the policy.

        Args:
            config_path (str, optional): Path to the YAML file. Defaults to
                `settings.POLICY_PATH`.
        """
        self.config_path = config_path or settings.POLICY_PATH
        self._config = {}
        self.reload()

    def reload(self):
        """Loads or reloads the policy from disk.

        A missing, unreadable or malformed file is logged and replaced by
        `_default_config()`; this method never raises.
        """
        if not os.path.exists(self.config_path):
            logger.warning(f"⚠️ Policy file not found at {self.config_path}. Using Defaults.")
            self._config = self._default_config()
            return

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top level of the policy must be a mapping")
            self._config = loaded
            logger.info(f"✅ Sanitization policy loaded from {self.config_path}")
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.critical(f"❌ Failed to load sanitization policy: {e}")
            self._config = self._default_config()

    def _default_config(self):
        """Returns the hardcoded 'Safe Mode' policy."""
        return {
            "services": {
                "sanitizer": True,
            },
            "sanitization": {
                "replacement": "",
                "never_allowed_regex": {},
                "max_decode_passes": 10,
            },
        }

    def _section(self) -> dict:
        return self._config.get("sanitization") or {}

    # --- Service Toggles ---
    @property
    def sanitizer_enabled(self) -> bool:
        """Feature flag: Enable/Disable HTML sanitization."""
        return bool((self._config.get("services") or {}).get("sanitizer", True))

    # --- Sanitization Rules ---
    @property
    def evil_attributes(self) -> Optional[List[str]]:
        """Custom evil attribute patterns, or None to keep the defaults."""
        return self._section().get("evil_attributes")

    @property
    def replacement(self) -> str:
        return self._section().get("replacement") or ""

    @property
    def never_allowed_regex(self) -> Dict[str, str]:
        return self._section().get("never_allowed_regex") or {}

    @property
    def call_identifiers(self) -> Optional[List[str]]:
        return self._section().get("call_identifiers")

    @property
    def max_decode_passes(self) -> int:
        return self._section().get("max_decode_passes", 10)

    @property
    def allowed_tags(self) -> Optional[List[str]]:
        """Optional allowlist applied after sanitizing (None disables it)."""
        return self._section().get("allowed_tags")

    def sanitization_config(self) -> SanitizationConfig:
        """Builds the engine configuration described by this policy.

        Raises:
            pydantic.ValidationError: If the file holds an invalid pattern.
        """
        overrides = {"max_decode_passes": self.max_decode_passes}
        if self.call_identifiers is not None:
            overrides["call_identifiers"] = tuple(self.call_identifiers)
        config = SanitizationConfig.create(self.evil_attributes, self.replacement, **overrides)
        if self.never_allowed_regex:
            config = config.with_never_allowed(self.never_allowed_regex)
        return config


policy = SanitizerPolicy()
