"""xsscore: escape-and-strip XSS sanitization for untrusted text."""

from xsscore.app.config import SanitizationConfig
from xsscore.engines.sanitizer_engine import SanitizationReport, SanitizerEngine, sanitize
from xsscore.security import Security

__all__ = ["SanitizationConfig", "SanitizationReport", "SanitizerEngine", "Security", "sanitize"]
__version__ = "0.1.0"
