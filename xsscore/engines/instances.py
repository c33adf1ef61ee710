"""Global service registry for the sanitizer.

Holds the process-wide default `SanitizerEngine`, built from the active
`policy`. Engines are immutable, so the instance can be shared by every
thread once `initialize_services()` has run.

Architecture Note:
    - If the policy disables the sanitizer, `sanitizer_service` stays `None`
      and callers must decide how to proceed.
    - An invalid policy (e.g. a pattern that does not compile) aborts startup
      instead of silently running with different rules.
"""

import logging

from xsscore.app.config import settings
from xsscore.app.policy import policy
from xsscore.engines.sanitizer_engine import SanitizerEngine

logger = logging.getLogger("xsscore.services")

# Populated by initialize_services().
sanitizer_service = None


def initialize_services():
    """Bootstraps the sanitizer engine from the active policy.

    Returns:
        SanitizerEngine or None: The engine, or None when disabled by policy.

    Raises:
        Exception: If the policy cannot be turned into a valid configuration.
    """
    global sanitizer_service

    try:
        logger.info(f"⚡ Initializing {settings.PROJECT_NAME} Sanitizer Services...")
        if policy.sanitizer_enabled:
            sanitizer_service = SanitizerEngine(policy.sanitization_config(), policy.allowed_tags)
            logger.info(f"✅ SanitizerEngine: Ready ({sanitizer_service!r})")
        else:
            sanitizer_service = None
            logger.info("⚪ SanitizerEngine: Disabled by Policy")
    except Exception as e:
        logger.critical(f"❌ Failed to initialize services: {e}")
        raise

    return sanitizer_service


def get_sanitizer() -> SanitizerEngine:
    """Returns the shared engine, initializing it on first use.

    Falls back to a default engine when the policy disables the service so
    that callers asking for sanitization always get it.
    """
    if sanitizer_service is None:
        initialize_services()
    return sanitizer_service or SanitizerEngine()
