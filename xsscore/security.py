"""Security facade.

`Security` is the object applications hold on to: it wraps one
`SanitizerEngine` and cleans either a single string or any nesting of lists,
tuples and dicts, rebuilding the container shape around the cleaned leaves.
"""

from typing import Any, Iterable, List, Optional

from xsscore.app.config import SanitizationConfig
from xsscore.engines.sanitizer_engine import SanitizerEngine


class Security:
    """Cleans strings and nested containers of strings."""

    def __init__(self, engine: Optional[SanitizerEngine] = None):
        """Initializes the facade.

        Args:
            engine (SanitizerEngine, optional): A pre-configured engine. When
                omitted the default rule set is used.
        """
        self.engine = engine or SanitizerEngine()

    @classmethod
    def create(cls, evil: Optional[List[str]] = None,
               replacement: Optional[str] = None) -> "Security":
        """Builds a facade from custom evil attribute patterns and replacement.

        Custom patterns replace (not extend) the default evil attribute list.

        Raises:
            pydantic.ValidationError: If a pattern does not compile.
        """
        return cls(SanitizerEngine(SanitizationConfig.create(evil, replacement)))

    def clean(self, value: Any, fields: Optional[Iterable[str]] = None) -> Any:
        """Recursively sanitizes string values.

        Args:
            value: A string, or a list/tuple/dict nesting of values.
            fields (Iterable[str], optional): When given, only dict values under
                these keys (at any depth) are sanitized. Strings outside any
                dict, and list items, follow their parent key.

        Returns:
            The same shape with each string leaf sanitized. Other leaf types
            (numbers, None...) are returned unchanged.
        """
        wanted = frozenset(fields) if fields is not None else None
        return self._clean(value, wanted, wanted is None)

    def _clean(self, value, wanted, selected):
        if isinstance(value, str):
            return self.engine.sanitize(value) if selected else value
        if isinstance(value, dict):
            return {
                key: self._clean(item, wanted, selected or key in wanted)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [self._clean(item, wanted, selected) for item in value]
        if isinstance(value, tuple):
            return tuple(self._clean(item, wanted, selected) for item in value)
        return value
