"""
Options bag passed to every collection operation.

QueryOptions is a plain dict with typed getters, so callers can build it
from JSON, query strings or keyword arguments and each operation reads only
the keys it understands ("limit", "skip", "sort", "include", "exclude",
"w", "wtimeout", "upsert", "multi", ...).
"""

from typing import Any

from ..constants import DEFAULT_LIST_SEPARATOR

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off", ""})


class QueryOptions(dict):
    """
    Loosely typed key/value options for a single call.

    Example:
        options = QueryOptions("limit", 10).add("include", "name,surname")
        options.get_int("limit")                # 10
        options.get_as_string_list("include")   # ["name", "surname"]
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        # QueryOptions("multi", True) shorthand for a single entry
        if len(args) == 2 and isinstance(args[0], str):
            super().__init__({args[0]: args[1]}, **kwargs)
        else:
            super().__init__(*args, **kwargs)

    def add(self, key: str, value: Any) -> "QueryOptions":
        """Set ``key`` and return self so calls can be chained."""
        self[key] = value
        return self

    def get_int(self, key: str, default: int = 0) -> int:
        """
        Read an integer option.

        Raises:
            ValueError: If the stored value cannot be read as an integer
        """
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError as e:
                raise ValueError(f"Option '{key}' is not an integer: {value!r}") from e
        raise ValueError(f"Option '{key}' is not an integer: {value!r}")

    def get_bool(self, key: str, default: bool = False) -> bool:
        """
        Read a boolean option.

        Raises:
            ValueError: If the stored value cannot be read as a boolean
        """
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValueError(f"Option '{key}' is not a boolean: {value!r}")

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key)
        if value is None:
            return default
        return str(value)

    def get_list(self, key: str, default: list[Any] | None = None) -> list[Any] | None:
        """Read a list option; scalars are wrapped in a one-item list."""
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, list | tuple | set):
            return list(value)
        return [value]

    def get_as_string_list(
        self, key: str, separator: str = DEFAULT_LIST_SEPARATOR
    ) -> list[str]:
        """
        Read a list of strings.

        Accepts either a sequence or a single string split on ``separator``.
        Blank entries are dropped. Returns an empty list when the key is absent.
        """
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(separator)
        elif isinstance(value, list | tuple | set):
            items = [str(v) for v in value]
        else:
            items = [str(value)]
        return [item.strip() for item in items if item and item.strip()]

    def copy(self) -> "QueryOptions":
        return QueryOptions(self)

    @classmethod
    def of(cls, options: dict[str, Any] | None) -> "QueryOptions":
        """Coerce ``None`` or a plain dict into QueryOptions."""
        if isinstance(options, QueryOptions):
            return options
        return cls(options or {})
