"""
Helper functions for index management.

Index keys arrive as mappings (``{"surname": 1}``) or as lists of
``(field, direction)`` tuples; the driver wants the list form.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..constants import INDEX_OPTION_MAPPING

logger = logging.getLogger(__name__)


def normalize_keys(
    keys: Mapping[str, Any] | list[tuple[str, Any]] | str,
) -> list[tuple[str, Any]]:
    """
    Normalize index keys to a list of (field_name, direction) tuples.

    A bare field name, alone or as a list entry, means ascending order on
    that field.

    Raises:
        ValueError: If a list entry is neither a field name nor a
            ``(field, direction)`` pair
    """
    if isinstance(keys, str):
        return [(keys, 1)]
    if isinstance(keys, Mapping):
        return [(k, v) for k, v in keys.items()]

    normalized: list[tuple[str, Any]] = []
    for key in keys:
        if isinstance(key, str):
            normalized.append((key, 1))
        elif isinstance(key, list | tuple) and len(key) == 2 and isinstance(key[0], str):
            normalized.append((key[0], key[1]))
        else:
            raise ValueError(f"Invalid index key entry: {key!r}")
    return normalized


def is_id_index(keys: Mapping[str, Any] | list[tuple[str, Any]]) -> bool:
    """Check if index keys target only the _id field."""
    normalized = normalize_keys(keys)
    return len(normalized) == 1 and normalized[0][0] == "_id"


def build_index_options(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Translate an index options bag into driver keyword arguments.

    Recognised keys are listed in ``INDEX_OPTION_MAPPING``; "version" is sent
    as the server's "v" field. Unknown keys are ignored.
    """
    if not options:
        return {}

    kwargs: dict[str, Any] = {}
    for key, value in options.items():
        driver_key = INDEX_OPTION_MAPPING.get(key)
        if driver_key is None:
            logger.debug(f"Ignoring unsupported index option '{key}'")
            continue
        kwargs[driver_key] = value
    return kwargs
