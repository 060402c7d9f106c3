"""
Index helpers.
"""

from .helpers import build_index_options, is_id_index, normalize_keys

__all__ = ["build_index_options", "is_id_index", "normalize_keys"]
