"""
Utility functions and helpers for MONGO_DATASTORE.
"""

from .mongo import clean_mongo_doc, document_to_model, is_model_type

__all__ = ["clean_mongo_doc", "document_to_model", "is_model_type"]
