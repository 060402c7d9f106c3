"""
MongoDB document helpers.

Used to turn raw driver documents into JSON-friendly dictionaries before
they are validated into application models.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId
from pydantic import BaseModel


def _clean_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return clean_mongo_doc(value)
    if isinstance(value, list):
        return [_clean_value(item) for item in value]
    return value


def clean_mongo_doc(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Convert a MongoDB document to JSON-serializable format.

    ObjectId becomes str and datetime becomes an ISO string, recursively
    through nested documents and arrays.

    Example:
        clean_mongo_doc({"_id": ObjectId("507f1f77bcf86cd799439011"), "n": 1})
        # {"_id": "507f1f77bcf86cd799439011", "n": 1}
    """
    if doc is None:
        return None
    return {key: _clean_value(value) for key, value in doc.items()}


def is_model_type(model: Any) -> bool:
    """True when ``model`` is a pydantic model class."""
    return isinstance(model, type) and issubclass(model, BaseModel)


def document_to_model(doc: dict[str, Any], model: type[BaseModel]) -> BaseModel:
    """
    Validate a document into ``model``.

    Raises:
        pydantic.ValidationError: If the document does not fit the model
    """
    return model.model_validate(clean_mongo_doc(doc))
