"""
Response envelope: ``{success, message?, data?, errors?, error?}``.
"""
from typing import Any, Optional

from pydantic import BaseModel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_dump(v) for v in value]
    return value


def envelope(data: Any = None, message: Optional[str] = None) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = _dump(data)
    return body


def error_body(message: str, errors=None, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if error:
        body["error"] = error
    return body


def page_of(key: str, items, pagination: dict, **extra) -> dict:
    """List payload: ``{<key>: [...], pagination: {...}, **extra}``."""
    return {key: items, "pagination": pagination, **extra}
