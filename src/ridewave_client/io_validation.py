"""Pydantic-based validation helpers for inbound response payloads.

Usage example:
    from ridewave_client.io_validation import validate_json_as

    body = validate_json_as(ErrorBodyInput, '{"message": "Ride not found"}')
"""

from __future__ import annotations

from typing import TypedDict

from pydantic import TypeAdapter, ValidationError


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


class ErrorBodyInput(TypedDict, total=False):
    message: object
    error: object


def validate_as[SchemaT](schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema}."
        raise IncomingDataError(message) from exc


def validate_json_as[SchemaT](schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return TypeAdapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema}."
        raise IncomingDataError(message) from exc


def extract_error_message(body: str) -> str | None:
    """Return the server-supplied message from a `{message}` or `{error}` body."""
    if not body.strip():
        return None
    try:
        parsed = validate_json_as(ErrorBodyInput, body)
    except IncomingDataError:
        return None
    for key in ("message", "error"):
        value = parsed.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
