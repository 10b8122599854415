"""
Human-readable validation messages.

Turns the error list produced by Pydantic (body, path and query errors as
reported by FastAPI) into one sentence per violation, keeping input order.
"""

from typing import Any, Iterable, Optional

# Generic templates keyed by Pydantic error type; formatted with the field
# name and the error context (min_length, max_length, ge, le, ...).
TYPE_MESSAGES = {
    "missing": "{field} is required",
    "string_type": "{field} must be a string",
    "string_too_short": "{field} must be at least {min_length} characters",
    "string_too_long": "{field} must not be longer than {max_length} characters",
    "string_pattern_mismatch": "{field} has an invalid format",
    "int_type": "{field} must be an integer",
    "int_parsing": "{field} must be an integer",
    "int_from_float": "{field} must be an integer",
    "greater_than_equal": "{field} must be greater than or equal to {ge}",
    "less_than_equal": "{field} must not be greater than {le}",
    "model_attributes_type": "request body must be a JSON object",
    "dict_type": "request body must be a JSON object",
}

# Field-specific wording that reads better than the generic template
FIELD_MESSAGES = {
    ("age", "greater_than_equal"): "age must be between 1 and 149",
    ("age", "less_than_equal"): "age must be between 1 and 149",
    ("phone", "string_pattern_mismatch"): "phone must be a valid phone number",
    ("phone", "string_too_short"): "phone must be a valid phone number",
    ("phone", "string_too_long"): "phone must be a valid phone number",
    ("id", "greater_than_equal"): "id must be greater than 0",
    ("page", "greater_than_equal"): "page must be greater than 0",
    ("limit", "greater_than_equal"): "limit must be greater than 0",
    ("limit", "less_than_equal"): "limit must not be greater than 100",
}


def _field_name(loc: Iterable[Any]) -> Optional[str]:
    # loc looks like ("body", "name"), ("query", "limit") or ("body",)
    names = [part for part in loc if isinstance(part, str) and part not in ("body", "query", "path")]
    return names[-1] if names else None


def _value_error_text(error: dict) -> str:
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    msg = error.get("msg", "")
    return msg.removeprefix("Value error, ")


def describe_error(error: dict) -> str:
    """Return a single human-readable message for one Pydantic error."""
    error_type = error.get("type", "")
    field = _field_name(error.get("loc", ()))

    if field is None:
        # Model-level errors (empty update, body of the wrong shape)
        if error_type == "missing":
            return "request body is required"
        if error_type == "value_error":
            return _value_error_text(error)
        return TYPE_MESSAGES.get(error_type, error.get("msg", "invalid request"))

    specific = FIELD_MESSAGES.get((field, error_type))
    if specific:
        return specific

    if error_type == "value_error":
        return f"{field} {_value_error_text(error)}"

    template = TYPE_MESSAGES.get(error_type)
    if template:
        try:
            return template.format(field=field, **(error.get("ctx") or {}))
        except (KeyError, IndexError):
            pass
    return f"{field}: {error.get('msg', 'is invalid')}"


def describe_errors(errors: Iterable[dict]) -> list[str]:
    """Messages for every violation, without duplicates, in reporting order."""
    messages: list[str] = []
    for error in errors:
        message = describe_error(error)
        if message not in messages:
            messages.append(message)
    return messages
