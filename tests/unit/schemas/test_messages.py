"""Tests for the translation of Pydantic/FastAPI errors into readable messages."""

from app.schemas.messages import describe_error, describe_errors


def test_path_parameter_not_an_integer():
    error = {"type": "int_parsing", "loc": ("path", "id"), "msg": "Input should be a valid integer"}
    assert describe_error(error) == "id must be an integer"


def test_path_parameter_below_minimum():
    error = {"type": "greater_than_equal", "loc": ("path", "id"), "msg": "...", "ctx": {"ge": 1}}
    assert describe_error(error) == "id must be greater than 0"


def test_generic_template_uses_context():
    error = {"type": "string_too_short", "loc": ("body", "nickname"), "msg": "...", "ctx": {"min_length": 3}}
    assert describe_error(error) == "nickname must be at least 3 characters"


def test_template_missing_context_falls_back_to_pydantic_message():
    error = {"type": "string_too_short", "loc": ("body", "name"), "msg": "String should have at least 2 characters"}
    assert describe_error(error) == "name: String should have at least 2 characters"


def test_unknown_type_falls_back_to_pydantic_message():
    error = {"type": "bool_parsing", "loc": ("query", "active"), "msg": "Input should be a valid boolean"}
    assert describe_error(error) == "active: Input should be a valid boolean"


def test_missing_body():
    assert describe_error({"type": "missing", "loc": ("body",), "msg": "Field required"}) == "request body is required"


def test_body_of_wrong_shape():
    error = {"type": "model_attributes_type", "loc": ("body",), "msg": "Input should be a valid dictionary"}
    assert describe_error(error) == "request body must be a JSON object"


def test_model_level_value_error_without_context():
    error = {"type": "value_error", "loc": ("body",), "msg": "Value error, must supply at least one field to update"}
    assert describe_error(error) == "must supply at least one field to update"


def test_duplicates_removed_order_kept():
    errors = [
        {"type": "missing", "loc": ("body", "name"), "msg": "Field required"},
        {"type": "missing", "loc": ("body", "email"), "msg": "Field required"},
        {"type": "missing", "loc": ("body", "name"), "msg": "Field required"},
    ]
    assert describe_errors(errors) == ["name is required", "email is required"]
