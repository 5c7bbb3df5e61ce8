import pytest

from azurerm_provider.errors import (
    ApiError,
    ConfigurationError,
    OperationFailedError,
    ProviderError,
)
from azurerm_provider.helpers import (
    ValidationErrorCollector,
    normalize_location,
    response_was_not_found,
    to_argument_spec,
    wrap_error,
)


@pytest.mark.parametrize(
    "location, expected",
    [("West Europe", "westeurope"), ("westus2", "westus2"), ("UK South", "uksouth")],
)
def test_normalize_location(location, expected):
    assert normalize_location(location) == expected


def test_response_was_not_found():
    assert response_was_not_found(ApiError("missing", status_code=404))
    assert not response_was_not_found(ApiError("denied", status_code=403))
    assert not response_was_not_found(ProviderError("other"))


class TestWrapError:
    def test_keeps_class_and_attributes(self):
        original = ApiError("GET failed", status_code=404, code="NotFound")

        wrapped = wrap_error(original, "Error Retrieving Healthcare Service 'x'")

        assert isinstance(wrapped, ApiError)
        assert wrapped.status_code == 404
        assert wrapped.code == "NotFound"
        assert str(wrapped) == "Error Retrieving Healthcare Service 'x': GET failed"
        assert response_was_not_found(wrapped)

    def test_operation_failure_keeps_status(self):
        wrapped = wrap_error(
            OperationFailedError("terminated", status="Failed"), "Error Creating"
        )

        assert isinstance(wrapped, OperationFailedError)
        assert wrapped.status == "Failed"

    def test_foreign_exception_becomes_provider_error(self):
        wrapped = wrap_error(ValueError("boom"), "Error deleting")

        assert type(wrapped) is ProviderError
        assert str(wrapped) == "Error deleting: boom"


def test_to_argument_spec_strips_metadata_recursively():
    schema = {
        "cors": {
            "type": "list",
            "elements": "dict",
            "max_items": 5,
            "description": "CORS",
            "options": {"max_age": {"type": "int", "description": "Age", "required": True}},
        }
    }

    assert to_argument_spec(schema) == {
        "cors": {
            "type": "list",
            "elements": "dict",
            "options": {"max_age": {"type": "int", "required": True}},
        }
    }


class TestValidationErrorCollector:
    def test_report_without_errors_is_silent(self):
        collector = ValidationErrorCollector()

        assert not collector.has_errors
        collector.report()

    def test_report_lists_every_error(self):
        collector = ValidationErrorCollector()
        collector.add_error("name: required")
        collector.add_error("kind: invalid")

        with pytest.raises(ConfigurationError) as exc_info:
            collector.report("Resource configuration is invalid")

        assert exc_info.value.errors == ["name: required", "kind: invalid"]
        assert str(exc_info.value) == (
            "Resource configuration is invalid:\n  1. name: required\n  2. kind: invalid"
        )
