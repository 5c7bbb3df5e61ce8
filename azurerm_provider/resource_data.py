import copy
import logging
from typing import Any, Dict, Optional

from ansible.module_utils.common.arg_spec import ArgumentSpecValidator

from .errors import ConfigurationError
from .helpers import ValidationErrorCollector, to_argument_spec
from .models import ResourceSchema

logger = logging.getLogger(__name__)


class ResourceData:
    """
    A schema-backed view of one resource instance's configuration and state.

    This is the generic map boundary between the surrounding framework and a
    resource handler. Values are validated and coerced against the resource
    schema with Ansible's ArgumentSpecValidator (types, required fields,
    defaults, choices, nested options); the schema's `min_items` / `max_items`
    cardinality rules are enforced here as well.

    A ResourceData built from user configuration is validated eagerly. One
    built from an identifier alone (read, delete, import) starts empty and is
    filled in by the handler through `set()`.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        values: Optional[Dict[str, Any]] = None,
        resource_id: str = "",
        new_resource: Optional[bool] = None,
    ):
        self.schema = schema
        self._argument_spec = to_argument_spec(schema)
        self._id = resource_id or ""
        # A resource is new when it is being created, i.e. it has no identifier yet.
        self._new_resource = (not self._id) if new_resource is None else new_resource
        self._values: Dict[str, Any] = {}
        if values is not None:
            self._values = self._validate(values)

    def _validate(self, values: Dict[str, Any]) -> Dict[str, Any]:
        collector = ValidationErrorCollector()

        result = ArgumentSpecValidator(self._argument_spec).validate(
            copy.deepcopy(values)
        )
        for message in result.error_messages:
            collector.add_error(message)

        validated = result.validated_parameters
        for message in _check_cardinality(self.schema, validated):
            collector.add_error(message)

        collector.report("Resource configuration is invalid")
        return validated

    def get(self, field: str) -> Any:
        """Returns the value of `field`, or None when it is unset."""
        if field not in self.schema:
            raise ConfigurationError(f"Invalid field name {field!r}: not in schema")
        return copy.deepcopy(self._values.get(field))

    def set(self, field: str, value: Any):
        """
        Sets a single field, validating and coercing the value against its schema
        entry. Setting None clears the field.
        """
        if field not in self.schema:
            raise ConfigurationError(f"Invalid field name {field!r}: not in schema")
        if value is None:
            self._values[field] = None
            return

        # Remote state may omit required fields or carry values outside the user-facing choices.
        field_spec = _for_remote_state({field: self._argument_spec[field]})
        result = ArgumentSpecValidator(field_spec).validate(
            {field: copy.deepcopy(value)}
        )
        # Cardinality describes user input only; remote state is stored as returned.
        collector = ValidationErrorCollector()
        for message in result.error_messages:
            collector.add_error(message)
        collector.report(f"Error setting {field!r}")

        self._values[field] = _prune_none(result.validated_parameters[field])

    def get_id(self) -> str:
        return self._id

    def set_id(self, resource_id: str):
        """Sets the identifier. An empty string marks the resource as gone."""
        self._id = resource_id or ""
        if not self._id:
            logger.debug("Identifier cleared, resource will be removed from state")

    def is_new_resource(self) -> bool:
        return self._new_resource

    def to_dict(self) -> Dict[str, Any]:
        """Returns a copy of the current values (unset fields omitted) plus the identifier."""
        state = {
            key: copy.deepcopy(value)
            for key, value in self._values.items()
            if value is not None
        }
        state["id"] = self._id
        return state


def _check_cardinality(schema: ResourceSchema, values: Dict[str, Any], prefix=""):
    """Yields an error message for each list that violates min_items / max_items."""
    for field, field_schema in schema.items():
        value = values.get(field) if values else None
        name = f"{prefix}{field}"

        if field_schema.get("type") == "list" and value is not None:
            min_items = field_schema.get("min_items")
            max_items = field_schema.get("max_items")
            if min_items is not None and len(value) < min_items:
                yield f"{name}: attribute supports {min_items} item minimum, config has {len(value)} declared"
            if max_items is not None and len(value) > max_items:
                yield f"{name}: attribute supports {max_items} item maximum, config has {len(value)} declared"

        options = field_schema.get("options")
        if options and value:
            elements = value if isinstance(value, list) else [value]
            for index, element in enumerate(elements):
                if isinstance(element, dict):
                    yield from _check_cardinality(options, element, f"{name}.{index}.")


def _for_remote_state(spec: Dict[str, Any]) -> Dict[str, Any]:
    """Keeps only the type checks of an argument spec: `required` and `choices` describe user input."""
    relaxed = {}
    for field, field_spec in spec.items():
        field_spec = {
            k: v for k, v in field_spec.items() if k not in ("required", "choices")
        }
        if "options" in field_spec:
            field_spec["options"] = _for_remote_state(field_spec["options"])
        relaxed[field] = field_spec
    return relaxed


def _prune_none(value):
    # The validator fills every unset nested option with None.
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(element) for element in value]
    return value
