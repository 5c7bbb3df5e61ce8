import os
from abc import ABC, abstractmethod
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader

from azurerm_provider.helpers import SCHEMA_TYPE_LABELS
from azurerm_provider.interfaces.resource import BaseResource
from azurerm_provider.models import ResourceSchema

TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates"
)


class BasePlugin(ABC):
    """
    The abstract base class that defines the contract for all resource type plugins.

    Each plugin is responsible for one resource type (e.g.
    'azurerm_healthcare_service') and encapsulates its schema, the construction
    of its lifecycle handler with explicitly injected dependencies, and the
    data needed to document it.

    This class also provides shared, concrete helper methods for common tasks
    like rendering the resource's reference documentation.
    """

    @abstractmethod
    def get_type_name(self) -> str:
        """
        Returns the unique string identifier for this resource type.

        This name is used on the command line and in configuration to select
        the correct plugin.

        Returns:
            A string such as 'azurerm_healthcare_service'.
        """
        ...

    @abstractmethod
    def get_schema(self) -> ResourceSchema:
        """Returns the argument-spec style schema of the resource's configuration."""
        ...

    @abstractmethod
    def build_resource(self, client, config) -> BaseResource:
        """
        Builds the lifecycle handler for this resource type.

        Args:
            client: The shared ArmClient transport.
            config: The ProviderConfig carrying provider-wide policies.

        Returns:
            A ready-to-use BaseResource subclass instance.
        """
        ...

    def get_description(self) -> str:
        """A one-line description used in documentation."""
        return f"Manages a {self.get_type_name()}."

    def get_example(self) -> dict[str, Any]:
        """An example configuration used in documentation."""
        return {}

    def get_import_id_example(self) -> str | None:
        """An example identifier for the documentation's import section."""
        return None

    def _build_arguments(self, schema: ResourceSchema, prefix: str = "") -> list[dict]:
        """Flattens the schema into rows for the argument reference, nested blocks included."""
        arguments = []
        for name, field in schema.items():
            type_label = SCHEMA_TYPE_LABELS.get(field.get("type", "str"), field.get("type"))
            if field.get("type") == "list" and field.get("options"):
                type_label = "block"
            elif field.get("type") == "list" and field.get("elements"):
                type_label = f"list of {SCHEMA_TYPE_LABELS.get(field['elements'], field['elements'])}"
            arguments.append(
                {
                    "name": f"{prefix}{name}",
                    "type": type_label,
                    "required": bool(field.get("required")),
                    "default": field.get("default"),
                    "choices": field.get("choices"),
                    "min_items": field.get("min_items"),
                    "max_items": field.get("max_items"),
                    "description": field.get("description", ""),
                }
            )
            if field.get("options"):
                arguments.extend(
                    self._build_arguments(field["options"], prefix=f"{prefix}{name}.")
                )
        return arguments

    def render_documentation(self) -> str:
        """Renders Markdown reference documentation for the resource type."""
        jinja_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR), trim_blocks=True, lstrip_blocks=True
        )
        template = jinja_env.get_template("resource_docs.md.j2")
        example = self.get_example()
        return template.render(
            type_name=self.get_type_name(),
            description=self.get_description(),
            arguments=self._build_arguments(self.get_schema()),
            example=yaml.safe_dump(example, sort_keys=False) if example else None,
            import_id=self.get_import_id_example(),
        )
