import logging

from azurerm_provider.cancellation import StopContext
from azurerm_provider.errors import ProviderError
from azurerm_provider.helpers import response_was_not_found, wrap_error
from azurerm_provider.interfaces.resource import BaseResource
from azurerm_provider.resource_data import ResourceData

from .client import ServicesClient
from .config import SINGLETON_BLOCKS, HealthcareServiceConfig
from .mapper import expand_services_description, flatten_services_description

logger = logging.getLogger(__name__)


class HealthcareServiceResource(BaseResource):
    """
    Lifecycle handler for `azurerm_healthcare_service`.

    Create and Update share one code path: the desired state is expanded into
    a full service description and PUT, the long-running operation is awaited,
    the service is re-read to learn its canonical ID, and Read reconciles
    every field from the remote state.
    """

    resource_type = "azurerm_healthcare_service"
    display_name = "Healthcare Service"

    def __init__(
        self,
        client: ServicesClient,
        require_resources_to_be_imported: bool = False,
        delete_not_found_ok: bool = True,
    ):
        super().__init__(
            require_resources_to_be_imported=require_resources_to_be_imported,
            delete_not_found_ok=delete_not_found_ok,
        )
        self.client = client

    def _context(self, name, resource_group):
        return f"{self.display_name} {name!r} (Resource Group {resource_group!r})"

    def create_update(self, d: ResourceData, ctx: StopContext):
        logger.info("Preparing arguments for Healthcare Service creation.")

        config = HealthcareServiceConfig.from_resource_data(d)
        name = config.name
        resource_group = config.resource_group_name

        if self.require_resources_to_be_imported and d.is_new_resource():
            self.ensure_not_exists(
                lambda: self.client.get(ctx, resource_group, name), name, resource_group
            )

        service_description = expand_services_description(config)

        try:
            operation = self.client.create_or_update(
                ctx, resource_group, name, service_description
            )
            operation.wait_for_completion(ctx)
        except ProviderError as e:
            raise wrap_error(
                e, f"Error Creating/Updating {self._context(name, resource_group)}"
            ) from e

        try:
            read = self.client.get(ctx, resource_group, name)
        except ProviderError as e:
            raise wrap_error(
                e, f"Error Retrieving {self._context(name, resource_group)}"
            ) from e
        if not read.id:
            raise ProviderError(
                f"Cannot read {self.display_name} {name!r} (resource group {resource_group!r}) ID"
            )

        d.set_id(read.id)

        return self.read(d, ctx)

    def read(self, d: ResourceData, ctx: StopContext):
        resource_group, name = self.parse_id(d, "services")

        try:
            resp = self.client.get(ctx, resource_group, name)
        except ProviderError as e:
            if response_was_not_found(e):
                logger.warning(
                    "%s %r was not found (Resource Group %r), removing from state",
                    self.display_name, name, resource_group,
                )
                d.set_id("")
                return
            raise wrap_error(
                e,
                f"Error making Read request on Azure {self._context(name, resource_group)}",
            ) from e

        d.set("name", name)
        d.set("resource_group_name", resource_group)

        flattened = flatten_services_description(resp)
        blocks = {block: flattened.pop(block, None) for block in SINGLETON_BLOCKS}
        for field, value in flattened.items():
            d.set(field, value)

        if resp.properties is not None:
            for block, value in blocks.items():
                d.set(block, [value] if value is not None else [])

        if "tags" not in flattened:
            d.set("tags", {})

    def delete(self, d: ResourceData, ctx: StopContext):
        try:
            resource_group, name = self.parse_id(d, "services")
        except ProviderError as e:
            raise wrap_error(e, "Error Parsing Azure Resource ID") from e

        try:
            operation = self.client.delete(ctx, resource_group, name)
        except ProviderError as e:
            if self.delete_not_found_ok and response_was_not_found(e):
                logger.info(
                    "%s already gone, nothing to delete",
                    self._context(name, resource_group),
                )
                return
            raise wrap_error(
                e, f"Error deleting {self._context(name, resource_group)}"
            ) from e

        try:
            operation.wait_for_completion(ctx)
        except ProviderError as e:
            raise wrap_error(
                e,
                f"Error waiting for the deleting {self._context(name, resource_group)}",
            ) from e
