import logging
from abc import ABC, abstractmethod
from typing import Callable

from azurerm_provider.cancellation import StopContext
from azurerm_provider.errors import (
    ImportAsExistsError,
    ProviderError,
    ResourceIdError,
    ResourceImportError,
)
from azurerm_provider.helpers import response_was_not_found, wrap_error
from azurerm_provider.models import ResourceId
from azurerm_provider.resource_data import ResourceData

logger = logging.getLogger(__name__)


class BaseResource(ABC):
    """
    Abstract base class for all resource lifecycle handlers.

    A handler orchestrates Create/Update, Read and Delete for one resource type
    by composing its mapper functions with its API client, and writes results
    back through a ResourceData. Handlers are stateless between calls: every
    dependency (the API client, the import-protection policy) is passed to the
    constructor, and every per-call value travels in the ResourceData and the
    StopContext.
    """

    # The resource type name, e.g. 'azurerm_healthcare_service'.
    resource_type: str = ""

    # A human-readable name used in log and error messages, e.g. 'Healthcare Service'.
    display_name: str = ""

    def __init__(
        self,
        require_resources_to_be_imported: bool = False,
        delete_not_found_ok: bool = True,
    ):
        self.require_resources_to_be_imported = require_resources_to_be_imported
        self.delete_not_found_ok = delete_not_found_ok

    @abstractmethod
    def create_update(self, d: ResourceData, ctx: StopContext): ...

    @abstractmethod
    def read(self, d: ResourceData, ctx: StopContext): ...

    @abstractmethod
    def delete(self, d: ResourceData, ctx: StopContext): ...

    def create(self, d: ResourceData, ctx: StopContext):
        return self.create_update(d, ctx)

    def update(self, d: ResourceData, ctx: StopContext):
        return self.create_update(d, ctx)

    def import_state(self, d: ResourceData, ctx: StopContext):
        """
        Adopts an existing remote resource by its identifier: the identifier is
        validated, then Read fills in every field.

        Raises:
            ResourceIdError: If the identifier cannot be parsed.
            ResourceImportError: If the remote resource does not exist.
        """
        ResourceId.parse(d.get_id())
        resource_id = d.get_id()
        self.read(d, ctx)
        if not d.get_id():
            raise ResourceImportError(
                f"Cannot import non-existent remote object {resource_id!r} "
                f"for {self.resource_type!r}"
            )

    def run(self, operation: str, d: ResourceData, ctx: StopContext):
        """Dispatches a lifecycle operation by name."""
        handlers = {
            "create": self.create,
            "read": self.read,
            "update": self.update,
            "delete": self.delete,
            "import": self.import_state,
        }
        handler = handlers.get(operation)
        if handler is None:
            raise ProviderError(
                f"Unsupported operation {operation!r} for {self.resource_type!r}; "
                f"expected one of {sorted(handlers)}"
            )
        return handler(d, ctx)

    def ensure_not_exists(
        self, get_existing: Callable[[], object], name: str, resource_group: str
    ):
        """
        Import protection: fails when the remote resource is already present.

        `get_existing` fetches the remote resource; a not-found answer means the
        name is free, any other failure is surfaced with resource context. No
        remote mutation is performed here.
        """
        try:
            existing = get_existing()
        except ProviderError as e:
            if response_was_not_found(e):
                return
            raise wrap_error(
                e,
                f"Error checking for presence of existing {self.display_name} "
                f"{name!r} (Resource Group {resource_group!r})",
            ) from e

        existing_id = getattr(existing, "id", None)
        if existing_id:
            raise ImportAsExistsError(self.resource_type, existing_id)

    def parse_id(self, d: ResourceData, segment: str) -> tuple[str, str]:
        """
        Parses the stored identifier into (resource group, name), where the name
        is the path segment keyed by `segment` (e.g. 'services').
        """
        resource_id = ResourceId.parse(d.get_id())
        name = resource_id.require(segment)
        if not resource_id.resource_group:
            raise ResourceIdError(
                f"No resource group found in {self.display_name} ID {d.get_id()!r}"
            )
        return resource_id.resource_group, name
