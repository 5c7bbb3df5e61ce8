import logging

from azurerm_provider.cancellation import StopContext
from azurerm_provider.poller import LongRunningOperation
from azurerm_provider.transport import ArmClient

from .models import ServicesDescription

logger = logging.getLogger(__name__)

API_VERSION = "2018-08-20-preview"

SERVICE_PATH = (
    "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
    "/providers/Microsoft.HealthcareApis/services/{resourceName}"
)


class ServicesClient:
    """
    Client for the Microsoft.HealthcareApis `services` collection.

    Each method prepares a request (path and query parameters), sends it
    through the shared ArmClient and decodes the response. Mutating methods
    return a LongRunningOperation instead of waiting themselves.
    """

    def __init__(self, client: ArmClient, backoff=None):
        self.client = client
        self.backoff = backoff

    def _path_params(self, resource_group_name: str, resource_name: str) -> dict:
        return {
            "resourceGroupName": resource_group_name,
            "resourceName": resource_name,
        }

    def get(
        self, ctx: StopContext, resource_group_name: str, resource_name: str
    ) -> ServicesDescription:
        """
        Gets the metadata of a service instance.

        Raises:
            ApiError: With status 404 when the service does not exist.
        """
        response = self.client.send_request(
            ctx,
            "GET",
            SERVICE_PATH,
            query_params={"api-version": API_VERSION},
            path_params=self._path_params(resource_group_name, resource_name),
        )
        return ServicesDescription.model_validate(response.body or {})

    def create_or_update(
        self,
        ctx: StopContext,
        resource_group_name: str,
        resource_name: str,
        service_description: ServicesDescription,
    ) -> LongRunningOperation:
        """Creates or updates the metadata of a service instance."""
        response = self.client.send_request(
            ctx,
            "PUT",
            SERVICE_PATH,
            data=service_description.to_payload(),
            query_params={"api-version": API_VERSION},
            path_params=self._path_params(resource_group_name, resource_name),
        )
        logger.debug(
            "PUT for service %r returned %d", resource_name, response.status_code
        )
        return LongRunningOperation(self.client, response, backoff=self.backoff)

    def delete(
        self, ctx: StopContext, resource_group_name: str, resource_name: str
    ) -> LongRunningOperation:
        """Deletes a service instance."""
        response = self.client.send_request(
            ctx,
            "DELETE",
            SERVICE_PATH,
            query_params={"api-version": API_VERSION},
            path_params=self._path_params(resource_group_name, resource_name),
        )
        logger.debug(
            "DELETE for service %r returned %d", resource_name, response.status_code
        )
        return LongRunningOperation(self.client, response, backoff=self.backoff)
