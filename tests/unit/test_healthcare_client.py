from azurerm_provider.poller import ConstantBackoff, LongRunningOperation
from azurerm_provider.plugins.healthcare_service.client import (
    API_VERSION,
    SERVICE_PATH,
    ServicesClient,
)
from azurerm_provider.plugins.healthcare_service.models import (
    ServicesDescription,
    ServicesProperties,
)

from conftest import SERVICE_ID, make_response

EXPECTED_PATH_PARAMS = {"resourceGroupName": "rg1", "resourceName": "fhir1"}


class TestServicesClient:
    def test_get_decodes_description(self, mock_arm_client, ctx, remote_service_body):
        mock_arm_client.send_request.return_value = make_response(200, remote_service_body)
        client = ServicesClient(mock_arm_client)

        description = client.get(ctx, "rg1", "fhir1")

        assert isinstance(description, ServicesDescription)
        assert description.id == SERVICE_ID
        assert description.properties.cosmos_db_configuration.offer_throughput == 2000
        mock_arm_client.send_request.assert_called_once_with(
            ctx,
            "GET",
            SERVICE_PATH,
            query_params={"api-version": API_VERSION},
            path_params=EXPECTED_PATH_PARAMS,
        )

    def test_create_or_update_returns_operation(self, mock_arm_client, ctx):
        # --- ARRANGE ---
        mock_arm_client.send_request.return_value = make_response(
            201, {"properties": {"provisioningState": "Creating"}}, method="PUT"
        )
        client = ServicesClient(mock_arm_client, backoff=ConstantBackoff(0))
        description = ServicesDescription(
            location="westeurope", kind="fhir", properties=ServicesProperties()
        )

        # --- ACT ---
        operation = client.create_or_update(ctx, "rg1", "fhir1", description)

        # --- ASSERT ---
        assert isinstance(operation, LongRunningOperation)
        assert not operation.done
        assert operation.method == "PUT"
        mock_arm_client.send_request.assert_called_once_with(
            ctx,
            "PUT",
            SERVICE_PATH,
            data={"location": "westeurope", "kind": "fhir", "properties": {}},
            query_params={"api-version": API_VERSION},
            path_params=EXPECTED_PATH_PARAMS,
        )

    def test_delete_returns_operation(self, mock_arm_client, ctx):
        mock_arm_client.send_request.return_value = make_response(204, None, method="DELETE")
        client = ServicesClient(mock_arm_client, backoff=ConstantBackoff(0))

        operation = client.delete(ctx, "rg1", "fhir1")

        assert operation.done
        args = mock_arm_client.send_request.call_args.args
        assert args[:3] == (ctx, "DELETE", SERVICE_PATH)
