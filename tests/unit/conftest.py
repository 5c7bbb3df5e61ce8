from unittest.mock import MagicMock

import pytest

from azurerm_provider.cancellation import StopContext
from azurerm_provider.helpers import AUTH_FIXTURE
from azurerm_provider.models import ApiResponse
from azurerm_provider.plugins.healthcare_service.config import HEALTHCARE_SERVICE_SCHEMA
from azurerm_provider.resource_data import ResourceData

SERVICE_ID = (
    "/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/rg1"
    "/providers/Microsoft.HealthcareApis/services/fhir1"
)

OBJECT_ID = "11111111-1111-1111-1111-111111111111"


def make_response(status_code=200, body=None, headers=None, method="GET", url=None):
    """Builds an ApiResponse the way ArmClient would return it."""
    return ApiResponse(
        status_code=status_code,
        body=body,
        headers=headers or {},
        url=url or f"https://management.azure.com{SERVICE_ID}",
        method=method,
    )


@pytest.fixture
def ctx():
    """A StopContext without a deadline, fresh for every test."""
    return StopContext()


@pytest.fixture
def mock_arm_client():
    """
    A mocked ArmClient. `send_request` is configured per test; polling
    intervals are zero so nothing ever blocks.
    """
    client = MagicMock()
    client.default_poll_interval = 0
    client.subscription_id = AUTH_FIXTURE["subscription_id"]
    return client


@pytest.fixture
def service_values():
    """A complete, valid healthcare service configuration."""
    return {
        "name": "fhir1",
        "resource_group_name": "rg1",
        "location": "West Europe",
        "kind": "fhir-R4",
        "cosmosdb_throughput": 2000,
        "access_policy_object_ids": [OBJECT_ID],
        "authentication_configuration": [
            {
                "authority": "https://login.microsoftonline.com/tenant",
                "audience": "https://azurehealthcareapis.com/",
                "smart_proxy_enabled": True,
            }
        ],
        "cors_configuration": [
            {
                "allowed_origins": ["http://www.example.com"],
                "allowed_headers": ["x-tempo-*"],
                "allowed_methods": ["GET", "PUT"],
                "max_age_in_seconds": 500,
                "allow_credentials": True,
            }
        ],
        "tags": {"environment": "test"},
    }


@pytest.fixture
def make_resource_data():
    """A factory for ResourceData bound to the healthcare service schema."""

    def _make(values=None, resource_id=""):
        return ResourceData(
            HEALTHCARE_SERVICE_SCHEMA, values=values, resource_id=resource_id
        )

    return _make


@pytest.fixture
def remote_service_body():
    """A service description as the management API returns it."""
    return {
        "id": SERVICE_ID,
        "name": "fhir1",
        "type": "Microsoft.HealthcareApis/services",
        "location": "West Europe",
        "kind": "fhir-R4",
        "etag": "etag1",
        "tags": {"environment": "test"},
        "properties": {
            "provisioningState": "Succeeded",
            "accessPolicies": [{"objectId": OBJECT_ID}],
            "cosmosDbConfiguration": {"offerThroughput": 2000},
            "authenticationConfiguration": {
                "authority": "https://login.microsoftonline.com/tenant",
                "audience": "https://azurehealthcareapis.com/",
                "smartProxyEnabled": True,
            },
            "corsConfiguration": {
                "origins": ["http://www.example.com"],
                "headers": ["x-tempo-*"],
                "methods": ["GET", "PUT"],
                "maxAge": 500,
                "allowCredentials": True,
            },
        },
    }
