from azurerm_provider.interfaces.plugin import BasePlugin

from .client import ServicesClient
from .config import HEALTHCARE_SERVICE_SCHEMA
from .resource import HealthcareServiceResource


class HealthcareServicePlugin(BasePlugin):
    """Registers the `azurerm_healthcare_service` resource type."""

    def get_type_name(self) -> str:
        return HealthcareServiceResource.resource_type

    def get_schema(self):
        return HEALTHCARE_SERVICE_SCHEMA

    def build_resource(self, client, config) -> HealthcareServiceResource:
        return HealthcareServiceResource(
            ServicesClient(client),
            require_resources_to_be_imported=config.require_resources_to_be_imported,
            delete_not_found_ok=config.delete_not_found_ok,
        )

    def get_description(self) -> str:
        return "Manages a Healthcare Service (Azure API for FHIR)."

    def get_example(self):
        return {
            "name": "uniqueazurefhirapi",
            "resource_group_name": "sample-resource-group",
            "location": "westus2",
            "kind": "fhir-R4",
            "cosmosdb_throughput": 2000,
            "access_policy_object_ids": ["11111111-1111-1111-1111-111111111111"],
            "tags": {"environment": "testenv", "purpose": "AcceptanceTests"},
            "authentication_configuration": [
                {
                    "authority": "https://login.microsoftonline.com/$%7BTENANT_ID%7D",
                    "audience": "https://azurehealthcareapis.com/",
                    "smart_proxy_enabled": True,
                }
            ],
            "cors_configuration": [
                {
                    "allowed_origins": ["http://www.example.com", "http://www.example2.com"],
                    "allowed_headers": ["x-tempo-*", "x-tempo2-*"],
                    "allowed_methods": ["GET", "PUT"],
                    "max_age_in_seconds": 500,
                    "allow_credentials": True,
                }
            ],
        }

    def get_import_id_example(self) -> str:
        return (
            "/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/group1"
            "/providers/Microsoft.HealthcareApis/services/service1"
        )
