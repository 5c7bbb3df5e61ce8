"""
Wire models for the Microsoft.HealthcareApis `services` resource.

Every field is optional: the API omits what it does not know, and requests
only carry what the caller set. Field names are snake_case in Python and
camelCase on the wire.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        """Serialises to the JSON request body, dropping unset (None) fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ServiceAccessPolicyEntry(WireModel):
    # An Azure AD object ID (user or app) allowed access to the FHIR service.
    object_id: str | None = Field(default=None, alias="objectId")


class ServiceCosmosDbConfigurationInfo(WireModel):
    # The provisioned throughput for the backing database.
    offer_throughput: int | None = Field(default=None, alias="offerThroughput")


class ServiceAuthenticationConfigurationInfo(WireModel):
    authority: str | None = None
    audience: str | None = None
    smart_proxy_enabled: bool | None = Field(default=None, alias="smartProxyEnabled")


class ServiceCorsConfigurationInfo(WireModel):
    origins: List[str] | None = None
    headers: List[str] | None = None
    methods: List[str] | None = None
    max_age: int | None = Field(default=None, alias="maxAge")
    allow_credentials: bool | None = Field(default=None, alias="allowCredentials")


class ServicesProperties(WireModel):
    # Read-only; one of Accepted, Creating, Updating, Deleting, Succeeded, Failed, Canceled...
    provisioning_state: str | None = Field(default=None, alias="provisioningState")
    access_policies: List[ServiceAccessPolicyEntry] | None = Field(
        default=None, alias="accessPolicies"
    )
    cosmos_db_configuration: ServiceCosmosDbConfigurationInfo | None = Field(
        default=None, alias="cosmosDbConfiguration"
    )
    authentication_configuration: ServiceAuthenticationConfigurationInfo | None = (
        Field(default=None, alias="authenticationConfiguration")
    )
    cors_configuration: ServiceCorsConfigurationInfo | None = Field(
        default=None, alias="corsConfiguration"
    )


class ServicesDescription(WireModel):
    """The description of a Healthcare APIs service, as sent and returned by ARM."""

    id: str | None = None
    name: str | None = None
    type: str | None = None
    location: str | None = None
    tags: Dict[str, str] | None = None
    etag: str | None = None
    # One of 'fhir', 'fhir-Stu3', 'fhir-R4'.
    kind: str | None = None
    properties: ServicesProperties | None = None
