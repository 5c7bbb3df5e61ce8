import uuid
from typing import Dict, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from azurerm_provider.helpers import ValidationErrorCollector
from azurerm_provider.models import ResourceSchema
from azurerm_provider.resource_data import ResourceData

KIND_CHOICES = ["fhir", "fhir-Stu3", "fhir-R4"]

CORS_METHOD_CHOICES = ["DELETE", "GET", "HEAD", "MERGE", "POST", "OPTIONS", "PUT"]

HEALTHCARE_SERVICE_SCHEMA: ResourceSchema = {
    "name": {
        "description": "The name of the service instance. Changing this forces a new resource to be created.",
        "type": "str",
        "required": True,
    },
    "location": {
        "description": "The Azure region where the service is deployed. Changing this forces a new resource to be created.",
        "type": "str",
        "required": True,
    },
    "resource_group_name": {
        "description": "The name of the resource group in which to create the service. Changing this forces a new resource to be created.",
        "type": "str",
        "required": True,
    },
    "kind": {
        "description": "The type of the service.",
        "type": "str",
        "default": "fhir",
        "choices": KIND_CHOICES,
    },
    "cosmosdb_throughput": {
        "description": "The provisioned throughput for the backing database.",
        "type": "int",
        "default": 1000,
    },
    "access_policy_object_ids": {
        "description": "Azure AD object IDs (UUIDs) allowed to access the service.",
        "type": "list",
        "elements": "str",
        "required": True,
        "min_items": 1,
    },
    "authentication_configuration": {
        "description": "The authentication configuration of the service.",
        "type": "list",
        "elements": "dict",
        "max_items": 3,
        "options": {
            "authority": {
                "description": "The Azure Active Directory (tenant) that serves as the authentication authority.",
                "type": "str",
            },
            "audience": {
                "description": "The intended audience to receive authentication tokens.",
                "type": "str",
            },
            "smart_proxy_enabled": {
                "description": "Whether the SMART on FHIR proxy is enabled.",
                "type": "bool",
            },
        },
    },
    "cors_configuration": {
        "description": "The cross-origin resource sharing settings of the service.",
        "type": "list",
        "elements": "dict",
        "max_items": 5,
        "options": {
            "allowed_origins": {
                "description": "Origins allowed via CORS.",
                "type": "list",
                "elements": "str",
                "required": True,
                "max_items": 64,
            },
            "allowed_headers": {
                "description": "Headers allowed via CORS.",
                "type": "list",
                "elements": "str",
                "required": True,
                "max_items": 64,
            },
            "allowed_methods": {
                "description": "Methods allowed via CORS.",
                "type": "list",
                "elements": "str",
                "required": True,
                "max_items": 64,
                "choices": CORS_METHOD_CHOICES,
            },
            "max_age_in_seconds": {
                "description": "The max age to be allowed via CORS (1 to 2000000000).",
                "type": "int",
                "required": True,
            },
            "allow_credentials": {
                "description": "Whether credentials are allowed via CORS.",
                "type": "bool",
            },
        },
    },
    "tags": {
        "description": "A mapping of tags to assign to the resource.",
        "type": "dict",
    },
}

# Blocks declared as lists in the schema that the API models as a single object.
SINGLETON_BLOCKS = ["authentication_configuration", "cors_configuration"]


def _no_empty_strings(values: List[str]) -> List[str]:
    for value in values:
        if not value or not value.strip():
            raise ValueError("must not contain empty strings")
    return values


class AuthenticationConfiguration(BaseModel):
    authority: str | None = None
    audience: str | None = None
    smart_proxy_enabled: bool | None = None


class CorsConfiguration(BaseModel):
    allowed_origins: List[str] = Field(max_length=64)
    allowed_headers: List[str] = Field(max_length=64)
    allowed_methods: List[str] = Field(max_length=64)
    max_age_in_seconds: int = Field(ge=1, le=2000000000)
    allow_credentials: bool | None = None

    @field_validator("allowed_origins", "allowed_headers")
    @classmethod
    def _check_not_empty(cls, values: List[str]) -> List[str]:
        return _no_empty_strings(values)

    @field_validator("allowed_methods")
    @classmethod
    def _check_methods(cls, values: List[str]) -> List[str]:
        invalid = [value for value in values if value not in CORS_METHOD_CHOICES]
        if invalid:
            raise ValueError(
                f"expected each method to be one of {CORS_METHOD_CHOICES}, got {invalid}"
            )
        return values


class HealthcareServiceConfig(BaseModel):
    """
    The strongly-typed desired state of one healthcare service.

    The generic map view models `authentication_configuration` and
    `cors_configuration` as lists; here each is a single optional block.
    """

    name: str = Field(min_length=1)
    resource_group_name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    kind: str = "fhir"
    cosmosdb_throughput: int = 1000
    access_policy_object_ids: List[str] = Field(min_length=1)
    authentication_configuration: AuthenticationConfiguration | None = None
    cors_configuration: CorsConfiguration | None = None
    tags: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "resource_group_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("access_policy_object_ids")
    @classmethod
    def _check_object_ids(cls, values: List[str]) -> List[str]:
        for value in values:
            try:
                uuid.UUID(str(value))
            except (ValueError, TypeError, AttributeError):
                raise ValueError(f"{value!r} is not a valid UUID")
        return values

    @classmethod
    def from_resource_data(cls, d: ResourceData) -> "HealthcareServiceConfig":
        """
        Builds the typed config from the generic map view.

        A singleton block given more than once keeps only its last element.
        Validation failures are raised as one ConfigurationError.
        """
        raw = {field: d.get(field) for field in HEALTHCARE_SERVICE_SCHEMA}
        for block in SINGLETON_BLOCKS:
            elements = raw.get(block) or []
            raw[block] = elements[-1] if elements else None
        raw = {key: value for key, value in raw.items() if value is not None}

        try:
            return cls(**raw)
        except ValidationError as e:
            collector = ValidationErrorCollector()
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                collector.add_error(f"{location}: {error['msg']}")
            collector.report("Healthcare Service configuration is invalid")
            raise  # unreachable, report() raised
