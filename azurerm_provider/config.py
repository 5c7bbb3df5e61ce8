import os
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .helpers import ValidationErrorCollector

DEFAULT_API_URL = "https://management.azure.com"

# Environment variables that override values read from the config file.
ENVIRONMENT_OVERRIDES = {
    "ARM_ACCESS_TOKEN": "access_token",
    "ARM_SUBSCRIPTION_ID": "subscription_id",
    "ARM_ENDPOINT": "api_url",
}

# When set to any non-empty value, Create refuses to adopt existing resources.
STRICT_MODE_VARIABLE = "ARM_PROVIDER_STRICT"


class ProviderConfig(BaseModel):
    """
    Provider-wide settings shared by every resource handler.

    Credentials are supplied ready-made: the provider expects a bearer token
    for the management endpoint and does not negotiate one itself.
    """

    # Base URL of the Azure Resource Manager endpoint.
    api_url: str = DEFAULT_API_URL

    # Bearer token sent as the Authorization header.
    access_token: str

    # The subscription every request is scoped to.
    subscription_id: str

    # Import protection: Create fails if the remote resource already exists.
    require_resources_to_be_imported: bool = False

    # Whether Delete treats an already-missing remote resource as success.
    delete_not_found_ok: bool = True

    # Maximum number of seconds a lifecycle operation may take, polling included.
    timeout: int = Field(default=3600, gt=0)

    # Default interval in seconds between polls of a long-running operation.
    interval: int = Field(default=20, ge=0)

    # Per-request socket timeout in seconds.
    request_timeout: int = Field(default=30, gt=0)

    # How many times a transient failure (429, 5xx, connection error) is retried.
    retry_attempts: int = Field(default=3, ge=0)

    # Base delay in seconds between transport retries.
    retry_delay: int = Field(default=5, ge=0)

    validate_certs: bool = True

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("access_token", "subscription_id")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, environ=None) -> "ProviderConfig":
        """
        Builds a config from a raw dictionary, applying environment overrides and
        converting pydantic validation errors into a single ConfigurationError.
        """
        environ = os.environ if environ is None else environ
        merged = dict(data or {})
        for variable, key in ENVIRONMENT_OVERRIDES.items():
            if environ.get(variable):
                merged[key] = environ[variable]
        if environ.get(STRICT_MODE_VARIABLE):
            merged["require_resources_to_be_imported"] = True

        try:
            return cls(**merged)
        except ValidationError as e:
            collector = ValidationErrorCollector()
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                collector.add_error(f"{location}: {error['msg']}")
            collector.report("Provider configuration is invalid")
            raise  # unreachable, report() raised

    @classmethod
    def from_file(cls, config_path: str, environ=None) -> "ProviderConfig":
        """Loads a provider config from a YAML file."""
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f)
        except (IOError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Error reading or parsing config file '{config_path}': {e}"
            ) from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file '{config_path}' must contain a mapping at the top level."
            )
        return cls.from_dict(data, environ=environ)
