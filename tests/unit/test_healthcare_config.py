import pytest
from pydantic import ValidationError

from azurerm_provider.errors import ConfigurationError
from azurerm_provider.plugins.healthcare_service.config import (
    CorsConfiguration,
    HealthcareServiceConfig,
)

from conftest import OBJECT_ID


class TestHealthcareServiceConfig:
    def test_from_resource_data(self, make_resource_data, service_values):
        config = HealthcareServiceConfig.from_resource_data(
            make_resource_data(service_values)
        )

        assert config.name == "fhir1"
        assert config.kind == "fhir-R4"
        assert config.access_policy_object_ids == [OBJECT_ID]
        assert config.authentication_configuration.smart_proxy_enabled is True
        assert config.cors_configuration.max_age_in_seconds == 500
        assert config.tags == {"environment": "test"}

    def test_absent_blocks_and_tags(self, make_resource_data, service_values):
        for field in ("authentication_configuration", "cors_configuration", "tags"):
            del service_values[field]

        config = HealthcareServiceConfig.from_resource_data(
            make_resource_data(service_values)
        )

        assert config.authentication_configuration is None
        assert config.cors_configuration is None
        assert config.tags == {}

    def test_last_singleton_block_wins(self, make_resource_data, service_values):
        service_values["authentication_configuration"] = [
            {"audience": "first"},
            {"audience": "second"},
        ]

        config = HealthcareServiceConfig.from_resource_data(
            make_resource_data(service_values)
        )

        assert config.authentication_configuration.audience == "second"

    def test_invalid_object_id(self, make_resource_data, service_values):
        service_values["access_policy_object_ids"] = ["not-a-uuid"]

        with pytest.raises(ConfigurationError) as exc_info:
            HealthcareServiceConfig.from_resource_data(make_resource_data(service_values))

        assert "Healthcare Service configuration is invalid" in str(exc_info.value)
        assert "'not-a-uuid' is not a valid UUID" in str(exc_info.value)

    def test_max_age_out_of_range(self, make_resource_data, service_values):
        service_values["cors_configuration"][0]["max_age_in_seconds"] = 0

        with pytest.raises(ConfigurationError, match="max_age_in_seconds"):
            HealthcareServiceConfig.from_resource_data(make_resource_data(service_values))


class TestCorsConfiguration:
    def test_empty_origin_rejected(self):
        with pytest.raises(ValidationError, match="must not contain empty strings"):
            CorsConfiguration(
                allowed_origins=[""],
                allowed_headers=["*"],
                allowed_methods=["GET"],
                max_age_in_seconds=10,
            )

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError, match="TRACE"):
            CorsConfiguration(
                allowed_origins=["*"],
                allowed_headers=["*"],
                allowed_methods=["TRACE"],
                max_age_in_seconds=10,
            )
