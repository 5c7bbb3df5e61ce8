"""
Expand (typed config -> API model) and flatten (API model -> config-shaped dict)
functions for the healthcare service.

Expanders always return a well-formed model: an absent block becomes an empty
object so the API receives `{}` rather than `null`. Flatteners only emit the
keys the API actually returned, so absent remote fields never show up as
zero-valued configuration.
"""

from typing import Any, Dict, List, Optional

from azurerm_provider.helpers import normalize_location

from .config import AuthenticationConfiguration, CorsConfiguration, HealthcareServiceConfig
from .models import (
    ServiceAccessPolicyEntry,
    ServiceAuthenticationConfigurationInfo,
    ServiceCorsConfigurationInfo,
    ServiceCosmosDbConfigurationInfo,
    ServicesDescription,
    ServicesProperties,
)


def expand_access_policy_entries(object_ids: List[str]) -> List[ServiceAccessPolicyEntry]:
    return [ServiceAccessPolicyEntry(object_id=object_id) for object_id in object_ids]


def expand_cors_configuration(
    cors: Optional[CorsConfiguration],
) -> ServiceCorsConfigurationInfo:
    if cors is None:
        return ServiceCorsConfigurationInfo()

    return ServiceCorsConfigurationInfo(
        origins=list(cors.allowed_origins),
        headers=list(cors.allowed_headers),
        methods=list(cors.allowed_methods),
        max_age=cors.max_age_in_seconds,
        allow_credentials=cors.allow_credentials,
    )


def expand_authentication_configuration(
    auth: Optional[AuthenticationConfiguration],
) -> ServiceAuthenticationConfigurationInfo:
    if auth is None:
        return ServiceAuthenticationConfigurationInfo()

    return ServiceAuthenticationConfigurationInfo(
        authority=auth.authority,
        audience=auth.audience,
        smart_proxy_enabled=auth.smart_proxy_enabled,
    )


def expand_tags(tags: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {key: str(value) for key, value in (tags or {}).items()}


def expand_services_description(config: HealthcareServiceConfig) -> ServicesDescription:
    return ServicesDescription(
        location=normalize_location(config.location),
        tags=expand_tags(config.tags),
        kind=config.kind,
        properties=ServicesProperties(
            access_policies=expand_access_policy_entries(config.access_policy_object_ids),
            cosmos_db_configuration=ServiceCosmosDbConfigurationInfo(
                offer_throughput=config.cosmosdb_throughput
            ),
            cors_configuration=expand_cors_configuration(config.cors_configuration),
            authentication_configuration=expand_authentication_configuration(
                config.authentication_configuration
            ),
        ),
    )


def flatten_access_policies(
    policies: Optional[List[ServiceAccessPolicyEntry]],
) -> List[str]:
    if not policies:
        return []
    return [policy.object_id for policy in policies if policy.object_id is not None]


def flatten_authentication_configuration(
    auth: Optional[ServiceAuthenticationConfigurationInfo],
) -> Optional[Dict[str, Any]]:
    if auth is None:
        return None

    output = {}
    if auth.authority is not None:
        output["authority"] = auth.authority
    if auth.audience is not None:
        output["audience"] = auth.audience
    if auth.smart_proxy_enabled is not None:
        output["smart_proxy_enabled"] = auth.smart_proxy_enabled
    return output or None


def flatten_cors_configuration(
    cors: Optional[ServiceCorsConfigurationInfo],
) -> Optional[Dict[str, Any]]:
    if cors is None:
        return None

    output = {}
    if cors.origins is not None:
        output["allowed_origins"] = list(cors.origins)
    if cors.headers is not None:
        output["allowed_headers"] = list(cors.headers)
    if cors.methods is not None:
        output["allowed_methods"] = list(cors.methods)
    if cors.max_age is not None:
        output["max_age_in_seconds"] = cors.max_age
    if cors.allow_credentials is not None:
        output["allow_credentials"] = cors.allow_credentials
    return output or None


def flatten_tags(tags: Optional[Dict[str, str]]) -> Dict[str, str]:
    return dict(tags or {})


def flatten_services_description(description: ServicesDescription) -> Dict[str, Any]:
    """
    Flattens a remote service description into configuration-shaped values.
    `name` and `resource_group_name` come from the identifier, not from here.
    """
    output: Dict[str, Any] = {}
    if description.tags is not None:
        output["tags"] = flatten_tags(description.tags)
    if description.location is not None:
        output["location"] = normalize_location(description.location)
    if description.kind:
        output["kind"] = description.kind

    properties = description.properties
    if properties is None:
        return output

    if properties.access_policies is not None:
        output["access_policy_object_ids"] = flatten_access_policies(
            properties.access_policies
        )
    cosmos = properties.cosmos_db_configuration
    if cosmos is not None and cosmos.offer_throughput is not None:
        output["cosmosdb_throughput"] = cosmos.offer_throughput

    auth = flatten_authentication_configuration(properties.authentication_configuration)
    if auth is not None:
        output["authentication_configuration"] = auth
    cors = flatten_cors_configuration(properties.cors_configuration)
    if cors is not None:
        output["cors_configuration"] = cors
    return output
