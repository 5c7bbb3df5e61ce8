"""
This module defines the core data structures shared by the transport, the
poller and the resource handlers. Using dataclasses provides type hinting,
immutability (where desired), and a clear structure for the data passed
between the layers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ResourceIdError

# A type alias for clarity, representing a resource schema: a dictionary of
# argument-spec style field declarations keyed by field name.
ResourceSchema = Dict[str, Dict[str, Any]]


@dataclass(frozen=True)
class ResourceId:
    """
    A parsed Azure Resource Manager identifier.

    `path` holds every key/value segment that is not the subscription, the
    resource group or the provider namespace, e.g. `{"services": "fhir1"}`.
    """

    subscription_id: str
    resource_group: str
    provider: str = ""
    path: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, resource_id: str) -> "ResourceId":
        """
        Parses an identifier such as
        `/subscriptions/<sub>/resourceGroups/<rg>/providers/<ns>/services/<name>`.

        Raises:
            ResourceIdError: If the identifier is empty, not a path, has an odd
                number of segments, an empty segment or no subscription.
        """
        if not resource_id or not resource_id.startswith("/"):
            raise ResourceIdError(f"Cannot parse Azure ID: {resource_id!r}")

        path = resource_id.split("?", 1)[0].strip("/")
        components = path.split("/")
        if len(components) % 2 != 0:
            raise ResourceIdError(
                f"The number of path segments is not divisible by 2 in {resource_id!r}"
            )

        segments = {}
        for key, value in zip(components[::2], components[1::2]):
            if not key or not value:
                raise ResourceIdError(
                    f"Key/Value cannot be empty strings. Key: {key!r}, Value: {value!r}"
                )
            segments[key] = value

        subscription_id = segments.pop("subscriptions", None)
        if not subscription_id:
            raise ResourceIdError(f"No subscription ID found in: {resource_id!r}")

        provider = segments.pop("providers", "")
        # Some APIs return the resource group segment in lower case.
        resource_group = segments.pop("resourceGroups", None)
        if resource_group is None:
            resource_group = segments.pop("resourcegroups", "")

        return cls(
            subscription_id=subscription_id,
            resource_group=resource_group,
            provider=provider,
            path=segments,
        )

    def require(self, key: str) -> str:
        """Returns the path segment for `key`, raising ResourceIdError when it is missing."""
        value = self.path.get(key)
        if not value:
            raise ResourceIdError(
                f"Resource ID is missing the {key!r} segment (found: {sorted(self.path)})"
            )
        return value


@dataclass
class ApiResponse:
    """The decoded result of a single HTTP exchange with the management API."""

    status_code: int
    body: Any
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    method: str = "GET"

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def retry_after(self) -> Optional[int]:
        """The `Retry-After` header in seconds, or None when absent or not an integer."""
        value = self.header("Retry-After")
        if value is None:
            return None
        try:
            return max(0, int(value))
        except ValueError:
            return None
