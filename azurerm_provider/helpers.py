"""Shared helper functions and constants."""

from .errors import ApiError, ConfigurationError, ProviderError

# Mapping from argument spec types to the labels used in rendered documentation.
SCHEMA_TYPE_LABELS = {
    "str": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "list": "list",
    "dict": "map",
}

# Keys understood by Ansible's ArgumentSpecValidator. Everything else in a
# resource schema (description, min_items, max_items) is provider metadata.
ARGUMENT_SPEC_KEYS = {
    "type",
    "required",
    "default",
    "elements",
    "options",
    "choices",
    "no_log",
    "aliases",
}

AUTH_FIXTURE = {
    "access_token": "eyJ0eXAiOiJKV1QiLCJhbGciOiJSUzI1NiJ9.test-token",
    "subscription_id": "00000000-0000-0000-0000-000000000000",
    "api_url": "https://management.azure.com",
}


def normalize_location(location: str) -> str:
    """Lower-cases an Azure region and strips its spaces ("West Europe" -> "westeurope")."""
    return location.replace(" ", "").lower()


def response_was_not_found(error: Exception) -> bool:
    """Returns True when the error is an API response with HTTP status 404."""
    return isinstance(error, ApiError) and error.status_code == 404


def wrap_error(error: Exception, msg: str) -> ProviderError:
    """
    Prefixes an error message with resource context while keeping the error's class,
    so callers can still tell a not-found from a failed operation after wrapping.
    """
    if not isinstance(error, ProviderError):
        return ProviderError(f"{msg}: {error}")

    wrapped = error.__class__.__new__(error.__class__)
    wrapped.__dict__.update(error.__dict__)
    wrapped.message = f"{msg}: {error.message}"
    wrapped.args = (wrapped.message,)
    return wrapped


def to_argument_spec(schema: dict) -> dict:
    """Strips provider-only metadata from a resource schema, recursing into nested options."""
    spec = {}
    for field, field_schema in schema.items():
        cleaned = {k: v for k, v in field_schema.items() if k in ARGUMENT_SPEC_KEYS}
        if "options" in cleaned:
            cleaned["options"] = to_argument_spec(cleaned["options"])
        spec[field] = cleaned
    return spec


class ValidationErrorCollector:
    """A simple class to collect and report validation errors."""

    def __init__(self):
        self.errors = []

    def add_error(self, message: str):
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def report(self, prefix: str = "Configuration is invalid"):
        """Raises a ConfigurationError listing every collected error, if any exist."""
        if self.has_errors:
            lines = [f"  {i}. {error}" for i, error in enumerate(self.errors, 1)]
            raise ConfigurationError(
                f"{prefix}:\n" + "\n".join(lines), errors=list(self.errors)
            )
