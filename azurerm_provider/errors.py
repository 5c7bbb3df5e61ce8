"""Exception hierarchy shared by the transport, the poller and the resource handlers."""


class ProviderError(Exception):
    """Base class for every error raised by the provider."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ConfigurationError(ProviderError):
    """Raised when a provider or resource configuration fails validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class TransportError(ProviderError):
    """Raised when a request could not be delivered (network failure, timeout)."""


class ApiError(TransportError):
    """
    Raised when the management API answers with a non-success status code.

    The ARM error envelope (`{"error": {"code": ..., "message": ...}}`) is
    unpacked into `code` and `api_message` when present.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        api_message: str | None = None,
        url: str | None = None,
        method: str | None = None,
        body=None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.api_message = api_message
        self.url = url
        self.method = method
        self.body = body


class OperationFailedError(ProviderError):
    """Raised when a long-running operation reaches a failed terminal state."""

    def __init__(self, message: str, status: str | None = None, code: str | None = None):
        super().__init__(message)
        self.status = status
        self.code = code


class OperationCancelledError(ProviderError):
    """Raised when the caller's StopContext was cancelled during a wait."""


class DeadlineExceededError(OperationCancelledError):
    """Raised when the caller's StopContext deadline passed during a wait."""


class ImportAsExistsError(ProviderError):
    """Raised by import protection when the remote resource already exists."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"A resource with the ID {resource_id!r} already exists - to be managed "
            f"this resource needs to be imported into the state. Please see the "
            f"resource documentation for {resource_type!r} for more information."
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceIdError(ProviderError):
    """Raised when a stored identifier cannot be parsed into its components."""


class ResourceImportError(ProviderError):
    """Raised when importing an identifier whose remote object does not exist."""
