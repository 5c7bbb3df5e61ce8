import json
import logging
import socket
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode

from ansible.module_utils.urls import open_url

from .cancellation import StopContext
from .errors import ApiError, TransportError
from .models import ApiResponse

logger = logging.getLogger(__name__)

# Status codes that indicate a transient failure worth retrying.
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

SUCCESS_STATUS_CODES = {200, 201, 202, 204}


class ArmClient:
    """
    A thin, synchronous client for the Azure Resource Manager REST API.

    It is responsible for building URLs (path parameters, query parameters,
    absolute polling URLs), attaching the bearer token, retrying transient
    failures and turning error responses into ApiError. Resource-specific
    clients compose it; it knows nothing about any resource type.
    """

    def __init__(
        self,
        api_url: str,
        access_token: str,
        subscription_id: str,
        request_timeout: int = 30,
        retry_attempts: int = 3,
        retry_delay: int = 5,
        validate_certs: bool = True,
        default_poll_interval: int = 20,
    ):
        self.api_url = api_url.rstrip("/")
        self.access_token = access_token
        self.subscription_id = subscription_id
        self.request_timeout = request_timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.validate_certs = validate_certs
        self.default_poll_interval = default_poll_interval

    @classmethod
    def from_config(cls, config) -> "ArmClient":
        """Creates a client from a ProviderConfig."""
        return cls(
            api_url=config.api_url,
            access_token=config.access_token,
            subscription_id=config.subscription_id,
            request_timeout=config.request_timeout,
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_delay,
            validate_certs=config.validate_certs,
            default_poll_interval=config.interval,
        )

    def build_url(self, path, query_params=None, path_params=None) -> str:
        """
        Builds the final URL, handling both relative paths and absolute URLs
        (long-running operation headers carry absolute polling URLs).
        """
        params = {"subscriptionId": self.subscription_id}
        params.update(path_params or {})
        if path_params is not None or "{" in path:
            try:
                path = path.format(
                    **{key: quote(str(value), safe="") for key, value in params.items()}
                )
            except KeyError as e:
                raise TransportError(
                    f"Missing required path parameter in API call: {e}"
                ) from e

        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self.api_url}/{path.lstrip('/')}"

        if query_params:
            separator = "&" if "?" in url else "?"
            url += separator + urlencode(query_params)
        return url

    def send_request(
        self,
        ctx: StopContext,
        method: str,
        path: str,
        data=None,
        query_params=None,
        path_params=None,
    ) -> ApiResponse:
        """
        Sends a request and returns the decoded response.

        Transient failures are retried up to `retry_attempts` times, waiting
        `Retry-After` seconds when the server provides it and a linearly growing
        delay otherwise. Every wait honours the caller's StopContext.

        Raises:
            ApiError: For any non-success status that is not retried (or retried out).
            TransportError: When the server could not be reached.
            OperationCancelledError: When `ctx` is cancelled or its deadline passes.
        """
        url = self.build_url(path, query_params=query_params, path_params=path_params)
        payload = None
        if data is not None:
            payload = data if isinstance(data, str) else json.dumps(data)

        attempt = 0
        while True:
            ctx.raise_if_done()
            attempt += 1
            try:
                response = self._send_once(method, url, payload)
            except (URLError, socket.timeout, ConnectionError) as e:
                if attempt > self.retry_attempts:
                    raise TransportError(f"Request to {url} failed: {e}") from e
                delay = self.retry_delay * attempt
                logger.warning(
                    "%s %s failed (%s), retrying in %ss (attempt %d of %d)",
                    method, url, e, delay, attempt, self.retry_attempts,
                )
                ctx.sleep(delay)
                continue

            if (
                response.status_code in RETRYABLE_STATUS_CODES
                and attempt <= self.retry_attempts
            ):
                delay = response.retry_after() or self.retry_delay * attempt
                logger.warning(
                    "%s %s returned %d, retrying in %ss (attempt %d of %d)",
                    method, url, response.status_code, delay, attempt,
                    self.retry_attempts,
                )
                ctx.sleep(delay)
                continue

            if response.status_code not in SUCCESS_STATUS_CODES:
                raise _api_error(response)
            return response

    def _send_once(self, method, url, payload) -> ApiResponse:
        logger.debug("%s %s", method, url)
        try:
            response = open_url(
                url,
                data=payload,
                method=method,
                headers={
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json; charset=utf-8",
                    "Accept": "application/json",
                },
                timeout=self.request_timeout,
                validate_certs=self.validate_certs,
            )
            status_code = response.getcode()
            body_content = response.read()
            headers = dict(response.headers.items())
        except HTTPError as e:
            # The error response still carries a status, a body and headers.
            status_code = e.code
            body_content = e.read() if e.fp is not None else b""
            headers = dict(e.headers.items()) if e.headers else {}

        return ApiResponse(
            status_code=status_code,
            body=_decode_body(body_content),
            headers=headers,
            url=url,
            method=method,
        )


def _decode_body(body_content):
    if not body_content:
        return None
    try:
        return json.loads(body_content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        # The body was not JSON; keep the raw text for error messages.
        return body_content.decode(errors="ignore")


def _api_error(response: ApiResponse) -> ApiError:
    code = api_message = None
    body = response.body
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
        api_message = body["error"].get("message")

    if api_message:
        details = f"Code={code!r} Message={api_message!r}"
    elif body:
        details = f"API Response: {body if isinstance(body, str) else json.dumps(body)}"
    else:
        details = "No response body"

    return ApiError(
        f"{response.method} {response.url} failed with status {response.status_code}. {details}",
        status_code=response.status_code,
        code=code,
        api_message=api_message,
        url=response.url,
        method=response.method,
        body=body,
    )
