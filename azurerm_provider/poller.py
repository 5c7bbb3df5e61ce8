"""
Long-running operation tracking for Azure Resource Manager.

A PUT or DELETE against ARM may complete synchronously or hand back one of
three polling protocols:

-   **Azure-AsyncOperation:** the header holds a status URL whose body carries
    `status` (InProgress / Succeeded / Failed / Canceled) and an `error`.
-   **Location:** the header holds a URL that answers 202 while the operation
    runs and 200/201/204 once it is finished.
-   **provisioningState:** no header; the resource itself is re-read until
    `properties.provisioningState` becomes terminal.

`LongRunningOperation` picks the protocol from the initial response and polls
it until a terminal state, sleeping between polls according to an injectable
back-off policy and the caller's StopContext.
"""

import logging
from typing import Optional

from .cancellation import StopContext
from .errors import ApiError, OperationFailedError
from .models import ApiResponse

logger = logging.getLogger(__name__)

SUCCEEDED_STATES = {"succeeded"}
FAILED_STATES = {"failed", "canceled", "cancelled"}

ASYNC_OPERATION_HEADER = "Azure-AsyncOperation"
LOCATION_HEADER = "Location"


class ConstantBackoff:
    """Waits the same number of seconds between every poll."""

    def __init__(self, interval: float):
        self.interval = interval

    def delay(self, attempt: int) -> float:
        return self.interval


class ExponentialBackoff:
    """Multiplies the wait after each poll, capped at `maximum` seconds."""

    def __init__(self, initial: float = 5, maximum: float = 60, multiplier: float = 2):
        self.initial = initial
        self.maximum = maximum
        self.multiplier = multiplier

    def delay(self, attempt: int) -> float:
        return min(self.maximum, self.initial * (self.multiplier ** max(0, attempt - 1)))


class LongRunningOperation:
    """
    A pollable handle for an in-flight server-side operation.

    Args:
        client: The ArmClient used to send poll requests.
        initial: The response to the request that started the operation.
        resource_url: URL of the resource, used by the provisioningState protocol.
        backoff: Any object with a `delay(attempt) -> seconds` method. A
            `Retry-After` header on a poll response takes precedence over it.
    """

    def __init__(
        self,
        client,
        initial: ApiResponse,
        resource_url: Optional[str] = None,
        backoff=None,
    ):
        self.client = client
        self.method = initial.method.upper()
        self.resource_url = resource_url or initial.url
        self.backoff = backoff or ConstantBackoff(client.default_poll_interval)
        self.status: Optional[str] = None
        self.result = None
        self.done = False
        self._last_response = initial
        self._async_url = initial.header(ASYNC_OPERATION_HEADER)
        self._location_url = initial.header(LOCATION_HEADER)
        self._evaluate_initial(initial)

    @property
    def polling_protocol(self) -> str:
        if self._async_url:
            return "async-operation"
        if self._location_url:
            return "location"
        return "provisioning-state"

    def _evaluate_initial(self, response: ApiResponse):
        if self._async_url or self._location_url:
            self.status = "InProgress"
            return
        if response.status_code == 204:
            self._finish("Succeeded", None)
            return
        if response.status_code == 202:
            # Accepted without any polling header; fall back to reading the resource.
            self.status = "InProgress"
            return
        state = _provisioning_state(response.body)
        if state is None:
            self._finish("Succeeded", response.body)
        else:
            self._apply_state(state, response)

    def _finish(self, status: str, result):
        self.status = status
        self.result = result
        self.done = True

    def _apply_state(self, state: str, response: ApiResponse):
        lowered = state.lower()
        if lowered in SUCCEEDED_STATES:
            self._finish(state, response.body)
        elif lowered in FAILED_STATES:
            self.status = state
            self.done = True
            raise _operation_failed(state, response)
        else:
            self.status = state

    def poll(self, ctx: StopContext) -> bool:
        """
        Performs a single poll request and updates the operation status.

        Returns:
            True once the operation reached a terminal state.

        Raises:
            OperationFailedError: If the operation failed or was cancelled remotely.
            ApiError: If a poll request failed.
        """
        if self.done:
            return True

        if self._async_url:
            response = self.client.send_request(ctx, "GET", self._async_url)
            self._last_response = response
            status = (response.body or {}).get("status") if isinstance(response.body, dict) else None
            if status is None:
                return False
            if status.lower() in SUCCEEDED_STATES:
                self._finish(status, response.body)
                self._fetch_final_result(ctx)
            elif status.lower() in FAILED_STATES:
                self.status = status
                self.done = True
                raise _operation_failed(status, response)
            else:
                self.status = status
            return self.done

        if self._location_url:
            try:
                response = self.client.send_request(ctx, "GET", self._location_url)
            except ApiError as e:
                if self._deleted(e):
                    return True
                raise
            self._last_response = response
            if response.status_code == 202:
                self.status = "InProgress"
                return False
            self._finish("Succeeded", response.body)
            return True

        try:
            response = self.client.send_request(ctx, "GET", self.resource_url)
        except ApiError as e:
            if self._deleted(e):
                return True
            raise
        self._last_response = response
        state = _provisioning_state(response.body)
        if state is None:
            self._finish("Succeeded", response.body)
        else:
            self._apply_state(state, response)
        return self.done

    def _deleted(self, error: ApiError) -> bool:
        # A 404 during a DELETE means the target vanished before a final state was observed.
        if error.status_code == 404 and self.method == "DELETE":
            self._finish("Succeeded", None)
            return True
        return False

    def _fetch_final_result(self, ctx: StopContext):
        # A successful PUT has its final representation at the resource URL.
        if self.method in ("PUT", "PATCH"):
            response = self.client.send_request(ctx, "GET", self.resource_url)
            self.result = response.body

    def wait_for_completion(self, ctx: StopContext):
        """
        Polls until the operation is terminal, the context is cancelled or its
        deadline passes.

        Raises:
            OperationFailedError: If the operation ended in a failed state.
            OperationCancelledError: If `ctx` was cancelled.
            DeadlineExceededError: If `ctx`'s deadline passed first.
        """
        attempt = 0
        while not self.done:
            attempt += 1
            delay = self._last_response.retry_after()
            if delay is None:
                delay = self.backoff.delay(attempt)
            logger.debug(
                "Operation %s is %s, next poll in %ss (protocol: %s)",
                self.method, self.status, delay, self.polling_protocol,
            )
            ctx.sleep(delay)
            self.poll(ctx)
        return self.result


def _provisioning_state(body) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    properties = body.get("properties")
    if not isinstance(properties, dict):
        return None
    return properties.get("provisioningState")


def _operation_failed(status: str, response: ApiResponse) -> OperationFailedError:
    code = message = None
    body = response.body
    if isinstance(body, dict):
        error = body.get("error")
        if not isinstance(error, dict) and isinstance(body.get("properties"), dict):
            error = body["properties"].get("error")
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message")
    details = f": Code={code!r} Message={message!r}" if (code or message) else ""
    return OperationFailedError(
        f"Long running operation terminated with status {status!r}{details}",
        status=status,
        code=code,
    )
