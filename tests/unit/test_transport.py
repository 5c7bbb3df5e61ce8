import io
import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from azurerm_provider.cancellation import StopContext
from azurerm_provider.errors import ApiError, OperationCancelledError, TransportError
from azurerm_provider.helpers import AUTH_FIXTURE
from azurerm_provider.transport import ArmClient


def fake_response(status=200, body=None, headers=None):
    """Mimics the object returned by ansible's open_url."""
    response = MagicMock()
    response.getcode.return_value = status
    response.read.return_value = json.dumps(body).encode() if body is not None else b""
    response.headers = headers or {}
    return response


def http_error(url, status, body=None, headers=None):
    content = json.dumps(body).encode() if body is not None else b""
    return HTTPError(url, status, "error", headers or {}, io.BytesIO(content))


@pytest.fixture
def client():
    return ArmClient(
        api_url=AUTH_FIXTURE["api_url"],
        access_token=AUTH_FIXTURE["access_token"],
        subscription_id=AUTH_FIXTURE["subscription_id"],
        retry_attempts=2,
        retry_delay=0,
    )


class TestBuildUrl:
    def test_formats_subscription_and_path_params(self, client):
        url = client.build_url(
            "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}",
            query_params={"api-version": "2018-08-20-preview"},
            path_params={"resourceGroupName": "my group"},
        )

        assert url == (
            "https://management.azure.com/subscriptions/"
            "00000000-0000-0000-0000-000000000000/resourceGroups/my%20group"
            "?api-version=2018-08-20-preview"
        )

    def test_absolute_url_is_used_as_is(self, client):
        url = client.build_url("https://management.azure.com/operations/op1?api-version=1")

        assert url == "https://management.azure.com/operations/op1?api-version=1"

    def test_missing_path_param_raises(self, client):
        with pytest.raises(TransportError, match="Missing required path parameter"):
            client.build_url("/resourceGroups/{resourceGroupName}", path_params={})


class TestSendRequest:
    @patch("azurerm_provider.transport.open_url")
    def test_success_decodes_json_and_sends_token(self, mock_open_url, client):
        # --- ARRANGE ---
        mock_open_url.return_value = fake_response(
            200, {"name": "fhir1"}, {"x-ms-request-id": "abc"}
        )

        # --- ACT ---
        response = client.send_request(
            StopContext(), "PUT", "/resource", data={"location": "westeurope"}
        )

        # --- ASSERT ---
        assert response.status_code == 200
        assert response.body == {"name": "fhir1"}
        assert response.header("X-MS-Request-Id") == "abc"
        assert response.method == "PUT"

        args, kwargs = mock_open_url.call_args
        assert args[0] == "https://management.azure.com/resource"
        assert kwargs["method"] == "PUT"
        assert json.loads(kwargs["data"]) == {"location": "westeurope"}
        assert kwargs["headers"]["Authorization"] == f"Bearer {AUTH_FIXTURE['access_token']}"

    @patch("azurerm_provider.transport.open_url")
    def test_empty_body_decodes_to_none(self, mock_open_url, client):
        mock_open_url.return_value = fake_response(204)

        response = client.send_request(StopContext(), "DELETE", "/resource")

        assert response.status_code == 204
        assert response.body is None

    @patch("azurerm_provider.transport.open_url")
    def test_not_found_raises_api_error_without_retry(self, mock_open_url, client):
        # --- ARRANGE ---
        mock_open_url.side_effect = http_error(
            "https://management.azure.com/resource",
            404,
            {"error": {"code": "ResourceNotFound", "message": "Not here"}},
        )

        # --- ACT & ASSERT ---
        with pytest.raises(ApiError) as exc_info:
            client.send_request(StopContext(), "GET", "/resource")

        error = exc_info.value
        assert error.status_code == 404
        assert error.code == "ResourceNotFound"
        assert error.api_message == "Not here"
        assert "failed with status 404" in str(error)
        assert mock_open_url.call_count == 1

    @patch("azurerm_provider.transport.open_url")
    def test_transient_status_is_retried(self, mock_open_url, client):
        mock_open_url.side_effect = [
            http_error("https://management.azure.com/resource", 503),
            fake_response(200, {"ok": True}),
        ]

        response = client.send_request(StopContext(), "GET", "/resource")

        assert response.body == {"ok": True}
        assert mock_open_url.call_count == 2

    @patch("azurerm_provider.transport.open_url")
    def test_retries_exhausted_raises_last_status(self, mock_open_url, client):
        mock_open_url.side_effect = [
            http_error("https://management.azure.com/resource", 500) for _ in range(3)
        ]

        with pytest.raises(ApiError) as exc_info:
            client.send_request(StopContext(), "GET", "/resource")

        assert exc_info.value.status_code == 500
        assert mock_open_url.call_count == 3

    @patch("azurerm_provider.transport.open_url")
    def test_connection_failure_raises_transport_error(self, mock_open_url, client):
        mock_open_url.side_effect = URLError("connection refused")

        with pytest.raises(TransportError, match="connection refused") as exc_info:
            client.send_request(StopContext(), "GET", "/resource")

        assert not isinstance(exc_info.value, ApiError)
        assert mock_open_url.call_count == 3

    @patch("azurerm_provider.transport.open_url")
    def test_cancelled_context_sends_nothing(self, mock_open_url, client):
        ctx = StopContext()
        ctx.cancel()

        with pytest.raises(OperationCancelledError):
            client.send_request(ctx, "GET", "/resource")

        mock_open_url.assert_not_called()

    @patch("azurerm_provider.transport.open_url")
    def test_non_json_error_body_is_kept_in_message(self, mock_open_url, client):
        mock_open_url.side_effect = HTTPError(
            "https://management.azure.com/resource",
            400,
            "Bad Request",
            {},
            io.BytesIO(b"plain text failure"),
        )

        with pytest.raises(ApiError, match="plain text failure"):
            client.send_request(StopContext(), "GET", "/resource")
