import json

import pytest
import requests
from unittest.mock import MagicMock, patch

from infrastructure.api.errors import (
    ApplicationError,
    AuthenticationError,
    InvalidResponseError,
    NetworkUnreachableError,
)
from infrastructure.api.gateway_client import ApiGatewayClient


def make_response(status_code, payload=None, raw=None):
    resp = MagicMock()
    resp.status_code = status_code
    if raw is not None:
        resp.content = raw
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    elif payload is None:
        resp.content = b""
    else:
        resp.content = json.dumps(payload).encode("utf-8")
        resp.json.return_value = payload
    return resp


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def client(notifier):
    return ApiGatewayClient("http://crm.test/api/", timeout=15, notifier=notifier)


@patch("requests.request")
def test_request_builds_url_and_parses_envelope(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "ok", "data": [{"id": "p1"}]})

    envelope = client.get_properties()

    args, kwargs = mock_request.call_args
    assert args == ("GET", "http://crm.test/api/properties")
    assert kwargs["timeout"] == 15
    assert envelope.message == "ok"
    assert envelope.data == [{"id": "p1"}]
    assert envelope.error is None
    assert envelope.ok is True


@patch("requests.request")
def test_bearer_token_attached_when_held(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "ok"})
    client.bind_token_provider(lambda: "tok123")

    client.get_clients()

    headers = mock_request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer tok123"


@patch("requests.request")
def test_no_authorization_header_without_token(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "ok"})

    client.get_clients()

    headers = mock_request.call_args.kwargs["headers"]
    assert "Authorization" not in headers
    assert headers["Content-Type"] == "application/json"


@patch("requests.request")
def test_json_body_is_serialized(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "updated"})

    client.update_client("c1", {"status": "converted"})

    args, kwargs = mock_request.call_args
    assert args == ("PUT", "http://crm.test/api/clients/c1")
    assert json.loads(kwargs["data"]) == {"status": "converted"}


@patch("requests.request")
def test_upload_omits_content_type(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "uploaded", "data": {"profile_image": "/uploads/a.png"}})
    client.bind_token_provider(lambda: "tok123")

    envelope = client.upload_profile_photo("a.png", b"\x89PNG", "image/png")

    args, kwargs = mock_request.call_args
    assert args == ("POST", "http://crm.test/api/upload/profile-photo")
    assert "Content-Type" not in kwargs["headers"]
    assert kwargs["headers"]["Authorization"] == "Bearer tok123"
    assert kwargs["files"] == {"profile_photo": ("a.png", b"\x89PNG", "image/png")}
    assert "data" not in kwargs
    assert envelope.data["profile_image"] == "/uploads/a.png"


@patch("requests.request")
def test_error_field_takes_precedence(mock_request, client, notifier):
    mock_request.return_value = make_response(400, {"message": "Bad request", "error": "Email is required"})

    with pytest.raises(ApplicationError) as excinfo:
        client.create_client({})

    assert str(excinfo.value) == "Email is required"
    assert excinfo.value.status_code == 400
    assert excinfo.value.envelope.message == "Bad request"
    notifier.assert_called_once_with("Email is required")


@patch("requests.request")
def test_message_used_when_error_missing(mock_request, client):
    mock_request.return_value = make_response(404, {"message": "Client not found"})

    with pytest.raises(ApplicationError) as excinfo:
        client.get_client("missing")

    assert str(excinfo.value) == "Client not found"


@patch("requests.request")
def test_generic_message_for_unparseable_error_body(mock_request, client):
    mock_request.return_value = make_response(502, raw=b"<html>Bad Gateway</html>")

    with pytest.raises(ApplicationError) as excinfo:
        client.get_properties()

    assert str(excinfo.value) == "Request failed"
    assert excinfo.value.status_code == 502


@patch("requests.request")
def test_unauthorized_raises_authentication_error(mock_request, client):
    mock_request.return_value = make_response(401, {"error": "invalid or expired token"})

    with pytest.raises(AuthenticationError) as excinfo:
        client.get_me()

    assert isinstance(excinfo.value, ApplicationError)
    assert "invalid or expired token" in str(excinfo.value)


@patch("requests.request")
def test_transport_failure_is_network_unreachable(mock_request, client, notifier):
    mock_request.side_effect = requests.ConnectionError("Connection refused")

    with pytest.raises(NetworkUnreachableError) as excinfo:
        client.get_properties()

    assert "Network unreachable" in str(excinfo.value)
    assert isinstance(excinfo.value.cause, requests.ConnectionError)
    notifier.assert_called_once()


@patch("requests.request")
def test_timeout_is_reported_as_network_unreachable(mock_request, client):
    mock_request.side_effect = requests.Timeout("read timed out")

    with pytest.raises(NetworkUnreachableError):
        client.get_appointments()


@patch("requests.request")
def test_notify_false_skips_notifier(mock_request, client, notifier):
    mock_request.return_value = make_response(401, {"error": "unauthorized"})

    with pytest.raises(AuthenticationError):
        client.get_me(notify=False)

    notifier.assert_not_called()


@patch("requests.request")
def test_notifier_runs_before_raise(mock_request, client):
    order = []
    client.notifier = lambda message: order.append(("notify", message))
    mock_request.return_value = make_response(500, {"error": "boom"})

    with pytest.raises(ApplicationError):
        try:
            client.get_properties()
        finally:
            order.append(("raised", None))

    assert order == [("notify", "boom"), ("raised", None)]


@patch("requests.request")
def test_success_with_non_json_body_is_invalid_response(mock_request, client):
    mock_request.return_value = make_response(200, raw=b"not json")

    with pytest.raises(InvalidResponseError) as excinfo:
        client.get_properties()

    assert excinfo.value.status_code == 200


@patch("requests.request")
def test_empty_success_body(mock_request, client):
    mock_request.return_value = make_response(204)

    envelope = client.delete_client("c1")

    assert mock_request.call_args.args == ("DELETE", "http://crm.test/api/clients/c1")
    assert envelope.status_code == 204
    assert envelope.data is None


@patch("requests.request")
def test_role_dashboard_paths(mock_request, client):
    mock_request.return_value = make_response(200, {"message": "Channel Partner dashboard"})

    envelope = client.get_role_dashboard("channel_partner")

    assert mock_request.call_args.args == ("GET", "http://crm.test/api/channel-partner/dashboard")
    assert envelope.message == "Channel Partner dashboard"


def test_role_dashboard_rejects_unknown_role(client):
    with pytest.raises(ValueError):
        client.get_role_dashboard("builder")


def test_default_notifier_is_silent():
    client = ApiGatewayClient("http://crm.test/api")
    with patch("requests.request", side_effect=requests.ConnectionError("down")):
        with pytest.raises(NetworkUnreachableError):
            client.get_properties()
