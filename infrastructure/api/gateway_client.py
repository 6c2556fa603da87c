"""
Single exit point for every HTTP call to the CRM backend.

All views and the session store go through `ApiGatewayClient`; nothing else
in the application talks to the network. The client attaches the bearer token,
decodes the {message, data, error} envelope whatever the status code, and
reports failures through two distinct exception families:

* `NetworkUnreachableError` when the exchange itself failed,
* `ApplicationError` (`AuthenticationError` for 401) when the backend
  answered with a non-success status.

Every failure is also handed to the injected notifier before it is raised,
unless the caller passes `notify=False` for that request.
"""

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from infrastructure.api.envelope import Envelope
from infrastructure.api.errors import (
    ApiError,
    ApplicationError,
    AuthenticationError,
    InvalidResponseError,
    NetworkUnreachableError,
    failure_message,
)
from infrastructure.messaging.notifications import Notifier, null_notifier

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0

TokenProvider = Callable[[], Optional[str]]

ROLE_DASHBOARD_PATHS = {
    "broker": "/broker/dashboard",
    "channel_partner": "/channel-partner/dashboard",
    "admin": "/admin/dashboard",
}


class ApiGatewayClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        notifier: Optional[Notifier] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.notifier = notifier or null_notifier
        self._token_provider: TokenProvider = lambda: None

    def bind_token_provider(self, provider: TokenProvider) -> None:
        """Registers where the current session token is read from."""
        self._token_provider = provider

    def headers(self, extra: Optional[Mapping[str, str]] = None, multipart: bool = False) -> Dict[str, str]:
        h: Dict[str, str] = {}
        if not multipart:
            h["Content-Type"] = "application/json"
        if extra:
            h.update(extra)
        if multipart:
            # requests writes the multipart boundary itself
            h.pop("Content-Type", None)
        token = self._token_provider()
        if token:
            h["Authorization"] = f"Bearer {token}"
        return h

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, Any]] = None,
        notify: bool = True,
    ) -> Envelope:
        url = f"{self.base_url}{endpoint}"
        multipart = files is not None
        kwargs: Dict[str, Any] = {
            "headers": self.headers(headers, multipart=multipart),
            "timeout": self.timeout,
        }
        if multipart:
            kwargs["files"] = files
            if body is not None:
                kwargs["data"] = body
        elif body is not None:
            kwargs["data"] = json.dumps(body)

        try:
            try:
                resp = requests.request(method, url, **kwargs)
            except requests.RequestException as e:
                log.error(f"❌ Network error on {method} {endpoint}: {e}")
                raise NetworkUnreachableError(cause=e) from e
            return self._parse_response(resp, method, endpoint)
        except ApiError as e:
            if notify:
                self.notifier(str(e))
            raise

    def _parse_response(self, resp: requests.Response, method: str, endpoint: str) -> Envelope:
        status = resp.status_code
        ok = 200 <= status < 300
        envelope: Optional[Envelope] = None

        if not resp.content:
            envelope = Envelope(status_code=status)
        else:
            try:
                envelope = Envelope.from_json(resp.json(), status)
            except ValueError:
                if ok:
                    log.error(f"❌ {method} {endpoint} returned HTTP {status} with a non-JSON body")
                    raise InvalidResponseError(f"Malformed response from server (HTTP {status})", status)

        if ok:
            log.debug(f"{method} {endpoint} -> HTTP {status}")
            return envelope

        message = failure_message(envelope)
        log.warning(f"⚠️ {method} {endpoint} failed: HTTP {status} {message}")
        if status == 401:
            raise AuthenticationError(message, status, envelope)
        raise ApplicationError(message, status, envelope)

    # --- Auth ---
    def signup(self, fields: Mapping[str, Any], notify: bool = True) -> Envelope:
        return self.request("/auth/signup", method="POST", body=dict(fields), notify=notify)

    def login(self, email: str, password: str, notify: bool = True) -> Envelope:
        body = {"email": email, "password": password}
        return self.request("/auth/login", method="POST", body=body, notify=notify)

    def get_me(self, notify: bool = True) -> Envelope:
        return self.request("/auth/me", notify=notify)

    def logout(self, notify: bool = True) -> Envelope:
        return self.request("/auth/logout", method="POST", notify=notify)

    def refresh_token(self) -> Envelope:
        return self.request("/auth/refresh", method="POST")

    # --- Uploads ---
    def upload_profile_photo(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> Envelope:
        files = {"profile_photo": (filename, content, content_type)}
        return self.request("/upload/profile-photo", method="POST", files=files)

    # --- Properties ---
    def get_properties(self) -> Envelope:
        return self.request("/properties")

    def create_property(self, fields: Mapping[str, Any]) -> Envelope:
        return self.request("/properties", method="POST", body=dict(fields))

    # --- Clients ---
    def get_clients(self) -> Envelope:
        return self.request("/clients")

    def get_client(self, client_id: str) -> Envelope:
        return self.request(f"/clients/{client_id}")

    def create_client(self, fields: Mapping[str, Any]) -> Envelope:
        return self.request("/clients", method="POST", body=dict(fields))

    def update_client(self, client_id: str, fields: Mapping[str, Any]) -> Envelope:
        return self.request(f"/clients/{client_id}", method="PUT", body=dict(fields))

    def delete_client(self, client_id: str) -> Envelope:
        return self.request(f"/clients/{client_id}", method="DELETE")

    # --- Appointments ---
    def get_appointments(self) -> Envelope:
        return self.request("/appointments")

    def create_appointment(self, fields: Mapping[str, Any]) -> Envelope:
        return self.request("/appointments", method="POST", body=dict(fields))

    # --- Role dashboards ---
    def get_role_dashboard(self, role: str) -> Envelope:
        path = ROLE_DASHBOARD_PATHS.get(role)
        if path is None:
            raise ValueError(f"No dashboard for role: {role}")
        return self.request(path)
