"""
Session lifecycle: the only owner of the session token and the identity snapshot.

States:
    INITIALIZING   app just started, persisted token not validated yet
    ANONYMOUS      no token, no identity
    AUTHENTICATED  token and identity both held

Every operation that may apply a network result takes a generation number
before it leaves for the network. The result is applied only if no other
operation started in between, so a logout issued while a login is still in
flight is never overwritten by that login's late success.
"""

import json
import logging
import threading
from typing import Any, Callable, List, Mapping, Optional

from infrastructure.api.envelope import Envelope
from infrastructure.api.errors import ApiError, AuthenticationError, InvalidResponseError
from infrastructure.api.gateway_client import ApiGatewayClient
from use_cases.session_models import Identity, IdentityDecodeError, SessionState, identity_from_payload

log = logging.getLogger(__name__)

TOKEN_KEY = "enfor_token"
USER_KEY = "enfor_user"

Listener = Callable[[SessionState], None]


class SessionStore:
    def __init__(self, client: ApiGatewayClient, storage: Any):
        self._client = client
        self._storage = storage
        self._lock = threading.RLock()
        self._generation = 0
        self._state: SessionState = "INITIALIZING"
        self._identity: Optional[Identity] = None
        self._token: Optional[str] = storage.get(TOKEN_KEY) or None
        self._snapshot: Optional[Identity] = self._read_snapshot()
        self._listeners: List[Listener] = []
        client.bind_token_provider(self.get_token)

    # --- Derived reads ---
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def snapshot_identity(self) -> Optional[Identity]:
        """Last persisted identity; for painting before startup resolves, never for access decisions."""
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    def get_token(self) -> Optional[str]:
        return self._token

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Operations ---
    def initialize(self) -> SessionState:
        """
        One-time startup check. Exchanges a persisted token for a fresh identity.
        Any failure, including a rejected token, resolves to ANONYMOUS with storage cleared.
        """
        with self._lock:
            if self._state != "INITIALIZING":
                return self._state
            generation = self._next_generation()
            token = self._token

        if not token:
            # Storage is left alone so the cookie can still be recovered from localStorage
            with self._lock:
                if generation == self._generation:
                    self._identity = None
                    self._snapshot = None
                    self._state = "ANONYMOUS"
            self._emit()
            return self._state

        try:
            envelope = self._client.get_me(notify=False)
            identity = identity_from_payload(envelope.data)
        except (ApiError, IdentityDecodeError) as e:
            log.info(f"Stored session could not be restored ({type(e).__name__}: {e})")
            with self._lock:
                if generation == self._generation:
                    self._clear_local()
                    self._state = "ANONYMOUS"
            self._emit()
            return self._state

        with self._lock:
            if generation != self._generation:
                log.info("Discarding stale session restore result")
                return self._state
            self._hold(identity)
        log.info(f"✅ Session restored for user {identity.id}")
        self._emit()
        return self._state

    def login(self, email: str, password: str) -> None:
        generation = self._next_generation()
        envelope = self._client.login(email, password, notify=False)
        if self._apply_auth_result(envelope, generation):
            log.info(f"✅ Logged in as user {self._identity.id if self._identity else '?'}")

    def register(self, fields: Mapping[str, Any]) -> None:
        generation = self._next_generation()
        envelope = self._client.signup(fields, notify=False)
        if self._apply_auth_result(envelope, generation):
            log.info(f"✅ Registered and logged in as user {self._identity.id if self._identity else '?'}")

    def logout(self) -> None:
        with self._lock:
            # Bumped even when nothing is held so an in-flight login is discarded
            self._next_generation()
            if self._token is None and self._identity is None:
                if self._state == "INITIALIZING":
                    self._state = "ANONYMOUS"
                return

        try:
            self._client.logout(notify=False)
        except ApiError as e:
            log.warning(f"⚠️ Backend logout failed, clearing local session anyway: {e}")
        finally:
            with self._lock:
                self._clear_local()
                self._state = "ANONYMOUS"
            log.info("Logged out")
            self._emit()

    def refresh_identity(self) -> Optional[Identity]:
        """
        Re-reads /auth/me and replaces the held identity with the live one.
        A rejected token ends the session; other errors leave state unchanged.
        """
        with self._lock:
            if self._identity is None:
                return None
            generation = self._next_generation()

        try:
            envelope = self._client.get_me()
        except AuthenticationError:
            with self._lock:
                if generation == self._generation:
                    self._clear_local()
                    self._state = "ANONYMOUS"
            self._emit()
            raise

        identity = identity_from_payload(envelope.data)
        with self._lock:
            if generation != self._generation:
                return self._identity
            self._hold(identity)
        self._emit()
        return identity

    # --- Internals ---
    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _apply_auth_result(self, envelope: Envelope, generation: int) -> bool:
        data = envelope.data if isinstance(envelope.data, Mapping) else {}
        token = data.get("token")
        if not token:
            raise InvalidResponseError("Authentication response did not include a session token", envelope.status_code)
        identity = identity_from_payload(data.get("user"))

        with self._lock:
            if generation != self._generation:
                log.info("Discarding stale authentication result")
                return False
            self._token = str(token)
            self._storage.set(TOKEN_KEY, self._token)
            self._hold(identity)
        self._emit()
        return True

    def _hold(self, identity: Identity) -> None:
        self._identity = identity
        self._snapshot = identity
        self._storage.set(USER_KEY, json.dumps(identity.to_snapshot()))
        self._state = "AUTHENTICATED"

    def _clear_local(self) -> None:
        self._token = None
        self._identity = None
        self._snapshot = None
        self._storage.remove(TOKEN_KEY)
        self._storage.remove(USER_KEY)

    def _read_snapshot(self) -> Optional[Identity]:
        raw = self._storage.get(USER_KEY)
        if not raw:
            return None
        try:
            return identity_from_payload(json.loads(raw))
        except (ValueError, TypeError) as e:
            log.warning(f"Ignoring unreadable identity snapshot: {e}")
            return None

    def _emit(self) -> None:
        state = self._state
        for listener in list(self._listeners):
            listener(state)
