"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_authenticated_session
from .bootstrap import StartupResult, StartupStatus, run_startup
from .session_models import (
    ROLES,
    Identity,
    IdentityDecodeError,
    Role,
    SessionState,
    UnknownRoleError,
    identity_from_payload,
    is_admin,
    is_verified,
    parse_role,
)
from .session_store import SessionStore
from .validation import ValidationFeedback, parse_validation_error

__all__ = [
    "AuthFlowResult",
    "AuthFlowStatus",
    "Identity",
    "IdentityDecodeError",
    "ROLES",
    "Role",
    "SessionState",
    "SessionStore",
    "StartupResult",
    "StartupStatus",
    "UnknownRoleError",
    "ValidationFeedback",
    "ensure_authenticated_session",
    "identity_from_payload",
    "is_admin",
    "is_verified",
    "parse_role",
    "parse_validation_error",
    "run_startup",
]
