"""Centralized role-based access control for dashboard sections."""

import logging
from typing import Dict, FrozenSet, Optional

from use_cases.session_models import Identity

log = logging.getLogger(__name__)

VIEW_PROPERTIES = "VIEW_PROPERTIES"
CREATE_PROPERTY = "CREATE_PROPERTY"
MANAGE_CLIENTS = "MANAGE_CLIENTS"
MANAGE_APPOINTMENTS = "MANAGE_APPOINTMENTS"
VIEW_ROLE_DASHBOARD = "VIEW_ROLE_DASHBOARD"
VIEW_ADMIN = "VIEW_ADMIN"

_AGENT_ACTIONS = frozenset({
    VIEW_PROPERTIES, CREATE_PROPERTY, MANAGE_CLIENTS, MANAGE_APPOINTMENTS, VIEW_ROLE_DASHBOARD,
})

PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "broker": _AGENT_ACTIONS,
    "channel_partner": _AGENT_ACTIONS,
    "admin": _AGENT_ACTIONS | {VIEW_ADMIN},
}


def enforce(identity: Optional[Identity], action: str) -> bool:
    """
    Evaluates if the identity is authorized to perform the action.
    Returns True if authorized, False otherwise.
    """
    authorized = identity is not None and action in PERMISSIONS.get(identity.role, frozenset())
    if not authorized:
        log.warning(
            f"RBAC denied: action={action} user={identity.id if identity else None} "
            f"role={identity.role if identity else None}"
        )
    return authorized
