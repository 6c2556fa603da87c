"""Session DTOs shared across application layers."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, cast

Role = Literal["broker", "channel_partner", "admin"]
ROLES: Tuple[str, ...] = ("broker", "channel_partner", "admin")

SessionState = Literal["INITIALIZING", "ANONYMOUS", "AUTHENTICATED"]


class IdentityDecodeError(ValueError):
    """Backend user JSON could not be turned into an Identity."""
    pass


class UnknownRoleError(IdentityDecodeError):
    pass


def parse_role(value: Any) -> Role:
    if value not in ROLES:
        raise UnknownRoleError(f"Unknown role: {value!r}")
    return cast(Role, value)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    first_name: str
    last_name: str
    role: Role
    city: str = ""
    state: str = ""
    firm_name: Optional[str] = None
    is_verified: bool = False
    created_at: str = ""
    profile_image: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_snapshot(self) -> Dict[str, Any]:
        return asdict(self)


def identity_from_payload(payload: Any) -> Identity:
    """Decodes a user object as returned by /auth/login, /auth/signup and /auth/me."""
    if not isinstance(payload, Mapping):
        raise IdentityDecodeError("User payload is not an object")
    if not payload.get("id") or not payload.get("email"):
        raise IdentityDecodeError("User payload is missing id or email")

    return Identity(
        id=str(payload["id"]),
        email=str(payload["email"]),
        first_name=payload.get("first_name") or "",
        last_name=payload.get("last_name") or "",
        role=parse_role(payload.get("role")),
        city=payload.get("city") or "",
        state=payload.get("state") or "",
        firm_name=payload.get("firm_name") or None,
        is_verified=bool(payload.get("is_verified", False)),
        created_at=str(payload.get("created_at") or ""),
        profile_image=payload.get("profile_image") or None,
    )


def is_admin(identity: Identity) -> bool:
    return identity.role == "admin"


def is_verified(identity: Identity) -> bool:
    return identity.is_verified
