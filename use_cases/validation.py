"""Best-effort extraction of field-level messages from backend validation errors."""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

SIGNUP_FIELDS = (
    "first_name", "last_name", "email", "password", "date_of_birth", "firm_name",
    "role", "whatsapp_number", "alternative_number", "foreign_number", "address",
    "location", "city", "state", "postal_code",
)

TAG_MESSAGES = {
    "required": "This field is required",
    "email": "Please enter a valid email address",
    "min": "Value is too short",
    "max": "Value is too long",
    "oneof": "Invalid value selected",
    "gt": "Value is too small",
    "gte": "Value is too small",
    "uuid": "Invalid identifier",
    "datetime": "Invalid date or time",
}

_RAW_VALIDATOR = re.compile(r"Field validation for '(\w+)' failed on the '(\w+)' tag")
_FORMATTED = re.compile(r"^(\w+) (is required|must be .+|validation failed)$")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class ValidationFeedback:
    form_error: str
    field_errors: Dict[str, str] = field(default_factory=dict)


def to_field_name(name: str) -> str:
    """'WhatsappNumber' / 'Postal Code' / 'postal_code' -> 'postal_code'."""
    name = name.strip()
    if " " in name:
        return re.sub(r"\s+", "_", name).lower()
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _known(name: str) -> Optional[str]:
    candidate = to_field_name(name)
    return candidate if candidate in SIGNUP_FIELDS else None


def parse_validation_error(message: Optional[str]) -> ValidationFeedback:
    """
    Maps a backend error string onto form fields.
    The raw message always survives as the form-level error.
    """
    raw = (message or "").strip() or "Request failed"

    matches = list(_RAW_VALIDATOR.finditer(raw))
    if matches:
        # gin joins one line per failed field
        field_errors: Dict[str, str] = {}
        parts = []
        for m in matches:
            field_name = _known(m.group(1))
            tag = m.group(2)
            friendly = TAG_MESSAGES.get(tag, f"Validation failed: {tag}")
            if field_name and field_name not in field_errors:
                field_errors[field_name] = friendly
                parts.append(f"{m.group(1)} - {friendly}")
        if field_errors:
            return ValidationFeedback(
                form_error="Validation error: " + "; ".join(parts),
                field_errors=field_errors,
            )
        return ValidationFeedback(form_error=raw)

    m = _FORMATTED.match(raw)
    if m:
        field_name = _known(m.group(1))
        if field_name:
            return ValidationFeedback(form_error=raw, field_errors={field_name: f"{m.group(1)} {m.group(2)}"})

    if ":" in raw:
        head, _, tail = raw.partition(":")
        field_name = _known(head)
        if field_name and tail.strip():
            return ValidationFeedback(form_error=raw, field_errors={field_name: tail.strip()})

    return ValidationFeedback(form_error=raw)
