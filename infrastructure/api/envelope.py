"""The {message, data, error} response shape returned by every backend endpoint."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Envelope:
    message: str = ""
    data: Any = None
    error: Optional[str] = None
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_json(cls, payload: Any, status_code: int) -> "Envelope":
        """
        Build an envelope from a decoded JSON body.
        Bodies that are not objects are kept as `data` so nothing is lost.
        """
        if not isinstance(payload, Mapping):
            return cls(message="", data=payload, error=None, status_code=status_code)

        message = payload.get("message")
        error = payload.get("error")
        return cls(
            message=str(message) if message is not None else "",
            data=payload.get("data"),
            error=str(error) if error else None,
            status_code=status_code,
        )
