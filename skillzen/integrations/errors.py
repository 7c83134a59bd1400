from __future__ import annotations

from typing import Any


class UpstreamServiceError(RuntimeError):
    """A third-party call failed; carries the status the API should answer with."""

    def __init__(self, message: str, *, status_code: int = 502, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": str(self)}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ResumeVendorError(UpstreamServiceError):
    pass
