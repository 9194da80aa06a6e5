from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class Envelope(BaseModel):
    success: bool
    value: Any = None
    error: str | None = None
    status: int

    @property
    def payload(self) -> dict:
        if self.success:
            return {"success": True, "value": self.value, "status": self.status}
        return {"success": False, "error": self.error, "status": self.status}


def create_success(value: Any, status: int = 200) -> Envelope:
    return Envelope(success=True, value=value, status=status)


def create_failure(error: str, status: int = 500) -> Envelope:
    return Envelope(success=False, error=error, status=status)


def envelope_response(envelope: Envelope) -> JSONResponse:
    """Render an envelope with the HTTP status mirroring ``envelope.status``."""
    return JSONResponse(status_code=envelope.status, content=envelope.payload)
