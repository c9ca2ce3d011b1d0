from typing import Any, Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope used by the staff-facing endpoints."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
