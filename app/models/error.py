"""Error response models."""

from datetime import datetime

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned by the API for any failed request."""

    error: str
    detail: str
    timestamp: datetime
    request_id: str
    path: str | None = None
