from pydantic import BaseModel
from typing import Optional


class ErrorDetail(BaseModel):
    """A single violated field/rule."""
    field: str
    location: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Envelope shared by every error response."""
    error: str
    message: str
    details: Optional[list[ErrorDetail]] = None
