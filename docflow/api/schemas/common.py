"""Common schemas for the DocFlow API."""

from typing import Dict, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    code: Optional[str] = None
    errors: Optional[Dict[str, str]] = None
