# carebook/schemas/common/common.py
from pydantic import BaseModel
from typing import Any, Dict, Optional


class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[Any] = None
    error: str
    code: Optional[str] = None
    context: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
