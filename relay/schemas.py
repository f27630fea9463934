# relay/schemas.py
from typing import Any, Dict
from pydantic import BaseModel, Field


class CalculateResponse(BaseModel):
    processNumber: int
    # raw body returned by the compute service
    result: Dict[str, Any]
    processingTime: int = Field(ge=0)
    timestamp: str


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
