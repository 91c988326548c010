from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: int


class ErrorResponse(BaseModel):
    error: str
