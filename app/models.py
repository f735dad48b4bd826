from __future__ import annotations

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name of the user")


class UserResponse(BaseModel):
    name: str


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    users: int
