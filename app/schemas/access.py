"""Pydantic schemas for session and client identity endpoints."""

from pydantic import BaseModel, Field


class ClientIPResponse(BaseModel):
    ip: str = Field(..., description="Client address as seen by the server.")


class AdminStatusResponse(BaseModel):
    subject_id: str = Field(..., description="Authenticated subject id.")
    is_admin: bool = Field(..., description="Whether the subject holds an administrator record.")
