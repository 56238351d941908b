"""Request and response schemas for the route layer."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    name: str | None = None


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    status: str
    deployed_url: str | None = None
    database_id: str | None = None
    worker_name: str | None = None
    last_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BuildResponse(BaseModel):
    success: bool = True
    deployed_url: str


class FileList(BaseModel):
    files: list[str]


class DeleteResponse(BaseModel):
    success: bool = True
    warnings: list[str] = Field(default_factory=list)


class MessageCreate(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str = Field(..., min_length=1)


class MessageRead(BaseModel):
    role: str
    content: str
    created_at: datetime | None = None
