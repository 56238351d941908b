"""Pipeline input and output schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

MessageRole = Literal["user", "assistant", "system"]


class ConversationMessage(BaseModel):
    """One turn of the project conversation."""

    role: MessageRole
    content: str
    created_at: datetime | None = None


class GeneratedArtifacts(BaseModel):
    """Output of one code generation run. Never persisted as a queryable entity."""

    script: str = Field(..., min_length=1, description="Service script (ES module)")
    document: str = Field(..., min_length=1, description="Static HTML document")
    migration: str = Field(..., min_length=1, description="DDL statements")


class BuildResult(BaseModel):
    deployed_url: str
    database_id: str
    script_name: str


class TeardownReport(BaseModel):
    """Outcome of a teardown run.

    `warnings` lists non-fatal failures (a script or database that could not
    be deleted, usually because it never existed or is already gone).
    """

    warnings: list[str] = Field(default_factory=list)
    deleted_artifacts: list[str] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.warnings
