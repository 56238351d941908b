"""Control-plane wire schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiEnvelope(BaseModel):
    """Standard control-plane response envelope."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    result: Any = None
    errors: list[Any] = Field(default_factory=list)
    messages: list[Any] = Field(default_factory=list)


class DatabaseInfo(BaseModel):
    """Result of a database create call.

    The identifier comes back as `uuid` on current API versions and as
    `database_id` on older ones.
    """

    model_config = ConfigDict(extra="ignore")

    uuid: str | None = None
    database_id: str | None = None
    name: str | None = None

    @property
    def identifier(self) -> str | None:
        return self.uuid or self.database_id


class ManifestEntry(BaseModel):
    hash: str
    size: int


class UploadSession(BaseModel):
    """Short-lived asset upload session.

    `buckets` partitions the digests the control plane does not yet hold;
    anything not listed is already stored.
    """

    model_config = ConfigDict(extra="ignore")

    jwt: str
    buckets: list[list[str]] = Field(default_factory=list)


class UploadReceipt(BaseModel):
    model_config = ConfigDict(extra="ignore")

    jwt: str | None = None


class ServiceDeployment(BaseModel):
    """Everything submitted in one deploy call (script, bindings, static document)."""

    script_name: str
    script_content: str
    document: str
    database_id: str
    bucket_name: str
    secret: str = Field(..., repr=False)
