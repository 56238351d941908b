"""Blob storage for generated artifacts.

Keys are slash-separated paths (`projects/<id>/worker.js`). Two backends:
an S3-compatible bucket (R2 in production) and a local directory for
development.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Protocol

import boto3

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError
from ..logging_config import get_logger

logger = get_logger(__name__)


def project_prefix(project_id: str) -> str:
    return f"projects/{project_id}/"


class ArtifactStore(Protocol):
    async def put(self, key: str, content: str) -> None: ...

    async def list(self, prefix: str) -> list[str]: ...

    async def delete(self, key: str) -> None: ...


class S3ArtifactStore:
    """S3-compatible store. boto3 is blocking, so calls run in a worker thread."""

    provider_type = "s3"

    def __init__(self, bucket: str, client: Any):
        if not bucket:
            raise ConfigurationError("artifact bucket is required for the s3 backend")
        self.bucket = bucket
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ArtifactStore":
        client = boto3.client(
            "s3",
            endpoint_url=settings.artifact_endpoint_url,
            aws_access_key_id=settings.artifact_access_key_id,
            aws_secret_access_key=settings.artifact_secret_access_key,
            region_name=settings.artifact_region,
        )
        return cls(settings.artifact_bucket, client)

    async def put(self, key: str, content: str) -> None:
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=content.encode("utf-8"),
        )

    async def list(self, prefix: str) -> list[str]:
        return await asyncio.to_thread(self._list_sync, prefix)

    def _list_sync(self, prefix: str) -> list[str]:
        keys: list[str] = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)


class LocalArtifactStore:
    """Directory-backed store for development."""

    provider_type = "local"

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)

    def _path(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Artifact key escapes storage root: {key}")
        return path

    async def put(self, key: str, content: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    async def list(self, prefix: str) -> list[str]:
        if not self.base_path.exists():
            return []
        keys = (
            path.relative_to(self.base_path).as_posix()
            for path in self.base_path.rglob("*")
            if path.is_file()
        )
        return sorted(key for key in keys if key.startswith(prefix))

    async def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def build_artifact_store(settings: Settings | None = None) -> ArtifactStore:
    settings = settings or get_settings()
    if settings.artifact_backend == "s3":
        logger.debug("artifact_store_selected", backend="s3", bucket=settings.artifact_bucket)
        return S3ArtifactStore.from_settings(settings)
    logger.debug("artifact_store_selected", backend="local", path=settings.artifact_local_path)
    return LocalArtifactStore(settings.artifact_local_path)
