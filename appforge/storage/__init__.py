"""Artifact and conversation storage."""

from .artifacts import (
    ArtifactStore,
    LocalArtifactStore,
    S3ArtifactStore,
    build_artifact_store,
    project_prefix,
)
from .conversation import ConversationStore

__all__ = [
    "ArtifactStore",
    "ConversationStore",
    "LocalArtifactStore",
    "S3ArtifactStore",
    "build_artifact_store",
    "project_prefix",
]
