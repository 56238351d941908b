"""Pydantic schemas shared across the pipeline."""

from .build import (
    BuildResult,
    ConversationMessage,
    GeneratedArtifacts,
    MessageRole,
    TeardownReport,
)
from .plan import AppPlan, PlanColumn, PlanDataModel, PlanPage, PlanTable
from .platform import (
    ApiEnvelope,
    DatabaseInfo,
    ManifestEntry,
    ServiceDeployment,
    UploadReceipt,
    UploadSession,
)

__all__ = [
    "ApiEnvelope",
    "AppPlan",
    "BuildResult",
    "ConversationMessage",
    "DatabaseInfo",
    "GeneratedArtifacts",
    "ManifestEntry",
    "MessageRole",
    "PlanColumn",
    "PlanDataModel",
    "PlanPage",
    "PlanTable",
    "ServiceDeployment",
    "TeardownReport",
    "UploadReceipt",
    "UploadSession",
]
