"""Build, teardown and lifecycle pipeline."""

from .build import BuildOrchestrator, deployed_url, resource_name
from .lifecycle import TRANSITIONS, ProjectLifecycle, can_transition
from .migrations import split_statements
from .teardown import TeardownCoordinator

__all__ = [
    "TRANSITIONS",
    "BuildOrchestrator",
    "ProjectLifecycle",
    "TeardownCoordinator",
    "can_transition",
    "deployed_url",
    "resource_name",
    "split_statements",
]
