"""Plan and code generation adapter."""

from .generator import AppGenerator
from .llm import LLMFactory
from .parser import parse_artifacts, parse_plan, strip_code_fence

__all__ = [
    "AppGenerator",
    "LLMFactory",
    "parse_artifacts",
    "parse_plan",
    "strip_code_fence",
]
