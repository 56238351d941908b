"""Parsers for raw model output.

Both parsers are all-or-nothing: they return a fully validated object or raise
GenerationError. Partial artifact sets never leave this module.
"""

import json
import re

from pydantic import ValidationError

from ..exceptions import GenerationError
from ..logging_config import get_logger
from ..schemas import AppPlan, GeneratedArtifacts

logger = get_logger(__name__)

# file name in the model output -> GeneratedArtifacts field
ARTIFACT_FILES = {
    "worker.js": "script",
    "index.html": "document",
    "migration.sql": "migration",
}

_FENCE_PATTERN = re.compile(r"^```[^\n]*\n(.*?)\n?```$", re.DOTALL)
_FILE_MARKER_PATTERN = re.compile(r"^[ \t]*---FILE:\s*(\S+?)\s*---[ \t]*$", re.MULTILINE)


def strip_code_fence(text: str) -> str:
    """Remove one surrounding markdown code fence, if present."""
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    return match.group(1).strip() if match else stripped


def _load_json_object(body: str, raw: str) -> dict:
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        # Allow a sentence of prose around the object, nothing more
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            raise GenerationError("Plan output contains no JSON object", raw) from None
        try:
            data = json.loads(body[start : end + 1])
        except json.JSONDecodeError as e:
            raise GenerationError(f"Plan output is not valid JSON: {e}", raw) from e

    if not isinstance(data, dict):
        raise GenerationError("Plan output is not a JSON object", raw)
    return data


def parse_plan(text: str) -> AppPlan:
    """Parse the plan step's output into an AppPlan."""
    body = strip_code_fence(text)
    if not body:
        raise GenerationError("Plan output is empty", text)

    data = _load_json_object(body, text)
    try:
        return AppPlan.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise GenerationError(
            f"Plan is missing or has invalid fields: {', '.join(fields)}", text
        ) from e


def parse_artifacts(text: str) -> GeneratedArtifacts:
    """Split the code step's output into its three named files."""
    markers = list(_FILE_MARKER_PATTERN.finditer(text))
    if not markers:
        raise GenerationError("Code output contains no ---FILE:name--- blocks", text)

    found: dict[str, str] = {}
    for index, marker in enumerate(markers):
        name = marker.group(1)
        end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        content = strip_code_fence(text[marker.end() : end])

        field = ARTIFACT_FILES.get(name)
        if field is None:
            logger.warning("generated_file_ignored", file_name=name)
            continue
        if field in found:
            raise GenerationError(f"Code output contains {name} more than once", text)
        if not content:
            raise GenerationError(f"Code output block {name} is empty", text)
        found[field] = content

    missing = [name for name, field in ARTIFACT_FILES.items() if field not in found]
    if missing:
        raise GenerationError(f"Code output is missing: {', '.join(missing)}", text)
    return GeneratedArtifacts(**found)
