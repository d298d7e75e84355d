"""
Turn the model's plan data into a ProjectPlan.

Missing or malformed fields are defaulted rather than failing the run; only a
response that is not a mapping at all is rejected.
"""

import re
from typing import Any, Dict, List, Optional

from appforge.core.exceptions import InvalidPathError, PlanningFailureError
from appforge.core.logging_config import logger
from appforge.schemas.generation import FileSpec, GenerationRequest, ProjectPlan, SpecKind
from appforge.services.file_store.paths import check_reserved_names, normalize_path, validate_project_name


DEFAULT_PROJECT_NAME = "Generated Project"


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _project_name(value: Any) -> str:
    """A single path segment usable as a project name"""
    text = _text(value)
    if not text:
        return DEFAULT_PROJECT_NAME

    segments = [segment.strip() for segment in re.split(r"[\\/]+", text)]
    candidate = " - ".join(segment for segment in segments if segment and segment not in (".", ".."))
    try:
        name = validate_project_name(candidate)
    except InvalidPathError:
        logger.warning(f"[PlanParser] Unusable project name '{text}', using '{DEFAULT_PROJECT_NAME}'")
        return DEFAULT_PROJECT_NAME

    if name != text:
        logger.warning(f"[PlanParser] Project name '{text}' rewritten to '{name}'")
    return name


def _valid_file_path(path: str) -> bool:
    try:
        relative = normalize_path(path).lstrip("/")
        if relative:
            check_reserved_names(relative)
            return True
    except InvalidPathError as e:
        logger.warning(f"[PlanParser] Rejecting planned path '{path}': {e.message}")
        return False

    logger.warning(f"[PlanParser] Rejecting planned path '{path}': empty after normalization")
    return False


def _string_list(value: Any, field: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        # {"react": "19.0.0"} style maps; versions come from the version table
        return [str(key) for key in value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]

    logger.warning(f"[PlanParser] Ignoring malformed '{field}': {type(value).__name__}")
    return []


def _parse_file_spec(item: Any) -> Optional[FileSpec]:
    if isinstance(item, str):
        path = _text(item)
        return FileSpec(path=path) if path and _valid_file_path(path) else None

    if not isinstance(item, dict):
        return None

    path = _text(item.get("path"))
    if not path or not _valid_file_path(path):
        return None

    raw_kind = item.get("type") or item.get("kind") or SpecKind.FILE.value
    try:
        kind = SpecKind(str(raw_kind).lower())
    except ValueError:
        logger.warning(f"[PlanParser] Unknown kind '{raw_kind}' for {path}, treating as file")
        kind = SpecKind.FILE

    return FileSpec(
        path=path,
        kind=kind,
        dependencies=_string_list(item.get("dependencies"), "dependencies"),
    )


def _parse_files(value: Any) -> List[FileSpec]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"[PlanParser] 'files' is not a list ({type(value).__name__}), using no files")
        return []

    specs = []
    for index, item in enumerate(value):
        spec = _parse_file_spec(item)
        if spec is None:
            logger.warning(f"[PlanParser] Skipping file entry {index} without a usable path")
            continue
        specs.append(spec)
    return specs


def _parse_scripts(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        if value is not None:
            logger.warning("[PlanParser] 'scripts' is not a mapping, using no scripts")
        return {}
    return {str(name): str(command) for name, command in value.items() if command is not None}


def parse_plan(data: Any, request: GenerationRequest) -> ProjectPlan:
    """
    Build a ProjectPlan from raw plan data, defaulting missing fields from the
    request.

    Raises:
        PlanningFailureError: if data is not a mapping
    """
    if not isinstance(data, dict):
        raise PlanningFailureError(
            f"Failed to plan project structure: expected a JSON object, got {type(data).__name__}"
        )

    dev_dependencies = data.get("devDependencies", data.get("dev_dependencies"))

    plan = ProjectPlan(
        name=_project_name(data.get("name")),
        description=_text(data.get("description")) or request.description,
        framework=_text(data.get("framework")) or str(request.framework),
        files=_parse_files(data.get("files")),
        dependencies=_string_list(data.get("dependencies"), "dependencies"),
        dev_dependencies=_string_list(dev_dependencies, "devDependencies"),
        scripts=_parse_scripts(data.get("scripts")),
    )

    logger.info(f"[PlanParser] Plan '{plan.name}': {len(plan.files)} entries, {len(plan.dependencies)} dependencies")
    return plan
