from appforge.schemas.generation import (
    ProjectType,
    Framework,
    Styling,
    GenerationPhase,
    SpecKind,
    GenerationRequest,
    FileSpec,
    ProjectPlan,
    GenerationProgress,
    GenerationResult,
    RunAccepted,
)
from appforge.schemas.storage import (
    EntryKind,
    ProjectEntry,
    ProjectListResponse,
    FileListResponse,
    FileContentResponse,
    FileWriteRequest,
    FileWriteResponse,
)
from appforge.schemas.preview import PreviewConfig, PreviewStatus, PreviewValidation

__all__ = [
    "ProjectType",
    "Framework",
    "Styling",
    "GenerationPhase",
    "SpecKind",
    "GenerationRequest",
    "FileSpec",
    "ProjectPlan",
    "GenerationProgress",
    "GenerationResult",
    "RunAccepted",
    "EntryKind",
    "ProjectEntry",
    "ProjectListResponse",
    "FileListResponse",
    "FileContentResponse",
    "FileWriteRequest",
    "FileWriteResponse",
    "PreviewConfig",
    "PreviewStatus",
    "PreviewValidation",
]
