from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Dict, List
from enum import Enum


class ProjectType(str, Enum):
    APP = "app"
    GAME = "game"
    COMPONENT = "component"


class Framework(str, Enum):
    REACT_NATIVE = "react-native"
    EXPO = "expo"
    GAME = "game"


class Styling(str, Enum):
    STYLED_COMPONENTS = "styled-components"
    STYLESHEET = "stylesheet"
    NATIVEWIND = "nativewind"


class GenerationPhase(str, Enum):
    """Generation run phases"""
    PLANNING = "planning"
    EXECUTION = "execution"
    INTEGRATION = "integration"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationPhase.COMPLETE, GenerationPhase.ERROR)


class SpecKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class GenerationRequest(BaseModel):
    """Input to a generation run. Immutable once submitted."""
    description: str = Field(..., min_length=1)
    project_type: ProjectType = ProjectType.APP
    framework: Framework = Framework.EXPO
    features: Optional[List[str]] = None
    styling: Optional[Styling] = None

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)


class FileSpec(BaseModel):
    """One planned file; dependencies are loose path fragments used for ordering only"""
    path: str
    kind: SpecKind = SpecKind.FILE
    dependencies: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ProjectPlan(BaseModel):
    """AI-authored plan, produced once per run"""
    name: str
    description: str
    framework: str
    files: List[FileSpec] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    dev_dependencies: List[str] = Field(default_factory=list)
    scripts: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def file_specs(self) -> List[FileSpec]:
        return [spec for spec in self.files if spec.kind == SpecKind.FILE]


class GenerationProgress(BaseModel):
    """Observable run state, mutated in place by the orchestrator"""
    phase: GenerationPhase = GenerationPhase.PLANNING
    current_file: Optional[str] = None
    completed_files: List[str] = Field(default_factory=list)
    total_files: int = 0
    message: str = ""
    error: Optional[str] = None
    run_id: Optional[str] = None
    project_root: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    def snapshot(self) -> "GenerationProgress":
        return self.model_copy(deep=True)


class GenerationResult(BaseModel):
    project_root: str
    plan: ProjectPlan
    progress: GenerationProgress


class RunAccepted(BaseModel):
    run_id: str
    status: str = "accepted"
