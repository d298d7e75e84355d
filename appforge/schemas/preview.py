from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


class PreviewConfig(BaseModel):
    project_root: str
    entry_file_path: str
    hot_reload_enabled: bool = True

    model_config = ConfigDict(frozen=True)


class PreviewStatus(BaseModel):
    is_active: bool = False
    project_root: Optional[str] = None
    entry_file_path: Optional[str] = None
    hot_reload_enabled: bool = False
    reload_count: int = 0


class PreviewValidation(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
