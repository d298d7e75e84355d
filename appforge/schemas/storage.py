from pydantic import BaseModel, ConfigDict
from typing import List
from enum import Enum


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class ProjectEntry(BaseModel):
    """One file or directory under a project root"""
    name: str
    path: str
    kind: EntryKind
    size: int = 0
    modified_at: float = 0.0

    model_config = ConfigDict(frozen=True)

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE


class ProjectListResponse(BaseModel):
    projects: List[str]
    total: int


class FileListResponse(BaseModel):
    project: str
    entries: List[ProjectEntry]


class FileContentResponse(BaseModel):
    project: str
    path: str
    content: str


class FileWriteRequest(BaseModel):
    content: str


class FileWriteResponse(BaseModel):
    project: str
    path: str
    preview_notified: bool = False
