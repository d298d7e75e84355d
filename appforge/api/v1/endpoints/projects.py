"""
Project endpoints

- POST   /projects                        start a generation run (202)
- GET    /projects                        list project names
- DELETE /projects/{name}                 delete a project (204, idempotent)
- GET    /projects/{name}/files           list entries
- GET    /projects/{name}/files/{path}    read a file
- PUT    /projects/{name}/files/{path}    write a file and notify the preview
- GET    /projects/{name}/validation      check the project can be previewed
"""

from fastapi import APIRouter, Depends, Response, status

from appforge.api.deps import get_services
from appforge.core.logging_config import logger
from appforge.core.services import AppServices
from appforge.schemas.generation import GenerationRequest, RunAccepted
from appforge.schemas.preview import PreviewValidation
from appforge.schemas.storage import (
    FileContentResponse,
    FileListResponse,
    FileWriteRequest,
    FileWriteResponse,
    ProjectListResponse,
)
from appforge.services.file_store.paths import join_path


router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("", response_model=RunAccepted, status_code=status.HTTP_202_ACCEPTED)
async def create_project(
    request: GenerationRequest,
    services: AppServices = Depends(get_services),
):
    """Start generating a project; follow progress at /runs/{run_id}/stream"""
    run_id = services.start_generation(request)
    return RunAccepted(run_id=run_id)


@router.get("", response_model=ProjectListResponse)
async def list_projects(services: AppServices = Depends(get_services)):
    projects = await services.file_store.list_projects()
    return ProjectListResponse(projects=projects, total=len(projects))


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(name: str, services: AppServices = Depends(get_services)):
    await services.file_store.delete_project(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{name}/files", response_model=FileListResponse)
async def list_files(name: str, services: AppServices = Depends(get_services)):
    root = services.file_store.project_root(name)
    entries = await services.file_store.list_files(root)
    return FileListResponse(project=name, entries=entries)


@router.get("/{name}/files/{path:path}", response_model=FileContentResponse)
async def read_file(name: str, path: str, services: AppServices = Depends(get_services)):
    root = services.file_store.project_root(name)
    content = await services.file_store.read_file(root, path)
    return FileContentResponse(project=name, path=path, content=content)


@router.put("/{name}/files/{path:path}", response_model=FileWriteResponse)
async def write_file(
    name: str,
    path: str,
    body: FileWriteRequest,
    services: AppServices = Depends(get_services),
):
    root = services.file_store.project_root(name)
    await services.file_store.write_file(root, path, body.content)
    notified = services.preview.notify_file_changed(join_path(root, path), body.content)

    logger.info(f"[Projects] Updated {name}/{path} (preview notified: {notified})")
    return FileWriteResponse(project=name, path=path, preview_notified=notified)


@router.get("/{name}/validation", response_model=PreviewValidation)
async def validate_project(name: str, services: AppServices = Depends(get_services)):
    root = services.file_store.project_root(name)
    await services.file_store.list_files(root)  # 404 for unknown projects
    return await services.preview.validate_project(root)
