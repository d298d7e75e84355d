from fastapi import APIRouter, Depends, Response, status

from appforge.api.deps import get_services
from appforge.core.services import AppServices
from appforge.schemas.preview import PreviewConfig, PreviewStatus
from appforge.schemas.storage import FileWriteRequest, FileWriteResponse


router = APIRouter(prefix="/preview", tags=["Preview"])


@router.get("", response_model=PreviewStatus)
async def preview_status(services: AppServices = Depends(get_services)):
    return services.preview.status()


@router.post("", response_model=PreviewStatus)
async def start_preview(config: PreviewConfig, services: AppServices = Depends(get_services)):
    return await services.preview.start_preview(config)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def stop_preview(services: AppServices = Depends(get_services)):
    await services.preview.stop_preview()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/files/{path:path}", response_model=FileWriteResponse)
async def update_preview_file(
    path: str,
    body: FileWriteRequest,
    services: AppServices = Depends(get_services),
):
    """Write into the previewed project"""
    notified = await services.preview.update_file(path, body.content)
    root = services.preview.active.project_root
    return FileWriteResponse(project=root, path=path, preview_notified=notified)
