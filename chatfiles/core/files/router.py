"""API for uploading, serving and deleting chat attachments."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from chatfiles.core.auth.dependencies import CurrentUser, FileRequester
from chatfiles.core.database import get_db
from chatfiles.core.files.schemas import FileDeleteResponse, FileResponse
from chatfiles.core.files.service import FileAccessService
from chatfiles.core.storage import ObjectStore, get_object_store
from chatfiles.shared.schemas import SuccessResponse

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("", response_model=SuccessResponse[FileResponse], status_code=status.HTTP_200_OK)
async def upload_file(
    request: Request,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Upload exactly one file (multipart). Returns the view-safe file record."""
    form = await request.form()
    uploads = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]

    service = FileAccessService(db, store)
    file = await service.upload(uploads, current_user.id)
    await db.commit()

    return SuccessResponse(data=FileResponse.from_file(file), message="File uploaded")


@router.get("/{filename}/download")
async def download_file(
    filename: str,
    requester: FileRequester,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Redirect to a short-lived URL that downloads the file under its original name."""
    service = FileAccessService(db, store)
    url = await service.download_url(requester.id, filename)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/{filename}/view")
async def view_file(
    filename: str,
    requester: FileRequester,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Redirect to a short-lived URL for inline preview (images and PDF only)."""
    service = FileAccessService(db, store)
    url = await service.view_url(requester.id, filename)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.delete("/{file_id}", response_model=SuccessResponse[FileDeleteResponse])
async def delete_file(
    file_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Delete a file. Only its owner may do this."""
    service = FileAccessService(db, store)
    result = await service.delete(current_user.id, file_id)
    await db.commit()

    return SuccessResponse(
        data=FileDeleteResponse(id=file_id, store_deleted=result.deleted),
        message="File deleted",
    )
