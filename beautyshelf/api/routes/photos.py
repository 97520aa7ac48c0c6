# beautyshelf/api/routes/photos.py
from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from beautyshelf.api.deps import CurrentUser, get_current_user, get_photo_service
from beautyshelf.api.schemas.photos import PhotoDeleteResult, UploadResult
from beautyshelf.services.photos import PhotoService

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.post("/", response_model=UploadResult)
async def upload_photo(file: UploadFile = File(...), user: CurrentUser = Depends(get_current_user),
                       service: PhotoService = Depends(get_photo_service)):
    """
    Upload a product photo. Expected failures (size, type, storage) come back
    as `success: false` with an error code rather than an HTTP error.
    """
    data = await file.read()
    return await run_in_threadpool(service.upload_photo, data, file.filename or "", file.content_type, user.id)


@router.delete("/", response_model=PhotoDeleteResult)
def delete_photo(url: str, user: CurrentUser = Depends(get_current_user),
                 service: PhotoService = Depends(get_photo_service)):
    return service.delete_photo(url, user.id)
