# beautyshelf/api/routes/storage.py
from fastapi import APIRouter, Depends

from beautyshelf.api.deps import CurrentUser, get_current_user, get_photo_service
from beautyshelf.api.schemas.photos import StorageDiagnostics, StorageSetupResult, StorageStatus
from beautyshelf.services.photos import PhotoService

router = APIRouter(prefix="/api/storage", tags=["storage"])


@router.get("/status", response_model=StorageStatus)
def storage_status(user: CurrentUser = Depends(get_current_user),
                   service: PhotoService = Depends(get_photo_service)):
    return service.check_storage_status()


@router.post("/refresh", response_model=StorageStatus)
def refresh_bucket(user: CurrentUser = Depends(get_current_user),
                   service: PhotoService = Depends(get_photo_service)):
    """Forget the detected bucket and detect it again."""
    service.cache.invalidate()
    return service.check_storage_status()


@router.post("/setup", response_model=StorageSetupResult)
def setup_bucket(user: CurrentUser = Depends(get_current_user),
                 service: PhotoService = Depends(get_photo_service)):
    return service.ensure_bucket()


@router.get("/diagnostics", response_model=StorageDiagnostics)
def diagnostics(user: CurrentUser = Depends(get_current_user),
                service: PhotoService = Depends(get_photo_service)):
    return service.diagnose(user.id)
