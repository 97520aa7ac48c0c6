# beautyshelf/api/routes/debug.py
from fastapi import APIRouter, Depends

from beautyshelf.api.deps import CurrentUser, get_current_user, get_debug_log
from beautyshelf.services.debug_log import PhotoDebugLog

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.get("/photo-log")
def photo_log(user: CurrentUser = Depends(get_current_user), log: PhotoDebugLog = Depends(get_debug_log)):
    """The caller's own photo pipeline trace; empty unless photo debugging is enabled."""
    return {"enabled": log.enabled, "entries": log.entries(user.id)}


@router.delete("/photo-log")
def clear_photo_log(user: CurrentUser = Depends(get_current_user), log: PhotoDebugLog = Depends(get_debug_log)):
    log.clear(user.id)
    return {"ok": True}
