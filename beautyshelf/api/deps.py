# beautyshelf/api/deps.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from beautyshelf.config import Settings
from beautyshelf.core.errors import Unauthenticated
from beautyshelf.core.security import decode_access_token
from beautyshelf.db.base import ProductRepository
from beautyshelf.db.factory import Backend
from beautyshelf.services.buckets import BucketCache
from beautyshelf.services.debug_log import PhotoDebugLog
from beautyshelf.services.kanban import KanbanService
from beautyshelf.services.photos import PhotoService
from beautyshelf.services.products import ProductService
from beautyshelf.services.suggestions import SuggestionService

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: str
    email: Optional[str]
    access_token: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> Backend:
    return request.app.state.backend


def get_debug_log(request: Request) -> PhotoDebugLog:
    return request.app.state.debug_log


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """
    Resolve the current user from the Authorization header (Bearer) or from
    the 'access_token' cookie. Raises Unauthenticated (401) otherwise.
    """
    token = credentials.credentials if credentials else request.cookies.get("access_token")
    if not token:
        raise Unauthenticated()
    claims = decode_access_token(settings, token)
    if not claims:
        raise Unauthenticated("Could not validate credentials")
    return CurrentUser(id=str(claims["sub"]), email=claims.get("email"), access_token=token)


def get_repository(user: CurrentUser = Depends(get_current_user),
                   backend: Backend = Depends(get_backend)) -> ProductRepository:
    return backend.products(user.access_token)


def get_photo_service(request: Request, backend: Backend = Depends(get_backend),
                      settings: Settings = Depends(get_settings)) -> PhotoService:
    cache: BucketCache = request.app.state.bucket_cache
    return PhotoService(
        backend.storage,
        cache,
        debug_log=request.app.state.debug_log,
        max_bytes=settings.MAX_UPLOAD_BYTES,
        default_bucket=settings.DEFAULT_BUCKET,
        backend_name=backend.name,
    )


def get_product_service(repo: ProductRepository = Depends(get_repository),
                        photos: PhotoService = Depends(get_photo_service)) -> ProductService:
    return ProductService(repo, photos)


def get_kanban_service(repo: ProductRepository = Depends(get_repository)) -> KanbanService:
    return KanbanService(repo)


def get_suggestion_service(request: Request, repo: ProductRepository = Depends(get_repository),
                           settings: Settings = Depends(get_settings)) -> SuggestionService:
    return SuggestionService(repo, settings, client_factory=getattr(request.app.state, "ai_client_factory", None))
