"""
Wires the configured backend ("file" or "supabase") to the repository and
storage gateway interfaces.
"""
from __future__ import annotations
import logging
from typing import Optional

from supabase import Client, create_client

from beautyshelf.config import Settings
from beautyshelf.database import FileBackedDB
from beautyshelf.db.base import ProductRepository
from beautyshelf.db.file_repository import FileProductRepository
from beautyshelf.db.storage import LocalStorage, StorageGateway, SupabaseStorage
from beautyshelf.db.supabase_repository import SupabaseProductRepository

logger = logging.getLogger(__name__)


class Backend:
    """Hands out repositories and the storage gateway for one settings object."""

    name = "base"

    def products(self, access_token: Optional[str] = None) -> ProductRepository:
        raise NotImplementedError

    @property
    def storage(self) -> StorageGateway:
        raise NotImplementedError

    def sign_out(self, access_token: str) -> None:
        """Revoke the session server-side, where the backend supports it."""


class FileBackend(Backend):
    name = "file"

    def __init__(self, settings: Settings):
        self.db = FileBackedDB(settings.DATA_DIR, tables={"products": settings.PRODUCTS_FILE})
        self._repository = FileProductRepository(self.db)
        # object metadata lives with the data files, away from the public /storage mount
        self._storage = LocalStorage(settings.STORAGE_DIR, settings.PUBLIC_BASE_URL,
                                     meta_root=settings.DATA_DIR / "object-meta")

    def products(self, access_token: Optional[str] = None) -> ProductRepository:
        return self._repository

    @property
    def storage(self) -> StorageGateway:
        return self._storage


class SupabaseBackend(Backend):
    name = "supabase"

    def __init__(self, settings: Settings):
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise ValueError(
                "Supabase credentials required. Set SUPABASE_URL and SUPABASE_KEY "
                "environment variables or switch DATA_BACKEND to 'file'."
            )
        self.url = settings.SUPABASE_URL
        self.key = settings.SUPABASE_KEY
        self.client: Client = create_client(self.url, self.key)
        self._storage = SupabaseStorage(self.client, self.url)

    def products(self, access_token: Optional[str] = None) -> ProductRepository:
        # one client per request so the user's token never leaks across requests
        client = create_client(self.url, self.key)
        if access_token:
            client.postgrest.auth(access_token)
        return SupabaseProductRepository(client)

    @property
    def storage(self) -> StorageGateway:
        return self._storage

    def sign_out(self, access_token: str) -> None:
        try:
            self.client.auth.admin.sign_out(access_token)
        except Exception as e:
            # the session expires on its own; logging out locally must still succeed
            logger.warning("Supabase sign-out failed: %s", e)


def build_backend(settings: Settings) -> Backend:
    kind = (settings.DATA_BACKEND or "file").strip().lower()
    if kind == "supabase":
        return SupabaseBackend(settings)
    if kind != "file":
        raise ValueError(f"Unknown DATA_BACKEND: {settings.DATA_BACKEND!r}")
    return FileBackend(settings)
