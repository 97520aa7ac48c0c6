"""
Object storage gateways.

`SupabaseStorage` wraps the Supabase Storage API; `LocalStorage` keeps one
directory per bucket under a root folder and serves objects through the app's
`/storage` static mount (object metadata is kept outside that tree). Both raise StorageProviderError with whatever
structured status/code information is available.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from supabase import Client

from beautyshelf.core.errors import StorageProviderError

logger = logging.getLogger(__name__)


class StorageGateway(Protocol):
    public_base_url: str

    def list_buckets(self) -> List[str]: ...

    def list_objects(self, bucket: str, prefix: str = "", limit: int = 100) -> List[str]: ...

    def upload(self, bucket: str, key: str, data: bytes, content_type: str,
               metadata: Optional[Dict[str, str]] = None) -> None: ...

    def remove(self, bucket: str, keys: List[str]) -> List[str]: ...

    def get_public_url(self, bucket: str, key: str) -> Optional[str]: ...

    def create_bucket(self, bucket: str, public: bool = True, file_size_limit: Optional[int] = None,
                      allowed_mime_types: Optional[List[str]] = None) -> None: ...


def _provider_error(e: Exception) -> StorageProviderError:
    message = getattr(e, "message", None) or str(e)
    code = getattr(e, "code", None)
    status = getattr(e, "status", None) or getattr(e, "status_code", None)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    return StorageProviderError(str(message), code=str(code) if code else None, status=status)


class SupabaseStorage:

    def __init__(self, client: Client, public_base_url: str):
        self.client = client
        self.public_base_url = public_base_url.rstrip("/")

    def list_buckets(self) -> List[str]:
        try:
            buckets = self.client.storage.list_buckets()
        except Exception as e:
            raise _provider_error(e) from e
        return [b.name if hasattr(b, "name") else b.get("name") for b in buckets or []]

    def list_objects(self, bucket: str, prefix: str = "", limit: int = 100) -> List[str]:
        try:
            items = self.client.storage.from_(bucket).list(prefix, {"limit": limit})
        except Exception as e:
            raise _provider_error(e) from e
        return [item.get("name") for item in items or [] if item.get("name")]

    def upload(self, bucket: str, key: str, data: bytes, content_type: str,
               metadata: Optional[Dict[str, str]] = None) -> None:
        options = {"content-type": content_type, "cache-control": "3600", "upsert": "false"}
        if metadata:
            options["metadata"] = metadata
        try:
            self.client.storage.from_(bucket).upload(key, data, options)
        except Exception as e:
            raise _provider_error(e) from e

    def remove(self, bucket: str, keys: List[str]) -> List[str]:
        """Keys that existed and were deleted; Supabase skips missing ones."""
        try:
            deleted = self.client.storage.from_(bucket).remove(keys)
        except Exception as e:
            raise _provider_error(e) from e
        return [item["name"] for item in deleted or [] if isinstance(item, dict) and item.get("name")]

    def get_public_url(self, bucket: str, key: str) -> Optional[str]:
        try:
            url = self.client.storage.from_(bucket).get_public_url(key)
        except Exception as e:
            raise _provider_error(e) from e
        return url.rstrip("?") if url else None

    def create_bucket(self, bucket: str, public: bool = True, file_size_limit: Optional[int] = None,
                      allowed_mime_types: Optional[List[str]] = None) -> None:
        options: Dict[str, Any] = {"public": public}
        if file_size_limit:
            options["file_size_limit"] = file_size_limit
        if allowed_mime_types:
            options["allowed_mime_types"] = allowed_mime_types
        try:
            self.client.storage.create_bucket(bucket, options=options)
        except Exception as e:
            raise _provider_error(e) from e


class LocalStorage:
    """
    Buckets are sub-directories of `root`. Objects keep their key as a
    relative path. Metadata is written as `<key>.meta.json` under `meta_root`,
    which sits outside the served `root` tree.
    """

    META_SUFFIX = ".meta.json"

    def __init__(self, root: Path, public_base_url: str, mount_path: str = "/storage",
                 meta_root: Optional[Path] = None):
        self.root = Path(root)
        self.meta_root = Path(meta_root) if meta_root else self.root.with_name(self.root.name + "-meta")
        self.public_base_url = public_base_url.rstrip("/")
        self.mount_path = "/" + mount_path.strip("/")

    def _bucket_dir(self, bucket: str) -> Path:
        path = self.root / bucket
        if not path.is_dir():
            raise StorageProviderError("Bucket not found", code="NoSuchBucket", status=404)
        return path

    def _object_path(self, bucket: str, key: str) -> Path:
        base = self._bucket_dir(bucket).resolve()
        path = (base / key).resolve()
        if base not in path.parents:
            raise StorageProviderError(f"Invalid object key: {key}", code="InvalidKey", status=400)
        return path

    def _meta_path(self, bucket: str, key: str) -> Path:
        return self.meta_root / bucket / (key + self.META_SUFFIX)


    def list_buckets(self) -> List[str]:
        try:
            if not self.root.exists():
                return []
            return sorted(p.name for p in self.root.iterdir() if p.is_dir())
        except OSError as e:
            raise StorageProviderError(str(e)) from e

    def list_objects(self, bucket: str, prefix: str = "", limit: int = 100) -> List[str]:
        base = self._bucket_dir(bucket)
        folder = base / prefix if prefix else base
        if not folder.is_dir():
            return []
        return sorted(p.name for p in folder.iterdir())[:limit]

    def upload(self, bucket: str, key: str, data: bytes, content_type: str,
               metadata: Optional[Dict[str, str]] = None) -> None:
        path = self._object_path(bucket, key)
        if path.exists():
            raise StorageProviderError("The resource already exists", code="Duplicate", status=409)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            meta_path = self._meta_path(bucket, key)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            meta = {"content_type": content_type, **(metadata or {})}
            meta_path.write_text(json.dumps(meta), encoding="utf-8")
        except OSError as e:
            raise StorageProviderError(f"Upload failed: {e}") from e

    def remove(self, bucket: str, keys: List[str]) -> List[str]:
        # a missing object is skipped, not an error (same as Supabase)
        removed = []
        for key in keys:
            path = self._object_path(bucket, key)
            try:
                if path.is_file():
                    path.unlink()
                    removed.append(key)
                self._meta_path(bucket, key).unlink(missing_ok=True)
            except OSError as e:
                raise StorageProviderError(f"Remove failed: {e}") from e
        return removed

    def get_public_url(self, bucket: str, key: str) -> Optional[str]:
        return f"{self.public_base_url}{self.mount_path}/{bucket}/{key}"

    def create_bucket(self, bucket: str, public: bool = True, file_size_limit: Optional[int] = None,
                      allowed_mime_types: Optional[List[str]] = None) -> None:
        path = self.root / bucket
        if path.exists():
            raise StorageProviderError("The resource already exists", code="Duplicate", status=409)
        try:
            path.mkdir(parents=True)
        except OSError as e:
            raise StorageProviderError(str(e)) from e
