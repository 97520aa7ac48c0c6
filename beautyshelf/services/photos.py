"""
Photo upload/delete pipeline for product photos.

upload:  validate -> resolve bucket -> build key -> upload (no overwrite) -> public URL
delete:  resolve bucket -> derive key from URL -> remove; never fails the caller

Keys follow `{owner_id}/{epoch_millis}-{random}.{ext}`; existing objects in
storage use this layout, so it must not change.
"""
from __future__ import annotations
import logging
import re
import secrets
import string
import time
from typing import Optional, Tuple
from urllib.parse import urlparse

from beautyshelf.api.schemas.photos import (
    BucketReport,
    PermissionReport,
    PhotoDeleteResult,
    StorageDiagnostics,
    StorageSetupResult,
    StorageStatus,
    UploadErrorCode,
    UploadResult,
)
from beautyshelf.core.errors import (
    FileTooLarge,
    StorageProviderError,
    StorageUnavailable,
    Unauthenticated,
    UnsupportedType,
    ValidationFailed,
)
from beautyshelf.db.storage import StorageGateway
from beautyshelf.services.buckets import DIAGNOSTIC_VARIANTS, BucketCache, BucketResolver, pick_bucket
from beautyshelf.services.debug_log import PhotoDebugLog

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024
ALLOWED_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif")
_MIME_EXT = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp", "image/gif": "gif"}
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_EXT_PATTERN = re.compile(r"[a-z0-9]{1,5}")


def validate_file(size: int, content_type: Optional[str], max_bytes: int = MAX_FILE_SIZE) -> None:
    """Raise FileTooLarge / UnsupportedType; return None for an acceptable file."""
    if size > max_bytes:
        raise FileTooLarge(
            f"File size must be less than {round(max_bytes / 1024 / 1024)}MB. "
            f"Current size: {round(size / 1024 / 1024)}MB"
        )
    if (content_type or "").lower() not in ALLOWED_TYPES:
        raise UnsupportedType(f"File type not supported. Allowed types: {', '.join(ALLOWED_TYPES)}")


def validate_photo_url(url: Optional[str], storage_base_url: str) -> Tuple[bool, Optional[str]]:
    if not url:
        return False, "Photo URL is empty or null"
    if not isinstance(url, str):
        return False, "Photo URL is not a string"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False, "Photo URL must be an absolute http(s) URL"
    storage_host = urlparse(storage_base_url).netloc
    if storage_host and parsed.netloc != storage_host:
        return False, f"Photo URL is not served by the storage provider ({storage_host})"
    return True, None


def file_extension(filename: str, content_type: Optional[str] = None) -> str:
    """
    Extension of the file's basename when it is short and alphanumeric;
    otherwise the one implied by `content_type`.
    """
    basename = re.split(r"[\\/]", filename or "")[-1]
    if "." in basename:
        ext = basename.rsplit(".", 1)[-1].lower()
        if _EXT_PATTERN.fullmatch(ext):
            return ext
    return _MIME_EXT.get((content_type or "").lower(), "jpg")


def build_object_key(owner_id: str, filename: str, content_type: Optional[str] = None,
                     now_ms: Optional[int] = None, token: Optional[str] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if token is None:
        token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(11))
    return f"{owner_id}/{now_ms}-{token}.{file_extension(filename, content_type)}"


def object_key_from_url(url: str, owner_id: str) -> str:
    name = urlparse(url).path.rstrip("/").split("/")[-1]
    return f"{owner_id}/{name}"


def classify_upload_error(error: StorageProviderError) -> UploadErrorCode:
    """
    Structured status/code first; message substrings only as a fallback for
    providers that return bare messages.
    """
    code = (error.code or "").lower()
    if error.status == 409 or code in ("duplicate", "resourcealreadyexists"):
        return UploadErrorCode.DUPLICATE_OBJECT
    if error.status == 413 or code in ("entitytoolarge", "payloadtoolarge"):
        return UploadErrorCode.SIZE_EXCEEDED
    if error.status == 415 or code in ("invalidmimetype", "invalid_mime_type"):
        return UploadErrorCode.TYPE_REJECTED
    if error.status == 404 or code in ("nosuchbucket", "bucket_not_found"):
        return UploadErrorCode.BUCKET_UNAVAILABLE

    message = (error.message or "").lower()
    if "duplicate" in message or "already exists" in message:
        return UploadErrorCode.DUPLICATE_OBJECT
    if "size" in message:
        return UploadErrorCode.SIZE_EXCEEDED
    if "type" in message:
        return UploadErrorCode.TYPE_REJECTED
    if "bucket" in message:
        return UploadErrorCode.BUCKET_UNAVAILABLE
    return UploadErrorCode.UPLOAD_FAILED


_UPLOAD_MESSAGES = {
    UploadErrorCode.DUPLICATE_OBJECT: "File already exists. Please try again.",
    UploadErrorCode.SIZE_EXCEEDED: "File size exceeds limit",
    UploadErrorCode.TYPE_REJECTED: "File type not allowed",
}


class PhotoService:

    def __init__(self, storage: StorageGateway, cache: BucketCache, debug_log: Optional[PhotoDebugLog] = None,
                 max_bytes: int = MAX_FILE_SIZE, default_bucket: str = "product-photos", backend_name: str = ""):
        self.storage = storage
        self.cache = cache
        self.resolver = BucketResolver(storage)
        self.debug = debug_log or PhotoDebugLog(enabled=False)
        self.max_bytes = max_bytes
        self.default_bucket = default_bucket
        self.backend_name = backend_name

    def bucket(self) -> Optional[str]:
        """Cached bucket name; raises StorageUnavailable if buckets cannot be listed."""
        return self.cache.get_or_resolve(self.resolver)

    def check_photo_url(self, url: Optional[str]) -> Tuple[bool, Optional[str]]:
        return validate_photo_url(url, self.storage.public_base_url)

    def upload_photo(self, data: bytes, filename: str, content_type: Optional[str], owner_id: str) -> UploadResult:
        if not owner_id:
            raise Unauthenticated("Photo upload requires an authenticated owner")

        try:
            validate_file(len(data), content_type, self.max_bytes)
        except ValidationFailed as e:
            self.debug.log(owner_id, "validate", {"filename": filename, "size": len(data), "type": content_type}, False, e.message)
            return UploadResult(success=False, error=e.message, code=UploadErrorCode(e.kind))
        self.debug.log(owner_id, "validate", {"filename": filename, "size": len(data), "type": content_type})

        try:
            bucket = self.bucket()
        except StorageUnavailable as e:
            self.debug.log(owner_id, "resolve_bucket", None, False, e.message)
            return UploadResult(success=False, error=e.message, code=UploadErrorCode.STORAGE_UNAVAILABLE)
        if not bucket:
            self.debug.log(owner_id, "resolve_bucket", None, False, "not found")
            return UploadResult(
                success=False,
                error="Storage bucket not found. Please check your storage configuration.",
                code=UploadErrorCode.STORAGE_UNAVAILABLE,
            )
        self.debug.log(owner_id, "resolve_bucket", {"bucket": bucket})

        key = build_object_key(owner_id, filename or "upload", content_type)
        metadata = {"user_id": owner_id, "original_name": filename or ""}
        logger.info("Uploading to bucket: %s, file: %s", bucket, key)
        try:
            self.storage.upload(bucket, key, data, (content_type or "").lower(), metadata)
        except StorageProviderError as e:
            code = classify_upload_error(e)
            logger.error("Upload error (%s): %s", code.value, e.message)
            self.debug.log(owner_id, "upload", {"bucket": bucket, "key": key}, False, e.message)
            if code == UploadErrorCode.BUCKET_UNAVAILABLE:
                message = f"Storage bucket '{bucket}' not accessible. Please check your storage configuration."
            else:
                message = _UPLOAD_MESSAGES.get(code, f"Upload failed: {e.message}")
            return UploadResult(success=False, error=message, code=code)
        self.debug.log(owner_id, "upload", {"bucket": bucket, "key": key})

        try:
            url = self.storage.get_public_url(bucket, key)
        except StorageProviderError as e:
            logger.error("Public URL lookup failed for %s: %s", key, e.message)
            url = None
        if not url:
            self.debug.log(owner_id, "public_url", {"key": key}, False, "no url")
            return UploadResult(success=False, error="Failed to generate public URL",
                                code=UploadErrorCode.URL_GENERATION_FAILED)
        self.debug.log(owner_id, "public_url", {"url": url})
        logger.info("Upload successful: %s", url)
        return UploadResult(success=True, url=url, file_name=key)

    def delete_photo(self, url: Optional[str], owner_id: str) -> PhotoDeleteResult:
        """
        Best-effort removal of a stored photo. The result is always successful;
        `removed` and `detail` say what actually happened.
        """
        if not url:
            return PhotoDeleteResult(detail="no photo")
        try:
            bucket = self.bucket()
            if not bucket:
                logger.warning("Cannot delete photo: bucket not found")
                return PhotoDeleteResult(detail="bucket not found")
            key = object_key_from_url(url, owner_id)
            removed = self.storage.remove(bucket, [key])
        except (StorageUnavailable, StorageProviderError) as e:
            logger.warning("Failed to delete photo from storage: %s", e)
            self.debug.log(owner_id, "delete", {"url": url}, False, str(e))
            return PhotoDeleteResult(detail=f"not removed: {e}")
        except Exception as e:
            logger.warning("Photo deletion failed", exc_info=True)
            return PhotoDeleteResult(detail=f"not removed: {e}")
        if not removed:
            self.debug.log(owner_id, "delete", {"bucket": bucket, "key": key}, False, "object not found")
            return PhotoDeleteResult(detail=f"object not found: {key}")
        self.debug.log(owner_id, "delete", {"bucket": bucket, "key": key})
        return PhotoDeleteResult(removed=True, detail=key)

    def _bucket_among(self, names) -> Optional[str]:
        # resolves from an existing listing instead of asking storage again
        return self.cache.get_or_pick(lambda: pick_bucket(names, self.resolver.variants))

    def check_storage_status(self) -> StorageStatus:
        try:
            names = self.resolver.list_buckets()
        except StorageUnavailable:
            return StorageStatus(
                available=False,
                error="Unable to access storage service. Check your storage configuration.",
            )
        bucket = self._bucket_among(names)
        if not bucket:
            return StorageStatus(
                available=False,
                error=(
                    f"No suitable storage bucket found. Available buckets: {', '.join(names) or 'none'}. "
                    f"Please create a bucket named '{self.default_bucket}'."
                ),
            )
        try:
            self.storage.list_objects(bucket, "", limit=1)
        except StorageProviderError as e:
            return StorageStatus(
                available=False,
                bucket_name=bucket,
                error=f"Storage bucket '{bucket}' found but permissions not configured correctly: {e.message}",
            )
        return StorageStatus(available=True, bucket_name=bucket)

    def ensure_bucket(self) -> StorageSetupResult:
        created = True
        try:
            self.storage.create_bucket(
                self.default_bucket,
                public=True,
                file_size_limit=self.max_bytes,
                allowed_mime_types=list(ALLOWED_TYPES),
            )
        except StorageProviderError as e:
            if e.status == 409 or "already exists" in (e.message or "").lower():
                created = False
            else:
                logger.error("Bucket creation failed: %s", e.message)
                return StorageSetupResult(success=False, error=e.message)
        self.cache.invalidate()
        return StorageSetupResult(success=True, bucket_name=self.default_bucket, created=created)

    def diagnose(self, owner_id: str) -> StorageDiagnostics:
        if not owner_id:
            raise Unauthenticated()
        buckets = BucketReport()
        permissions = PermissionReport()
        try:
            buckets.available_buckets = self.resolver.list_buckets()
            buckets.can_list_buckets = True
        except StorageUnavailable as e:
            buckets.error = e.message

        if buckets.can_list_buckets:
            buckets.variations = [v for v in DIAGNOSTIC_VARIANTS if v in buckets.available_buckets]
            buckets.target_bucket = self._bucket_among(buckets.available_buckets)

        target = buckets.target_bucket
        if target:
            try:
                self.storage.list_objects(target, "", limit=1)
                permissions.can_read = True
            except StorageProviderError as e:
                permissions.errors.append(f"Read error: {e.message}")

            check_key = f"{owner_id}/test-{int(time.time() * 1000)}.txt"
            try:
                self.storage.upload(target, check_key, b"test", "text/plain")
                permissions.can_write = True
            except StorageProviderError as e:
                permissions.errors.append(f"Write error: {e.message}")

            if permissions.can_write:
                try:
                    self.storage.remove(target, [check_key])
                    permissions.can_delete = True
                except StorageProviderError as e:
                    permissions.errors.append(f"Delete error: {e.message}")

        return StorageDiagnostics(
            user_id=owner_id,
            backend=self.backend_name,
            public_base_url=self.storage.public_base_url,
            buckets=buckets,
            permissions=permissions,
        )
