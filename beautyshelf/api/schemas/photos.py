from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class UploadErrorCode(str, Enum):
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_TYPE = "unsupported_type"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    DUPLICATE_OBJECT = "duplicate_object"
    SIZE_EXCEEDED = "size_exceeded"
    TYPE_REJECTED = "type_rejected"
    BUCKET_UNAVAILABLE = "bucket_unavailable"
    UPLOAD_FAILED = "upload_failed"
    URL_GENERATION_FAILED = "url_generation_failed"


class UploadResult(BaseModel):
    success: bool
    url: Optional[str] = None
    file_name: Optional[str] = None
    error: Optional[str] = None
    code: Optional[UploadErrorCode] = None


class PhotoDeleteResult(BaseModel):
    # always True: photo cleanup never fails the caller's operation
    success: bool = True
    removed: bool = False
    detail: Optional[str] = None


class StorageStatus(BaseModel):
    available: bool
    bucket_name: Optional[str] = None
    error: Optional[str] = None


class StorageSetupResult(BaseModel):
    success: bool
    bucket_name: Optional[str] = None
    created: bool = False
    error: Optional[str] = None


class BucketReport(BaseModel):
    can_list_buckets: bool = False
    available_buckets: List[str] = Field(default_factory=list)
    target_bucket: Optional[str] = None
    variations: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class PermissionReport(BaseModel):
    can_read: bool = False
    can_write: bool = False
    can_delete: bool = False
    errors: List[str] = Field(default_factory=list)


class StorageDiagnostics(BaseModel):
    user_id: str
    backend: str
    public_base_url: str
    buckets: BucketReport
    permissions: PermissionReport
