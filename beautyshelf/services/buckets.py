"""
Find the storage bucket that holds product photos.

Operators create the bucket by hand, so its exact name drifts
("product-photos", "product_images", ...). The resolver accepts any of the
known spellings and falls back to a keyword match; the cache keeps the answer
until someone invalidates it (e.g. after creating a bucket).
"""
from __future__ import annotations
import logging
import threading
from typing import Callable, Iterable, List, Optional, Sequence

from beautyshelf.core.errors import StorageProviderError, StorageUnavailable
from beautyshelf.db.storage import StorageGateway

logger = logging.getLogger(__name__)

BUCKET_VARIANTS: Sequence[str] = (
    "product-photos",
    "product_photos",
    "productphotos",
    "product-images",
    "product_images",
)
FALLBACK_KEYWORDS: Sequence[str] = ("product", "photo", "image")
DIAGNOSTIC_VARIANTS: Sequence[str] = tuple(BUCKET_VARIANTS) + ("products", "photos", "images")


def pick_bucket(names: Iterable[str], variants: Sequence[str] = BUCKET_VARIANTS,
                keywords: Sequence[str] = FALLBACK_KEYWORDS) -> Optional[str]:
    """
    First known variant present in `names`; else the first name (listing
    order) containing one of `keywords`, case-insensitively; else None.
    """
    names = list(names)
    for variant in variants:
        if variant in names:
            return variant
    for name in names:
        lowered = name.lower()
        if any(k in lowered for k in keywords):
            return name
    return None


class BucketResolver:

    def __init__(self, storage: StorageGateway, variants: Sequence[str] = BUCKET_VARIANTS):
        self.storage = storage
        self.variants = tuple(variants)

    def list_buckets(self) -> List[str]:
        try:
            return self.storage.list_buckets()
        except StorageProviderError as e:
            logger.error("Cannot list buckets: %s", e.message)
            raise StorageUnavailable(f"Unable to access storage service: {e.message}") from e

    def resolve(self) -> Optional[str]:
        """Return the photo bucket name, or None when no bucket qualifies."""
        names = self.list_buckets()
        logger.debug("Available buckets: %s", names)
        found = pick_bucket(names, self.variants)
        if found:
            logger.info("Detected photo bucket: %s", found)
        else:
            logger.warning("No photo bucket among %s", names or "none")
        return found

    def find_variations(self) -> List[str]:
        names = set(self.list_buckets())
        return [v for v in DIAGNOSTIC_VARIANTS if v in names]


class BucketCache:
    """
    Process-wide memo of the resolved bucket name. Only a found name is
    cached; a miss is retried on the next call.
    """

    def __init__(self):
        self._name: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def cached(self) -> Optional[str]:
        return self._name

    def get_or_pick(self, pick: Callable[[], Optional[str]]) -> Optional[str]:
        """Cached name, or the result of `pick()` (remembered only if found)."""
        with self._lock:
            if self._name is None:
                self._name = pick()
            return self._name

    def get_or_resolve(self, resolver: BucketResolver) -> Optional[str]:
        return self.get_or_pick(resolver.resolve)

    def invalidate(self) -> None:
        with self._lock:
            self._name = None
