from functools import lru_cache

from app.core.config import settings
from app.services.blob_store import BlobStore


@lru_cache
def get_blob_store() -> BlobStore:
    return BlobStore(settings.UPLOAD_DIR, settings.MAX_UPLOAD_SIZE)
