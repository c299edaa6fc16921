from datetime import datetime
from typing import List, Optional

from app.schemas.common import CamelModel


class FileResponse(CamelModel):
    id: int
    original_name: str
    file_name: str
    extension: str
    mime_type: str
    size: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FileListResponse(CamelModel):
    page: int
    list_size: int
    total_pages: int
    total_rows: int
    files: List[FileResponse]
