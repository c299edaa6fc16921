from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse as FileDownload
from sqlalchemy.orm import Session

from app.dependencies.auth import get_current_user
from app.dependencies.db import get_db
from app.dependencies.storage import get_blob_store
from app.schemas.common import ApiResponse, success
from app.schemas.file import FileResponse, FileListResponse
from app.services import file_service
from app.services.blob_store import BlobStore

router = APIRouter(
    dependencies=[Depends(get_current_user)]
)


@router.post("/upload", response_model=ApiResponse[FileResponse], summary="파일 업로드")
def upload_file(
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    """
    multipart 필드 "file"로 파일 업로드 (최대 MAX_UPLOAD_SIZE bytes)
    """
    return success(file_service.upload_file(db, store, file))


# /list가 /{file_id}보다 먼저 등록되어야 함
@router.get("/list", response_model=ApiResponse[FileListResponse], summary="파일 목록 (페이지네이션)")
def list_files(
    list_size: Optional[str] = None,
    page: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return success(file_service.list_files(db, list_size, page))


@router.get("/{file_id}", response_model=ApiResponse[FileResponse], summary="파일 정보 조회")
def get_file(file_id: int, db: Session = Depends(get_db)):
    """
    없는 id면 data가 null인 success 응답
    """
    db_file = file_service.get_file(db, file_id)
    if db_file is None:
        return success(None, "File not found")
    return success(db_file)


@router.put("/update/{file_id}", response_model=ApiResponse, summary="파일 교체")
def update_file(
    file_id: int,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    file_service.update_file(db, store, file_id, file)
    return success("File updated successfully")


@router.delete("/delete/{file_id}", response_model=ApiResponse, summary="파일 삭제")
def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    file_service.delete_file(db, store, file_id)
    return success("File deleted successfully")


@router.get("/download/{file_id}", summary="파일 다운로드")
def download_file(
    file_id: int,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    path, db_file = file_service.get_download(db, store, file_id)
    return FileDownload(path, media_type=db_file.mime_type, filename=db_file.original_name)
