import logging

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.models.file import File
from app.schemas.file import FileResponse, FileListResponse
from app.services.blob_store import BlobStore, BlobTooLargeError, get_extension, guess_mime_type
from app.utils.pagination import resolve_page_params, total_pages

logger = logging.getLogger(__name__)

FIELD_NAME = "file"


def _not_found(detail: str = "File not found") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _storage_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="File storage error")


def _store_upload(store: BlobStore, upload: UploadFile | None) -> tuple[str, int]:
    """ 업로드 파일을 새 이름으로 저장하고 (저장 파일명, 크기) 반환 """
    if upload is None or not upload.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file selected")

    file_name = store.generate_name(FIELD_NAME, upload.filename)
    try:
        size = store.save(upload.file, file_name)
    except BlobTooLargeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")
    except OSError:
        logger.exception(f"Failed to write blob: {file_name}")
        raise _storage_error()
    return file_name, size


def get_file_row(db: Session, file_id: int) -> File | None:
    return db.query(File).filter(File.id == file_id).first()


def upload_file(db: Session, store: BlobStore, upload: UploadFile | None) -> FileResponse:
    file_name, size = _store_upload(store, upload)

    db_file = File(
        original_name=upload.filename,
        file_name=file_name,
        extension=get_extension(upload.filename),
        mime_type=guess_mime_type(upload.filename, upload.content_type),
        size=size,
    )
    try:
        db.add(db_file)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        store.discard(file_name)
        raise
    db.refresh(db_file)

    logger.info(f"File uploaded: id={db_file.id}, file_name={file_name}, size={size}")
    return FileResponse.model_validate(db_file)


def get_file(db: Session, file_id: int) -> FileResponse | None:
    db_file = get_file_row(db, file_id)
    return FileResponse.model_validate(db_file) if db_file else None


def list_files(db: Session, list_size=None, page=None) -> FileListResponse:
    list_size, page = resolve_page_params(list_size, page)
    offset = (page - 1) * list_size

    total_rows = db.query(func.count(File.id)).scalar()
    files = db.query(File).order_by(File.id).limit(list_size).offset(offset).all()

    return FileListResponse(
        page=page,
        list_size=list_size,
        total_pages=total_pages(total_rows, list_size),
        total_rows=total_rows,
        files=[FileResponse.model_validate(f) for f in files],
    )


def update_file(db: Session, store: BlobStore, file_id: int, upload: UploadFile | None) -> None:
    """
    파일 교체
    1. 기존 원본이 없으면 아무것도 바꾸지 않고 실패
    2. 새 원본 저장 -> 메타데이터 갱신(commit) -> 기존 원본 삭제
    메타데이터 갱신이 실패하면 새 원본을 지우고 기존 상태 유지
    """
    db_file = get_file_row(db, file_id)
    if not db_file:
        raise _not_found()
    if upload is None or not upload.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file selected")

    old_file_name = db_file.file_name
    if not store.exists(old_file_name):
        logger.warning(f"Blob missing for file id={file_id}: {old_file_name}")
        raise _not_found("File does not exist")

    new_file_name, size = _store_upload(store, upload)

    db_file.file_name = new_file_name
    db_file.mime_type = guess_mime_type(upload.filename, upload.content_type)
    db_file.size = size
    db_file.extension = get_extension(upload.filename)
    db_file.updated_at = func.now()
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        store.discard(new_file_name)
        raise

    try:
        store.delete(old_file_name)
    except OSError:
        # 메타데이터는 이미 새 파일을 가리키므로 되돌리지 않음
        logger.exception(f"Failed to remove replaced blob: {old_file_name}")

    logger.info(f"File updated: id={file_id}, file_name={new_file_name}")


def delete_file(db: Session, store: BlobStore, file_id: int) -> None:
    """
    메타데이터 삭제를 트랜잭션 안에서 먼저 반영(flush)하고, 원본 삭제에 성공한 경우에만 commit
    원본이 이미 없으면 삭제하지 않고 404
    """
    db_file = get_file_row(db, file_id)
    if not db_file:
        raise _not_found()

    file_name = db_file.file_name
    if not store.exists(file_name):
        logger.warning(f"Blob missing for file id={file_id}: {file_name}")
        raise _not_found("File does not exist")

    db.delete(db_file)
    db.flush()
    try:
        store.delete(file_name)
    except OSError:
        db.rollback()
        logger.exception(f"Failed to remove blob: {file_name}")
        raise _storage_error()
    db.commit()

    logger.info(f"File deleted: id={file_id}")


def get_download(db: Session, store: BlobStore, file_id: int) -> tuple[str, File]:
    """ (원본 경로, 메타데이터) 반환 """
    db_file = get_file_row(db, file_id)
    if not db_file:
        raise _not_found()
    if not store.exists(db_file.file_name):
        raise _not_found("File does not exist")
    return store.path_for(db_file.file_name), db_file
