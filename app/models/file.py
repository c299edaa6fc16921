from sqlalchemy import Column, Integer, String, TIMESTAMP, func
from app.db.base import Base

class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    original_name = Column(String(255), nullable=False)  # 사용자가 올린 파일명
    file_name = Column(String(255), unique=True, nullable=False)  # 서버에서 생성한 저장 파일명
    extension = Column(String(32), nullable=False, default="")
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)  # bytes
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
