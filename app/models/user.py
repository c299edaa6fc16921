from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.db.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    # 가장 최근에 발급된 토큰 쌍 (기기 구분 없음). 기기별 토큰은 UserSession 참고
    access_token = Column(String(512), nullable=True)
    refresh_token = Column(String(512), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
