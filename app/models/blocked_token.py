from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from app.db.base import Base

class BlockedToken(Base):
    __tablename__ = "blocked_token"
    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_blocked_token_user_device"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    device_id = Column(String(255), nullable=False)
    access_token = Column(String(512), nullable=True)  # 로그아웃 시점의 access token
    blocked_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
