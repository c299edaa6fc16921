from sqlalchemy.orm import Session
from typing import Optional
from passlib.hash import bcrypt
from sqlalchemy.sql import func

from app.models.user import User
from app.models.user_session import UserSession
from app.db.upsert import upsert


def hash_password(password: str) -> str:
    """ bcrypt 해시 (해시마다 랜덤 salt) """
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.verify(password, password_hash)


def create_user(db: Session, *, email: str, password: str) -> User:
    db_user = User(email=email, password=hash_password(password))
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_session(db: Session, user_id: int, device_id: str) -> Optional[UserSession]:
    return db.query(UserSession).filter(
        UserSession.user_id == user_id,
        UserSession.device_id == device_id,
    ).first()


def save_session_tokens(db: Session, user: User, device_id: str, access_token: str, refresh_token: str):
    """ 기기별 세션에 새 토큰 쌍을 저장하고, users 테이블에도 최근 토큰으로 기록 (commit은 호출하는 쪽) """
    upsert(
        db,
        UserSession,
        values={
            "user_id": user.id,
            "device_id": device_id,
            "access_token": access_token,
            "refresh_token": refresh_token,
            "updated_at": func.now(),
        },
        conflict_columns=["user_id", "device_id"],
        update_columns=["access_token", "refresh_token", "updated_at"],
    )
    user.access_token = access_token
    user.refresh_token = refresh_token
