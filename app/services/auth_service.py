import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.db.upsert import upsert
from app.models.blocked_token import BlockedToken
from app.schemas.auth import (
    SignupResponse, TokenPairResponse, AccessTokenResponse, UserInfoResponse, TokenClaims
)
from app.services import token_service
from app.services.user_service import (
    create_user, get_user_by_email, get_user_by_id, get_session, save_session_tokens, verify_password
)

logger = logging.getLogger(__name__)


def signup(db: Session, email: str, password: str) -> SignupResponse:
    if get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

    user = create_user(db, email=email, password=password)
    logger.info(f"User registered: id={user.id}")
    return SignupResponse(id=user.id, email=user.email)


def signin(db: Session, email: str, password: str, device_id: str) -> TokenPairResponse:
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email")
    if not verify_password(password, user.password):
        logger.info(f"Sign-in failed (wrong password): user_id={user.id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")

    access_token, refresh_token = token_service.issue_tokens(user.id, device_id, user.email)
    save_session_tokens(db, user, device_id, access_token, refresh_token)
    db.commit()

    logger.info(f"Sign-in successful: user_id={user.id}, device_id={device_id}")
    return TokenPairResponse(access_token=access_token, refresh_token=refresh_token)


def refresh(db: Session, refresh_token: str | None) -> AccessTokenResponse:
    """
    refresh token으로 access token만 재발급
    - 서명/만료 검증 후, 해당 사용자/기기 세션에 저장된 refresh token과 일치하는지 확인
    - refresh token은 다음 로그인 전까지 계속 사용할 수 있음
    """
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token is missing")

    try:
        access_token, payload = token_service.rotate_access_token(refresh_token)
    except token_service.TokenExpiredError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token has expired")
    except token_service.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user_id, device_id = payload["user_id"], payload["device_id"]
    user = get_user_by_id(db, user_id)
    session = get_session(db, user_id, device_id)
    if not user or not session or session.refresh_token != refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    session.access_token = access_token
    user.access_token = access_token
    db.commit()
    return AccessTokenResponse(access_token=access_token)


def block_token(db: Session, user_id: int, device_id: str, access_token: str | None):
    upsert(
        db,
        BlockedToken,
        values={
            "user_id": user_id,
            "device_id": device_id,
            "access_token": access_token,
            "blocked_at": func.now(),
        },
        conflict_columns=["user_id", "device_id"],
        update_columns=["access_token", "blocked_at"],
    )


def is_token_blocked(db: Session, user_id: int, device_id: str, access_token: str) -> bool:
    return db.query(BlockedToken.id).filter(
        BlockedToken.user_id == user_id,
        BlockedToken.device_id == device_id,
        BlockedToken.access_token == access_token,
    ).first() is not None


def logout(db: Session, claims: TokenClaims, device_id: str | None = None) -> None:
    """
    해당 기기의 현재 access token을 차단 목록에 기록 (기기당 1행, 재로그아웃 시 덮어씀)
    """
    user = get_user_by_id(db, claims.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")

    device_id = device_id or claims.device_id
    session = get_session(db, user.id, device_id)
    access_token = session.access_token if session else user.access_token

    block_token(db, user.id, device_id, access_token)
    db.commit()
    logger.info(f"Logout: user_id={user.id}, device_id={device_id}")


def info(db: Session, claims: TokenClaims) -> UserInfoResponse:
    user = get_user_by_id(db, claims.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")
    return UserInfoResponse(user_id=user.id)
