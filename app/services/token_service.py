import uuid
import jwt
from datetime import datetime, timedelta, timezone

from app.core.config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """토큰 검증 실패 공통 예외"""


class InvalidTokenError(TokenError):
    pass


class TokenExpiredError(TokenError):
    pass


def _claims(user_id: int, device_id: str, email: str) -> dict:
    return {"sub": str(user_id), "device_id": device_id, "email": email}


def _encode(data: dict, token_type: str, secret: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
        # 같은 초에 발급된 토큰끼리도 문자열이 달라지도록
        "jti": uuid.uuid4().hex,
    })
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, token_type: str, secret: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError(f"{token_type} token has expired")
    except jwt.PyJWTError:
        raise InvalidTokenError(f"Invalid {token_type} token")

    if payload.get("type") != token_type or not payload.get("sub") or not payload.get("device_id"):
        raise InvalidTokenError("Invalid token payload")
    try:
        payload["user_id"] = int(payload["sub"])
    except ValueError:
        raise InvalidTokenError("Invalid token payload")
    return payload


def create_access_token(user_id: int, device_id: str, email: str) -> str:
    return _encode(
        _claims(user_id, device_id, email),
        ACCESS,
        settings.JWT_SECRET_KEY,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user_id: int, device_id: str, email: str) -> str:
    return _encode(
        _claims(user_id, device_id, email),
        REFRESH,
        settings.JWT_REFRESH_SECRET_KEY,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def issue_tokens(user_id: int, device_id: str, email: str) -> tuple[str, str]:
    """같은 claim으로 access/refresh token 쌍을 발급 (저장은 호출하는 쪽에서)"""
    return (
        create_access_token(user_id, device_id, email),
        create_refresh_token(user_id, device_id, email),
    )


def verify_access_token(token: str) -> dict:
    return _decode(token, ACCESS, settings.JWT_SECRET_KEY)


def verify_refresh_token(token: str) -> dict:
    return _decode(token, REFRESH, settings.JWT_REFRESH_SECRET_KEY)


def rotate_access_token(refresh_token: str) -> tuple[str, dict]:
    """
    refresh token을 검증하고 같은 claim으로 새 access token만 발급합니다.
    refresh token 자체는 교체하지 않습니다.
    """
    payload = verify_refresh_token(refresh_token)
    access_token = create_access_token(payload["user_id"], payload["device_id"], payload.get("email", ""))
    return access_token, payload
