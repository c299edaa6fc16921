import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.dependencies.db import get_db
from app.schemas.auth import TokenClaims
from app.services import token_service
from app.services.auth_service import is_token_blocked

logger = logging.getLogger(__name__)

# auto_error=False: 토큰이 없을 때 403을 직접 반환하기 위해
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> TokenClaims:
    """
    보호된 라우트 앞단의 인증 dependency
    - 토큰 없음: 403
    - 서명 불일치/만료: 401
    - (user_id, device_id, token) 조합이 차단 목록에 있으면: 401
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No token provided")

    token = credentials.credentials
    try:
        payload = token_service.verify_access_token(token)
    except token_service.TokenExpiredError:
        raise _unauthorized("Token has expired")
    except token_service.InvalidTokenError:
        raise _unauthorized("Invalid token")

    claims = TokenClaims(
        user_id=payload["user_id"],
        device_id=payload["device_id"],
        email=payload.get("email", ""),
    )
    if is_token_blocked(db, claims.user_id, claims.device_id, token):
        logger.warning(f"Revoked token used: user_id={claims.user_id}, device_id={claims.device_id}")
        raise _unauthorized("Token has been revoked")

    request.state.user = claims
    return claims
