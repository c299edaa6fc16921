from fastapi import APIRouter, Depends, Body, status
from sqlalchemy.orm import Session

from app.dependencies.auth import get_current_user
from app.dependencies.db import get_db
from app.schemas.auth import (
    SignupRequest, SignupResponse, SigninRequest, TokenPairResponse,
    NewTokenRequest, AccessTokenResponse, LogoutRequest, UserInfoResponse, TokenClaims
)
from app.schemas.common import ApiResponse, success
from app.services import auth_service

router = APIRouter()


@router.post(
    "/signup",
    response_model=ApiResponse[SignupResponse],
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
def signup(
    req: SignupRequest = Body(...),
    db: Session = Depends(get_db)
):
    """
    이메일/비밀번호로 회원가입 (비밀번호는 bcrypt 해시로 저장)
    """
    user = auth_service.signup(db, req.email, req.password)
    return success(user, "User registered successfully")


@router.post("/signin", response_model=ApiResponse[TokenPairResponse], summary="로그인")
def signin(
    req: SigninRequest = Body(...),
    db: Session = Depends(get_db)
):
    """
    로그인
    - 기기(deviceId)별 세션에 access/refresh token 저장
    - 다른 기기의 세션에는 영향 없음
    """
    tokens = auth_service.signin(db, req.email, req.password, req.device_id)
    return success(tokens, "Sign-in successful")


@router.post("/new_token", response_model=ApiResponse[AccessTokenResponse], summary="access token 재발급")
def new_token(
    req: NewTokenRequest = Body(...),
    db: Session = Depends(get_db)
):
    token = auth_service.refresh(db, req.refresh_token)
    return success(token, "Token refreshed successfully")


@router.post("/logout", response_model=ApiResponse, summary="로그아웃 (기기별 토큰 차단)")
def logout(
    req: LogoutRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_user)
):
    auth_service.logout(db, claims, req.device_id if req else None)
    return success(None, "Logout successful")


@router.get("/info", response_model=ApiResponse[UserInfoResponse], summary="내 정보")
def info(
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_user)
):
    return success(auth_service.info(db, claims))
