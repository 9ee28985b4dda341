from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.dependency_injection import get_auth_service, get_current_user, get_db
from app.models.user import User
from app.schemas.auth import (ChangePasswordRequest, EmailRequest, LoginRequest, LoginResponse,
                              ResetPasswordRequest, SignupRequest, VerifyOtpRequest)
from app.schemas.response import StandardResponse
from app.schemas.user import UserOut
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("/signup", response_model=StandardResponse[None], status_code=status.HTTP_201_CREATED)
def signup(
        payload: SignupRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    """
    注册本地账号，向邮箱发送5分钟有效的验证码
    """
    auth_service.signup(db, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, message="OTP sent to email")


@router.post("/verify-otp", response_model=StandardResponse[None])
def verify_otp(
        payload: VerifyOtpRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.verify_signup_otp(db, payload.email, payload.otp)
    return StandardResponse(message="Account verified successfully")


@router.post("/resend-otp", response_model=StandardResponse[None])
def resend_otp(
        payload: EmailRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.resend_signup_otp(db, payload.email)
    return StandardResponse(message="OTP sent to email")


@router.post("/login", response_model=StandardResponse[LoginResponse])
def login(
        payload: LoginRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    token, user = auth_service.login(db, payload.email, payload.password)
    return StandardResponse(
        message="Login successful",
        data=LoginResponse(token=token, user=UserOut.model_validate(user))
    )


@router.post("/forgot-password", response_model=StandardResponse[None])
def forgot_password(
        payload: EmailRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    """
    无论邮箱是否存在都返回同样的结果
    """
    auth_service.forgot_password(db, payload.email)
    return StandardResponse(message="If the account exists, a reset code has been sent")


@router.post("/reset-password", response_model=StandardResponse[None])
def reset_password(
        payload: ResetPasswordRequest,
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.reset_password(db, payload.email, payload.otp, payload.new_password)
    return StandardResponse(message="Password updated")


@router.post("/change-password", response_model=StandardResponse[None])
def change_password(
        payload: ChangePasswordRequest,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return StandardResponse(message="Password updated")
