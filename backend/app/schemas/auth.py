from typing import Literal, List
from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import UserOut

OtpCode = Field(..., pattern=r"^\d{6}$", description="6位数字验证码")


class SignupRequest(BaseModel):
    """注册请求模型

    Attributes:
        name: 显示名称
        email: 登录邮箱
        password: 明文密码（8-72位，bcrypt 只处理前72字节）
        role: 仅允许自助注册为 learner 或 creator
        preferences: 感兴趣的分类ID列表
    """
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: Literal["learner", "creator"] = "learner"
    preferences: List[int] = Field(default_factory=list)


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = OtpCode


class EmailRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class LoginResponse(BaseModel):
    token: str
    user: UserOut


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = OtpCode
    new_password: str = Field(..., min_length=8, max_length=72)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=72)
    new_password: str = Field(..., min_length=8, max_length=72)
