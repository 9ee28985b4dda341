from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.user import UserRole


class UserSummary(BaseModel):
    """对外展示的用户摘要"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole


class UserOut(UserSummary):
    """当前登录用户的完整资料"""
    email: Optional[str] = None
    bio: Optional[str] = None
    is_verified: bool
    is_admin: bool
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    """PATCH /profile/me，只更新显式提供的字段"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value):
        # name 列非空，显式 null 按参数错误处理
        if value is None:
            raise ValueError("must not be null")
        return value


class ProfilePut(BaseModel):
    """PUT /profile，可同时替换分类偏好"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)
    preferences: Optional[List[int]] = None

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class RoleUpdate(BaseModel):
    role: UserRole
