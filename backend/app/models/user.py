import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Enum
from sqlalchemy.orm import relationship
from app.db.base_class import Base, utcnow


class UserRole(str, enum.Enum):
    LEARNER = "learner"
    CREATOR = "creator"
    ADMIN = "admin"


class OtpPurpose(str, enum.Enum):
    SIGNUP = "signup"
    RESET = "reset"


class User(Base):
    """用户模型

    本地账号（邮箱 + 密码）与外部身份提供方账号（auth_sub）共用一张表。

    Attributes:
        id: 自增ID
        name: 显示名称
        username: 唯一用户名，外部账号从令牌声明中获取
        email: 唯一邮箱，外部账号可能为空
        password_hash: bcrypt 哈希，外部账号为空
        auth_sub: 外部身份提供方的 subject
        role: learner / creator / admin 之一
        is_verified: 邮箱是否已验证
        otp_code / otp_purpose / otp_expires_at: 当前有效的一次性验证码
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    username = Column(String(100), unique=True, nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=True)
    password_hash = Column(String(255), nullable=True)
    auth_sub = Column(String(255), unique=True, index=True, nullable=True)
    role = Column(Enum(UserRole, values_callable=lambda e: [m.value for m in e]),
                  nullable=False, default=UserRole.LEARNER)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    otp_code = Column(String(6), nullable=True)
    otp_purpose = Column(Enum(OtpPurpose, values_callable=lambda e: [m.value for m in e]), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    preferences = relationship("UserCategoryPreference", back_populates="user",
                               cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def clear_otp(self) -> None:
        self.otp_code = None
        self.otp_purpose = None
        self.otp_expires_at = None
