from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """
    应用程序配置设置类，从环境变量或.env文件加载所有配置项。
    使用Pydantic进行数据验证和类型检查。

    包含服务器配置、令牌签发、外部身份提供方、对象存储、邮件和Celery等配置项。
    在应用启动时会自动验证必需的配置项（JWT_SECRET）是否存在。
    """
    # Server
    BACKEND_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Model configuration tells Pydantic where to find the .env file.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    PROJECT_NAME: str = "EduTok API"
    API_V1_STR: str = "/api/v1"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    DATABASE_URL: str = "sqlite:///./edutok.db"

    # Local session tokens
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    # One-time codes
    SIGNUP_OTP_TTL_MINUTES: int = 5
    RESET_OTP_TTL_MINUTES: int = 10

    # External identity provider (Cognito user pool)
    AWS_REGION: str = "us-east-1"
    COGNITO_USER_POOL_ID: Optional[str] = None
    COGNITO_CLIENT_ID: Optional[str] = None
    COGNITO_ISSUER: Optional[str] = None

    # Object storage
    S3_BUCKET: str = "edutok-uploads"
    UPLOAD_MAX_BYTES: int = 150 * 1024 * 1024
    UPLOAD_URL_EXPIRES_SECONDS: int = 60
    STREAM_URL_EXPIRES_SECONDS: int = 900

    # Mail
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    EMAIL_FROM: str = "EduTok <no-reply@edutok.app>"

    # Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    @property
    def external_auth_enabled(self) -> bool:
        return bool(self.COGNITO_USER_POOL_ID and self.COGNITO_CLIENT_ID)

    @property
    def cognito_issuer(self) -> Optional[str]:
        if self.COGNITO_ISSUER:
            return self.COGNITO_ISSUER.rstrip("/")
        if self.COGNITO_USER_POOL_ID:
            return f"https://cognito-idp.{self.AWS_REGION}.amazonaws.com/{self.COGNITO_USER_POOL_ID}"
        return None


# Create a single, globally accessible instance of the settings.
# This will raise a validation error on startup if required settings are missing.
settings = Settings()
