"""
应用层异常定义

服务层只抛出这里定义的异常，由 app.main 中注册的异常处理器统一转换为
标准响应格式 {"code", "message", "data": null}。
"""
from typing import Optional


class AppError(Exception):
    """所有业务异常的基类"""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    """请求参数合法但业务上不允许（如自我关注、验证码错误）"""
    status_code = 400
    default_message = "Bad request"


class AuthenticationError(AppError):
    """缺少令牌、令牌无效或已过期"""
    status_code = 401
    default_message = "Not authenticated"


class PermissionDeniedError(AppError):
    """身份有效但不是资源所有者或角色不足"""
    status_code = 403
    default_message = "Permission denied"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    """唯一性冲突：重复关注、重复作答、重复邮箱等"""
    status_code = 409
    default_message = "Conflict"
