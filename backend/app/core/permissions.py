from app.core.exceptions import PermissionDeniedError
from app.models.user import User, UserRole


def ensure_owner(owner_id: int, actor: User, message: str = "Not your resource") -> None:
    """只有记录所有者或管理员可以修改"""
    if owner_id != actor.id and not actor.is_admin:
        raise PermissionDeniedError(message)


def ensure_creator(actor: User) -> None:
    if actor.role not in (UserRole.CREATOR, UserRole.ADMIN):
        raise PermissionDeniedError("Creator role required")


def ensure_admin(actor: User) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("Admin only")
