from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base_class import Base


class Category(Base):
    """内容分类，用于课程、视频和用户偏好"""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, nullable=False)


class UserCategoryPreference(Base):
    """用户分类偏好

    更新时整体替换（先删除全部再重建），权重统一为 1。
    """
    __tablename__ = "user_category_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_user_category"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    weight = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="preferences")
