import re
from typing import List, Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.category import Category
from app.schemas.category import CategoryCreate


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower().replace("&", "and")).strip("-")
    return slug or "category"


class CRUDCategory(CRUDBase[Category, CategoryCreate, CategoryCreate]):
    def list_by_name(self, db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.name.asc()).all()

    def get_by_name(self, db: Session, *, name: str) -> Optional[Category]:
        return db.query(Category).filter(Category.name == name).first()

    def get_by_slug(self, db: Session, *, slug: str) -> Optional[Category]:
        return db.query(Category).filter(Category.slug == slug).first()

    def create(self, db: Session, *, obj_in: CategoryCreate, commit: bool = True, **extra) -> Category:
        """名称去除首尾空白，slug 由名称派生"""
        name = obj_in.name.strip()
        return super().create(db, obj_in=CategoryCreate(name=name), commit=commit, slug=slugify(name), **extra)


category = CRUDCategory(Category)
