from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from app.config.dependency_injection import get_current_user, get_db, require_admin
from app.core.exceptions import ConflictError
from app.crud.crud_category import category as crud_category, slugify
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryOut, PreferencesOut, PreferencesUpdate
from app.schemas.response import StandardResponse
from app.services.preference_service import preference_service

router = APIRouter()


@router.get("", response_model=StandardResponse[List[CategoryOut]])
def list_categories(db: Session = Depends(get_db)):
    categories = crud_category.list_by_name(db)
    return StandardResponse(data=[CategoryOut.model_validate(c) for c in categories])


@router.post("", response_model=StandardResponse[CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
        payload: CategoryCreate,
        admin: User = Depends(require_admin),
        db: Session = Depends(get_db)
):
    name = payload.name.strip()
    if crud_category.get_by_name(db, name=name) or crud_category.get_by_slug(db, slug=slugify(name)):
        raise ConflictError("Category already exists")
    try:
        created = crud_category.create(db, obj_in=payload)
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Category already exists") from e
    return StandardResponse(code=status.HTTP_201_CREATED, data=CategoryOut.model_validate(created))


@router.get("/prefs", response_model=StandardResponse[PreferencesOut])
def get_preferences(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    ids = preference_service.get_category_ids(db, current_user)
    return StandardResponse(data=PreferencesOut(category_ids=ids))


@router.post("/prefs", response_model=StandardResponse[PreferencesOut])
def replace_preferences(
        payload: PreferencesUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    整体替换分类偏好；存在未知分类时返回404且原偏好不变
    """
    ids = preference_service.replace(db, current_user, payload.category_ids)
    return StandardResponse(message="Preferences updated", data=PreferencesOut(category_ids=ids))
