from typing import List
from pydantic import BaseModel, ConfigDict, Field


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class PreferencesUpdate(BaseModel):
    """整体替换当前用户的分类偏好"""
    model_config = ConfigDict(populate_by_name=True)

    category_ids: List[int] = Field(default_factory=list, alias="categoryIds")


class PreferencesOut(BaseModel):
    category_ids: List[int]
