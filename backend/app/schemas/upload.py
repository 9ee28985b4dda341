from typing import Dict, Literal
from pydantic import BaseModel, ConfigDict, Field


class PresignRequest(BaseModel):
    """预签名上传请求"""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., min_length=1, max_length=255, alias="fileName")
    content_type: str = Field(..., min_length=1, max_length=255, alias="contentType")
    kind: Literal["video", "image", "other"]


class PresignResponse(BaseModel):
    url: str
    fields: Dict[str, str]
    key: str


class SignedGetResponse(BaseModel):
    url: str
    key: str
    bucket: str
    expires_in: int
