from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.config.dependency_injection import get_current_user, get_upload_service
from app.models.user import User
from app.schemas.response import StandardResponse
from app.schemas.upload import PresignRequest, PresignResponse, SignedGetResponse
from app.services.upload_service import UploadService

router = APIRouter()


@router.post("/presign", response_model=StandardResponse[PresignResponse])
def presign_upload(
        payload: PresignRequest,
        current_user: User = Depends(get_current_user),
        upload_service: UploadService = Depends(get_upload_service)
):
    """
    签发直传对象存储的 POST 表单，文件本身不经过本服务
    """
    post = upload_service.presign(payload.file_name, payload.content_type, payload.kind)
    return StandardResponse(data=PresignResponse(**post))


@router.get("/sign-get", response_model=StandardResponse[SignedGetResponse])
def sign_get(
        key: str = Query(..., min_length=1),
        expires: Optional[int] = None,
        current_user: User = Depends(get_current_user),
        upload_service: UploadService = Depends(get_upload_service)
):
    signed = upload_service.sign_get(key, expires)
    return StandardResponse(data=SignedGetResponse(**signed))
