import logging
import re
import secrets
import time
from datetime import datetime, UTC
from typing import Any, Dict, Optional

from app.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)

# kind -> Content-Type 必须满足的主类型，None 表示任意 type/subtype
KIND_MEDIA_PREFIX = {
    "video": "video/",
    "image": "image/",
    "other": None,
}

_UNSAFE_CHARS = re.compile(r"[^\w.\-]")


def sanitize_filename(file_name: str) -> str:
    return _UNSAFE_CHARS.sub("_", file_name)


class UploadService:
    """
    直传对象存储的预签名凭证。

    传输和存储完全由对象存储负责，这里只负责校验参数并签发短时效、限定范围的凭证。
    """

    def __init__(
        self,
        s3_client: Any,
        *,
        bucket: str,
        max_bytes: int = 150 * 1024 * 1024,
        upload_expires: int = 60,
        stream_expires: int = 900,
    ):
        self.s3 = s3_client
        self.bucket = bucket
        self.max_bytes = max_bytes
        self.upload_expires = upload_expires
        self.stream_expires = stream_expires

    def build_key(self, kind: str, file_name: str, now: Optional[datetime] = None) -> str:
        """kind/YYYY/MM/DD/<毫秒时间戳>_<随机串>_<清洗后的文件名>"""
        now = now or datetime.now(UTC)
        suffix = f"{int(time.time() * 1000)}_{secrets.token_hex(5)}"
        return f"{kind}/{now:%Y}/{now:%m}/{now:%d}/{suffix}_{sanitize_filename(file_name)}"

    def presign(self, file_name: str, content_type: str, kind: str) -> Dict[str, Any]:
        """
        生成预签名 POST 表单。

        Raises:
            BadRequestError: kind 未知，或 Content-Type 与 kind 要求的媒体类型不符
        """
        if kind not in KIND_MEDIA_PREFIX:
            raise BadRequestError(f"Unknown upload kind: {kind}")
        content_type = content_type.strip().lower()
        major, _, minor = content_type.partition("/")
        if not major or not minor:
            raise BadRequestError("Invalid contentType")
        prefix = KIND_MEDIA_PREFIX[kind]
        if prefix is not None and not content_type.startswith(prefix):
            raise BadRequestError(f"contentType must start with {prefix} for kind {kind}")

        key = self.build_key(kind, file_name)
        post = self.s3.generate_presigned_post(
            Bucket=self.bucket,
            Key=key,
            Fields={"Content-Type": content_type},
            Conditions=[
                ["content-length-range", 0, self.max_bytes],
                ["starts-with", "$Content-Type", f"{major}/"],
            ],
            ExpiresIn=self.upload_expires,
        )
        logger.info(f"Issued upload credential for {key}")
        return {"url": post["url"], "fields": post["fields"], "key": key}

    def sign_get(self, key: str, expires: Optional[int] = None, bucket: Optional[str] = None) -> Dict[str, Any]:
        """生成预签名 GET 地址，有效期限制在 60-3600 秒"""
        key = (key or "").strip()
        if not key:
            raise BadRequestError("Missing key")
        if ".." in key:
            raise BadRequestError("Invalid key")
        expires_in = min(max(expires if expires is not None else self.stream_expires, 60), 3600)
        bucket = bucket or self.bucket
        url = self.s3.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        return {"url": url, "key": key, "bucket": bucket, "expires_in": expires_in}
