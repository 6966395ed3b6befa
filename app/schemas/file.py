from pydantic import BaseModel


class UploadResponse(BaseModel):
    ok: bool = True
    bucket: str
    object_key: str
    original_name: str
    content_type: str | None = None
    size: int


class BucketResponse(BaseModel):
    ok: bool = True
    bucket: str
