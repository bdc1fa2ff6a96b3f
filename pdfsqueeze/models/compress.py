from typing import Any, Optional

from pydantic import BaseModel, Field

from .common import EngineName


class RemoteCompressionRequest(BaseModel):
    blob_url: str = Field(..., alias="blobUrl", description="رابط الملف المرفوع مسبقًا إلى التخزين الوسيط.")
    # أي قيمة غير معروفة (حتى غير النصية) تُعامل كمستوى medium
    level: Optional[Any] = Field(default="medium", description="مستوى الضغط (low | medium | high).")
    filename: Optional[str] = Field(default=None, description="اسم الملف الأصلي لاشتقاق اسم الناتج.")

    model_config = {"populate_by_name": True}


class HealthStatus(BaseModel):
    status: str = "ok"
    message: str
    engine: EngineName
    native_path: Optional[str] = None
