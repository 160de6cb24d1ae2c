"""
API — 共用 Response Schemas。
匯率端點回傳純文字；僅健康檢查使用 JSON。
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """GET /health 回應。"""

    status: str
    service: str
