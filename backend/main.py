"""
FX Brief — FastAPI 應用程式進入點。
負責建立 App、註冊路由、中介層與全域錯誤處理。
業務邏輯位於 application/（conversion_service、history_service）。
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from config.settings import init_settings
from domain import constants
from i18n import resolve_language, t
from logging_config import get_logger, request_id_var

# Load environment variables from .env file
load_dotenv()
init_settings()

from api.routes.rate_routes import router as rate_router  # noqa: E402
from api.schemas.common import HealthResponse  # noqa: E402

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "FX Brief 啟動中，上游 %s，樞紐貨幣 %s，快取目錄 %s",
        constants.FX_UPSTREAM_BASE_URL,
        constants.PIVOT_CURRENCY,
        constants.DISK_CACHE_DIR,
    )
    yield
    logger.info("FX Brief 關閉中...")


# ---------------------------------------------------------------------------
# App Factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="FX Brief API",
    description="FX Brief：汇率换算与历史汇率统计",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=constants.CORS_ALLOW_ORIGIN.split(","),
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", constants.REQUEST_ID_HEADER],
    expose_headers=[constants.REQUEST_ID_HEADER],
)


def _generic_error_response(request: Request) -> PlainTextResponse:
    """不外洩細節的通用 500 回應（依 lang 參數選擇語言）。"""
    lang = resolve_language(request.query_params.get("lang"))
    return PlainTextResponse(
        t(constants.GENERIC_ERROR_MESSAGE, lang=lang),
        status_code=500,
        headers={"Access-Control-Allow-Origin": constants.CORS_ALLOW_ORIGIN},
    )


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    為每個請求設定 request_id（沿用呼叫端提供者），並回寫至回應標頭。
    未預期錯誤在此攔截，使 traceback 與 500 回應都帶有同一個 request_id。
    """
    request_id = request.headers.get(constants.REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("未預期錯誤：%s %s", request.method, request.url.path)
        response = _generic_error_response(request)
    finally:
        request_id_var.reset(token)
    response.headers[constants.REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """中介層之外的未預期錯誤：記錄完整 traceback，回傳通用訊息。"""
    logger.exception("未預期錯誤：%s %s", request.method, request.url.path)
    return _generic_error_response(request)


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse, summary="Health check")
def health_check() -> dict:
    """Health check endpoint（Docker healthcheck 使用）。"""
    return {"status": "ok", "service": "fx-brief"}


# ---------------------------------------------------------------------------
# 註冊路由（catch-all 換算路由必須最後註冊）
# ---------------------------------------------------------------------------

app.include_router(rate_router)
