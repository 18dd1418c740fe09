"""
FastAPI主应用入口
"""
import logging
import traceback
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.api import (
    auth, billing, customers, invoices, operation_logs, orders, parties, services, statistics, users,
)
from app.core.config import APP_DEBUG, APP_NAME, APP_VERSION, CORS_ORIGINS
from app.core.errors import AppError
from app.core.logging import setup_logging
from app.db.database import Base, SessionLocal, engine, get_db
from app.middleware.operation_log import OperationLogMiddleware
# 导入所有模型以确保表被创建
from app import models  # noqa: F401

logger = logging.getLogger(__name__)

ROUTERS = [
    auth.router,
    customers.router,
    services.router,
    parties.router,
    orders.router,
    billing.router,
    invoices.router,
    statistics.router,
    users.router,
    operation_logs.router,
]


def cors_error_headers(origin: Optional[str], allowed_origins: List[str] = CORS_ORIGINS) -> Dict[str, str]:
    """500响应的CORS头：只回显允许的单个来源"""
    headers = {
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }
    if "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


def create_app(
    bind: Optional[Engine] = None,
    session_factory: Optional[Callable[[], Session]] = None
) -> FastAPI:
    """创建应用；测试时可传入独立的数据库引擎和会话工厂"""
    setup_logging()
    bind = bind or engine
    session_factory = session_factory or SessionLocal

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 创建数据库表
        Base.metadata.create_all(bind=bind)
        logger.info("%s %s started", APP_NAME, APP_VERSION)
        yield

    app = FastAPI(
        title=APP_NAME,
        description="Billing, orders and invoices backend",
        version=APP_VERSION,
        debug=APP_DEBUG,
        lifespan=lifespan,
    )

    if session_factory is not SessionLocal:
        def override_get_db():
            db = session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db

    app.add_middleware(OperationLogMiddleware, session_factory=session_factory)

    # 配置CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """业务异常统一返回 {"detail": ...}"""
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    # 全局异常处理
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """全局异常处理器，确保所有错误都返回CORS头"""
        traceback_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error("Unhandled error on %s %s: %s\n%s", request.method, request.url.path, exc, traceback_str)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "traceback": traceback_str if app.debug else None
            },
            headers=cors_error_headers(request.headers.get("origin"))
        )

    @app.get("/")
    async def root():
        """根路径"""
        return {"message": APP_NAME, "version": APP_VERSION}

    @app.get("/health")
    async def health():
        """健康检查"""
        return {"status": "ok"}

    # 注册API路由
    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
