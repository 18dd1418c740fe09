"""
操作日志中间件
记录所有写操作（GET请求不记录）
"""
import json
import logging
import time
from typing import Callable, Optional, Tuple
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.orm import Session
from app.core.security import find_session_user
from app.db.database import SessionLocal
from app.models.operation_log import OperationLog

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"
MASKED = "******"


def mask_sensitive(body: str) -> str:
    """屏蔽请求体中的密码字段"""
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        for key in list(data):
            if "password" in key.lower():
                data[key] = MASKED
        return json.dumps(data, ensure_ascii=False)
    return body


class OperationLogMiddleware(BaseHTTPMiddleware):
    """操作日志中间件"""

    # 不需要记录日志的路径
    EXCLUDED_PATHS = [
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ]

    LOGGED_METHODS = ("POST", "PUT", "PATCH", "DELETE")

    # 模块映射：根据路径判断操作模块
    MODULE_MAP = {
        "/api/auth": "Auth",
        "/api/customers": "Customers",
        "/api/services": "Services",
        "/api/parties": "Parties",
        "/api/orders": "Orders",
        "/api/billing": "Billing",
        "/api/invoices": "Invoices",
        "/api/statistics": "Statistics",
        "/api/users": "Users",
        "/api/operation-logs": "Operation logs",
    }

    ACTION_MAP = {
        "POST": "Create",
        "PUT": "Update",
        "PATCH": "Update",
        "DELETE": "Delete",
    }

    # 路径中的关键字对应更具体的操作
    SPECIFIC_ACTIONS = [
        ("/sign-up", "Sign up"),
        ("/sign-in", "Sign in"),
        ("/sign-out", "Sign out"),
        ("/generate", "Generate bills"),
        ("/payments", "Record payment"),
    ]

    def __init__(self, app, session_factory: Callable[[], Session] = SessionLocal):
        super().__init__(app)
        self.session_factory = session_factory

    def resolve_module(self, path: str) -> str:
        for path_prefix, module_name in self.MODULE_MAP.items():
            if path.startswith(path_prefix):
                return module_name
        return "Other"

    def resolve_action(self, method: str, path: str) -> str:
        if method == "POST":
            for keyword, action in self.SPECIFIC_ACTIONS:
                if keyword in path:
                    return action
        return self.ACTION_MAP.get(method, method)

    def resolve_user(self, db: Session, request: Request) -> Tuple[Optional[int], str]:
        """从 Bearer 令牌解析用户"""
        auth_header = request.headers.get("authorization", "")
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None, ANONYMOUS
        user = find_session_user(db, token.strip())
        if user is None:
            return None, ANONYMOUS
        return user.id, user.name

    async def dispatch(self, request: Request, call_next):
        """处理请求并记录日志"""
        method = request.method
        path = request.url.path
        if method not in self.LOGGED_METHODS or path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.time()

        # 令牌在请求处理前解析（登出会删除会话）
        db = self.session_factory()
        try:
            user_id, username = self.resolve_user(db, request)
        finally:
            db.close()

        request_data = None
        body = await request.body()
        if body:
            request_data = mask_sensitive(body.decode("utf-8", errors="replace"))[:2000]

        response = await call_next(request)

        execution_time = int((time.time() - start_time) * 1000)
        status_code = response.status_code
        error_message = f"HTTP {status_code}" if status_code >= 400 else None
        user_agent = request.headers.get("user-agent", "")

        db = self.session_factory()
        try:
            db.add(OperationLog(
                user_id=user_id,
                username=username,
                action=self.resolve_action(method, path),
                module=self.resolve_module(path),
                method=method,
                path=path,
                ip_address=request.client.host if request.client else None,
                user_agent=user_agent[:500] if user_agent else None,
                request_data=request_data,
                status_code=status_code,
                error_message=error_message,
                execution_time=execution_time,
            ))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to write operation log for %s %s", method, path)
        finally:
            db.close()

        return response
