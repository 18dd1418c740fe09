"""
操作日志API（管理员）
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Optional
from datetime import datetime, date, timedelta
from app.core.clock import utcnow
from app.core.security import require_admin
from app.db.database import get_db
from app.models.operation_log import OperationLog
from app.schemas.common import format_datetime_local
from pydantic import BaseModel, ConfigDict, field_serializer

router = APIRouter(prefix="/api/operation-logs", tags=["Operation logs"], dependencies=[Depends(require_admin)])


class OperationLogResponse(BaseModel):
    """操作日志响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    username: str
    action: str
    module: str
    method: str
    path: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_data: Optional[str] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    execution_time: Optional[int] = None
    created_at: datetime

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


@router.get("", response_model=List[OperationLogResponse])
def get_operation_logs(
    skip: int = Query(0, ge=0, description="跳过记录数"),
    limit: int = Query(50, ge=1, le=1000, description="返回记录数"),
    username: Optional[str] = Query(None, description="用户名筛选"),
    module: Optional[str] = Query(None, description="模块筛选"),
    start_date: Optional[date] = Query(None, description="开始日期"),
    end_date: Optional[date] = Query(None, description="结束日期"),
    db: Session = Depends(get_db)
):
    """获取操作日志列表"""
    query = db.query(OperationLog)

    if username:
        query = query.filter(OperationLog.username.like(f"%{username}%"))

    if module:
        query = query.filter(OperationLog.module == module)

    if start_date:
        query = query.filter(OperationLog.created_at >= datetime.combine(start_date, datetime.min.time()))

    if end_date:
        query = query.filter(OperationLog.created_at <= datetime.combine(end_date, datetime.max.time()))

    return query.order_by(desc(OperationLog.created_at), desc(OperationLog.id)).offset(skip).limit(limit).all()


@router.get("/{log_id}", response_model=OperationLogResponse)
def get_operation_log(log_id: int, db: Session = Depends(get_db)):
    """获取操作日志详情"""
    log = db.query(OperationLog).filter(OperationLog.id == log_id).first()
    if not log:
        raise HTTPException(status_code=404, detail="Operation log not found")
    return log


@router.delete("")
def clear_operation_logs(
    days: int = Query(30, ge=1, le=365, description="保留最近N天的日志"),
    db: Session = Depends(get_db)
):
    """清理操作日志（保留最近N天的日志）"""
    cutoff_date = utcnow() - timedelta(days=days)
    deleted_count = db.query(OperationLog).filter(OperationLog.created_at < cutoff_date).delete()
    db.commit()
    return {"success": True, "message": f"Deleted {deleted_count} operation logs"}
