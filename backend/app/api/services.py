"""
服务项目管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from app.core.security import get_current_user, require_admin
from app.db.database import get_db
from app.models.service import Service
from app.schemas.service import ServiceCreate, ServiceResponse

router = APIRouter(prefix="/api/services", tags=["Services"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[ServiceResponse])
def get_services(db: Session = Depends(get_db)):
    """获取服务列表"""
    return db.query(Service).order_by(Service.created_at, Service.id).all()


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    """获取服务详情"""
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("", response_model=ServiceResponse, dependencies=[Depends(require_admin)])
def create_service(service: ServiceCreate, db: Session = Depends(get_db)):
    """创建服务（管理员）"""
    db_service = Service(name=service.name, price=service.price)
    db.add(db_service)
    db.commit()
    db.refresh(db_service)
    return db_service
