"""
下属单位管理API
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.customer import Customer
from app.models.party import Party
from app.schemas.party import PartyCreate, PartyResponse

router = APIRouter(prefix="/api/parties", tags=["Parties"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[PartyResponse])
def get_parties(customer_id: Optional[int] = None, db: Session = Depends(get_db)):
    """获取下属单位列表，可按客户筛选"""
    query = db.query(Party)
    if customer_id is not None:
        query = query.filter(Party.customer_id == customer_id)
    return query.order_by(Party.created_at, Party.id).all()


@router.post("", response_model=PartyResponse)
def create_party(party: PartyCreate, db: Session = Depends(get_db)):
    """创建下属单位"""
    customer = db.query(Customer).filter(Customer.id == party.customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    db_party = Party(name=party.name, customer_id=party.customer_id)
    db.add(db_party)
    db.commit()
    db.refresh(db_party)
    return db_party


@router.delete("/{party_id}")
def delete_party(party_id: int, db: Session = Depends(get_db)):
    """删除下属单位（相关订单保留，单位置空）"""
    party = db.query(Party).filter(Party.id == party_id).first()
    if not party:
        raise HTTPException(status_code=404, detail="Party not found")

    db.delete(party)
    db.commit()
    return {"success": True, "message": "Party deleted"}
