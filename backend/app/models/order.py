"""
订单模型
"""
from sqlalchemy import Column, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class Order(Base):
    """订单表（创建后不可修改）"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, comment="客户ID")
    party_id = Column(Integer, ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, comment="下属单位ID")
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, comment="服务ID")
    quantity = Column(Integer, nullable=False, comment="数量")
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, comment="创建人ID")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    customer = relationship("Customer", back_populates="orders")
    party = relationship("Party", back_populates="orders")
    service = relationship("Service")
    creator = relationship("User")

    __table_args__ = (
        Index("idx_orders_customer_created", "customer_id", "created_at"),
        Index("idx_orders_created_by", "created_by"),
    )
