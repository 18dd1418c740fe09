"""
客户专属价格模型
"""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class CustomerServicePrice(Base):
    """客户专属价格表（覆盖服务的基础单价）"""
    __tablename__ = "customer_service_prices"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True, comment="客户ID")
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True, comment="服务ID")
    custom_price = Column(Numeric(10, 2), nullable=False, comment="专属单价")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    customer = relationship("Customer", back_populates="service_prices")
    service = relationship("Service", back_populates="customer_prices")

    __table_args__ = (
        UniqueConstraint("customer_id", "service_id", name="uq_customer_service_price"),
    )
