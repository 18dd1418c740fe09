"""
客户模型
"""
from sqlalchemy import Column, Integer, String, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class Customer(Base):
    """客户表"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, comment="姓名")
    phone_number = Column(String(20), nullable=False, comment="电话")
    address = Column(String(500), nullable=True, comment="地址")
    payment_due_date = Column(Integer, nullable=True, comment="每月付款日(1-31)")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    # 关系：删除客户时级联删除其下属数据
    service_prices = relationship("CustomerServicePrice", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)
    parties = relationship("Party", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)
    orders = relationship("Order", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)
    billing_cycles = relationship("BillingCycle", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_customers_name", "name"),
        Index("idx_customers_phone_number", "phone_number"),
    )
