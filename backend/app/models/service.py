"""
服务项目模型
"""
from sqlalchemy import Column, Integer, String, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class Service(Base):
    """服务项目表"""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True, comment="服务名称")
    price = Column(Numeric(10, 2), nullable=False, comment="基础单价")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    customer_prices = relationship("CustomerServicePrice", back_populates="service", cascade="all, delete-orphan", passive_deletes=True)
