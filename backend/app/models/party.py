"""
客户下属单位模型
"""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class Party(Base):
    """下属单位表（例如客户的分店）"""
    __tablename__ = "parties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, comment="名称")
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True, comment="客户ID")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    customer = relationship("Customer", back_populates="parties")
    orders = relationship("Order", back_populates="party", passive_deletes=True)
