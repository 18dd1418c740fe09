"""
月度账单模型
"""
from sqlalchemy import Column, Integer, Numeric, Boolean, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class BillingCycle(Base):
    """月度账单表，每个客户每月一条"""
    __tablename__ = "billing_cycles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, comment="客户ID")
    billing_month = Column(Integer, nullable=False, comment="账单月份(1-12)")
    billing_year = Column(Integer, nullable=False, comment="账单年份")
    total_amount = Column(Numeric(10, 2), nullable=False, default=0, comment="本期应收（本月订单+上期结转）")
    previous_carryover = Column(Numeric(10, 2), nullable=False, default=0, comment="上期结转")
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0, comment="累计已付")
    remaining_balance = Column(Numeric(10, 2), nullable=False, default=0, comment="剩余未付")
    is_closed = Column(Boolean, nullable=False, default=False, comment="是否已结清")
    version = Column(Integer, nullable=False, default=1, comment="乐观锁版本号")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    customer = relationship("Customer", back_populates="billing_cycles")
    payments = relationship("Payment", back_populates="billing_cycle", cascade="all, delete-orphan", passive_deletes=True)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("customer_id", "billing_month", "billing_year", name="uq_billing_cycle_period"),
        Index("idx_billing_cycles_period", "billing_year", "billing_month"),
    )
