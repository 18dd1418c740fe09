"""
付款记录模型
"""
from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp


class Payment(Base):
    """付款记录表（只追加）"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    billing_cycle_id = Column(Integer, ForeignKey("billing_cycles.id", ondelete="CASCADE"), nullable=False, index=True, comment="账单ID")
    amount = Column(Numeric(10, 2), nullable=False, comment="付款金额")
    payment_date = Column(Timestamp, server_default=func.now(), nullable=False, comment="付款时间")
    payment_method = Column(String(50), comment="付款方式：cash、bank_transfer、upi、cheque等")
    notes = Column(Text, comment="备注")
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, comment="记录人ID")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    billing_cycle = relationship("BillingCycle", back_populates="payments")
    creator = relationship("User")
