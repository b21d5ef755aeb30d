# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Audit trail of state-changing marketplace actions
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Acting user; kept as NULL once the account is removed
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action = Column(String(50), index=True)      # e.g. ORDER_CREATE, PAYMENT_APPROVE
    resource = Column(String(50), index=True)    # e.g. orders, payments
    resource_id = Column(Integer, nullable=True, index=True)
    status = Column(String(20), index=True)      # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    meta = Column(JSON, nullable=True)

    user = relationship("User", uselist=False)
