# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from database import Base

# Audit trail of cart, checkout and campaign actions
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, nullable=True, index=True)
    action = Column(String(50), index=True)     # e.g. CART_ADD, CHECKOUT, CAMPAIGN_CREATE
    resource = Column(String(50), index=True)   # cart / orders / campaigns
    status = Column(String(20), index=True)     # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    # Action context: product ids, totals, error codes
    meta = Column(JSON, nullable=True)
