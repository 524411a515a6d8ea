# backend/models/log.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from database import Base

# Audit trail entry: who did what to which resource, and whether it succeeded
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime, default=datetime.now, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), index=True)  # e.g. SALE_CREATE, DUCK_DELETE, LOGIN
    resource = Column(String(50), index=True)  # ducks, customers, sellers, sales, reports, auth
    status = Column(String(20), index=True)  # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    # Entity ids, error codes and other context
    meta = Column(JSON, nullable=True)

    user = relationship("User", uselist=False)
