# backend/models/seller.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from database import Base

class Seller(Base):
    __tablename__ = "sellers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    cpf = Column(String, unique=True, nullable=False, index=True)
    employee_id = Column(String, unique=True, nullable=False, index=True)
    registration_date = Column(DateTime, nullable=False)

    sales = relationship("Sale", back_populates="seller")
