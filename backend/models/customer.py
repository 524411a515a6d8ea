# backend/models/customer.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from database import Base

# Buyer of ducks; discount_eligible grants the flat sale discount
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    cpf = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)
    address = Column(String, nullable=False)
    discount_eligible = Column(Boolean, nullable=False, default=False)
    registration_date = Column(DateTime, nullable=False)

    sales = relationship("Sale", back_populates="customer")
