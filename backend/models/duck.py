# backend/models/duck.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Lifecycle states of a duck; SOLD is set by the sale engine only
class DuckStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"
    RESERVED = "RESERVED"

# A sellable inventory unit with optional lineage (mother duck)
class Duck(Base):
    __tablename__ = "ducks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    # Founding stock has no mother
    mother_id = Column(Integer, ForeignKey("ducks.id"), nullable=True, index=True)

    price = Column(Numeric(10, 2), CheckConstraint("price > 0"), nullable=False)
    status = Column(Enum(DuckStatus), nullable=False, default=DuckStatus.AVAILABLE, index=True)
    registration_date = Column(DateTime, nullable=False)

    mother = relationship("Duck", remote_side=[id], uselist=False)
    sale_items = relationship("SaleItem", back_populates="duck")
