# backend/models/sale.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# A completed transaction. Prices are totals over all items:
# final_price = original_price - discount_amount, never negative.
class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint("final_price >= 0", name="ck_sales_final_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("sellers.id"), nullable=False, index=True)

    original_price = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    final_price = Column(Numeric(10, 2), nullable=False)
    sale_date = Column(DateTime, nullable=False, index=True)

    customer = relationship("Customer", back_populates="sales")
    seller = relationship("Seller", back_populates="sales")
    items = relationship(
        "SaleItem", back_populates="sale", cascade="all, delete-orphan", order_by="SaleItem.position"
    )

    @property
    def duck_ids(self):
        return [item.duck_id for item in self.items]

    @property
    def ducks(self):
        return [item.duck for item in self.items]

# Association between a sale and each duck it sold, with the price at sale time
class SaleItem(Base):
    __tablename__ = "sale_items"
    __table_args__ = (
        UniqueConstraint("duck_id", name="uq_sale_items_duck"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    duck_id = Column(Integer, ForeignKey("ducks.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0) # Order of the duck in the request
    unit_price = Column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")
    duck = relationship("Duck", back_populates="sale_items")

    @property
    def duck_name(self):
        return self.duck.name if self.duck else None
