# backend/schemas/sale.py
from datetime import datetime
from typing import List

from pydantic import Field

from schemas.common import Money, ORMBase


# Input schema for registering a sale
class SaleCreate(ORMBase):
    duck_ids: List[int] = Field(..., min_length=1, description="At least one duck must be selected for sale")
    customer_id: int
    seller_id: int


# Output schema for an individual sold duck
class SaleItemOut(ORMBase):
    duck_id: int
    duck_name: str
    unit_price: Money


# Output schema representing the full sale
class SaleResponse(ORMBase):
    id: int
    duck_ids: List[int]
    customer_id: int
    seller_id: int
    original_price: Money
    discount_amount: Money
    final_price: Money
    sale_date: datetime
    items: List[SaleItemOut] = []
