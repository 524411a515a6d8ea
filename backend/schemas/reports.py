# schemas/reports.py
from datetime import datetime
from typing import List, Optional

from schemas.common import Money, ORMBase

# One seller's line in the ranking
class SellerRankingItem(ORMBase):
    position: int
    seller_id: int
    seller_name: str
    cpf: str
    employee_id: str
    total_sales: int
    total_revenue: Money
    average_ticket: Money

class SellerRankingResponse(ORMBase):
    items: List[SellerRankingItem]
    total_sellers: int
    total_sales: int
    total_revenue: Money
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
