# backend/schemas/seller.py
from datetime import datetime

from pydantic import Field

from schemas.common import ORMBase


class SellerCreate(ORMBase):
    name: str = Field(..., min_length=1)
    cpf: str = Field(..., min_length=1)
    employee_id: str = Field(..., min_length=1)


# Only the name is editable
class SellerUpdate(ORMBase):
    name: str = Field(..., min_length=1)


class SellerResponse(ORMBase):
    id: int
    name: str
    cpf: str
    employee_id: str
    registration_date: datetime
