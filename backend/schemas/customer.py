# backend/schemas/customer.py
from datetime import datetime

from pydantic import Field

from schemas.common import ORMBase


class CustomerCreate(ORMBase):
    name: str = Field(..., min_length=1)
    cpf: str = Field(..., min_length=1, description="National tax id, unique")
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    discount_eligible: bool = False


# CPF cannot be changed after registration
class CustomerUpdate(ORMBase):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    discount_eligible: bool


class CustomerResponse(ORMBase):
    id: int
    name: str
    cpf: str
    phone: str
    address: str
    discount_eligible: bool
    registration_date: datetime
