# backend/schemas/duck.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from models.duck import DuckStatus
from schemas.common import Money, ORMBase


# Shared attributes for duck create/update requests
class DuckBase(ORMBase):
    name: str = Field(..., min_length=1, description="Duck name")
    mother_id: Optional[int] = Field(None, description="Mother duck id; empty for founding stock")
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Sale price")


class DuckCreate(DuckBase):
    pass


# Full replacement of editable fields; status is not editable
class DuckUpdate(DuckBase):
    pass


class DuckResponse(ORMBase):
    id: int
    name: str
    mother_id: Optional[int] = None
    price: Money
    status: DuckStatus
    registration_date: datetime
