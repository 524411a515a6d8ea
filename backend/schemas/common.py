# backend/schemas/common.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer

# Money is exact in Python and a plain number in JSON
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Body returned for every handled error
class ErrorResponse(BaseModel):
    timestamp: datetime
    status: int
    error: str
    message: str
    error_code: str
    path: str
    details: Optional[Dict[str, Any]] = None
