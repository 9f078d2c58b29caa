from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


def check_money_places(v: Optional[Decimal], field: str = "Amount") -> Optional[Decimal]:
    """Ensure a money value has at most 2 decimal places"""
    if v is not None and v.as_tuple().exponent < -2:
        raise ValueError(f"{field} must have at most 2 decimal places")
    return v


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
