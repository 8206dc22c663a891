# spotlight/schemas/promo.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from spotlight.schemas.common import CamelModel


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_DAYS = "free_days"


def _upper_code(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().upper()


class PromoCodeCreate(CamelModel):
    code: str = Field(..., min_length=3, max_length=50, json_schema_extra={"example": "LAUNCH20"})
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0, json_schema_extra={"example": 20})
    applicable_packages: Optional[List[str]] = None
    max_uses: Optional[int] = Field(None, ge=1)
    min_purchase_amount: Decimal = Field(Decimal("0"), ge=0)
    valid_from: datetime
    valid_to: datetime
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        return _upper_code(value)

    @model_validator(mode="after")
    def check_values(self):
        if self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("percentage discounts cannot exceed 100")
        return self


class PromoCodeUpdate(CamelModel):
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(None, gt=0)
    applicable_packages: Optional[List[str]] = None
    max_uses: Optional[int] = Field(None, ge=1)
    min_purchase_amount: Optional[Decimal] = Field(None, ge=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    is_active: Optional[bool] = None


class PromoCodeResponse(BaseModel):
    id: str
    code: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    applicable_packages: Optional[List[str]] = None
    max_uses: Optional[int] = None
    current_uses: int
    remaining_uses: Optional[int] = None
    min_purchase_amount: float
    valid_from: datetime
    valid_to: datetime
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class PromoValidateRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    package_code: Optional[str] = None
    total_amount: Optional[Decimal] = Field(
        None, ge=0, description="Amount in dollars the discount would apply to"
    )

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        return _upper_code(value)


class PromoValidateResponse(BaseModel):
    valid: bool
    code: str
    message: str
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    discount_cents: int = 0
    final_amount_cents: Optional[int] = None
