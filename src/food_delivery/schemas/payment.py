from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from food_delivery.schemas.common import CoreOutput


class PaymentRead(BaseModel):
    id: int
    transaction_id: str
    user_id: int
    restaurant_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class CreatePaymentInput(BaseModel):
    transaction_id: str = Field(..., min_length=1)
    restaurant_id: int


class CreatePaymentOutput(CoreOutput):
    pass


class GetPaymentsOutput(CoreOutput):
    payments: Optional[List[PaymentRead]] = None
