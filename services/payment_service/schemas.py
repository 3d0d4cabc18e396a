from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .tts import MAX_SPOKEN_AMOUNT


class ZaloPayOrderCreate(BaseModel):
    order_id: int
    amount: int = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=256)


class ZaloPayOrderResponse(BaseModel):
    order_url: str
    app_trans_id: str
    zp_trans_token: str


class ZaloPayCallback(BaseModel):
    # Optional so a malformed gateway call gets ZaloPay's own error shape
    data: Optional[str] = None
    mac: Optional[str] = None
    type: Optional[int] = None


class ZaloPayCallbackResponse(BaseModel):
    return_code: int
    return_message: str


class PaymentTransactionResponse(BaseModel):
    id: int
    order_id: int
    app_trans_id: str
    zp_trans_token: str
    amount: int
    description: str
    status: str
    zp_transaction_id: Optional[str] = None
    payment_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentTTSRequest(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0, lt=MAX_SPOKEN_AMOUNT)


class PaymentTTSResponse(BaseModel):
    audio_content: str
    message: str
