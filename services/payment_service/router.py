from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import CurrentUser, get_current_user

from .schemas import (
    PaymentTransactionResponse,
    PaymentTTSRequest,
    PaymentTTSResponse,
    ZaloPayCallback,
    ZaloPayCallbackResponse,
    ZaloPayOrderCreate,
    ZaloPayOrderResponse,
)
from .service import PaymentService
from .tts import GoogleTTSClient, get_tts_client
from .zalopay import ZaloPayClient, get_zalopay_client

router = APIRouter(prefix="/payment", tags=["Payment"])


@router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "payment", "status": "running"}


@router.post(
    "/zalopay/create-order",
    response_model=ZaloPayOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_zalopay_order(
    payload: ZaloPayOrderCreate,
    db: AsyncSession = Depends(get_db),
    gateway: ZaloPayClient = Depends(get_zalopay_client),
    _: CurrentUser = Depends(get_current_user),
):
    return await PaymentService.create_zalopay_order(
        db, gateway, payload.order_id, payload.amount, payload.description
    )


# No auth: invoked by the ZaloPay gateway, authenticated by MAC
@router.post("/zalopay/callback", response_model=ZaloPayCallbackResponse)
async def zalopay_callback(
    payload: ZaloPayCallback,
    db: AsyncSession = Depends(get_db),
    gateway: ZaloPayClient = Depends(get_zalopay_client),
):
    if not payload.data or not payload.mac:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"return_code": -1, "return_message": "Missing data or mac"},
        )

    if await PaymentService.handle_zalopay_callback(db, gateway, payload.data, payload.mac):
        return ZaloPayCallbackResponse(return_code=1, return_message="OK")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"return_code": -1, "return_message": "Invalid callback"},
    )


@router.get("/transaction/{order_id}", response_model=PaymentTransactionResponse)
async def get_transaction(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(get_current_user),
):
    return await PaymentService.get_transaction_by_order_id(db, order_id)


@router.post("/tts/payment-success", response_model=PaymentTTSResponse)
async def payment_success_tts(
    payload: PaymentTTSRequest,
    tts: GoogleTTSClient = Depends(get_tts_client),
    _: CurrentUser = Depends(get_current_user),
):
    return await PaymentService.generate_payment_success_tts(tts, payload.amount)
