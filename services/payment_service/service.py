import json
from datetime import datetime, timezone

import httpx
import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.lifecycle import PaymentStatus
from services.order_service.repository import OrderRepository
from shared.errors import BadRequestException, ErrorCode, NotFoundException
from shared.observability import ecomm_payment_callbacks_total, ecomm_payment_gateway_requests_total

from .models import PaymentTransaction
from .repository import PaymentRepository
from .schemas import PaymentTTSResponse, ZaloPayOrderResponse
from .tts import GoogleTTSClient, payment_success_message
from .zalopay import ZaloPayClient, ZaloPayError, make_app_trans_id

logger = structlog.get_logger(__name__)


class PaymentService:
    @staticmethod
    async def create_zalopay_order(
        db: AsyncSession,
        gateway: ZaloPayClient,
        order_id: int,
        amount: int,
        description: str,
    ) -> ZaloPayOrderResponse:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFoundException("Order not found")
        if order.payment_status == PaymentStatus.PAID.value:
            raise BadRequestException("Order has already been paid", ErrorCode.PAYMENT_GATEWAY_ERROR)

        # One gateway order per order and day: hand back today's pending one
        app_trans_id = make_app_trans_id(order.id)
        existing = await PaymentRepository.get_by_app_trans_id(db, app_trans_id)
        if existing:
            if existing.status != "pending":
                raise BadRequestException(
                    "Payment order already processed", ErrorCode.PAYMENT_GATEWAY_ERROR
                )
            logger.info("zalopay_order_reused", order_id=order_id, app_trans_id=app_trans_id)
            return ZaloPayOrderResponse(
                order_url=existing.order_url,
                app_trans_id=existing.app_trans_id,
                zp_trans_token=existing.zp_trans_token,
            )

        try:
            result = await gateway.create_order(app_trans_id, amount, description)
        except ZaloPayError as e:
            ecomm_payment_gateway_requests_total.labels(status="failed").inc()
            logger.error("zalopay_create_order_failed", order_id=order_id, error=str(e))
            raise BadRequestException(str(e) or "Failed to create payment order", ErrorCode.PAYMENT_GATEWAY_ERROR)

        ecomm_payment_gateway_requests_total.labels(status="success").inc()
        try:
            await PaymentRepository.create_transaction(
                db,
                PaymentTransaction(
                    order_id=order.id,
                    app_trans_id=app_trans_id,
                    zp_trans_token=result.zp_trans_token,
                    order_url=result.order_url,
                    amount=amount,
                    description=description,
                    status="pending",
                ),
            )
        except IntegrityError:
            # A concurrent request stored the same app_trans_id first
            await db.rollback()
            logger.warning("zalopay_transaction_conflict", order_id=order_id, app_trans_id=app_trans_id)
            raise BadRequestException("Failed to create payment order", ErrorCode.PAYMENT_GATEWAY_ERROR)
        return ZaloPayOrderResponse(
            order_url=result.order_url,
            app_trans_id=result.app_trans_id,
            zp_trans_token=result.zp_trans_token,
        )

    @staticmethod
    async def handle_zalopay_callback(db: AsyncSession, gateway: ZaloPayClient, data: str, mac: str) -> bool:
        """Returns False, changing nothing, when the MAC or payload is invalid."""
        logger.info("zalopay_callback_received")
        if not gateway.verify_callback(data, mac):
            ecomm_payment_callbacks_total.labels(result="invalid_mac").inc()
            logger.warning("zalopay_callback_invalid_mac")
            return False

        try:
            payload = json.loads(data)
            app_trans_id = payload["app_trans_id"]
            paid_at = datetime.fromtimestamp(int(payload["server_time"]) / 1000, tz=timezone.utc)
        except (ValueError, KeyError, TypeError) as e:
            ecomm_payment_callbacks_total.labels(result="invalid_payload").inc()
            logger.warning("zalopay_callback_invalid_payload", error=str(e))
            return False

        transaction = await PaymentRepository.get_by_app_trans_id(db, app_trans_id)
        if not transaction:
            ecomm_payment_callbacks_total.labels(result="unknown_transaction").inc()
            logger.warning("zalopay_callback_unknown_transaction", app_trans_id=app_trans_id)
            return True

        transaction.status = "success"
        transaction.zp_transaction_id = str(payload.get("zp_trans_id", ""))
        transaction.payment_time = paid_at

        order = await OrderRepository.get_order(db, transaction.order_id)
        if order:
            order.payment_status = PaymentStatus.PAID.value
            order.paid_at = paid_at
        await db.commit()

        ecomm_payment_callbacks_total.labels(result="paid").inc()
        logger.info("zalopay_payment_confirmed", app_trans_id=app_trans_id, order_id=transaction.order_id)
        return True

    @staticmethod
    async def get_transaction_by_order_id(db: AsyncSession, order_id: int) -> PaymentTransaction:
        transaction = await PaymentRepository.get_latest_for_order(db, order_id)
        if not transaction:
            raise NotFoundException("Transaction not found")
        return transaction

    @staticmethod
    async def generate_payment_success_tts(tts: GoogleTTSClient, amount: float) -> PaymentTTSResponse:
        if not amount:
            raise BadRequestException("Amount is required")
        if not tts.api_key:
            raise BadRequestException("Google API key not configured")

        message = payment_success_message(int(amount))
        try:
            audio_content = await tts.synthesize(message)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error("tts_failed", error=str(e))
            raise BadRequestException("Failed to generate TTS")
        return PaymentTTSResponse(audio_content=audio_content, message=message)
